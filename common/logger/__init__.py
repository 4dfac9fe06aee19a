# common/logger/__init__.py
from .logger import AppLogger, get_app_logger, logger
from .persistence import get_persistence_metrics, shutdown_persistence

__all__ = [
    "AppLogger",
    "get_app_logger",
    "logger",
    "get_persistence_metrics",
    "shutdown_persistence",
]
