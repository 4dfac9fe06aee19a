# common/logger/log_backends/__init__.py
"""
Log persistence backends.

Configure via LOG_BACKENDS environment variable (comma-separated).
"""

from .base import LogBackend
from .file_backend import FileBackend
from .registry import (
    get_active_backends,
    get_all_metrics,
    register_backend,
    shutdown_all_backends,
)

__all__ = [
    "LogBackend",
    "FileBackend",
    "get_active_backends",
    "get_all_metrics",
    "register_backend",
    "shutdown_all_backends",
]
