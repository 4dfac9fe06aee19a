# common/__init__.py
from .context_vars import request_timer_context_var
from .api_error import (
    AppError,
    ConfigurationError,
    DatabaseError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from .config import DatabaseConfig, UploadConfig, get_config
from .logger import get_app_logger, logger

__all__ = [
    "request_timer_context_var",
    "AppError",
    "ConfigurationError",
    "DatabaseError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
    "DatabaseConfig",
    "UploadConfig",
    "get_config",
    "get_app_logger",
    "logger",
]
