# common/api_error/ApiError.py
class AppError(Exception):
    """Base error for all application-specific issues."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "INTERNAL_ERROR",
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing required field, unparsable value or date outside the booking window."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """No row matches the requested id."""

    def __init__(self, message: str = "Appointment not found"):
        super().__init__(message, status_code=404, code="NOT_FOUND")


class DatabaseError(AppError):
    """Specific for DB issues. The caller only sees the generic message."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500, code="DATABASE_ERROR")


class StorageError(AppError):
    """Attachment could not be written to the upload directory."""

    def __init__(self, message: str = "Error saving prescription file"):
        super().__init__(message, status_code=500, code="STORAGE_ERROR")


class ConfigurationError(RuntimeError):
    """Raised when application configuration is missing or invalid at startup."""


__all__ = [
    "AppError",
    "ValidationError",
    "NotFoundError",
    "DatabaseError",
    "StorageError",
    "ConfigurationError",
]
