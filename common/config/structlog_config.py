# common/config/structlog_config.py
"""
Structlog configuration module.
Must be configured once at application startup via configure_structlog().
"""
import sys
import os
import threading
from typing import Any, Optional
import structlog
from rich.traceback import install as install_rich_traceback

# Install Rich tracebacks once
install_rich_traceback(show_locals=False, width=None, extra_lines=3)


class _StructlogState:
    """
    Process-aware record of whether structlog has been configured.

    uvicorn --reload spawns a fresh process, so "configured" is only true
    for the process id that did the configuring.
    """

    _instance: Optional["_StructlogState"] = None
    _lock = threading.Lock()

    _initialized: bool
    _log_level: Optional[int]
    _process_id: Optional[int]

    def __new__(cls) -> "_StructlogState":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._initialized = False
                    instance._log_level = None
                    instance._process_id = None
                    cls._instance = instance
        return cls._instance

    @property
    def is_configured(self) -> bool:
        return self._initialized and self._process_id == os.getpid()

    @property
    def log_level(self) -> Optional[int]:
        return self._log_level

    def mark_configured(self, log_level: int) -> None:
        with self._lock:
            self._log_level = log_level
            self._process_id = os.getpid()
            self._initialized = True

    def reset(self) -> None:
        """Reset state. FOR TESTING ONLY."""
        with self._lock:
            self._initialized = False
            self._log_level = None
            self._process_id = None


_state = _StructlogState()


def _build_renderer(json_logs: bool) -> Any:
    if json_logs:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.RichTracebackFormatter(
            show_locals=False,
            width=None,
            suppress=["starlette", "uvicorn", "fastapi", "sqlalchemy"],
        ),
    )


def configure_structlog(log_level: int, json_logs: bool = False) -> None:
    """
    Configure structlog with the specified log level.

    Idempotent for the same level within one process.

    Args:
        log_level: Numeric logging level (e.g., logging.INFO)
        json_logs: Render one JSON object per line instead of the console format

    Raises:
        RuntimeError: If already configured in the same process with different level
    """
    if _state.is_configured:
        if _state.log_level == log_level:
            return
        raise RuntimeError(
            f"structlog already configured in this process. "
            f"Current level: {_state.log_level}, attempted: {log_level}"
        )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,  # type: ignore[list-item]
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
            _build_renderer(json_logs),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    _state.mark_configured(log_level)


def get_logger(name: str = "app") -> structlog.BoundLogger:
    """
    Get a structlog logger instance.

    Raises:
        RuntimeError: If structlog hasn't been configured yet in this process
    """
    if not _state.is_configured:
        raise RuntimeError(
            "structlog not configured. "
            "Call configure_structlog() at application startup."
        )
    return structlog.get_logger(name)


def is_configured() -> bool:
    """Check if structlog has been configured in this process."""
    return _state.is_configured


__all__ = [
    "configure_structlog",
    "get_logger",
    "is_configured",
]
