# common/logger/logger.py
"""
Application logger with explicit initialization and optional persistence.

Usage:
    from common.logger import get_app_logger

    logger = get_app_logger(__name__)
    logger.info("Appointment created", appointment_id=42)

    # Entries also written to the weekly log files
    logger = get_app_logger(__name__, persist=True)
"""

import time
from datetime import datetime
from typing import Any, Dict, Optional
import structlog

from common.config.structlog_config import get_logger as _get_structlog_logger
from common.logger.persistence import persist_log


class TimingStats:
    """Track timing statistics for logger performance."""

    def __init__(self) -> None:
        self.total_calls = 0
        self.total_time = 0.0
        self.max_time = 0.0
        self.min_time = float("inf")

    def record(self, elapsed: float) -> None:
        self.total_calls += 1
        self.total_time += elapsed
        self.max_time = max(self.max_time, elapsed)
        self.min_time = min(self.min_time, elapsed)

    def get_stats(self) -> Dict[str, Any]:
        avg = self.total_time / self.total_calls if self.total_calls > 0 else 0
        return {
            "total_calls": self.total_calls,
            "avg_time_ms": avg * 1000,
            "max_time_ms": self.max_time * 1000,
            "min_time_ms": self.min_time * 1000 if self.min_time != float("inf") else 0,
        }


class AppLogger:
    """
    Application logger wrapper with optional persistence and timing.

    Provides a type-safe interface to structlog with:
    - Non-blocking log persistence to weekly files
    - Per-call timing measurements
    - Lazy binding, so modules can create loggers at import time before
      initialize_config() has configured structlog
    """

    def __init__(
        self, name: str = "app", persist: bool = False, track_timing: bool = False
    ) -> None:
        self._name = name
        self._persist = persist
        self._track_timing = track_timing
        self._logger_instance: Optional[structlog.BoundLogger] = None
        self._timing_stats: Optional[TimingStats] = (
            TimingStats() if track_timing else None
        )

    @property
    def _logger(self) -> structlog.BoundLogger:
        if self._logger_instance is None:
            self._logger_instance = _get_structlog_logger(self._name)
        return self._logger_instance

    def _log_with_persistence(self, level: str, msg: str, **kwargs: Any) -> None:
        start_time = time.perf_counter() if self._track_timing else None

        try:
            log_method = getattr(self._logger, level)
            log_method(msg, **kwargs)

            if self._persist:
                now = datetime.now()
                log_entry: Dict[str, Any] = {
                    "timestamp": now.isoformat(),
                    "date": now.date().isoformat(),
                    "level": level.upper(),
                    "logger": self._name,
                    "message": msg,
                    **{k: v for k, v in kwargs.items() if k != "exc_info"},
                }
                persist_log(log_entry)

        finally:
            if start_time is not None and self._timing_stats is not None:
                self._timing_stats.record(time.perf_counter() - start_time)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._log_with_persistence("debug", msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        self._log_with_persistence("info", msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self._log_with_persistence("warning", msg, **kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        self._log_with_persistence("error", msg, **kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log at error level with the active exception's traceback."""
        self._log_with_persistence("error", msg, exc_info=True, **kwargs)

    def critical(self, msg: str, **kwargs: Any) -> None:
        self._log_with_persistence("critical", msg, **kwargs)

    def get_timing_stats(self) -> Dict[str, Any]:
        if self._timing_stats is None:
            return {"error": "Timing tracking not enabled"}
        return self._timing_stats.get_stats()


def get_app_logger(
    name: str = "app", persist: bool = False, track_timing: bool = False
) -> AppLogger:
    """
    Get application logger instance.

    Args:
        name: Logger name
        persist: Enable log persistence to weekly files
        track_timing: Enable performance timing tracking
    """
    return AppLogger(name=name, persist=persist, track_timing=track_timing)


# Convenience instance for simple usage (no persistence by default)
logger = get_app_logger()

__all__ = ["logger", "AppLogger", "get_app_logger"]
