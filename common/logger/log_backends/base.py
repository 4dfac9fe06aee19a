# common/logger/log_backends/base.py
"""Base class for log persistence backends."""

from abc import ABC, abstractmethod
from typing import Any, Dict


class LogBackend(ABC):
    """
    A destination for persisted log entries.

    ``write`` is called from the persistence worker thread, never from a
    request handler, and must report failure by returning False rather
    than raising.
    """

    def __init__(self, **config: Any):
        self.config = config

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name for identification."""

    @abstractmethod
    def write(self, log_entry: Dict[str, Any]) -> bool:
        """
        Write one log entry.

        Args:
            log_entry: Dictionary with at least ``timestamp``, ``date``,
                ``level`` and ``message`` keys.

        Returns:
            True if write succeeded, False otherwise
        """

    @abstractmethod
    def get_metrics(self) -> Dict[str, Any]:
        """Backend-specific health counters."""

    def shutdown(self, timeout: float = 5.0) -> None:
        """Release resources. Most backends hold none."""


__all__ = ["LogBackend"]
