# common/logger/log_backends/file_backend.py
"""File-based log persistence backend writing one JSON object per line."""
import json
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, Optional
from common.config import get_env
from .base import LogBackend


def get_week_date_range(target_date: Optional[date] = None) -> tuple[date, date, int]:
    """
    Monday, Sunday and ISO week number of the week containing target_date.

    Example:
        >>> get_week_date_range(date(2024, 1, 10))  # Wednesday
        (date(2024, 1, 8), date(2024, 1, 14), 2)
    """
    _date = target_date or date.today()
    week_start = _date - timedelta(days=_date.weekday())
    return week_start, week_start + timedelta(days=6), _date.isocalendar()[1]


class FileBackend(LogBackend):
    """
    Appends log entries to weekly files named
    ``wkNN_<monday>--<sunday>.json`` inside the log directory.

    The directory comes from the ``log_dir`` option, then LOG_FOLDER_PATH,
    then ``./logs``.
    """

    def __init__(self, **config: Any):
        super().__init__(**config)

        log_dir = config.get("log_dir") or get_env("LOG_FOLDER_PATH") or "logs"
        self._log_dir = Path(log_dir)
        self._log_dir.mkdir(parents=True, exist_ok=True)

        self._total_writes = 0
        self._failed_writes = 0

    @property
    def name(self) -> str:
        return "file"

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def write(self, log_entry: Dict[str, Any]) -> bool:
        try:
            log_date = date.fromisoformat(
                log_entry.get("date") or date.today().isoformat()
            )
            file_path = self._log_dir / self.filename_for(log_date)
            payload = json.dumps(log_entry, ensure_ascii=False, default=str)

            with file_path.open(mode="a", encoding="utf-8") as f:
                f.write(payload)
                f.write("\n")

            self._total_writes += 1
            return True

        except (OSError, ValueError, TypeError) as e:
            print(f"FileBackend write failed: {e}", file=sys.stderr)
            self._failed_writes += 1
            return False

    @staticmethod
    def filename_for(log_date: date) -> str:
        week_start, week_end, week_number = get_week_date_range(log_date)
        return f"wk{week_number:02d}_{week_start.isoformat()}--{week_end.isoformat()}.json"

    def get_metrics(self) -> Dict[str, Any]:
        return {
            "backend": self.name,
            "total_writes": self._total_writes,
            "failed_writes": self._failed_writes,
            "log_directory": str(self._log_dir),
        }


__all__ = ["FileBackend", "get_week_date_range"]
