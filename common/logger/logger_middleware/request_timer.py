# common/logger/logger_middleware/request_timer.py
import time
from contextlib import contextmanager
from typing import Iterator


class RequestTimer:
    """
    Per-request accumulator of named durations (ms) and counters.

    One instance lives in ``request_timer_context_var`` for the duration of
    a request; the DB layer adds ``db``, ``sql`` and ``query_count`` to it.
    """

    def __init__(self) -> None:
        self.timings: dict[str, float] = {}

    @contextmanager
    def capture(self, name: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self.add(name, (time.perf_counter() - start) * 1000)

    def add(self, name: str, value: float) -> None:
        # Same name used several times in one request accumulates
        self.timings[name] = self.timings.get(name, 0) + value

    def format_server_timing(self) -> str:
        """Render durations as a Server-Timing header value: ``db;dur=10.50, app;dur=5.20``."""
        return ", ".join(
            f"{name};dur={dur:.2f}"
            for name, dur in self.timings.items()
            if name != "query_count"
        )


__all__ = ["RequestTimer"]
