# common/logger/persistence.py
"""
Non-blocking log persistence with pluggable backends.

Log calls only enqueue; a daemon worker thread drains the queue in batches
and hands each entry to every active backend (see ``log_backends``).
The worker starts on the first persisted entry, not at import time.
"""

import queue
import sys
import threading
import time
from typing import Any, Dict, Optional
from .log_backends import get_active_backends, shutdown_all_backends

_MAX_QUEUE_SIZE = 10_000
_MAX_BATCH_SIZE = 100


class LogPersistenceHandler:
    """
    Handles non-blocking log persistence to multiple backends.
    """

    def __init__(self, max_queue_size: int = _MAX_QUEUE_SIZE) -> None:
        self._queue: queue.Queue[Dict[str, Any]] = queue.Queue(maxsize=max_queue_size)
        self._shutdown_event = threading.Event()
        self._worker_thread: Optional[threading.Thread] = None
        self._start_lock = threading.Lock()

        # Metrics
        self._total_logs = 0
        self._failed_logs = 0
        self._total_write_time = 0.0

    def _ensure_worker(self) -> None:
        if self._worker_thread is not None and self._worker_thread.is_alive():
            return
        with self._start_lock:
            if self._worker_thread is not None and self._worker_thread.is_alive():
                return
            self._worker_thread = threading.Thread(
                target=self._process_queue,
                daemon=True,
                name="LogPersistenceWorker",
            )
            self._worker_thread.start()

    def _process_queue(self) -> None:
        while not self._shutdown_event.is_set():
            try:
                item = self._queue.get(timeout=0.5)
            except queue.Empty:
                continue

            batch = [item]
            while len(batch) < _MAX_BATCH_SIZE:
                try:
                    batch.append(self._queue.get_nowait())
                except queue.Empty:
                    break

            try:
                self._write_batch(batch)
            finally:
                for _ in batch:
                    self._queue.task_done()

    def _write_batch(self, batch: list[Dict[str, Any]]) -> None:
        start_time = time.perf_counter()

        try:
            for backend in get_active_backends():
                for entry in batch:
                    if not backend.write(entry):
                        self._failed_logs += 1
            self._total_logs += len(batch)
        except Exception as e:
            # Worker thread must outlive any backend failure
            print(f"Failed to write log batch: {e}", file=sys.stderr)
            self._failed_logs += len(batch)
        finally:
            self._total_write_time += time.perf_counter() - start_time

    def enqueue_log(self, log_entry: Dict[str, Any]) -> bool:
        """
        Add a log entry to the persistence queue (non-blocking).

        Returns:
            True if enqueued, False if the queue is full and the entry was dropped.
        """
        self._ensure_worker()
        try:
            self._queue.put_nowait(log_entry)
            return True
        except queue.Full:
            print("Log queue full, dropping log entry", file=sys.stderr)
            self._failed_logs += 1
            return False

    def get_metrics(self) -> Dict[str, Any]:
        avg_write_time = (
            self._total_write_time / self._total_logs if self._total_logs > 0 else 0
        )
        return {
            "total_logs": self._total_logs,
            "failed_logs": self._failed_logs,
            "queue_size": self._queue.qsize(),
            "avg_write_time_ms": avg_write_time * 1000,
            "worker_alive": (
                self._worker_thread.is_alive() if self._worker_thread else False
            ),
        }

    def shutdown(self, timeout: float = 5.0) -> None:
        """Drain what is queued, stop the worker, then close every backend."""
        if self._worker_thread and self._worker_thread.is_alive():
            deadline = time.monotonic() + timeout
            while self._queue.unfinished_tasks and time.monotonic() < deadline:
                time.sleep(0.05)
        self._shutdown_event.set()
        if self._worker_thread and self._worker_thread.is_alive():
            self._worker_thread.join(timeout=timeout)
        shutdown_all_backends(timeout)


_persistence_handler = LogPersistenceHandler()


def persist_log(log_entry: Dict[str, Any]) -> bool:
    """Persist a log entry to all active backends (non-blocking)."""
    return _persistence_handler.enqueue_log(log_entry)


def get_persistence_metrics() -> Dict[str, Any]:
    return _persistence_handler.get_metrics()


def shutdown_persistence(timeout: float = 5.0) -> None:
    _persistence_handler.shutdown(timeout)


__all__ = [
    "persist_log",
    "get_persistence_metrics",
    "shutdown_persistence",
    "LogPersistenceHandler",
]
