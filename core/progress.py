"""Progress reporting and cooperative cancellation for split/restore passes."""

import threading
from typing import Callable, Dict, Optional, Protocol, Tuple

from common.exceptions import OperationCancelledError


class ProgressReporter(Protocol):
    """Sink for byte-level progress events of one file pipeline."""

    def report(self, bytes_processed: int, bytes_total: int) -> None:
        ...


class NullProgressReporter:
    """Reporter that discards every event."""

    def report(self, bytes_processed: int, bytes_total: int) -> None:
        return None


class CallbackProgressReporter:
    """
    Adapt a plain ``callback(bytes_processed, bytes_total)`` to a reporter.
    """

    def __init__(self, callback: Callable[[int, int], None]):
        if not callable(callback):
            raise TypeError("callback must be callable")
        self._callback = callback

    def report(self, bytes_processed: int, bytes_total: int) -> None:
        self._callback(bytes_processed, bytes_total)


class ProgressSink:
    """
    Thread-safe progress collector shared by concurrent file pipelines.

    Each pipeline gets its own reporter from :meth:`bind`; the sink keeps the
    latest ``(processed, total)`` per job and forwards every event to an
    optional listener while holding a lock, so the listener never sees
    interleaved calls.
    """

    def __init__(self, listener: Optional[Callable[[str, int, int], None]] = None):
        self._listener = listener
        self._lock = threading.Lock()
        self._state: Dict[str, Tuple[int, int]] = {}

    def bind(self, job_name: str) -> "BoundProgressReporter":
        with self._lock:
            self._state.setdefault(job_name, (0, 0))
        return BoundProgressReporter(self, job_name)

    def _record(self, job_name: str, bytes_processed: int, bytes_total: int) -> None:
        with self._lock:
            self._state[job_name] = (bytes_processed, bytes_total)
            if self._listener is not None:
                self._listener(job_name, bytes_processed, bytes_total)

    def snapshot(self) -> Dict[str, Tuple[int, int]]:
        with self._lock:
            return dict(self._state)

    def totals(self) -> Tuple[int, int]:
        """Aggregate (processed, total) across every bound job."""
        with self._lock:
            processed = sum(p for p, _ in self._state.values())
            total = sum(t for _, t in self._state.values())
        return processed, total


class BoundProgressReporter:
    """Reporter bound to one job name of a :class:`ProgressSink`."""

    def __init__(self, sink: ProgressSink, job_name: str):
        self._sink = sink
        self.job_name = job_name

    def report(self, bytes_processed: int, bytes_total: int) -> None:
        self._sink._record(self.job_name, bytes_processed, bytes_total)


class CancellationToken:
    """
    Cooperative cancellation flag checked by the engine between chunks.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError("Operation cancelled")
