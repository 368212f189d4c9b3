"""Concurrency limiter capping simultaneous in-flight probes."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

DEFAULT_CAPACITY = 20


class ConcurrencyLimiter:
    """Counting limiter built on ``threading.BoundedSemaphore``.

    ``acquire()`` blocks only the calling thread while *capacity* slots are
    taken.  ``in_flight`` and ``peak`` are tracked for diagnostics and tests.

    Args:
        capacity: Maximum number of slots held at the same time.

    Raises:
        ValueError: If *capacity* is less than 1.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._sem = threading.BoundedSemaphore(capacity)
        self._lock = threading.Lock()
        self._in_flight = 0
        self._peak = 0

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def peak(self) -> int:
        """Highest number of slots ever held at once."""
        with self._lock:
            return self._peak

    def acquire(self) -> None:
        self._sem.acquire()
        with self._lock:
            self._in_flight += 1
            self._peak = max(self._peak, self._in_flight)

    def release(self) -> None:
        with self._lock:
            self._in_flight -= 1
        self._sem.release()

    @contextmanager
    def slot(self) -> Iterator[None]:
        """Hold one slot for the duration of the ``with`` block."""
        self.acquire()
        try:
            yield
        finally:
            self.release()
