"""Tests for slc.limiter.ConcurrencyLimiter."""

import threading
import time

import pytest

from slc.limiter import DEFAULT_CAPACITY, ConcurrencyLimiter


class TestConstruction:
    def test_default_capacity(self) -> None:
        assert ConcurrencyLimiter().capacity == DEFAULT_CAPACITY == 20

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_rejects_non_positive_capacity(self, capacity: int) -> None:
        with pytest.raises(ValueError, match="at least 1"):
            ConcurrencyLimiter(capacity)


class TestSlot:
    """slot() acquires and always releases."""

    def test_counts_in_flight(self) -> None:
        limiter = ConcurrencyLimiter(2)
        with limiter.slot():
            assert limiter.in_flight == 1
            with limiter.slot():
                assert limiter.in_flight == 2
        assert limiter.in_flight == 0
        assert limiter.peak == 2

    def test_releases_on_exception(self) -> None:
        limiter = ConcurrencyLimiter(1)

        with pytest.raises(RuntimeError):
            with limiter.slot():
                raise RuntimeError("probe blew up")

        assert limiter.in_flight == 0
        # The single slot is free again: this would block forever otherwise.
        with limiter.slot():
            pass

    def test_release_without_acquire_raises(self) -> None:
        """BoundedSemaphore refuses to grow past its capacity."""
        limiter = ConcurrencyLimiter(1)
        with pytest.raises(ValueError):
            limiter.release()


class TestBlocking:
    """acquire() blocks only the calling thread when full."""

    def test_blocks_until_release(self) -> None:
        limiter = ConcurrencyLimiter(1)
        limiter.acquire()
        acquired = threading.Event()

        def waiter() -> None:
            with limiter.slot():
                acquired.set()

        t = threading.Thread(target=waiter)
        t.start()
        assert not acquired.wait(0.1)

        limiter.release()
        assert acquired.wait(2)
        t.join()

    def test_peak_never_exceeds_capacity(self) -> None:
        limiter = ConcurrencyLimiter(3)
        observed: list[int] = []
        lock = threading.Lock()

        def worker() -> None:
            with limiter.slot():
                with lock:
                    observed.append(limiter.in_flight)
                time.sleep(0.01)

        threads = [threading.Thread(target=worker) for _ in range(30)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert max(observed) <= 3
        assert limiter.peak <= 3
        assert limiter.in_flight == 0
