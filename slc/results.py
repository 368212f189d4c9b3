"""Thread-safe collection of successful measurements."""

import threading

from slc.models import Measured


class ResultSet:
    """Append-only list of ``Measured`` outcomes shared by probe workers.

    Every mutation happens under one lock, so concurrent appends never
    interleave.  Order is completion order until the caller ranks it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: list[Measured] = []

    def append(self, measured: Measured) -> None:
        with self._lock:
            self._items.append(measured)

    def snapshot(self) -> list[Measured]:
        """Return a copy of the current contents in append order."""
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self):
        return iter(self.snapshot())
