"""Progress reporting for fan-out runs.

Reporters are observers only: the ``safe_*`` wrappers on the base class
swallow rendering errors so a broken terminal can never change a run's
result.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
)

logger = logging.getLogger(__name__)


class ProgressReporter(ABC):
    """Abstract base class for progress observers.

    Subclasses implement the rendering hooks; callers use the ``safe_*``
    methods, which keep an atomic ``completed`` count and isolate
    rendering failures.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.total = 0
        self.completed = 0

    @abstractmethod
    def start(self, total: int) -> None:
        """Begin rendering progress out of *total* units."""

    @abstractmethod
    def advance(self) -> None:
        """Render one more completed unit."""

    @abstractmethod
    def finish(self) -> None:
        """Render the final state and release any display resources."""

    def safe_start(self, total: int) -> None:
        with self._lock:
            self.total = total
            self.completed = 0
        self._guard(self.start, total)

    def safe_advance(self) -> None:
        with self._lock:
            self.completed += 1
        self._guard(self.advance)

    def safe_finish(self) -> None:
        self._guard(self.finish)

    def _guard(self, hook, *args) -> None:
        try:
            hook(*args)
        except Exception:
            logger.debug("Progress rendering failed", exc_info=True)


class NullProgress(ProgressReporter):
    """Reporter that renders nothing."""

    def start(self, total: int) -> None:
        pass

    def advance(self) -> None:
        pass

    def finish(self) -> None:
        pass


class RichProgress(ProgressReporter):
    """Progress bar rendered with ``rich`` on stderr."""

    def __init__(self, console: Console | None = None) -> None:
        super().__init__()
        self._console = console or Console(stderr=True)
        self._progress: Progress | None = None
        self._task_id = None

    def start(self, total: int) -> None:
        self._progress = Progress(
            TextColumn("Probing peers"),
            BarColumn(bar_width=40),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self._console,
        )
        self._task_id = self._progress.add_task("probe", total=total)
        self._progress.start()

    def advance(self) -> None:
        if self._progress is not None:
            self._progress.advance(self._task_id)

    def finish(self) -> None:
        if self._progress is None:
            return
        self._progress.update(self._task_id, completed=self.total)
        self._progress.stop()
        self._progress = None
