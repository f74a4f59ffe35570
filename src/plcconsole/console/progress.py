"""Progress meter for long-running device operations."""

from __future__ import annotations

import threading

from plcconsole.console.io import ConsoleIO
from plcconsole.device.models import COUNTED_PROGRESS_ACTIONS, ProgressEvent

IDLE = -1


class ProgressMeter:
    """Prints a dot every ``step`` percent of reported progress.

    Used as a progress callback. Backends may notify from their own thread,
    so the cursor is lock-guarded; the meter never touches session state.
    """

    def __init__(self, io: ConsoleIO, step: int = 5) -> None:
        self._io = io
        self._step = step
        self._cursor = IDLE
        self._lock = threading.Lock()

    @property
    def cursor(self) -> int:
        with self._lock:
            return self._cursor

    def __call__(self, event: ProgressEvent) -> None:
        if event.action not in COUNTED_PROGRESS_ACTIONS:
            return
        with self._lock:
            if event.index == self._cursor:
                return
            self._cursor = event.index
            tick = event.index % self._step == 0
        if tick:
            self._io.write(".")

    def reset(self) -> None:
        with self._lock:
            self._cursor = IDLE
