"""QTimer-backed implementation of the core scheduler contract.

This keeps PySide6 out of the core module: the controller only sees
`Scheduler`/`TimerHandle`, and the GUI hands it a `QtScheduler`.
"""
from __future__ import annotations

import time
from typing import Callable, Optional

from PySide6 import QtCore

from core.scheduler import Scheduler, TimerHandle


class QtTimerHandle(TimerHandle):
    def __init__(self, timer: QtCore.QTimer) -> None:
        self._timer: Optional[QtCore.QTimer] = timer

    def cancel(self) -> bool:
        timer, self._timer = self._timer, None
        if timer is None:
            return False
        timer.stop()
        timer.deleteLater()
        return True

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()


class QtScheduler(Scheduler):
    """Schedules callbacks on the Qt event loop of the calling thread."""

    def __init__(self, parent: Optional[QtCore.QObject] = None) -> None:
        self._parent = parent

    def _timer(self, interval_ms: int, single_shot: bool, callback: Callable[[], None]) -> QtTimerHandle:
        timer = QtCore.QTimer(self._parent)
        timer.setTimerType(QtCore.Qt.TimerType.PreciseTimer)
        timer.setInterval(max(0, int(interval_ms)))
        timer.setSingleShot(single_shot)
        handle = QtTimerHandle(timer)
        if single_shot:
            def fire() -> None:
                handle.cancel()
                callback()

            timer.timeout.connect(fire)
        else:
            timer.timeout.connect(callback)
        timer.start()
        return handle

    def call_every(self, interval_ms: int, callback: Callable[[], None]) -> TimerHandle:
        return self._timer(interval_ms, False, callback)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        return self._timer(delay_ms, True, callback)

    def now(self) -> float:
        return time.monotonic()


__all__ = ["QtScheduler", "QtTimerHandle"]
