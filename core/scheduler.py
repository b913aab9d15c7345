"""Timer contracts used by the capture core.

The core never talks to an event loop directly. A `Scheduler` is injected so
the same controller runs on the Qt event loop (`gui.qt_scheduler`) or on a
deterministic virtual clock in tests.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable


class TimerHandle(ABC):
    """Ownership of one scheduled callback. `cancel()` is safe to call repeatedly."""

    @abstractmethod
    def cancel(self) -> bool:
        """Stop the timer. Returns True only for the call that actually stopped it."""
        raise NotImplementedError

    @property
    @abstractmethod
    def active(self) -> bool:
        raise NotImplementedError


class Scheduler(ABC):
    """Single-threaded timer source."""

    @abstractmethod
    def call_every(self, interval_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Invoke `callback` every `interval_ms` until the handle is cancelled."""
        raise NotImplementedError

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Invoke `callback` once after `delay_ms`."""
        raise NotImplementedError

    @abstractmethod
    def now(self) -> float:
        """Monotonic time in seconds."""
        raise NotImplementedError


__all__ = ["Scheduler", "TimerHandle"]
