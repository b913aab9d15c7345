"""Contract between the capture core and an acquisition instrument.

Every operation is asynchronous: it returns immediately and completes exactly
once by invoking its callback with a `Reply`. Implementations may call back
synchronously, later from the event loop, or never (no timeout is defined).
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

ReplyCallback = Callable[["Reply"], None]


@dataclass(frozen=True)
class Reply:
    ok: bool
    value: Any = None
    diagnostic: str = ""

    @classmethod
    def success(cls, value: Any = None) -> "Reply":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, diagnostic: str) -> "Reply":
        return cls(ok=False, diagnostic=str(diagnostic))


class AcquisitionClient(ABC):
    """Remote one-shot capture instrument."""

    @abstractmethod
    def start_capture(self, duration_s: float, callback: ReplyCallback) -> None:
        """Arm a capture lasting `duration_s` seconds. Success carries no value."""
        raise NotImplementedError

    @abstractmethod
    def query_trigger(self, callback: ReplyCallback) -> None:
        """Success carries a `TriggerStatus`."""
        raise NotImplementedError

    @abstractmethod
    def fetch_traces(self, callback: ReplyCallback) -> None:
        """Success carries the most recent `TraceSet`."""
        raise NotImplementedError

    def close(self) -> None:
        """Release transport resources. Outstanding callbacks may be dropped."""


__all__ = ["AcquisitionClient", "Reply", "ReplyCallback"]
