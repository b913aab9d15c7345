from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Sequence, Tuple

import numpy as np

from .errors import InvalidConfig


def _freeze_array(array: Iterable[float], *, ndim: int | None = None) -> np.ndarray:
    """Return a read-only float64 copy of `array`, validating dimensions."""
    arr = np.array(array, dtype=np.float64, copy=True, order="C")
    if ndim is not None and arr.ndim != ndim:
        raise ValueError(f"array must be {ndim}D, got {arr.ndim}D")
    arr.setflags(write=False)
    return arr


# ----------------------------
# Capture configuration
# ----------------------------

@dataclass(frozen=True)
class CaptureConfig:
    """Parameters sent with every StartCapture request."""

    duration: float = 0.001

    def __post_init__(self) -> None:
        try:
            duration = float(self.duration)
        except (TypeError, ValueError) as exc:
            raise InvalidConfig(f"duration must be a number, got {self.duration!r}") from exc
        if not math.isfinite(duration) or duration <= 0:
            raise InvalidConfig(f"duration must be a positive number of seconds, got {duration!r}")
        object.__setattr__(self, "duration", duration)


class TriggerStatus(str, Enum):
    """Trigger state reported by the instrument."""

    IDLE = "Idle"
    ARMED = "Armed"
    TRIGGERED = "Triggered"
    STOPPED = "Stopped"
    OTHER = "Other"

    @classmethod
    def from_wire(cls, value: object) -> "TriggerStatus":
        text = str(value).strip()
        for member in cls:
            if member.value == text:
                return member
        return cls.OTHER


class ControllerPhase(str, Enum):
    IDLE = "Idle"
    CAPTURING = "Capturing"
    STOPPED = "Stopped"


# ----------------------------
# Captured data
# ----------------------------

@dataclass(frozen=True)
class Trace:
    """One labelled series sharing the capture's time axis."""

    label: str
    samples: np.ndarray

    def __post_init__(self) -> None:
        if not isinstance(self.label, str):
            raise TypeError("label must be a string")
        object.__setattr__(self, "samples", _freeze_array(self.samples, ndim=1))

    def __len__(self) -> int:
        return int(self.samples.shape[0])


@dataclass(frozen=True)
class TraceSet:
    """Result of one completed capture cycle."""

    times: np.ndarray
    traces: Tuple[Trace, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        times = _freeze_array(self.times, ndim=1)
        if times.size > 1 and np.any(np.diff(times) < 0):
            raise ValueError("times must be monotonically non-decreasing")
        traces = tuple(self.traces)
        for trace in traces:
            if not isinstance(trace, Trace):
                raise TypeError("traces must contain Trace instances")
            if len(trace) != times.shape[0]:
                raise ValueError(
                    f"trace {trace.label!r} has {len(trace)} samples, expected {times.shape[0]}"
                )
        object.__setattr__(self, "times", times)
        object.__setattr__(self, "traces", traces)

    @classmethod
    def from_sequences(
        cls,
        times: Sequence[float],
        traces: Iterable[Tuple[str, Sequence[float]]],
    ) -> "TraceSet":
        return cls(times=times, traces=tuple(Trace(label, data) for label, data in traces))

    @property
    def n_samples(self) -> int:
        return int(self.times.shape[0])

    @property
    def max_time(self) -> float:
        if self.times.size == 0:
            return 0.0
        return float(self.times.max())


# ----------------------------
# Rendering
# ----------------------------

@dataclass(frozen=True)
class Viewport:
    """Pixel rectangle the renderer draws into."""

    width: int
    height: int

    def __post_init__(self) -> None:
        width = int(self.width)
        height = int(self.height)
        if width <= 0 or height <= 0:
            raise ValueError(f"viewport must be positive, got {width}x{height}")
        object.__setattr__(self, "width", width)
        object.__setattr__(self, "height", height)


__all__ = [
    "CaptureConfig",
    "ControllerPhase",
    "Trace",
    "TraceSet",
    "TriggerStatus",
    "Viewport",
]
