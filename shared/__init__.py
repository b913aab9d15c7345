"""
Shared data structures available to both the capture core and the GUI.
"""

from .errors import CaptureError, CaptureStartError, InvalidConfig, TraceFetchError, TriggerPollError
from .models import CaptureConfig, ControllerPhase, Trace, TraceSet, TriggerStatus, Viewport

__all__ = [
    "CaptureConfig",
    "CaptureError",
    "CaptureStartError",
    "ControllerPhase",
    "InvalidConfig",
    "Trace",
    "TraceFetchError",
    "TraceSet",
    "TriggerPollError",
    "TriggerStatus",
    "Viewport",
]
