"""Core capture logic: controller state machine, timer contracts and chart layout."""

from .capture_controller import CaptureController, DEFAULT_POLL_INTERVAL_MS
from .chart_layout import ChartScene, LinearScale, PALETTE, axis_ticks, layout_chart
from .scheduler import Scheduler, TimerHandle
from shared.models import CaptureConfig, ControllerPhase, Trace, TraceSet, TriggerStatus, Viewport

__all__ = [
    "CaptureConfig",
    "CaptureController",
    "ChartScene",
    "ControllerPhase",
    "DEFAULT_POLL_INTERVAL_MS",
    "LinearScale",
    "PALETTE",
    "Scheduler",
    "TimerHandle",
    "Trace",
    "TraceSet",
    "TriggerStatus",
    "Viewport",
    "axis_ticks",
    "layout_chart",
]
