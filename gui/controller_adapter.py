"""Qt signal adapter for CaptureController events.

This adapter bridges the controller's callback-based notifications to Qt
signals, so widgets can connect with signal/slot semantics while the core
module stays free of PySide6.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from PySide6 import QtCore

if TYPE_CHECKING:
    from core.capture_controller import CaptureController


class CaptureControllerSignals(QtCore.QObject):
    """Qt signals for capture controller events."""
    dataReady = QtCore.Signal(object, object)  # times, traces
    triggerChanged = QtCore.Signal(str)
    phaseChanged = QtCore.Signal(str)
    errorRaised = QtCore.Signal(object)  # CaptureError


def connect_controller_signals(
    controller: "CaptureController",
) -> tuple[CaptureControllerSignals, Callable[[], None]]:
    """Create the Qt signal bridge for a controller.

    Args:
        controller: The controller to observe.

    Returns:
        A tuple of (signals object, unsubscribe function).
    """
    signals = CaptureControllerSignals()
    unsubscribers = [
        controller.add_data_callback(signals.dataReady.emit),
        controller.add_trigger_callback(lambda status: signals.triggerChanged.emit(status.value)),
        controller.add_phase_callback(lambda phase: signals.phaseChanged.emit(phase.value)),
        controller.add_error_callback(signals.errorRaised.emit),
    ]

    def unsubscribe() -> None:
        for unsub in unsubscribers:
            unsub()

    return signals, unsubscribe


__all__ = ["CaptureControllerSignals", "connect_controller_signals"]
