"""CaptureControlWidget - UI wrapper for the capture controller.

This widget provides the operator controls for one instrument:
- Duration: capture length in seconds sent with every start request
- Trigger status: last status reported by the instrument
- Run / Stop: toggles continuous (auto-rearming) capture
- Capture: starts a single capture cycle

The widget forwards user actions to a CaptureController and mirrors its
observable state through the controller's Qt signal adapter.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6 import QtCore, QtWidgets

from core.capture_controller import CaptureController
from shared.errors import InvalidConfig

from .controller_adapter import CaptureControllerSignals

logger = logging.getLogger(__name__)


class CaptureControlWidget(QtWidgets.QWidget):
    """
    Encapsulates the capture settings UI (Group Box).

    Responsibilities:
    - Create and layout the duration field, status label and buttons.
    - Push duration edits into CaptureController.configure().
    - Reflect trigger status and continuous mode.
    """

    durationRejected = QtCore.Signal(str)
    durationAccepted = QtCore.Signal(float)

    def __init__(
        self,
        controller: CaptureController,
        signals: CaptureControllerSignals,
        parent: Optional[QtWidgets.QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._signals = signals

        self._setup_ui()
        self._connect_signals()
        self.sync_from_controller()

    def _setup_ui(self) -> None:
        self.capture_group = QtWidgets.QGroupBox("Capture")
        layout = QtWidgets.QGridLayout(self.capture_group)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setVerticalSpacing(4)
        layout.setHorizontalSpacing(6)

        main_layout = QtWidgets.QVBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.addWidget(self.capture_group)

        layout.addWidget(QtWidgets.QLabel("Duration"), 0, 0)
        self.duration_edit = QtWidgets.QLineEdit()
        self.duration_edit.setMaximumWidth(140)
        self.duration_edit.setToolTip("Capture duration in seconds")
        layout.addWidget(self.duration_edit, 0, 1)
        layout.addWidget(QtWidgets.QLabel("s"), 0, 2)

        self.trigger_label = QtWidgets.QLabel()
        font = self.trigger_label.font()
        font.setBold(True)
        self.trigger_label.setFont(font)
        layout.addWidget(self.trigger_label, 1, 0, 1, 3)

        button_row = QtWidgets.QHBoxLayout()
        button_row.setSpacing(6)
        self.run_button = QtWidgets.QPushButton("Run")
        self.capture_button = QtWidgets.QPushButton("Capture")
        button_row.addWidget(self.run_button)
        button_row.addWidget(self.capture_button)
        button_row.addStretch(1)
        layout.addLayout(button_row, 2, 0, 1, 3)

    def _connect_signals(self) -> None:
        self.duration_edit.editingFinished.connect(self._on_duration_edited)
        self.run_button.clicked.connect(self._on_run_clicked)
        self.capture_button.clicked.connect(self._on_capture_clicked)
        self._signals.triggerChanged.connect(self.trigger_label.setText)

    def sync_from_controller(self) -> None:
        self.duration_edit.setText(f"{self._controller.config.duration:g}")
        self.trigger_label.setText(self._controller.trigger.value)
        self.run_button.setText("Stop" if self._controller.continuous else "Run")

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    def _on_duration_edited(self) -> None:
        text = self.duration_edit.text()
        try:
            config = self._controller.configure(text)
        except InvalidConfig as exc:
            logger.warning("Rejected capture duration %r: %s", text, exc)
            self.duration_edit.setText(f"{self._controller.config.duration:g}")
            self.durationRejected.emit(str(exc))
            return
        self.durationAccepted.emit(config.duration)

    def _on_run_clicked(self) -> None:
        self._on_duration_edited()
        running = self._controller.toggle_continuous()
        self.run_button.setText("Stop" if running else "Run")

    def _on_capture_clicked(self) -> None:
        self._on_duration_edited()
        self._controller.start()


__all__ = ["CaptureControlWidget"]
