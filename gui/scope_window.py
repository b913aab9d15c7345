from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from PySide6 import QtCore, QtGui, QtWidgets

from core.capture_controller import CaptureController
from core.scheduler import Scheduler
from daq import AcquisitionClient, create_client
from shared.app_settings import AppSettingsStore
from shared.errors import InvalidConfig
from shared.models import CaptureConfig, Trace, Viewport

from .capture_control_widget import CaptureControlWidget
from .controller_adapter import connect_controller_signals
from .qt_scheduler import QtScheduler
from .scope_display import ScopeDisplay
from .waveform_renderer import WaveformRenderer

# Drawn once the font is available, before any capture has completed.
PLACEHOLDER_TIMES: Tuple[float, ...] = (1.0, 2.0, 3.0)
PLACEHOLDER_TRACES: Tuple[Trace, ...] = (Trace("", (0.0, 0.5, 1.0)),)


class ScopeWindow(QtWidgets.QMainWindow):
    """Main window: chart display above the capture controls."""

    def __init__(
        self,
        settings_store: Optional[AppSettingsStore] = None,
        *,
        client: Optional[AcquisitionClient] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        super().__init__()
        self._logger = logging.getLogger(__name__)
        self._settings_store = settings_store if settings_store is not None else AppSettingsStore()
        settings = self._settings_store.get()

        self._scheduler = scheduler if scheduler is not None else QtScheduler(self)
        self._client = client if client is not None else create_client(settings.instrument_url, self._scheduler)
        try:
            config = CaptureConfig(settings.capture_duration_s)
        except InvalidConfig:
            config = CaptureConfig()
        self.controller = CaptureController(
            self._client,
            self._scheduler,
            config=config,
            poll_interval_ms=settings.poll_interval_ms,
        )
        self.signals, self._unsubscribe_controller = connect_controller_signals(self.controller)
        self.renderer = WaveformRenderer()
        self._last_data: Tuple[Sequence[float], Sequence[Trace]] = (PLACEHOLDER_TIMES, PLACEHOLDER_TRACES)

        self.setWindowTitle(f"RemoteScope - {settings.instrument_url}")
        self.resize(1000, settings.display_height_px + 200)
        self.statusBar()

        central = QtWidgets.QWidget(self)
        layout = QtWidgets.QVBoxLayout(central)
        layout.setContentsMargins(12, 12, 12, 12)
        self.display = ScopeDisplay(settings.display_height_px, central)
        self.controls = CaptureControlWidget(self.controller, self.signals, central)
        layout.addWidget(self.display)
        layout.addWidget(self.controls)
        layout.addStretch(1)
        self.setCentralWidget(central)

        self._wire()

        # Font resolves asynchronously, once, after the event loop starts.
        QtCore.QTimer.singleShot(0, self._load_font)
        if settings.continuous_on_launch:
            QtCore.QTimer.singleShot(0, self._start_continuous)

    def _wire(self) -> None:
        self.signals.dataReady.connect(self.draw_traces)
        self.signals.errorRaised.connect(self._on_capture_error)
        self.signals.phaseChanged.connect(self._on_phase_changed)
        self.display.surfaceReady.connect(self._on_surface_ready)
        self.controls.durationAccepted.connect(self._on_duration_accepted)
        self.controls.durationRejected.connect(self._show_warning)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def draw_traces(self, times, traces) -> bool:
        self._last_data = (times, traces)
        viewport = self.display.viewport
        if viewport is None:
            return False
        drawn = self.renderer.render(times, traces, viewport)
        if drawn:
            self.display.update()
        return drawn

    def _load_font(self) -> None:
        self.renderer.load_font()
        self.draw_traces(*self._last_data)

    def _on_surface_ready(self, viewport: Viewport) -> None:
        self.renderer.attach_surface(self.display.surface)
        self.draw_traces(*self._last_data)

    # ------------------------------------------------------------------
    # Controller events
    # ------------------------------------------------------------------

    def _start_continuous(self) -> None:
        if not self.controller.continuous:
            self.controller.toggle_continuous()
        self.controls.sync_from_controller()

    def _on_phase_changed(self, phase: str) -> None:
        self.statusBar().showMessage(phase, 2000)

    def _on_capture_error(self, error: Exception) -> None:
        self._show_warning(str(error))

    def _on_duration_accepted(self, duration: float) -> None:
        self._settings_store.update(capture_duration_s=duration)

    def _show_warning(self, message: str) -> None:
        self.statusBar().showMessage(message, 7000)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:
        self.controller.shutdown()
        self._client.close()
        self._unsubscribe_controller()
        super().closeEvent(event)


__all__ = ["PLACEHOLDER_TIMES", "PLACEHOLDER_TRACES", "ScopeWindow"]
