__all__ = ["ScopeWindow", "WaveformRenderer", "QtScheduler"]

from .scope_window import ScopeWindow
from .waveform_renderer import WaveformRenderer
from .qt_scheduler import QtScheduler
