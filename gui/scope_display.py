from __future__ import annotations

import logging
from typing import Optional

from PySide6 import QtCore, QtGui, QtWidgets

from shared.models import Viewport

logger = logging.getLogger(__name__)


class ScopeDisplay(QtWidgets.QWidget):
    """
    Visible display surface for the waveform chart.

    Holds an RGBA `QImage` whose width is measured from the widget the first
    time it is shown and whose height is fixed. The renderer writes into the
    image; this widget only repaints it.
    """

    surfaceReady = QtCore.Signal(object)  # Viewport

    def __init__(self, height_px: int = 500, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._height_px = max(1, int(height_px))
        self._surface: Optional[QtGui.QImage] = None
        self.setFixedHeight(self._height_px)
        self.setSizePolicy(QtWidgets.QSizePolicy.Policy.Expanding, QtWidgets.QSizePolicy.Policy.Fixed)

    @property
    def surface(self) -> Optional[QtGui.QImage]:
        return self._surface

    @property
    def viewport(self) -> Optional[Viewport]:
        if self._surface is None:
            return None
        return Viewport(self._surface.width(), self._surface.height())

    def mount(self, width: int) -> Viewport:
        """Allocate the surface at `width` x the fixed height, cleared to white."""
        viewport = Viewport(max(1, int(width)), self._height_px)
        self._surface = QtGui.QImage(viewport.width, viewport.height, QtGui.QImage.Format.Format_ARGB32)
        self._surface.fill(QtGui.QColor("white"))
        logger.debug("Display surface mounted at %dx%d", viewport.width, viewport.height)
        self.surfaceReady.emit(viewport)
        return viewport

    def showEvent(self, event: QtGui.QShowEvent) -> None:
        super().showEvent(event)
        if self._surface is None:
            self.mount(self.width())

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:
        if self._surface is None:
            return
        painter = QtGui.QPainter(self)
        try:
            painter.drawImage(QtCore.QPoint(0, 0), self._surface)
        finally:
            painter.end()


__all__ = ["ScopeDisplay"]
