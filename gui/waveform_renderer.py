from __future__ import annotations

import logging
from typing import Optional, Sequence

import pyqtgraph as pg
from PySide6 import QtCore, QtGui

from core.chart_layout import AXIS_COLOR, Axis, ChartScene, layout_chart
from shared.models import Trace, Viewport

logger = logging.getLogger(__name__)

LABEL_GAP_PX = 2.0
FONT_PIXEL_SIZE = 11


class WaveformRenderer:
    """
    Paints captured traces into an offscreen image and copies it to a display surface.

    Layout (scales, ticks, palette) comes from `core.chart_layout`; this class
    only turns the resulting scene into pixels. Until `load_font()` has run,
    `render()` is a no-op.
    """

    def __init__(self, surface: Optional[QtGui.QImage] = None) -> None:
        self._font: Optional[QtGui.QFont] = None
        self._surface = surface
        self._image = QtGui.QImage()
        self._last_scene: Optional[ChartScene] = None

    @property
    def ready(self) -> bool:
        return self._font is not None

    @property
    def font(self) -> Optional[QtGui.QFont]:
        return self._font

    @property
    def surface(self) -> Optional[QtGui.QImage]:
        return self._surface

    @property
    def last_scene(self) -> Optional[ChartScene]:
        """Scene painted by the most recent successful render."""
        return self._last_scene

    def attach_surface(self, surface: Optional[QtGui.QImage]) -> None:
        self._surface = surface

    def load_font(self, font: Optional[QtGui.QFont] = None) -> QtGui.QFont:
        """Resolve the label font. Only the first call has an effect."""
        if self._font is not None:
            return self._font
        if font is None:
            font = QtGui.QFontDatabase.systemFont(QtGui.QFontDatabase.SystemFont.GeneralFont)
            font.setPixelSize(FONT_PIXEL_SIZE)
        self._font = QtGui.QFont(font)
        logger.info("Chart font loaded: %s", self._font.family())
        return self._font

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, times, traces: Sequence[Trace], viewport: Viewport) -> bool:
        """Draw `traces` against `times` and copy the result to the surface.

        Returns False without touching anything when the font is not loaded or
        no surface of `viewport`'s size is attached.
        """
        if self._font is None:
            logger.debug("Render skipped: font not loaded")
            return False
        surface = self._surface
        if surface is None or surface.isNull():
            logger.debug("Render skipped: no display surface")
            return False
        if surface.width() != viewport.width or surface.height() != viewport.height:
            logger.debug(
                "Render skipped: surface %dx%d does not match viewport %dx%d",
                surface.width(), surface.height(), viewport.width, viewport.height,
            )
            return False

        scene = layout_chart(times, traces, viewport)
        if self._image.width() != viewport.width or self._image.height() != viewport.height:
            self._image = QtGui.QImage(viewport.width, viewport.height, QtGui.QImage.Format.Format_ARGB32)
        self._image.fill(QtGui.QColor(*scene.background))

        painter = QtGui.QPainter(self._image)
        try:
            painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)
            painter.setFont(self._font)
            self._paint_scene(painter, scene)
        finally:
            painter.end()

        self.copy_to(surface)
        self._last_scene = scene
        return True

    def copy_to(self, target: QtGui.QImage) -> None:
        """Replace the pixels of `target` with the offscreen image."""
        painter = QtGui.QPainter(target)
        try:
            painter.setCompositionMode(QtGui.QPainter.CompositionMode.CompositionMode_Source)
            painter.drawImage(QtCore.QPoint(0, 0), self._image)
        finally:
            painter.end()

    def _paint_scene(self, painter: QtGui.QPainter, scene: ChartScene) -> None:
        height = scene.viewport.height

        for line in scene.lines:
            if line.xs.size == 0:
                continue
            path = pg.arrayToQPath(line.xs, height - line.ys, connect="finite")
            painter.setPen(pg.mkPen(line.color, width=line.width))
            painter.drawPath(path)

        for label in scene.labels:
            if not label.text:
                continue
            painter.setPen(pg.mkColor(label.color))
            painter.drawText(QtCore.QPointF(label.x, height - label.y), label.text)

        axis_pen = pg.mkPen(AXIS_COLOR, width=1)
        for axis in (scene.x_axis, scene.y_axis):
            self._paint_axis(painter, axis, height, axis_pen)

    def _paint_axis(self, painter: QtGui.QPainter, axis: Axis, height: int, pen: QtGui.QPen) -> None:
        painter.setPen(pen)
        (sx, sy), (ex, ey) = axis.start, axis.end
        painter.drawLine(QtCore.QPointF(sx, height - sy), QtCore.QPointF(ex, height - ey))

        # Normal in image coordinates (y down).
        nx, ny = axis.normal
        nx, ny = nx * axis.label_side, -ny * axis.label_side
        metrics = QtGui.QFontMetricsF(painter.font())
        near = axis.tick_offset
        far = axis.tick_offset + axis.tick_length
        for tick in axis.ticks:
            if axis.orientation == "x":
                bx, by = tick.position, height - sy
            else:
                bx, by = sx, height - tick.position
            painter.setPen(pen)
            painter.drawLine(
                QtCore.QPointF(bx + nx * near, by + ny * near),
                QtCore.QPointF(bx + nx * far, by + ny * far),
            )

            text_w = metrics.horizontalAdvance(tick.label)
            ax = bx + nx * (far + LABEL_GAP_PX)
            ay = by + ny * (far + LABEL_GAP_PX)
            if axis.orientation == "x":
                rect = QtCore.QRectF(ax - text_w / 2.0, ay if ny > 0 else ay - metrics.height(), text_w, metrics.height())
                flags = QtCore.Qt.AlignmentFlag.AlignHCenter | QtCore.Qt.AlignmentFlag.AlignTop
            else:
                left = ax - text_w if nx < 0 else ax
                rect = QtCore.QRectF(left, ay - metrics.height() / 2.0, text_w, metrics.height())
                flags = QtCore.Qt.AlignmentFlag.AlignRight | QtCore.Qt.AlignmentFlag.AlignVCenter
            painter.drawText(rect, tick.label, QtGui.QTextOption(flags))


__all__ = ["WaveformRenderer"]
