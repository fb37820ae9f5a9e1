from __future__ import annotations

from PyQt6.QtCore import QPoint, Qt
from PyQt6.QtGui import QBrush, QColor, QFont, QFontMetrics, QPainter, QPen

from practice_overlay.render import OverlayPainterAdapter

LABEL_POINT_SIZE = 11.0


def _color(value: str, opacity: float = 1.0) -> QColor:
    q_color = QColor(value)
    if not q_color.isValid():
        q_color = QColor("white")
    q_color.setAlphaF(max(0.0, min(1.0, float(opacity))))
    return q_color


class QtOverlayPainter(OverlayPainterAdapter):
    def __init__(self, painter: QPainter, *, font_family: str = "") -> None:
        self._painter = painter
        self._font = QFont(font_family) if font_family else QFont()
        self._font.setPointSizeF(LABEL_POINT_SIZE)
        self._font.setWeight(QFont.Weight.DemiBold)

    def set_pen(self, color: str, *, width: int = 2, opacity: float = 1.0) -> None:
        pen = QPen(_color(color, opacity))
        pen.setWidth(max(0, int(width)))
        self._painter.setPen(pen)
        self._painter.setBrush(Qt.BrushStyle.NoBrush)

    def draw_line(self, x1: int, y1: int, x2: int, y2: int) -> None:
        self._painter.drawLine(x1, y1, x2, y2)

    def draw_circle_marker(self, x: int, y: int, radius: int, color: str) -> None:
        q_color = _color(color)
        pen = QPen(q_color)
        pen.setWidth(1)
        self._painter.setPen(pen)
        self._painter.setBrush(QBrush(q_color))
        self._painter.drawEllipse(QPoint(x, y), radius, radius)

    def draw_text(self, x: int, y: int, text: str, color: str) -> None:
        self._painter.setFont(self._font)
        metrics = QFontMetrics(self._font)
        baseline = int(round(y + metrics.ascent()))
        # Dark outline keeps labels readable over light reference photos.
        self._painter.setPen(QPen(QColor(0, 0, 0, 180)))
        self._painter.drawText(x + 1, baseline + 1, text)
        self._painter.setPen(QPen(_color(color)))
        self._painter.drawText(x, baseline, text)
