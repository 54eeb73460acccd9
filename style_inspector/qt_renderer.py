"""PyQt6 renderer for overlay draw commands and QTimer-backed scheduling hooks."""
from __future__ import annotations

import logging
import re
from typing import Callable, Dict, Optional, Sequence, Tuple

from PyQt6.QtCore import QRectF, Qt, QTimer
from PyQt6.QtGui import QBrush, QColor, QFont, QFontMetrics, QPainter, QPen

from style_inspector.collaborators import Renderer
from style_inspector.draw_commands import (
    ANCHOR_ABOVE,
    ANCHOR_BELOW,
    LAYERS,
    DrawCommand,
    DrawLabel,
    DrawPanel,
    DrawRect,
)
from style_inspector.logging_utils import LOGGER_NAME

_LOGGER = logging.getLogger(LOGGER_NAME)

_RGBA_RE = re.compile(r"rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)")

LABEL_FONT_POINT_SIZE = 9.0
PANEL_FONT_POINT_SIZE = 10.0
LABEL_PADDING = 4
PANEL_PADDING = 8
PANEL_BACKGROUND = "rgba(28, 28, 30, 0.95)"
SWATCH_SIZE = 10


def to_qcolor(value: Optional[str], fallback: str = "white") -> QColor:
    """Accept ``#rrggbb``/named colours as well as CSS ``rgb()``/``rgba()`` strings."""

    if value:
        match = _RGBA_RE.fullmatch(value.strip())
        if match:
            red, green, blue = (int(float(part)) for part in match.group(1, 2, 3))
            alpha = match.group(4)
            color = QColor(red, green, blue)
            if alpha is not None:
                color.setAlphaF(max(0.0, min(1.0, float(alpha))))
            return color
        color = QColor(value)
        if color.isValid():
            return color
    return QColor(fallback)


def qtimer_after(ms: int, callback: Callable[[], None]) -> QTimer:
    timer = QTimer()
    timer.setSingleShot(True)
    timer.timeout.connect(callback)
    timer.start(max(0, int(ms)))
    return timer


def qtimer_cancel(handle: object) -> None:
    if isinstance(handle, QTimer):
        handle.stop()


class QtOverlayRenderer(Renderer):
    """Keeps the latest command list per layer and paints them onto a QPainter.

    ``update_fn`` is called whenever a layer changes so the host widget can
    schedule a repaint. Commands carry document coordinates; ``paint`` receives
    the negated scroll offset to land them in the widget.
    """

    def __init__(self, update_fn: Optional[Callable[[], None]] = None, *, font_family: str = "Sans Serif") -> None:
        self._layers: Dict[str, Tuple[DrawCommand, ...]] = {}
        self._update_fn = update_fn
        self._font_family = font_family

    def apply(self, layer: str, commands: Sequence[DrawCommand]) -> None:
        self._layers[layer] = tuple(commands)
        self._request_update()

    def clear(self, layer: str) -> None:
        if self._layers.pop(layer, None) is not None:
            self._request_update()

    def commands(self, layer: str) -> Tuple[DrawCommand, ...]:
        return self._layers.get(layer, ())

    @property
    def is_empty(self) -> bool:
        return not any(self._layers.values())

    def _request_update(self) -> None:
        if self._update_fn is None:
            return
        try:
            self._update_fn()
        except Exception as exc:
            _LOGGER.debug("Overlay update callback failed: %s", exc)

    def _font(self, point_size: float, *, bold: bool = False) -> QFont:
        font = QFont(self._font_family)
        font.setPointSizeF(point_size)
        font.setWeight(QFont.Weight.Bold if bold else QFont.Weight.Normal)
        return font

    def paint(self, painter: QPainter, offset_x: float = 0.0, offset_y: float = 0.0) -> None:
        for layer in LAYERS:
            for command in self._layers.get(layer, ()):
                if isinstance(command, DrawRect):
                    self._paint_rect(painter, command, offset_x, offset_y)
                elif isinstance(command, DrawLabel):
                    self._paint_label(painter, command, offset_x, offset_y)
                elif isinstance(command, DrawPanel):
                    self._paint_panel(painter, command, offset_x, offset_y)

    def _paint_rect(self, painter: QPainter, command: DrawRect, offset_x: float, offset_y: float) -> None:
        rect = command.rect
        pen = QPen(to_qcolor(command.color))
        pen.setWidth(1)
        if command.dashed:
            pen.setStyle(Qt.PenStyle.DashLine)
        painter.setPen(pen)
        if command.fill:
            painter.setBrush(QBrush(to_qcolor(command.fill)))
        else:
            painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRect(QRectF(rect.left + offset_x, rect.top + offset_y, rect.width, rect.height))

    def _paint_label(self, painter: QPainter, command: DrawLabel, offset_x: float, offset_y: float) -> None:
        font = self._font(LABEL_FONT_POINT_SIZE)
        metrics = QFontMetrics(font)
        swatch_width = len(command.swatches) * (SWATCH_SIZE + LABEL_PADDING)
        width = metrics.horizontalAdvance(command.text) + swatch_width + LABEL_PADDING * 2
        height = metrics.height() + LABEL_PADDING
        x = command.x + offset_x
        y = command.y + offset_y
        if command.anchor == ANCHOR_ABOVE:
            y -= height
        elif command.anchor != ANCHOR_BELOW:
            x -= width / 2
            y -= height / 2
        box = QRectF(x, y, width, height)
        if command.background:
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QBrush(to_qcolor(command.background)))
            painter.drawRect(box)
        cursor = x + LABEL_PADDING
        for swatch in command.swatches:
            painter.setPen(QPen(QColor("white")))
            painter.setBrush(QBrush(to_qcolor(swatch)))
            painter.drawRect(QRectF(cursor, y + (height - SWATCH_SIZE) / 2, SWATCH_SIZE, SWATCH_SIZE))
            cursor += SWATCH_SIZE + LABEL_PADDING
        painter.setFont(font)
        painter.setPen(to_qcolor(command.color))
        painter.drawText(QRectF(cursor, y, width - (cursor - x), height), Qt.AlignmentFlag.AlignVCenter, command.text)

    def _paint_panel(self, painter: QPainter, command: DrawPanel, offset_x: float, offset_y: float) -> None:
        left = command.left + offset_x
        top = command.top + offset_y
        painter.setPen(QPen(to_qcolor("rgba(255, 255, 255, 0.2)")))
        painter.setBrush(QBrush(to_qcolor(PANEL_BACKGROUND)))
        painter.drawRoundedRect(QRectF(left, top, command.width, command.height), 6, 6)

        title_font = self._font(PANEL_FONT_POINT_SIZE, bold=True)
        row_font = self._font(PANEL_FONT_POINT_SIZE)
        line_height = QFontMetrics(row_font).height() + 2
        inner_width = command.width - PANEL_PADDING * 2
        cursor_y = top + PANEL_PADDING

        painter.setFont(title_font)
        painter.setPen(QColor("white"))
        painter.drawText(QRectF(left + PANEL_PADDING, cursor_y, inner_width, line_height), Qt.AlignmentFlag.AlignLeft, command.title)
        cursor_y += line_height + 4

        painter.setFont(row_font)
        for row in command.rows:
            if cursor_y + line_height > top + command.height - PANEL_PADDING:
                break
            row_box = QRectF(left + PANEL_PADDING, cursor_y, inner_width, line_height)
            painter.setPen(QColor("#a0a0a0"))
            painter.drawText(row_box, Qt.AlignmentFlag.AlignLeft, row.label)
            value_left = left + PANEL_PADDING
            if row.swatch:
                swatch_x = left + command.width - PANEL_PADDING - QFontMetrics(row_font).horizontalAdvance(row.value) - SWATCH_SIZE - 4
                painter.setPen(QPen(QColor("white")))
                painter.setBrush(QBrush(to_qcolor(row.swatch)))
                painter.drawRect(QRectF(swatch_x, cursor_y + (line_height - SWATCH_SIZE) / 2, SWATCH_SIZE, SWATCH_SIZE))
            painter.setPen(QColor("white"))
            painter.drawText(
                QRectF(value_left, cursor_y, inner_width, line_height),
                Qt.AlignmentFlag.AlignRight,
                row.value,
            )
            cursor_y += line_height
