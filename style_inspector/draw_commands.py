"""Immutable draw commands handed to the Renderer, one list per overlay layer."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

from style_inspector.geometry import Rect
from style_inspector.highlight import LABEL_BELOW, Highlight
from style_inspector.measurements import GUIDE, MeasurementSet
from style_inspector.placement import PlacementCandidate
from style_inspector.skim import SkimLabel
from style_inspector.style_values import TooltipRow

HIGHLIGHT_LAYER = "highlight"
MEASUREMENT_LAYER = "measurement"
TOOLTIP_LAYER = "tooltip"
SKIM_LAYER = "skim"
LAYERS: Tuple[str, ...] = (HIGHLIGHT_LAYER, MEASUREMENT_LAYER, TOOLTIP_LAYER, SKIM_LAYER)

ANCHOR_CENTER = "center"
ANCHOR_ABOVE = "above"
ANCHOR_BELOW = "below"

MEASUREMENT_COLOR = "#cf56e6"
HIGHLIGHT_COLOR = "#0d99ff"
SKIM_LABEL_BACKGROUND = "rgba(0, 0, 0, 0.85)"
HIGHLIGHT_FILL_ALPHA = 0.1

_HEX_COLOR = re.compile(r"#([0-9a-fA-F]{6})")
_RGB_COLOR = re.compile(r"rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)")


@dataclass(frozen=True)
class DrawRect:
    rect: Rect
    color: str
    fill: Optional[str] = None
    dashed: bool = False


@dataclass(frozen=True)
class DrawLabel:
    text: str
    x: float
    y: float
    color: str = "white"
    background: Optional[str] = None
    anchor: str = ANCHOR_CENTER
    swatches: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DrawPanel:
    left: float
    top: float
    width: float
    height: float
    title: str
    rows: Tuple[TooltipRow, ...]
    pinned: bool = False


DrawCommand = Union[DrawRect, DrawLabel, DrawPanel]


def translucent(color: str, alpha: float) -> Optional[str]:
    """Return ``color`` as a CSS ``rgba()`` with ``alpha``; None when it is not #rrggbb or rgb()."""
    value = color.strip()
    hex_match = _HEX_COLOR.fullmatch(value)
    if hex_match:
        digits = hex_match.group(1)
        red, green, blue = (int(digits[index:index + 2], 16) for index in (0, 2, 4))
    else:
        rgb_match = _RGB_COLOR.match(value)
        if rgb_match is None:
            return None
        red, green, blue = (int(part) for part in rgb_match.groups())
    return f"rgba({red}, {green}, {blue}, {alpha:g})"


def highlight_commands(highlight: Highlight, *, color: str = HIGHLIGHT_COLOR) -> Tuple[DrawCommand, ...]:
    rect = highlight.rect
    if highlight.label_position == LABEL_BELOW:
        label = DrawLabel(highlight.label_text, rect.left, rect.bottom, background=color, anchor=ANCHOR_BELOW)
    else:
        label = DrawLabel(highlight.label_text, rect.left, rect.top, background=color, anchor=ANCHOR_ABOVE)
    return (DrawRect(rect, color, fill=translucent(color, HIGHLIGHT_FILL_ALPHA)), label)


def measurement_commands(measurements: Iterable[MeasurementSet], *, color: str = MEASUREMENT_COLOR) -> Tuple[DrawCommand, ...]:
    commands: list[DrawCommand] = []
    for measurement in measurements:
        for segment in measurement.segments:
            dashed = segment.kind == GUIDE
            commands.append(DrawRect(segment.rect, color, fill=None if dashed else color, dashed=dashed))
        for label in measurement.labels:
            commands.append(DrawLabel(label.text, label.anchor_x, label.anchor_y, background=color))
    return tuple(commands)


def tooltip_commands(
    placement: PlacementCandidate,
    width: float,
    height: float,
    title: str,
    rows: Tuple[TooltipRow, ...],
    *,
    pinned: bool,
) -> Tuple[DrawCommand, ...]:
    return (DrawPanel(placement.left, placement.top, width, height, title, rows, pinned),)


def skim_commands(labels: Iterable[SkimLabel]) -> Tuple[DrawCommand, ...]:
    return tuple(
        DrawLabel(
            label.text,
            label.left,
            label.top,
            background=SKIM_LABEL_BACKGROUND,
            anchor=ANCHOR_ABOVE,
            swatches=tuple(part.swatch for part in label.parts if part.swatch),
        )
        for label in labels
    )
