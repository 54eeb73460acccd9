"""Formatting helpers for resolved style values and tooltip rows."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence, Tuple

from style_inspector.geometry import Rect
from style_inspector.measurements import round_half_up

TRANSPARENT_VALUES = frozenset({"rgba(0, 0, 0, 0)", "transparent"})

TAG_NAMES: Mapping[str, str] = {
    "a": "Link",
    "img": "Image",
    "svg": "Icon",
    "p": "Paragraph",
    "h1": "H1",
    "h2": "H2",
    "h3": "H3",
    "h4": "H4",
    "h5": "H5",
    "h6": "H6",
    "div": "Div",
    "span": "Span",
    "button": "Button",
    "input": "Input",
    "form": "Form",
}

_RGB_PATTERN = re.compile(r"rgba?\((\d+),\s*(\d+),\s*(\d+)")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

StyleLookup = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class Spacing:
    top: int
    right: int
    bottom: int
    left: int

    @property
    def is_zero(self) -> bool:
        return not (self.top or self.right or self.bottom or self.left)

    def __str__(self) -> str:
        return f"{self.top} {self.right} {self.bottom} {self.left}"


@dataclass(frozen=True)
class TooltipRow:
    label: str
    value: str
    swatch: Optional[str] = None
    editable_property: Optional[str] = None


def friendly_tag_name(tag: str) -> str:
    lowered = (tag or "").lower()
    if lowered in TAG_NAMES:
        return TAG_NAMES[lowered]
    return lowered[:1].upper() + lowered[1:]


def element_label(tag: str, element_id: Optional[str], classes: Sequence[str]) -> str:
    """Short ``tag#id.class1.class2`` label used in the breadcrumb."""
    lowered = (tag or "").lower()
    if lowered in {"body", "html"}:
        return lowered
    id_part = f"#{element_id}" if element_id else ""
    kept = [name for name in classes if name][:2]
    class_part = "." + ".".join(kept) if kept else ""
    return f"{lowered}{id_part}{class_part}"


def is_transparent(value: Optional[str]) -> bool:
    return not value or value.strip() in TRANSPARENT_VALUES


def rgb_to_hex(value: Optional[str]) -> str:
    if not value:
        return "#000000"
    if value.startswith("#"):
        return value
    match = _RGB_PATTERN.match(value)
    if match is None:
        return value
    red, green, blue = (int(part) for part in match.groups())
    return f"#{red:02x}{green:02x}{blue:02x}".upper()


def _leading_int(token: str) -> int:
    match = _LEADING_INT.match(token)
    return int(match.group(1)) if match else 0


def parse_spacing(value: Optional[str]) -> Optional[Spacing]:
    """Expand a 1-4 value CSS shorthand; ``None`` for empty or ``0px``."""
    if not value or value == "0px":
        return None
    parts = [_leading_int(token) for token in value.split(" ")]
    if len(parts) == 1:
        return Spacing(parts[0], parts[0], parts[0], parts[0])
    if len(parts) == 2:
        return Spacing(parts[0], parts[1], parts[0], parts[1])
    if len(parts) == 3:
        return Spacing(parts[0], parts[1], parts[2], parts[1])
    if len(parts) == 4:
        return Spacing(parts[0], parts[1], parts[2], parts[3])
    return None


def primary_font_family(value: str) -> str:
    return value.split(",")[0].replace('"', "").replace("'", "").strip()


def dimension_display(measured: float, authored: Optional[str]) -> str:
    rounded = f"{round_half_up(measured)}px"
    if authored and authored != "auto" and authored != rounded:
        return f"{rounded} ({authored})"
    return rounded


def _color_row(label: str, value: Optional[str], editable: Optional[str] = None) -> Optional[TooltipRow]:
    if not value or is_transparent(value):
        return None
    return TooltipRow(label, rgb_to_hex(value), swatch=value, editable_property=editable)


def build_tooltip_rows(
    rect: Rect,
    style: StyleLookup,
    authored: StyleLookup,
    *,
    full: bool,
) -> Tuple[TooltipRow, ...]:
    """Rows shown in the inspector panel; absent style values drop their row."""
    rows: list[TooltipRow] = [
        TooltipRow("Height", dimension_display(rect.height, authored("height"))),
        TooltipRow("Width", dimension_display(rect.width, authored("width"))),
    ]

    if not full:
        color_row = _color_row("Color", style("color")) or _color_row("Color", style("background-color"))
        if color_row is not None:
            rows.append(color_row)
        font_size = style("font-size")
        if font_size:
            rows.append(TooltipRow("Font", primary_font_family(style("font-family") or "")))
            rows.append(TooltipRow("Font Size", font_size))
        return tuple(rows)

    for label, key in (("Display", "display"), ("Position", "position")):
        value = style(key)
        if value:
            rows.append(TooltipRow(label, value))

    font_size = style("font-size")
    if font_size:
        rows.append(TooltipRow("Font", primary_font_family(style("font-family") or "")))
        rows.append(TooltipRow("Font Size", font_size, editable_property="font-size"))
        weight = style("font-weight")
        if weight:
            rows.append(TooltipRow("Font Weight", weight))
        color_row = _color_row("Color", style("color"), editable="color")
        if color_row is not None:
            rows.append(color_row)

    background = _color_row("Background", style("background-color"))
    if background is not None:
        rows.append(background)

    border_width = style("border-width")
    if border_width and border_width != "0px":
        rows.append(TooltipRow("Border", border_width))
        radius = style("border-radius")
        if radius and radius != "0px":
            rows.append(TooltipRow("Radius", radius))

    for label, key in (("Padding", "padding"), ("Margin", "margin")):
        spacing = parse_spacing(style(key))
        if spacing is not None and not spacing.is_zero:
            rows.append(TooltipRow(label, str(spacing)))

    return tuple(rows)
