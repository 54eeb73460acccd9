"""Skim mode: property catalogue, bounded selection and batch label layout."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple, Union

from style_inspector.geometry import Rect
from style_inspector.logging_utils import LOGGER_NAME
from style_inspector.measurements import round_half_up
from style_inspector.style_values import rgb_to_hex

_LOGGER = logging.getLogger(LOGGER_NAME)

SKIM_CAPACITY = 3
DEFAULT_SKIM_PROPERTY = "fontSize"
LABEL_DELIMITER = " | "

TEXT_TAGS = frozenset(
    {
        "h1", "h2", "h3", "h4", "h5", "h6", "p", "span", "a", "li", "label", "button",
        "input", "textarea", "b", "strong", "i", "em", "mark", "small", "blockquote",
        "cite", "code",
    }
)
VISUAL_TAGS = frozenset({"img", "svg", "video", "canvas", "hr", "br", "iframe"})
EMPTY_VALUES = frozenset({"", "0px", "rgba(0, 0, 0, 0)", "transparent", "none", "auto"})


@dataclass(frozen=True)
class RectSource:
    key: str


@dataclass(frozen=True)
class StyleSource:
    key: str


PropertySource = Union[RectSource, StyleSource]


@dataclass(frozen=True)
class PropertyDescriptor:
    id: str
    label: str
    short_label: str
    source: PropertySource
    text_gated: bool = False
    is_color: bool = False


SKIM_OPTIONS: Tuple[PropertyDescriptor, ...] = (
    PropertyDescriptor("fontSize", "Font Size", "FS", StyleSource("font-size"), text_gated=True),
    PropertyDescriptor("color", "Font Color", "FC", StyleSource("color"), text_gated=True, is_color=True),
    PropertyDescriptor("width", "Width", "W", RectSource("width")),
    PropertyDescriptor("height", "Height", "H", RectSource("height")),
    PropertyDescriptor("backgroundColor", "Background", "BG", StyleSource("background-color"), is_color=True),
    PropertyDescriptor("padding", "Padding", "P", StyleSource("padding")),
    PropertyDescriptor("margin", "Margin", "M", StyleSource("margin")),
)
SKIM_OPTIONS_BY_ID: Mapping[str, PropertyDescriptor] = {option.id: option for option in SKIM_OPTIONS}


@dataclass(frozen=True)
class SkimElement:
    """Snapshot of one candidate element; ``rect`` is document-space."""

    ref: Any
    rect: Rect
    tag: str
    styles: Mapping[str, Optional[str]] = field(default_factory=dict)
    has_direct_text: bool = False
    hidden: bool = False
    is_overlay: bool = False


@dataclass(frozen=True)
class SkimLabelPart:
    short_label: str
    value: str
    swatch: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.short_label}: {self.value}"


@dataclass(frozen=True)
class SkimLabel:
    ref: Any
    left: float
    top: float
    parts: Tuple[SkimLabelPart, ...]

    @property
    def text(self) -> str:
        return LABEL_DELIMITER.join(str(part) for part in self.parts)


class SkimConfig:
    """Ordered selection of skim properties, never larger than ``capacity``."""

    def __init__(self, ids: Iterable[str] = (), *, capacity: int = SKIM_CAPACITY) -> None:
        self._capacity = max(1, int(capacity))
        self._ids: list[str] = []
        for property_id in ids:
            self.add(property_id)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(self._ids)

    @property
    def descriptors(self) -> Tuple[PropertyDescriptor, ...]:
        return tuple(SKIM_OPTIONS_BY_ID[property_id] for property_id in self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, property_id: object) -> bool:
        return property_id in self._ids

    def add(self, property_id: str) -> bool:
        if property_id in self._ids:
            return True
        if property_id not in SKIM_OPTIONS_BY_ID:
            _LOGGER.debug("Ignoring unknown skim property %s", property_id)
            return False
        if len(self._ids) >= self._capacity:
            _LOGGER.debug("Skim selection full (%d); rejected %s", self._capacity, property_id)
            return False
        self._ids.append(property_id)
        return True

    def remove(self, property_id: str) -> bool:
        if property_id not in self._ids:
            return False
        self._ids.remove(property_id)
        return True

    def toggle(self, property_id: str) -> bool:
        """Flip membership; returns whether the property is selected afterwards."""
        if property_id in self._ids:
            self.remove(property_id)
            return False
        return self.add(property_id)

    def replace(self, ids: Sequence[str]) -> None:
        self._ids = []
        for property_id in ids:
            self.add(property_id)

    def clear(self) -> None:
        self._ids = []

    def ensure_default(self) -> None:
        if not self._ids:
            self.add(DEFAULT_SKIM_PROPERTY)


def resolve_property(source: PropertySource, element: SkimElement) -> Optional[str]:
    """Resolve a descriptor source against one element snapshot."""
    if isinstance(source, RectSource):
        return f"{round_half_up(getattr(element.rect, source.key))}px"
    return element.styles.get(source.key)


def qualifies_for_text(element: SkimElement) -> bool:
    tag = (element.tag or "").lower()
    if tag in VISUAL_TAGS:
        return False
    if tag in TEXT_TAGS:
        return True
    return element.has_direct_text


def _is_visible(element: SkimElement) -> bool:
    if element.is_overlay or element.hidden or element.rect.is_degenerate:
        return False
    return element.styles.get("display") != "none" and element.styles.get("visibility") != "hidden"


def build_label_parts(element: SkimElement, descriptors: Sequence[PropertyDescriptor]) -> Tuple[SkimLabelPart, ...]:
    parts: list[SkimLabelPart] = []
    for descriptor in descriptors:
        if descriptor.text_gated and not qualifies_for_text(element):
            continue
        value = resolve_property(descriptor.source, element)
        if value is None or value.strip() in EMPTY_VALUES:
            continue
        if value.startswith("rgb"):
            value = rgb_to_hex(value)
        swatch = value if descriptor.is_color else None
        parts.append(SkimLabelPart(descriptor.short_label, value, swatch))
    return tuple(parts)


def layout_skim_labels(elements: Iterable[SkimElement], config: SkimConfig) -> Tuple[SkimLabel, ...]:
    """Compute one compact label per visible element that has a surviving property."""
    descriptors = config.descriptors
    if not descriptors:
        return ()
    labels: list[SkimLabel] = []
    skipped = 0
    for element in elements:
        if not _is_visible(element):
            skipped += 1
            continue
        parts = build_label_parts(element, descriptors)
        if not parts:
            continue
        labels.append(SkimLabel(element.ref, element.rect.left, element.rect.top, parts))
    _LOGGER.debug("Skim layout: labels=%d skipped=%d properties=%s", len(labels), skipped, ",".join(config.ids))
    return tuple(labels)
