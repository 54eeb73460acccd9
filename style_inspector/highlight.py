"""Highlight box, tag label and breadcrumb path for the selected element."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Tuple

from style_inspector.geometry import Rect
from style_inspector.style_values import friendly_tag_name

LABEL_ABOVE = "above"
LABEL_BELOW = "below"


@dataclass(frozen=True)
class Highlight:
    rect: Rect
    name: str
    classes: str
    label_position: str

    @property
    def label_text(self) -> str:
        return f"{self.name}{self.classes}"


def build_highlight(
    rect: Rect,
    viewport_top: float,
    tag: str,
    classes: Sequence[str],
    *,
    label_threshold: float = 30,
    class_label_max: int = 30,
) -> Highlight:
    """Mirror ``rect`` with a name label that flips below when too close to the window top."""

    kept = [name for name in classes if name]
    class_text = "." + ".".join(kept) if kept else ""
    if len(class_text) > class_label_max:
        class_text = class_text[:class_label_max] + "..."
    position = LABEL_BELOW if viewport_top < label_threshold else LABEL_ABOVE
    return Highlight(rect=rect, name=friendly_tag_name(tag), classes=class_text, label_position=position)


def build_breadcrumb(
    element: Any,
    *,
    parent_fn: Callable[[Any], Optional[Any]],
    is_root_fn: Callable[[Any], bool],
    label_fn: Callable[[Any], str],
    max_depth: int = 5,
) -> Tuple[Tuple[Any, str], ...]:
    """Ancestor path (outermost first) ending at ``element``, stopping below the root."""

    path: list[Tuple[Any, str]] = []
    current = element
    depth = 0
    while current is not None and not is_root_fn(current) and depth < max_depth:
        path.insert(0, (current, label_fn(current)))
        current = parent_fn(current)
        depth += 1
    return tuple(path)
