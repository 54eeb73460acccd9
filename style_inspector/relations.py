"""Spatial relation classification between two document-space rectangles."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from style_inspector.geometry import Rect

VERTICAL = "vertical"
HORIZONTAL = "horizontal"


@dataclass(frozen=True)
class Contains:
    outer: Rect
    inner: Rect


@dataclass(frozen=True)
class Adjacent:
    """Source and target are disjoint on ``axis`` and overlap on the cross axis.

    ``side`` names where the source sits relative to the target. ``gap`` is the
    distance between the facing edges and ``overlap_start``/``overlap_end`` bound
    the shared interval on the cross axis.
    """

    axis: str
    side: str
    gap: float
    overlap_start: float
    overlap_end: float
    near_edge: float
    far_edge: float

    @property
    def anchor(self) -> float:
        return self.overlap_start + (self.overlap_end - self.overlap_start) / 2


Relation = Union[Contains, Adjacent]


def classify(source: Rect, target: Rect) -> Tuple[Relation, ...]:
    """Return zero, one (containment or one axis) or two (both axes) relations."""

    if source.is_degenerate or target.is_degenerate:
        return ()

    if target.contains(source):
        return (Contains(outer=target, inner=source),)
    if source.contains(target):
        return (Contains(outer=source, inner=target),)

    relations: list[Relation] = []
    if source.overlaps_x(target):
        start = max(source.left, target.left)
        end = min(source.right, target.right)
        if source.bottom < target.top:
            relations.append(
                Adjacent(VERTICAL, "above", target.top - source.bottom, start, end, source.bottom, target.top)
            )
        elif source.top > target.bottom:
            relations.append(
                Adjacent(VERTICAL, "below", source.top - target.bottom, start, end, target.bottom, source.top)
            )
    if source.overlaps_y(target):
        start = max(source.top, target.top)
        end = min(source.bottom, target.bottom)
        if source.right < target.left:
            relations.append(
                Adjacent(HORIZONTAL, "left", target.left - source.right, start, end, source.right, target.left)
            )
        elif source.left > target.right:
            relations.append(
                Adjacent(HORIZONTAL, "right", source.left - target.right, start, end, target.right, source.left)
            )
    return tuple(relations)
