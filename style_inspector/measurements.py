"""Measurement line/label construction from classified relations."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from style_inspector.geometry import Rect
from style_inspector.logging_utils import LOGGER_NAME
from style_inspector.relations import VERTICAL, Adjacent, Contains, Relation

_LOGGER = logging.getLogger(LOGGER_NAME)

LINE = "line"
GUIDE = "guide"


@dataclass(frozen=True)
class Segment:
    kind: str
    rect: Rect


@dataclass(frozen=True)
class MeasurementLabel:
    text: str
    anchor_x: float
    anchor_y: float


@dataclass(frozen=True)
class MeasurementSet:
    segments: Tuple[Segment, ...] = ()
    labels: Tuple[MeasurementLabel, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.segments and not self.labels


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _label(gap: float, x: float, y: float) -> MeasurementLabel:
    return MeasurementLabel(str(round_half_up(gap)), x, y)


def _render_contains(relation: Contains) -> Tuple[list[Segment], list[MeasurementLabel]]:
    outer, inner = relation.outer, relation.inner
    top_gap = inner.top - outer.top
    bottom_gap = outer.bottom - inner.bottom
    left_gap = inner.left - outer.left
    right_gap = outer.right - inner.right
    segments = [
        Segment(LINE, Rect(inner.center_x, outer.top, 1, top_gap)),
        Segment(LINE, Rect(inner.center_x, inner.bottom, 1, bottom_gap)),
        Segment(LINE, Rect(outer.left, inner.center_y, left_gap, 1)),
        Segment(LINE, Rect(inner.right, inner.center_y, right_gap, 1)),
    ]
    labels = [
        _label(top_gap, inner.center_x, outer.top + top_gap / 2),
        _label(bottom_gap, inner.center_x, inner.bottom + bottom_gap / 2),
        _label(left_gap, outer.left + left_gap / 2, inner.center_y),
        _label(right_gap, inner.right + right_gap / 2, inner.center_y),
    ]
    return segments, labels


def _render_adjacent(relation: Adjacent) -> Tuple[list[Segment], list[MeasurementLabel]]:
    anchor = relation.anchor
    span = relation.overlap_end - relation.overlap_start
    near, far, gap = relation.near_edge, relation.far_edge, relation.gap
    if relation.axis == VERTICAL:
        segments = [
            Segment(LINE, Rect(anchor, near, 1, gap)),
            Segment(GUIDE, Rect(relation.overlap_start, near, span, 1)),
            Segment(GUIDE, Rect(relation.overlap_start, far, span, 1)),
        ]
        labels = [_label(gap, anchor, near + gap / 2)]
    else:
        segments = [
            Segment(LINE, Rect(near, anchor, gap, 1)),
            Segment(GUIDE, Rect(near, relation.overlap_start, 1, span)),
            Segment(GUIDE, Rect(far, relation.overlap_start, 1, span)),
        ]
        labels = [_label(gap, near + gap / 2, anchor)]
    return segments, labels


def render_relations(relations: Iterable[Relation]) -> MeasurementSet:
    segments: list[Segment] = []
    labels: list[MeasurementLabel] = []
    for relation in relations:
        if isinstance(relation, Contains):
            rel_segments, rel_labels = _render_contains(relation)
        else:
            rel_segments, rel_labels = _render_adjacent(relation)
        segments.extend(rel_segments)
        labels.extend(rel_labels)
    return MeasurementSet(tuple(segments), tuple(labels))


@dataclass(frozen=True, eq=False)
class MeasuredPair:
    """Identity of the last measured (source, target) pair."""

    source: Optional[Any] = None
    target: Optional[Any] = None

    def matches(self, source: Any, target: Any) -> bool:
        if self.source is None or self.target is None:
            return False
        return source is self.source and target is self.target


EMPTY_PAIR = MeasuredPair()


def should_render(previous: MeasuredPair, source: Any, target: Any) -> bool:
    """False when the pair was already measured; callers then keep the current drawing."""
    if previous.matches(source, target):
        _LOGGER.debug("Measurement cache hit; skipping re-render")
        return False
    return True
