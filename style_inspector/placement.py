"""Viewport-aware tooltip placement with side stickiness (pure, no Qt)."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from style_inspector.geometry import Rect, Size
from style_inspector.logging_utils import LOGGER_NAME

_LOGGER = logging.getLogger(LOGGER_NAME)

SIDE_PRIORITY: Tuple[str, ...] = ("right", "left", "bottom", "top")
DEFAULT_MARGIN = 16


@dataclass(frozen=True)
class PlacementCandidate:
    side: str
    left: float
    top: float


@dataclass
class PlacementMemory:
    last_side: Optional[str] = None


def build_candidates(target: Rect, panel: Size, gap: float) -> Dict[str, PlacementCandidate]:
    return {
        "right": PlacementCandidate("right", target.right + gap, target.top),
        "left": PlacementCandidate("left", target.left - panel.width - gap, target.top),
        "bottom": PlacementCandidate("bottom", target.left, target.bottom + gap),
        "top": PlacementCandidate("top", target.left, target.top - panel.height - gap),
    }


def fits_viewport(candidate: PlacementCandidate, panel: Size, viewport: Rect) -> bool:
    return (
        candidate.left >= viewport.left
        and candidate.left + panel.width <= viewport.right
        and candidate.top >= viewport.top
        and candidate.top + panel.height <= viewport.bottom
    )


def available_space(candidate: PlacementCandidate, panel: Size, viewport: Rect) -> float:
    """Smallest distance to any viewport edge; negative means overflow."""

    return min(
        viewport.right - (candidate.left + panel.width),
        candidate.left - viewport.left,
        viewport.bottom - (candidate.top + panel.height),
        candidate.top - viewport.top,
    )


def _clamp_axis(position: float, size: float, start: float, end: float, margin: float) -> float:
    if position + size > end:
        position = end - size - margin
    if position < start:
        position = start + margin
    if position + size > end:
        # Margin does not fit; keep the panel inside and let the leading edge win.
        position = max(start, end - size)
    return position


def place(
    target: Rect,
    panel: Size,
    viewport: Rect,
    gap: float,
    memory: PlacementMemory,
    *,
    margin: float = DEFAULT_MARGIN,
) -> PlacementCandidate:
    """Choose a side and coordinates for a panel next to ``target``.

    All inputs are document-space. The previously used side is reused while it
    still fits, otherwise the first fitting side in ``SIDE_PRIORITY`` wins and,
    when nothing fits, the side with the largest minimum edge space. The result
    is finally clamped into the viewport and the side is remembered.
    """

    candidates = build_candidates(target, panel, gap)
    chosen: Optional[PlacementCandidate] = None

    if memory.last_side in candidates:
        previous = candidates[memory.last_side]
        if fits_viewport(previous, panel, viewport):
            chosen = previous

    if chosen is None:
        for side in SIDE_PRIORITY:
            if fits_viewport(candidates[side], panel, viewport):
                chosen = candidates[side]
                break

    if chosen is None:
        best = candidates[SIDE_PRIORITY[0]]
        best_space = available_space(best, panel, viewport)
        for side in SIDE_PRIORITY[1:]:
            space = available_space(candidates[side], panel, viewport)
            if space > best_space:
                best, best_space = candidates[side], space
        chosen = best
        _LOGGER.debug("No side fits; using least-bad side=%s space=%.1f", chosen.side, best_space)

    left = _clamp_axis(chosen.left, panel.width, viewport.left, viewport.right, margin)
    top = _clamp_axis(chosen.top, panel.height, viewport.top, viewport.bottom, margin)
    memory.last_side = chosen.side
    return PlacementCandidate(chosen.side, left, top)
