from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional, Tuple

from style_inspector.draw_commands import LAYERS
from style_inspector.logging_utils import LOGGER_NAME

_LOGGER = logging.getLogger(LOGGER_NAME)

INSPECT = "inspect"
EDIT = "edit"
SKIM = "skim"
MODES: Tuple[str, ...] = (INSPECT, EDIT, SKIM)

EDITABLE_TAGS = frozenset(
    {"h1", "h2", "h3", "h4", "h5", "h6", "p", "span", "a", "li", "label", "button", "td", "th", "blockquote", "figcaption"}
)
EDITABLE_CONTAINERS = frozenset({"div", "section", "article", "aside"})
EDIT_MAX_DEPTH = 5


def normalise_mode(value: object) -> Optional[str]:
    token = str(value or "").strip().lower()
    return token if token in MODES else None


@dataclass(frozen=True, eq=False)
class SelectionState:
    """``pinned`` implies the full tooltip and an armed measurement."""

    current: Optional[Any] = None
    pinned: Optional[Any] = None

    @property
    def is_pinned(self) -> bool:
        return self.pinned is not None

    def select(self, element: Any) -> "SelectionState":
        if self.pinned is not None:
            return SelectionState(current=element, pinned=element)
        return replace(self, current=element)

    def pin(self, element: Any) -> "SelectionState":
        return SelectionState(current=element, pinned=element)

    def unpin(self) -> "SelectionState":
        return SelectionState(current=self.pinned if self.pinned is not None else self.current, pinned=None)


@dataclass(frozen=True)
class ModeTransition:
    previous: str
    mode: str
    clear_layers: Tuple[str, ...]
    unpin: bool
    run_skim: bool


def plan_transition(previous: str, requested: str) -> ModeTransition:
    """Any mode may follow any other; every transition tears down all overlay layers."""

    mode = normalise_mode(requested)
    if mode is None:
        raise ValueError(f"Unknown inspector mode: {requested!r}")
    _LOGGER.debug("Mode transition: %s -> %s", previous, mode)
    return ModeTransition(
        previous=previous,
        mode=mode,
        clear_layers=LAYERS,
        unpin=mode != INSPECT,
        run_skim=mode == SKIM,
    )


def is_editable_text_element(tag: str, has_direct_text: bool, *, is_overlay: bool = False) -> bool:
    if is_overlay:
        return False
    lowered = (tag or "").lower()
    if lowered in EDITABLE_TAGS:
        return True
    if lowered in EDITABLE_CONTAINERS:
        return has_direct_text
    return False


def find_editable_element(element: Any, walker: Any, *, max_depth: int = EDIT_MAX_DEPTH) -> Optional[Any]:
    """Walk up to ``max_depth`` ancestors (stopping at the root) for a text-bearing element."""

    current = element
    depth = 0
    while current is not None and not walker.is_root(current) and depth < max_depth:
        if is_editable_text_element(
            walker.tag_name(current),
            walker.has_direct_text(current),
            is_overlay=walker.is_overlay_element(current),
        ):
            return current
        current = walker.parent(current)
        depth += 1
    return None
