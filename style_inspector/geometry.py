"""Rectangle value type with coordinate-space tagging (pure, no Qt)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

DOCUMENT = "document"
VIEWPORT = "viewport"
_SPACES = (DOCUMENT, VIEWPORT)


class CoordinateSpaceError(ValueError):
    """Raised when rectangles from different coordinate spaces are combined."""


@dataclass(frozen=True)
class ScrollOffset:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float
    space: str = DOCUMENT

    def __post_init__(self) -> None:
        if self.space not in _SPACES:
            raise ValueError(f"Unknown coordinate space: {self.space!r}")

    @classmethod
    def from_edges(cls, left: float, top: float, right: float, bottom: float, *, space: str = DOCUMENT) -> "Rect":
        return cls(left, top, right - left, bottom - top, space)

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.left, self.top, self.width, self.height)

    def to_document(self, scroll: ScrollOffset) -> "Rect":
        """Return the document-space equivalent of a viewport rectangle."""

        if self.space == DOCUMENT:
            return self
        return Rect(self.left + scroll.x, self.top + scroll.y, self.width, self.height, DOCUMENT)

    def to_viewport(self, scroll: ScrollOffset) -> "Rect":
        if self.space == VIEWPORT:
            return self
        return Rect(self.left - scroll.x, self.top - scroll.y, self.width, self.height, VIEWPORT)

    def contains(self, other: "Rect") -> bool:
        """True when ``other`` lies within this rectangle on all four edges (flush allowed)."""

        _require_same_space(self, other)
        return (
            other.left >= self.left
            and other.right <= self.right
            and other.top >= self.top
            and other.bottom <= self.bottom
        )

    def overlaps_x(self, other: "Rect") -> bool:
        _require_same_space(self, other)
        return self.right > other.left and self.left < other.right

    def overlaps_y(self, other: "Rect") -> bool:
        _require_same_space(self, other)
        return self.bottom > other.top and self.top < other.bottom


def to_document(rect: Rect, scroll: ScrollOffset) -> Rect:
    """Single conversion point used by the engine for walker-supplied rectangles."""

    return rect.to_document(scroll)


def viewport_rect(size: Size, scroll: ScrollOffset) -> Rect:
    """Visible window expressed in document space."""

    return Rect(scroll.x, scroll.y, size.width, size.height, DOCUMENT)


def _require_same_space(first: Rect, second: Rect) -> None:
    if first.space != second.space:
        raise CoordinateSpaceError(f"Cannot combine {first.space} and {second.space} rectangles")
