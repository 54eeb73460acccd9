from __future__ import annotations

import pytest

from style_inspector.geometry import (
    DOCUMENT,
    VIEWPORT,
    CoordinateSpaceError,
    Rect,
    ScrollOffset,
    Size,
    to_document,
    viewport_rect,
)


def test_derived_edges_and_centres() -> None:
    rect = Rect(10, 20, 30, 40)
    assert rect.right == 40
    assert rect.bottom == 60
    assert rect.center_x == 25
    assert rect.center_y == 40
    assert rect.space == DOCUMENT


def test_degenerate_when_width_or_height_not_positive() -> None:
    assert Rect(0, 0, 0, 10).is_degenerate
    assert Rect(0, 0, 10, -1).is_degenerate
    assert not Rect(0, 0, 1, 1).is_degenerate


def test_unknown_space_rejected() -> None:
    with pytest.raises(ValueError):
        Rect(0, 0, 1, 1, "screen")


def test_viewport_rect_converts_once_with_scroll_offset() -> None:
    raw = Rect(10, 20, 5, 5, VIEWPORT)
    doc = to_document(raw, ScrollOffset(0, 300))
    assert doc == Rect(10, 320, 5, 5, DOCUMENT)
    # Already document-space rectangles pass through unchanged.
    assert to_document(doc, ScrollOffset(0, 300)) is doc
    assert doc.to_viewport(ScrollOffset(0, 300)) == raw


def test_mixing_spaces_raises() -> None:
    with pytest.raises(CoordinateSpaceError):
        Rect(0, 0, 10, 10).contains(Rect(0, 0, 5, 5, VIEWPORT))


def test_contains_allows_flush_edges() -> None:
    outer = Rect(0, 0, 100, 100)
    assert outer.contains(Rect(0, 0, 100, 100))
    assert outer.contains(Rect(0, 50, 100, 50))
    assert not outer.contains(Rect(-1, 0, 10, 10))


def test_overlap_is_strict() -> None:
    left = Rect(0, 0, 10, 10)
    touching = Rect(10, 0, 10, 10)
    assert not left.overlaps_x(touching)
    assert left.overlaps_y(touching)


def test_viewport_rect_is_document_space_window() -> None:
    rect = viewport_rect(Size(800, 600), ScrollOffset(0, 250))
    assert rect.as_tuple() == (0, 250, 800, 600)
    assert rect.space == DOCUMENT


def test_from_edges() -> None:
    rect = Rect.from_edges(10, 20, 40, 80, space=VIEWPORT)
    assert rect.as_tuple() == (10, 20, 30, 60)
    assert rect.space == VIEWPORT
