from __future__ import annotations

from style_inspector.geometry import Rect
from style_inspector.measurements import (
    EMPTY_PAIR,
    GUIDE,
    LINE,
    MeasuredPair,
    render_relations,
    round_half_up,
    should_render,
)
from style_inspector.relations import classify


def test_round_half_up() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.49) == 2
    assert round_half_up(-0.5) == 0


def test_adjacent_pair_renders_line_two_guides_and_label() -> None:
    measurement = render_relations(classify(Rect(0, 0, 100, 20), Rect(0, 40, 100, 20)))

    kinds = [segment.kind for segment in measurement.segments]
    assert kinds == [LINE, GUIDE, GUIDE]
    line = measurement.segments[0].rect
    assert line.as_tuple() == (50, 20, 1, 20)
    (label,) = measurement.labels
    assert label.text == "20"
    assert (label.anchor_x, label.anchor_y) == (50, 30)


def test_containment_renders_four_gaps() -> None:
    outer = Rect(0, 0, 100, 100)
    inner = Rect(10, 20, 50, 30)
    measurement = render_relations(classify(inner, outer))

    assert len(measurement.segments) == 4
    assert all(segment.kind == LINE for segment in measurement.segments)
    assert [label.text for label in measurement.labels] == ["20", "50", "10", "40"]


def test_no_relation_renders_nothing() -> None:
    assert render_relations(()).is_empty


def test_same_pair_is_a_cache_hit() -> None:
    source, target = object(), object()
    previous = MeasuredPair(source, target)
    assert should_render(EMPTY_PAIR, source, target) is True
    assert should_render(previous, source, target) is False
    assert should_render(previous, source, object()) is True


def test_pair_matches_by_identity() -> None:
    source = {"id": 1}
    pair = MeasuredPair(source, {"id": 2})
    assert not pair.matches({"id": 1}, {"id": 2})
    assert not EMPTY_PAIR.matches(None, None)
