from __future__ import annotations

from style_inspector.draw_commands import HIGHLIGHT_COLOR, DrawRect, highlight_commands, translucent
from style_inspector.geometry import Rect
from style_inspector.highlight import LABEL_ABOVE, LABEL_BELOW, build_breadcrumb, build_highlight


def test_label_flips_below_near_window_top() -> None:
    rect = Rect(10, 10, 100, 50)
    assert build_highlight(rect, 10, "div", ()).label_position == LABEL_BELOW
    assert build_highlight(rect, 30, "div", ()).label_position == LABEL_ABOVE


def test_highlight_mirrors_rect_and_truncates_classes() -> None:
    rect = Rect(10, 200, 100, 50)
    highlight = build_highlight(rect, 200, "p", ["a-very-long-class-name", "another-long-one"], class_label_max=10)
    assert highlight.rect is rect
    assert highlight.name == "Paragraph"
    assert highlight.classes == ".a-very-lo..."
    assert highlight.label_text == "Paragraph.a-very-lo..."


def test_breadcrumb_is_outermost_first_and_stops_below_root() -> None:
    parents = {"span": "p", "p": "section", "section": "body", "body": None}
    crumbs = build_breadcrumb(
        "span",
        parent_fn=parents.get,
        is_root_fn=lambda node: node == "body",
        label_fn=str.upper,
    )
    assert crumbs == (("section", "SECTION"), ("p", "P"), ("span", "SPAN"))


def test_breadcrumb_depth_is_bounded() -> None:
    chain = {f"n{i}": f"n{i + 1}" for i in range(20)}
    crumbs = build_breadcrumb(
        "n0",
        parent_fn=chain.get,
        is_root_fn=lambda node: False,
        label_fn=lambda node: node,
        max_depth=3,
    )
    assert [label for _node, label in crumbs] == ["n2", "n1", "n0"]


def test_highlight_fill_follows_outline_color() -> None:
    highlight = build_highlight(Rect(10, 200, 100, 50), 200, "div", ())
    box = highlight_commands(highlight, color="#ff0000")[0]
    assert isinstance(box, DrawRect)
    assert box.color == "#ff0000"
    assert box.fill == "rgba(255, 0, 0, 0.1)"

    default_box = highlight_commands(highlight)[0]
    assert default_box.color == HIGHLIGHT_COLOR
    assert default_box.fill == "rgba(13, 153, 255, 0.1)"


def test_translucent_accepts_rgb_and_rejects_named_colors() -> None:
    assert translucent("rgb(1, 2, 3)", 0.25) == "rgba(1, 2, 3, 0.25)"
    assert translucent("rgba(10, 20, 30, 0.9)", 0.1) == "rgba(10, 20, 30, 0.1)"
    assert translucent("tomato", 0.1) is None
