from __future__ import annotations

from style_inspector.geometry import Rect
from style_inspector.style_values import (
    Spacing,
    build_tooltip_rows,
    dimension_display,
    element_label,
    friendly_tag_name,
    is_transparent,
    parse_spacing,
    primary_font_family,
    rgb_to_hex,
)


def _lookup(values):
    return lambda key: values.get(key)


def test_friendly_tag_names() -> None:
    assert friendly_tag_name("A") == "Link"
    assert friendly_tag_name("section") == "Section"
    assert friendly_tag_name("") == ""


def test_element_label_keeps_two_classes() -> None:
    assert element_label("DIV", "main", ["a", "b", "c"]) == "div#main.a.b"
    assert element_label("body", "x", ["y"]) == "body"
    assert element_label("span", None, []) == "span"


def test_colour_helpers() -> None:
    assert rgb_to_hex("rgb(255, 0, 16)") == "#FF0010"
    assert rgb_to_hex("rgba(0, 128, 255, 0.5)") == "#0080FF"
    assert rgb_to_hex("#abc") == "#abc"
    assert is_transparent("rgba(0, 0, 0, 0)")
    assert is_transparent("transparent")
    assert not is_transparent("rgb(0, 0, 0)")


def test_parse_spacing_shorthand() -> None:
    assert parse_spacing("0px") is None
    assert parse_spacing("4px") == Spacing(4, 4, 4, 4)
    assert parse_spacing("4px 8px") == Spacing(4, 8, 4, 8)
    assert parse_spacing("1px 2px 3px") == Spacing(1, 2, 3, 2)
    assert str(parse_spacing("1px 2px 3px 4px")) == "1 2 3 4"
    assert parse_spacing("0px 0px").is_zero


def test_primary_font_family_strips_quotes() -> None:
    assert primary_font_family('"Helvetica Neue", Arial, sans-serif') == "Helvetica Neue"


def test_authored_dimension_shown_in_parentheses() -> None:
    assert dimension_display(49.6, "50%") == "50px (50%)"
    assert dimension_display(50, "auto") == "50px"
    assert dimension_display(50, "50px") == "50px"
    assert dimension_display(50, None) == "50px"


def test_hover_rows_prefer_text_colour() -> None:
    style = _lookup({"color": "rgb(255, 0, 0)", "font-size": "16px", "font-family": "Inter, sans-serif"})
    rows = build_tooltip_rows(Rect(0, 0, 120, 40), style, _lookup({}), full=False)
    assert [row.label for row in rows] == ["Height", "Width", "Color", "Font", "Font Size"]
    assert rows[2].value == "#FF0000"
    assert rows[2].swatch == "rgb(255, 0, 0)"
    assert rows[3].value == "Inter"


def test_hover_rows_omit_missing_values() -> None:
    rows = build_tooltip_rows(Rect(0, 0, 10, 10), _lookup({"color": "transparent"}), _lookup({}), full=False)
    assert [row.label for row in rows] == ["Height", "Width"]


def test_full_rows_include_layout_and_spacing() -> None:
    style = _lookup(
        {
            "display": "flex",
            "position": "relative",
            "font-size": "14px",
            "font-family": "Inter",
            "font-weight": "600",
            "color": "rgb(0, 0, 0)",
            "background-color": "rgba(0, 0, 0, 0)",
            "border-width": "1px",
            "border-radius": "4px",
            "padding": "8px 12px",
            "margin": "0px",
        }
    )
    rows = build_tooltip_rows(Rect(0, 0, 10, 10), style, _lookup({}), full=True)
    labels = [row.label for row in rows]
    assert labels == [
        "Height",
        "Width",
        "Display",
        "Position",
        "Font",
        "Font Size",
        "Font Weight",
        "Color",
        "Border",
        "Radius",
        "Padding",
    ]
    font_size = rows[labels.index("Font Size")]
    assert font_size.editable_property == "font-size"
    assert rows[labels.index("Padding")].value == "8 12 8 12"
