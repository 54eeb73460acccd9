from __future__ import annotations

import types

import pytest

from style_inspector.draw_commands import LAYERS
from style_inspector.modes import (
    EDIT,
    INSPECT,
    SKIM,
    SelectionState,
    find_editable_element,
    is_editable_text_element,
    normalise_mode,
    plan_transition,
)


def test_normalise_mode() -> None:
    assert normalise_mode(" Skim ") == SKIM
    assert normalise_mode("hover") is None
    assert normalise_mode(None) is None


@pytest.mark.parametrize("previous", [INSPECT, EDIT, SKIM])
@pytest.mark.parametrize("requested", [INSPECT, EDIT, SKIM])
def test_every_transition_clears_all_layers(previous: str, requested: str) -> None:
    transition = plan_transition(previous, requested)
    assert transition.clear_layers == LAYERS
    assert transition.unpin is (requested != INSPECT)
    assert transition.run_skim is (requested == SKIM)


def test_unknown_mode_rejected() -> None:
    with pytest.raises(ValueError):
        plan_transition(INSPECT, "zoom")


def test_selection_pin_follows_select_while_pinned() -> None:
    a, b = object(), object()
    state = SelectionState().select(a)
    assert state.current is a and not state.is_pinned
    pinned = state.pin(a).select(b)
    assert pinned.pinned is b
    unpinned = pinned.unpin()
    assert unpinned.current is b and not unpinned.is_pinned


def test_editable_text_elements() -> None:
    assert is_editable_text_element("H2", False)
    assert is_editable_text_element("div", True)
    assert not is_editable_text_element("div", False)
    assert not is_editable_text_element("img", True)
    assert not is_editable_text_element("p", True, is_overlay=True)


def _walker(tree: dict, *, texts=(), root="body"):
    return types.SimpleNamespace(
        is_root=lambda node: node == root,
        tag_name=lambda node: node.split(":")[0],
        has_direct_text=lambda node: node in texts,
        is_overlay_element=lambda node: False,
        parent=tree.get,
    )


def test_find_editable_walks_up_to_text_ancestor() -> None:
    tree = {"svg:icon": "a:link", "a:link": "div:card", "div:card": "body"}
    assert find_editable_element("svg:icon", _walker(tree)) == "a:link"


def test_find_editable_stops_at_root_and_depth() -> None:
    tree = {"img:x": "div:y", "div:y": "body"}
    assert find_editable_element("img:x", _walker(tree)) is None

    chain = {f"div:{i}": f"div:{i + 1}" for i in range(10)}
    walker = _walker(chain, texts={"div:7"})
    assert find_editable_element("div:0", walker, max_depth=5) is None
    assert find_editable_element("div:0", walker, max_depth=8) == "div:7"
