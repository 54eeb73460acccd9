from __future__ import annotations

import json
from pathlib import Path

import pytest

from style_inspector import cli
from style_inspector.geometry import VIEWPORT
from style_inspector.scene import Scene, SceneError

SCENE = {
    "viewport": {"width": 800, "height": 600},
    "scroll": {"x": 0, "y": 200},
    "elements": [
        {"id": "header", "tag": "header", "rect": [0, 0, 100, 20]},
        {"id": "intro", "tag": "p", "rect": [0, 40, 100, 20], "text": True, "styles": {"font-size": "16px"}},
        {
            "id": "card",
            "tag": "div",
            "rect": {"left": 100, "top": 100, "width": 50, "height": 50},
            "classes": ["card"],
            "authored": {"width": "50%"},
        },
    ],
}


@pytest.fixture
def scene_path(tmp_path: Path) -> Path:
    path = tmp_path / "scene.json"
    path.write_text(json.dumps(SCENE), encoding="utf-8")
    return path


def _run(capsys, argv: list[str]) -> dict:
    assert cli.main(argv) == 0
    return json.loads(capsys.readouterr().out)


def test_scene_from_mapping() -> None:
    scene = Scene.from_mapping(SCENE)
    card = scene.node("card")
    assert card.rect.space == VIEWPORT
    assert scene.scroll_offset().y == 200
    assert scene.parent(card) is scene.node("body")
    assert scene.element_at_point(120, 120) is card


def test_scene_rejects_bad_rect() -> None:
    with pytest.raises(SceneError):
        Scene.from_mapping({"elements": [{"id": "x", "rect": [1, 2]}]})


def test_inspect_prints_document_space_placement(scene_path: Path, capsys) -> None:
    result = _run(capsys, [str(scene_path), "inspect", "card"])
    assert result["placement"] == {"side": "right", "left": 166.0, "top": 300.0}
    assert result["highlight"]["label"] == "Div.card"
    assert result["rows"][1] == {"label": "Width", "value": "50px (50%)"}


def test_measure_prints_gap_label(scene_path: Path, capsys) -> None:
    result = _run(capsys, [str(scene_path), "measure", "header", "intro"])
    assert result["labels"] == ["20"]


def test_skim_defaults_to_font_size(scene_path: Path, capsys) -> None:
    result = _run(capsys, [str(scene_path), "skim"])
    assert [entry["text"] for entry in result["skim"]] == ["FS: 16px"]
    assert result["skim"][0]["element"] == "intro"


def test_unknown_element_exits_with_error(scene_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(scene_path), "inspect", "missing"])
    assert excinfo.value.code == 1
    assert "Unknown element id" in capsys.readouterr().err
