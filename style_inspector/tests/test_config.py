from __future__ import annotations

import json
from pathlib import Path

from style_inspector.config import (
    SETTINGS_ENV_VAR,
    EngineSettings,
    load_engine_settings,
    resolve_settings_path,
    settings_from_mapping,
)


def test_missing_or_invalid_file_uses_defaults(tmp_path: Path) -> None:
    assert load_engine_settings(None) == EngineSettings()
    assert load_engine_settings(tmp_path / "absent.json") == EngineSettings()
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert load_engine_settings(broken) == EngineSettings()
    listing = tmp_path / "list.json"
    listing.write_text("[1, 2]", encoding="utf-8")
    assert load_engine_settings(listing) == EngineSettings()


def test_values_are_coerced_and_clamped(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "gap": "24",
                "margin": -5,
                "skim_capacity": 9,
                "skim_throttle_ms": 1,
                "hover_panel_size": {"width": 300, "height": "bad"},
                "pinned_panel_size": [320, 400],
                "measurement_color": "  ",
                "highlight_color": "#ff0000",
                "edit_max_depth": True,
                "debug": 1,
            }
        ),
        encoding="utf-8",
    )

    settings = load_engine_settings(path)

    assert settings.gap == 24
    assert settings.margin == 0
    assert settings.skim_capacity == 3
    assert settings.skim_throttle_ms == 10
    assert settings.hover_panel_size == (300, 180)
    assert settings.pinned_panel_size == (320, 400)
    assert settings.measurement_color == EngineSettings().measurement_color
    assert settings.highlight_color == "#ff0000"
    assert settings.edit_max_depth == 5
    assert settings.debug is True


def test_empty_mapping_is_defaults() -> None:
    assert settings_from_mapping({}) == EngineSettings()


def test_settings_path_resolution(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(SETTINGS_ENV_VAR, raising=False)
    assert resolve_settings_path() is None

    (tmp_path / "style_inspector.json").write_text("{}", encoding="utf-8")
    assert resolve_settings_path().resolve() == (tmp_path / "style_inspector.json").resolve()

    monkeypatch.setenv(SETTINGS_ENV_VAR, str(tmp_path / "env.json"))
    assert resolve_settings_path() == tmp_path / "env.json"
    assert resolve_settings_path(str(tmp_path / "cli.json")) == tmp_path / "cli.json"
