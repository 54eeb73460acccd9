"""Engine settings loader (JSON file, coerced and clamped)."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

SETTINGS_ENV_VAR = "STYLE_INSPECTOR_SETTINGS"
SETTINGS_FILENAME = "style_inspector.json"


@dataclass(frozen=True)
class EngineSettings:
    gap: int = 16
    margin: int = 16
    hover_panel_size: Tuple[int, int] = (240, 180)
    pinned_panel_size: Tuple[int, int] = (280, 360)
    frame_ms: int = 16
    skim_throttle_ms: int = 100
    skim_capacity: int = 3
    edit_max_depth: int = 5
    breadcrumb_depth: int = 5
    highlight_label_threshold: int = 30
    class_label_max: int = 30
    measurement_color: str = "#cf56e6"
    highlight_color: str = "#0d99ff"
    debug: bool = False


def _coerce_int(raw: Any, fallback: int, *, minimum: int, maximum: Optional[int] = None) -> int:
    if isinstance(raw, bool):
        return fallback
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return fallback
    value = max(minimum, value)
    if maximum is not None:
        value = min(maximum, value)
    return value


def _coerce_size(raw: Any, fallback: Tuple[int, int]) -> Tuple[int, int]:
    if isinstance(raw, Mapping):
        raw = (raw.get("width"), raw.get("height"))
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        return fallback
    return (
        _coerce_int(raw[0], fallback[0], minimum=1),
        _coerce_int(raw[1], fallback[1], minimum=1),
    )


def _coerce_color(raw: Any, fallback: str) -> str:
    if not isinstance(raw, str):
        return fallback
    token = raw.strip()
    return token or fallback


def settings_from_mapping(data: Mapping[str, Any]) -> EngineSettings:
    defaults = EngineSettings()
    return EngineSettings(
        gap=_coerce_int(data.get("gap"), defaults.gap, minimum=0),
        margin=_coerce_int(data.get("margin"), defaults.margin, minimum=0),
        hover_panel_size=_coerce_size(data.get("hover_panel_size"), defaults.hover_panel_size),
        pinned_panel_size=_coerce_size(data.get("pinned_panel_size"), defaults.pinned_panel_size),
        frame_ms=_coerce_int(data.get("frame_ms"), defaults.frame_ms, minimum=0, maximum=1000),
        skim_throttle_ms=_coerce_int(data.get("skim_throttle_ms"), defaults.skim_throttle_ms, minimum=10, maximum=5000),
        skim_capacity=_coerce_int(data.get("skim_capacity"), defaults.skim_capacity, minimum=1, maximum=3),
        edit_max_depth=_coerce_int(data.get("edit_max_depth"), defaults.edit_max_depth, minimum=1),
        breadcrumb_depth=_coerce_int(data.get("breadcrumb_depth"), defaults.breadcrumb_depth, minimum=1),
        highlight_label_threshold=_coerce_int(
            data.get("highlight_label_threshold"), defaults.highlight_label_threshold, minimum=0
        ),
        class_label_max=_coerce_int(data.get("class_label_max"), defaults.class_label_max, minimum=1),
        measurement_color=_coerce_color(data.get("measurement_color"), defaults.measurement_color),
        highlight_color=_coerce_color(data.get("highlight_color"), defaults.highlight_color),
        debug=bool(data.get("debug", defaults.debug)),
    )


def load_engine_settings(path: Optional[Path]) -> EngineSettings:
    """Read settings JSON, returning defaults when the file is missing or invalid."""

    if path is None:
        return EngineSettings()
    try:
        raw_text = path.read_text(encoding="utf-8")
        data = json.loads(raw_text)
    except (FileNotFoundError, OSError, json.JSONDecodeError):
        return EngineSettings()
    if not isinstance(data, dict):
        return EngineSettings()
    return settings_from_mapping(data)


def resolve_settings_path(explicit: Optional[str] = None) -> Optional[Path]:
    if explicit:
        return Path(explicit).expanduser()
    env_override = os.getenv(SETTINGS_ENV_VAR)
    if env_override:
        return Path(env_override).expanduser()
    candidate = Path.cwd() / SETTINGS_FILENAME
    return candidate if candidate.exists() else None
