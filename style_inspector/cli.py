"""Replay a JSON scene through the overlay engine and print what it would draw."""
from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional

from style_inspector.config import load_engine_settings, resolve_settings_path
from style_inspector.draw_commands import LAYERS, MEASUREMENT_LAYER, DrawLabel
from style_inspector.engine import OverlayEngine, OverlayUpdate
from style_inspector.logging_utils import configure_logging
from style_inspector.modes import SKIM
from style_inspector.scene import ManualScheduler, RecordingRenderer, Scene, SceneError


def _fail(message: str, *, code: int = 1) -> None:
    print(f"[style-inspector] ERROR: {message}", file=sys.stderr)
    raise SystemExit(code)


def _describe(update: OverlayUpdate) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    if update.placement is not None:
        payload["placement"] = asdict(update.placement)
    if update.highlight is not None:
        payload["highlight"] = {
            "label": update.highlight.label_text,
            "position": update.highlight.label_position,
            "rect": list(update.highlight.rect.as_tuple()),
        }
    if update.tooltip_rows:
        payload["rows"] = [{"label": row.label, "value": row.value} for row in update.tooltip_rows]
    if update.breadcrumb:
        payload["breadcrumb"] = list(update.breadcrumb)
    if update.measurements:
        payload["measurements"] = [
            {"text": label.text, "x": label.anchor_x, "y": label.anchor_y}
            for measurement in update.measurements
            for label in measurement.labels
        ]
    if update.skim_labels:
        payload["skim"] = [
            {"element": getattr(label.ref, "id", None), "left": label.left, "top": label.top, "text": label.text}
            for label in update.skim_labels
        ]
    return payload


def _build_engine(scene: Scene, args: argparse.Namespace) -> tuple[OverlayEngine, ManualScheduler, RecordingRenderer]:
    settings = load_engine_settings(resolve_settings_path(args.settings))
    scheduler = ManualScheduler()
    renderer = RecordingRenderer()
    engine = OverlayEngine(
        scene,
        scene,
        renderer,
        after=scheduler.after,
        after_cancel=scheduler.after_cancel,
        settings=settings,
    )
    engine.activate()
    return engine, scheduler, renderer


def _cmd_inspect(scene: Scene, args: argparse.Namespace) -> Dict[str, Any]:
    engine, _scheduler, _renderer = _build_engine(scene, args)
    target = scene.node(args.element)
    update = engine.pin(target) if args.pinned else engine.select(target)
    return _describe(update)


def _cmd_measure(scene: Scene, args: argparse.Namespace) -> Dict[str, Any]:
    engine, scheduler, renderer = _build_engine(scene, args)
    source = scene.node(args.source)
    target = scene.node(args.target)
    if target.rect is None:
        _fail(f"Element {args.target!r} has no geometry")
    engine.pin(source)
    engine.pointer_move(target.rect.center_x, target.rect.center_y)
    scheduler.run_pending()
    commands = renderer.layers.get(MEASUREMENT_LAYER, ())
    return {
        "source": args.source,
        "target": args.target,
        "labels": [command.text for command in commands if isinstance(command, DrawLabel)],
    }


def _cmd_skim(scene: Scene, args: argparse.Namespace) -> Dict[str, Any]:
    engine, _scheduler, _renderer = _build_engine(scene, args)
    update = engine.set_mode(SKIM)
    ids = [token.strip() for token in (args.properties or "").split(",") if token.strip()]
    if ids:
        update = engine.set_skim_properties(ids)
    return _describe(update)


def _cmd_layers(scene: Scene, args: argparse.Namespace) -> Dict[str, Any]:
    return {"layers": list(LAYERS), "elements": [node.id for node in scene.visible_elements()]}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Style inspector overlay engine: replay a JSON scene.")
    parser.add_argument("scene", help="Path to the scene JSON file")
    parser.add_argument("--settings", help="Engine settings JSON (defaults to $STYLE_INSPECTOR_SETTINGS)")
    parser.add_argument("--log-dir", help="Write a rotating log file into this directory instead of stderr")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    inspect_parser = subparsers.add_parser("inspect", help="Select an element and print tooltip placement")
    inspect_parser.add_argument("element", help="Scene element id")
    inspect_parser.add_argument("--pinned", action="store_true", help="Pin instead of hover")
    inspect_parser.set_defaults(handler=_cmd_inspect)

    measure_parser = subparsers.add_parser("measure", help="Pin one element and measure to another")
    measure_parser.add_argument("source", help="Pinned element id")
    measure_parser.add_argument("target", help="Hovered element id")
    measure_parser.set_defaults(handler=_cmd_measure)

    skim_parser = subparsers.add_parser("skim", help="Lay out skim labels for the whole scene")
    skim_parser.add_argument("--properties", help="Comma-separated skim property ids (max 3)")
    skim_parser.set_defaults(handler=_cmd_skim)

    layers_parser = subparsers.add_parser("elements", help="List overlay layers and scene elements")
    layers_parser.set_defaults(handler=_cmd_layers)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(Path(args.log_dir).expanduser() if args.log_dir else None, debug=args.debug)
    try:
        scene = Scene.load(Path(args.scene).expanduser())
        result = args.handler(scene, args)
    except SceneError as exc:
        _fail(str(exc))
    print(json.dumps(result, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
