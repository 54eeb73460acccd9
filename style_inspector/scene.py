"""JSON scene adapters: a static render tree that can stand in for a live page.

A scene file looks like::

    {
      "viewport": {"width": 1280, "height": 800},
      "scroll": {"x": 0, "y": 0},
      "elements": [
        {"id": "card", "tag": "div", "parent": "body", "rect": [100, 100, 50, 40],
         "classes": ["card"], "text": false, "styles": {"color": "rgb(0, 0, 0)"}}
      ]
    }

Rectangles are viewport-space, as a browser reports them. Order of
``elements`` is document order; ``element_at_point`` returns the last
(top-most) hit.
"""
from __future__ import annotations

import itertools
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from style_inspector.collaborators import Renderer, RenderTreeWalker, StyleResolver
from style_inspector.geometry import VIEWPORT, Rect, ScrollOffset, Size


class SceneError(ValueError):
    """Raised when a scene document cannot be interpreted."""


@dataclass(eq=False)
class SceneNode:
    id: str
    tag: str
    rect: Optional[Rect]
    parent: Optional[str] = None
    classes: Tuple[str, ...] = ()
    element_id: Optional[str] = None
    text: bool = False
    hidden: bool = False
    overlay: bool = False
    styles: Dict[str, str] = field(default_factory=dict)
    authored: Dict[str, str] = field(default_factory=dict)


def _rect_from(raw: Any, node_id: str) -> Optional[Rect]:
    if raw is None:
        return None
    if isinstance(raw, Mapping):
        raw = (raw.get("left"), raw.get("top"), raw.get("width"), raw.get("height"))
    try:
        left, top, width, height = (float(value) for value in raw)
    except (TypeError, ValueError) as exc:
        raise SceneError(f"Element {node_id!r} has an invalid rect: {raw!r}") from exc
    return Rect(left, top, width, height, VIEWPORT)


class Scene(RenderTreeWalker, StyleResolver):
    """Walker and resolver over an in-memory list of ``SceneNode``."""

    ROOT_ID = "body"

    def __init__(
        self,
        nodes: Iterable[SceneNode],
        *,
        viewport: Size = Size(1280, 800),
        scroll: ScrollOffset = ScrollOffset(),
    ) -> None:
        self._nodes: Dict[str, SceneNode] = {}
        self._order: List[str] = []
        for node in nodes:
            self.add(node)
        if self.ROOT_ID not in self._nodes:
            self._nodes[self.ROOT_ID] = SceneNode(self.ROOT_ID, "body", Rect(0, 0, viewport.width, viewport.height, VIEWPORT))
            self._order.insert(0, self.ROOT_ID)
        self._viewport = viewport
        self.scroll = scroll

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Scene":
        viewport_raw = data.get("viewport") or {}
        scroll_raw = data.get("scroll") or {}
        try:
            viewport = Size(float(viewport_raw.get("width", 1280)), float(viewport_raw.get("height", 800)))
            scroll = ScrollOffset(float(scroll_raw.get("x", 0)), float(scroll_raw.get("y", 0)))
        except (AttributeError, TypeError, ValueError) as exc:
            raise SceneError(f"Invalid viewport or scroll: {exc}") from exc
        nodes = []
        for index, entry in enumerate(data.get("elements") or []):
            if not isinstance(entry, Mapping):
                raise SceneError(f"Element #{index} is not an object")
            node_id = str(entry.get("id") or f"el{index}")
            nodes.append(
                SceneNode(
                    id=node_id,
                    tag=str(entry.get("tag") or "div"),
                    rect=_rect_from(entry.get("rect"), node_id),
                    parent=entry.get("parent", cls.ROOT_ID),
                    classes=tuple(str(name) for name in entry.get("classes") or ()),
                    element_id=entry.get("element_id"),
                    text=bool(entry.get("text", False)),
                    hidden=bool(entry.get("hidden", False)),
                    overlay=bool(entry.get("overlay", False)),
                    styles={str(k): str(v) for k, v in (entry.get("styles") or {}).items()},
                    authored={str(k): str(v) for k, v in (entry.get("authored") or {}).items()},
                )
            )
        return cls(nodes, viewport=viewport, scroll=scroll)

    @classmethod
    def load(cls, path: Path) -> "Scene":
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise SceneError(f"Failed to read scene {path}: {exc}") from exc
        if not isinstance(data, Mapping):
            raise SceneError(f"Scene {path} must be a JSON object")
        return cls.from_mapping(data)

    # -- scene editing -----------------------------------------------------

    def add(self, node: SceneNode) -> SceneNode:
        if node.id not in self._nodes:
            self._order.append(node.id)
        self._nodes[node.id] = node
        return node

    def remove(self, node_id: str) -> None:
        """Detach a node; its geometry disappears as for an element removed from the page."""
        self._nodes.pop(node_id, None)
        if node_id in self._order:
            self._order.remove(node_id)

    def node(self, node_id: str) -> SceneNode:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise SceneError(f"Unknown element id: {node_id!r}") from None

    # -- RenderTreeWalker ----------------------------------------------------

    def _live(self, element: Any) -> Optional[SceneNode]:
        if isinstance(element, SceneNode) and self._nodes.get(element.id) is element:
            return element
        return None

    def bounding_rect(self, element: Any) -> Optional[Rect]:
        node = self._live(element)
        return node.rect if node is not None else None

    def scroll_offset(self) -> ScrollOffset:
        return self.scroll

    def viewport_size(self) -> Size:
        return self._viewport

    def element_at_point(self, x: float, y: float) -> Optional[Any]:
        hit = None
        for node_id in self._order:
            node = self._nodes[node_id]
            rect = node.rect
            if rect is None or node.hidden:
                continue
            if rect.left <= x < rect.right and rect.top <= y < rect.bottom:
                hit = node
        return hit

    def parent(self, element: Any) -> Optional[Any]:
        node = self._live(element)
        if node is None or node.parent is None or node.id == self.ROOT_ID:
            return None
        return self._nodes.get(node.parent)

    def _children(self, node: SceneNode) -> List[SceneNode]:
        return [self._nodes[node_id] for node_id in self._order if self._nodes[node_id].parent == node.id and node_id != node.id]

    def first_child(self, element: Any) -> Optional[Any]:
        node = self._live(element)
        if node is None:
            return None
        children = self._children(node)
        return children[0] if children else None

    def _sibling(self, element: Any, step: int) -> Optional[Any]:
        node = self._live(element)
        parent = self.parent(node) if node is not None else None
        if parent is None:
            return None
        siblings = self._children(parent)
        index = siblings.index(node) + step
        return siblings[index] if 0 <= index < len(siblings) else None

    def previous_sibling(self, element: Any) -> Optional[Any]:
        return self._sibling(element, -1)

    def next_sibling(self, element: Any) -> Optional[Any]:
        return self._sibling(element, 1)

    def is_root(self, element: Any) -> bool:
        return isinstance(element, SceneNode) and element.id in (self.ROOT_ID, "html")

    def tag_name(self, element: Any) -> str:
        return element.tag

    def element_id(self, element: Any) -> Optional[str]:
        return element.element_id

    def class_names(self, element: Any) -> Sequence[str]:
        return element.classes

    def has_direct_text(self, element: Any) -> bool:
        return element.text

    def is_hidden(self, element: Any) -> bool:
        return element.hidden

    def is_overlay_element(self, element: Any) -> bool:
        return element.overlay

    def visible_elements(self) -> Iterable[Any]:
        return [self._nodes[node_id] for node_id in self._order if not self.is_root(self._nodes[node_id])]

    # -- StyleResolver -------------------------------------------------------

    def resolve(self, element: Any, key: str) -> Optional[str]:
        return element.styles.get(key)

    def authored(self, element: Any, key: str) -> Optional[str]:
        return element.authored.get(key)


class RecordingRenderer(Renderer):
    """Keeps the last commands per layer plus a log of every call."""

    def __init__(self) -> None:
        self.layers: Dict[str, Tuple[Any, ...]] = {}
        self.calls: List[Tuple[str, str]] = []

    def apply(self, layer: str, commands: Sequence[Any]) -> None:
        self.layers[layer] = tuple(commands)
        self.calls.append(("apply", layer))

    def clear(self, layer: str) -> None:
        self.layers.pop(layer, None)
        self.calls.append(("clear", layer))


class ManualScheduler:
    """``after``/``after_cancel`` pair whose callbacks run only on ``run_pending``."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.pending: Dict[int, Tuple[int, Callable[[], None]]] = {}

    def after(self, ms: int, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        self.pending[handle] = (ms, callback)
        return handle

    def after_cancel(self, handle: object) -> None:
        self.pending.pop(handle, None)  # type: ignore[arg-type]

    def run_pending(self) -> int:
        ran = 0
        while self.pending:
            handle = min(self.pending)
            _ms, callback = self.pending.pop(handle)
            callback()
            ran += 1
        return ran
