"""Adapter seams for the host page: style resolution, render-tree queries, painting.

The engine never touches a live element beyond passing its reference back to
these adapters. Hosts subclass them; tests use small fakes.
"""
from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

from style_inspector.geometry import Rect, ScrollOffset, Size


class StyleResolver:
    def resolve(self, element: Any, key: str) -> Optional[str]: ...
    def authored(self, element: Any, key: str) -> Optional[str]: ...


class RenderTreeWalker:
    def bounding_rect(self, element: Any) -> Optional[Rect]: ...
    def scroll_offset(self) -> ScrollOffset: ...
    def viewport_size(self) -> Size: ...
    def element_at_point(self, x: float, y: float) -> Optional[Any]: ...
    def parent(self, element: Any) -> Optional[Any]: ...
    def first_child(self, element: Any) -> Optional[Any]: ...
    def previous_sibling(self, element: Any) -> Optional[Any]: ...
    def next_sibling(self, element: Any) -> Optional[Any]: ...
    def is_root(self, element: Any) -> bool: ...
    def tag_name(self, element: Any) -> str: ...
    def element_id(self, element: Any) -> Optional[str]: ...
    def class_names(self, element: Any) -> Sequence[str]: ...
    def has_direct_text(self, element: Any) -> bool: ...
    def is_hidden(self, element: Any) -> bool: ...
    def is_overlay_element(self, element: Any) -> bool: ...
    def visible_elements(self) -> Iterable[Any]: ...


class Renderer:
    def apply(self, layer: str, commands: Sequence[Any]) -> None: ...
    def clear(self, layer: str) -> None: ...
