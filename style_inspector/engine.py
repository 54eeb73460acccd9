"""Overlay engine: pure reducers over ``EngineState`` plus the stateful shell.

Reducers take the current immutable state and already-resolved geometry and
return ``(new_state, OverlayUpdate)``. ``OverlayEngine`` is the thin shell that
queries the host adapters, runs the reducers, applies the resulting draw
commands through the Renderer and owns the frame/throttle scheduling. One
engine instance lives per activation; nothing here is module-global.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional, Sequence, Tuple

from style_inspector.collaborators import Renderer, RenderTreeWalker, StyleResolver
from style_inspector.config import EngineSettings
from style_inspector.draw_commands import (
    HIGHLIGHT_LAYER,
    LAYERS,
    MEASUREMENT_LAYER,
    SKIM_LAYER,
    TOOLTIP_LAYER,
    DrawCommand,
    highlight_commands,
    measurement_commands,
    skim_commands,
    tooltip_commands,
)
from style_inspector.geometry import VIEWPORT, Rect, Size, to_document, viewport_rect
from style_inspector.highlight import Highlight, build_breadcrumb, build_highlight
from style_inspector.logging_utils import LOGGER_NAME
from style_inspector.measurements import EMPTY_PAIR, MeasuredPair, MeasurementSet, render_relations, should_render
from style_inspector.modes import (
    EDIT,
    INSPECT,
    SKIM,
    SelectionState,
    find_editable_element,
    normalise_mode,
    plan_transition,
)
from style_inspector.placement import PlacementCandidate, PlacementMemory, place
from style_inspector.relations import classify
from style_inspector.scheduling import AfterCancelFn, AfterFn, FrameCoalescer, Throttle
from style_inspector.skim import SkimConfig, SkimElement, SkimLabel, StyleSource, layout_skim_labels
from style_inspector.style_values import TooltipRow, build_tooltip_rows, element_label, friendly_tag_name

_LOGGER = logging.getLogger(LOGGER_NAME)

INSPECT_LAYERS: Tuple[str, ...] = (TOOLTIP_LAYER, HIGHLIGHT_LAYER, MEASUREMENT_LAYER)
ARROW_DIRECTIONS = {"ArrowUp": "up", "ArrowDown": "down", "ArrowLeft": "left", "ArrowRight": "right"}


@dataclass(frozen=True, eq=False)
class ResolvedElement:
    """Everything the reducers need to know about one element; ``rect`` is document-space."""

    ref: Any
    rect: Rect
    viewport_top: float
    tag: str
    classes: Tuple[str, ...]
    title: str
    hover_rows: Tuple[TooltipRow, ...]
    full_rows: Tuple[TooltipRow, ...]
    breadcrumb: Tuple[str, ...] = ()


@dataclass(frozen=True)
class EditRequest:
    element: Any


@dataclass(frozen=True, eq=False)
class EngineState:
    mode: str = INSPECT
    selection: SelectionState = SelectionState()
    last_side: Optional[str] = None
    measured: MeasuredPair = EMPTY_PAIR
    skim_ids: Tuple[str, ...] = ()

    def reset_caches(self) -> "EngineState":
        return replace(self, last_side=None, measured=EMPTY_PAIR)


@dataclass(frozen=True)
class OverlayUpdate:
    clear: Tuple[str, ...] = ()
    draw: Tuple[Tuple[str, Tuple[DrawCommand, ...]], ...] = ()
    placement: Optional[PlacementCandidate] = None
    highlight: Optional[Highlight] = None
    measurements: Tuple[MeasurementSet, ...] = ()
    skim_labels: Tuple[SkimLabel, ...] = ()
    tooltip_rows: Tuple[TooltipRow, ...] = ()
    breadcrumb: Tuple[str, ...] = ()
    edit_request: Optional[EditRequest] = None

    @property
    def is_empty(self) -> bool:
        return not self.clear and not self.draw and self.edit_request is None

    def layer(self, name: str) -> Optional[Tuple[DrawCommand, ...]]:
        for layer_name, commands in self.draw:
            if layer_name == name:
                return commands
        return None


NO_UPDATE = OverlayUpdate()


# ---------------------------------------------------------------------------
# Pure reducers
# ---------------------------------------------------------------------------


def reduce_hover(
    state: EngineState,
    element: ResolvedElement,
    viewport: Rect,
    settings: EngineSettings,
) -> Tuple[EngineState, OverlayUpdate]:
    """Tooltip and highlight for ``element``; measurement is cleared."""

    pinned = state.selection.is_pinned
    width, height = settings.pinned_panel_size if pinned else settings.hover_panel_size
    memory = PlacementMemory(state.last_side)
    placement = place(element.rect, Size(width, height), viewport, settings.gap, memory, margin=settings.margin)
    highlight = build_highlight(
        element.rect,
        element.viewport_top,
        element.tag,
        element.classes,
        label_threshold=settings.highlight_label_threshold,
        class_label_max=settings.class_label_max,
    )
    rows = element.full_rows if pinned else element.hover_rows
    update = OverlayUpdate(
        clear=(MEASUREMENT_LAYER,),
        draw=(
            (TOOLTIP_LAYER, tooltip_commands(placement, width, height, element.title, rows, pinned=pinned)),
            (HIGHLIGHT_LAYER, highlight_commands(highlight, color=settings.highlight_color)),
        ),
        placement=placement,
        highlight=highlight,
        tooltip_rows=rows,
        breadcrumb=element.breadcrumb,
    )
    new_state = replace(
        state,
        selection=state.selection.select(element.ref),
        last_side=memory.last_side,
        measured=EMPTY_PAIR,
    )
    return new_state, update


def reduce_select(
    state: EngineState,
    element: ResolvedElement,
    viewport: Rect,
    settings: EngineSettings,
) -> Tuple[EngineState, OverlayUpdate]:
    if state.mode != INSPECT:
        return state, NO_UPDATE
    return reduce_hover(state.reset_caches(), element, viewport, settings)


def reduce_pin(
    state: EngineState,
    element: ResolvedElement,
    viewport: Rect,
    settings: EngineSettings,
) -> Tuple[EngineState, OverlayUpdate]:
    if state.mode != INSPECT:
        return state, NO_UPDATE
    pinned_state = replace(state.reset_caches(), selection=state.selection.pin(element.ref))
    return reduce_hover(pinned_state, element, viewport, settings)


def reduce_unpin(
    state: EngineState,
    element: Optional[ResolvedElement],
    viewport: Rect,
    settings: EngineSettings,
) -> Tuple[EngineState, OverlayUpdate]:
    """Drop the pin; the last pinned element goes back to the hover presentation."""

    if not state.selection.is_pinned:
        return state, NO_UPDATE
    unpinned = replace(state.reset_caches(), selection=state.selection.unpin())
    if element is None or unpinned.mode != INSPECT:
        return unpinned, OverlayUpdate(clear=(MEASUREMENT_LAYER,))
    return reduce_hover(unpinned, element, viewport, settings)


def reduce_measure(
    state: EngineState,
    source_rect: Rect,
    target: Optional[Any],
    target_rect: Optional[Rect],
    settings: EngineSettings,
) -> Tuple[EngineState, OverlayUpdate]:
    """Measure from the pinned element to ``target``; ``None`` target hides the measurement."""

    source = state.selection.pinned
    if source is None:
        return state, NO_UPDATE
    if target is None or target_rect is None:
        if state.measured is EMPTY_PAIR:
            return state, NO_UPDATE
        return replace(state, measured=EMPTY_PAIR), OverlayUpdate(clear=(MEASUREMENT_LAYER,))
    if not should_render(state.measured, source, target):
        return state, NO_UPDATE
    measurement = render_relations(classify(source_rect, target_rect))
    new_state = replace(state, measured=MeasuredPair(source, target))
    if measurement.is_empty:
        return new_state, OverlayUpdate(clear=(MEASUREMENT_LAYER,))
    update = OverlayUpdate(
        clear=(MEASUREMENT_LAYER,),
        draw=((MEASUREMENT_LAYER, measurement_commands([measurement], color=settings.measurement_color)),),
        measurements=(measurement,),
    )
    return new_state, update


def reduce_mode(state: EngineState, requested: str) -> Tuple[EngineState, OverlayUpdate]:
    transition = plan_transition(state.mode, requested)
    selection = state.selection.unpin() if transition.unpin else state.selection
    skim_ids = state.skim_ids
    if transition.run_skim:
        config = SkimConfig(skim_ids)
        config.ensure_default()
        skim_ids = config.ids
    new_state = replace(
        state.reset_caches(),
        mode=transition.mode,
        selection=selection,
        skim_ids=skim_ids,
    )
    return new_state, OverlayUpdate(clear=transition.clear_layers)


def reduce_skim_selection(
    state: EngineState,
    ids: Sequence[str],
    settings: EngineSettings,
) -> Tuple[EngineState, SkimConfig]:
    config = SkimConfig(capacity=settings.skim_capacity)
    config.replace(ids)
    return replace(state, skim_ids=config.ids), config


def reduce_skim(
    state: EngineState,
    elements: Sequence[SkimElement],
    settings: EngineSettings,
) -> Tuple[EngineState, OverlayUpdate]:
    if state.mode != SKIM:
        return state, NO_UPDATE
    labels = layout_skim_labels(elements, SkimConfig(state.skim_ids, capacity=settings.skim_capacity))
    update = OverlayUpdate(
        clear=(SKIM_LAYER,),
        draw=((SKIM_LAYER, skim_commands(labels)),) if labels else (),
        skim_labels=labels,
    )
    return state, update


def reduce_lost(state: EngineState) -> Tuple[EngineState, OverlayUpdate]:
    """Selected element vanished from the render tree: fall back to no selection."""

    return replace(state.reset_caches(), selection=SelectionState()), OverlayUpdate(clear=INSPECT_LAYERS)


# ---------------------------------------------------------------------------
# Stateful shell
# ---------------------------------------------------------------------------


class OverlayEngine:
    """Owns one activation's state, caches and scheduled work."""

    def __init__(
        self,
        walker: RenderTreeWalker,
        resolver: StyleResolver,
        renderer: Renderer,
        *,
        after: AfterFn,
        after_cancel: AfterCancelFn,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self._walker = walker
        self._resolver = resolver
        self._renderer = renderer
        self._settings = settings or EngineSettings()
        self._frames = FrameCoalescer(after=after, after_cancel=after_cancel, frame_ms=self._settings.frame_ms)
        self._skim_throttle = Throttle(
            after=after, after_cancel=after_cancel, interval_ms=self._settings.skim_throttle_ms
        )
        self._state: Optional[EngineState] = None

    # -- introspection -----------------------------------------------------

    @property
    def active(self) -> bool:
        return self._state is not None

    @property
    def state(self) -> Optional[EngineState]:
        return self._state

    @property
    def mode(self) -> Optional[str]:
        return self._state.mode if self._state is not None else None

    @property
    def is_pinned(self) -> bool:
        return self._state is not None and self._state.selection.is_pinned

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    # -- lifecycle ---------------------------------------------------------

    def activate(self) -> None:
        if self._state is not None:
            return
        self._state = EngineState()
        _LOGGER.debug("Overlay engine activated")

    def deactivate(self) -> None:
        if self._state is None:
            return
        self._cancel_scheduled()
        self._state = None
        try:
            self._apply(OverlayUpdate(clear=LAYERS))
        except Exception as exc:
            _LOGGER.warning("Failed to clear overlay layers on deactivate: %s", exc)
        _LOGGER.debug("Overlay engine deactivated")

    # -- selection ---------------------------------------------------------

    def select(self, element: Any) -> OverlayUpdate:
        return self._guarded("select", lambda state: self._select(state, element))

    def pin(self, element: Any) -> OverlayUpdate:
        return self._guarded("pin", lambda state: self._pin(state, element))

    def unpin(self) -> OverlayUpdate:
        return self._guarded("unpin", self._unpin)

    def navigate(self, direction: str) -> OverlayUpdate:
        return self._guarded("navigate", lambda state: self._navigate(state, direction))

    # -- pointer and keyboard ----------------------------------------------

    def pointer_move(self, x: float, y: float) -> None:
        """Defer to the next frame; a newer move replaces a pending one."""

        if self._state is None:
            return
        self._frames.request(lambda: self._guarded("pointer_move", lambda state: self._pointer(state, x, y)))

    def click(self, element: Any) -> OverlayUpdate:
        return self._guarded("click", lambda state: self._click(state, element))

    def double_click(self, element: Any) -> OverlayUpdate:
        return self._guarded("double_click", lambda state: self._double_click(state, element))

    def key(self, name: str, *, editing: bool = False) -> OverlayUpdate:
        return self._guarded("key", lambda state: self._key(state, name, editing))

    # -- modes and skim ----------------------------------------------------

    def set_mode(self, mode: str) -> OverlayUpdate:
        return self._guarded("set_mode", lambda state: self._set_mode(state, mode))

    def set_skim_properties(self, ids: Sequence[str]) -> OverlayUpdate:
        return self._guarded("set_skim_properties", lambda state: self._set_skim_properties(state, ids))

    def toggle_skim_property(self, property_id: str) -> OverlayUpdate:
        def _toggle(state: EngineState) -> OverlayUpdate:
            config = SkimConfig(state.skim_ids, capacity=self._settings.skim_capacity)
            config.toggle(property_id)
            return self._set_skim_properties(state, config.ids)

        return self._guarded("toggle_skim_property", _toggle)

    def scroll(self) -> None:
        self._schedule_skim_refresh("scroll")

    def resize(self) -> None:
        self._schedule_skim_refresh("resize")

    # -- internals ---------------------------------------------------------

    def _guarded(self, label: str, action: Callable[[EngineState], OverlayUpdate]) -> OverlayUpdate:
        state = self._state
        if state is None:
            return NO_UPDATE
        try:
            return action(state)
        except Exception as exc:
            _LOGGER.warning("Overlay %s failed; clearing overlay: %s", label, exc)
            try:
                self._commit(*reduce_lost(state))
            except Exception as clear_exc:
                _LOGGER.warning("Failed to clear overlay after %s error: %s", label, clear_exc)
            return NO_UPDATE

    def _commit(self, state: EngineState, update: OverlayUpdate) -> OverlayUpdate:
        self._state = state
        self._apply(update)
        return update

    def _apply(self, update: OverlayUpdate) -> None:
        for layer in update.clear:
            self._renderer.clear(layer)
        for layer, commands in update.draw:
            self._renderer.apply(layer, commands)

    def _cancel_scheduled(self) -> None:
        self._frames.cancel()
        self._skim_throttle.cancel()

    def _viewport(self) -> Rect:
        return viewport_rect(self._walker.viewport_size(), self._walker.scroll_offset())

    def _document_rect(self, element: Any) -> Optional[Rect]:
        rect = self._walker.bounding_rect(element)
        if rect is None:
            return None
        return to_document(rect, self._walker.scroll_offset())

    def _resolve(self, element: Any) -> Optional[ResolvedElement]:
        walker = self._walker
        raw = walker.bounding_rect(element)
        if raw is None:
            return None
        scroll = walker.scroll_offset()
        rect = to_document(raw, scroll)
        viewport_top = raw.top if raw.space == VIEWPORT else raw.top - scroll.y
        tag = walker.tag_name(element)
        classes = tuple(name for name in walker.class_names(element) if name)
        title = friendly_tag_name(tag)
        if classes:
            title = f"{title} .{'.'.join(classes)}"

        def style(key: str) -> Optional[str]:
            return self._resolver.resolve(element, key)

        def authored(key: str) -> Optional[str]:
            return self._resolver.authored(element, key)

        crumbs = build_breadcrumb(
            element,
            parent_fn=walker.parent,
            is_root_fn=walker.is_root,
            label_fn=lambda node: element_label(walker.tag_name(node), walker.element_id(node), walker.class_names(node)),
            max_depth=self._settings.breadcrumb_depth,
        )
        return ResolvedElement(
            ref=element,
            rect=rect,
            viewport_top=viewport_top,
            tag=tag,
            classes=classes,
            title=title,
            hover_rows=build_tooltip_rows(rect, style, authored, full=False),
            full_rows=build_tooltip_rows(rect, style, authored, full=True),
            breadcrumb=tuple(label for _node, label in crumbs),
        )

    def _ignored(self, element: Any) -> bool:
        return element is None or self._walker.is_overlay_element(element)

    def _select(self, state: EngineState, element: Any) -> OverlayUpdate:
        self._frames.cancel()
        if self._ignored(element) or state.mode != INSPECT:
            return NO_UPDATE
        resolved = self._resolve(element)
        if resolved is None:
            _LOGGER.debug("Selected element has no geometry; clearing selection")
            return self._commit(*reduce_lost(state))
        return self._commit(*reduce_select(state, resolved, self._viewport(), self._settings))

    def _pin(self, state: EngineState, element: Any) -> OverlayUpdate:
        if self._ignored(element) or state.mode != INSPECT:
            return NO_UPDATE
        self._frames.cancel()
        resolved = self._resolve(element)
        if resolved is None:
            return self._commit(*reduce_lost(state))
        return self._commit(*reduce_pin(state, resolved, self._viewport(), self._settings))

    def _unpin(self, state: EngineState) -> OverlayUpdate:
        if not state.selection.is_pinned:
            return NO_UPDATE
        resolved = self._resolve(state.selection.pinned)
        return self._commit(*reduce_unpin(state, resolved, self._viewport(), self._settings))

    def _navigate(self, state: EngineState, direction: str) -> OverlayUpdate:
        current = state.selection.current
        if current is None:
            return NO_UPDATE
        walker = self._walker
        if direction == "up":
            target = None if walker.is_root(current) else walker.parent(current)
        elif direction == "down":
            target = walker.first_child(current)
        elif direction == "left":
            target = walker.previous_sibling(current)
        elif direction == "right":
            target = walker.next_sibling(current)
        else:
            _LOGGER.debug("Ignoring unknown navigation direction %s", direction)
            return NO_UPDATE
        if self._ignored(target) or walker.is_root(target):
            return NO_UPDATE
        return self._select(state, target)

    def _pointer(self, state: EngineState, x: float, y: float) -> OverlayUpdate:
        walker = self._walker
        element = walker.element_at_point(x, y)
        if self._ignored(element):
            return NO_UPDATE
        if state.selection.is_pinned:
            pinned = state.selection.pinned
            source_rect = self._document_rect(pinned)
            if source_rect is None:
                _LOGGER.debug("Pinned element left the render tree; clearing selection")
                return self._commit(*reduce_lost(state))
            target = None if element is pinned or walker.is_root(element) else element
            target_rect = self._document_rect(target) if target is not None else None
            return self._commit(*reduce_measure(state, source_rect, target, target_rect, self._settings))
        if state.mode != INSPECT:
            return NO_UPDATE
        resolved = self._resolve(element)
        if resolved is None:
            _LOGGER.debug("Hovered element has no geometry; clearing selection")
            return self._commit(*reduce_lost(state))
        return self._commit(*reduce_hover(state, resolved, self._viewport(), self._settings))

    def _click(self, state: EngineState, element: Any) -> OverlayUpdate:
        if self._ignored(element):
            return NO_UPDATE
        if state.mode == EDIT:
            editable = find_editable_element(element, self._walker, max_depth=self._settings.edit_max_depth)
            if editable is None:
                return NO_UPDATE
            return OverlayUpdate(edit_request=EditRequest(editable))
        if state.mode != INSPECT:
            return NO_UPDATE
        return self._pin(state, element)

    def _double_click(self, state: EngineState, element: Any) -> OverlayUpdate:
        if self._ignored(element):
            return NO_UPDATE
        editable = find_editable_element(element, self._walker, max_depth=self._settings.edit_max_depth)
        if editable is None:
            return NO_UPDATE
        if state.mode != EDIT:
            self._set_mode(state, EDIT)
        return OverlayUpdate(edit_request=EditRequest(editable))

    def _key(self, state: EngineState, name: str, editing: bool) -> OverlayUpdate:
        if name == "Escape":
            if state.selection.is_pinned:
                return self._unpin(state)
            if state.mode == EDIT and not editing:
                return self._set_mode(state, INSPECT)
            return NO_UPDATE
        direction = ARROW_DIRECTIONS.get(name)
        if direction is not None and not editing:
            return self._navigate(state, direction)
        return NO_UPDATE

    def _set_mode(self, state: EngineState, mode: str) -> OverlayUpdate:
        if normalise_mode(mode) is None:
            _LOGGER.debug("Ignoring unknown mode %r", mode)
            return NO_UPDATE
        self._cancel_scheduled()
        new_state, update = reduce_mode(state, mode)
        self._commit(new_state, update)
        _LOGGER.debug("Mode set to %s (skim=%s)", new_state.mode, ",".join(new_state.skim_ids) or "-")
        if new_state.mode == SKIM:
            skim_update = self._refresh_skim()
            return replace(skim_update, clear=update.clear + skim_update.clear)
        return update

    def _set_skim_properties(self, state: EngineState, ids: Sequence[str]) -> OverlayUpdate:
        new_state, config = reduce_skim_selection(state, ids, self._settings)
        self._state = new_state
        if len(config) < len(set(ids)):
            _LOGGER.debug("Skim selection truncated to %s", ",".join(config.ids))
        if new_state.mode != SKIM:
            return NO_UPDATE
        self._skim_throttle.cancel()
        return self._refresh_skim()

    def _schedule_skim_refresh(self, reason: str) -> None:
        state = self._state
        if state is None or state.mode != SKIM:
            return
        if not self._skim_throttle.pending:
            _LOGGER.debug("Skim refresh scheduled (%s)", reason)
        self._skim_throttle.trigger(lambda: self._guarded("skim_refresh", lambda _state: self._refresh_skim()))

    def _refresh_skim(self) -> OverlayUpdate:
        state = self._state
        if state is None or state.mode != SKIM:
            return NO_UPDATE
        elements = self._collect_skim_elements(state)
        return self._commit(*reduce_skim(state, elements, self._settings))

    def _collect_skim_elements(self, state: EngineState) -> Tuple[SkimElement, ...]:
        walker = self._walker
        descriptors = SkimConfig(state.skim_ids, capacity=self._settings.skim_capacity).descriptors
        style_keys = {"display", "visibility"}
        style_keys.update(d.source.key for d in descriptors if isinstance(d.source, StyleSource))
        needs_text = any(d.text_gated for d in descriptors)
        scroll = walker.scroll_offset()
        collected: list[SkimElement] = []
        for element in walker.visible_elements():
            if walker.is_overlay_element(element):
                continue
            raw = walker.bounding_rect(element)
            if raw is None:
                continue
            collected.append(
                SkimElement(
                    ref=element,
                    rect=to_document(raw, scroll),
                    tag=walker.tag_name(element),
                    styles={key: self._resolver.resolve(element, key) for key in style_keys},
                    has_direct_text=walker.has_direct_text(element) if needs_text else False,
                    hidden=walker.is_hidden(element),
                )
            )
        return tuple(collected)
