"""Cancel-and-replace scheduling primitives built on injected timer callables.

Hosts supply ``after(ms, callback) -> handle`` and ``after_cancel(handle)``;
QTimer, Tk ``after`` and the test harness all fit that seam.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from style_inspector.logging_utils import LOGGER_NAME

AfterFn = Callable[[int, Callable[[], None]], object]
AfterCancelFn = Callable[[object], None]

FRAME_INTERVAL_MS = 16
SKIM_THROTTLE_MS = 100

_LOGGER = logging.getLogger(LOGGER_NAME)


def _cancel_handle(after_cancel: AfterCancelFn, handle: object) -> None:
    try:
        after_cancel(handle)
    except Exception as exc:
        _LOGGER.debug("Failed to cancel scheduled callback %r: %s", handle, exc)


class FrameCoalescer:
    """Runs at most one callback per frame; a newer request replaces the pending one."""

    def __init__(self, *, after: AfterFn, after_cancel: AfterCancelFn, frame_ms: int = FRAME_INTERVAL_MS) -> None:
        self._after = after
        self._after_cancel = after_cancel
        self._frame_ms = max(0, int(frame_ms))
        self._handle: object | None = None
        self._callback: Optional[Callable[[], None]] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def request(self, callback: Callable[[], None]) -> None:
        self.cancel()
        self._callback = callback
        self._handle = self._after(self._frame_ms, self._run)

    def cancel(self) -> None:
        handle = self._handle
        self._handle = None
        self._callback = None
        if handle is not None:
            _cancel_handle(self._after_cancel, handle)

    def _run(self) -> None:
        callback = self._callback
        self._handle = None
        self._callback = None
        if callback is not None:
            callback()


class Throttle:
    """Collapses triggers inside ``interval_ms`` into one trailing execution."""

    def __init__(self, *, after: AfterFn, after_cancel: AfterCancelFn, interval_ms: int = SKIM_THROTTLE_MS) -> None:
        self._after = after
        self._after_cancel = after_cancel
        self.interval_ms = max(1, int(interval_ms))
        self._handle: object | None = None
        self._callback: Optional[Callable[[], None]] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self, callback: Callable[[], None]) -> None:
        self._callback = callback
        if self._handle is not None:
            return
        self._handle = self._after(self.interval_ms, self._run)

    def cancel(self) -> None:
        handle = self._handle
        self._handle = None
        self._callback = None
        if handle is not None:
            _cancel_handle(self._after_cancel, handle)

    def _run(self) -> None:
        callback = self._callback
        self._handle = None
        self._callback = None
        if callback is not None:
            callback()
