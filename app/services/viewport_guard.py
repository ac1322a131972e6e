"""
Scroll/Viewport Guard.

While a card is being dragged the board re-renders its columns, which can
make the page jump.  The guard locks page scrolling from drag start to drag
end and puts the viewport back where it was once the post-drop re-render
has happened (on the next animation frame).

The guard talks to the page through the small ``Viewport`` protocol so the
same logic drives a real browser bridge or the ``InMemoryViewport`` used
by server-side sessions and tests.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Protocol

logger = logging.getLogger(__name__)

OVERFLOW_HIDDEN = "hidden"


class Viewport(Protocol):
    scroll_x: float
    scroll_y: float
    overflow: str

    def scroll_to(self, x: float, y: float) -> None: ...

    def request_animation_frame(self, callback: Callable[[], None]) -> None: ...


class InMemoryViewport:
    """Viewport state kept in memory; frames run when the owner drains them."""

    def __init__(self, scroll_x: float = 0, scroll_y: float = 0, overflow: str = "") -> None:
        self.scroll_x = scroll_x
        self.scroll_y = scroll_y
        self.overflow = overflow
        self._frames: list[Callable[[], None]] = []

    def scroll_to(self, x: float, y: float) -> None:
        self.scroll_x = x
        self.scroll_y = y

    def request_animation_frame(self, callback: Callable[[], None]) -> None:
        self._frames.append(callback)

    @property
    def pending_frames(self) -> int:
        return len(self._frames)

    def run_animation_frames(self) -> None:
        """Run the callbacks queued so far; ones queued meanwhile wait."""
        frames, self._frames = self._frames, []
        for callback in frames:
            callback()


class ViewportGuard:
    """Scroll lock for the duration of one drag gesture.

    ``freeze`` may be called on drag start and again on every drag update;
    only the first call of a gesture captures state.  A single ``release``
    ends the gesture.
    """

    def __init__(self, viewport: Viewport) -> None:
        self.viewport = viewport
        self._saved: tuple[float, float, str] | None = None

    @property
    def active(self) -> bool:
        return self._saved is not None

    def freeze(self) -> None:
        if self._saved is None:
            vp = self.viewport
            self._saved = (vp.scroll_x, vp.scroll_y, vp.overflow)
            logger.debug("Viewport frozen at (%s, %s)", vp.scroll_x, vp.scroll_y)
        self.viewport.overflow = OVERFLOW_HIDDEN

    def release(self) -> None:
        if self._saved is None:
            return
        x, y, overflow = self._saved
        self._saved = None
        self.viewport.overflow = overflow
        self.viewport.request_animation_frame(lambda: self.viewport.scroll_to(x, y))

    @contextmanager
    def hold(self) -> Iterator[ViewportGuard]:
        """Freeze for the duration of the ``with`` block, release on any exit."""
        self.freeze()
        try:
            yield self
        finally:
            self.release()
