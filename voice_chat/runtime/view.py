"""Expanded/compact view state driven by keyboard visibility."""

from __future__ import annotations

import asyncio
import contextlib
from enum import Enum
from typing import Callable, Optional

from ..config.settings import Settings


SHOW_DURATION = 0.2
HIDE_DURATION = 0.2
INTRO_DURATION = 1.0
FRAME_INTERVAL = 1 / 60

ViewListener = Callable[["ViewStateController"], None]


class ViewMode(str, Enum):
    EXPANDED = "expanded"
    COMPACT = "compact"


def tween(start: float, end: float, progress: float) -> float:
    """Linear interpolation clamped to [0, 1] in both progress and output."""
    progress = max(0.0, min(1.0, progress))
    value = start + (end - start) * progress
    return max(0.0, min(1.0, value))


class ViewStateController:
    """Animate the header value toward 0 (keyboard shown) or 1 (hidden).

    Only consumes the visibility signal; it never touches the transcript
    or narration state.
    """

    def __init__(
        self,
        *,
        show_duration: float = SHOW_DURATION,
        hide_duration: float = HIDE_DURATION,
        intro_duration: float = INTRO_DURATION,
        frame_interval: float = FRAME_INTERVAL,
    ) -> None:
        self.show_duration = show_duration
        self.hide_duration = hide_duration
        self.intro_duration = intro_duration
        self.frame_interval = frame_interval
        self.keyboard_visible = False
        self.header = 1.0
        self.opacity = 0.0
        self._header_task: Optional[asyncio.Task[None]] = None
        self._intro_task: Optional[asyncio.Task[None]] = None
        self._listeners: list[ViewListener] = []
        self._closed = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "ViewStateController":
        transition = settings.view_transition_ms / 1000
        return cls(
            show_duration=transition,
            hide_duration=transition,
            intro_duration=settings.intro_fade_ms / 1000,
        )

    @property
    def mode(self) -> ViewMode:
        return ViewMode.COMPACT if self.keyboard_visible else ViewMode.EXPANDED

    @property
    def animating(self) -> bool:
        return self._header_task is not None and not self._header_task.done()

    def bind(self, listener: ViewListener) -> None:
        self._listeners.append(listener)

    def start(self) -> None:
        """Fade the transcript in."""
        if self._closed or self._intro_task is not None:
            return
        self._intro_task = asyncio.get_running_loop().create_task(
            self._animate("opacity", 1.0, self.intro_duration)
        )

    def set_keyboard_visible(self, visible: bool) -> None:
        """Handle a visibility-change signal."""
        if self._closed or visible == self.keyboard_visible:
            return
        loop = asyncio.get_running_loop()
        self.keyboard_visible = visible
        if self._header_task is not None:
            self._header_task.cancel()
        target, duration = (0.0, self.show_duration) if visible else (1.0, self.hide_duration)
        self._header_task = loop.create_task(
            self._animate("header", target, duration)
        )
        self._notify()

    async def settle(self) -> None:
        """Wait until running animations finish."""
        for task in (self._intro_task, self._header_task):
            if task is not None and not task.done():
                with contextlib.suppress(asyncio.CancelledError):
                    await task

    def close(self) -> None:
        """Cancel animations; nothing fires afterwards."""
        self._closed = True
        for task in (self._intro_task, self._header_task):
            if task is not None:
                task.cancel()
        self._listeners.clear()

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    async def _animate(self, attribute: str, target: float, duration: float) -> None:
        loop = asyncio.get_running_loop()
        start = getattr(self, attribute)
        began = loop.time()
        while True:
            elapsed = loop.time() - began
            progress = 1.0 if duration <= 0 else elapsed / duration
            if self._closed:
                return
            setattr(self, attribute, tween(start, target, progress))
            self._notify()
            if progress >= 1.0:
                return
            await asyncio.sleep(self.frame_interval)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
