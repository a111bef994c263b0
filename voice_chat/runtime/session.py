"""Wires the transcript, request, narration and view controllers together."""

from __future__ import annotations

import asyncio
from typing import Optional

from ..config.settings import Settings, get_settings
from ..core.logger import get_logger
from ..services.gemini import GeminiAPI
from ..state.app_state import SessionState
from ..state.messages import MessageStore, Role
from .requests import RequestLifecycleController, TextGenerator
from .speech import NarrationOptions, SpeechEngine, SpeechPlaybackController
from .view import ViewStateController


logger = get_logger("session")


class SessionController:
    """High-level coordinator for one chat session.

    Use as an async context manager: leaving the block stops narration,
    cancels view animations and discards late request resolutions, even
    when the block exits with an exception.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        service: TextGenerator | None = None,
        engine: SpeechEngine | None = None,
        view: ViewStateController | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = MessageStore()
        self._owns_service = service is None
        self.service = service if service is not None else GeminiAPI(self.settings)
        self.requests = RequestLifecycleController(
            self.store,
            self.service,
            language=self.settings.ui_language,
        )
        self.speech: Optional[SpeechPlaybackController] = None
        if engine is not None:
            self.speech = SpeechPlaybackController(
                engine,
                options=NarrationOptions.from_settings(self.settings),
                store=self.store,
            )
        self.view = view or ViewStateController.from_settings(self.settings)
        self._closed = False

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def send(self, text: str) -> Optional[asyncio.Task[None]]:
        return self.requests.send(text)

    def toggle_speech(self, index: int) -> bool:
        """Toggle narration of the message at index; False if not possible."""
        if self.speech is None or self._closed:
            return False
        if index < 0 or index >= len(self.store):
            return False
        if self.store[index].role is not Role.ASSISTANT:
            return False
        self.speech.toggle(self.store[index].text, index)
        return True

    def clear(self) -> None:
        """Empty the transcript and stop narration; a pending request keeps running."""
        self.store.clear()
        if self.speech is not None:
            self.speech.stop_all()
        logger.info("transcript cleared (pending=%s)", self.requests.pending)

    def keyboard_changed(self, visible: bool) -> None:
        self.view.set_keyboard_visible(visible)

    def snapshot(self) -> SessionState:
        return SessionState(
            transcript=self.store.all(),
            pending=self.requests.pending,
            active_speech=self.speech.active_index if self.speech else None,
            keyboard_visible=self.view.keyboard_visible,
            header=self.view.header,
        )

    def close(self) -> None:
        """Synchronous teardown; safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            if self.speech is not None:
                self.speech.stop_all()
        finally:
            self.view.close()
            self.requests.close()
        logger.info("session closed")

    async def aclose(self) -> None:
        self.close()
        if self._owns_service and isinstance(self.service, GeminiAPI):
            await self.service.close()

    async def __aenter__(self) -> "SessionController":
        self.view.start()
        logger.info("session started")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
