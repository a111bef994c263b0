"""Mutually-exclusive narration of transcript messages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from ..config.settings import Settings
from ..core.logger import get_logger
from ..state.messages import MessageStore, Role


logger = get_logger("speech")

SpeechListener = Callable[[Optional[int]], None]


class SpeechEngine(Protocol):
    """External narration engine; callbacks may fire at any later time."""

    def speak(
        self,
        text: str,
        *,
        locale: str,
        rate: float,
        pitch: float,
        on_done: Callable[[], None],
        on_stopped: Callable[[], None],
    ) -> None: ...

    def stop(self) -> None: ...


@dataclass(frozen=True, slots=True)
class NarrationOptions:
    """Fixed parameters used for every utterance."""

    locale: str = "ar-SA"
    rate: float = 0.85
    pitch: float = 1.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "NarrationOptions":
        return cls(
            locale=settings.speech_locale,
            rate=settings.speech_rate,
            pitch=settings.speech_pitch,
        )


class SpeechPlaybackController:
    """Track which message, if any, is being narrated."""

    def __init__(
        self,
        engine: SpeechEngine,
        *,
        options: NarrationOptions | None = None,
        store: MessageStore | None = None,
    ) -> None:
        self.engine = engine
        self.options = options or NarrationOptions()
        self.store = store
        self._active: Optional[int] = None
        self._utterance = 0
        self._listeners: list[SpeechListener] = []

    @property
    def active_index(self) -> Optional[int]:
        return self._active

    @property
    def speaking(self) -> bool:
        return self._active is not None

    def bind(self, listener: SpeechListener) -> None:
        """Register a callback receiving the new active index."""
        self._listeners.append(listener)

    def toggle(self, text: str, index: int) -> None:
        """Stop narrating index if it is active, otherwise narrate text as index."""
        if self._active is not None and self._active == index:
            self._utterance += 1
            self.engine.stop()
            self._set_active(None)
            return
        if not self._narratable(index):
            logger.info("ignoring narration request for index %s", index)
            return

        self.engine.stop()
        self._utterance += 1
        utterance = self._utterance
        self._set_active(index)
        self.engine.speak(
            text,
            locale=self.options.locale,
            rate=self.options.rate,
            pitch=self.options.pitch,
            on_done=lambda: self._finished(utterance, "done"),
            on_stopped=lambda: self._finished(utterance, "stopped"),
        )

    def stop_all(self) -> None:
        """Stop any utterance and return to rest."""
        self._utterance += 1
        self.engine.stop()
        self._set_active(None)

    def __enter__(self) -> "SpeechPlaybackController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop_all()

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    def _narratable(self, index: int) -> bool:
        if self.store is None:
            return True
        if index < 0 or index >= len(self.store):
            return False
        return self.store[index].role is Role.ASSISTANT

    def _finished(self, utterance: int, reason: str) -> None:
        if utterance != self._utterance:
            logger.debug("stale %s callback for utterance %s", reason, utterance)
            return
        self._set_active(None)

    def _set_active(self, index: Optional[int]) -> None:
        if index == self._active:
            return
        self._active = index
        for listener in list(self._listeners):
            listener(index)
