from __future__ import annotations

import os
import tempfile
from typing import Any, Callable

import httpx
import pytest

# Logs go to a throwaway directory; must be set before voice_chat imports.
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="voice-chat-logs-"))

from voice_chat.config.settings import Settings  # noqa: E402
from voice_chat.services.gemini import GeminiAPI  # noqa: E402


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {"gemini_api_key": "test-key", "ui_language": "en"}
    values.update(overrides)
    return Settings(**values)


def make_api(handler: Callable[[httpx.Request], httpx.Response], **overrides: Any) -> GeminiAPI:
    return GeminiAPI(make_settings(**overrides), transport=httpx.MockTransport(handler))


def reply_body(text: str) -> dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class FakeSpeechEngine:
    """Records engine calls; callbacks are fired by the test."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.utterances: list[dict[str, Any]] = []

    def speak(self, text, *, locale, rate, pitch, on_done, on_stopped) -> None:
        self.calls.append(("speak", text))
        self.utterances.append(
            {
                "text": text,
                "locale": locale,
                "rate": rate,
                "pitch": pitch,
                "on_done": on_done,
                "on_stopped": on_stopped,
            }
        )

    def stop(self) -> None:
        self.calls.append(("stop", None))

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def engine() -> FakeSpeechEngine:
    return FakeSpeechEngine()
