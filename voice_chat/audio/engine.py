"""Speech engine backed by Piper synthesis and sounddevice playback."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from ..config.paths import models_dir
from ..config.settings import Settings
from ..core.logger import get_logger
from .playback import PlaybackConfig, SpeechPlayback
from .tts import PiperTTS, find_voice


logger = get_logger("speech")

PLAYBACK_MARGIN = 0.15


class PiperSpeechEngine:
    """speak()/stop() engine; completion callbacks are posted to the event loop."""

    def __init__(self, settings: Settings, playback: SpeechPlayback | None = None) -> None:
        self.settings = settings
        self.playback = playback or SpeechPlayback(PlaybackConfig())
        self._voices: dict[str, PiperTTS] = {}
        self._task: Optional[asyncio.Task[None]] = None
        self._on_stopped: Optional[Callable[[], None]] = None

    def speak(
        self,
        text: str,
        *,
        locale: str,
        rate: float,
        pitch: float,
        on_done: Callable[[], None],
        on_stopped: Callable[[], None],
    ) -> None:
        self.stop()
        if pitch != 1.0:
            logger.debug("Piper voices have no pitch control, ignoring pitch=%s", pitch)
        loop = asyncio.get_running_loop()
        self._on_stopped = on_stopped
        self._task = loop.create_task(self._narrate(text, locale, rate, on_done, on_stopped))

    def stop(self) -> None:
        task, on_stopped = self._task, self._on_stopped
        self._task = None
        self._on_stopped = None
        self.playback.stop()
        if task is not None and not task.done():
            task.cancel()
            if on_stopped is not None:
                asyncio.get_running_loop().call_soon(on_stopped)

    def _voice(self, locale: str) -> PiperTTS:
        voice = self._voices.get(locale)
        if voice is None:
            folder = self.settings.tts_voices.get(locale)
            if not folder:
                raise FileNotFoundError(f"No Piper voice configured for locale {locale}")
            voice = PiperTTS(find_voice(models_dir(self.settings) / folder))
            self._voices[locale] = voice
        return voice

    async def _narrate(
        self,
        text: str,
        locale: str,
        rate: float,
        on_done: Callable[[], None],
        on_stopped: Callable[[], None],
    ) -> None:
        loop = asyncio.get_running_loop()
        try:
            voice = self._voice(locale).with_rate(rate)
            chunks = await loop.run_in_executor(None, lambda: list(voice.synthesize_stream(text)))
            duration = 0.0
            for pcm, sample_rate, channels in chunks:
                duration += self.playback.play(pcm, sample_rate, channels)
            await asyncio.sleep(duration + PLAYBACK_MARGIN)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("narration failed")
            self._release()
            on_stopped()
            return
        self._release()
        on_done()

    def _release(self) -> None:
        self._task = None
        self._on_stopped = None
