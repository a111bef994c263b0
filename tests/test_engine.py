from __future__ import annotations

import asyncio

import pytest

pytest.importorskip("piper")
try:
    from voice_chat.audio import engine as engine_module
    from voice_chat.audio.tts import sanitize_text
except OSError as exc:  # PortAudio missing on the host
    pytest.skip(f"sounddevice unavailable: {exc}", allow_module_level=True)

from conftest import make_settings


class FakePlayback:
    def __init__(self) -> None:
        self.played: list[bytes] = []
        self.stops = 0

    def play(self, pcm: bytes, sample_rate: int, channels: int = 1) -> float:
        self.played.append(pcm)
        return len(pcm) / (sample_rate * channels * 2)

    def stop(self) -> None:
        self.stops += 1


class FakeVoice:
    def __init__(self) -> None:
        self.rate: float | None = None

    def with_rate(self, rate: float) -> "FakeVoice":
        self.rate = rate
        return self

    def synthesize_stream(self, text: str):
        yield b"\x00\x00" * 100, 22_050, 1


def _engine(monkeypatch, voice: FakeVoice) -> tuple[engine_module.PiperSpeechEngine, FakePlayback]:
    playback = FakePlayback()
    speech_engine = engine_module.PiperSpeechEngine(make_settings(), playback=playback)  # type: ignore[arg-type]
    monkeypatch.setattr(speech_engine, "_voice", lambda locale: voice)
    monkeypatch.setattr(engine_module, "PLAYBACK_MARGIN", 0.0)
    return speech_engine, playback


@pytest.mark.asyncio
async def test_speak_fires_done_after_playback(monkeypatch) -> None:
    voice = FakeVoice()
    speech_engine, playback = _engine(monkeypatch, voice)
    done = asyncio.Event()
    stopped: list[bool] = []
    speech_engine.speak(
        "مرحبا",
        locale="ar-SA",
        rate=0.85,
        pitch=1.0,
        on_done=done.set,
        on_stopped=lambda: stopped.append(True),
    )
    await asyncio.wait_for(done.wait(), timeout=2)
    assert voice.rate == 0.85
    assert len(playback.played) == 1
    assert stopped == []


@pytest.mark.asyncio
async def test_stop_signals_stopped_asynchronously(monkeypatch) -> None:
    voice = FakeVoice()
    speech_engine, playback = _engine(monkeypatch, voice)
    monkeypatch.setattr(engine_module, "PLAYBACK_MARGIN", 10.0)
    events: list[str] = []
    speech_engine.speak(
        "hello",
        locale="en-US",
        rate=1.0,
        pitch=1.0,
        on_done=lambda: events.append("done"),
        on_stopped=lambda: events.append("stopped"),
    )
    await asyncio.sleep(0.05)
    speech_engine.stop()
    assert events == []
    await asyncio.sleep(0)
    assert events == ["stopped"]
    assert playback.stops >= 1


def test_sanitize_text() -> None:
    assert sanitize_text("**hello**   `world`\n") == "hello world"


def test_output_buffer_is_filled_across_chunks() -> None:
    from voice_chat.audio.playback import PlaybackConfig, SpeechPlayback

    playback = SpeechPlayback(PlaybackConfig())
    playback._buffer.extend([b"\x01" * 4, b"\x02" * 4, b"\x03" * 4])
    out = bytearray(10)
    playback._on_write(out, 5, None, None)
    assert bytes(out) == b"\x01" * 4 + b"\x02" * 4 + b"\x03" * 2
    assert list(playback._buffer) == [b"\x03" * 2]

    tail = bytearray(b"\xff" * 6)
    playback._on_write(tail, 3, None, None)
    assert bytes(tail) == b"\x03" * 2 + b"\x00" * 4
