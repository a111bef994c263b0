"""Text-to-speech synthesis using Piper."""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from piper import PiperVoice, SynthesisConfig


@dataclass(slots=True)
class PiperConfig:
    """Piper model configuration."""

    model_path: Path
    config_path: Path | None = None
    speaker_id: int | None = None
    length_scale: float = 1.0


def find_voice(root: Path) -> PiperConfig:
    """Locate the first .onnx model (and its .onnx.json) under root."""
    for candidate in sorted(root.rglob("*.onnx")):
        config = candidate.with_name(candidate.name + ".json")
        return PiperConfig(model_path=candidate, config_path=config if config.exists() else None)
    raise FileNotFoundError(f"No Piper voice (.onnx) found under {root}")


class PiperTTS:
    """Thin wrapper around PiperVoice."""

    def __init__(self, config: PiperConfig) -> None:
        self.config = config
        if not config.model_path.exists():
            raise FileNotFoundError(f"Piper model not found: {config.model_path}")
        config_path = str(config.config_path) if config.config_path else None
        self._voice = PiperVoice.load(str(config.model_path), config_path=config_path)

    def with_rate(self, rate: float) -> "PiperTTS":
        """Apply a speaking rate (1.0 = default, lower = slower)."""
        rate = max(0.25, min(4.0, rate))
        self.config.length_scale = 1.0 / rate
        return self

    def synthesize_stream(self, text: str) -> Iterator[tuple[bytes, int, int]]:
        """Yield audio chunks (bytes, sample_rate, channels)."""
        text = sanitize_text(text)
        if not text:
            return
        kwargs = {}
        if self.config.speaker_id is not None:
            kwargs["speaker_id"] = self.config.speaker_id
        if self.config.length_scale != 1.0:
            kwargs["length_scale"] = self.config.length_scale
        syn_config = SynthesisConfig(**kwargs) if kwargs else None
        for chunk in self._voice.synthesize(text, syn_config=syn_config):
            yield chunk.audio_int16_bytes, chunk.sample_rate, chunk.sample_channels or 1


def sanitize_text(text: str) -> str:
    """Drop markdown markers and collapse whitespace before synthesis."""
    cleaned = unicodedata.normalize("NFC", text)
    cleaned = re.sub(r"[*_`#<>]", " ", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned)
    return cleaned.strip()
