"""Unified configuration for the chat client."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


Language = Literal["ar", "en"]


class Settings(BaseSettings):
    """Global client settings (environment, .env, then config.json)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    # Text-generation service
    gemini_api_key: str | None = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1"
    gemini_model: str = "gemini-pro"
    request_timeout_sec: float = 60.0
    connect_timeout_sec: float = 10.0

    # Messages shown to the user
    ui_language: Language = "ar"

    # Narration
    speech_locale: str = "ar-SA"
    speech_rate: float = 0.85
    speech_pitch: float = 1.0
    tts_voices: dict[str, str] = {
        "ar-SA": "ar_JO-kareem-medium",
        "en-US": "en_US-lessac-medium",
    }
    tts_models_dir: str | None = None

    # View transitions
    view_transition_ms: int = 200
    intro_fade_ms: int = 1000

    # Logs
    log_dir: str | None = None
    log_rotate_mb: int = 5
    log_retention_days: int = 7
    log_level: str = "INFO"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls.json_config_settings_source,
            file_secret_settings,
        )

    @staticmethod
    def json_config_settings_source() -> dict[str, object]:
        """Load config.json at the project root when present."""
        config_path = Path(__file__).resolve().parents[2] / "config.json"
        if config_path.is_file():
            try:
                return json.loads(config_path.read_text(encoding="utf-8"))
            except ValueError:
                return {}
        return {}

    def masked(self) -> dict[str, object]:
        """Return the settings as a dict with the credential hidden."""
        data = self.model_dump()
        key = data.get("gemini_api_key")
        if key:
            data["gemini_api_key"] = f"{key[:4]}…" if len(key) > 8 else "***"
        return data


@lru_cache()
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
