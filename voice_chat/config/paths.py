"""Filesystem helpers for the chat client."""

from __future__ import annotations

from pathlib import Path

from .settings import Settings, get_settings


def project_root() -> Path:
    """Return the repository root."""
    return Path(__file__).resolve().parents[2]


def logs_dir(settings: Settings | None = None) -> Path:
    """Directory receiving the JSON-lines logs."""
    settings = settings or get_settings()
    root = Path(settings.log_dir) if settings.log_dir else project_root() / "logs"
    root.mkdir(parents=True, exist_ok=True)
    return root


def models_dir(settings: Settings | None = None) -> Path:
    """Directory storing the Piper voice models."""
    settings = settings or get_settings()
    if settings.tts_models_dir:
        return Path(settings.tts_models_dir)
    return project_root() / "resources" / "models" / "tts"
