from __future__ import annotations

import json

from voice_chat.config import settings as settings_module
from voice_chat.config.settings import Settings, get_settings


def test_defaults_have_no_embedded_credential(monkeypatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setattr(Settings, "json_config_settings_source", staticmethod(lambda: {}))
    settings = Settings(_env_file=None)
    assert settings.gemini_api_key is None
    assert settings.speech_locale == "ar-SA"
    assert settings.speech_rate < 1.0


def test_environment_provides_credential(monkeypatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    assert Settings(_env_file=None).gemini_api_key == "from-env"


def test_json_config_source(tmp_path, monkeypatch) -> None:
    cfg = tmp_path / "config.json"
    cfg.write_text(json.dumps({"gemini_model": "gemini-1.5-flash"}), encoding="utf-8")

    def _custom_source() -> dict[str, object]:
        return json.loads(cfg.read_text(encoding="utf-8"))

    monkeypatch.delenv("GEMINI_MODEL", raising=False)
    monkeypatch.setattr(settings_module.Settings, "json_config_settings_source", staticmethod(_custom_source))
    get_settings.cache_clear()  # type: ignore[attr-defined]
    try:
        assert get_settings().gemini_model == "gemini-1.5-flash"
    finally:
        get_settings.cache_clear()  # type: ignore[attr-defined]


def test_masked_hides_key() -> None:
    data = Settings(_env_file=None, gemini_api_key="abcdefghijkl").masked()
    assert "abcdefghijkl" not in json.dumps(data, ensure_ascii=False)
