from voice_chat.core.errors import (
    ConfigurationError,
    NetworkError,
    ProtocolError,
    UnknownError,
    classify,
    describe_failure,
    fallback_message,
)


def test_network_error_embeds_status_and_detail() -> None:
    text = describe_failure(NetworkError("quota exceeded", status_code=500), "en")
    assert "500" in text
    assert "quota exceeded" in text


def test_network_error_without_status() -> None:
    text = describe_failure(NetworkError("connection refused"), "en")
    assert "connection refused" in text
    assert "HTTP" not in text


def test_messages_are_deterministic_per_kind() -> None:
    first = describe_failure(ProtocolError(), "en")
    second = describe_failure(ProtocolError(), "en")
    assert first == second
    assert "unexpected response format" in first
    assert describe_failure(ConfigurationError(), "en") != first


def test_arabic_is_default_language() -> None:
    text = describe_failure(NetworkError("boom", status_code=503))
    assert text.startswith("عذراً")
    assert "503" in text and "boom" in text


def test_unknown_language_falls_back_to_arabic() -> None:
    assert describe_failure(UnknownError("x"), "fr") == describe_failure(UnknownError("x"), "ar")


def test_unclassified_exception_becomes_unknown() -> None:
    error = classify(ValueError("bad value"))
    assert isinstance(error, UnknownError)
    assert error.detail == "bad value"
    assert "bad value" in describe_failure(ValueError("bad value"), "en")


def test_unknown_without_description_uses_generic_phrase() -> None:
    text = describe_failure(RuntimeError(), "en")
    assert "unknown error" in text
    assert text == fallback_message("en")

