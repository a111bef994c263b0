"""Failure taxonomy for a generation round trip and its user-facing wording."""

from __future__ import annotations


class ChatError(Exception):
    """Base class for failures surfaced as assistant messages."""

    kind = "unknown"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.kind)
        self.detail = detail


class ConfigurationError(ChatError):
    """The access credential is not configured."""

    kind = "configuration"


class NetworkError(ChatError):
    """Transport failure or non-2xx HTTP status."""

    kind = "network"

    def __init__(self, detail: str | None = None, *, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.status_code = status_code


class ProtocolError(ChatError):
    """The response body does not match the generation envelope."""

    kind = "protocol"


class UnknownError(ChatError):
    """Anything not classified above."""

    kind = "unknown"


MESSAGES: dict[str, dict[str, str]] = {
    "ar": {
        "configuration": "عذراً، مفتاح الوصول (API key) غير مضبوط: {detail}. يرجى ضبط GEMINI_API_KEY والمحاولة مرة أخرى.",
        "network": "عذراً، حدث خطأ في الاتصال: {detail}. يرجى التحقق من API key والمحاولة مرة أخرى.",
        "protocol": "عذراً، وصلت استجابة غير متوقعة من الخدمة: {detail}. يرجى المحاولة مرة أخرى.",
        "unknown": "عذراً، حدث خطأ: {detail}. يرجى المحاولة مرة أخرى.",
        "default_detail": "خطأ غير معروف",
        "missing_key": "لم يتم العثور على المفتاح",
        "unexpected_format": "تنسيق استجابة غير متوقع",
    },
    "en": {
        "configuration": "Sorry, the access key (API key) is not configured: {detail}. Set GEMINI_API_KEY and try again.",
        "network": "Sorry, a connection error occurred: {detail}. Check the API key and try again.",
        "protocol": "Sorry, the service sent an unexpected response: {detail}. Please try again.",
        "unknown": "Sorry, an error occurred: {detail}. Please try again.",
        "default_detail": "unknown error",
        "missing_key": "no key found",
        "unexpected_format": "unexpected response format",
    },
}


def _catalog(language: str) -> dict[str, str]:
    return MESSAGES.get(language, MESSAGES["ar"])


def classify(exc: BaseException) -> ChatError:
    """Return exc as a ChatError, wrapping anything unclassified as UnknownError."""
    if isinstance(exc, ChatError):
        return exc
    detail = str(exc).strip() or None
    error = UnknownError(detail)
    error.__cause__ = exc
    return error


def describe_failure(exc: BaseException, language: str = "ar") -> str:
    """Build the localized assistant message for a failed round trip."""
    error = classify(exc)
    catalog = _catalog(language)
    detail = error.detail
    if isinstance(error, NetworkError) and error.status_code is not None:
        detail = f"HTTP {error.status_code} - {detail}" if detail else f"HTTP {error.status_code}"
    elif isinstance(error, ConfigurationError) and not detail:
        detail = catalog["missing_key"]
    elif isinstance(error, ProtocolError) and not detail:
        detail = catalog["unexpected_format"]
    if not detail:
        detail = catalog["default_detail"]
    return catalog[error.kind].format(detail=detail)


def fallback_message(language: str = "ar") -> str:
    """Message used when describing the failure itself failed."""
    catalog = _catalog(language)
    return catalog["unknown"].format(detail=catalog["default_detail"])
