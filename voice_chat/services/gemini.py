"""HTTP client for the Gemini generateContent endpoint."""

from __future__ import annotations

from typing import Any, Optional

import httpx

from ..config.settings import Settings
from ..core.errors import ConfigurationError, NetworkError, ProtocolError
from ..core.logger import get_logger


logger = get_logger("llm")


def build_payload(text: str) -> dict[str, Any]:
    """Request body carrying only the current input."""
    return {"contents": [{"parts": [{"text": text}]}]}


def _error_message(data: Any) -> Optional[str]:
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            message = error.get("message")
            if message:
                return str(message)
    return None


def extract_reply(data: Any) -> str:
    """Return candidates[0].content.parts[0].text or raise ProtocolError."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ProtocolError(_error_message(data)) from exc
    if not isinstance(text, str) or not text.strip():
        raise ProtocolError(_error_message(data))
    return text


class GeminiAPI:
    """Async client for a single stateless generation call."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        timeout = httpx.Timeout(
            settings.request_timeout_sec,
            connect=settings.connect_timeout_sec,
        )
        self._client = httpx.AsyncClient(
            base_url=settings.gemini_base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        return f"/models/{self.settings.gemini_model}:generateContent"

    async def generate(self, text: str) -> str:
        """Send text and return the reply, raising a ChatError on failure."""
        api_key = self.settings.gemini_api_key
        if not api_key:
            raise ConfigurationError()

        logger.info("POST %s (%d chars)", self.endpoint, len(text))
        try:
            response = await self._client.post(
                self.endpoint,
                params={"key": api_key},
                json=build_payload(text),
            )
        except httpx.TimeoutException as exc:
            raise NetworkError(f"timeout ({type(exc).__name__})") from exc
        except httpx.RequestError as exc:
            raise NetworkError(str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            try:
                data = response.json()
            except ValueError:
                data = None
            detail = _error_message(data) or response.reason_phrase or None
            logger.warning("generation failed: HTTP %s %s", response.status_code, detail)
            raise NetworkError(detail, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            snippet = response.text[:200]
            raise ProtocolError(f"non-JSON body: {snippet}") from exc
        reply = extract_reply(data)
        logger.info("generation ok (%d chars)", len(reply))
        return reply

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
