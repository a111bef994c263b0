"""Single-in-flight request lifecycle for the chat transcript."""

from __future__ import annotations

import asyncio
from typing import Optional, Protocol

from ..core.errors import ChatError, classify, describe_failure, fallback_message
from ..core.logger import get_logger
from ..core.trace import trace_scope
from ..state.messages import Message, MessageStore, Role


logger = get_logger("session")


class TextGenerator(Protocol):
    async def generate(self, text: str) -> str: ...


class RequestLifecycleController:
    """Optimistically append the user message, then resolve the reply.

    At most one request is pending. Each call carries only the current
    input; the transcript is never sent to the service.
    """

    def __init__(
        self,
        store: MessageStore,
        service: TextGenerator,
        *,
        language: str = "ar",
    ) -> None:
        self.store = store
        self.service = service
        self.language = language
        self.pending = False
        self._task: Optional[asyncio.Task[None]] = None
        self.last_error: Optional[ChatError] = None
        self._generation = 0
        self._closed = False

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def send(self, raw_text: str) -> Optional[asyncio.Task[None]]:
        """Submit raw_text; returns the resolution task or None when ignored."""
        text = (raw_text or "").strip()
        if not text or self.pending or self._closed:
            return None
        loop = asyncio.get_running_loop()
        self.pending = True
        self.store.append(Message(text=text, role=Role.USER))
        self._task = loop.create_task(self._resolve(text, self._generation))
        return self._task

    async def wait_idle(self) -> None:
        """Wait for the in-flight request, if any, to resolve."""
        task = self._task
        if task is not None and not task.done():
            await asyncio.shield(task)

    def close(self) -> None:
        """Tear down: later resolutions are discarded."""
        self._closed = True
        self._generation += 1

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    async def _resolve(self, text: str, generation: int) -> None:
        with trace_scope() as tid:
            reply: Optional[str] = None
            try:
                try:
                    reply = await self.service.generate(text)
                    self.last_error = None
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    error = classify(exc)
                    self.last_error = error
                    logger.warning("request %s failed (%s): %s", tid, error.kind, error.detail)
                    try:
                        reply = describe_failure(error, self.language)
                    except Exception:
                        logger.exception("could not describe failure for request %s", tid)
                        reply = fallback_message(self.language)
                if generation != self._generation:
                    logger.info("dropping resolution of request %s after teardown", tid)
                    return
                self.store.append(Message(text=reply, role=Role.ASSISTANT))
            finally:
                self.pending = False
                self._task = None
