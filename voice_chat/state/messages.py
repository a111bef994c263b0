"""Transcript model: immutable messages in an append-only store."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class Role(str, Enum):
    """Author of a transcript entry."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True, slots=True)
class Message:
    """Single transcript entry; its index in the store is its identity."""

    text: str
    role: Role

    @property
    def is_user(self) -> bool:
        return self.role is Role.USER


StoreListener = Callable[["MessageStore"], None]


class MessageStore:
    """Ordered transcript supporting append and bulk clear only."""

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._listeners: list[StoreListener] = []

    def append(self, message: Message) -> None:
        self._messages.append(message)
        self._notify()

    def clear(self) -> None:
        if not self._messages:
            return
        self._messages.clear()
        self._notify()

    def all(self) -> tuple[Message, ...]:
        """Snapshot of the transcript in insertion order."""
        return tuple(self._messages)

    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __getitem__(self, index: int) -> Message:
        return self._messages[index]

    def bind(self, listener: StoreListener) -> None:
        """Register a callback run after every transcript change."""
        self._listeners.append(listener)

    def unbind(self, listener: StoreListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
