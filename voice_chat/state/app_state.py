"""Snapshot of the session as seen by a renderer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .messages import Message


@dataclass(frozen=True, slots=True)
class SessionState:
    """Read-only view over the controllers at one instant."""

    transcript: tuple[Message, ...]
    pending: bool
    active_speech: Optional[int]
    keyboard_visible: bool
    header: float
