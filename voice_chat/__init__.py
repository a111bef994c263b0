"""Conversational client with optional narration of assistant replies."""

from __future__ import annotations

from typing import Any

__all__ = ["run"]


def run(*args: Any, **kwargs: Any) -> Any:
    """Entrypoint for the console client (lazy import)."""
    from .cli import cli

    return cli(*args, **kwargs)
