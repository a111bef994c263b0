from __future__ import annotations

import asyncio
import json
from typing import Optional

import typer

from voice_chat.config.settings import get_settings
from voice_chat.runtime.session import SessionController
from voice_chat.runtime.speech import SpeechEngine
from voice_chat.runtime.view import ViewMode
from voice_chat.state.messages import Message, MessageStore


cli = typer.Typer(name="voice-chat", help="Console chat client with narrated replies")

TITLE = "Gemini Chat"


def _format(index: int, message: Message) -> str:
    author = "you" if message.is_user else "bot"
    return f"[{index}] {author}> {message.text}"


class ConsoleRenderer:
    """Print transcript and narration changes as they happen."""

    def __init__(self, session: SessionController) -> None:
        self.session = session
        self._printed = 0
        session.store.bind(self._on_store)
        if session.speech is not None:
            session.speech.bind(self._on_speech)

    def close(self) -> None:
        self.session.store.unbind(self._on_store)

    def header(self) -> None:
        if self.session.view.mode is ViewMode.EXPANDED:
            typer.secho(f"== {TITLE} ==", bold=True)
        else:
            typer.secho(TITLE, dim=True)

    def _on_store(self, store: MessageStore) -> None:
        if len(store) < self._printed:
            typer.secho("-- transcript cleared --", dim=True)
            self._printed = 0
        for index in range(self._printed, len(store)):
            typer.echo(_format(index, store[index]))
        self._printed = len(store)

    def _on_speech(self, index: Optional[int]) -> None:
        if index is None:
            typer.secho("(narration stopped)", dim=True)
        else:
            typer.secho(f"(narrating [{index}])", dim=True)


def _build_engine() -> Optional[SpeechEngine]:
    try:
        from voice_chat.audio.engine import PiperSpeechEngine
    except (ImportError, OSError) as exc:
        typer.secho(f"Narration unavailable: {exc}", fg=typer.colors.YELLOW)
        return None
    return PiperSpeechEngine(get_settings())


async def _read_line(prompt: str) -> str:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, input, prompt)


def _handle_command(session: SessionController, line: str) -> bool:
    """Run a slash command; returns False when the session should end."""
    name, _, arg = line[1:].partition(" ")
    if name in {"quit", "exit"}:
        return False
    if name == "clear":
        session.clear()
    elif name == "stop":
        if session.speech is not None:
            session.speech.stop_all()
    elif name == "speak":
        try:
            index = int(arg)
        except ValueError:
            typer.echo("usage: /speak N")
            return True
        if not session.toggle_speech(index):
            typer.echo(f"cannot narrate [{index}]")
    else:
        typer.echo("commands: /clear /speak N /stop /quit")
    return True


async def _chat(speak: bool) -> None:
    engine = _build_engine() if speak else None
    async with SessionController(get_settings(), engine=engine) as session:
        renderer = ConsoleRenderer(session)
        renderer.header()
        try:
            await _loop(session, renderer)
        finally:
            renderer.close()


async def _loop(session: SessionController, renderer: ConsoleRenderer) -> None:
    while True:
        session.keyboard_changed(True)
        try:
            line = (await _read_line("> ")).strip()
        except EOFError:
            break
        session.keyboard_changed(False)
        if line.startswith("/"):
            if not _handle_command(session, line):
                break
            continue
        task = session.send(line)
        if task is not None:
            await task
            renderer.header()


@cli.command()
def chat(speak: bool = typer.Option(True, "--speak/--no-speak", help="Enable narration")) -> None:
    """Interactive chat session."""
    try:
        asyncio.run(_chat(speak))
    except KeyboardInterrupt:
        typer.echo("")


async def _ask(text: str) -> tuple[Optional[Message], bool]:
    async with SessionController(get_settings()) as session:
        task = session.send(text)
        if task is None:
            return None, False
        await task
        return session.store.last(), session.requests.last_error is None


@cli.command()
def ask(text: str) -> None:
    """Send a single message and print the reply."""
    reply, ok = asyncio.run(_ask(text))
    if reply is None:
        typer.echo("Empty message, nothing sent.", err=True)
        raise typer.Exit(code=2)
    typer.echo(reply.text)
    if not ok:
        raise typer.Exit(code=1)


@cli.command("config")
def show_config() -> None:
    """Print the effective settings (credential masked)."""
    typer.echo(json.dumps(get_settings().masked(), ensure_ascii=False, indent=2))


if __name__ == "__main__":
    cli()
