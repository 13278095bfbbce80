"""CLI main module for canCorpus."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, Optional

import typer
from loguru import logger

from cancorpus.cli.interactive import InteractiveCli
from cancorpus.cli.render import Renderer
from cancorpus.client import CorpusClient, build_client
from cancorpus.config import Settings, load_settings
from cancorpus.errors import ConfigurationError, EmptyInput
from cancorpus.logging_utils import configure_logging

app = typer.Typer(
    name="cancorpus",
    help="Ask questions of a shared corpus and manage its entries.",
    add_completion=False,
    rich_markup_mode="rich",
)
entries_app = typer.Typer(help="Manage corpus entries (requires login).")
app.add_typer(entries_app, name="entries")

renderer = Renderer()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    remote_url: Annotated[Optional[str], typer.Option(help="Corpus service URL; local corpus when omitted")] = None,
    home: Annotated[Optional[Path], typer.Option(help="Directory for identity and local corpus files")] = None,
) -> None:
    settings = load_settings(remote_url=remote_url, home=home)
    ctx.obj = settings
    if ctx.invoked_subcommand is None:
        chat(ctx)


def _settings(ctx: typer.Context) -> Settings:
    if isinstance(ctx.obj, Settings):
        return ctx.obj
    return load_settings()


async def _with_client(
    settings: Settings,
    action: Callable[[CorpusClient], Awaitable[bool]],
    *,
    confirm: Callable[[int, str], Awaitable[bool]] | None = None,
) -> bool:
    client = build_client(settings, confirm=confirm)
    async with client:
        ok = await action(client)
        renderer.notification(client.notifications.current)
        notification = client.notifications.current
        return ok and (notification is None or notification.kind != "error")


def _run(
    ctx: typer.Context,
    action: Callable[[CorpusClient], Awaitable[bool]],
    *,
    confirm: Callable[[int, str], Awaitable[bool]] | None = None,
) -> None:
    settings = _settings(ctx)
    configure_logging(level=settings.log_level)
    try:
        ok = asyncio.run(_with_client(settings, action, confirm=confirm))
    except EmptyInput as e:
        logger.debug("cli.empty_input error={}", e)
        return
    except (ConfigurationError, IndexError, ValueError) as e:
        renderer.error(str(e))
        raise typer.Exit(1) from e
    if not ok:
        raise typer.Exit(1)


@app.command()
def chat(ctx: typer.Context) -> None:
    """Start the interactive chat."""
    settings = _settings(ctx)
    configure_logging(profile="chat", level=settings.log_level)

    async def session() -> None:
        async with build_client(settings) as client:
            await InteractiveCli(client, renderer).run()

    try:
        asyncio.run(session())
    except (ConfigurationError, ValueError) as e:
        logger.exception("chat.startup.error")
        renderer.error(f"Failed to start chat: {e!s}")
        raise typer.Exit(1) from e


@app.command()
def ask(ctx: typer.Context, question: str) -> None:
    """Ask one question and print the answer."""

    async def action(client: CorpusClient) -> bool:
        answer = await client.transcript.ask(question)
        if answer is None:
            return False
        renderer.turn(client.transcript.turns[-1])
        return True

    _run(ctx, action)


@app.command()
def login(ctx: typer.Context) -> None:
    """Log in and keep the identity for later commands."""

    async def action(client: CorpusClient) -> bool:
        session = await client.login()
        renderer.session_status(client)
        return session.authenticated

    _run(ctx, action)


@app.command()
def logout(ctx: typer.Context) -> None:
    """Forget the stored identity."""

    async def action(client: CorpusClient) -> bool:
        await client.logout()
        renderer.session_status(client)
        return True

    _run(ctx, action)


@app.command()
def whoami(ctx: typer.Context) -> None:
    """Show the current identity."""

    async def action(client: CorpusClient) -> bool:
        renderer.session_status(client)
        return True

    _run(ctx, action)


def _require_login(client: CorpusClient) -> bool:
    if client.session.authenticated:
        return True
    renderer.error("Login to manage entries (cancorpus login).")
    return False


@entries_app.command("list")
def list_entries(ctx: typer.Context) -> None:
    """List stored entries."""

    async def action(client: CorpusClient) -> bool:
        renderer.entries(client.entries.entries)
        return True

    _run(ctx, action)


@entries_app.command("add")
def add_entry(ctx: typer.Context, text: str) -> None:
    """Add an entry."""

    async def action(client: CorpusClient) -> bool:
        return _require_login(client) and await client.entries.add(text)

    _run(ctx, action)


@entries_app.command("edit")
def edit_entry(ctx: typer.Context, position: int, text: str) -> None:
    """Replace the entry at POSITION."""

    async def action(client: CorpusClient) -> bool:
        if not _require_login(client):
            return False
        client.entries.begin_edit(position)
        client.entries.update_draft(text)
        return await client.entries.save_edit()

    _run(ctx, action)


@entries_app.command("delete")
def delete_entry(
    ctx: typer.Context,
    position: int,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt")] = False,
) -> None:
    """Delete the entry at POSITION."""

    async def confirm(index: int, text: str) -> bool:
        return yes or typer.confirm(f"Delete entry {index} ({text!r})?")

    async def action(client: CorpusClient) -> bool:
        return _require_login(client) and await client.entries.delete(position)

    _run(ctx, action, confirm=confirm)


@entries_app.command("clear")
def clear_entries(
    ctx: typer.Context,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt")] = False,
) -> None:
    """Delete every entry."""

    async def action(client: CorpusClient) -> bool:
        if not _require_login(client):
            return False
        if not yes and not typer.confirm("Delete every entry?"):
            return False
        return await client.entries.clear_all()

    _run(ctx, action)


@entries_app.command("demo")
def populate_demo(ctx: typer.Context) -> None:
    """Add the demo entries."""

    async def action(client: CorpusClient) -> bool:
        return _require_login(client) and await client.entries.populate_demo()

    _run(ctx, action)


if __name__ == "__main__":
    app()
