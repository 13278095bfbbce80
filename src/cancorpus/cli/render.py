"""CLI renderer for canCorpus."""

from __future__ import annotations

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cancorpus.client import CorpusClient
from cancorpus.types import ChatTurn, EditDraft, Notification

_KIND_STYLES = {"info": "cyan", "success": "green", "error": "red"}


class Renderer:
    """CLI renderer using Rich for output and prompt_toolkit for input."""

    def __init__(self, console: Console | None = None) -> None:
        self.console: Console = console or Console()
        self._prompt_session: PromptSession[str] | None = None

    def info(self, message: str) -> None:
        self.console.print(message)

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")

    def welcome(self, client: CorpusClient) -> None:
        self.console.print("[bold blue]canCorpus[/bold blue] - ask the corpus anything.")
        self.console.print("[dim]Type a question, or ,help for commands.[/dim]")
        self.session_status(client)

    def session_status(self, client: CorpusClient) -> None:
        session = client.session
        state = "[green]logged in[/green]" if session.authenticated else "[yellow]anonymous[/yellow]"
        self.console.print(f"[bold]Session:[/bold] {state} as [cyan]{escape(client.whoami())}[/cyan]")

    def turn(self, turn: ChatTurn) -> None:
        text = escape(turn.text)
        if turn.role == "user":
            self.console.print(f"[bold cyan]You:[/bold cyan] {text}")
        elif turn.pending:
            self.console.print(f"[dim]{text}[/dim]")
        else:
            self.console.print(f"[bold yellow]canCorpus:[/bold yellow] {text}")

    def entries(self, entries: list[str], draft: EditDraft | None = None) -> None:
        table = Table(title=f"Stored entries ({len(entries)})", show_lines=False)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Entry")
        for position, text in enumerate(entries):
            marker = " [magenta](editing)[/magenta]" if draft is not None and draft.position == position else ""
            table.add_row(str(position), escape(text) + marker)
        self.console.print(table)

    def notification(self, notification: Notification | None) -> None:
        if notification is None:
            return
        style = _KIND_STYLES.get(notification.kind, "white")
        self.console.print(f"[{style}]{escape(notification.message)}[/{style}]")

    async def get_user_input(self, client: CorpusClient, message: str = "> ", default: str = "") -> str:
        """Prompt for one line; the toolbar shows busy state and the live notification."""
        if self._prompt_session is None:
            self._prompt_session = PromptSession()
        with patch_stdout(raw=True):
            return await self._prompt_session.prompt_async(
                message,
                default=default,
                bottom_toolbar=lambda: _toolbar(client),
                refresh_interval=0.5,
            )

    async def confirm(self, client: CorpusClient, question: str) -> bool:
        answer = await self.get_user_input(client, f"{question} [y/N] ")
        return answer.strip().lower() in ("y", "yes")


def _toolbar(client: CorpusClient) -> HTML:
    template = "<b>busy</b> | {}" if client.guard.busy else "idle | {}"
    status = "logged in" if client.session.authenticated else "anonymous"
    notification = client.notifications.current
    if notification is None:
        return HTML(template).format(status)
    return HTML(template + " | {}: {}").format(status, notification.kind, notification.message)
