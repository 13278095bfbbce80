"""Interactive chat loop over a :class:`CorpusClient`."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeAlias

from loguru import logger

from cancorpus.cli.render import Renderer
from cancorpus.client import CorpusClient
from cancorpus.errors import EmptyInput

COMMAND_PREFIX = ","

HELP_TEXT = """\
[bold]Commands[/bold]
  ,login / ,logout / ,whoami    manage the session
  ,list                         show stored entries
  ,add <text>                   add an entry
  ,edit <n> [text]              edit entry n (prompts when text is omitted)
  ,save / ,cancel               retry or drop a pending edit
  ,delete <n>                   delete entry n
  ,clear                        delete every entry
  ,demo                         add the demo entries
  ,reset                        clear the chat transcript
  ,quit                         leave
Anything else is asked as a question."""

ADMIN_COMMANDS = frozenset({"add", "edit", "save", "delete", "clear", "demo"})

Command: TypeAlias = Callable[[str], Awaitable[bool]]


class InteractiveCli:
    """Read-eval loop: questions run in the background, commands inline."""

    def __init__(self, client: CorpusClient, renderer: Renderer | None = None) -> None:
        self.client = client
        self.renderer = renderer or Renderer()
        self.client.entries.confirm = self._confirm_delete
        self.client.transcript.subscribe(self.renderer.turn)
        self._tasks: set[asyncio.Task[None]] = set()
        self._commands: dict[str, Command] = {
            "help": self._cmd_help,
            "quit": self._cmd_quit,
            "exit": self._cmd_quit,
            "q": self._cmd_quit,
            "login": self._cmd_login,
            "logout": self._cmd_logout,
            "whoami": self._cmd_whoami,
            "list": self._cmd_list,
            "add": self._cmd_add,
            "edit": self._cmd_edit,
            "save": self._cmd_save,
            "cancel": self._cmd_cancel,
            "delete": self._cmd_delete,
            "clear": self._cmd_clear,
            "demo": self._cmd_demo,
            "reset": self._cmd_reset,
        }

    async def run(self) -> None:
        self.renderer.welcome(self.client)
        for turn in self.client.transcript.turns:
            self.renderer.turn(turn)
        while True:
            try:
                raw = await self.renderer.get_user_input(self.client)
            except (KeyboardInterrupt, EOFError):
                break
            if not await self.handle_line(raw):
                break
        await self.drain()
        self.renderer.info("Goodbye!")

    async def handle_line(self, raw: str) -> bool:
        """Handle one input line. Returns ``False`` when the user asked to leave."""
        line = raw.strip()
        if not line:
            return True
        if not line.startswith(COMMAND_PREFIX):
            self.submit_question(line)
            return True

        name, _, arg = line[len(COMMAND_PREFIX) :].strip().partition(" ")
        name = name.lower()
        command = self._commands.get(name)
        if command is None:
            self.renderer.error(f"unknown command ,{name} (try ,help)")
            return True
        if name in ADMIN_COMMANDS and not self.client.session.authenticated:
            self.renderer.error("Login to manage entries")
            return True
        if self.client.guard.busy and name in ADMIN_COMMANDS | {"list"}:
            self._busy()
            return True
        try:
            return await command(arg.strip())
        except EmptyInput:
            return True
        except (IndexError, ValueError) as e:
            self.renderer.error(str(e))
            return True

    def submit_question(self, question: str) -> None:
        if self.client.guard.busy:
            self._busy()
            return
        task = asyncio.create_task(self._ask(question))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _ask(self, question: str) -> None:
        try:
            answer = await self.client.transcript.ask(question)
        except EmptyInput:
            return
        except Exception:
            logger.exception("interactive.ask.error")
            return
        if answer is None:
            self._busy()

    def _busy(self) -> None:
        self.renderer.info("[dim]Still waiting on the previous request; try again shortly.[/dim]")

    def _show_outcome(self) -> None:
        self.renderer.notification(self.client.notifications.current)

    async def _confirm_delete(self, position: int, text: str) -> bool:
        return await self.renderer.confirm(self.client, f"Delete entry {position} ({text!r})?")

    async def _cmd_help(self, _arg: str) -> bool:
        self.renderer.info(HELP_TEXT)
        return True

    async def _cmd_quit(self, _arg: str) -> bool:
        return False

    async def _cmd_login(self, _arg: str) -> bool:
        await self.client.login()
        self._show_outcome()
        self.renderer.session_status(self.client)
        return True

    async def _cmd_logout(self, _arg: str) -> bool:
        await self.client.logout()
        self._show_outcome()
        self.renderer.session_status(self.client)
        return True

    async def _cmd_whoami(self, _arg: str) -> bool:
        self.renderer.session_status(self.client)
        return True

    async def _cmd_list(self, _arg: str) -> bool:
        if not await self.client.entries.reload():
            self._show_outcome()
        self._show_entries()
        return True

    async def _cmd_add(self, arg: str) -> bool:
        await self.client.entries.add(arg)
        self._show_outcome()
        self._show_entries()
        return True

    async def _cmd_edit(self, arg: str) -> bool:
        raw_position, _, text = arg.partition(" ")
        draft = self.client.entries.begin_edit(_position(raw_position))
        if not text.strip():
            text = await self.renderer.get_user_input(self.client, f"edit {draft.position}> ", default=draft.text)
        self.client.entries.update_draft(text)
        return await self._cmd_save("")

    async def _cmd_save(self, _arg: str) -> bool:
        await self.client.entries.save_edit()
        self._show_outcome()
        if self.client.entries.draft.active:
            self.renderer.info("[dim]Edit kept; ,save to retry or ,cancel to drop it.[/dim]")
        self._show_entries()
        return True

    async def _cmd_cancel(self, _arg: str) -> bool:
        self.client.entries.cancel_edit()
        return True

    async def _cmd_delete(self, arg: str) -> bool:
        await self.client.entries.delete(_position(arg))
        self._show_outcome()
        self._show_entries()
        return True

    async def _cmd_clear(self, _arg: str) -> bool:
        if not await self.renderer.confirm(self.client, "Delete every entry?"):
            return True
        await self.client.entries.clear_all()
        self._show_outcome()
        self._show_entries()
        return True

    async def _cmd_demo(self, _arg: str) -> bool:
        await self.client.entries.populate_demo()
        self._show_outcome()
        self._show_entries()
        return True

    async def _cmd_reset(self, _arg: str) -> bool:
        self.client.transcript.reset()
        self.renderer.info("[dim]Transcript cleared.[/dim]")
        return True

    def _show_entries(self) -> None:
        self.renderer.entries(self.client.entries.entries, self.client.entries.draft)


def _position(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"expected an entry number, got {raw!r}") from None
