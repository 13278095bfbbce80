from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path

import pytest

from cancorpus.client import CorpusClient
from cancorpus.errors import RemoteRejected


class FakeCorpus:
    """Remote collaborator stub shared by every handle a provider hands out."""

    def __init__(self, entries: list[str] | None = None) -> None:
        self.entries = list(entries or [])
        self.calls: list[tuple] = []
        self.failures: dict[str, Exception] = {}
        self.failures_on_call: dict[tuple[str, int], Exception] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.answers: dict[str, str] = {}

    def hold(self, operation: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[operation] = gate
        return gate

    def calls_of(self, operation: str) -> list[tuple]:
        return [call for call in self.calls if call[1] == operation]


class FakeHandle:
    def __init__(self, corpus: FakeCorpus, identity: str) -> None:
        self.corpus = corpus
        self.identity = identity

    async def _enter(self, operation: str, *args: object) -> None:
        self.corpus.calls.append((self.identity, operation, *args))
        gate = self.corpus.gates.get(operation)
        if gate is not None:
            await gate.wait()
        nth = len(self.corpus.calls_of(operation))
        failure = self.corpus.failures_on_call.get((operation, nth)) or self.corpus.failures.get(operation)
        if failure is not None:
            raise failure

    async def list_entries(self) -> list[str]:
        await self._enter("list")
        return list(self.corpus.entries)

    async def add_entry(self, text: str) -> None:
        await self._enter("add", text)
        self.corpus.entries.append(text)

    async def edit_entry(self, position: int, text: str) -> None:
        await self._enter("edit", position, text)
        if not 0 <= position < len(self.corpus.entries):
            raise RemoteRejected("bad position")
        self.corpus.entries[position] = text

    async def delete_entry(self, position: int) -> None:
        await self._enter("delete", position)
        if not 0 <= position < len(self.corpus.entries):
            raise RemoteRejected("bad position")
        del self.corpus.entries[position]

    async def clear_entries(self) -> None:
        await self._enter("clear")
        self.corpus.entries.clear()

    async def ask(self, question: str) -> str:
        await self._enter("ask", question)
        return self.corpus.answers.get(question, f"echo: {question}")


class FakeProvider:
    def __init__(self, corpus: FakeCorpus, *, authenticated: bool = False, principal: str = "alice") -> None:
        self.corpus = corpus
        self.authenticated = authenticated
        self.user = principal
        self.initialized = False
        self.complete_login = True
        self.logouts = 0

    async def initialize(self) -> None:
        self.initialized = True

    async def is_authenticated(self) -> bool:
        return self.authenticated

    async def login(self, on_success: Callable[[], Awaitable[None]]) -> None:
        if not self.complete_login:
            return
        self.authenticated = True
        await on_success()

    async def logout(self) -> None:
        self.authenticated = False
        self.logouts += 1

    def get_handle(self) -> FakeHandle:
        return FakeHandle(self.corpus, self.principal())

    def principal(self) -> str:
        return self.user if self.authenticated else "anonymous"


@pytest.fixture
def corpus() -> FakeCorpus:
    return FakeCorpus(["a", "b", "c"])


@pytest.fixture
def provider(corpus: FakeCorpus) -> FakeProvider:
    return FakeProvider(corpus)


@pytest.fixture
def client(provider: FakeProvider) -> CorpusClient:
    return CorpusClient(provider, notification_timeout=60.0)


@pytest.fixture
def home(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


async def settle() -> None:
    """Let tasks that were just created run up to their next suspension point."""
    for _ in range(5):
        await asyncio.sleep(0)
