import pytest
from conftest import FakeCorpus, settle

from cancorpus.cli.interactive import InteractiveCli
from cancorpus.client import CorpusClient
from cancorpus.types import ChatTurn, EditDraft, Notification


class _RecordingRenderer:
    def __init__(self, answers: list[str] | None = None) -> None:
        self.lines: list[str] = []
        self.answers = list(answers or [])

    def info(self, message: str) -> None:
        self.lines.append(message)

    def error(self, message: str) -> None:
        self.lines.append(f"error: {message}")

    def welcome(self, _client) -> None:
        self.lines.append("welcome")

    def session_status(self, client) -> None:
        self.lines.append(f"session: {client.whoami()}")

    def turn(self, turn: ChatTurn) -> None:
        self.lines.append(f"{turn.role}: {turn.text}")

    def entries(self, entries: list[str], _draft: EditDraft | None = None) -> None:
        self.lines.append(f"entries: {entries}")

    def notification(self, notification: Notification | None) -> None:
        if notification is not None:
            self.lines.append(f"{notification.kind}: {notification.message}")

    async def get_user_input(self, _client, _message: str = "> ", default: str = "") -> str:
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)

    async def confirm(self, _client, _question: str) -> bool:
        return (await self.get_user_input(_client)).strip().lower() in ("y", "yes")


def _cli(client: CorpusClient, answers: list[str] | None = None) -> tuple[InteractiveCli, _RecordingRenderer]:
    renderer = _RecordingRenderer(answers)
    return InteractiveCli(client, renderer), renderer  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_question_runs_in_background(client: CorpusClient, corpus: FakeCorpus) -> None:
    await client.start()
    cli, renderer = _cli(client)
    corpus.answers["refunds?"] = "30 days with receipt."

    assert await cli.handle_line("refunds?") is True
    await cli.drain()

    assert renderer.lines[-2:] == ["assistant: ...thinking", "assistant: 30 days with receipt."]


@pytest.mark.asyncio
async def test_second_question_while_busy_is_dropped(client: CorpusClient, corpus: FakeCorpus) -> None:
    await client.start()
    cli, renderer = _cli(client)
    gate = corpus.hold("ask")

    await cli.handle_line("first")
    await settle()
    await cli.handle_line("second")
    gate.set()
    await cli.drain()

    assert len(corpus.calls_of("ask")) == 1
    assert any("Still waiting" in line for line in renderer.lines)


@pytest.mark.asyncio
async def test_admin_commands_need_login(client: CorpusClient, corpus: FakeCorpus) -> None:
    await client.start()
    cli, renderer = _cli(client)

    await cli.handle_line(",add hello")

    assert renderer.lines[-1] == "error: Login to manage entries"
    assert corpus.calls_of("add") == []


@pytest.mark.asyncio
async def test_login_add_edit_delete_flow(client: CorpusClient, corpus: FakeCorpus) -> None:
    await client.start()
    cli, renderer = _cli(client, answers=["edited b", "y"])

    await cli.handle_line(",login")
    assert "session: alice" in renderer.lines

    await cli.handle_line(",add d")
    assert "success: Entry added" in renderer.lines

    await cli.handle_line(",edit 1")
    assert corpus.entries == ["a", "edited b", "c", "d"]

    await cli.handle_line(",delete 0")
    assert corpus.entries == ["edited b", "c", "d"]
    assert renderer.lines[-1] == "entries: ['edited b', 'c', 'd']"


@pytest.mark.asyncio
async def test_edit_with_inline_text(client: CorpusClient, corpus: FakeCorpus) -> None:
    await client.start()
    await client.login()
    cli, _renderer = _cli(client)

    await cli.handle_line(",edit 2 C")

    assert corpus.entries == ["a", "b", "C"]


@pytest.mark.asyncio
async def test_bad_position_reports_error(client: CorpusClient) -> None:
    await client.start()
    await client.login()
    cli, renderer = _cli(client)

    await cli.handle_line(",delete two")
    assert renderer.lines[-1] == "error: expected an entry number, got 'two'"

    await cli.handle_line(",delete 9")
    assert renderer.lines[-1] == "error: no entry at position 9"


@pytest.mark.asyncio
async def test_unknown_and_quit_commands(client: CorpusClient) -> None:
    await client.start()
    cli, renderer = _cli(client)

    assert await cli.handle_line(",nope") is True
    assert renderer.lines[-1].startswith("error: unknown command ,nope")
    assert await cli.handle_line(",quit") is False
    assert await cli.handle_line("   ") is True


@pytest.mark.asyncio
async def test_run_stops_on_eof(client: CorpusClient) -> None:
    await client.start()
    cli, renderer = _cli(client, answers=[",whoami"])

    await cli.run()

    assert renderer.lines[0] == "welcome"
    assert "session: anonymous" in renderer.lines
    assert renderer.lines[-1] == "Goodbye!"


@pytest.mark.asyncio
async def test_placeholder_is_not_rendered_when_guard_is_taken_first(client: CorpusClient, corpus: FakeCorpus) -> None:
    await client.start()
    cli, renderer = _cli(client)

    cli.submit_question("refunds?")
    assert client.guard.try_acquire() is True
    try:
        await cli.drain()
    finally:
        client.guard.release()

    assert "assistant: ...thinking" not in renderer.lines
    assert any("Still waiting" in line for line in renderer.lines)
    assert corpus.calls_of("ask") == []
    assert not any(turn.pending for turn in client.transcript.turns)
