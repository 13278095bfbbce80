import importlib
from pathlib import Path

import pytest
from typer.testing import CliRunner

cli_app_module = importlib.import_module("cancorpus.cli.app")


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_app_module, "configure_logging", lambda **_kwargs: None)


def _invoke(home: Path, *args: str):
    runner = CliRunner()
    return runner.invoke(cli_app_module.app, ["--home", str(home), *args])


def test_admin_commands_require_login(home: Path) -> None:
    result = _invoke(home, "entries", "add", "hello")

    assert result.exit_code == 1
    assert "Login to manage entries" in result.output


def test_login_then_manage_entries(home: Path) -> None:
    result = _invoke(home, "login")
    assert result.exit_code == 0
    assert "logged in" in result.output

    result = _invoke(home, "entries", "add", "Shipping takes 3-5 business days.")
    assert result.exit_code == 0
    assert "Entry added" in result.output

    result = _invoke(home, "entries", "list")
    assert result.exit_code == 0
    assert "Shipping takes 3-5 business days." in result.output

    result = _invoke(home, "entries", "edit", "0", "Shipping takes a week.")
    assert result.exit_code == 0
    assert "Entry updated" in result.output

    result = _invoke(home, "ask", "How long does shipping take?")
    assert result.exit_code == 0
    assert "Shipping takes a week." in result.output

    result = _invoke(home, "entries", "delete", "0", "--yes")
    assert result.exit_code == 0
    assert "Entry deleted" in result.output

    result = _invoke(home, "logout")
    assert result.exit_code == 0
    assert "anonymous" in result.output


def test_delete_out_of_range_fails(home: Path) -> None:
    _invoke(home, "login")

    result = _invoke(home, "entries", "delete", "3", "--yes")

    assert result.exit_code == 1
    assert "no entry at position 3" in result.output


def test_delete_prompts_for_confirmation(home: Path) -> None:
    _invoke(home, "login")
    _invoke(home, "entries", "add", "keep me")

    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, ["--home", str(home), "entries", "delete", "0"], input="n\n")
    assert result.exit_code == 1

    result = _invoke(home, "entries", "list")
    assert "keep me" in result.output


def test_demo_populates_entries(home: Path) -> None:
    _invoke(home, "login")

    result = _invoke(home, "entries", "demo")
    assert result.exit_code == 0
    assert "Demo data populated" in result.output

    result = _invoke(home, "entries", "list")
    assert "Stored entries (3)" in result.output


def test_blank_question_is_a_quiet_no_op(home: Path) -> None:
    result = _invoke(home, "ask", "   ")

    assert result.exit_code == 0
    assert "Error" not in result.output
    assert "question is empty" not in result.output


def test_blank_entry_is_a_quiet_no_op(home: Path) -> None:
    _invoke(home, "login")

    result = _invoke(home, "entries", "add", "  ")
    assert result.exit_code == 0
    assert "Entry added" not in result.output
    assert "Error" not in result.output

    result = _invoke(home, "entries", "list")
    assert "Stored entries (0)" in result.output


def test_clear_checks_login_before_prompting(home: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, ["--home", str(home), "entries", "clear"])

    assert result.exit_code == 1
    assert "Login to manage entries" in result.output
    assert "Delete every entry?" not in result.output


def test_chat_command_invokes_interactive_runner(monkeypatch: pytest.MonkeyPatch, home: Path) -> None:
    called = {"run": False}

    class _FakeInteractive:
        def __init__(self, client, _renderer) -> None:
            assert client.session.handle is not None

        async def run(self) -> None:
            called["run"] = True

    monkeypatch.setattr(cli_app_module, "InteractiveCli", _FakeInteractive)

    result = _invoke(home, "chat")

    assert result.exit_code == 0
    assert called["run"] is True
