from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from ponder.cli.inputs import iter_queries
from ponder.core.prompt import FINALIZE_SYSTEM_PROMPT
from ponder.errors import CompletionError
from ponder.store import ConversationStore
from ponder.types import Message

cli_app_module = importlib.import_module("ponder.cli.app")


class FakeCompletionClient:
    instances: list[FakeCompletionClient] = []
    fail_on_query: str | None = None

    def __init__(self, settings: Any) -> None:
        self.settings = settings
        self.calls: list[list[Message]] = []
        self.closed = False
        FakeCompletionClient.instances.append(self)

    def __enter__(self) -> FakeCompletionClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.closed = True

    def list_models(self) -> list[str]:
        return ["a-model", "b-model"]

    def get_completion(self, messages: list[Message], **_: Any) -> str:
        self.calls.append(list(messages))
        queries = [message.content for message in messages if message.role.value == "user"]
        if self.fail_on_query is not None and queries and queries[-1] == self.fail_on_query:
            raise CompletionError(500, "Internal Server Error", "boom")
        if messages[-1].content == FINALIZE_SYSTEM_PROMPT:
            return f"answer to {queries[-1]}"
        return "<think>pondering</think>"


@pytest.fixture
def home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    home = tmp_path / "ponder-home"
    monkeypatch.setenv("PONDER_HOME", str(home))
    monkeypatch.setenv("PONDER_API_KEY", "sk-test")
    monkeypatch.setattr(cli_app_module, "CompletionClient", FakeCompletionClient)
    FakeCompletionClient.instances = []
    FakeCompletionClient.fail_on_query = None
    return home


def test_query_prints_answer(home: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, ["--query", "What is 2+2?", "--rounds", "2"])

    assert result.exit_code == 0, result.output
    assert "answer to What is 2+2?" in result.stdout
    client = FakeCompletionClient.instances[0]
    assert len(client.calls) == 3
    assert client.closed is True
    assert not (home / "conversations").exists()


def test_model_override_reaches_settings(home: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, ["-q", "hi", "-m", "custom-model", "-r", "1"])

    assert result.exit_code == 0, result.output
    assert FakeCompletionClient.instances[0].settings.model == "custom-model"


def test_save_then_continue(home: Path) -> None:
    runner = CliRunner()
    first = runner.invoke(cli_app_module.app, ["-q", "first question", "-r", "1", "--save"])
    assert first.exit_code == 0, first.output

    store = ConversationStore(home / "conversations")
    ids = store.list_conversations()
    assert len(ids) == 1
    assert f"Saved conversation: {ids[0]}" in first.output

    second = runner.invoke(cli_app_module.app, ["-q", "follow up", "-r", "1", "--continue", ids[0], "--save"])
    assert second.exit_code == 0, second.output
    assert "answer to follow up" in second.stdout
    assert store.list_conversations() == ids
    contents = [message.content for message in store.load(ids[0])]
    assert contents[0] == "first question"
    assert contents[-1] == "answer to follow up"


def test_files_are_sent_before_query(home: Path, tmp_path: Path) -> None:
    first = tmp_path / "a.txt"
    second = tmp_path / "b.txt"
    first.write_text("alpha", encoding="utf-8")
    second.write_text("beta", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(
        cli_app_module.app, ["-q", "compare", "-r", "1", "-f", str(first), "--file", str(second)]
    )

    assert result.exit_code == 0, result.output
    sent = FakeCompletionClient.instances[0].calls[0]
    assert [message.content for message in sent[1:]] == [
        f"File: {first}\n```\nalpha\n```",
        f"File: {second}\n```\nbeta\n```",
        "compare",
    ]


def test_missing_file_fails_before_remote_call(home: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, ["-q", "x", "-f", str(tmp_path / "nope.txt")])

    assert result.exit_code == 1
    assert "file not found" in result.output
    assert FakeCompletionClient.instances == []


def test_rounds_below_one_fails(home: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, ["-q", "x", "--rounds", "0"])

    assert result.exit_code == 1
    assert "--rounds must be at least 1" in result.output
    assert FakeCompletionClient.instances == []


def test_missing_credential_fails(home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PONDER_API_KEY")
    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, ["-q", "x"])

    assert result.exit_code == 1
    assert "API key not configured" in result.output
    assert FakeCompletionClient.instances == []


def test_interactive_stdin_without_query_fails(home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_app_module, "_stdin_is_interactive", lambda: True)
    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, [])

    assert result.exit_code == 1
    assert "missing --query" in result.output


def test_piped_queries_are_answered_in_order(home: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, ["-r", "1"], input="one\ntwo\n\nignored\n")

    assert result.exit_code == 0, result.output
    assert result.stdout.index("answer to one") < result.stdout.index("answer to two")
    assert "ignored" not in result.stdout
    assert len(FakeCompletionClient.instances[0].calls) == 4


def test_piped_query_failure_is_isolated(home: Path) -> None:
    FakeCompletionClient.fail_on_query = "two"
    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, ["-r", "1"], input="one\ntwo\nthree\n")

    assert result.exit_code == 1
    assert "answer to one" in result.stdout
    assert "answer to three" in result.stdout
    assert "Internal Server Error" in result.output


def test_continue_unknown_conversation_fails(home: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, ["-q", "x", "--continue", "deadbeef"])

    assert result.exit_code == 1
    assert "conversation not found: deadbeef" in result.output


def test_list_models(home: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, ["--list-models"])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["a-model", "b-model"]


def test_list_conversations_does_not_need_credential(home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PONDER_API_KEY")
    store = ConversationStore(home / "conversations")
    store.save([Message.user("b")], "bbbb")
    store.save([Message.user("a")], "aaaa")

    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, ["--list-conversations"])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["aaaa", "bbbb"]


def test_list_modes_are_mutually_exclusive(home: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, ["--list-models", "--list-conversations"])

    assert result.exit_code == 1
    assert "mutually exclusive" in result.output


def test_iter_queries_stops_at_blank_line() -> None:
    assert list(iter_queries(["  first \n", "second\n", "\n", "third\n"])) == ["first", "second"]
    assert list(iter_queries([])) == []


def test_thoughts_go_to_stderr_only(home: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, ["-q", "hidden?", "-r", "2"])

    assert result.exit_code == 0, result.output
    assert result.stdout == "answer to hidden?\n"
    assert "pondering" not in result.stdout
    assert "pondering" in result.stderr
    assert "Thinking (round 2)" in result.stderr


def test_corrupt_conversation_is_reported(home: Path) -> None:
    conversations = home / "conversations"
    conversations.mkdir(parents=True)
    (conversations / "badbytes.json").write_bytes(b'[{"role": "user", "content": "\xff\xfe"}]')

    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, ["-r", "1", "-c", "badbytes"], input="one\ntwo\n")

    assert result.exit_code == 1
    assert not isinstance(result.exception, UnicodeDecodeError)
    assert result.stderr.count("Error: conversation badbytes is corrupt") == 2
    assert FakeCompletionClient.instances[0].calls == []


@pytest.mark.parametrize("extra", [["--save"], ["--rounds", "2"]])
def test_list_models_rejects_query_options(home: Path, extra: list[str]) -> None:
    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, ["--list-models", *extra])

    assert result.exit_code == 1
    assert "list modes cannot be combined" in result.output
    assert FakeCompletionClient.instances == []
