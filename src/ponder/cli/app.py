"""CLI main module for Ponder."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import typer
from loguru import logger
from pydantic import ValidationError as SettingsValidationError

from ponder.cli.inputs import iter_queries
from ponder.cli.render import Diagnostics, create_renderer
from ponder.client import CompletionClient
from ponder.config import Settings, get_settings
from ponder.core.orchestrator import ReasoningOrchestrator
from ponder.errors import PonderError, ValidationError
from ponder.logging_utils import configure_logging
from ponder.store import ConversationStore
from ponder.types import FileContent

app = typer.Typer(
    name="ponder",
    help="Think it over. Multi-round reasoning from the command line.",
    add_completion=False,
    rich_markup_mode="rich",
)


def _stdin_is_interactive() -> bool:
    return sys.stdin.isatty()


def _stdout_is_interactive() -> bool:
    return sys.stdout.isatty()


def _validate_request(
    *,
    settings: Settings,
    query: str | None,
    rounds: int | None,
    files: list[Path],
    continue_id: str | None,
    list_models: bool,
    list_conversations: bool,
    save: bool,
) -> None:
    if list_models and list_conversations:
        raise ValidationError("--list-models and --list-conversations are mutually exclusive")
    listing = list_models or list_conversations
    if listing and (query or continue_id or files or save or rounds is not None):
        raise ValidationError("list modes cannot be combined with a query, files, --continue, --save or --rounds")
    if rounds is not None and rounds < 1:
        raise ValidationError(f"--rounds must be at least 1, got {rounds}")
    if not list_conversations and not settings.resolved_api_key:
        raise ValidationError("API key not configured. Set PONDER_API_KEY or OPENAI_API_KEY in your environment.")
    for path in files:
        if not path.is_file():
            raise ValidationError(f"file not found: {path}")
    if not listing and query is None and continue_id is None and _stdin_is_interactive():
        raise ValidationError("missing --query; pass one or pipe queries on standard input")


def _read_files(paths: list[Path]) -> list[FileContent]:
    files: list[FileContent] = []
    for path in paths:
        try:
            files.append(FileContent.read(path))
        except UnicodeDecodeError as exc:
            raise ValidationError(f"file is not UTF-8 text: {path}") from exc
    return files


def _query_source(query: str | None, continue_id: str | None) -> Iterator[str | None]:
    """Yield the queries to answer in this invocation."""
    if query:
        yield query
        return
    if not _stdin_is_interactive():
        received = False
        for line in iter_queries(sys.stdin):
            received = True
            yield line
        if received:
            return
    if continue_id is not None:
        yield None


def _answer_queries(
    orchestrator: ReasoningOrchestrator,
    diagnostics: Diagnostics,
    queries: Iterator[str | None],
    *,
    continue_id: str | None,
    files: list[FileContent],
    rounds: int | None,
    save: bool,
) -> int:
    failures = 0
    for query in queries:
        try:
            result = orchestrator.respond(
                query,
                conversation_id=continue_id,
                files=files,
                rounds=rounds,
                save=save,
            )
        except (PonderError, OSError) as exc:
            failures += 1
            logger.opt(exception=exc).debug("cli.query.failed query={!r}", query)
            diagnostics.error(str(exc))
            continue
        if result.conversation_id is not None:
            diagnostics.info(f"Saved conversation: {result.conversation_id}")
    return failures


@app.command()
def main(
    query: str | None = typer.Option(None, "--query", "-q", help="Question to think about"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model name override"),
    rounds: int | None = typer.Option(None, "--rounds", "-r", help="Number of reasoning rounds (>= 1)"),
    files: list[Path] | None = typer.Option(  # noqa: B008
        None, "--file", "-f", help="File to include as context; may be repeated"
    ),
    save: bool = typer.Option(False, "--save", "-s", help="Save the conversation and print its id"),
    continue_id: str | None = typer.Option(None, "--continue", "-c", help="Continue a saved conversation"),
    list_models: bool = typer.Option(False, "--list-models", help="List available models"),
    list_conversations: bool = typer.Option(False, "--list-conversations", help="List saved conversations"),
    raw: bool = typer.Option(False, "--raw", help="Print the answer without Markdown formatting"),
) -> None:
    """Answer a query after several private rounds of reasoning."""
    diagnostics = Diagnostics()
    file_paths = list(files or [])
    try:
        settings = get_settings(model=model)
    except SettingsValidationError as exc:
        diagnostics.error(f"Invalid configuration: {exc}")
        raise typer.Exit(1) from exc
    configure_logging(settings.log_level)

    try:
        _validate_request(
            settings=settings,
            query=query,
            rounds=rounds,
            files=file_paths,
            continue_id=continue_id,
            list_models=list_models,
            list_conversations=list_conversations,
            save=save,
        )
        store = ConversationStore(settings.conversations_dir)
        if list_conversations:
            for conversation_id in store.list_conversations():
                typer.echo(conversation_id)
            return

        context_files = _read_files(file_paths)
        with CompletionClient(settings) as client:
            if list_models:
                for name in client.list_models():
                    typer.echo(name)
                return

            orchestrator = ReasoningOrchestrator(
                client,
                settings,
                store=store,
                renderer=create_renderer(markdown=not raw and _stdout_is_interactive()),
                on_thought=diagnostics.thought,
            )
            failures = _answer_queries(
                orchestrator,
                diagnostics,
                _query_source(query, continue_id),
                continue_id=continue_id,
                files=context_files,
                rounds=rounds,
                save=save,
            )
    except (PonderError, OSError) as exc:
        diagnostics.error(str(exc))
        raise typer.Exit(1) from exc

    if failures:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
