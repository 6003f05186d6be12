"""CLI renderers for Ponder."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape


class MarkdownRenderer:
    """Render answers as Markdown on a terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render(self, text: str) -> None:
        self.console.print(Markdown(text))


class PlainRenderer:
    """Write answers verbatim, for pipes and files."""

    def render(self, text: str) -> None:
        typer.echo(text)


class Diagnostics:
    """Side channel on stderr for thoughts, notices and errors."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True, soft_wrap=True)

    def thought(self, round_no: int, thought: str) -> None:
        self.console.print(f"[bold magenta]Thinking (round {round_no})[/bold magenta]")
        self.console.print(f"[dim italic]{escape(thought)}[/dim italic]")

    def info(self, message: str) -> None:
        self.console.print(f"[dim]{escape(message)}[/dim]")

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def create_renderer(*, markdown: bool) -> MarkdownRenderer | PlainRenderer:
    """Pick the answer renderer for the current output stream."""
    return MarkdownRenderer() if markdown else PlainRenderer()
