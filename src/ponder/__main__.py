"""Ponder CLI entry point."""

from ponder.cli import app

if __name__ == "__main__":
    app()
