"""Command-line interface for Ponder."""

from .app import app

__all__ = ["app"]
