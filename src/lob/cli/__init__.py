"""CLI for lob."""

from lob.cli.main import app, main


__all__ = ["app", "main"]
