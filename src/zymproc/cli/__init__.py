"""Command-line interface for zymproc."""

from zymproc.cli.app import entrypoint, main

__all__ = ["entrypoint", "main"]
