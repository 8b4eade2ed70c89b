"""Vesper CLI package."""

from vesper.cli.main import app, main

__all__ = ["app", "main"]
