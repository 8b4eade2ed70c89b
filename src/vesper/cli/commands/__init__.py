"""Vesper CLI commands."""

from vesper.cli.commands.analysis import batch_command, outline_command, patterns_command
from vesper.cli.commands.enrich import enrich_command
from vesper.cli.commands.parse import import_command, parse_command
from vesper.cli.commands.server import serve_command, stats_command

__all__ = [
    "batch_command",
    "enrich_command",
    "import_command",
    "outline_command",
    "parse_command",
    "patterns_command",
    "serve_command",
    "stats_command",
]
