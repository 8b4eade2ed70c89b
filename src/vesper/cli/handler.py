"""Shared error handling and output helpers for CLI commands."""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, NoReturn

import typer
from rich.console import Console

from vesper.config import VesperSettings, get_logger
from vesper.exceptions import ValidationError, VesperError, check_database_path
from vesper.storage import SQLiteScriptStore

logger = get_logger(__name__)


def to_json(data: Any) -> str:
    """JSON text for pydantic models, dataclass reports and plain data."""
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")
    elif hasattr(data, "to_dict"):
        data = data.to_dict()
    return json.dumps(data, default=str, indent=2)


class CLIHandler:
    """Unified handler for CLI commands."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def handle_error(self, error: Exception, json_output: bool = False) -> NoReturn:
        """Report an error and exit with status 1."""
        if isinstance(error, VesperError):
            message = error.message
            hint = error.hint
        else:
            message = str(error)
            hint = None
        logger.error("Command failed", error=message)

        if json_output:
            # plain print keeps ANSI codes out of machine-readable output
            print(json.dumps({"success": False, "error": message}, indent=2))
        else:
            label = "Validation Error" if isinstance(error, ValidationError) else "Error"
            self.console.print(f"[red]{label}: {message}[/red]")
            if hint:
                self.console.print(f"[dim]Hint: {hint}[/dim]")
        raise typer.Exit(1)

    def print_json(self, data: Any) -> None:
        print(to_json(data))


@contextmanager
def open_store(
    settings: VesperSettings, create: bool = True
) -> Iterator[SQLiteScriptStore]:
    """Open the configured database for one command.

    With ``create=False`` a missing database file is an error instead of
    being created empty.
    """
    if not create:
        check_database_path(settings.database_path)
    store = SQLiteScriptStore(
        settings.database_path, timeout=settings.database_timeout
    ).initialize()
    try:
        yield store
    finally:
        store.close()
