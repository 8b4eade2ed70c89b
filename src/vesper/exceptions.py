"""Vesper errors.

Every error carries a one-line message plus an optional hint and details
mapping; ``str()`` renders all three so the CLI can print it as-is.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

# Config keys people commonly guess, mapped to the real setting
MISTAKEN_CONFIG_KEYS = {
    "db_path": "database_path",
    "api_key": "tmdb_api_key",  # pragma: allowlist secret
    "threshold": "success_threshold",
    "lines_per_page_estimate": "lines_per_page",
}


class VesperError(Exception):
    """Base class of all Vesper errors."""

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.hint = hint
        self.details = details
        super().__init__(self.format_error())

    def format_error(self) -> str:
        """Render as ``Error:`` line, then ``Hint:`` and indented ``Details:``."""
        lines = [f"Error: {self.message}"]
        if self.hint:
            lines.append(f"Hint: {self.hint}")
        if self.details:
            lines.append("Details:")
            lines.extend(f"  {key}: {value}" for key, value in self.details.items())
        return "\n".join(lines)


class ConfigurationError(VesperError):
    """Bad settings or an unreadable config file."""


class DatabaseError(VesperError):
    """The store could not be opened, created or queried."""


class ParseError(VesperError):
    """Screenplay input that cannot be read at all."""


class EnrichmentError(VesperError):
    """A metadata provider (TMDB) failed or returned garbage."""


class ValidationError(VesperError):
    """Invalid caller input. ``field`` names the offending input."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.field = field
        if details is None and field:
            details = {"field": field}
        super().__init__(message, hint=hint, details=details)


class ScriptNotFoundError(VesperError):
    def __init__(self, script_id: int | str) -> None:
        self.script_id = script_id
        super().__init__(
            f"Script not found: {script_id}",
            hint="Run 'vesper import' to add screenplays to the database",
            details={"script_id": script_id},
        )


def check_database_path(db_path: Any) -> None:
    """Raise ``DatabaseError`` unless ``db_path`` points at an existing file.

    The hint suggests a ``vesper.db`` in the working directory when there is
    one, and otherwise how to create or point at a database.
    """
    if db_path and Path(db_path).exists():
        return

    if Path("vesper.db").exists():
        hint = "Found vesper.db in current dir. Use that?"
    else:
        hint = (
            "Run 'vesper import' to create a database. "
            "Or set the VESPER_DATABASE_PATH environment variable."
        )
    raise DatabaseError(
        f"Database not found at {db_path}",
        hint=hint,
        details={
            "searched_path": str(db_path) if db_path else "None",
            "current_dir": str(Path.cwd()),
        },
    )


def check_config_keys(config: dict[str, Any]) -> None:
    """Reject well-known wrong spellings of config keys.

    Raises:
        ConfigurationError: Naming the key to use instead.
    """
    for wrong, correct in MISTAKEN_CONFIG_KEYS.items():
        if wrong not in config:
            continue
        raise ConfigurationError(
            f"Invalid configuration key '{wrong}'",
            hint=f"Use '{correct}' instead of '{wrong}'",
            details={
                "found_keys": list(config),
                "invalid_key": wrong,
                "correct_key": correct,
            },
        )
