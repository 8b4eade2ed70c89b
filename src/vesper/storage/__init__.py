"""Storage backends for scripts, parse results and learned patterns."""

from vesper.storage.base import COUNTED_TABLES, ScriptStore
from vesper.storage.connection import DatabaseConnection
from vesper.storage.memory import InMemoryScriptStore
from vesper.storage.sqlite import SQLiteScriptStore

__all__ = [
    "COUNTED_TABLES",
    "DatabaseConnection",
    "InMemoryScriptStore",
    "SQLiteScriptStore",
    "ScriptStore",
]
