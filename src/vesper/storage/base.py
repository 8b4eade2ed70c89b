"""Persistence collaborator interface.

Every component that reads or writes screenplay rows receives a
``ScriptStore`` at construction time. Writes of child rows are idempotent
upserts keyed as documented on each method.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from vesper.exceptions import DatabaseError
from vesper.models import (
    Character,
    DialogueLine,
    LearnedPattern,
    PatternType,
    Performance,
    Scene,
    Script,
    StoryBeat,
)

if TYPE_CHECKING:
    from vesper.parser import ParseResult

COUNTED_TABLES = (
    "scripts",
    "scenes",
    "characters",
    "dialogue_lines",
    "story_beats",
    "performances",
    "learned_patterns",
)


def stored_id(script: Script) -> int:
    """The id of a script read back from a store.

    Raises:
        DatabaseError: If the script was never saved and has no id.
    """
    if script.id is None:
        raise DatabaseError(
            f"Script '{script.title}' has not been stored yet",
            hint="Add it with ScriptStore.add_script() first",
        )
    return script.id


@runtime_checkable
class ScriptStore(Protocol):
    """Row-oriented storage for scripts, parse results and patterns."""

    # Scripts
    def add_script(self, script: Script) -> Script:
        """Insert a script and return it with its id assigned."""
        ...

    def get_script(self, script_id: int) -> Script:
        """Fetch a script, raising ``ScriptNotFoundError`` if absent."""
        ...

    def list_scripts(self, rated_only: bool = False) -> list[Script]:
        """All scripts in creation order, or rated ones by rating descending."""
        ...

    def update_script(self, script: Script) -> Script:
        """Persist changes to an existing script."""
        ...

    def find_comparables(
        self, genre: str, min_rating: float = 7.0, limit: int = 10
    ) -> list[Script]:
        """Scripts tagged ``genre`` (any case) rated at least ``min_rating``."""
        ...

    def list_genres(self) -> list[str]:
        """Distinct genre tags across all scripts, alphabetically."""
        ...

    # Parse results
    def save_parse_result(self, script_id: int, result: ParseResult) -> None:
        """Store scenes, characters, dialogue and beats for a script.

        Scenes upsert by ``(script_id, scene_number)``, characters by
        ``(script_id, name)``, beats by ``(script_id, beat_type)``; dialogue
        is replaced wholesale.
        """
        ...

    def has_scenes(self, script_id: int) -> bool: ...

    def get_scenes(self, script_id: int) -> list[Scene]: ...

    def count_scenes(self, script_id: int) -> int: ...

    def count_characters(self, script_id: int) -> int: ...

    def get_characters(self, script_ids: Iterable[int]) -> list[Character]: ...

    def get_dialogue(self, script_ids: Iterable[int]) -> list[DialogueLine]: ...

    def get_beats(self, script_ids: Iterable[int]) -> list[StoryBeat]: ...

    # Cast
    def save_performances(
        self, script_id: int, performances: list[Performance]
    ) -> None:
        """Upsert performances by ``(script_id, actor_name)``."""
        ...

    def get_performances(self, script_ids: Iterable[int]) -> list[Performance]: ...

    # Patterns
    def upsert_patterns(self, patterns: list[LearnedPattern]) -> None:
        """Insert or overwrite patterns keyed by ``(pattern_type, pattern_name)``."""
        ...

    def list_patterns(
        self, pattern_type: PatternType | None = None
    ) -> list[LearnedPattern]: ...

    # Stats
    def table_counts(self) -> dict[str, int]:
        """Row counts keyed by the names in ``COUNTED_TABLES``."""
        ...

    def close(self) -> None: ...
