"""Dictionary-backed store for tests and throwaway sessions."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from vesper.exceptions import ScriptNotFoundError
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


class InMemoryScriptStore:
    """ScriptStore keeping every row in process memory.

    Rows are copied on the way in and out so callers can't mutate stored
    state by accident.
    """

    def __init__(self) -> None:
        self._scripts: dict[int, Script] = {}
        self._next_id = 1
        self._scenes: dict[tuple[int, int], Scene] = {}
        self._characters: dict[tuple[int, str], Character] = {}
        self._dialogue: dict[int, list[DialogueLine]] = {}
        self._beats: dict[tuple[int, str], StoryBeat] = {}
        self._performances: dict[tuple[int, str], Performance] = {}
        self._patterns: dict[tuple[str, str], LearnedPattern] = {}

    # Scripts

    def add_script(self, script: Script) -> Script:
        stored = script.model_copy(deep=True)
        stored.id = self._next_id
        self._next_id += 1
        self._scripts[stored.id] = stored
        return stored.model_copy(deep=True)

    def get_script(self, script_id: int) -> Script:
        try:
            return self._scripts[script_id].model_copy(deep=True)
        except KeyError:
            raise ScriptNotFoundError(script_id) from None

    def list_scripts(self, rated_only: bool = False) -> list[Script]:
        scripts = [s.model_copy(deep=True) for s in self._scripts.values()]
        if rated_only:
            scripts = [s for s in scripts if (s.rating or 0) > 0]
            scripts.sort(key=lambda s: s.rating or 0, reverse=True)
        return scripts

    def update_script(self, script: Script) -> Script:
        if script.id is None or script.id not in self._scripts:
            raise ScriptNotFoundError(script.id if script.id is not None else "None")
        stored = script.model_copy(deep=True)
        stored.updated_at = datetime.now(UTC)
        self._scripts[script.id] = stored
        return stored.model_copy(deep=True)

    def find_comparables(
        self, genre: str, min_rating: float = 7.0, limit: int = 10
    ) -> list[Script]:
        matches = [
            s
            for s in self._scripts.values()
            if s.has_genre(genre) and s.rating is not None and s.rating >= min_rating
        ]
        matches.sort(key=lambda s: s.rating or 0, reverse=True)
        return [s.model_copy(deep=True) for s in matches[:limit]]

    def list_genres(self) -> list[str]:
        seen: dict[str, str] = {}
        for script in self._scripts.values():
            for tag in script.genre_tags:
                seen.setdefault(tag.lower(), tag)
        return sorted(seen.values(), key=str.lower)

    # Parse results

    def save_parse_result(self, script_id: int, result: ParseResult) -> None:
        self.get_script(script_id)
        for scene in result.scenes:
            self._scenes[(script_id, scene.scene_number)] = scene.model_copy(
                update={"script_id": script_id}, deep=True
            )
        for character in result.characters:
            self._characters[(script_id, character.name)] = character.model_copy(
                update={"script_id": script_id}, deep=True
            )
        self._dialogue[script_id] = [
            line.model_copy(update={"script_id": script_id}) for line in result.dialogue
        ]
        for beat in result.beats:
            self._beats[(script_id, beat.beat_type.value)] = beat.model_copy(
                update={"script_id": script_id}
            )

    def has_scenes(self, script_id: int) -> bool:
        return any(key[0] == script_id for key in self._scenes)

    def get_scenes(self, script_id: int) -> list[Scene]:
        scenes = [s for (sid, _), s in self._scenes.items() if sid == script_id]
        scenes.sort(key=lambda s: s.scene_number)
        return [s.model_copy(deep=True) for s in scenes]

    def count_scenes(self, script_id: int) -> int:
        return sum(1 for sid, _ in self._scenes if sid == script_id)

    def count_characters(self, script_id: int) -> int:
        return sum(1 for sid, _ in self._characters if sid == script_id)

    def get_characters(self, script_ids: Iterable[int]) -> list[Character]:
        wanted = set(script_ids)
        return [
            c.model_copy(deep=True)
            for (sid, _), c in self._characters.items()
            if sid in wanted
        ]

    def get_dialogue(self, script_ids: Iterable[int]) -> list[DialogueLine]:
        lines: list[DialogueLine] = []
        for script_id in script_ids:
            lines.extend(d.model_copy() for d in self._dialogue.get(script_id, []))
        return lines

    def get_beats(self, script_ids: Iterable[int]) -> list[StoryBeat]:
        wanted = set(script_ids)
        return [b.model_copy() for (sid, _), b in self._beats.items() if sid in wanted]

    # Cast

    def save_performances(self, script_id: int, performances: list[Performance]) -> None:
        for performance in performances:
            self._performances[(script_id, performance.actor_name)] = (
                performance.model_copy(update={"script_id": script_id})
            )

    def get_performances(self, script_ids: Iterable[int]) -> list[Performance]:
        wanted = set(script_ids)
        return [
            p.model_copy()
            for (sid, _), p in self._performances.items()
            if sid in wanted
        ]

    # Patterns

    def upsert_patterns(self, patterns: list[LearnedPattern]) -> None:
        for pattern in patterns:
            self._patterns[pattern.key] = pattern.model_copy(deep=True)

    def list_patterns(
        self, pattern_type: PatternType | None = None
    ) -> list[LearnedPattern]:
        patterns = sorted(self._patterns.values(), key=lambda p: p.key)
        if pattern_type is not None:
            patterns = [p for p in patterns if p.pattern_type == pattern_type]
        return [p.model_copy(deep=True) for p in patterns]

    # Stats

    def table_counts(self) -> dict[str, int]:
        return {
            "scripts": len(self._scripts),
            "scenes": len(self._scenes),
            "characters": len(self._characters),
            "dialogue_lines": sum(len(lines) for lines in self._dialogue.values()),
            "story_beats": len(self._beats),
            "performances": len(self._performances),
            "learned_patterns": len(self._patterns),
        }

    def close(self) -> None:
        pass
