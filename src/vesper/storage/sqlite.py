"""SQLite-backed script store."""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from vesper.config import get_logger
from vesper.exceptions import ScriptNotFoundError
from vesper.models import (
    Award,
    Character,
    DialogueLine,
    LearnedPattern,
    PatternType,
    Performance,
    Scene,
    Script,
    StoryBeat,
)
from vesper.storage.base import COUNTED_TABLES
from vesper.storage.connection import DatabaseConnection
from vesper.storage.schema import DatabaseSchema

if TYPE_CHECKING:
    from vesper.parser import ParseResult

logger = get_logger(__name__)

_SCRIPT_COLUMNS = (
    "title",
    "writer",
    "year",
    "source",
    "source_url",
    "raw_text",
    "rating",
    "genre_tags",
    "page_count",
    "scene_count",
    "character_count",
    "dialogue_ratio",
    "avg_scene_length",
    "total_dialogue_lines",
    "processed",
    "tmdb_id",
    "imdb_id",
    "media_type",
    "box_office",
    "tone",
    "awards",
    "created_at",
    "updated_at",
)

_GENRE_MATCH = (
    "EXISTS (SELECT 1 FROM json_each(scripts.genre_tags) "
    "WHERE lower(json_each.value) = lower(?))"
)


def _placeholders(count: int) -> str:
    return ", ".join("?" * count)


class SQLiteScriptStore:
    """ScriptStore persisted in a SQLite database file."""

    def __init__(self, db_path: str | Path, timeout: float = 30.0) -> None:
        """Open (but don't create) the database.

        Args:
            db_path: Path to the SQLite database file.
            timeout: Seconds to wait on a locked database.
        """
        self.connection = DatabaseConnection(db_path, timeout=timeout)
        self.schema = DatabaseSchema(self.connection)

    @property
    def db_path(self) -> Path:
        return self.connection.db_path

    def initialize(self) -> SQLiteScriptStore:
        """Create the schema if needed and return self."""
        if self.schema.get_current_version() == 0:
            self.schema.create_schema()
        return self

    def close(self) -> None:
        self.connection.close()

    # Row conversion

    def _script_params(self, script: Script) -> tuple[Any, ...]:
        data = script.model_dump(mode="json")
        data["genre_tags"] = json.dumps(script.genre_tags)
        data["awards"] = json.dumps(data["awards"])
        data["processed"] = int(script.processed)
        return tuple(data[column] for column in _SCRIPT_COLUMNS)

    def _row_to_script(self, row: sqlite3.Row) -> Script:
        data = dict(row)
        data["genre_tags"] = json.loads(data["genre_tags"])
        data["awards"] = [Award(**a) for a in json.loads(data["awards"])]
        data["processed"] = bool(data["processed"])
        return Script(**data)

    # Scripts

    def add_script(self, script: Script) -> Script:
        with self.connection.transaction() as conn:
            cursor = conn.execute(
                f"INSERT INTO scripts ({', '.join(_SCRIPT_COLUMNS)}) "
                f"VALUES ({_placeholders(len(_SCRIPT_COLUMNS))})",
                self._script_params(script),
            )
            script_id = cursor.lastrowid
        logger.debug("Added script", script_id=script_id, title=script.title)
        return self.get_script(int(script_id))  # type: ignore[arg-type]

    def get_script(self, script_id: int) -> Script:
        row = self.connection.fetch_one(
            "SELECT * FROM scripts WHERE id = ?", (script_id,)
        )
        if row is None:
            raise ScriptNotFoundError(script_id)
        return self._row_to_script(row)

    def list_scripts(self, rated_only: bool = False) -> list[Script]:
        if rated_only:
            sql = "SELECT * FROM scripts WHERE rating > 0 ORDER BY rating DESC, id"
        else:
            sql = "SELECT * FROM scripts ORDER BY created_at, id"
        return [self._row_to_script(row) for row in self.connection.fetch_all(sql)]

    def update_script(self, script: Script) -> Script:
        if script.id is None:
            raise ScriptNotFoundError("None")
        updated = script.model_copy(update={"updated_at": datetime.now(UTC)})
        assignments = ", ".join(f"{column} = ?" for column in _SCRIPT_COLUMNS)
        with self.connection.transaction() as conn:
            cursor = conn.execute(
                f"UPDATE scripts SET {assignments} WHERE id = ?",
                (*self._script_params(updated), script.id),
            )
            if cursor.rowcount == 0:
                raise ScriptNotFoundError(script.id)
        return self.get_script(script.id)

    def find_comparables(
        self, genre: str, min_rating: float = 7.0, limit: int = 10
    ) -> list[Script]:
        rows = self.connection.fetch_all(
            f"SELECT * FROM scripts WHERE {_GENRE_MATCH} AND rating >= ? "
            "ORDER BY rating DESC, id LIMIT ?",
            (genre.strip(), min_rating, limit),
        )
        return [self._row_to_script(row) for row in rows]

    def list_genres(self) -> list[str]:
        rows = self.connection.fetch_all(
            "SELECT json_each.value AS genre "
            "FROM scripts, json_each(scripts.genre_tags) ORDER BY scripts.id"
        )
        seen: dict[str, str] = {}
        for row in rows:
            seen.setdefault(row["genre"].lower(), row["genre"])
        return sorted(seen.values(), key=str.lower)

    # Parse results

    def save_parse_result(self, script_id: int, result: ParseResult) -> None:
        self.get_script(script_id)
        with self.connection.transaction() as conn:
            conn.executemany(
                """
                INSERT INTO scenes (
                    script_id, scene_number, scene_type, location, time_of_day,
                    page_start, page_end, content, characters_present,
                    dialogue_line_count, action_line_count, dialogue_ratio
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (script_id, scene_number) DO UPDATE SET
                    scene_type = excluded.scene_type,
                    location = excluded.location,
                    time_of_day = excluded.time_of_day,
                    page_start = excluded.page_start,
                    page_end = excluded.page_end,
                    content = excluded.content,
                    characters_present = excluded.characters_present,
                    dialogue_line_count = excluded.dialogue_line_count,
                    action_line_count = excluded.action_line_count,
                    dialogue_ratio = excluded.dialogue_ratio
                """,
                [
                    (
                        script_id,
                        s.scene_number,
                        s.scene_type,
                        s.location,
                        s.time_of_day,
                        s.page_start,
                        s.page_end,
                        s.content,
                        json.dumps(s.characters_present),
                        s.dialogue_line_count,
                        s.action_line_count,
                        s.dialogue_ratio,
                    )
                    for s in result.scenes
                ],
            )
            conn.executemany(
                """
                INSERT INTO characters (
                    script_id, name, first_appearance_page, scenes_in,
                    total_lines, importance_rank, archetype
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (script_id, name) DO UPDATE SET
                    first_appearance_page = excluded.first_appearance_page,
                    scenes_in = excluded.scenes_in,
                    total_lines = excluded.total_lines,
                    importance_rank = excluded.importance_rank,
                    archetype = COALESCE(excluded.archetype, characters.archetype)
                """,
                [
                    (
                        script_id,
                        c.name,
                        c.first_appearance_page,
                        json.dumps(c.scenes_in),
                        c.total_lines,
                        c.importance_rank,
                        c.archetype,
                    )
                    for c in result.characters
                ],
            )
            conn.execute("DELETE FROM dialogue_lines WHERE script_id = ?", (script_id,))
            conn.executemany(
                """
                INSERT INTO dialogue_lines (
                    script_id, scene_number, character, line_number, text,
                    word_count, tone
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        script_id,
                        d.scene_number,
                        d.character,
                        d.line_number,
                        d.text,
                        d.word_count,
                        d.tone.value,
                    )
                    for d in result.dialogue
                ],
            )
            conn.executemany(
                """
                INSERT INTO story_beats (
                    script_id, beat_type, page_number, scene_number, location,
                    confidence, timing_accuracy
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (script_id, beat_type) DO UPDATE SET
                    page_number = excluded.page_number,
                    scene_number = excluded.scene_number,
                    location = excluded.location,
                    confidence = excluded.confidence,
                    timing_accuracy = excluded.timing_accuracy
                """,
                [
                    (
                        script_id,
                        b.beat_type.value,
                        b.page_number,
                        b.scene_number,
                        b.location,
                        b.confidence,
                        b.timing_accuracy,
                    )
                    for b in result.beats
                ],
            )
        logger.debug(
            "Saved parse result",
            script_id=script_id,
            scenes=len(result.scenes),
            dialogue=len(result.dialogue),
        )

    def has_scenes(self, script_id: int) -> bool:
        row = self.connection.fetch_one(
            "SELECT 1 FROM scenes WHERE script_id = ? LIMIT 1", (script_id,)
        )
        return row is not None

    def get_scenes(self, script_id: int) -> list[Scene]:
        rows = self.connection.fetch_all(
            "SELECT * FROM scenes WHERE script_id = ? ORDER BY scene_number",
            (script_id,),
        )
        scenes = []
        for row in rows:
            data = dict(row)
            data["characters_present"] = json.loads(data["characters_present"])
            scenes.append(Scene(**data))
        return scenes

    def count_scenes(self, script_id: int) -> int:
        row = self.connection.fetch_one(
            "SELECT COUNT(*) FROM scenes WHERE script_id = ?", (script_id,)
        )
        return int(row[0]) if row else 0

    def count_characters(self, script_id: int) -> int:
        row = self.connection.fetch_one(
            "SELECT COUNT(*) FROM characters WHERE script_id = ?", (script_id,)
        )
        return int(row[0]) if row else 0

    def _rows_for(self, table: str, script_ids: Iterable[int], order: str) -> list:
        ids = list(script_ids)
        if not ids:
            return []
        return self.connection.fetch_all(
            f"SELECT * FROM {table} WHERE script_id IN ({_placeholders(len(ids))}) "
            f"ORDER BY {order}",
            tuple(ids),
        )

    def get_characters(self, script_ids: Iterable[int]) -> list[Character]:
        characters = []
        for row in self._rows_for("characters", script_ids, "script_id, id"):
            data = dict(row)
            data["scenes_in"] = json.loads(data["scenes_in"])
            characters.append(Character(**data))
        return characters

    def get_dialogue(self, script_ids: Iterable[int]) -> list[DialogueLine]:
        rows = self._rows_for("dialogue_lines", script_ids, "script_id, id")
        return [DialogueLine(**dict(row)) for row in rows]

    def get_beats(self, script_ids: Iterable[int]) -> list[StoryBeat]:
        rows = self._rows_for("story_beats", script_ids, "script_id, id")
        return [StoryBeat(**dict(row)) for row in rows]

    # Cast

    def save_performances(self, script_id: int, performances: list[Performance]) -> None:
        with self.connection.transaction() as conn:
            conn.executemany(
                """
                INSERT INTO performances (
                    script_id, actor_name, tmdb_person_id, character_name,
                    role_type, oscar_wins, emmy_wins
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (script_id, actor_name) DO UPDATE SET
                    tmdb_person_id = excluded.tmdb_person_id,
                    character_name = excluded.character_name,
                    role_type = excluded.role_type,
                    oscar_wins = excluded.oscar_wins,
                    emmy_wins = excluded.emmy_wins
                """,
                [
                    (
                        script_id,
                        p.actor_name,
                        p.tmdb_person_id,
                        p.character_name,
                        p.role_type,
                        p.oscar_wins,
                        p.emmy_wins,
                    )
                    for p in performances
                ],
            )

    def get_performances(self, script_ids: Iterable[int]) -> list[Performance]:
        rows = self._rows_for("performances", script_ids, "script_id, id")
        return [Performance(**dict(row)) for row in rows]

    # Patterns

    def upsert_patterns(self, patterns: list[LearnedPattern]) -> None:
        with self.connection.transaction() as conn:
            conn.executemany(
                """
                INSERT INTO learned_patterns (
                    pattern_type, pattern_name, description,
                    success_correlation_score, found_in_successful_scripts,
                    found_in_unsuccessful_scripts, genres, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (pattern_type, pattern_name) DO UPDATE SET
                    description = excluded.description,
                    success_correlation_score = excluded.success_correlation_score,
                    found_in_successful_scripts = excluded.found_in_successful_scripts,
                    found_in_unsuccessful_scripts =
                        excluded.found_in_unsuccessful_scripts,
                    genres = excluded.genres,
                    updated_at = excluded.updated_at
                """,
                [
                    (
                        p.pattern_type.value,
                        p.pattern_name,
                        p.description,
                        p.success_correlation_score,
                        p.found_in_successful_scripts,
                        p.found_in_unsuccessful_scripts,
                        json.dumps(p.genres),
                        p.updated_at.isoformat(),
                    )
                    for p in patterns
                ],
            )

    def list_patterns(
        self, pattern_type: PatternType | None = None
    ) -> list[LearnedPattern]:
        if pattern_type is None:
            rows = self.connection.fetch_all(
                "SELECT * FROM learned_patterns ORDER BY pattern_type, pattern_name"
            )
        else:
            rows = self.connection.fetch_all(
                "SELECT * FROM learned_patterns WHERE pattern_type = ? "
                "ORDER BY pattern_name",
                (pattern_type.value,),
            )
        patterns = []
        for row in rows:
            data = dict(row)
            data.pop("id")
            data["genres"] = json.loads(data["genres"])
            patterns.append(LearnedPattern(**data))
        return patterns

    # Stats

    def table_counts(self) -> dict[str, int]:
        counts = {}
        for table in COUNTED_TABLES:
            row = self.connection.fetch_one(f"SELECT COUNT(*) FROM {table}")  # noqa: S608
            counts[table] = int(row[0]) if row else 0
        return counts
