"""Database schema for the SQLite store."""

from __future__ import annotations

import sqlite3

from vesper.config import get_logger
from vesper.storage.connection import DatabaseConnection

logger = get_logger(__name__)

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_info (
    version INTEGER PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    description TEXT
);

CREATE TABLE IF NOT EXISTS scripts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    writer TEXT,
    year INTEGER,
    source TEXT,
    source_url TEXT,
    raw_text TEXT NOT NULL DEFAULT '',
    rating REAL,
    genre_tags TEXT NOT NULL DEFAULT '[]',  -- JSON array
    page_count INTEGER,
    scene_count INTEGER NOT NULL DEFAULT 0,
    character_count INTEGER NOT NULL DEFAULT 0,
    dialogue_ratio REAL,
    avg_scene_length REAL,
    total_dialogue_lines INTEGER NOT NULL DEFAULT 0,
    processed BOOLEAN NOT NULL DEFAULT 0,
    tmdb_id INTEGER,
    imdb_id TEXT,
    media_type TEXT CHECK (media_type IN ('movie', 'tv')),
    box_office REAL,
    tone TEXT,
    awards TEXT NOT NULL DEFAULT '[]',  -- JSON array
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_scripts_rating ON scripts(rating);
CREATE INDEX IF NOT EXISTS idx_scripts_tmdb ON scripts(tmdb_id);

CREATE TABLE IF NOT EXISTS scenes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    script_id INTEGER NOT NULL REFERENCES scripts(id) ON DELETE CASCADE,
    scene_number INTEGER NOT NULL,
    scene_type TEXT NOT NULL,
    location TEXT NOT NULL,
    time_of_day TEXT NOT NULL,
    page_start INTEGER NOT NULL,
    page_end INTEGER NOT NULL,
    content TEXT NOT NULL,
    characters_present TEXT NOT NULL DEFAULT '[]',  -- JSON array
    dialogue_line_count INTEGER NOT NULL DEFAULT 0,
    action_line_count INTEGER NOT NULL DEFAULT 0,
    dialogue_ratio REAL NOT NULL DEFAULT 0,
    UNIQUE (script_id, scene_number),
    CHECK (page_start <= page_end)
);

CREATE TABLE IF NOT EXISTS characters (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    script_id INTEGER NOT NULL REFERENCES scripts(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    first_appearance_page INTEGER NOT NULL DEFAULT 0,
    scenes_in TEXT NOT NULL DEFAULT '[]',  -- JSON array of scene numbers
    total_lines INTEGER NOT NULL DEFAULT 0,
    importance_rank INTEGER NOT NULL DEFAULT 0,
    archetype TEXT,
    UNIQUE (script_id, name)
);

CREATE TABLE IF NOT EXISTS dialogue_lines (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    script_id INTEGER NOT NULL REFERENCES scripts(id) ON DELETE CASCADE,
    scene_number INTEGER NOT NULL,
    character TEXT NOT NULL,
    line_number INTEGER NOT NULL,
    text TEXT NOT NULL,
    word_count INTEGER NOT NULL,
    tone TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_dialogue_script ON dialogue_lines(script_id);

CREATE TABLE IF NOT EXISTS story_beats (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    script_id INTEGER NOT NULL REFERENCES scripts(id) ON DELETE CASCADE,
    beat_type TEXT NOT NULL,
    page_number INTEGER NOT NULL,
    scene_number INTEGER NOT NULL,
    location TEXT NOT NULL,
    confidence REAL NOT NULL,
    timing_accuracy TEXT NOT NULL,
    UNIQUE (script_id, beat_type)
);

CREATE TABLE IF NOT EXISTS performances (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    script_id INTEGER NOT NULL REFERENCES scripts(id) ON DELETE CASCADE,
    actor_name TEXT NOT NULL,
    tmdb_person_id INTEGER,
    character_name TEXT,
    role_type TEXT NOT NULL,
    oscar_wins INTEGER NOT NULL DEFAULT 0,
    emmy_wins INTEGER NOT NULL DEFAULT 0,
    UNIQUE (script_id, actor_name)
);

CREATE TABLE IF NOT EXISTS learned_patterns (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    pattern_type TEXT NOT NULL,
    pattern_name TEXT NOT NULL,
    description TEXT NOT NULL,
    success_correlation_score REAL NOT NULL,
    found_in_successful_scripts INTEGER NOT NULL DEFAULT 0,
    found_in_unsuccessful_scripts INTEGER NOT NULL DEFAULT 0,
    genres TEXT NOT NULL DEFAULT '["all"]',  -- JSON array
    updated_at TIMESTAMP NOT NULL,
    UNIQUE (pattern_type, pattern_name)
);
"""

REQUIRED_TABLES = (
    "schema_info",
    "scripts",
    "scenes",
    "characters",
    "dialogue_lines",
    "story_beats",
    "performances",
    "learned_patterns",
)


class DatabaseSchema:
    """Creates and checks the Vesper schema."""

    def __init__(self, connection: DatabaseConnection) -> None:
        self.connection = connection

    def create_schema(self) -> None:
        """Create all tables and record the schema version."""
        logger.info("Creating database schema", path=str(self.connection.db_path))
        self.connection.executescript(SCHEMA_SQL)
        with self.connection.transaction() as tx:
            tx.execute(
                "INSERT OR REPLACE INTO schema_info (version, description) "
                "VALUES (?, ?)",
                (SCHEMA_VERSION, f"Initial schema creation v{SCHEMA_VERSION}"),
            )

    def get_current_version(self) -> int:
        """Current schema version, or 0 if the schema was never created."""
        try:
            row = self.connection.connect().execute(
                "SELECT MAX(version) FROM schema_info"
            ).fetchone()
        except sqlite3.OperationalError:
            return 0
        return row[0] if row and row[0] is not None else 0

    def validate_schema(self) -> bool:
        """Return True if every required table exists."""
        rows = self.connection.fetch_all(
            "SELECT name FROM sqlite_master WHERE type='table'"
        )
        existing = {row[0] for row in rows}
        missing = set(REQUIRED_TABLES) - existing
        if missing:
            logger.error("Missing tables", tables=sorted(missing))
            return False
        return True
