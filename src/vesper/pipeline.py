"""Batch processing of stored screenplays.

``ScriptImporter`` turns screenplay files on disk into ``Script`` rows and
``BatchParser`` parses every stored script that has not been parsed yet,
writing the extracted rows and summary figures back to the store.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from vesper.config import get_logger
from vesper.config.analysis import AnalysisConfig
from vesper.exceptions import ValidationError, VesperError
from vesper.models import Script
from vesper.parser import ParseResult, parse_script
from vesper.storage.base import ScriptStore, stored_id

logger = get_logger(__name__)

SCREENPLAY_SUFFIXES = (".txt", ".fountain")


def read_screenplay(path: Path) -> str:
    """Screenplay text of a file; undecodable bytes become U+FFFD."""
    return path.read_text(encoding="utf-8", errors="replace")


@dataclass
class BatchReport:
    """Counts and per-script errors from one batch run."""

    parsed: int = 0
    skipped: int = 0
    failed: int = 0
    errors: dict[int, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.parsed + self.skipped + self.failed

    def add_failure(self, script_id: int, error: Exception | str) -> None:
        self.failed += 1
        self.errors[script_id] = str(error)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "parsed": self.parsed,
            "skipped": self.skipped,
            "failed": self.failed,
            "errors": {str(k): v for k, v in self.errors.items()},
        }


def apply_summary(script: Script, result: ParseResult) -> Script:
    """Copy the parse summary figures onto a script row."""
    scenes = result.scenes
    dialogue_lines = sum(s.dialogue_line_count for s in scenes)
    action_lines = sum(s.action_line_count for s in scenes)
    total_lines = dialogue_lines + action_lines

    script.page_count = result.total_pages
    script.scene_count = len(scenes)
    script.character_count = len(result.characters)
    script.dialogue_ratio = dialogue_lines / total_lines if total_lines else 0.0
    script.avg_scene_length = result.analysis.structure.avg_scene_length
    script.total_dialogue_lines = len(result.dialogue)
    script.processed = True
    return script


class BatchParser:
    """Parses every unparsed script in a store."""

    def __init__(
        self,
        store: ScriptStore,
        config: AnalysisConfig | None = None,
        delay: float = 0.5,
    ) -> None:
        """Initialize the batch parser.

        Args:
            store: Scripts are read from and results written to this store.
            config: Heuristic constants passed to the parser.
            delay: Seconds to wait between scripts.
        """
        self.store = store
        self.config = config or AnalysisConfig()
        self.delay = delay

    def run(self) -> BatchReport:
        """Parse all stored scripts in creation order.

        Scripts that already have scenes are skipped. A failure on one script
        is logged and counted; the batch carries on with the next one.

        Returns:
            The batch report.
        """
        report = BatchReport()
        scripts = self.store.list_scripts()
        logger.info("Starting batch parse", scripts=len(scripts))

        for index, script in enumerate(scripts):
            script_id = stored_id(script)
            if self.store.has_scenes(script_id):
                logger.debug("Skipping parsed script", script_id=script_id)
                report.skipped += 1
                continue

            try:
                self.parse_one(script)
                report.parsed += 1
            except (VesperError, ValueError) as e:
                logger.error(
                    "Failed to parse script",
                    script_id=script_id,
                    title=script.title,
                    error=str(e),
                )
                report.add_failure(script_id, e)

            if self.delay and index < len(scripts) - 1:
                time.sleep(self.delay)

        logger.info(
            "Batch parse complete",
            parsed=report.parsed,
            skipped=report.skipped,
            failed=report.failed,
        )
        return report

    def parse_one(self, script: Script) -> ParseResult:
        """Parse one stored script and persist the result."""
        script_id = stored_id(script)
        result = parse_script(script.raw_text, self.config)
        self.store.save_parse_result(script_id, result)
        self.store.update_script(apply_summary(script, result))
        logger.info(
            "Parsed script",
            script_id=script_id,
            title=script.title,
            scenes=len(result.scenes),
            characters=len(result.characters),
            dialogue=len(result.dialogue),
        )
        return result


class ScriptImporter:
    """Reads screenplay files from disk into the store."""

    def __init__(self, store: ScriptStore) -> None:
        self.store = store

    def discover(self, path: Path) -> list[Path]:
        """Screenplay files at ``path`` (a file or a directory tree)."""
        if path.is_file():
            return [path]
        if not path.is_dir():
            raise ValidationError(
                f"Path not found: {path}",
                field="path",
                hint="Pass a screenplay file or a directory of .txt/.fountain files",
            )
        return sorted(
            p
            for p in path.rglob("*")
            if p.is_file() and p.suffix.lower() in SCREENPLAY_SUFFIXES
        )

    def import_file(
        self,
        file_path: Path,
        title: str | None = None,
        **metadata: Any,
    ) -> Script:
        """Store one screenplay file as a script.

        Args:
            file_path: Text file holding the screenplay.
            title: Script title; the file stem is used when omitted.
            **metadata: Extra ``Script`` fields (year, rating, genre_tags...).

        Returns:
            The stored script with its id.
        """
        raw_text = read_screenplay(file_path)
        script = Script(
            title=title or file_path.stem.replace("_", " "),
            raw_text=raw_text,
            source="file",
            source_url=str(file_path.resolve()),
            **metadata,
        )
        stored = self.store.add_script(script)
        logger.info("Imported script", script_id=stored.id, title=stored.title)
        return stored

    def import_path(self, path: Path) -> list[Script]:
        """Import every screenplay file found at ``path``."""
        imported = []
        for file_path in self.discover(path):
            try:
                imported.append(self.import_file(file_path))
            except (OSError, ValueError) as e:
                logger.error(
                    "Failed to import file", file=str(file_path), error=str(e)
                )
        return imported
