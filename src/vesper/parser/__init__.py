"""Rule-based screenplay parser.

``parse_script`` turns raw screenplay text into scenes, characters,
dialogue lines and story beats, plus a per-script summary. It is a pure
function: nothing is read from or written to storage.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from vesper.config import get_logger
from vesper.config.analysis import AnalysisConfig
from vesper.exceptions import ParseError
from vesper.models import Character, DialogueLine, Scene, StoryBeat
from vesper.parser.beats import BEAT_TEMPLATES, detect_beats, estimate_total_pages
from vesper.parser.extractor import (
    extract_characters,
    extract_dialogue,
    extract_scenes,
)
from vesper.parser.scanner import LineKind, LineScanner, parse_scene_header
from vesper.parser.summary import ScriptAnalysis, summarize
from vesper.parser.tone import TONE_RULES, detect_tone

logger = get_logger(__name__)


@dataclass
class ParseResult:
    """Everything extracted from one screenplay."""

    scenes: list[Scene]
    characters: list[Character]
    dialogue: list[DialogueLine]
    beats: list[StoryBeat]
    analysis: ScriptAnalysis = field(default_factory=ScriptAnalysis)
    total_pages: int = 0

    def to_dict(self) -> dict:
        """JSON-ready representation."""
        return {
            "scenes": [s.model_dump(mode="json") for s in self.scenes],
            "characters": [c.model_dump(mode="json") for c in self.characters],
            "dialogue": [d.model_dump(mode="json") for d in self.dialogue],
            "beats": [b.model_dump(mode="json") for b in self.beats],
            "analysis": self.analysis.model_dump(mode="json"),
            "total_pages": self.total_pages,
        }


def parse_script(raw_text: str, config: AnalysisConfig | None = None) -> ParseResult:
    """Parse screenplay text into scenes, characters, dialogue and beats.

    Malformed headers never abort the parse; text before the first scene
    header is ignored.

    Args:
        raw_text: The screenplay as one string with line breaks.
        config: Heuristic constants; defaults are used when omitted.

    Returns:
        The parse result.

    Raises:
        ParseError: If ``raw_text`` is not a string.
    """
    if not isinstance(raw_text, str):
        raise ParseError(
            message="Screenplay text must be a string",
            details={"received": type(raw_text).__name__},
        )

    config = config or AnalysisConfig()
    scenes = extract_scenes(raw_text, config)
    characters = extract_characters(scenes)
    dialogue = extract_dialogue(scenes, config)
    total_pages = estimate_total_pages(raw_text, config.lines_per_page)
    beats = detect_beats(scenes, total_pages, config)
    analysis = summarize(scenes, characters, dialogue, beats)

    logger.debug(
        "Parsed screenplay",
        scenes=len(scenes),
        characters=len(characters),
        dialogue=len(dialogue),
        beats=len(beats),
        total_pages=total_pages,
    )

    return ParseResult(
        scenes=scenes,
        characters=characters,
        dialogue=dialogue,
        beats=beats,
        analysis=analysis,
        total_pages=total_pages,
    )


__all__ = [
    "BEAT_TEMPLATES",
    "TONE_RULES",
    "LineKind",
    "LineScanner",
    "ParseResult",
    "ScriptAnalysis",
    "detect_tone",
    "parse_scene_header",
    "parse_script",
]
