"""Line classification for plain-text screenplays.

The scanner walks raw text once and labels every line as a scene header,
character cue, dialogue, action or blank line. Page numbers are estimated
from a fixed lines-per-page constant rather than real page breaks.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

SCENE_HEADER_PATTERN = re.compile(r"^(INT\.|EXT\.)", re.IGNORECASE)
SCENE_HEADING_PARTS = re.compile(
    r"^(INT\.|EXT\.)\s+(.+?)\s+-\s+(DAY|NIGHT|DAWN|DUSK|CONTINUOUS)",
    re.IGNORECASE,
)
CHARACTER_CUE_PATTERN = re.compile(r"^[A-Z][A-Z\s]{2,}$")
# Case-sensitive on purpose: "Cut the rope" is dialogue, "CUT TO:" is not
TRANSITION_PATTERN = re.compile(r"^(INT\.|EXT\.|FADE|CUT)")

DEFAULT_LOCATION = "UNKNOWN"
DEFAULT_TIME = "DAY"


class LineKind(str, Enum):
    """Classification of a single screenplay line."""

    SCENE_HEADER = "scene_header"
    CHARACTER_CUE = "character_cue"
    DIALOGUE = "dialogue"
    ACTION = "action"
    BLANK = "blank"


@dataclass(frozen=True)
class SceneHeading:
    """Parsed parts of a scene header line."""

    scene_type: str
    location: str
    time_of_day: str
    parsed: bool = True


@dataclass(frozen=True)
class ScannedLine:
    """A trimmed line with its position, classification and page."""

    index: int
    text: str
    kind: LineKind
    page: int


def is_scene_header(line: str) -> bool:
    """Return True if the line starts with ``INT.`` or ``EXT.`` (any case)."""
    return bool(SCENE_HEADER_PATTERN.match(line.strip()))


def is_character_cue(line: str, max_length: int = 30) -> bool:
    """Return True for a short, all-caps line naming a speaker.

    Args:
        line: Line to test (surrounding whitespace is ignored).
        max_length: Cues must be strictly shorter than this.
    """
    text = line.strip()
    return len(text) < max_length and bool(CHARACTER_CUE_PATTERN.match(text))


def is_transition(line: str) -> bool:
    """Return True for directives that must never be read as dialogue."""
    return bool(TRANSITION_PATTERN.match(line.strip()))


def parse_scene_header(line: str) -> SceneHeading:
    """Split a header into scene type, location and time of day.

    Headers that don't follow ``INT./EXT. <LOCATION> - <TIME>`` still produce
    a heading: the location falls back to ``UNKNOWN`` and the time to ``DAY``.
    The scene type always follows the prefix that matched.

    Args:
        line: A line for which :func:`is_scene_header` is true.

    Returns:
        The parsed heading.
    """
    text = line.strip()
    match = SCENE_HEADING_PARTS.match(text)
    if match:
        return SceneHeading(
            scene_type=match.group(1).upper(),
            location=match.group(2).strip(),
            time_of_day=match.group(3).upper(),
        )

    prefix = SCENE_HEADER_PATTERN.match(text)
    scene_type = prefix.group(1).upper() if prefix else "INT."
    return SceneHeading(
        scene_type=scene_type,
        location=DEFAULT_LOCATION,
        time_of_day=DEFAULT_TIME,
        parsed=False,
    )


class LineScanner:
    """Single pass over screenplay text yielding classified lines.

    The page counter starts at 0 and is bumped after every line whose
    zero-based index is a multiple of ``lines_per_page``, so the first line
    sits on page 0 and the following ``lines_per_page`` lines on page 1.
    After iteration ``page`` holds the final counter value.
    """

    def __init__(self, text: str, lines_per_page: int = 60, cue_max_length: int = 30):
        self.lines = text.split("\n")
        self.lines_per_page = lines_per_page
        self.cue_max_length = cue_max_length
        self.page = 0

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def classify(self, text: str, previous_was_cue: bool) -> LineKind:
        """Classify one trimmed line given whether the line before was a cue."""
        if not text:
            return LineKind.BLANK
        if is_scene_header(text):
            return LineKind.SCENE_HEADER
        if is_character_cue(text, self.cue_max_length):
            return LineKind.CHARACTER_CUE
        if previous_was_cue and not is_transition(text):
            return LineKind.DIALOGUE
        return LineKind.ACTION

    def __iter__(self) -> Iterator[ScannedLine]:
        self.page = 0
        previous_was_cue = False
        for index, raw in enumerate(self.lines):
            text = raw.strip()
            kind = self.classify(text, previous_was_cue)
            yield ScannedLine(index=index, text=text, kind=kind, page=self.page)
            previous_was_cue = kind is LineKind.CHARACTER_CUE
            if index % self.lines_per_page == 0:
                self.page += 1
