"""Per-script summary statistics computed right after parsing."""

from __future__ import annotations

from collections import defaultdict
from typing import Literal

from pydantic import BaseModel, Field

from vesper.models import BeatType, Character, DialogueLine, Scene, StoryBeat
from vesper.parser.beats import BEAT_TEMPLATES
from vesper.utils import average, tally

DIALOGUE_HEAVY_RATIO = 0.7
ACTION_HEAVY_RATIO = 0.3
MAIN_CHARACTER_LINES = 50

# Beats whose industry windows are checked, as absolute pages
TIMED_BEATS = (
    BeatType.INCITING_INCIDENT,
    BeatType.END_OF_ACT_1,
    BeatType.MIDPOINT,
    BeatType.CLIMAX,
)

VoiceDifferentiation = Literal["high", "medium", "low"]


class StructureSummary(BaseModel):
    total_scenes: int = 0
    avg_scene_length: float = 0.0
    dialogue_heavy_scenes: int = 0
    action_heavy_scenes: int = 0


class CharacterSummary(BaseModel):
    total_count: int = 0
    main_characters: int = 0
    protagonist: str = "Unknown"
    voice_differentiation: VoiceDifferentiation = "low"


class DialogueSummary(BaseModel):
    total_lines: int = 0
    avg_line_length: float = 0.0
    tone_distribution: dict[str, int] = Field(default_factory=dict)


class PacingSummary(BaseModel):
    beats_identified: int = 0
    beat_timing_accuracy: float = 0.0
    scene_density: float = 0.0


class ScriptAnalysis(BaseModel):
    """Structure, character, dialogue and pacing figures for one script."""

    structure: StructureSummary = Field(default_factory=StructureSummary)
    characters: CharacterSummary = Field(default_factory=CharacterSummary)
    dialogue: DialogueSummary = Field(default_factory=DialogueSummary)
    pacing: PacingSummary = Field(default_factory=PacingSummary)


def voice_differentiation(dialogue: list[DialogueLine]) -> VoiceDifferentiation:
    """Rate how distinct speakers are by the spread of their line lengths.

    The spread is the gap between the highest and lowest per-character
    average words per line: above 5 is high, above 2 medium.
    """
    by_character: dict[str, list[int]] = defaultdict(list)
    for line in dialogue:
        by_character[line.character].append(line.word_count)
    if not by_character:
        return "low"

    averages = [average(counts) for counts in by_character.values()]
    spread = max(averages) - min(averages)
    if spread > 5:
        return "high"
    if spread > 2:
        return "medium"
    return "low"


def beat_timing_accuracy(beats: list[StoryBeat]) -> float:
    """Percentage of timed beats that land inside their industry window."""
    windows = {t.beat_type: t.page_range for t in BEAT_TEMPLATES}
    timed = [b for b in beats if b.beat_type in TIMED_BEATS]
    if not timed:
        return 0.0

    accurate = 0
    for beat in timed:
        low, high = windows[beat.beat_type]
        if low <= beat.page_number <= high:
            accurate += 1
    return accurate / len(timed) * 100


def summarize(
    scenes: list[Scene],
    characters: list[Character],
    dialogue: list[DialogueLine],
    beats: list[StoryBeat],
) -> ScriptAnalysis:
    """Compute the per-script summary. Empty inputs give zeros."""
    last_page = scenes[-1].page_end if scenes else 0
    return ScriptAnalysis(
        structure=StructureSummary(
            total_scenes=len(scenes),
            avg_scene_length=average(s.page_end - s.page_start for s in scenes),
            dialogue_heavy_scenes=sum(
                1 for s in scenes if s.dialogue_ratio > DIALOGUE_HEAVY_RATIO
            ),
            action_heavy_scenes=sum(
                1 for s in scenes if s.dialogue_ratio < ACTION_HEAVY_RATIO
            ),
        ),
        characters=CharacterSummary(
            total_count=len(characters),
            main_characters=sum(
                1 for c in characters if c.total_lines > MAIN_CHARACTER_LINES
            ),
            protagonist=characters[0].name if characters else "Unknown",
            voice_differentiation=voice_differentiation(dialogue),
        ),
        dialogue=DialogueSummary(
            total_lines=len(dialogue),
            avg_line_length=average(d.word_count for d in dialogue),
            tone_distribution={
                str(tone): count for tone, count in tally(d.tone.value for d in dialogue)
            },
        ),
        pacing=PacingSummary(
            beats_identified=len(beats),
            beat_timing_accuracy=beat_timing_accuracy(beats),
            # a script that never leaves page 0 is measured against 100 pages
            scene_density=len(scenes) / (last_page or 100),
        ),
    )
