"""Scene, character and dialogue extraction from classified lines."""

from __future__ import annotations

from dataclasses import dataclass, field

from vesper.config.analysis import AnalysisConfig
from vesper.models import Character, DialogueLine, Scene
from vesper.parser.scanner import (
    LineKind,
    LineScanner,
    is_character_cue,
    is_transition,
    parse_scene_header,
)
from vesper.parser.tone import detect_tone


@dataclass
class _OpenScene:
    """Accumulator for the scene currently being read."""

    scene_number: int
    scene_type: str
    location: str
    time_of_day: str
    page_start: int
    lines: list[str] = field(default_factory=list)
    characters: dict[str, None] = field(default_factory=dict)
    dialogue_lines: int = 0
    action_lines: int = 0

    def add(self, text: str, kind: LineKind) -> None:
        self.lines.append(text)
        if kind is LineKind.CHARACTER_CUE:
            self.characters.setdefault(text, None)
        elif kind is LineKind.DIALOGUE:
            self.dialogue_lines += 1
        elif kind in (LineKind.ACTION, LineKind.SCENE_HEADER):
            self.action_lines += 1

    def close(self, page_end: int) -> Scene:
        # +1 smooths sparse scenes and keeps the ratio below 1
        ratio = self.dialogue_lines / (self.dialogue_lines + self.action_lines + 1)
        return Scene(
            scene_number=self.scene_number,
            scene_type=self.scene_type,  # type: ignore[arg-type]
            location=self.location,
            time_of_day=self.time_of_day,
            page_start=self.page_start,
            page_end=page_end,
            content="".join(f"{line}\n" for line in self.lines),
            characters_present=list(self.characters),
            dialogue_line_count=self.dialogue_lines,
            action_line_count=self.action_lines,
            dialogue_ratio=ratio,
        )


def extract_scenes(text: str, config: AnalysisConfig | None = None) -> list[Scene]:
    """Segment screenplay text into header-delimited scenes.

    Lines before the first scene header are dropped. Every header opens a
    scene even when its location and time can't be parsed.

    Args:
        text: Raw screenplay text.
        config: Heuristic constants; defaults are used when omitted.

    Returns:
        Scenes in script order, numbered from 1.
    """
    config = config or AnalysisConfig()
    scanner = LineScanner(
        text,
        lines_per_page=config.lines_per_page,
        cue_max_length=config.cue_max_length,
    )

    scenes: list[Scene] = []
    current: _OpenScene | None = None

    for line in scanner:
        if line.kind is LineKind.SCENE_HEADER:
            if current is not None:
                scenes.append(current.close(line.page))
            heading = parse_scene_header(line.text)
            current = _OpenScene(
                scene_number=len(scenes) + 1,
                scene_type=heading.scene_type,
                location=heading.location,
                time_of_day=heading.time_of_day,
                page_start=line.page,
            )
        if current is not None:
            current.add(line.text, line.kind)

    if current is not None:
        scenes.append(current.close(scanner.page))

    return scenes


def extract_characters(scenes: list[Scene]) -> list[Character]:
    """Build the character registry from the cues present in each scene.

    ``total_lines`` is approximated by the dialogue count of every scene the
    character is cued in. The registry is ordered by that count, highest
    first, with ``importance_rank`` following the order.
    """
    registry: dict[str, Character] = {}
    for scene in scenes:
        for name in scene.characters_present:
            character = registry.get(name)
            if character is None:
                character = Character(name=name, first_appearance_page=scene.page_start)
                registry[name] = character
            character.scenes_in.append(scene.scene_number)
            character.total_lines += scene.dialogue_line_count

    ranked = sorted(registry.values(), key=lambda c: c.total_lines, reverse=True)
    for rank, character in enumerate(ranked, start=1):
        character.importance_rank = rank
    return ranked


def extract_dialogue(
    scenes: list[Scene], config: AnalysisConfig | None = None
) -> list[DialogueLine]:
    """Attribute dialogue lines to speakers, scene by scene.

    A cue sets the speaker until the next cue or the end of the scene; every
    non-empty line in between is attributed to them except transition
    directives.
    """
    config = config or AnalysisConfig()
    dialogue: list[DialogueLine] = []

    for scene in scenes:
        speaker: str | None = None
        line_number = 0
        for raw in scene.content.split("\n"):
            text = raw.strip()
            if is_character_cue(text, config.cue_max_length):
                speaker = text
            elif speaker and text and not is_transition(text):
                line_number += 1
                dialogue.append(
                    DialogueLine(
                        scene_number=scene.scene_number,
                        character=speaker,
                        line_number=line_number,
                        text=text,
                        word_count=len(text.split()),
                        tone=detect_tone(text),
                    )
                )

    return dialogue
