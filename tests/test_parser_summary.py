"""Tests for per-script summaries and the parse_script entry point."""

import pytest

from vesper.exceptions import ParseError
from vesper.models import BeatType, DialogueLine, StoryBeat
from vesper.parser import ParseResult, parse_script
from vesper.parser.summary import beat_timing_accuracy, summarize, voice_differentiation

pytestmark = pytest.mark.unit


def line(character: str, words: int) -> DialogueLine:
    return DialogueLine(
        scene_number=1,
        character=character,
        line_number=1,
        text=" ".join(["word"] * words),
        word_count=words,
    )


def beat(beat_type: BeatType, page: int) -> StoryBeat:
    return StoryBeat(beat_type=beat_type, page_number=page, scene_number=1, confidence=0.7)


class TestVoiceDifferentiation:
    def test_levels(self):
        assert voice_differentiation([line("A", 2), line("B", 9)]) == "high"
        assert voice_differentiation([line("A", 2), line("B", 5)]) == "medium"
        assert voice_differentiation([line("A", 2), line("B", 4)]) == "low"

    def test_uses_per_character_averages(self):
        lines = [line("A", 1), line("A", 11), line("B", 6)]
        assert voice_differentiation(lines) == "low"

    def test_empty(self):
        assert voice_differentiation([]) == "low"


class TestBeatTimingAccuracy:
    def test_only_timed_beats_count(self):
        beats = [
            beat(BeatType.OPENING_IMAGE, 50),
            beat(BeatType.INCITING_INCIDENT, 12),
            beat(BeatType.MIDPOINT, 70),
        ]
        assert beat_timing_accuracy(beats) == 50.0

    def test_no_timed_beats(self):
        assert beat_timing_accuracy([beat(BeatType.RESOLUTION, 110)]) == 0.0
        assert beat_timing_accuracy([]) == 0.0


class TestSummarize:
    def test_empty_inputs_give_zeros(self):
        analysis = summarize([], [], [], [])
        assert analysis.structure.total_scenes == 0
        assert analysis.characters.protagonist == "Unknown"
        assert analysis.dialogue.avg_line_length == 0.0
        assert analysis.pacing.scene_density == 0.0

    def test_sample(self, sample_text):
        analysis = parse_script(sample_text).analysis

        assert analysis.structure.total_scenes == 3
        assert analysis.structure.avg_scene_length == 0.0
        assert analysis.structure.dialogue_heavy_scenes == 0
        assert analysis.structure.action_heavy_scenes == 2
        assert analysis.characters.total_count == 2
        assert analysis.characters.main_characters == 0
        assert analysis.characters.protagonist == "MAYA"
        assert analysis.characters.voice_differentiation == "low"
        assert analysis.dialogue.total_lines == 5
        assert analysis.dialogue.avg_line_length == pytest.approx(5.0)
        assert analysis.dialogue.tone_distribution == {
            "neutral": 1,
            "intense": 1,
            "hesitant": 1,
            "questioning": 1,
            "tender": 1,
        }
        assert analysis.pacing.beats_identified == 4
        assert analysis.pacing.beat_timing_accuracy == 0.0
        assert analysis.pacing.scene_density == pytest.approx(3.0)


class TestParseScript:
    def test_result(self, sample_text):
        result = parse_script(sample_text)

        assert isinstance(result, ParseResult)
        assert len(result.scenes) == 3
        assert len(result.characters) == 2
        assert len(result.dialogue) == 5
        assert result.total_pages == 1
        assert [b.beat_type for b in result.beats] == [
            BeatType.MIDPOINT,
            BeatType.ALL_IS_LOST,
            BeatType.CLIMAX,
            BeatType.RESOLUTION,
        ]
        assert {b.scene_number for b in result.beats} == {1}

    def test_empty_text(self):
        result = parse_script("")
        assert result.scenes == []
        assert result.beats == []
        assert result.total_pages == 1

    def test_to_dict_is_json_ready(self, sample_text):
        data = parse_script(sample_text).to_dict()
        assert set(data) == {
            "scenes",
            "characters",
            "dialogue",
            "beats",
            "analysis",
            "total_pages",
        }
        assert data["dialogue"][1]["tone"] == "intense"
        assert data["beats"][0]["timing_accuracy"] == "perfect"

    def test_non_string_input(self):
        with pytest.raises(ParseError, match="must be a string"):
            parse_script(None)  # type: ignore[arg-type]

    def test_deterministic(self, sample_text):
        assert parse_script(sample_text).to_dict() == parse_script(sample_text).to_dict()
