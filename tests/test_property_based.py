"""Property-based tests for the parser and the numeric helpers."""

import math
import re

from hypothesis import given, settings
from hypothesis import strategies as st

from vesper.analysis.outline import build_structure
from vesper.models import Tone
from vesper.parser import parse_script
from vesper.parser.beats import BEAT_TEMPLATES, estimate_total_pages
from vesper.parser.tone import detect_tone
from vesper.utils import normalized_gap, round_half_up

screenplay_lines = st.one_of(
    st.sampled_from(
        [
            "INT. DINER - NIGHT",
            "EXT. ROOFTOP - DAY",
            "int. basement",
            "EXT. FIELD - CONTINUOUS",
            "MAYA",
            "JOE",
            "OLD MAN",
            "CUT TO:",
            "FADE OUT.",
            "",
            "   ",
            "Rain falls.",
            "Why now?",
            "Stop it!",
            "I love you...",
        ]
    ),
    st.text(
        alphabet=st.characters(exclude_categories=("Cs",), exclude_characters="\r\n"),
        max_size=40,
    ),
)

screenplays = st.lists(screenplay_lines, max_size=300).map("\n".join)


class TestParserProperties:
    """Invariants that hold for any input text."""

    @given(text=screenplays)
    @settings(max_examples=75, deadline=None)
    def test_scenes_are_numbered_and_ordered(self, text):
        scenes = parse_script(text).scenes
        assert [s.scene_number for s in scenes] == list(range(1, len(scenes) + 1))
        for scene in scenes:
            assert 0 <= scene.page_start <= scene.page_end
        starts = [s.page_start for s in scenes]
        assert starts == sorted(starts)

    @given(text=screenplays)
    @settings(max_examples=75, deadline=None)
    def test_characters_are_ranked(self, text):
        characters = parse_script(text).characters
        assert [c.importance_rank for c in characters] == list(
            range(1, len(characters) + 1)
        )
        lines = [c.total_lines for c in characters]
        assert lines == sorted(lines, reverse=True)
        assert len({c.name for c in characters}) == len(characters)

    @given(text=screenplays)
    @settings(max_examples=75, deadline=None)
    def test_beats_fall_inside_their_windows(self, text):
        result = parse_script(text)
        windows = {
            t.beat_type: t.window(result.total_pages) for t in BEAT_TEMPLATES
        }
        scene_numbers = {s.scene_number for s in result.scenes}

        assert len({b.beat_type for b in result.beats}) == len(result.beats)
        for beat in result.beats:
            low, high = windows[beat.beat_type]
            assert low <= beat.page_number <= high
            assert beat.scene_number in scene_numbers
            assert beat.confidence in (0.5, 0.7)

    @given(text=screenplays)
    @settings(max_examples=75, deadline=None)
    def test_one_scene_per_header_line(self, text):
        headers = [
            line
            for line in text.split("\n")
            if re.match(r"(INT\.|EXT\.)", line.strip(), re.IGNORECASE)
        ]
        assert len(parse_script(text).scenes) == len(headers)

    @given(text=screenplays)
    @settings(max_examples=75, deadline=None)
    def test_dialogue_ratio_below_one(self, text):
        for scene in parse_script(text).scenes:
            assert 0 <= scene.dialogue_ratio < 1

    @given(text=screenplays)
    @settings(max_examples=50, deadline=None)
    def test_dialogue_word_counts(self, text):
        for line in parse_script(text).dialogue:
            assert line.text
            assert line.word_count == len(line.text.split())

    @given(text=screenplays)
    @settings(max_examples=30, deadline=None)
    def test_parse_is_deterministic(self, text):
        assert parse_script(text).to_dict() == parse_script(text).to_dict()

    @given(text=st.text(max_size=2000))
    def test_page_estimate(self, text):
        lines = len(text.split("\n"))
        assert estimate_total_pages(text) == math.ceil(lines / 60)

    @given(text=st.text(max_size=200))
    def test_tone_is_always_known(self, text):
        assert isinstance(detect_tone(text), Tone)


class TestNumericProperties:
    @given(value=st.floats(min_value=-1e9, max_value=1e9, allow_nan=False))
    def test_round_half_up_is_nearest(self, value):
        rounded = round_half_up(value)
        assert abs(rounded - value) <= 0.5 + 1e-9
        assert round_half_up(rounded + 0.5) == rounded + 1

    @given(
        a=st.floats(min_value=0, max_value=1e6),
        b=st.floats(min_value=0, max_value=1e6),
    )
    def test_normalized_gap_is_bounded(self, a, b):
        gap = normalized_gap(a, b)
        assert 0.0 <= gap <= 1.0
        assert gap == normalized_gap(b, a)

    @given(total=st.integers(min_value=1, max_value=400))
    def test_structure_milestones_are_ordered(self, total):
        structure = build_structure(total)
        assert (
            0
            <= structure.act1_end
            <= structure.act2a_midpoint
            <= structure.act2b_end
            <= structure.act3_end
            == structure.total_pages
            == total
        )
