"""Tests for screenplay line classification."""

import pytest

from vesper.parser.scanner import (
    LineKind,
    LineScanner,
    is_character_cue,
    is_scene_header,
    is_transition,
    parse_scene_header,
)

pytestmark = pytest.mark.unit


class TestSceneHeaders:
    @pytest.mark.parametrize(
        "line",
        ["INT. KITCHEN - DAY", "EXT. ROOF - NIGHT", "int. office - day", "  EXT.  "],
    )
    def test_recognised(self, line):
        assert is_scene_header(line)

    @pytest.mark.parametrize("line", ["INTERIOR KITCHEN", "I.N.T. KITCHEN", "", "INT"])
    def test_not_recognised(self, line):
        assert not is_scene_header(line)

    def test_well_formed_header(self):
        heading = parse_scene_header("EXT. MOUNTAIN PASS - DUSK")
        assert heading.scene_type == "EXT."
        assert heading.location == "MOUNTAIN PASS"
        assert heading.time_of_day == "DUSK"
        assert heading.parsed

    def test_lowercase_header_is_normalised(self):
        heading = parse_scene_header("int. garage - continuous")
        assert heading.scene_type == "INT."
        assert heading.location == "garage"
        assert heading.time_of_day == "CONTINUOUS"

    def test_malformed_header_gets_defaults(self):
        heading = parse_scene_header("INT. SOMEWHERE WITHOUT A TIME")
        assert heading.scene_type == "INT."
        assert heading.location == "UNKNOWN"
        assert heading.time_of_day == "DAY"
        assert not heading.parsed

    def test_malformed_exterior_keeps_prefix(self):
        assert parse_scene_header("EXT.").scene_type == "EXT."


class TestCues:
    @pytest.mark.parametrize("line", ["MAYA", "OLD MAN", "  JOE  ", "DR SMITH"])
    def test_cues(self, line):
        assert is_character_cue(line)

    @pytest.mark.parametrize(
        "line",
        [
            "Maya",
            "AL",  # too short
            "MAYA (V.O.)",
            "CUT TO:",
            "A VERY LONG LINE OF CAPITAL LETTERS",
            "",
        ],
    )
    def test_not_cues(self, line):
        assert not is_character_cue(line)

    def test_length_limit_is_configurable(self):
        assert not is_character_cue("ABCDEFGH", max_length=8)
        assert is_character_cue("ABCDEFG", max_length=8)

    @pytest.mark.parametrize("line", ["CUT TO:", "FADE OUT.", "INT. HALL", "EXT. YARD"])
    def test_transitions(self, line):
        assert is_transition(line)

    def test_transition_check_is_case_sensitive(self):
        assert not is_transition("Cut the rope")


class TestLineScanner:
    def test_classification(self):
        text = "INT. HALL - DAY\n\nA door slams.\nMAYA\nWho's there?\nCUT TO:"
        kinds = [line.kind for line in LineScanner(text)]
        assert kinds == [
            LineKind.SCENE_HEADER,
            LineKind.BLANK,
            LineKind.ACTION,
            LineKind.CHARACTER_CUE,
            LineKind.DIALOGUE,
            LineKind.ACTION,
        ]

    def test_transition_after_cue_is_not_dialogue(self):
        kinds = [line.kind for line in LineScanner("JOE\nCUT TO:")]
        assert kinds == [LineKind.CHARACTER_CUE, LineKind.ACTION]

    def test_only_the_line_right_after_a_cue_is_dialogue(self):
        kinds = [line.kind for line in LineScanner("JOE\nHello.\nStill talking.")]
        assert kinds == [LineKind.CHARACTER_CUE, LineKind.DIALOGUE, LineKind.ACTION]

    def test_lines_are_trimmed(self):
        (line,) = list(LineScanner("   MAYA   "))
        assert line.text == "MAYA"
        assert line.index == 0

    def test_page_counter(self):
        text = "\n".join(f"line {i}" for i in range(130))
        scanner = LineScanner(text, lines_per_page=60)
        pages = [line.page for line in scanner]
        assert pages[0] == 0
        assert pages[1] == 1
        assert pages[60] == 1
        assert pages[61] == 2
        assert pages[121] == 3
        assert scanner.page == 3
        assert scanner.line_count == 130

    def test_empty_text(self):
        scanner = LineScanner("")
        lines = list(scanner)
        assert [line.kind for line in lines] == [LineKind.BLANK]
        assert scanner.page == 1
