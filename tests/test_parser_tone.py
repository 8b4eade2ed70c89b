"""Tests for the dialogue tone heuristic."""

import re

import pytest

from vesper.models import Tone
from vesper.parser.tone import TONE_RULES, ToneRule, detect_tone

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("text", "tone"),
    [
        ("Get out!", Tone.INTENSE),
        ("She started screaming at me", Tone.INTENSE),
        ("Where were you?", Tone.QUESTIONING),
        ("I don't know...", Tone.HESITANT),
        ("I thought… never mind", Tone.HESITANT),
        ("Well — maybe", Tone.HESITANT),
        ("Damn this car", Tone.AGGRESSIVE),
        ("I love you", Tone.TENDER),
        ("She cared for him", Tone.TENDER),
        ("Sweetheart, come home", Tone.TENDER),
        ("Haha, very good", Tone.HUMOROUS),
        ("That's funny", Tone.HUMOROUS),
        ("The train leaves at noon", Tone.NEUTRAL),
        ("", Tone.NEUTRAL),
    ],
)
def test_detect_tone(text, tone):
    assert detect_tone(text) is tone


def test_first_matching_rule_wins():
    # exclamation beats question mark, question mark beats ellipsis
    assert detect_tone("Where are you going?!") is Tone.INTENSE
    assert detect_tone("You mean...?") is Tone.QUESTIONING
    assert detect_tone("Damn, I love this") is Tone.AGGRESSIVE


def test_word_rules_respect_word_boundaries():
    assert detect_tone("Careful with that") is Tone.NEUTRAL
    assert detect_tone("Have a nice Shavuot") is Tone.NEUTRAL
    assert detect_tone("Lovely weather") is Tone.NEUTRAL


def test_rules_are_in_catalog_order():
    assert [rule.tone for rule in TONE_RULES] == [
        Tone.INTENSE,
        Tone.QUESTIONING,
        Tone.HESITANT,
        Tone.AGGRESSIVE,
        Tone.TENDER,
        Tone.HUMOROUS,
    ]


def test_custom_rules():
    rules = (ToneRule(Tone.HUMOROUS, re.compile("clown")),)
    assert detect_tone("a clown walks in", rules) is Tone.HUMOROUS
    assert detect_tone("Get out!", rules) is Tone.NEUTRAL
