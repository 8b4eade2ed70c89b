"""Heuristic tone tagging for dialogue lines."""

from __future__ import annotations

import re
from dataclasses import dataclass

from vesper.models import Tone


@dataclass(frozen=True)
class ToneRule:
    """A pattern that, when found in a line, assigns ``tone``."""

    tone: Tone
    pattern: re.Pattern[str]

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


# Evaluated top to bottom; the first rule that matches wins.
# Punctuation checks are literal, word checks ignore case.
TONE_RULES: tuple[ToneRule, ...] = (
    ToneRule(Tone.INTENSE, re.compile(r"!|\b(?:yell|shout|scream)", re.IGNORECASE)),
    ToneRule(Tone.QUESTIONING, re.compile(r"\?")),
    ToneRule(Tone.HESITANT, re.compile(r"\.\.\.|…|—")),
    ToneRule(Tone.AGGRESSIVE, re.compile(r"\b(?:fuck|shit|damn)", re.IGNORECASE)),
    ToneRule(
        Tone.TENDER,
        re.compile(
            r"\b(?:lov(?:e|es|ed|ing)|car(?:e|es|ed|ing)|sweet\w*)\b",
            re.IGNORECASE,
        ),
    ),
    ToneRule(Tone.HUMOROUS, re.compile(r"\b(?:ha(?:ha)*|heh|funny)\b", re.IGNORECASE)),
)


def detect_tone(text: str, rules: tuple[ToneRule, ...] = TONE_RULES) -> Tone:
    """Return the tone of the first matching rule, or neutral.

    >>> detect_tone("Where are you going?!")
    <Tone.INTENSE: 'intense'>
    """
    for rule in rules:
        if rule.matches(text):
            return rule.tone
    return Tone.NEUTRAL
