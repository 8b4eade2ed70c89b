"""Small numeric helpers shared by the parser and the analysis layer."""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Hashable, Iterable


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding towards +infinity.

    Python's ``round`` uses banker's rounding (``round(27.5) == 28`` but
    ``round(26.5) == 26``); page numbers need ``26.5 -> 27``.
    """
    return math.floor(value + 0.5)


def round_to(value: float, digits: int) -> float:
    """Round half up to ``digits`` decimal places."""
    factor = 10**digits
    return round_half_up(value * factor) / factor


def average(values: Iterable[float]) -> float:
    """Arithmetic mean, 0.0 for an empty input."""
    items = list(values)
    if not items:
        return 0.0
    return sum(items) / len(items)


def normalized_gap(a: float, b: float) -> float:
    """Bounded difference proxy: ``min(1, |a - b| / mean(a, b))``.

    Not a statistical correlation. Returns 0.0 when both values are zero.
    """
    mean = (a + b) / 2
    if mean == 0:
        return 0.0
    return min(1.0, abs(a - b) / abs(mean))


def tally(values: Iterable[Hashable]) -> list[tuple[Hashable, int]]:
    """Count occurrences, most frequent first, ties in first-seen order."""
    return Counter(values).most_common()
