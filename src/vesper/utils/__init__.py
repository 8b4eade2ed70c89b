"""Vesper utilities module."""

from vesper.utils.stats import (
    average,
    normalized_gap,
    round_half_up,
    round_to,
    tally,
)

__all__ = [
    "average",
    "normalized_gap",
    "round_half_up",
    "round_to",
    "tally",
]
