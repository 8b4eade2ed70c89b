"""Corpus analysis: learned patterns and outline generation."""

from vesper.analysis.outline import OutlineGenerator, generate_outline
from vesper.analysis.patterns import AggregationReport, PatternAggregator

__all__ = [
    "AggregationReport",
    "OutlineGenerator",
    "PatternAggregator",
    "generate_outline",
]
