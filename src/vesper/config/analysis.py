"""Heuristic constants shared by the parser, aggregator and outline generator."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AnalysisConfig(BaseModel):
    """Tunable constants for screenplay analysis.

    One instance is passed into every analysis component so the numbers are
    overridable in one place instead of being scattered as literals.
    """

    model_config = ConfigDict(frozen=True)

    lines_per_page: int = Field(
        default=60,
        ge=1,
        description="Raw text lines counted as one screenplay page",
    )
    cue_max_length: int = Field(
        default=30,
        ge=4,
        description="Character cues must be shorter than this many characters",
    )
    success_threshold: float = Field(
        default=7.0,
        ge=0.0,
        le=10.0,
        description="Ratings at or above this value form the successful cohort",
    )
    comparable_min_rating: float = Field(
        default=7.0,
        ge=0.0,
        le=10.0,
        description="Minimum rating for a script to count as an outline comparable",
    )
    comparable_limit: int = Field(
        default=10,
        ge=1,
        description="Maximum number of comparables used by the outline generator",
    )
    reference_pages: int = Field(
        default=110,
        ge=1,
        description="Feature length that beat windows and defaults are written for",
    )
    probability_ceiling: float = Field(
        default=0.95,
        gt=0.0,
        le=1.0,
        description="Upper bound for the outline success probability",
    )
    top_genre_limit: int = Field(
        default=5,
        ge=1,
        description="How many genres the genre pattern analysis reports",
    )
