"""Outline models returned by the outline generator.

Field names are snake_case in Python and camelCase on the wire
(``totalPages``, ``act1End``) so API clients see the same keys the
dashboard always consumed.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialising with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Dump with camelCase keys, dropping unset optional sections."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class OutlineStructure(CamelModel):
    """Five milestone pages of the four-part structure."""

    total_pages: int
    act1_end: int
    act2a_midpoint: int
    act2b_end: int
    act3_end: int


class OutlineBeat(CamelModel):
    """A named beat with a page number or an ``"a-b"`` page range."""

    name: str
    page: int | str
    description: str
    example: str


class Act(CamelModel):
    title: str
    pages: str
    beats: list[OutlineBeat] = Field(default_factory=list)


class Comparable(CamelModel):
    title: str
    rating: float | None = None
    year: int | None = None


class Prediction(CamelModel):
    """Success-probability estimate derived from comparable ratings."""

    probability: float
    confidence: Literal["high", "medium", "low"]
    reasoning: str
    comparables: list[Comparable] | None = None


class Recommendations(CamelModel):
    target_length: str
    pacing: str
    characters: str
    dialogue: str
    budget: str | None = None


class Outline(CamelModel):
    """A templated four-part outline for a premise and genre."""

    premise: str
    genre: str
    structure: OutlineStructure
    act1: Act
    act2a: Act
    act2b: Act
    act3: Act
    prediction: Prediction
    recommendations: Recommendations

    @property
    def acts(self) -> list[Act]:
        return [self.act1, self.act2a, self.act2b, self.act3]
