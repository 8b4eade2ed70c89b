"""Request and response bodies for the HTTP API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ParseRequest(BaseModel):
    """Screenplay text to parse without storing it."""

    text: str = Field(description="Screenplay text", max_length=10 * 1024 * 1024)


class OutlineRequest(BaseModel):
    """Outline request; premise and genre are checked by the generator."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    premise: str | None = Field(default=None, description="One-line story premise")
    genre: str | None = Field(default=None, description="Genre of the comparables")
    target_length: int | None = Field(
        default=None, description="Page count overriding the derived one"
    )


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class HealthResponse(BaseModel):
    status: str = "ok"
    message: str


class StatsResponse(BaseModel):
    success: bool = True
    stats: dict[str, int]


class GenresResponse(BaseModel):
    success: bool = True
    genres: list[str]


class ExampleScript(BaseModel):
    title: str
    year: int | None = None
    rating: float | None = None


class ExamplesResponse(BaseModel):
    success: bool = True
    examples: list[ExampleScript]


class PatternsResponse(BaseModel):
    success: bool = True
    patterns: list[dict[str, Any]]


class OutlineResponse(BaseModel):
    success: bool = True
    outline: dict[str, Any]
