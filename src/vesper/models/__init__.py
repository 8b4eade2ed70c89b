"""Vesper data models.

Screenplay rows produced by the parser and the aggregate records derived
from a corpus of parsed scripts. Child rows (scenes, characters, dialogue,
beats, performances) are owned by their parent script.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Tone(str, Enum):
    """Heuristic emotional register of one dialogue line."""

    INTENSE = "intense"
    QUESTIONING = "questioning"
    HESITANT = "hesitant"
    AGGRESSIVE = "aggressive"
    TENDER = "tender"
    HUMOROUS = "humorous"
    NEUTRAL = "neutral"


class BeatType(str, Enum):
    """Story beats the detector looks for, in catalog order."""

    OPENING_IMAGE = "Opening Image"
    INCITING_INCIDENT = "Inciting Incident"
    END_OF_ACT_1 = "End of Act 1"
    MIDPOINT = "Midpoint"
    ALL_IS_LOST = "All Is Lost"
    CLIMAX = "Climax"
    RESOLUTION = "Resolution"


class PatternType(str, Enum):
    """Categories of learned patterns."""

    STRUCTURE = "structure"
    DIALOGUE = "dialogue"
    CHARACTER = "character"
    BEAT_TIMING = "beat_timing"
    GENRE = "genre"
    CASTING = "casting"


SceneType = Literal["INT.", "EXT."]
RoleType = Literal["lead", "supporting", "ensemble"]
TimingAccuracy = Literal["perfect", "approximate"]


class Award(BaseModel):
    """An award attached to a script."""

    award_name: str
    category: str
    year: int | None = None


class Script(BaseModel):
    """A screenplay and its metadata.

    Created once per ingested screenplay and updated by the batch parser and
    the enrichment collectors.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: int | None = None
    title: str
    writer: str | None = None
    year: int | None = None
    source: str | None = None
    source_url: str | None = None
    raw_text: str = ""
    rating: float | None = None
    genre_tags: list[str] = Field(default_factory=list)

    # Filled in from parse results
    page_count: int | None = None
    scene_count: int = 0
    character_count: int = 0
    dialogue_ratio: float | None = None
    avg_scene_length: float | None = None
    total_dialogue_lines: int = 0
    processed: bool = False

    # Filled in by enrichment
    tmdb_id: int | None = None
    imdb_id: str | None = None
    media_type: Literal["movie", "tv"] | None = None
    box_office: float | None = None
    tone: str | None = None
    awards: list[Award] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("title")
    @classmethod
    def title_must_not_be_empty(cls, v: str) -> str:
        """Validate that the title is not blank."""
        if not v or not v.strip():
            raise ValueError("Script title cannot be empty")
        return v.strip()

    def has_genre(self, genre: str) -> bool:
        """Case-insensitive genre membership."""
        wanted = genre.strip().lower()
        return any(tag.lower() == wanted for tag in self.genre_tags)


class Scene(BaseModel):
    """One header-delimited scene of a script."""

    script_id: int | None = None
    scene_number: int = Field(ge=1)
    scene_type: SceneType = "INT."
    location: str = "UNKNOWN"
    time_of_day: str = "DAY"
    page_start: int = Field(ge=0)
    page_end: int = Field(ge=0)
    content: str = ""
    characters_present: list[str] = Field(default_factory=list)
    dialogue_line_count: int = 0
    action_line_count: int = 0
    dialogue_ratio: float = 0.0

    @model_validator(mode="after")
    def check_page_range(self) -> Scene:
        """A scene never ends before it starts."""
        if self.page_start > self.page_end:
            raise ValueError(
                f"page_start ({self.page_start}) must not exceed "
                f"page_end ({self.page_end})"
            )
        return self


class Character(BaseModel):
    """A speaking (or cued) character, keyed by exact cue text."""

    script_id: int | None = None
    name: str
    first_appearance_page: int = 0
    scenes_in: list[int] = Field(default_factory=list)
    total_lines: int = 0
    importance_rank: int = 0
    archetype: str | None = None

    @property
    def total_scenes(self) -> int:
        return len(self.scenes_in)


class DialogueLine(BaseModel):
    """One attributed line of dialogue."""

    script_id: int | None = None
    scene_number: int
    character: str
    line_number: int
    text: str
    word_count: int
    tone: Tone = Tone.NEUTRAL


class StoryBeat(BaseModel):
    """A detected narrative beat anchored to one scene."""

    script_id: int | None = None
    beat_type: BeatType
    page_number: int
    scene_number: int
    location: str = "UNKNOWN"
    confidence: float = Field(ge=0.0, le=1.0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def timing_accuracy(self) -> TimingAccuracy:
        return "perfect" if self.confidence > 0.6 else "approximate"


class Performance(BaseModel):
    """A cast member's role in a script."""

    script_id: int
    actor_name: str
    tmdb_person_id: int | None = None
    character_name: str | None = None
    role_type: RoleType = "ensemble"
    oscar_wins: int = 0
    emmy_wins: int = 0

    @property
    def award_winner(self) -> bool:
        return self.oscar_wins > 0 or self.emmy_wins > 0


class LearnedPattern(BaseModel):
    """Aggregate statistic derived from the corpus, keyed by type and name."""

    pattern_type: PatternType
    pattern_name: str
    description: str
    success_correlation_score: float = Field(ge=0.0, le=1.0)
    found_in_successful_scripts: int = 0
    found_in_unsuccessful_scripts: int = 0
    genres: list[str] = Field(default_factory=lambda: ["all"])
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def key(self) -> tuple[str, str]:
        return (self.pattern_type.value, self.pattern_name)


__all__ = [
    "Award",
    "BeatType",
    "Character",
    "DialogueLine",
    "LearnedPattern",
    "PatternType",
    "Performance",
    "RoleType",
    "Scene",
    "SceneType",
    "Script",
    "StoryBeat",
    "Tone",
]
