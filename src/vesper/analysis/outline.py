"""Outline generation from comparable scripts.

Given a premise and a genre, the generator looks up highly rated scripts in
that genre, derives a page structure and beat timing from them, and fills a
fixed four-part beat template. The success estimate is the mean comparable
rating scaled to [0, 1] and capped; it is a heuristic, not a model.
"""

from __future__ import annotations

from collections import defaultdict

from vesper.config import get_logger
from vesper.config.analysis import AnalysisConfig
from vesper.exceptions import ValidationError
from vesper.models import BeatType, Script
from vesper.models.outline import (
    Act,
    Comparable,
    Outline,
    OutlineBeat,
    OutlineStructure,
    Prediction,
    Recommendations,
)
from vesper.storage.base import ScriptStore
from vesper.utils import average, round_half_up, round_to

logger = get_logger(__name__)

DEFAULT_BEAT_PAGES: dict[str, int] = {
    BeatType.OPENING_IMAGE.value: 1,
    BeatType.INCITING_INCIDENT.value: 12,
    BeatType.END_OF_ACT_1.value: 25,
    BeatType.MIDPOINT.value: 60,
    BeatType.ALL_IS_LOST.value: 75,
    BeatType.CLIMAX.value: 95,
    BeatType.RESOLUTION.value: 110,
}

NO_COMPARABLES_PROBABILITY = 0.65
HIGH_CONFIDENCE = 0.75
MEDIUM_CONFIDENCE = 0.65

TENTPOLE_BOX_OFFICE = 100_000_000
MID_BUDGET_BOX_OFFICE = 50_000_000


def build_structure(total_pages: float) -> OutlineStructure:
    """Milestones at 25, 50, 75 and 100 percent of ``total_pages``."""
    return OutlineStructure(
        total_pages=round_half_up(total_pages),
        act1_end=round_half_up(total_pages * 0.25),
        act2a_midpoint=round_half_up(total_pages * 0.50),
        act2b_end=round_half_up(total_pages * 0.75),
        act3_end=round_half_up(total_pages),
    )


class OutlineGenerator:
    """Builds outlines from the comparables found in a store."""

    def __init__(self, store: ScriptStore, config: AnalysisConfig | None = None) -> None:
        """Initialize the generator.

        Args:
            store: Source of comparable scripts and their story beats.
            config: Heuristic constants (rating floor, comparable limit).
        """
        self.store = store
        self.config = config or AnalysisConfig()

    def generate(
        self, premise: str, genre: str, target_length: int | None = None
    ) -> Outline:
        """Generate an outline for a premise in a genre.

        Args:
            premise: One-line story premise.
            genre: Genre used to pick comparables (case-insensitive).
            target_length: Optional page count overriding the derived one.

        Returns:
            The outline.

        Raises:
            ValidationError: If premise or genre is missing, or the target
                length is not positive.
        """
        if not premise or not premise.strip():
            raise ValidationError("Premise is required", field="premise")
        if not genre or not genre.strip():
            raise ValidationError("Genre is required", field="genre")
        if target_length is not None and target_length < 0:
            raise ValidationError(
                "Target length must be a positive number of pages",
                field="targetLength",
                details={"field": "targetLength", "value": target_length},
            )
        premise = premise.strip()
        genre = genre.strip()

        comparables = self.find_comparables(genre)
        structure = self.calculate_structure(comparables)
        beats = self.beat_timing(comparables)

        # 0 means "not given", like an absent value
        if target_length:
            structure = build_structure(target_length)

        logger.info(
            "Generating outline",
            genre=genre,
            comparables=len(comparables),
            total_pages=structure.total_pages,
        )

        return Outline(
            premise=premise,
            genre=genre,
            structure=structure,
            act1=self._act1(premise, genre, structure, beats),
            act2a=self._act2a(genre, structure, beats),
            act2b=self._act2b(structure, beats),
            act3=self._act3(genre, structure, beats),
            prediction=self.predict_success(comparables, genre),
            recommendations=self.recommendations(comparables, structure),
        )

    def find_comparables(self, genre: str) -> list[Script]:
        """Top rated scripts of the genre above the rating floor."""
        return self.store.find_comparables(
            genre,
            min_rating=self.config.comparable_min_rating,
            limit=self.config.comparable_limit,
        )

    def calculate_structure(self, comparables: list[Script]) -> OutlineStructure:
        """Page structure from the mean comparable length.

        Scripts without a page count count as reference length; with no
        comparables the reference length is used outright.
        """
        reference = self.config.reference_pages
        if not comparables:
            return build_structure(reference)
        return build_structure(average(s.page_count or reference for s in comparables))

    def beat_timing(self, comparables: list[Script]) -> dict[str, int]:
        """Average detected page per beat type, or the default table."""
        if not comparables:
            return dict(DEFAULT_BEAT_PAGES)

        beats = self.store.get_beats(s.id for s in comparables if s.id is not None)
        if not beats:
            return dict(DEFAULT_BEAT_PAGES)

        pages: dict[str, list[int]] = defaultdict(list)
        for beat in beats:
            pages[beat.beat_type.value].append(beat.page_number)
        return {
            beat_type: round_half_up(average(values))
            for beat_type, values in pages.items()
        }

    def predict_success(self, comparables: list[Script], genre: str) -> Prediction:
        """Success estimate from the mean comparable rating."""
        if not comparables:
            return Prediction(
                probability=NO_COMPARABLES_PROBABILITY,
                confidence="medium",
                reasoning="Based on general patterns (no similar scripts in database)",
            )

        avg_rating = average(s.rating or 0 for s in comparables)
        probability = min(self.config.probability_ceiling, avg_rating / 10)
        if probability > HIGH_CONFIDENCE:
            confidence = "high"
        elif probability > MEDIUM_CONFIDENCE:
            confidence = "medium"
        else:
            confidence = "low"

        return Prediction(
            probability=round_to(probability, 2),
            confidence=confidence,
            reasoning=(
                f"Based on {len(comparables)} similar successful {genre} scripts "
                f"(avg rating: {avg_rating:.1f})"
            ),
            comparables=[
                Comparable(title=s.title, rating=s.rating, year=s.year)
                for s in comparables[:3]
            ],
        )

    def recommendations(
        self, comparables: list[Script], structure: OutlineStructure
    ) -> Recommendations:
        """Length, pacing, cast, dialogue and (when known) budget advice."""
        budget = None
        box_office = [s.box_office for s in comparables if s.box_office]
        avg_box_office = average(box_office)  # type: ignore[arg-type]
        if avg_box_office > 0:
            if avg_box_office > TENTPOLE_BOX_OFFICE:
                budget = "$40-80M (theatrical tentpole)"
            elif avg_box_office > MID_BUDGET_BOX_OFFICE:
                budget = "$20-40M (mid-budget theatrical)"
            else:
                budget = "$5-20M (indie/streaming)"

        return Recommendations(
            target_length=f"{structure.total_pages} pages (optimal for this genre)",
            pacing="Follow the beat timing closely for maximum impact",
            characters="8-12 distinct characters (protagonist + supporting cast)",
            dialogue="Keep dialogue concise: 6-9 words per line average",
            budget=budget,
        )

    # Acts

    def _act1(
        self,
        premise: str,
        genre: str,
        structure: OutlineStructure,
        beats: dict[str, int],
    ) -> Act:
        return Act(
            title="ACT 1: SETUP",
            pages=f"1-{structure.act1_end}",
            beats=[
                OutlineBeat(
                    name="Opening Image",
                    page=beats.get(BeatType.OPENING_IMAGE.value) or 1,
                    description=(
                        "Establish the protagonist's ordinary world. "
                        "Show their life before the journey begins."
                    ),
                    example=(
                        f"Based on successful {genre} scripts: Introduce protagonist "
                        "in their normal routine, hint at their flaw/need."
                    ),
                ),
                OutlineBeat(
                    name="Theme Stated",
                    page=5,
                    description=(
                        "Someone states the theme/lesson of the story (often subtly)."
                    ),
                    example=(
                        "A conversation or observation that hints at what the "
                        "protagonist will learn."
                    ),
                ),
                OutlineBeat(
                    name="Setup",
                    page="1-10",
                    description=(
                        'Establish all the "pieces" - characters, relationships, '
                        "world rules."
                    ),
                    example=(
                        "Introduce supporting characters, establish protagonist's "
                        "wants vs needs."
                    ),
                ),
                OutlineBeat(
                    name="Inciting Incident",
                    page=beats.get(BeatType.INCITING_INCIDENT.value) or 12,
                    description=(
                        "The event that disrupts the ordinary world and starts the "
                        "story."
                    ),
                    example=(
                        "In your story: The catalyst that forces the protagonist "
                        f'into action related to: "{premise}"'
                    ),
                ),
                OutlineBeat(
                    name="Debate",
                    page="12-25",
                    description=(
                        "Protagonist debates whether to take the journey. "
                        "Should they? Can they?"
                    ),
                    example=(
                        "Show internal/external resistance. Raise the stakes. "
                        "Make it personal."
                    ),
                ),
                OutlineBeat(
                    name="Break into Two",
                    page=beats.get(BeatType.END_OF_ACT_1.value) or structure.act1_end,
                    description=(
                        "Protagonist makes the choice to enter Act 2. "
                        "Crosses the threshold."
                    ),
                    example=(
                        "Point of no return. They commit to the goal. "
                        'Enter the "upside-down world".'
                    ),
                ),
            ],
        )

    def _act2a(
        self, genre: str, structure: OutlineStructure, beats: dict[str, int]
    ) -> Act:
        return Act(
            title="ACT 2A: CONFRONTATION",
            pages=f"{structure.act1_end + 1}-{structure.act2a_midpoint}",
            beats=[
                OutlineBeat(
                    name="B Story Begins",
                    page=structure.act1_end + 5,
                    description=(
                        "Introduce the relationship/subplot that will help "
                        "protagonist learn the theme."
                    ),
                    example=(
                        "New ally, mentor, or love interest who represents the "
                        '"need" vs "want".'
                    ),
                ),
                OutlineBeat(
                    name="Fun and Games",
                    page=f"{structure.act1_end + 10}-{structure.act2a_midpoint - 5}",
                    description=(
                        'The "promise of the premise". The fun part. '
                        "What the poster advertises."
                    ),
                    example=(
                        f"Deliver on the {genre} genre expectations. Show protagonist "
                        "tackling the problem with initial confidence."
                    ),
                ),
                OutlineBeat(
                    name="Midpoint",
                    page=beats.get(BeatType.MIDPOINT.value) or structure.act2a_midpoint,
                    description=(
                        "False victory or false defeat. Stakes are raised. "
                        "Time clock appears/intensifies."
                    ),
                    example=(
                        "Either: protagonist gets what they want (but not what they "
                        "need), OR everything falls apart. Either way - everything "
                        "changes."
                    ),
                ),
            ],
        )

    def _act2b(self, structure: OutlineStructure, beats: dict[str, int]) -> Act:
        return Act(
            title="ACT 2B: COMPLICATIONS",
            pages=f"{structure.act2a_midpoint + 1}-{structure.act2b_end}",
            beats=[
                OutlineBeat(
                    name="Bad Guys Close In",
                    page=f"{structure.act2a_midpoint + 5}-{structure.act2b_end - 15}",
                    description=(
                        "Internal and external forces close in. Things get worse."
                    ),
                    example=(
                        "If Midpoint was a victory: enemies regroup and hit harder. "
                        "If defeat: protagonist struggles to recover. Pressure mounts."
                    ),
                ),
                OutlineBeat(
                    name="All Is Lost",
                    page=beats.get(BeatType.ALL_IS_LOST.value)
                    or structure.act2b_end - 15,
                    description=(
                        'Lowest point. The "whiff of death" - something or someone '
                        "dies (literally or metaphorically)."
                    ),
                    example=(
                        "False defeat. Mentor dies, relationship ends, hope is lost. "
                        "Opposite of Midpoint."
                    ),
                ),
                OutlineBeat(
                    name="Dark Night of the Soul",
                    page=f"{structure.act2b_end - 10}-{structure.act2b_end - 5}",
                    description="Protagonist wallows in defeat. Seems impossible to win.",
                    example=(
                        "Emotional low. Protagonist reflects on failures. "
                        "Doubt reaches peak."
                    ),
                ),
                OutlineBeat(
                    name="Break into Three",
                    page=structure.act2b_end,
                    description=(
                        "Thanks to B Story, protagonist finds the solution. "
                        "Synthesis of A and B stories."
                    ),
                    example=(
                        "Eureka moment. Protagonist realizes what they need (not "
                        "just want). Finds clarity and resolve."
                    ),
                ),
            ],
        )

    def _act3(
        self, genre: str, structure: OutlineStructure, beats: dict[str, int]
    ) -> Act:
        return Act(
            title="ACT 3: RESOLUTION",
            pages=f"{structure.act2b_end + 1}-{structure.act3_end}",
            beats=[
                OutlineBeat(
                    name="Finale",
                    page=f"{structure.act2b_end + 1}-{structure.act3_end - 5}",
                    description=(
                        "Protagonist executes the new plan. Synthesis of want + need."
                    ),
                    example=(
                        f"The big {genre} climax. Protagonist uses everything they've "
                        "learned. Faces the antagonist/obstacle with new "
                        "understanding."
                    ),
                ),
                OutlineBeat(
                    name="Climax",
                    page=beats.get(BeatType.CLIMAX.value) or structure.act3_end - 10,
                    description="The decisive moment. A vs B. Will protagonist succeed?",
                    example="The ultimate confrontation. Tension peaks. All or nothing.",
                ),
                OutlineBeat(
                    name="Final Image",
                    page=beats.get(BeatType.RESOLUTION.value) or structure.act3_end,
                    description=(
                        "Mirror of Opening Image. Shows how protagonist has changed."
                    ),
                    example=(
                        'The "new world". Protagonist in their changed state. '
                        "Theme proven. Opposite of Opening Image."
                    ),
                ),
            ],
        )


def generate_outline(
    premise: str,
    genre: str,
    target_length: int | None = None,
    *,
    store: ScriptStore,
    config: AnalysisConfig | None = None,
) -> Outline:
    """Generate an outline without keeping a generator around.

    See :meth:`OutlineGenerator.generate`.
    """
    return OutlineGenerator(store, config).generate(premise, genre, target_length)
