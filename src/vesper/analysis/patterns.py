"""Pattern aggregation over the rated script corpus.

The aggregator splits rated scripts into a successful and an unsuccessful
cohort at the configured rating threshold and derives descriptive
statistics for each category. The "correlation" scores are fixed
heuristic weights or a normalised gap between cohort means, not real
statistical correlations.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field

from vesper.config import get_logger
from vesper.config.analysis import AnalysisConfig
from vesper.models import LearnedPattern, PatternType, Script
from vesper.storage.base import ScriptStore
from vesper.utils import average, normalized_gap, tally

logger = get_logger(__name__)

PAGE_COUNT_SCORE = 0.7
LINE_LENGTH_SCORE = 0.75
TONE_BALANCE_SCORE = 0.65
CHARACTER_COUNT_SCORE = 0.7
ARCHETYPE_SCORE = 0.8
BEAT_TIMING_SCORE = 0.85
GENRE_SCORE = 0.75
CASTING_SCORE = 0.82


@dataclass
class AggregationReport:
    """Outcome of one aggregation run."""

    successful_count: int = 0
    unsuccessful_count: int = 0
    patterns: list[LearnedPattern] = field(default_factory=list)

    def by_type(self) -> dict[str, list[LearnedPattern]]:
        grouped: dict[str, list[LearnedPattern]] = defaultdict(list)
        for pattern in self.patterns:
            grouped[pattern.pattern_type.value].append(pattern)
        return dict(grouped)


class PatternAggregator:
    """Derives learned patterns from every rated script in a store."""

    def __init__(self, store: ScriptStore, config: AnalysisConfig | None = None) -> None:
        """Initialize the aggregator.

        Args:
            store: Where scripts are read from and patterns written to.
            config: Heuristic constants (success threshold, genre limit).
        """
        self.store = store
        self.config = config or AnalysisConfig()

    def run(self) -> AggregationReport:
        """Recompute all patterns and upsert them into the store.

        Each run starts from an empty pattern list, so running twice on an
        unchanged corpus writes the same values. Categories without input
        rows are skipped.

        Returns:
            Cohort sizes and the patterns written.
        """
        scripts = self.store.list_scripts(rated_only=True)
        if not scripts:
            logger.warning("No rated scripts found, nothing to aggregate")
            return AggregationReport()

        threshold = self.config.success_threshold
        successful = [s for s in scripts if (s.rating or 0) >= threshold]
        unsuccessful = [s for s in scripts if (s.rating or 0) < threshold]
        logger.info(
            "Aggregating patterns",
            scripts=len(scripts),
            successful=len(successful),
            unsuccessful=len(unsuccessful),
            threshold=threshold,
        )

        patterns: list[LearnedPattern] = []
        patterns += self.structure_patterns(successful, unsuccessful)
        patterns += self.dialogue_patterns(successful, unsuccessful)
        patterns += self.character_patterns(successful, unsuccessful)
        patterns += self.beat_timing_patterns(successful)
        patterns += self.genre_patterns(successful)
        patterns += self.casting_patterns(successful)

        if patterns:
            self.store.upsert_patterns(patterns)
        logger.info("Pattern aggregation complete", patterns=len(patterns))

        return AggregationReport(
            successful_count=len(successful),
            unsuccessful_count=len(unsuccessful),
            patterns=patterns,
        )

    def structure_patterns(
        self, successful: list[Script], unsuccessful: list[Script]
    ) -> list[LearnedPattern]:
        """Average scene and page counts per cohort."""
        if not successful:
            return []

        scenes_success = average(self.store.count_scenes(i) for i in _ids(successful))
        scenes_other = average(self.store.count_scenes(i) for i in _ids(unsuccessful))
        pages_success = average(s.page_count or 0 for s in successful)

        return [
            LearnedPattern(
                pattern_type=PatternType.STRUCTURE,
                pattern_name="Optimal Scene Count",
                description=(
                    f"Successful scripts average {scenes_success:.1f} scenes vs "
                    f"{scenes_other:.1f} in less successful ones"
                ),
                success_correlation_score=normalized_gap(scenes_success, scenes_other),
                found_in_successful_scripts=len(successful),
                found_in_unsuccessful_scripts=len(unsuccessful),
            ),
            LearnedPattern(
                pattern_type=PatternType.STRUCTURE,
                pattern_name="Optimal Page Count",
                description=f"Successful scripts average {pages_success:.1f} pages",
                success_correlation_score=PAGE_COUNT_SCORE,
                found_in_successful_scripts=len(successful),
                found_in_unsuccessful_scripts=0,
            ),
        ]

    def dialogue_patterns(
        self, successful: list[Script], unsuccessful: list[Script]
    ) -> list[LearnedPattern]:
        """Words per line and the dominant tone of the successful cohort."""
        lines = self.store.get_dialogue(_ids(successful))
        if not lines:
            return []

        other_lines = self.store.get_dialogue(_ids(unsuccessful))
        length_success = average(d.word_count for d in lines)
        length_other = average(d.word_count for d in other_lines)
        tone, tone_count = tally(d.tone.value for d in lines)[0]

        return [
            LearnedPattern(
                pattern_type=PatternType.DIALOGUE,
                pattern_name="Optimal Line Length",
                description=(
                    f"Successful scripts have dialogue averaging "
                    f"{length_success:.1f} words per line (vs {length_other:.1f})"
                ),
                success_correlation_score=LINE_LENGTH_SCORE,
                found_in_successful_scripts=len(successful),
                found_in_unsuccessful_scripts=len(unsuccessful),
            ),
            LearnedPattern(
                pattern_type=PatternType.DIALOGUE,
                pattern_name="Tone Balance",
                description=f"Most successful scripts lean {tone} ({tone_count} lines)",
                success_correlation_score=TONE_BALANCE_SCORE,
                found_in_successful_scripts=len(successful),
                found_in_unsuccessful_scripts=0,
            ),
        ]

    def character_patterns(
        self, successful: list[Script], unsuccessful: list[Script]
    ) -> list[LearnedPattern]:
        """Cast size and, when tagged, the most common archetype."""
        characters = self.store.get_characters(_ids(successful))
        if not characters:
            return []

        count_success = average(
            self.store.count_characters(i) for i in _ids(successful)
        )
        patterns = [
            LearnedPattern(
                pattern_type=PatternType.CHARACTER,
                pattern_name="Optimal Character Count",
                description=(
                    f"Successful scripts average {count_success:.1f} distinct characters"
                ),
                success_correlation_score=CHARACTER_COUNT_SCORE,
                found_in_successful_scripts=len(successful),
                found_in_unsuccessful_scripts=len(unsuccessful),
            )
        ]

        archetypes = tally(c.archetype for c in characters if c.archetype)
        if archetypes:
            archetype, count = archetypes[0]
            patterns.append(
                LearnedPattern(
                    pattern_type=PatternType.CHARACTER,
                    pattern_name="Winning Archetype",
                    description=(
                        f"Most common protagonist archetype: {archetype} "
                        f"(found in {count} successful scripts)"
                    ),
                    success_correlation_score=ARCHETYPE_SCORE,
                    found_in_successful_scripts=count,
                    found_in_unsuccessful_scripts=0,
                )
            )
        return patterns

    def beat_timing_patterns(self, successful: list[Script]) -> list[LearnedPattern]:
        """Average page of each detected beat across the successful cohort."""
        pages_by_beat: dict[str, list[int]] = defaultdict(list)
        for beat in self.store.get_beats(_ids(successful)):
            pages_by_beat[beat.beat_type.value].append(beat.page_number)

        return [
            LearnedPattern(
                pattern_type=PatternType.BEAT_TIMING,
                pattern_name=f"{beat_type} Timing",
                description=(
                    f"{beat_type} typically occurs at page {average(pages):.1f} "
                    "in successful scripts"
                ),
                success_correlation_score=BEAT_TIMING_SCORE,
                found_in_successful_scripts=len(pages),
                found_in_unsuccessful_scripts=0,
            )
            for beat_type, pages in pages_by_beat.items()
        ]

    def genre_patterns(self, successful: list[Script]) -> list[LearnedPattern]:
        """Most frequent genres among successful scripts with their ratings."""
        genre_counts = tally(tag for s in successful for tag in s.genre_tags)
        patterns = []
        for genre, count in genre_counts[: self.config.top_genre_limit]:
            rating = average(s.rating or 0 for s in successful if s.has_genre(genre))
            patterns.append(
                LearnedPattern(
                    pattern_type=PatternType.GENRE,
                    pattern_name=f"{genre} Success Rate",
                    description=(
                        f"{genre} scripts average {rating:.1f} rating "
                        f"({count} successful scripts)"
                    ),
                    success_correlation_score=GENRE_SCORE,
                    found_in_successful_scripts=count,
                    found_in_unsuccessful_scripts=0,
                    genres=[str(genre).lower()],
                )
            )
        return patterns

    def casting_patterns(self, successful: list[Script]) -> list[LearnedPattern]:
        """Ratings of scripts cast with Oscar or Emmy winners."""
        performances = self.store.get_performances(_ids(successful))
        if not performances:
            return []

        ratings = {s.id: s.rating for s in successful}
        winners = [p for p in performances if p.award_winner]
        rating = average(
            r for r in (ratings.get(p.script_id) for p in winners) if r is not None
        )
        return [
            LearnedPattern(
                pattern_type=PatternType.CASTING,
                pattern_name="Award-Winning Cast Effect",
                description=(
                    f"Scripts with award-winning actors average {rating:.1f} rating "
                    f"({len(winners)} performances)"
                ),
                success_correlation_score=CASTING_SCORE,
                found_in_successful_scripts=len(winners),
                found_in_unsuccessful_scripts=0,
            )
        ]


def _ids(scripts: list[Script]) -> list[int]:
    return [s.id for s in scripts if s.id is not None]
