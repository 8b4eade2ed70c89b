"""Story beat detection against fixed page-range templates."""

from __future__ import annotations

import math
from dataclasses import dataclass

from vesper.config.analysis import AnalysisConfig
from vesper.models import BeatType, Scene, StoryBeat
from vesper.utils import round_half_up

MULTI_CANDIDATE_CONFIDENCE = 0.7
SINGLE_CANDIDATE_CONFIDENCE = 0.5


@dataclass(frozen=True)
class BeatTemplate:
    """Expected page window of a beat in a reference-length script.

    Bounds are absolute pages of a ``reference_pages`` (110) page script and
    scale linearly with length. They are not percentages: the Midpoint
    window (55, 65) covers 50-59% of any script length.
    """

    beat_type: BeatType
    page_range: tuple[int, int]  # inclusive (low, high) at reference length

    def window(self, total_pages: int, reference_pages: int = 110) -> tuple[int, int]:
        """Scale the reference window to a script of ``total_pages`` pages."""
        scale = total_pages / reference_pages
        low, high = self.page_range
        return round_half_up(low * scale), round_half_up(high * scale)


BEAT_TEMPLATES: tuple[BeatTemplate, ...] = (
    BeatTemplate(BeatType.OPENING_IMAGE, (1, 3)),
    BeatTemplate(BeatType.INCITING_INCIDENT, (10, 15)),
    BeatTemplate(BeatType.END_OF_ACT_1, (25, 30)),
    BeatTemplate(BeatType.MIDPOINT, (55, 65)),
    BeatTemplate(BeatType.ALL_IS_LOST, (75, 85)),
    BeatTemplate(BeatType.CLIMAX, (90, 100)),
    BeatTemplate(BeatType.RESOLUTION, (105, 115)),
)


def estimate_total_pages(text: str, lines_per_page: int = 60) -> int:
    """Estimated page count of raw text: ``ceil(lines / lines_per_page)``."""
    return math.ceil(len(text.split("\n")) / lines_per_page)


def detect_beats(
    scenes: list[Scene],
    total_pages: int,
    config: AnalysisConfig | None = None,
    templates: tuple[BeatTemplate, ...] = BEAT_TEMPLATES,
) -> list[StoryBeat]:
    """Anchor each template beat to at most one scene.

    Candidates are scenes starting inside the template's scaled window. The
    anchor is the candidate with the most dialogue lines, the earliest one
    winning ties. Beats without candidates are skipped.

    Args:
        scenes: Scenes in script order.
        total_pages: Estimated length of the script.
        config: Heuristic constants.
        templates: Ordered beat catalog.

    Returns:
        Detected beats in catalog order.
    """
    config = config or AnalysisConfig()
    beats: list[StoryBeat] = []

    for template in templates:
        low, high = template.window(total_pages, config.reference_pages)
        candidates = [s for s in scenes if low <= s.page_start <= high]
        if not candidates:
            continue

        # max() keeps the first of equal elements
        anchor = max(candidates, key=lambda s: s.dialogue_line_count)
        confidence = (
            MULTI_CANDIDATE_CONFIDENCE
            if len(candidates) > 1
            else SINGLE_CANDIDATE_CONFIDENCE
        )
        beats.append(
            StoryBeat(
                beat_type=template.beat_type,
                page_number=anchor.page_start,
                scene_number=anchor.scene_number,
                location=anchor.location,
                confidence=confidence,
            )
        )

    return beats
