"""Genre, rating and box-office enrichment from TMDB."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import httpx

from vesper.config import get_logger
from vesper.enrichment.tmdb import TMDBClient, genre_names
from vesper.exceptions import VesperError
from vesper.models import Script
from vesper.storage.base import ScriptStore

logger = get_logger(__name__)

DEFAULT_LIMIT = 100


def determine_tone(genres: list[str]) -> str:
    """Coarse script tone from its genre names, first rule wins."""
    if "Comedy" in genres:
        return "comedic"
    if "Horror" in genres or "Thriller" in genres:
        return "dark"
    if "Drama" in genres:
        return "dramatic"
    if "Action" in genres:
        return "intense"
    return "balanced"


@dataclass
class EnrichmentReport:
    """Counts and per-title failure reasons from one enrichment run."""

    succeeded: int = 0
    failed: int = 0
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    def add_failure(self, title: str, reason: str) -> None:
        self.failed += 1
        self.errors[title] = reason

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "errors": dict(self.errors),
        }


class GenreEnricher:
    """Fills TMDB metadata on scripts that have none yet."""

    def __init__(
        self,
        store: ScriptStore,
        client: TMDBClient,
        delay: float = 0.25,
        limit: int = DEFAULT_LIMIT,
    ) -> None:
        """Initialize the enricher.

        Args:
            store: Scripts are read from and written back to this store.
            client: TMDB client (the caller owns its lifetime).
            delay: Seconds between scripts, to stay under the TMDB rate limit.
            limit: Maximum number of scripts per run.
        """
        self.store = store
        self.client = client
        self.delay = delay
        self.limit = limit

    async def enrich_script(self, script: Script) -> Script | None:
        """Look up one script and store its metadata.

        Returns:
            The updated script, or None when TMDB has no match.
        """
        match = await self.client.search(script.title)
        if match is None:
            return None

        details = await self.client.details(match.tmdb_id, match.media_type)
        genre_ids = match.genre_ids or [g["id"] for g in details.get("genres", [])]
        genres = genre_names(genre_ids, match.media_type)
        vote_average = details.get("vote_average")

        script.tmdb_id = match.tmdb_id
        script.imdb_id = details.get("imdb_id") or None
        script.media_type = match.media_type
        script.genre_tags = genres
        script.rating = round(vote_average, 1) if vote_average else None
        script.box_office = details.get("revenue") if match.media_type == "movie" else None
        script.year = match.year
        script.tone = determine_tone(genres)

        updated = self.store.update_script(script)
        logger.info(
            "Enriched script",
            script_id=script.id,
            title=script.title,
            media_type=match.media_type,
            genres=genres,
            rating=script.rating,
        )
        return updated

    async def run(self) -> EnrichmentReport:
        """Enrich every script without a TMDB id.

        Lookup and storage failures are logged and counted per script.
        """
        report = EnrichmentReport()
        scripts = [s for s in self.store.list_scripts() if s.tmdb_id is None]
        scripts = scripts[: self.limit]
        if not scripts:
            logger.info("All scripts already enriched")
            return report

        logger.info("Starting genre enrichment", scripts=len(scripts))
        for script in scripts:
            try:
                if await self.enrich_script(script) is None:
                    report.add_failure(script.title, "Not found on TMDB")
                else:
                    report.succeeded += 1
            except (httpx.HTTPError, VesperError, KeyError, ValueError) as e:
                logger.error(
                    "Failed to enrich script",
                    script_id=script.id,
                    title=script.title,
                    error=str(e),
                )
                report.add_failure(script.title, str(e))

            if self.delay:
                await asyncio.sleep(self.delay)

        logger.info(
            "Genre enrichment complete",
            succeeded=report.succeeded,
            failed=report.failed,
        )
        return report
