"""Cast, awards and external-id enrichment for already matched scripts."""

from __future__ import annotations

import asyncio
from typing import Any, NamedTuple

import httpx

from vesper.config import get_logger
from vesper.enrichment.genre import EnrichmentReport
from vesper.enrichment.tmdb import TMDBClient
from vesper.exceptions import EnrichmentError, VesperError
from vesper.models import Award, Performance, RoleType, Script
from vesper.storage.base import ScriptStore, stored_id

logger = get_logger(__name__)

TOP_CAST = 10
LEAD_ORDER = 3
SUPPORTING_ORDER = 10
AWARD_YEAR_TOLERANCE = 1


class KnownWinner(NamedTuple):
    title: str
    year: int
    category: str


# Known Academy Award results, matched by title and release year.
OSCAR_WINNERS: tuple[KnownWinner, ...] = (
    KnownWinner("The Godfather", 1972, "Best Picture"),
    KnownWinner("The Godfather Part II", 1974, "Best Picture"),
    KnownWinner("Pulp Fiction", 1994, "Best Original Screenplay"),
    KnownWinner("The Shawshank Redemption", 1994, "Nominated"),
    KnownWinner("Forrest Gump", 1994, "Best Picture"),
    KnownWinner("The Matrix", 1999, "Best Visual Effects"),
    KnownWinner("Gladiator", 2000, "Best Picture"),
    KnownWinner(
        "The Lord of the Rings: The Return of the King", 2003, "Best Picture"
    ),
    KnownWinner("The Dark Knight", 2008, "Best Supporting Actor"),
    KnownWinner("Inception", 2010, "Best Cinematography"),
    KnownWinner("The Social Network", 2010, "Best Adapted Screenplay"),
    KnownWinner("12 Years a Slave", 2013, "Best Picture"),
    KnownWinner("Parasite", 2019, "Best Picture"),
    KnownWinner("Everything Everywhere All at Once", 2022, "Best Picture"),
    KnownWinner("Oppenheimer", 2023, "Best Picture"),
)


def role_for_order(order: int) -> RoleType:
    """Billing order to role: 0-2 lead, 3-9 supporting, else ensemble."""
    if order < LEAD_ORDER:
        return "lead"
    if order < SUPPORTING_ORDER:
        return "supporting"
    return "ensemble"


def find_awards(title: str, year: int | None) -> list[Award]:
    """Awards from the known-winners table for a title released around ``year``."""
    if year is None:
        return []
    wanted = title.strip().lower()
    for winner in OSCAR_WINNERS:
        if (
            winner.title.lower() == wanted
            and abs(winner.year - year) <= AWARD_YEAR_TOLERANCE
        ):
            return [
                Award(
                    award_name="Academy Award",
                    category=winner.category,
                    year=winner.year,
                )
            ]
    return []


def cast_performances(script_id: int, cast: list[dict[str, Any]]) -> list[Performance]:
    """Performances for the top-billed cast members of a credits list."""
    performances = []
    for index, member in enumerate(cast[:TOP_CAST]):
        if not member.get("name"):
            continue
        performances.append(
            Performance(
                script_id=script_id,
                actor_name=member["name"],
                tmdb_person_id=member.get("id"),
                character_name=member.get("character") or None,
                role_type=role_for_order(member.get("order", index)),
            )
        )
    return performances


class SuccessDataCollector:
    """Adds cast, awards and IMDb ids to scripts that have a TMDB id."""

    def __init__(
        self, store: ScriptStore, client: TMDBClient, delay: float = 0.3
    ) -> None:
        self.store = store
        self.client = client
        self.delay = delay

    async def enrich_script(self, script: Script) -> Script:
        """Fetch details for one matched script and store what they add."""
        script_id = stored_id(script)
        if script.tmdb_id is None:
            raise EnrichmentError(
                f"Script '{script.title}' has no TMDB match",
                hint="Run 'vesper enrich' without --success-data first",
                details={"script_id": script_id},
            )
        details = await self.client.details(
            script.tmdb_id,
            script.media_type or "movie",
            append=("credits", "keywords", "external_ids"),
        )

        cast = (details.get("credits") or {}).get("cast") or []
        performances = cast_performances(script_id, cast)
        if performances:
            self.store.save_performances(script_id, performances)

        known = {(a.award_name, a.category, a.year) for a in script.awards}
        for award in find_awards(script.title, script.year):
            if (award.award_name, award.category, award.year) not in known:
                script.awards = [*script.awards, award]

        imdb_id = details.get("imdb_id") or (details.get("external_ids") or {}).get(
            "imdb_id"
        )
        if imdb_id:
            script.imdb_id = imdb_id

        updated = self.store.update_script(script)
        logger.info(
            "Collected success data",
            script_id=script.id,
            title=script.title,
            cast=len(performances),
            awards=len(updated.awards),
        )
        return updated

    async def run(self) -> EnrichmentReport:
        """Collect success data for every matched script, oldest first."""
        report = EnrichmentReport()
        scripts = [s for s in self.store.list_scripts() if s.tmdb_id is not None]
        if not scripts:
            logger.warning("No scripts with TMDB ids found")
            return report

        logger.info("Starting success data collection", scripts=len(scripts))
        for script in scripts:
            try:
                await self.enrich_script(script)
                report.succeeded += 1
            except (httpx.HTTPError, VesperError, KeyError, ValueError) as e:
                logger.error(
                    "Failed to collect success data",
                    script_id=script.id,
                    title=script.title,
                    error=str(e),
                )
                report.add_failure(script.title, str(e))

            if self.delay:
                await asyncio.sleep(self.delay)

        logger.info(
            "Success data collection complete",
            succeeded=report.succeeded,
            failed=report.failed,
        )
        return report
