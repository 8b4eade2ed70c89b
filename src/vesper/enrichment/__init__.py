"""Third-party metadata enrichment (TMDB)."""

from vesper.enrichment.genre import EnrichmentReport, GenreEnricher, determine_tone
from vesper.enrichment.success import OSCAR_WINNERS, SuccessDataCollector, find_awards
from vesper.enrichment.tmdb import TMDBClient, TMDBMatch, genre_names

__all__ = [
    "OSCAR_WINNERS",
    "EnrichmentReport",
    "GenreEnricher",
    "SuccessDataCollector",
    "TMDBClient",
    "TMDBMatch",
    "determine_tone",
    "find_awards",
    "genre_names",
]
