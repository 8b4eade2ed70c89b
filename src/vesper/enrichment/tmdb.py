"""Async client for The Movie Database (TMDB) v3 API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Literal

import httpx

from vesper.config import get_logger
from vesper.exceptions import EnrichmentError

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.themoviedb.org/3"
DEFAULT_HTTP_TIMEOUT = 30.0

MediaType = Literal["movie", "tv"]

MOVIE_GENRES: dict[int, str] = {
    28: "Action",
    12: "Adventure",
    16: "Animation",
    35: "Comedy",
    80: "Crime",
    99: "Documentary",
    18: "Drama",
    10751: "Family",
    14: "Fantasy",
    36: "History",
    27: "Horror",
    10402: "Music",
    9648: "Mystery",
    10749: "Romance",
    878: "Sci-Fi",
    10770: "TV Movie",
    53: "Thriller",
    10752: "War",
    37: "Western",
}

TV_GENRES: dict[int, str] = {
    10759: "Action & Adventure",
    16: "Animation",
    35: "Comedy",
    80: "Crime",
    99: "Documentary",
    18: "Drama",
    10751: "Family",
    10762: "Kids",
    9648: "Mystery",
    10763: "News",
    10764: "Reality",
    10765: "Sci-Fi & Fantasy",
    10766: "Soap",
    10767: "Talk",
    10768: "War & Politics",
    37: "Western",
}


def genre_names(genre_ids: list[int], media_type: MediaType) -> list[str]:
    """Map TMDB genre ids to names, dropping ids the table doesn't know."""
    genres = MOVIE_GENRES if media_type == "movie" else TV_GENRES
    return [genres[i] for i in genre_ids if i in genres]


@dataclass
class TMDBMatch:
    """Best search hit for a title."""

    tmdb_id: int
    media_type: MediaType
    title: str
    popularity: float = 0.0
    genre_ids: list[int] | None = None
    release_date: str | None = None

    @property
    def year(self) -> int | None:
        if not self.release_date:
            return None
        try:
            return int(self.release_date.split("-")[0])
        except ValueError:
            return None

    @classmethod
    def from_result(cls, result: dict[str, Any], media_type: MediaType) -> TMDBMatch:
        return cls(
            tmdb_id=int(result["id"]),
            media_type=media_type,
            title=result.get("title") or result.get("name") or "",
            popularity=float(result.get("popularity") or 0.0),
            genre_ids=result.get("genre_ids"),
            release_date=result.get("release_date") or result.get("first_air_date"),
        )


class TMDBClient:
    """Thin async wrapper over the TMDB search and details endpoints.

    Use as an async context manager so the underlying ``httpx.AsyncClient``
    is closed::

        async with TMDBClient(api_key) as tmdb:
            match = await tmdb.search("Heat")
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: TMDB v3 API key.
            base_url: API root, without a trailing slash.
            timeout: HTTP request timeout in seconds.
            transport: Optional transport (tests pass ``httpx.MockTransport``).

        Raises:
            EnrichmentError: If no API key is configured.
        """
        if not api_key:
            raise EnrichmentError(
                message="TMDB API key is not configured",
                hint="Set VESPER_TMDB_API_KEY or tmdb_api_key in your config file",
            )
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self.client: httpx.AsyncClient | None = None

    def _init_http_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self.client

    async def __aenter__(self) -> TMDBClient:
        self._init_http_client()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self.client:
            await self.client.aclose()
            self.client = None

    async def _get(self, path: str, **params: Any) -> dict[str, Any]:
        client = self._init_http_client()
        response = await client.get(path, params={"api_key": self.api_key, **params})
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise EnrichmentError(
                message="Unexpected TMDB response",
                details={"path": path, "type": type(data).__name__},
            )
        return data

    async def search(self, title: str) -> TMDBMatch | None:
        """Search movies and TV shows and return the more popular first hit.

        A movie wins only when strictly more popular than the TV hit.

        Raises:
            httpx.HTTPError: On transport errors or non-2xx responses.
        """
        movies, shows = await asyncio.gather(
            self._get("/search/movie", query=title),
            self._get("/search/tv", query=title),
        )
        movie_results = movies.get("results") or []
        tv_results = shows.get("results") or []
        movie = TMDBMatch.from_result(movie_results[0], "movie") if movie_results else None
        show = TMDBMatch.from_result(tv_results[0], "tv") if tv_results else None

        if movie and show:
            best = movie if movie.popularity > show.popularity else show
        else:
            best = movie or show

        if best is None:
            logger.info("No TMDB match", title=title)
        else:
            logger.debug(
                "TMDB match",
                title=title,
                match=best.title,
                media_type=best.media_type,
                tmdb_id=best.tmdb_id,
            )
        return best

    async def details(
        self,
        tmdb_id: int,
        media_type: MediaType,
        append: tuple[str, ...] = ("credits", "keywords"),
    ) -> dict[str, Any]:
        """Fetch the details record, with extra sub-resources appended."""
        endpoint = "movie" if media_type == "movie" else "tv"
        return await self._get(
            f"/{endpoint}/{tmdb_id}", append_to_response=",".join(append)
        )
