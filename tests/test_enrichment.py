"""Tests for TMDB lookups and the enrichment collectors."""

import httpx
import pytest

from tests.factories import rated_script
from vesper.enrichment import (
    EnrichmentReport,
    GenreEnricher,
    SuccessDataCollector,
    TMDBClient,
    TMDBMatch,
    determine_tone,
    find_awards,
    genre_names,
)
from vesper.enrichment.success import cast_performances, role_for_order
from vesper.exceptions import DatabaseError, EnrichmentError
from vesper.models import Award, Script

SEARCH_RESULTS = {
    "Heat": (
        [
            {
                "id": 949,
                "title": "Heat",
                "popularity": 40.0,
                "genre_ids": [28, 80, 18],
                "release_date": "1995-12-15",
            }
        ],
        [{"id": 5, "name": "Heat", "popularity": 3.0}],
    ),
    "Severance": (
        [{"id": 77, "title": "Severance", "popularity": 5.0, "release_date": "2006"}],
        [
            {
                "id": 95396,
                "name": "Severance",
                "popularity": 5.0,
                "genre_ids": [18, 9648, 10765],
                "first_air_date": "2022-02-17",
            }
        ],
    ),
    "Parasite": (
        [
            {
                "id": 496243,
                "title": "Parasite",
                "popularity": 30.0,
                "genre_ids": [35, 53, 18],
                "release_date": "2019-05-30",
            }
        ],
        [],
    ),
}

CAST = [
    {"id": 100 + i, "name": f"Actor {i}", "character": f"Role {i}", "order": i}
    for i in range(12)
]

DETAILS = {
    "/movie/949": {
        "vote_average": 8.26,
        "revenue": 187436818,
        "imdb_id": "tt0113277",
    },
    "/tv/95396": {"vote_average": 8.4, "revenue": 999},
    "/movie/496243": {
        "vote_average": 8.5,
        "revenue": 262000000,
        "credits": {"cast": CAST},
        "external_ids": {"imdb_id": "tt6751668"},
    },
}


class FakeTMDB:
    """Request handler serving canned TMDB responses."""

    def __init__(self):
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/3")
        if path.startswith("/search/"):
            query = request.url.params["query"]
            if query == "Boom":
                return httpx.Response(500, json={"status_message": "boom"})
            movies, shows = SEARCH_RESULTS.get(query, ([], []))
            return httpx.Response(
                200, json={"results": movies if path == "/search/movie" else shows}
            )
        if path in DETAILS:
            return httpx.Response(200, json=DETAILS[path])
        return httpx.Response(404, json={"status_message": "not found"})


@pytest.fixture
def fake_tmdb():
    return FakeTMDB()


@pytest.fixture
def client(fake_tmdb):
    return TMDBClient("test-key", transport=httpx.MockTransport(fake_tmdb))


class TestGenreNames:
    def test_movie_ids(self):
        assert genre_names([28, 80, 18], "movie") == ["Action", "Crime", "Drama"]

    def test_tv_ids(self):
        assert genre_names([10765, 18], "tv") == ["Sci-Fi & Fantasy", "Drama"]

    def test_unknown_ids_dropped(self):
        assert genre_names([1, 878], "movie") == ["Sci-Fi"]


@pytest.mark.parametrize(
    ("genres", "tone"),
    [
        (["Drama", "Comedy"], "comedic"),
        (["Thriller", "Drama"], "dark"),
        (["Horror"], "dark"),
        (["Action", "Drama"], "dramatic"),
        (["Action"], "intense"),
        (["Animation"], "balanced"),
        ([], "balanced"),
    ],
)
def test_determine_tone(genres, tone):
    assert determine_tone(genres) == tone


class TestMatch:
    def test_year(self):
        assert TMDBMatch(1, "movie", "x", release_date="1995-12-15").year == 1995

    def test_missing_or_bad_year(self):
        assert TMDBMatch(1, "movie", "x").year is None
        assert TMDBMatch(1, "movie", "x", release_date="unknown").year is None


class TestClient:
    def test_requires_api_key(self):
        with pytest.raises(EnrichmentError):
            TMDBClient(None)

    @pytest.mark.asyncio
    async def test_more_popular_movie_wins(self, client, fake_tmdb):
        async with client:
            match = await client.search("Heat")

        assert match.media_type == "movie"
        assert match.tmdb_id == 949
        assert match.year == 1995
        assert all(r.url.params["api_key"] == "test-key" for r in fake_tmdb.requests)

    @pytest.mark.asyncio
    async def test_tv_wins_popularity_tie(self, client):
        async with client:
            match = await client.search("Severance")
        assert match.media_type == "tv"
        assert match.title == "Severance"
        assert match.year == 2022

    @pytest.mark.asyncio
    async def test_no_results(self, client):
        async with client:
            assert await client.search("Nothing At All") is None

    @pytest.mark.asyncio
    async def test_http_errors_propagate(self, client):
        async with client:
            with pytest.raises(httpx.HTTPStatusError):
                await client.search("Boom")

    @pytest.mark.asyncio
    async def test_details_appends_resources(self, client, fake_tmdb):
        async with client:
            details = await client.details(949, "movie")
        assert details["imdb_id"] == "tt0113277"
        assert fake_tmdb.requests[-1].url.params["append_to_response"] == (
            "credits,keywords"
        )

    @pytest.mark.asyncio
    async def test_close(self, client):
        async with client:
            assert client.client is not None
        assert client.client is None


class TestGenreEnricher:
    @pytest.mark.asyncio
    async def test_enriches_movie(self, memory_store, client):
        script = memory_store.add_script(Script(title="Heat"))

        async with client:
            report = await GenreEnricher(memory_store, client, delay=0).run()

        assert report.to_dict() == {
            "total": 1,
            "succeeded": 1,
            "failed": 0,
            "errors": {},
        }
        stored = memory_store.get_script(script.id)
        assert stored.tmdb_id == 949
        assert stored.imdb_id == "tt0113277"
        assert stored.media_type == "movie"
        assert stored.genre_tags == ["Action", "Crime", "Drama"]
        assert stored.rating == 8.3
        assert stored.box_office == 187436818
        assert stored.year == 1995
        assert stored.tone == "dramatic"

    @pytest.mark.asyncio
    async def test_tv_has_no_box_office(self, memory_store, client):
        script = memory_store.add_script(Script(title="Severance"))

        async with client:
            await GenreEnricher(memory_store, client, delay=0).run()

        stored = memory_store.get_script(script.id)
        assert stored.media_type == "tv"
        assert stored.box_office is None
        assert stored.genre_tags == ["Drama", "Mystery", "Sci-Fi & Fantasy"]

    @pytest.mark.asyncio
    async def test_failures_are_counted(self, memory_store, client):
        memory_store.add_script(Script(title="Nothing At All"))
        memory_store.add_script(Script(title="Boom"))
        memory_store.add_script(Script(title="Heat"))

        async with client:
            report = await GenreEnricher(memory_store, client, delay=0).run()

        assert report.succeeded == 1
        assert report.failed == 2
        assert report.errors["Nothing At All"] == "Not found on TMDB"
        assert "500" in report.errors["Boom"]

    @pytest.mark.asyncio
    async def test_skips_enriched_and_respects_limit(self, memory_store, client):
        memory_store.add_script(Script(title="Done", tmdb_id=1))
        memory_store.add_script(Script(title="Heat"))
        memory_store.add_script(Script(title="Severance"))

        async with client:
            report = await GenreEnricher(memory_store, client, delay=0, limit=1).run()

        assert report.total == 1
        assert memory_store.get_script(3).tmdb_id is None


class TestSuccessData:
    def test_role_for_order(self):
        assert [role_for_order(i) for i in (0, 2, 3, 9, 10)] == [
            "lead",
            "lead",
            "supporting",
            "supporting",
            "ensemble",
        ]

    def test_cast_performances_take_top_ten(self):
        performances = cast_performances(1, CAST)
        assert len(performances) == 10
        assert performances[0].actor_name == "Actor 0"
        assert performances[0].tmdb_person_id == 100
        assert performances[0].character_name == "Role 0"
        assert performances[-1].role_type == "supporting"

    def test_cast_order_falls_back_to_position(self):
        cast = [{"name": "A"}, {"name": ""}, {"name": "B"}, {"name": "C"}, {"name": "D"}]
        roles = [p.role_type for p in cast_performances(1, cast)]
        assert roles == ["lead", "lead", "supporting", "supporting"]

    def test_find_awards(self):
        assert find_awards("parasite", 2020) == [
            Award(award_name="Academy Award", category="Best Picture", year=2019)
        ]
        assert find_awards("Parasite", 2015) == []
        assert find_awards("Parasite", None) == []
        assert find_awards("Unknown Film", 2019) == []

    @pytest.mark.asyncio
    async def test_collects_cast_awards_and_imdb(self, memory_store, client, fake_tmdb):
        script = memory_store.add_script(
            rated_script("Parasite", 8.5, ["Drama"], year=2019, tmdb_id=496243)
        )
        memory_store.add_script(Script(title="Unmatched"))

        async with client:
            report = await SuccessDataCollector(memory_store, client, delay=0).run()

        assert report.succeeded == 1
        stored = memory_store.get_script(script.id)
        assert stored.imdb_id == "tt6751668"
        assert [a.category for a in stored.awards] == ["Best Picture"]
        assert len(memory_store.get_performances([script.id])) == 10
        assert fake_tmdb.requests[-1].url.params["append_to_response"] == (
            "credits,keywords,external_ids"
        )

    @pytest.mark.asyncio
    async def test_awards_not_duplicated(self, memory_store, client):
        script = memory_store.add_script(
            Script(title="Parasite", year=2019, tmdb_id=496243, media_type="movie")
        )
        collector = SuccessDataCollector(memory_store, client, delay=0)

        async with client:
            await collector.run()
            await collector.run()

        assert len(memory_store.get_script(script.id).awards) == 1

    @pytest.mark.asyncio
    async def test_missing_details_counted(self, memory_store, client):
        memory_store.add_script(Script(title="Ghost", tmdb_id=404, media_type="movie"))

        async with client:
            report = await SuccessDataCollector(memory_store, client, delay=0).run()

        assert report.failed == 1
        assert "Ghost" in report.errors

    @pytest.mark.asyncio
    async def test_unmatched_script_is_rejected(self, memory_store, client, fake_tmdb):
        script = memory_store.add_script(Script(title="Unmatched"))
        collector = SuccessDataCollector(memory_store, client, delay=0)

        async with client:
            with pytest.raises(EnrichmentError, match="no TMDB match"):
                await collector.enrich_script(script)
        assert fake_tmdb.requests == []

    @pytest.mark.asyncio
    async def test_unsaved_script_is_rejected(self, memory_store, client):
        collector = SuccessDataCollector(memory_store, client, delay=0)

        async with client:
            with pytest.raises(DatabaseError, match="has not been stored"):
                await collector.enrich_script(Script(title="Loose", tmdb_id=1))

    @pytest.mark.asyncio
    async def test_nothing_to_collect(self, memory_store, client):
        async with client:
            report = await SuccessDataCollector(memory_store, client, delay=0).run()
        assert report == EnrichmentReport()
