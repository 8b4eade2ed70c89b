"""API endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request

from vesper.analysis.outline import OutlineGenerator
from vesper.api.schemas import (
    ExampleScript,
    ExamplesResponse,
    GenresResponse,
    HealthResponse,
    OutlineRequest,
    OutlineResponse,
    ParseRequest,
    PatternsResponse,
    StatsResponse,
)
from vesper.config import get_logger
from vesper.config.analysis import AnalysisConfig
from vesper.models import PatternType
from vesper.parser import parse_script
from vesper.storage.base import COUNTED_TABLES, ScriptStore

logger = get_logger(__name__)
router = APIRouter()

# Counts reported by /stats; cast rows are left out of the summary
STATS_TABLES = tuple(table for table in COUNTED_TABLES if table != "performances")


async def get_store(request: Request) -> ScriptStore:
    """Get the script store from app state."""
    store: ScriptStore = request.app.state.store
    return store


async def get_config(request: Request) -> AnalysisConfig:
    """Get the analysis constants from app state."""
    config: AnalysisConfig = request.app.state.analysis_config
    return config


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok", message="Vesper API is running")


@router.get("/stats", response_model=StatsResponse)
def stats(store: ScriptStore = Depends(get_store)) -> StatsResponse:
    """Row counts of the main tables."""
    counts = store.table_counts()
    return StatsResponse(stats={table: counts.get(table, 0) for table in STATS_TABLES})


@router.get("/genres", response_model=GenresResponse)
def genres(store: ScriptStore = Depends(get_store)) -> GenresResponse:
    """Every genre tag in the corpus."""
    return GenresResponse(genres=store.list_genres())


@router.get("/examples/{genre}", response_model=ExamplesResponse)
def examples(
    genre: str,
    store: ScriptStore = Depends(get_store),
    config: AnalysisConfig = Depends(get_config),
) -> ExamplesResponse:
    """Top rated scripts of a genre."""
    comparables = store.find_comparables(
        genre,
        min_rating=config.comparable_min_rating,
        limit=config.comparable_limit,
    )
    return ExamplesResponse(
        examples=[
            ExampleScript(title=s.title, year=s.year, rating=s.rating)
            for s in comparables
        ]
    )


@router.get("/patterns", response_model=PatternsResponse)
def patterns(
    pattern_type: PatternType | None = None,
    store: ScriptStore = Depends(get_store),
) -> PatternsResponse:
    """Learned patterns, optionally of one type."""
    return PatternsResponse(
        patterns=[p.model_dump(mode="json") for p in store.list_patterns(pattern_type)]
    )


@router.post("/parse")
def parse(
    body: ParseRequest,
    config: AnalysisConfig = Depends(get_config),
) -> dict[str, Any]:
    """Parse screenplay text. Nothing is stored."""
    result = parse_script(body.text, config)
    logger.info("Parsed screenplay via API", scenes=len(result.scenes))
    return {"success": True, **result.to_dict()}


@router.post("/generate-outline", response_model=OutlineResponse)
def generate_outline(
    body: OutlineRequest,
    store: ScriptStore = Depends(get_store),
    config: AnalysisConfig = Depends(get_config),
) -> OutlineResponse:
    """Outline for a premise and genre, from the stored comparables."""
    outline = OutlineGenerator(store, config).generate(
        body.premise or "", body.genre or "", body.target_length
    )
    return OutlineResponse(outline=outline.to_json_dict())
