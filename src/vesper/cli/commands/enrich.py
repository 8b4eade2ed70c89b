"""CLI command for TMDB metadata enrichment."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.console import Console

from vesper.cli.handler import CLIHandler, open_store
from vesper.config import VesperSettings, get_logger, get_settings
from vesper.enrichment import (
    EnrichmentReport,
    GenreEnricher,
    SuccessDataCollector,
    TMDBClient,
)
from vesper.storage.base import ScriptStore

logger = get_logger(__name__)
console = Console()


async def _enrich(
    store: ScriptStore, settings: VesperSettings, success_data: bool
) -> EnrichmentReport:
    async with TMDBClient(
        settings.tmdb_api_key,
        base_url=settings.tmdb_base_url,
        timeout=settings.tmdb_timeout,
    ) as tmdb:
        if success_data:
            return await SuccessDataCollector(
                store, tmdb, delay=settings.success_data_delay
            ).run()
        return await GenreEnricher(store, tmdb, delay=settings.enrichment_delay).run()


def enrich_command(
    success_data: Annotated[
        bool,
        typer.Option(
            "--success-data",
            help="Collect cast and awards for scripts already matched on TMDB",
        ),
    ] = False,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Fill genres, ratings and cast from The Movie Database."""
    handler = CLIHandler(console)
    try:
        settings = get_settings()
        with open_store(settings) as store:
            report = asyncio.run(_enrich(store, settings, success_data))

        if json_output:
            handler.print_json(report)
            return
        console.print("[bold cyan]Enrichment complete[/bold cyan]")
        console.print(f"  Succeeded: [green]{report.succeeded}[/green]")
        console.print(f"  Failed: [red]{report.failed}[/red]")
        for title, reason in report.errors.items():
            console.print(f"  [yellow]{title}: {reason}[/yellow]")
    except Exception as e:
        handler.handle_error(e, json_output)
