"""CLI commands for batch parsing, pattern aggregation and outlines."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from vesper.analysis import OutlineGenerator, PatternAggregator
from vesper.cli.handler import CLIHandler, open_store
from vesper.config import get_logger, get_settings
from vesper.models.outline import Outline
from vesper.pipeline import BatchParser

logger = get_logger(__name__)
console = Console()


def batch_command(
    delay: Annotated[
        float | None,
        typer.Option("--delay", help="Seconds between scripts (default: batch_delay)"),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Parse every stored script that has not been parsed yet."""
    handler = CLIHandler(console)
    try:
        settings = get_settings()
        with open_store(settings) as store:
            report = BatchParser(
                store,
                settings.analysis_config(),
                delay=settings.batch_delay if delay is None else delay,
            ).run()

        if json_output:
            handler.print_json(report)
            return
        console.print("[bold cyan]Batch parse complete[/bold cyan]")
        console.print(f"  Parsed: [green]{report.parsed}[/green]")
        console.print(f"  Skipped: {report.skipped}")
        console.print(f"  Failed: [red]{report.failed}[/red]")
        for script_id, error in report.errors.items():
            console.print(f"  [red]{script_id}: {error}[/red]")
    except Exception as e:
        handler.handle_error(e, json_output)


def patterns_command(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Recompute learned patterns from all rated scripts."""
    handler = CLIHandler(console)
    try:
        settings = get_settings()
        with open_store(settings) as store:
            report = PatternAggregator(store, settings.analysis_config()).run()

        if json_output:
            handler.print_json(
                {
                    "successful": report.successful_count,
                    "unsuccessful": report.unsuccessful_count,
                    "patterns": [p.model_dump(mode="json") for p in report.patterns],
                }
            )
            return

        console.print(
            f"[bold cyan]{len(report.patterns)} patterns[/bold cyan] from "
            f"{report.successful_count} successful and "
            f"{report.unsuccessful_count} other scripts"
        )
        if report.patterns:
            table = Table()
            table.add_column("Type", style="cyan")
            table.add_column("Pattern")
            table.add_column("Score", justify="right")
            table.add_column("Description")
            for pattern in report.patterns:
                table.add_row(
                    pattern.pattern_type.value,
                    pattern.pattern_name,
                    f"{pattern.success_correlation_score:.2f}",
                    pattern.description,
                )
            console.print(table)
    except Exception as e:
        handler.handle_error(e, json_output)


def outline_command(
    premise: Annotated[str, typer.Argument(help="One-line story premise")],
    genre: Annotated[str, typer.Option("--genre", "-g", help="Genre")],
    length: Annotated[
        int | None, typer.Option("--length", "-l", help="Target page count")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Generate a four-part outline from comparable scripts."""
    handler = CLIHandler(console)
    try:
        settings = get_settings()
        with open_store(settings) as store:
            outline = OutlineGenerator(store, settings.analysis_config()).generate(
                premise, genre, length
            )

        if json_output:
            handler.print_json(outline.to_json_dict())
        else:
            _display_outline(outline)
    except Exception as e:
        handler.handle_error(e, json_output)


def _display_outline(outline: Outline) -> None:
    structure = outline.structure
    console.print(f"\n[bold cyan]{outline.genre}[/bold cyan]: {outline.premise}")
    console.print(f"[dim]{structure.total_pages} pages[/dim]\n")

    for act in outline.acts:
        console.print(f"[bold]{act.title}[/bold] [dim](pages {act.pages})[/dim]")
        for beat in act.beats:
            console.print(f"  [cyan]{beat.name}[/cyan] (p. {beat.page})")
            console.print(f"    {beat.description}")
            console.print(f"    [dim]{beat.example}[/dim]")
        console.print()

    prediction = outline.prediction
    console.print(
        f"[bold]Success estimate:[/bold] {prediction.probability:.0%} "
        f"({prediction.confidence})"
    )
    console.print(f"  {prediction.reasoning}")

    recommendations = outline.recommendations
    console.print("[bold]Recommendations:[/bold]")
    console.print(f"  Length: {recommendations.target_length}")
    console.print(f"  Pacing: {recommendations.pacing}")
    console.print(f"  Characters: {recommendations.characters}")
    console.print(f"  Dialogue: {recommendations.dialogue}")
    if recommendations.budget:
        console.print(f"  Budget: {recommendations.budget}")
