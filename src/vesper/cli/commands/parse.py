"""CLI commands for parsing and importing screenplays."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from vesper.cli.handler import CLIHandler, open_store
from vesper.config import get_logger, get_settings
from vesper.exceptions import ValidationError
from vesper.parser import ParseResult, parse_script
from vesper.pipeline import BatchParser, ScriptImporter, read_screenplay

logger = get_logger(__name__)
console = Console()


def parse_command(
    file: Annotated[Path, typer.Argument(help="Screenplay text file")],
    save: Annotated[
        bool, typer.Option("--save", "-s", help="Store the script and its parse")
    ] = False,
    title: Annotated[
        str | None, typer.Option("--title", "-t", help="Script title (default: file name)")
    ] = None,
    year: Annotated[int | None, typer.Option("--year", help="Release year")] = None,
    genre: Annotated[
        list[str] | None,
        typer.Option("--genre", "-g", help="Genre tag (repeatable)"),
    ] = None,
    rating: Annotated[
        float | None, typer.Option("--rating", help="Rating out of 10")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Parse a screenplay into scenes, characters, dialogue and beats."""
    handler = CLIHandler(console)
    try:
        if not file.is_file():
            raise ValidationError(f"File not found: {file}", field="file")

        settings = get_settings()
        config = settings.analysis_config()

        if save:
            with open_store(settings) as store:
                script = ScriptImporter(store).import_file(
                    file,
                    title=title,
                    year=year,
                    rating=rating,
                    genre_tags=genre or [],
                )
                result = BatchParser(store, config, delay=0).parse_one(script)
        else:
            result = parse_script(read_screenplay(file), config)

        if json_output:
            handler.print_json(result)
        else:
            _display_result(title or file.stem, result)
            if save:
                console.print(f"[green]Saved as script {script.id}[/green]")
    except Exception as e:
        handler.handle_error(e, json_output)


def import_command(
    path: Annotated[
        Path, typer.Argument(help="Screenplay file or directory of .txt/.fountain files")
    ],
) -> None:
    """Import screenplay files into the database without parsing them."""
    handler = CLIHandler(console)
    try:
        with open_store(get_settings()) as store:
            imported = ScriptImporter(store).import_path(path)
        console.print(f"[green]Imported {len(imported)} script(s)[/green]")
        for script in imported:
            console.print(f"  {script.id}: {script.title}")
    except Exception as e:
        handler.handle_error(e)


def _display_result(title: str, result: ParseResult) -> None:
    analysis = result.analysis
    console.print(f"\n[bold cyan]{title}[/bold cyan]")
    console.print(
        f"  Pages: {result.total_pages}  Scenes: {analysis.structure.total_scenes}  "
        f"Characters: {analysis.characters.total_count}  "
        f"Dialogue lines: {analysis.dialogue.total_lines}"
    )
    console.print(f"  Protagonist: {analysis.characters.protagonist}")
    console.print(
        f"  Voice differentiation: {analysis.characters.voice_differentiation}"
    )

    if result.characters:
        table = Table(title="Characters")
        table.add_column("Rank", justify="right")
        table.add_column("Name", style="cyan")
        table.add_column("Lines", justify="right")
        table.add_column("Scenes", justify="right")
        table.add_column("First page", justify="right")
        for character in result.characters[:10]:
            table.add_row(
                str(character.importance_rank),
                character.name,
                str(character.total_lines),
                str(character.total_scenes),
                str(character.first_appearance_page),
            )
        console.print(table)

    if result.beats:
        table = Table(title="Story beats")
        table.add_column("Beat", style="cyan")
        table.add_column("Page", justify="right")
        table.add_column("Scene", justify="right")
        table.add_column("Location")
        table.add_column("Confidence", justify="right")
        for beat in result.beats:
            table.add_row(
                beat.beat_type.value,
                str(beat.page_number),
                str(beat.scene_number),
                beat.location,
                f"{beat.confidence:.1f}",
            )
        console.print(table)
