"""CLI commands for database statistics and the HTTP API server."""

from __future__ import annotations

from typing import Annotated

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from vesper.api import create_app
from vesper.cli.handler import CLIHandler, open_store
from vesper.config import get_logger, get_settings

logger = get_logger(__name__)
console = Console()


def stats_command(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show row counts of the database tables."""
    handler = CLIHandler(console)
    try:
        settings = get_settings()
        with open_store(settings, create=False) as store:
            counts = store.table_counts()
            genres = store.list_genres()

        if json_output:
            handler.print_json({"stats": counts, "genres": genres})
            return
        table = Table(title=f"Vesper database ({settings.database_path})")
        table.add_column("Table", style="cyan")
        table.add_column("Rows", justify="right")
        for name, count in counts.items():
            table.add_row(name, str(count))
        console.print(table)
        if genres:
            console.print(f"Genres: {', '.join(genres)}")
    except Exception as e:
        handler.handle_error(e, json_output)


def serve_command(
    host: Annotated[
        str | None, typer.Option("--host", "-h", help="API host address")
    ] = None,
    port: Annotated[
        int | None, typer.Option("--port", "-p", help="API port number")
    ] = None,
) -> None:
    """Start the REST API server."""
    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    console.print("[blue]Starting Vesper REST API server...[/blue]")
    console.print(f"[dim]Host: {host}:{port}[/dim]")
    console.print(f"[dim]Docs: http://{host}:{port}/api/docs[/dim]")

    uvicorn.run(
        create_app(settings=settings),
        host=host,
        port=port,
        log_level="debug" if settings.debug else "warning",
    )
