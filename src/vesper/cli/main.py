"""The `vesper` command line."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console

from vesper import __version__
from vesper.cli.commands import (
    batch_command,
    enrich_command,
    import_command,
    outline_command,
    parse_command,
    patterns_command,
    serve_command,
    stats_command,
)
from vesper.config import (
    configure_logging,
    get_logger,
    get_settings_for_cli,
    set_settings,
)

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name="vesper",
    help="Screenplay parsing, pattern analysis and outline generation",
    pretty_exceptions_enable=False,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command(name="parse")(parse_command)
app.command(name="import")(import_command)
app.command(name="batch")(batch_command)
app.command(name="patterns")(patterns_command)
app.command(name="outline")(outline_command)
app.command(name="enrich")(enrich_command)
app.command(name="stats")(stats_command)
app.command(name="serve")(serve_command)


@app.command()
def version() -> None:
    """Show Vesper version."""
    console.print(f"Vesper v{__version__}")


@app.callback()
def main_callback(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="YAML, TOML or JSON settings file",
            envvar="VESPER_CONFIG",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log at INFO level"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging", envvar="VESPER_DEBUG"),
    ] = False,
) -> None:
    """Load settings from --config and apply the logging flags."""
    overrides: dict[str, Any] = {}
    if debug:
        overrides.update(log_level="DEBUG", debug=True)
    elif verbose:
        overrides["log_level"] = "INFO"

    if config is None and not overrides:
        return

    try:
        settings = get_settings_for_cli(config_file=config, cli_overrides=overrides)
    except Exception as e:
        console.print(f"[red]Error: Failed to load configuration: {e}[/red]")
        raise typer.Exit(1) from e

    set_settings(settings)
    configure_logging(settings)
    logger.debug("Settings loaded", config_file=str(config) if config else None)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
