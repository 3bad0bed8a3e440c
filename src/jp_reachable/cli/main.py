"""CLI main entry point for reachable station collection."""

import logging
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.logging import RichHandler

from .. import __version__
from ..collector import ReachableIndex, collect
from ..config import RunConfig, default_config, load_config
from ..core import (
    CollectionError,
    ConfigurationError,
    OutputWriteError,
    ValidationError,
)
from .formatters import format_config, format_station_json, format_station_table

console = Console()
error_console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


def _resolve_config(config_path: str | None) -> RunConfig:
    if config_path:
        return load_config(Path(config_path))
    return default_config()


def _apply_overrides(
    config: RunConfig,
    updates: dict[str, Any],
    retries: int | None = None,
    timeout: float | None = None,
) -> RunConfig:
    try:
        retry = config.retry.with_overrides(retries=retries, timeout=timeout)
        return RunConfig.model_validate(
            {**config.model_dump(), **updates, "retry": retry}
        )
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid option: {e}") from e


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Japanese Reachable Stations - Collect stations reachable without transfer."""
    pass


@cli.command("collect")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON run configuration file",
)
@click.option(
    "--output-dir", "-o", type=click.Path(file_okay=False), help="Output directory"
)
@click.option("--pacing", type=float, help="Seconds to wait between requests")
@click.option("--retries", "-r", type=int, help="Retries per request")
@click.option("--timeout", "-t", type=float, help="Request timeout in seconds")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def collect_command(
    config_path: str | None,
    output_dir: str | None,
    pacing: float | None,
    retries: int | None,
    timeout: float | None,
    verbose: bool,
) -> None:
    """Collect reachable stations for every origin and time band.

    Examples:
        jp-reachable collect
        jp-reachable collect --config my_run.json --output-dir data
        jp-reachable collect --retries 2 --timeout 20
    """
    _setup_logging(verbose)
    try:
        config = _resolve_config(config_path)
        updates: dict[str, Any] = {}
        if pacing is not None:
            updates["pacing_delay"] = pacing
        if output_dir:
            updates["output_dir"] = Path(output_dir)
        config = _apply_overrides(config, updates, retries=retries, timeout=timeout)

        total = len(config.origins) * len(config.bands)
        with console.status(f"[bold green]Collecting 0/{total} cells...") as status:

            def update_progress(data: dict[str, Any]) -> None:
                status.update(
                    f"[bold green]Collecting {data['completed']}/{data['total']} cells "
                    f"({data['origin']} {data['band']}, rows: {data['rows']})..."
                )

            result = collect(config, progress_callback=update_progress)

        console.print(f"[green]Rows:[/green] {len(result.rows)}")
        console.print(f"[green]Stations:[/green] {len(result.output.stations_by_id)}")
        console.print(f"[bold]Wrote[/bold] {result.flat_path}")
        console.print(f"[bold]Wrote[/bold] {result.structured_path}")

    except ConfigurationError as e:
        error_console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)
    except CollectionError as e:
        error_console.print(f"[red]Collection failed:[/red] {e}")
        sys.exit(1)
    except OutputWriteError as e:
        error_console.print(f"[red]Write error:[/red] {e}")
        sys.exit(1)
    except Exception as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            error_console.print_exception()
        sys.exit(1)


@cli.command("query")
@click.argument("index_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--origin", "origins", multiple=True, help="Origin node id (repeatable)")
@click.option("--band", "bands", multiple=True, help="Time band, e.g. 10-20 (repeatable)")
@click.option("--max-minutes", "-m", type=int, help="Maximum travel minutes")
@click.option("--keyword", "-k", help="Match station name, address or line")
@click.option("--pref", "-p", help="Prefecture name or JIS code, e.g. 東京都 or 13")
@click.option("--require-coord", is_flag=True, help="Only stations with coordinates")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.option("--limit", "-l", type=int, help="Maximum number of stations to show")
def query_command(
    index_file: str,
    origins: tuple[str, ...],
    bands: tuple[str, ...],
    max_minutes: int | None,
    keyword: str | None,
    pref: str | None,
    require_coord: bool,
    output_format: str,
    limit: int | None,
) -> None:
    """Search a structured index written by `collect`.

    Examples:
        jp-reachable query output/reachable_structured.json --max-minutes 15
        jp-reachable query output/reachable_structured.json --origin 00001303 --band 0-10
        jp-reachable query output/reachable_structured.json -k 東西線 --format json
    """
    try:
        index = ReachableIndex.load(Path(index_file))
        stations = index.search(
            origins=origins or None,
            bands=bands or None,
            max_minutes=max_minutes,
            keyword=keyword,
            pref=pref,
            require_coord=require_coord,
        )
        if limit is not None:
            stations = stations[:limit]

        if output_format == "json":
            click.echo(format_station_json(stations))
        else:
            origin_names = {
                target.node: target.name for target in index.output.source.targets
            }
            format_station_table(stations, origin_names=origin_names)

    except ValidationError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except OSError as e:
        error_console.print(f"[red]Failed to read index:[/red] {e}")
        sys.exit(1)


@cli.group()
def config() -> None:
    """Configuration management."""
    pass


@config.command("show")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON run configuration file",
)
def show_config(config_path: str | None) -> None:
    """Show the effective run configuration."""
    try:
        format_config(_resolve_config(config_path))
    except ConfigurationError as e:
        error_console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
