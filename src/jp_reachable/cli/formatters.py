"""Output formatters for CLI display."""

import json

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import RunConfig
from ..core.models import StationRecord

console = Console()


def format_station_table(
    stations: list[StationRecord], origin_names: dict[str, str] | None = None
) -> None:
    """Display stations as a rich table, one column per origin."""
    if not stations:
        console.print("No stations found.")
        return

    if origin_names is None:
        origin_names = {}
        for station in stations:
            for node, info in station.reachable.items():
                origin_names.setdefault(node, info.target)

    table = Table(
        title=f"Reachable stations ({len(stations)})",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Station", style="cyan", no_wrap=True)
    table.add_column("Prefecture", style="green")
    table.add_column("City/Ward", style="green")
    table.add_column("Lines", style="yellow")
    for name in origin_names.values():
        table.add_column(name, style="magenta", justify="right")

    for station in stations:
        cells = [
            station.station_name,
            station.pref or "",
            station.city_ward or "",
            ", ".join(station.lines),
        ]
        for node in origin_names:
            info = station.reachable.get(node)
            cells.append(f"{info.time_minutes}分" if info else "-")
        table.add_row(*cells)

    console.print(table)


def format_station_json(stations: list[StationRecord]) -> str:
    """Format stations as a JSON array string."""
    return json.dumps(
        [station.to_json_dict() for station in stations], ensure_ascii=False, indent=2
    )


def format_config(config: RunConfig) -> None:
    """Display the effective run configuration."""
    origins = "\n".join(f"• {origin}" for origin in config.origins)
    bands = ", ".join(band.label for band in config.bands)
    retry = config.retry

    content = (
        f"[bold]Endpoint:[/bold] {config.endpoint}\n"
        f"[bold]Origins:[/bold]\n{origins}\n"
        f"[bold]Bands:[/bold] {bands}\n"
        f"[bold]Transit limit:[/bold] {config.transit_limit}\n"
        f"[bold]First train:[/bold] {config.first_train}\n"
        f"[bold]Express train:[/bold] {config.express_train}\n"
        f"[bold]Pacing delay:[/bold] {config.pacing_delay}s\n"
        f"[bold]Retries:[/bold] {retry.retries} (backoff {retry.backoff}s, timeout {retry.timeout}s)\n"
        f"[bold]Output directory:[/bold] {config.output_dir}"
    )
    console.print(Panel(content, title="Current Configuration", border_style="blue"))
