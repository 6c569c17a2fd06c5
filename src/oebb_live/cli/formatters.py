"""Output formatters for CLI display."""

import json
from collections.abc import Sequence
from datetime import datetime

from pydantic import BaseModel
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.models import (
    CheckpointStatus,
    DelayReport,
    DepartureRecord,
    JourneyStatus,
    PositionKind,
    Station,
)

console = Console()

STATUS_ICONS = {
    CheckpointStatus.DEPARTED: "✓",
    CheckpointStatus.DELAYED: "🕒",
    CheckpointStatus.SCHEDULED: "⏳",
    CheckpointStatus.NOT_FOUND: "❌",
}

STATUS_STYLES = {
    CheckpointStatus.DEPARTED: "green",
    CheckpointStatus.DELAYED: "yellow",
    CheckpointStatus.SCHEDULED: "cyan",
    CheckpointStatus.NOT_FOUND: "dim",
}


def _dump(value: BaseModel | Sequence[BaseModel]) -> str:
    if isinstance(value, BaseModel):
        data = value.model_dump(mode="json", exclude={"raw"})
    else:
        data = [item.model_dump(mode="json", exclude={"raw"}) for item in value]
    return json.dumps(data, ensure_ascii=False, indent=2)


def format_stations_json(stations: Sequence[Station]) -> str:
    """Format stations as JSON."""
    return _dump(stations)


def format_departures_json(records: Sequence[DepartureRecord]) -> str:
    """Format departure records as JSON, without the raw upstream payload."""
    return _dump(records)


def format_delay_json(report: DelayReport) -> str:
    """Format a delay report as JSON."""
    data = report.model_dump(mode="json", exclude={"record": {"raw"}})
    return json.dumps(data, ensure_ascii=False, indent=2)


def format_journey_json(journey: JourneyStatus) -> str:
    """Format a journey status as JSON."""
    without_raw = {"record": {"raw"}}
    data = journey.model_dump(
        mode="json",
        exclude={
            "checkpoints": {"__all__": without_raw},
            "position": {"last_departed": without_raw, "next_arrival": without_raw},
        },
    )
    return json.dumps(data, ensure_ascii=False, indent=2)


def format_station_table(stations: Sequence[Station], query: str = "") -> None:
    """Display stations as a table."""
    if not stations:
        console.print("No stations found.")
        return

    title = f"Stations matching '{query}'" if query else "Stations"
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("ID", style="green", no_wrap=True)
    table.add_column("Coordinates", style="blue")

    for idx, station in enumerate(stations, 1):
        if station.latitude is not None and station.longitude is not None:
            coords = f"{station.latitude:.5f}, {station.longitude:.5f}"
        else:
            coords = "-"
        table.add_row(str(idx), station.name, station.station_id, coords)

    console.print(table)


def format_departure_table(
    records: Sequence[DepartureRecord], station_id: str = ""
) -> None:
    """Display a departure board as a table."""
    if not records:
        console.print("No departures found.")
        return

    title = f"Departures from {station_id}" if station_id else "Departures"
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Time", style="cyan", no_wrap=True)
    table.add_column("Train", style="bold")
    table.add_column("Destination", style="green")
    table.add_column("Platform", style="blue")
    table.add_column("Status")

    for record in records:
        if record.canceled:
            status = "[red]canceled[/red]"
        elif record.has_delay:
            status = f"[yellow]+{record.delay_minutes} min[/yellow]"
        elif record.realtime is not None:
            status = "[green]on time[/green]"
        else:
            status = "[dim]no live data[/dim]"

        table.add_row(
            record.scheduled_time or "-",
            record.train_label or "Unknown",
            record.destination or "Unknown",
            record.platform or "N/A",
            status,
        )

    console.print(table)


def format_delay_report(report: DelayReport) -> None:
    """Display a single-station delay check."""
    if report.canceled:
        headline = f"🚫 Train {report.train_label} is CANCELED"
        border = "red"
    elif report.is_delayed:
        headline = (
            f"🚨 Train {report.train_label} is DELAYED by "
            f"{report.delay_minutes} minutes"
        )
        border = "yellow"
    else:
        headline = f"✅ Train {report.train_label} is on time"
        border = "green"

    text = f"""[bold]{headline}[/bold]
[bold]Station:[/bold] {report.station_id}
[bold]Scheduled departure:[/bold] {report.scheduled_departure}"""
    if report.is_delayed:
        text += f"\n[bold]Actual departure:[/bold] {report.actual_departure}"
    text += f"""
[bold]Direction:[/bold] {report.direction or "Unknown"}
[bold]Platform:[/bold] {report.platform or "N/A"}
[bold]Status:[/bold] {report.status.value}"""

    console.print(Panel(text, title="Delay Check", border_style=border))


def format_journey(journey: JourneyStatus) -> None:
    """Display per-station checkpoints and the inferred position."""
    table = Table(
        title=f"Tracking {journey.train_label}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("", no_wrap=True)
    table.add_column("Station", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Scheduled", style="green")
    table.add_column("Expected", style="yellow")
    table.add_column("Platform", style="blue")

    errors = []
    for checkpoint in journey.checkpoints:
        style = STATUS_STYLES[checkpoint.status]
        if checkpoint.error:
            status = "[red]ERROR[/red]"
            scheduled = expected = platform = "-"
            errors.append(checkpoint)
        elif checkpoint.found:
            status = f"[{style}]{checkpoint.status.value.upper()}[/{style}]"
            if checkpoint.canceled:
                status += " [red](canceled)[/red]"
            scheduled = _clock(checkpoint.scheduled_departure, "%H:%M")
            expected = _clock(checkpoint.actual_departure, "%H:%M")
            if checkpoint.delay_minutes > 0:
                expected += f" (+{checkpoint.delay_minutes})"
            platform = checkpoint.platform or "N/A"
        else:
            status = f"[{style}]Train not found[/{style}]"
            scheduled = expected = platform = "-"

        table.add_row(
            STATUS_ICONS[checkpoint.status],
            checkpoint.station_id,
            status,
            scheduled,
            expected,
            platform,
        )

    console.print(table)
    for checkpoint in errors:
        console.print(f"[red]Station {checkpoint.station_id}:[/red] {checkpoint.error}")

    position = journey.position
    lines = []
    if position.last_departed is not None:
        lines.append(
            f"Last departure: Station {position.last_departed.station_id} "
            f"at {_clock(position.last_departed.actual_departure)}"
        )
    lines.append(f"Current location: {position.describe()}")
    if position.next_arrival is not None:
        label = (
            "Expected departure"
            if position.kind == PositionKind.NOT_DEPARTED
            else "Next arrival"
        )
        lines.append(
            f"{label}: Station {position.next_arrival.station_id} "
            f"at {_clock(position.next_arrival.actual_departure)}"
        )

    console.print(Panel("\n".join(lines), title="Current status", border_style="blue"))


def _clock(value: datetime | None, fmt: str = "%d.%m.%Y %H:%M") -> str:
    if value is None:
        return "-"
    return value.strftime(fmt)
