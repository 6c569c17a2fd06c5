"""CLI main entry point for ÖBB live data."""

import logging
import sys
from datetime import datetime as dt_module

import click
from rich.console import Console

from .. import __version__
from ..core import (
    ClientConfig,
    Credentials,
    NoDeparturesError,
    NotFoundError,
    OebbLiveClient,
    OebbLiveError,
    UpstreamFormatError,
    UpstreamUnavailableError,
    ValidationError,
    fetch_credentials,
)
from ..core.config import BOARD_URL, STATIONS_URL
from .formatters import (
    format_delay_json,
    format_delay_report,
    format_departure_table,
    format_departures_json,
    format_journey,
    format_journey_json,
    format_station_table,
    format_stations_json,
)

console = Console()
error_console = Console(stderr=True)

output_format_option = click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)


def _build_client(ctx: click.Context) -> OebbLiveClient:
    """Create a client from the group options."""
    config: ClientConfig = ctx.obj["config"]
    credentials = Credentials.anonymous()
    if ctx.obj["auth"]:
        credentials = fetch_credentials(config)
    return OebbLiveClient(config=config, credentials=credentials)


def _fail(error: Exception, verbose: bool) -> None:
    """Print a library error and exit with status 1."""
    if isinstance(error, ValidationError):
        error_console.print(f"[red]Error:[/red] {error}")
    elif isinstance(error, NotFoundError):
        error_console.print(f"[yellow]Not found:[/yellow] {error}")
    elif isinstance(error, NoDeparturesError):
        error_console.print(f"[yellow]No departures:[/yellow] {error}")
    elif isinstance(error, UpstreamUnavailableError):
        error_console.print(f"[red]Upstream unavailable:[/red] {error}")
    elif isinstance(error, UpstreamFormatError):
        error_console.print(f"[red]Unexpected upstream response:[/red] {error}")
    else:
        error_console.print(f"[red]Unexpected error:[/red] {error}")
        if verbose:
            error_console.print_exception()
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--timeout",
    "-t",
    default=10.0,
    envvar="OEBB_LIVE_TIMEOUT",
    show_default=True,
    help="Request timeout in seconds",
)
@click.option(
    "--stations-url",
    default=STATIONS_URL,
    envvar="OEBB_LIVE_STATIONS_URL",
    help="Station search endpoint",
)
@click.option(
    "--board-url",
    default=BOARD_URL,
    envvar="OEBB_LIVE_BOARD_URL",
    help="Departure board endpoint",
)
@click.option(
    "--max-departures",
    default=50,
    envvar="OEBB_LIVE_MAX_DEPARTURES",
    show_default=True,
    help="Maximum departures fetched per station",
)
@click.option(
    "--auth/--no-auth",
    default=False,
    envvar="OEBB_LIVE_AUTH",
    help="Open a ticket shop session before querying",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    timeout: float,
    stations_url: str,
    board_url: str,
    max_departures: int,
    auth: bool,
    verbose: bool,
) -> None:
    """ÖBB Live - Austrian railway stations, departures and train tracking."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = ClientConfig(
            timeout=timeout,
            stations_url=stations_url,
            board_url=board_url,
            max_departures=max_departures,
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    ctx.obj = {"config": config, "auth": auth, "verbose": verbose}


@cli.command()
@click.argument("name")
@click.option("--count", "-c", type=int, help="Maximum number of results")
@output_format_option
@click.pass_context
def search(
    ctx: click.Context, name: str, count: int | None, output_format: str
) -> None:
    """Search for stations by name.

    Examples:
        oebb-live search Wien
        oebb-live search "Salzburg Hbf" --format json
    """
    try:
        with console.status(f"[bold green]Searching stations matching {name}..."):
            stations = _build_client(ctx).search_stations(name, count=count)
    except OebbLiveError as e:
        _fail(e, ctx.obj["verbose"])
        return

    if output_format == "json":
        click.echo(format_stations_json(stations))
    else:
        format_station_table(stations, query=name)


@cli.command()
@click.argument("station_id")
@click.option(
    "--at",
    "at_str",
    help="Board start time (YYYY-MM-DD HH:MM format), defaults to now",
    type=str,
)
@output_format_option
@click.pass_context
def departures(
    ctx: click.Context, station_id: str, at_str: str | None, output_format: str
) -> None:
    """Show the live departure board of a station.

    Examples:
        oebb-live departures 1290401
        oebb-live departures 1290401 --at "2025-03-01 07:30"
    """
    at = None
    if at_str:
        try:
            at = dt_module.strptime(at_str, "%Y-%m-%d %H:%M")
        except ValueError:
            error_console.print("[red]Invalid time format. Use YYYY-MM-DD HH:MM[/red]")
            sys.exit(1)

    try:
        with console.status(f"[bold green]Fetching departures for {station_id}..."):
            records = _build_client(ctx).get_departures(station_id, at=at)
    except OebbLiveError as e:
        _fail(e, ctx.obj["verbose"])
        return

    if output_format == "json":
        click.echo(format_departures_json(records))
    else:
        format_departure_table(records, station_id=station_id)


@cli.command()
@click.argument("station_id")
@click.argument("train")
@output_format_option
@click.pass_context
def delay(ctx: click.Context, station_id: str, train: str, output_format: str) -> None:
    """Check whether a train is delayed at a station.

    Examples:
        oebb-live delay 1290401 "RJ 840"
    """
    try:
        with console.status(f"[bold green]Checking {train} at {station_id}..."):
            report = _build_client(ctx).check_delay(station_id, train)
    except OebbLiveError as e:
        _fail(e, ctx.obj["verbose"])
        return

    if output_format == "json":
        click.echo(format_delay_json(report))
    else:
        format_delay_report(report)


@cli.command()
@click.argument("train")
@click.argument("station_ids")
@output_format_option
@click.pass_context
def track(ctx: click.Context, train: str, station_ids: str, output_format: str) -> None:
    """Track a train through comma separated stations.

    Give the stations in the order the train calls at them; the order is
    not checked against the real route.

    Examples:
        oebb-live track "RJ 840" 1290401,8100008,8100013
    """
    ids = [s.strip() for s in station_ids.split(",") if s.strip()]
    if not ids:
        error_console.print("[red]Error:[/red] No station ids given")
        sys.exit(1)

    try:
        with console.status(
            f"[bold green]Tracking {train} through {len(ids)} stations..."
        ):
            journey = _build_client(ctx).track_train(train, ids)
    except OebbLiveError as e:
        _fail(e, ctx.obj["verbose"])
        return

    if output_format == "json":
        click.echo(format_journey_json(journey))
    else:
        format_journey(journey)


@cli.group()
def config() -> None:
    """Configuration management."""
    pass


@config.command("show")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show current configuration."""
    settings: ClientConfig = ctx.obj["config"]
    console.print("[bold]Current Configuration:[/bold]")
    console.print(f"• Stations URL: {settings.stations_url}")
    console.print(f"• Board URL: {settings.board_url}")
    console.print(f"• Timeout: {settings.timeout:g} seconds")
    console.print(f"• Max stations: {settings.max_stations}")
    console.print(f"• Max departures: {settings.max_departures}")
    console.print(f"• Parallel lookups: {settings.max_workers}")
    console.print(f"• Authentication: {'session' if ctx.obj['auth'] else 'none'}")


if __name__ == "__main__":
    cli()
