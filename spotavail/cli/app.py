"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..adapters.file_store import FileScheduleStore
from ..adapters.rest_store import RestScheduleStore
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import SpotAvailabilityError
from ..domain.formatting import format_windows, slot_bar, summarize_day, summarize_intervals, summarize_week
from ..domain.models import DAY_NAMES, Invalid
from ..domain.validator import BookingValidator
from ..services.availability import AvailabilityService

app = typer.Typer(
    name="spotavail",
    help="Inspect parking spot availability and pre-check bookings",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Spot availability tools.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _build_store(config: AppConfig):
    """Create the schedule store selected in the configuration."""
    store_config = config.store
    if store_config.kind == "rest":
        return RestScheduleStore(
            base_url=store_config.base_url,
            api_key=store_config.api_key,
            timeout=store_config.timeout_seconds,
        )
    return FileScheduleStore(path=store_config.path)


def _build_service(config: AppConfig) -> AvailabilityService:
    validator = BookingValidator(policy=config.booking.to_policy())
    return AvailabilityService(store=_build_store(config), validator=validator)


def _parse_datetime(value: str, tz: str, label: str):
    try:
        parsed = pendulum.parse(value, tz=tz)
    except ValueError as e:
        console.print(f"[red]Could not parse {label} '{value}': {e}[/red]")
        raise typer.Exit(1)

    if not isinstance(parsed, pendulum.DateTime):
        console.print(f"[red]{label.capitalize()} '{value}' must include a date and a time[/red]")
        raise typer.Exit(1)

    # Explicit offsets are converted to the spot's wall clock
    return parsed.in_tz(tz)


@app.command()
def show(
    spot_id: Annotated[str, typer.Argument(help="Spot identifier")],
    config_file: ConfigOption = None,
    start: Annotated[Optional[str], typer.Option("--start", help="First date (YYYY-MM-DD). Defaults to today.")] = None,
    days: Annotated[int, typer.Option("--days", "-d", min=1, max=366, help="Number of days to show")] = 7,
):
    """
    Show the effective availability of a spot, one row per date.

    Examples:

        spotavail show spot-1
        spotavail show spot-1 --start 2024-11-25 --days 14
    """
    try:
        config = _load_config(config_file)
        tz = config.timezone

        if start:
            try:
                first_day = pendulum.from_format(start, "YYYY-MM-DD", tz=tz).date()
            except ValueError as e:
                console.print(f"[red]Could not parse start date: {e}[/red]")
                raise typer.Exit(1)
        else:
            first_day = pendulum.now(tz).date()

        service = _build_service(config)
        resolved = service.resolve_days(
            spot_id=spot_id,
            start_date=first_day,
            end_date=first_day.add(days=days - 1),
        )

        table = Table(
            title=f"Availability for {spot_id}",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Date", style="bold")
        table.add_column("Day")
        table.add_column("Source", style="dim")
        table.add_column("Hours")
        table.add_column("Open windows", style="green")

        for effective in resolved:
            table.add_row(
                effective.date.isoformat(),
                effective.day_name,
                effective.source,
                summarize_day(effective),
                format_windows(effective.available_windows) or "-",
            )

        console.print()
        console.print(table)
        console.print()

    except typer.Exit:
        raise

    except (FileNotFoundError, ValueError, SpotAvailabilityError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def check(
    spot_id: Annotated[str, typer.Argument(help="Spot identifier")],
    start: Annotated[str, typer.Argument(help="Booking start, e.g. '2024-11-26 09:00'")],
    end: Annotated[str, typer.Argument(help="Booking end, e.g. '2024-11-26 11:30'")],
    config_file: ConfigOption = None,
):
    """
    Pre-check whether a booking fits the spot's availability.

    The check is advisory; the booking store has the final say.
    """
    try:
        config = _load_config(config_file)
        tz = config.timezone

        booking_start = _parse_datetime(start, tz, "start")
        booking_end = _parse_datetime(end, tz, "end")

        service = _build_service(config)
        result = service.check_booking(spot_id=spot_id, start=booking_start, end=booking_end)

    except typer.Exit:
        raise

    except (FileNotFoundError, ValueError, SpotAvailabilityError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if isinstance(result, Invalid):
        console.print(Panel.fit(
            f"[bold red]✗ Not bookable[/bold red]\n\n"
            f"{result.reason}\n"
            f"[dim]Date: {result.violating_date.isoformat() if result.violating_date else 'n/a'}[/dim]",
            title=spot_id
        ))
        raise typer.Exit(1)

    console.print(Panel.fit(
        f"[bold green]✓ Within available hours[/bold green]\n\n"
        f"{booking_start.format('YYYY-MM-DD HH:mm')} - {booking_end.format('YYYY-MM-DD HH:mm')}",
        title=spot_id
    ))


@app.command()
def summary(
    spot_id: Annotated[str, typer.Argument(help="Spot identifier")],
    config_file: ConfigOption = None,
    grid: Annotated[bool, typer.Option("--grid", "-g", help="Add a slot grid column using the configured slot length")] = False,
):
    """
    Show the weekly recurring schedule of a spot.

    Examples:

        spotavail summary spot-1
        spotavail summary spot-1 --grid
    """
    try:
        config = _load_config(config_file)
        schedule = _build_service(config).fetch_schedule(spot_id)

    except (FileNotFoundError, ValueError, SpotAvailabilityError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    table = Table(
        title=f"Weekly schedule for {spot_id}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Day", style="bold yellow")
    table.add_column("Hours")
    if grid:
        table.add_column(f"Slots ({config.slot_minutes} min)", no_wrap=True)

    for day, name in DAY_NAMES.items():
        day_schedule = schedule.recurring.for_day(day)
        intervals = day_schedule.intervals if day_schedule else ()
        row = [name, summarize_intervals(intervals) if day_schedule else "-"]
        if grid:
            row.append(slot_bar(intervals, config.slot_minutes))
        table.add_row(*row)

    console.print()
    console.print(table)
    console.print(f"\n[bold]Summary:[/bold] {summarize_week(schedule.recurring)}")
    if schedule.overrides:
        console.print(f"[dim]{len(schedule.overrides)} date override(s) on file[/dim]")
    console.print()


@app.command()
def spots(
    config_file: ConfigOption = None,
):
    """
    List the spots available in a file store.
    """
    try:
        config = _load_config(config_file)
        store = _build_store(config)

        if not isinstance(store, FileScheduleStore):
            console.print("[yellow]Listing spots is only supported for the file store.[/yellow]")
            raise typer.Exit(1)

        spot_ids = store.list_spots()

    except typer.Exit:
        raise

    except (FileNotFoundError, ValueError, SpotAvailabilityError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not spot_ids:
        console.print("[yellow]No spots defined in the schedule file.[/yellow]")
        return

    for spot_id in spot_ids:
        console.print(f"  {spot_id}")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]spotavail[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
