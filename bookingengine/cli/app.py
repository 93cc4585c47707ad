"""
Main CLI application using Typer.
"""

from datetime import date
from pathlib import Path
from typing import Annotated, Optional, Tuple

import pendulum
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import AppConfig, get_default_config_path
from ..domain.availability import AvailabilityCalculator, effective_window
from ..domain.editor import toggle_excluded_date
from ..domain.exceptions import BookingEngineError
from ..domain.exclusions import set_excluded_dates_enabled, sorted_excluded_dates
from ..domain.models import BookingConfiguration, BookingKind, TimeInterval, sort_weekdays
from ..domain.slots import generate_slots, normalize_slots
from ..services.booking_acceptance import BookingAcceptanceService

app = typer.Typer(
    name="bookingengine",
    help="Inspect and check booking availability configurations",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
NowOption = Annotated[
    Optional[str],
    typer.Option("--now", help="Evaluate as of this instant (ISO 8601) instead of the current time."),
]


def _load_config(config_file: Optional[Path]) -> Tuple[AppConfig, Path]:
    config_path = config_file or get_default_config_path()
    try:
        config = AppConfig.load_from_yaml(config_path)
    except (FileNotFoundError, BookingEngineError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    config.apply_logging()
    return config, config_path


def _parse_now(value: Optional[str], tz: str):
    if not value:
        return pendulum.now(tz)
    try:
        parsed = pendulum.parse(value, tz=tz)
    except Exception as e:
        console.print(f"[red]Could not parse --now: {e}[/red]")
        raise typer.Exit(1)

    if not isinstance(parsed, pendulum.DateTime):
        console.print(f"[red]--now must be a date and time, got '{value}'[/red]")
        raise typer.Exit(1)
    return parsed


def _parse_date(value: str, tz: str) -> date:
    try:
        parsed = pendulum.from_format(value, "YYYY-MM-DD", tz=tz)
    except Exception as e:
        console.print(f"[red]Could not parse date '{value}': {e}[/red]")
        raise typer.Exit(1)
    return date(parsed.year, parsed.month, parsed.day)


def _describe(booking: BookingConfiguration) -> Table:
    table = Table(title="Booking configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="bold yellow")
    table.add_column("Value")

    availability = booking.availability
    table.add_row("Kind", booking.kind.value)
    table.add_row("Available", f"{availability.max_days_ahead} days ahead")
    table.add_row("Buffer", f"{availability.buffer.amount} {availability.buffer.unit.value}")

    quantity = booking.quantity
    unit = "slot" if booking.is_timeslots else "day"
    table.add_row("Quantity", f"{quantity.per_unit} per {unit}" if quantity.enabled else "unlimited")

    if booking.excluded_dates_enabled:
        excluded = ", ".join(d.isoformat() for d in sorted_excluded_dates(booking.excluded_dates))
        table.add_row("Excluded dates", excluded or "-")

    if booking.kind == BookingKind.DAYS:
        table.add_row("Mode", booking.booking_mode.value)
        excluded_weekdays = ", ".join(d.value for d in sort_weekdays(booking.excluded_weekdays))
        table.add_row("Excluded weekdays", excluded_weekdays or "-")
        if booking.is_date_range:
            table.add_row("Counted in", booking.count_mode.value)
            if booking.date_range.custom_limits_enabled:
                minimum, maximum = booking.date_range.effective_limits()
                table.add_row("Range length", f"{minimum} - {maximum}")

    return table


@app.command()
def show(config_file: ConfigOption = None):
    """
    Show the booking configuration.
    """
    config, _ = _load_config(config_file)
    booking = config.booking_configuration()

    console.print()
    console.print(_describe(booking))

    if booking.is_timeslots:
        groups = Table(title="Weekday schedules", show_header=True, header_style="bold cyan")
        groups.add_column("#", style="dim")
        groups.add_column("Days", style="bold yellow")
        groups.add_column("Slots")

        for index, group in enumerate(booking.groups, 1):
            days = ", ".join(d.value for d in group.sorted_days()) or "-"
            slots = ", ".join(s.key() for s in normalize_slots(group.slots)) or "-"
            groups.add_row(str(index), days, slots)

        console.print(groups)

    console.print()


@app.command()
def generate(
    start: Annotated[str, typer.Argument(help="First slot start (HH:MM)")],
    end: Annotated[str, typer.Argument(help="Latest slot end (HH:MM)")],
    length: Annotated[Optional[int], typer.Option("--length", "-l", help="Slot length in minutes")] = None,
    gap: Annotated[Optional[int], typer.Option("--gap", "-g", help="Minutes between slots")] = None,
    max_slots: Annotated[Optional[int], typer.Option("--max", help="Maximum number of slots")] = None,
    config_file: ConfigOption = None,
):
    """
    Preview evenly spaced slots between two times.

    Examples:

        bookingengine generate 09:00 17:00 --length 60

        bookingengine generate 09:00 12:00 -l 90 -g 15
    """
    config, _ = _load_config(config_file)
    defaults = config.generator

    slots = generate_slots(
        start,
        end,
        length if length is not None else defaults.slot_length_minutes,
        gap if gap is not None else defaults.gap_minutes,
        max_slots if max_slots is not None else defaults.max_slots,
    )

    if not slots:
        console.print("[yellow]⚠ No slots fit into this range.[/yellow]")
        return

    console.print(f"[bold green]✓ {len(slots)} slot(s):[/bold green]")
    for slot in slots:
        console.print(f"  {slot}")


@app.command()
def window(now: NowOption = None, config_file: ConfigOption = None):
    """
    Show the effective availability window.
    """
    config, _ = _load_config(config_file)
    booking = config.booking_configuration()
    current = _parse_now(now, config.timezone)

    effective = effective_window(current, booking.availability)

    if effective.is_empty:
        console.print("[yellow]⚠ The buffer reaches past the lookahead: nothing is bookable.[/yellow]")
        return

    console.print(Panel.fit(
        f"[bold]Earliest:[/bold] {effective.earliest.format('YYYY-MM-DD HH:mm')}\n"
        f"[bold]Latest:[/bold]   {effective.latest.format('YYYY-MM-DD HH:mm')}",
        title="Availability window"
    ))


@app.command()
def dates(
    days: Annotated[int, typer.Option("--days", "-d", help="How many upcoming days to list")] = 14,
    now: NowOption = None,
    config_file: ConfigOption = None,
):
    """
    List upcoming bookable dates (and slots for timeslot bookings).
    """
    config, _ = _load_config(config_file)
    booking = config.booking_configuration()
    current = _parse_now(now, config.timezone)

    effective = effective_window(current, booking.availability)
    calculator = AvailabilityCalculator(booking)
    last_day = current.add(days=max(0, days)).date()

    bookable = [d for d in calculator.bookable_dates(effective) if d <= last_day]
    if not bookable:
        console.print("[yellow]⚠ No bookable dates in this period.[/yellow]")
        return

    console.print(f"[bold green]✓ {len(bookable)} bookable date(s):[/bold green]\n")
    for day in bookable:
        label = pendulum.date(day.year, day.month, day.day).format("ddd, YYYY-MM-DD")
        if booking.is_timeslots:
            slots = calculator.slots_for_date(day, effective)
            console.print(f"  {label} | {', '.join(s.interval.key() for s in slots)}")
        else:
            console.print(f"  {label}")


@app.command()
def check(
    day: Annotated[str, typer.Argument(help="Date to book (YYYY-MM-DD); range start in date-range mode")],
    slot: Annotated[Optional[str], typer.Option("--slot", "-s", help="Slot to book (HH:MM-HH:MM)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", "-e", help="Range end (YYYY-MM-DD)")] = None,
    now: NowOption = None,
    config_file: ConfigOption = None,
):
    """
    Check whether a reservation would be accepted.
    """
    config, _ = _load_config(config_file)
    booking = config.booking_configuration()
    tz = config.timezone
    current = _parse_now(now, tz)
    start_day = _parse_date(day, tz)

    service = BookingAcceptanceService(booking, timezone=tz)

    if booking.is_timeslots:
        interval = TimeInterval.parse(slot) if slot else None
        if interval is None:
            console.print("[red]Timeslot bookings need --slot HH:MM-HH:MM.[/red]")
            raise typer.Exit(1)
        result = service.check_timeslot(start_day, interval, now=current)
    elif booking.is_date_range:
        if not end:
            console.print("[red]Date-range bookings need --end YYYY-MM-DD.[/red]")
            raise typer.Exit(1)
        result = service.check_date_range(start_day, _parse_date(end, tz), now=current)
    else:
        result = service.check_single_day(start_day, now=current)

    if result.accepted:
        console.print("[bold green]✓ Accepted[/bold green]")
        return

    detail = f" ({result.detail})" if result.detail else ""
    console.print(f"[bold red]✗ Rejected:[/bold red] {result.reason.value}{detail}")
    raise typer.Exit(2)


@app.command()
def exclude(
    day: Annotated[str, typer.Argument(help="Date to toggle (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
):
    """
    Toggle an excluded date and save the config file.
    """
    config, config_path = _load_config(config_file)
    booking = config.booking_configuration()
    target = _parse_date(day, config.timezone)

    if not booking.excluded_dates_enabled:
        booking = set_excluded_dates_enabled(booking, True)

    booking = toggle_excluded_date(booking, target)
    config.with_booking(booking).save_to_yaml(config_path)

    state = "excluded" if target in booking.excluded_dates else "available again"
    console.print(f"[green]✓ {target.isoformat()} is {state}.[/green]")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]bookingengine[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
