"""
Command-line interface for slot_finder.

Run with: python -m slot_finder
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .availability import compute_availability, resolve_timezone
from .calendar_tools import EventCache, calendar_find_availability, calendar_list_calendars
from .config import settings
from .errors import SlotFinderError
from .formatting import compose_availability_message, format_slot
from .models import AvailabilityConfig, FilterConfig, LimitConfig

app = typer.Typer(
    name="slot_finder",
    help="Find open meeting slots in your calendars",
    add_completion=False,
)
console = Console()


def _pick(value, default):
    return default if value is None else value


def _load_events(path: Path) -> list[dict]:
    """Read events from a JSON file: a list, or a Calendar API response with "items"."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"{path} is not valid JSON: {e}")

    if isinstance(data, dict):
        data = data.get("items", [])
    if not isinstance(data, list):
        raise typer.BadParameter(f"{path} must contain a list of events or an 'items' list")
    return data


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Log timings and counts (DEBUG level)",
    ),
):
    """Find open meeting slots in your calendars."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def slots(
    duration: int = typer.Option(
        None,
        "--duration", "-d",
        min=1,
        help="Meeting length in minutes (default: DEFAULT_DURATION_MINUTES)",
    ),
    days: int = typer.Option(
        None,
        "--days", "-n",
        min=0,
        help="Working days to look ahead (default: DEFAULT_DAYS)",
    ),
    max_slots: int = typer.Option(
        None,
        "--max-slots", "-m",
        min=0,
        help="Cap on returned slots, 0 for unlimited (default: MAX_SLOTS)",
    ),
    diversify: Optional[bool] = typer.Option(
        None,
        "--diversify/--no-diversify",
        help="Spread capped slots across days",
    ),
    include_all_day: Optional[bool] = typer.Option(
        None,
        "--include-all-day/--ignore-all-day",
        help="Whether all-day events block time",
    ),
    include_no_location: Optional[bool] = typer.Option(
        None,
        "--include-no-location/--ignore-no-location",
        help="Whether events without a location or meeting link block time",
    ),
    include_no_participants: Optional[bool] = typer.Option(
        None,
        "--include-no-participants/--ignore-no-participants",
        help="Whether events without attendees block time",
    ),
    calendar: list[str] = typer.Option(
        None,
        "--calendar", "-c",
        help="Calendar ID to read (repeatable; default: SELECTED_CALENDARS)",
    ),
    events_file: Path = typer.Option(
        None,
        "--events-file", "-f",
        exists=True,
        dir_okay=False,
        help="Read events from a JSON file instead of Google Calendar",
    ),
    start: str = typer.Option(
        None,
        "--start", "-s",
        help="Earliest slot start, ISO format (default: now)",
    ),
    timezone: str = typer.Option(
        None,
        "--timezone", "-z",
        help="IANA timezone for working hours (default: CALENDAR_TIMEZONE)",
    ),
    message: bool = typer.Option(
        False,
        "--message",
        help="Print the ready-to-paste email text instead of a table",
    ),
    booking_link: str = typer.Option(
        None,
        "--booking-link",
        help="Booking page appended to the message (default: BOOKING_LINK)",
    ),
):
    """
    Show open meeting slots within working hours (Mon-Fri, 9:00-17:00).

    Examples:
        # Next five working days, 30 minute meetings
        python -m slot_finder slots

        # Three hour-long options spread over different days
        python -m slot_finder slots -d 60 -m 3 --diversify

        # Offline, from an exported events list
        python -m slot_finder slots -f events.json --start 2024-03-20T09:00 -z America/New_York

        # Email-ready text with a booking link
        python -m slot_finder slots --message --booking-link https://cal.example.com/me
    """
    duration = _pick(duration, settings.default_duration_minutes)
    days = _pick(days, settings.default_days)
    tz_name = _pick(timezone, settings.calendar_timezone)
    config = AvailabilityConfig(
        filter=FilterConfig(
            include_all_day=_pick(include_all_day, settings.include_all_day),
            include_no_location=_pick(include_no_location, settings.include_no_location),
            include_no_participants=_pick(include_no_participants, settings.include_no_participants),
        ),
        limit=LimitConfig(
            max_slots=_pick(max_slots, settings.max_slots),
            diversify=_pick(diversify, settings.diversify),
        ),
    )

    try:
        tz = resolve_timezone(datetime.now(), tz_name)
        start_instant = datetime.fromisoformat(start) if start else None
    except (SlotFinderError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if events_file:
        events = _load_events(events_file)
        try:
            found = compute_availability(
                events, duration, start_instant or datetime.now(tz), days, config, tz
            )
        except SlotFinderError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)
        lines = [format_slot(s) for s in found]
    else:
        result = calendar_find_availability(
            duration_minutes=duration,
            days=days,
            calendar_ids=calendar or None,
            config=config,
            now=start_instant,
            tz=tz,
            cache=EventCache(),
        )
        if "error" in result:
            console.print(f"[red]Error: {result['error']}[/red]")
            if not (calendar or settings.selected_calendars):
                console.print("[dim]Pass --calendar to pick one for this run.[/dim]")
            raise typer.Exit(1)
        lines = result["slots"]

    if message:
        text = compose_availability_message(
            lines, duration, tz_name, days, _pick(booking_link, settings.booking_link)
        )
        console.print(text, markup=False, highlight=False, soft_wrap=True)
        return

    if not lines:
        console.print(
            f"[yellow]No availability found in the next {days} working days "
            f"for a {duration} minute meeting.[/yellow]"
        )
        return

    table = Table(title=f"Open {duration}-minute slots ({tz_name})")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Slot", style="cyan")
    for i, line in enumerate(lines, 1):
        table.add_row(str(i), line)
    console.print(table)
    console.print(f"\n[bold green]{len(lines)} slot{'s' if len(lines) != 1 else ''} found[/bold green]")


@app.command()
def calendars():
    """List calendars visible to the token and mark the selected ones."""
    result = calendar_list_calendars()
    if "error" in result:
        console.print(f"[red]Error: {result['error']}[/red]")
        raise typer.Exit(1)

    if not result["calendars"]:
        console.print("[dim]No calendars found.[/dim]")
        return

    selected = set(settings.selected_calendars)
    table = Table(title="Calendars")
    table.add_column("Selected", justify="center")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Role", style="dim")
    for cal in result["calendars"]:
        is_selected = cal["id"] in selected or (cal["primary"] and "primary" in selected)
        table.add_row("✓" if is_selected else "", cal["id"], cal["summary"], cal["access_role"])
    console.print(table)


@app.command()
def version():
    """Show version information."""
    console.print(Panel.fit(f"slot_finder v{__version__}", title="Version"))


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
