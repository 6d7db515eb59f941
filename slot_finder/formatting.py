"""
Human-readable rendering of slots and the availability email block.
"""

from collections.abc import Iterable
from datetime import datetime

from .models import SlotDescriptor


def _format_clock(dt: datetime) -> str:
    """9:00 AM style, no leading zero on the hour."""
    hour = dt.hour % 12 or 12
    meridiem = "AM" if dt.hour < 12 else "PM"
    return f"{hour}:{dt.minute:02d} {meridiem}"


def format_time_slot(start: datetime, end: datetime) -> str:
    """Render a window as e.g. "Wed Mar 20, 9:00 AM - 9:30 AM EDT".

    The timezone abbreviation is omitted for naive datetimes.
    """
    text = f"{start:%a %b} {start.day}, {_format_clock(start)} - {_format_clock(end)}"
    tz_name = start.tzname()
    return f"{text} {tz_name}" if tz_name else text


def format_slot(slot: SlotDescriptor) -> str:
    return format_time_slot(slot.start, slot.end)


def compose_availability_message(
    slots: Iterable[SlotDescriptor | str],
    duration_minutes: int,
    timezone_name: str,
    days: int,
    booking_link: str | None = None,
) -> str:
    """Build the text block inserted into an email compose field.

    Args:
        slots: Slot descriptors, or slot strings that are already formatted
        duration_minutes: Meeting length shown in the intro line
        timezone_name: IANA name shown next to the duration (e.g. "America/New_York")
        days: Look-ahead window, used in the no-availability text
        booking_link: Optional scheduling page appended as a fallback

    Returns:
        The message text
    """
    lines = [s if isinstance(s, str) else format_slot(s) for s in slots]

    if not lines:
        message = (
            f"No availability found in the next {days} days "
            f"for a {duration_minutes} minute meeting.\n\n"
        )
        if booking_link:
            message += f"Please use my booking page for more options:\n{booking_link}"
        return message

    message = (
        f"Would any of these time windows work for a {duration_minutes} "
        f"minute meeting ({timezone_name})?\n\n"
    )
    message += "".join(f"• {line}\n" for line in lines)

    if booking_link:
        message += (
            "\nFeel free to use this booking page if that's easier "
            f"(also contains more availabilities):\n{booking_link}"
        )
    return message
