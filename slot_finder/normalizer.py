"""
Event normalizer: raw calendar events -> sorted busy intervals.

Upstream data quality is not ours to control, so events with missing or
unparseable timestamps are dropped here instead of raising.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time, timezone, tzinfo
from typing import Any

from .models import BusyInterval, FilterConfig

logger = logging.getLogger(__name__)


def _parse_marker(marker: Any, tz: tzinfo) -> datetime | None:
    """Resolve a start/end marker to an aware datetime, or None if malformed."""
    if not isinstance(marker, Mapping):
        return None

    date_time = marker.get("dateTime")
    if date_time:
        if not isinstance(date_time, str):
            return None
        try:
            parsed = datetime.fromisoformat(date_time.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=tz)
        return parsed

    day = marker.get("date")
    if day:
        if not isinstance(day, str):
            return None
        try:
            parsed_day = date.fromisoformat(day)
        except ValueError:
            return None
        # All-day events span local midnights; Google's end date is exclusive
        return datetime.combine(parsed_day, time.min, tzinfo=tz)

    return None


def is_all_day(event: Mapping[str, Any]) -> bool:
    start = event.get("start")
    return isinstance(start, Mapping) and not start.get("dateTime") and bool(start.get("date"))


def has_location(event: Mapping[str, Any]) -> bool:
    """True if the event has a physical location or a conferencing link."""
    if event.get("location") or event.get("hangoutLink"):
        return True
    conference = event.get("conferenceData")
    return isinstance(conference, Mapping) and bool(conference.get("entryPoints"))


def has_participants(event: Mapping[str, Any]) -> bool:
    return bool(event.get("attendees"))


def is_free(event: Mapping[str, Any]) -> bool:
    """Transparent (free) and cancelled events never block time."""
    return event.get("transparency") == "transparent" or event.get("status") == "cancelled"


def counts_as_busy(event: Mapping[str, Any], filter_config: FilterConfig) -> bool:
    """Apply the inclusion filters to a single raw event."""
    if not filter_config.include_all_day and is_all_day(event):
        return False
    if not filter_config.include_no_location and not has_location(event):
        return False
    if not filter_config.include_no_participants and not has_participants(event):
        return False
    if is_free(event):
        return False
    return True


def to_busy_interval(event: Mapping[str, Any], tz: tzinfo) -> BusyInterval | None:
    """Convert one raw event to a busy interval, or None if it is malformed."""
    start = _parse_marker(event.get("start"), tz)
    end = _parse_marker(event.get("end"), tz)
    if start is None or end is None:
        return None
    if not start < end:
        return None
    return BusyInterval(start=start, end=end)


def normalize_events(
    events: Iterable[Mapping[str, Any]],
    filter_config: FilterConfig | None = None,
    tz: tzinfo | None = None,
) -> list[BusyInterval]:
    """Filter raw events and return their busy intervals sorted by start.

    Args:
        events: Raw events in Google Calendar v3 shape
        filter_config: Which events count as busy (defaults: all filters on)
        tz: Timezone used for all-day markers and naive timestamps

    Returns:
        List of BusyInterval, ascending by start then end
    """
    filter_config = filter_config or FilterConfig()
    tz = tz or timezone.utc

    intervals: list[BusyInterval] = []
    dropped = filtered = 0

    for event in events:
        if not isinstance(event, Mapping):
            dropped += 1
            continue
        interval = to_busy_interval(event, tz)
        if interval is None:
            dropped += 1
            logger.debug("Dropping malformed event %r", event.get("id", "<no id>"))
            continue
        if not counts_as_busy(event, filter_config):
            filtered += 1
            continue
        intervals.append(interval)

    intervals.sort(key=lambda b: (b.start, b.end))
    logger.debug(
        "Normalized %d busy intervals (%d filtered out, %d malformed)",
        len(intervals), filtered, dropped,
    )
    return intervals
