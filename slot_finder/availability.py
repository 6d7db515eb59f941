"""
Availability computation: raw events + request -> open meeting slots.

This is the synchronous, I/O-free entry point. Every call builds its own
intervals, index and per-day buffers, so concurrent callers never share
mutable state. Fetching events is the caller's job (see calendar_tools).
"""

import logging
import time
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ValidationError

from .conflicts import ConflictIndex
from .errors import InvalidArgumentError
from .formatting import format_slot
from .generator import generate_slots
from .models import AvailabilityConfig, SlotDescriptor, SlotRequest
from .normalizer import normalize_events

logger = logging.getLogger(__name__)


def _validation_message(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(loc) for loc in item["loc"]) or "request"
        parts.append(f"{field}: {item['msg']}")
    return "; ".join(parts)


def resolve_timezone(start_instant: datetime, tz: tzinfo | str | None = None) -> tzinfo:
    """Pick the timezone working hours are evaluated in.

    Explicit tz wins; otherwise the start instant's own tzinfo; naive
    instants without a tz fall back to UTC.
    """
    if isinstance(tz, str):
        try:
            return ZoneInfo(tz)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise InvalidArgumentError(f"Unknown timezone: {tz!r}") from e
    if tz is not None:
        return tz
    return start_instant.tzinfo or timezone.utc


def coerce_config(config: AvailabilityConfig | Mapping[str, Any] | None) -> AvailabilityConfig:
    if config is None:
        return AvailabilityConfig()
    if isinstance(config, AvailabilityConfig):
        return config
    try:
        return AvailabilityConfig.model_validate(dict(config))
    except ValidationError as e:
        raise InvalidArgumentError(_validation_message(e)) from e


def build_request(
    duration_minutes: int,
    start_instant: datetime,
    day_count: int,
    config: AvailabilityConfig,
) -> SlotRequest:
    try:
        return SlotRequest(
            duration_minutes=duration_minutes,
            start_instant=start_instant,
            day_count=day_count,
            filter=config.filter,
            limit=config.limit,
        )
    except ValidationError as e:
        raise InvalidArgumentError(_validation_message(e)) from e


def compute_availability(
    events: Iterable[Mapping[str, Any]] | None,
    duration_minutes: int,
    start_instant: datetime,
    day_count: int,
    config: AvailabilityConfig | Mapping[str, Any] | None = None,
    tz: tzinfo | str | None = None,
) -> list[SlotDescriptor]:
    """Compute open meeting slots within working hours.

    Args:
        events: Raw calendar events (Google Calendar v3 shape); malformed
                entries are skipped
        duration_minutes: Meeting length, must be > 0
        start_instant: Earliest moment a slot may start
        day_count: Number of working days to look at; 0 yields no slots
        config: AvailabilityConfig, or a dict like
                {"filter": {...}, "limit": {"max_slots": 3, "diversify": True}}
        tz: Timezone for working hours (tzinfo or IANA name)

    Returns:
        Slot descriptors sorted chronologically

    Raises:
        InvalidArgumentError: non-positive duration, negative day count or
            max_slots, unknown timezone, or a non-datetime start instant
    """
    if not isinstance(start_instant, datetime):
        raise InvalidArgumentError(
            f"start_instant must be a datetime, got {type(start_instant).__name__}"
        )

    resolved_tz = resolve_timezone(start_instant, tz)
    if start_instant.tzinfo is None:
        start_instant = start_instant.replace(tzinfo=resolved_tz)

    request = build_request(duration_minutes, start_instant, day_count, coerce_config(config))
    if request.day_count == 0:
        return []

    started = time.perf_counter()
    intervals = normalize_events(events or [], request.filter, resolved_tz)
    index = ConflictIndex(intervals)
    slots = generate_slots(index, request, resolved_tz)

    logger.debug(
        "Computed %d slots from %d busy intervals in %.2fms",
        len(slots), len(intervals), (time.perf_counter() - started) * 1000,
    )
    return slots


def compute_formatted_availability(
    events: Iterable[Mapping[str, Any]] | None,
    duration_minutes: int,
    start_instant: datetime,
    day_count: int,
    config: AvailabilityConfig | Mapping[str, Any] | None = None,
    tz: tzinfo | str | None = None,
) -> list[str]:
    """Same as compute_availability, rendered as display strings."""
    slots = compute_availability(events, duration_minutes, start_instant, day_count, config, tz)
    return [format_slot(slot) for slot in slots]
