"""
Google Calendar tools for slot_finder.

Reads events from the selected calendars via the Calendar API v3 and feeds
them to the availability engine. Expects an already-authorised token file
(GOOGLE_CALENDAR_TOKEN_FILE); obtaining or refreshing tokens is out of scope.

Tool functions return dict[str, Any] with either success data or {"error": "..."}.
"""

import logging
import time
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, tzinfo
from typing import Any

from .availability import compute_availability, resolve_timezone
from .config import settings
from .errors import NoCalendarsSelectedError, SlotFinderError
from .formatting import format_slot
from .generator import last_working_day
from .models import AvailabilityConfig, RawEvent

logger = logging.getLogger(__name__)


# =============================================================================
# Service Helper
# =============================================================================

SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]


def _get_calendar_service():
    """Build and return an authenticated Google Calendar service.

    Loads credentials from the token file. Expired or missing tokens are
    reported, not refreshed.

    Raises:
        RuntimeError: If the libraries are missing or the token is missing / invalid.
    """
    try:
        from google.oauth2.credentials import Credentials
        from googleapiclient.discovery import build
    except ImportError:
        raise RuntimeError(
            "Google API libraries not installed. Run: "
            "pip install google-api-python-client google-auth google-auth-httplib2"
        )

    token_path = settings.google_calendar_token_file
    if not token_path.exists():
        raise RuntimeError(
            f"Google Calendar token not found at {token_path}. "
            "Set GOOGLE_CALENDAR_TOKEN_FILE to an authorised user token."
        )

    creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)
    if not creds.valid:
        raise RuntimeError(
            "Google Calendar token is expired or invalid. Re-authorise and try again."
        )

    return build("calendar", "v3", credentials=creds, cache_discovery=False)


# =============================================================================
# Event Cache
# =============================================================================

def _round_to_minute(dt: datetime) -> datetime:
    return dt.replace(second=0, microsecond=0)


class EventCache:
    """Per-calendar event cache with a freshness window.

    Entries are keyed by calendar id and the requested time range rounded to
    the minute, so two requests a few seconds apart share one fetch. Expired
    entries are evicted on every put, so a long-lived cache stays bounded by
    what was stored within the last TTL. The clock is injectable for tests.
    """

    def __init__(
        self,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = settings.event_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._entries: dict[tuple[str, datetime, datetime], tuple[float, list[RawEvent]]] = {}

    @staticmethod
    def _key(calendar_id: str, time_min: datetime, time_max: datetime) -> tuple[str, datetime, datetime]:
        return calendar_id, _round_to_minute(time_min), _round_to_minute(time_max)

    def get(self, calendar_id: str, time_min: datetime, time_max: datetime) -> list[RawEvent] | None:
        key = self._key(calendar_id, time_min, time_max)
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, events = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return events

    def put(self, calendar_id: str, time_min: datetime, time_max: datetime, events: list[RawEvent]) -> None:
        now = self._clock()
        self._entries = {
            key: entry for key, entry in self._entries.items()
            if now - entry[0] < self.ttl_seconds
        }
        self._entries[self._key(calendar_id, time_min, time_max)] = (now, events)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# =============================================================================
# Fetching
# =============================================================================

def fetch_calendar_events(
    service,
    calendar_id: str,
    time_min: datetime,
    time_max: datetime,
) -> list[RawEvent]:
    """Fetch all expanded event instances of one calendar in [time_min, time_max)."""
    kwargs: dict[str, Any] = {
        "calendarId": calendar_id,
        "timeMin": time_min.isoformat(),
        "timeMax": time_max.isoformat(),
        "singleEvents": True,
        "orderBy": "startTime",
        "maxResults": 250,
    }

    items: list[RawEvent] = []
    while True:
        result = service.events().list(**kwargs).execute()
        items.extend(result.get("items", []))
        page_token = result.get("nextPageToken")
        if not page_token:
            break
        kwargs["pageToken"] = page_token

    return items


def collect_events(
    service,
    calendar_ids: Iterable[str],
    time_min: datetime,
    time_max: datetime,
    cache: EventCache | None = None,
) -> list[RawEvent]:
    """Fetch and concatenate events from every selected calendar.

    Raises:
        NoCalendarsSelectedError: If calendar_ids is empty.
    """
    calendar_ids = list(calendar_ids)
    if not calendar_ids:
        raise NoCalendarsSelectedError()

    events: list[RawEvent] = []
    for calendar_id in calendar_ids:
        cached = cache.get(calendar_id, time_min, time_max) if cache is not None else None
        if cached is not None:
            logger.debug("Using cached events for %s", calendar_id)
            events.extend(cached)
            continue

        fetched = fetch_calendar_events(service, calendar_id, time_min, time_max)
        logger.debug("Fetched %d events from %s", len(fetched), calendar_id)
        if cache is not None:
            cache.put(calendar_id, time_min, time_max, fetched)
        events.extend(fetched)

    return events


# =============================================================================
# Tool Implementations
# =============================================================================

def calendar_list_calendars(service=None) -> dict[str, Any]:
    """List the calendars visible to the authorised account.

    Returns:
        Dict with "calendars" list and "count"
    """
    try:
        service = service or _get_calendar_service()

        calendars: list[dict[str, Any]] = []
        kwargs: dict[str, Any] = {}
        while True:
            result = service.calendarList().list(**kwargs).execute()
            for item in result.get("items", []):
                calendars.append({
                    "id": item.get("id", ""),
                    "summary": item.get("summary", "(no name)"),
                    "primary": bool(item.get("primary", False)),
                    "access_role": item.get("accessRole", ""),
                })
            page_token = result.get("nextPageToken")
            if not page_token:
                break
            kwargs["pageToken"] = page_token

        return {"calendars": calendars, "count": len(calendars)}

    except RuntimeError as e:
        return {"error": str(e)}
    except Exception as e:
        return {"error": f"Failed to list calendars: {str(e)}"}


def calendar_find_availability(
    duration_minutes: int | None = None,
    days: int | None = None,
    calendar_ids: list[str] | None = None,
    config: AvailabilityConfig | None = None,
    now: datetime | None = None,
    tz: tzinfo | str | None = None,
    service=None,
    cache: EventCache | None = None,
) -> dict[str, Any]:
    """Find open meeting slots across the selected calendars.

    Args:
        duration_minutes: Meeting length (default: DEFAULT_DURATION_MINUTES)
        days: Working days to look ahead (default: DEFAULT_DAYS)
        calendar_ids: Calendars to read busy time from (default: SELECTED_CALENDARS)
        config: Filter and limit options (default: from settings)
        now: Start instant (default: current time)
        tz: Working-hours timezone (default: CALENDAR_TIMEZONE)
        service: Calendar API service (default: built from the token file)
        cache: Optional EventCache shared between calls

    Returns:
        Dict with "slots" (display strings), "windows" (ISO start/end pairs)
        and "count"; "message" when nothing is free; or {"error": ..., "slots": []}
    """
    duration_minutes = settings.default_duration_minutes if duration_minutes is None else duration_minutes
    days = settings.default_days if days is None else days
    calendar_ids = settings.selected_calendars if calendar_ids is None else calendar_ids
    config = config or settings.availability_config()

    try:
        tz = resolve_timezone(now or datetime.now(), tz or settings.calendar_timezone)
        now = now or datetime.now(tz)
        if now.tzinfo is None:
            now = now.replace(tzinfo=tz)

        if not calendar_ids:
            raise NoCalendarsSelectedError()

        events: list[RawEvent] = []
        if days > 0:
            local_now = now.astimezone(tz)
            last_day = last_working_day(local_now.date(), days)
            time_max = datetime.combine(last_day + timedelta(days=1), datetime.min.time(), tzinfo=tz)
            service = service or _get_calendar_service()
            events = collect_events(service, calendar_ids, now, time_max, cache)

        slots = compute_availability(events, duration_minutes, now, days, config, tz)

        result: dict[str, Any] = {
            "slots": [format_slot(s) for s in slots],
            "windows": [s.to_dict() for s in slots],
            "count": len(slots),
        }
        if not slots:
            result["message"] = "No available slots found in the selected time range."
        return result

    except (RuntimeError, SlotFinderError) as e:
        return {"error": str(e), "slots": []}
    except Exception as e:
        logger.exception("Availability lookup failed")
        return {"error": f"Failed to find availability: {str(e)}", "slots": []}
