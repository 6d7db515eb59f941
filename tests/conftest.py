"""Shared test fixtures for slot_finder tests.

Provides:
- A fixed working-hours timezone (America/New_York)
- Anchor instants on known weekdays in March 2024 (EDT)
- A factory for Google Calendar shaped events

Usage:
    def test_something(make_event, monday_9am):
        event = make_event(monday_9am, monday_9am + timedelta(hours=1))
        ...
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

import pytest


NY = ZoneInfo("America/New_York")


# ─────────────────────────────────────────────────────────────────────────────
# Time Anchors
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def ny() -> ZoneInfo:
    return NY


@pytest.fixture
def monday_9am() -> datetime:
    """Monday 2024-03-18 09:00 EDT."""
    return datetime(2024, 3, 18, 9, 0, tzinfo=NY)


@pytest.fixture
def wednesday_9am() -> datetime:
    """Wednesday 2024-03-20 09:00 EDT."""
    return datetime(2024, 3, 20, 9, 0, tzinfo=NY)


# ─────────────────────────────────────────────────────────────────────────────
# Event Factories
# ─────────────────────────────────────────────────────────────────────────────


def _make_event(
    start: datetime,
    end: datetime,
    *,
    attendees: bool = True,
    location: bool = True,
    **extra: Any,
) -> dict[str, Any]:
    event: dict[str, Any] = {
        "id": f"evt-{start:%Y%m%d%H%M}",
        "summary": "Meeting",
        "start": {"dateTime": start.isoformat()},
        "end": {"dateTime": end.isoformat()},
    }
    if attendees:
        event["attendees"] = [{"email": "colleague@example.com"}]
    if location:
        event["location"] = "Conference Room A"
    event.update(extra)
    return event


@pytest.fixture
def make_event() -> Callable[..., dict[str, Any]]:
    """Factory for timed events that pass every default filter."""
    return _make_event


@pytest.fixture
def regular_events(wednesday_9am: datetime) -> list[dict[str, Any]]:
    """Two meetings on Wednesday: 10-11 in a room, 14-15 on a video call."""
    return [
        _make_event(wednesday_9am + timedelta(hours=1), wednesday_9am + timedelta(hours=2)),
        _make_event(
            wednesday_9am + timedelta(hours=5),
            wednesday_9am + timedelta(hours=6),
            location=False,
            hangoutLink="https://meet.google.com/abc-defg-hij",
        ),
    ]
