"""
Data types shared by the availability engine.

Raw events arrive in the Google Calendar v3 shape and are never mutated.
Everything the engine derives from them (busy intervals, slots) is immutable
and lives only for the duration of a single computation.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, TypedDict

from pydantic import BaseModel, ConfigDict, Field, StrictInt
from pydantic.alias_generators import to_camel


# =============================================================================
# Raw calendar events (external shape)
# =============================================================================

class EventTime(TypedDict, total=False):
    dateTime: str      # timed event, RFC 3339
    date: str          # all-day event, YYYY-MM-DD
    timeZone: str


class RawEvent(TypedDict, total=False):
    id: str
    summary: str
    status: str                      # 'confirmed' | 'tentative' | 'cancelled'
    start: EventTime
    end: EventTime
    attendees: list[dict[str, Any]]
    location: str
    hangoutLink: str
    conferenceData: dict[str, Any]
    transparency: str                # 'opaque' (default) | 'transparent'


# =============================================================================
# Derived values
# =============================================================================

@dataclass(frozen=True)
class BusyInterval:
    """A half-open span [start, end) during which the owner is unavailable."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if not self.start < self.end:
            raise ValueError(
                f"BusyInterval start must precede end: {self.start} >= {self.end}"
            )


@dataclass(frozen=True, order=True)
class SlotDescriptor:
    """A bookable meeting window. Ordered chronologically."""

    start: datetime
    end: datetime

    @property
    def day(self) -> date:
        """Local calendar day the slot falls on."""
        return self.start.date()

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


# =============================================================================
# Request / configuration objects
# =============================================================================

class _ConfigModel(BaseModel):
    # Accepts snake_case and camelCase keys (e.g. "maxSlots")
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class FilterConfig(_ConfigModel):
    """Which raw events count as busy."""

    include_all_day: bool = False
    include_no_location: bool = False
    include_no_participants: bool = False


class LimitConfig(_ConfigModel):
    """Post-generation truncation. max_slots == 0 means unlimited."""

    max_slots: int = Field(default=0, ge=0)
    diversify: bool = False


class AvailabilityConfig(_ConfigModel):
    filter: FilterConfig = Field(default_factory=FilterConfig)
    limit: LimitConfig = Field(default_factory=LimitConfig)


class SlotRequest(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    # Strict: booleans and floats are rejected
    duration_minutes: StrictInt = Field(gt=0)
    start_instant: datetime
    day_count: StrictInt = Field(ge=0)
    filter: FilterConfig = Field(default_factory=FilterConfig)
    limit: LimitConfig = Field(default_factory=LimitConfig)

    @property
    def duration(self) -> timedelta:
        return timedelta(minutes=self.duration_minutes)
