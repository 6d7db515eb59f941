"""
Slot generator: walks working days in fixed steps and keeps every window
that fits inside working hours without touching busy time.

Candidates are grouped per calendar day so that a slot quota can be spread
across days (diversification) instead of clustering on the earliest one.
"""

import logging
from datetime import date, datetime, time, timedelta, tzinfo

from .conflicts import ConflictIndex
from .models import LimitConfig, SlotDescriptor, SlotRequest

logger = logging.getLogger(__name__)

WORKDAY_START = time(9, 0)
WORKDAY_END = time(17, 0)
SLOT_STEP_MINUTES = 30
WEEKEND_DAYS = frozenset({5, 6})  # date.weekday(): Saturday, Sunday

SlotsByDay = dict[date, list[SlotDescriptor]]


def is_working_day(day: date) -> bool:
    return day.weekday() not in WEEKEND_DAYS


def last_working_day(first_day: date, day_count: int) -> date:
    """Date of the last working day visited when walking day_count working days."""
    day = first_day
    visited = 0
    while True:
        if is_working_day(day):
            visited += 1
            if visited >= day_count:
                return day
        day += timedelta(days=1)


def _first_cursor(day_start: datetime, start_instant: datetime) -> datetime:
    """Later of the working-day start and the start instant."""
    return start_instant if start_instant > day_start else day_start


def collect_candidates(
    index: ConflictIndex,
    request: SlotRequest,
    tz: tzinfo,
) -> SlotsByDay:
    """Generate every non-conflicting candidate, grouped by local day.

    Stops once `request.day_count` working days have been visited; weekend
    days are skipped without counting. The returned mapping is ordered
    chronologically and only holds days that produced at least one slot.
    """
    step = timedelta(minutes=SLOT_STEP_MINUTES)
    duration = request.duration
    start_local = request.start_instant.astimezone(tz)

    by_day: SlotsByDay = {}
    day = start_local.date()
    visited = 0

    while visited < request.day_count:
        if not is_working_day(day):
            day += timedelta(days=1)
            continue
        visited += 1

        day_start = datetime.combine(day, WORKDAY_START, tzinfo=tz)
        day_end = datetime.combine(day, WORKDAY_END, tzinfo=tz)
        cursor = _first_cursor(day_start, start_local)

        while cursor < day_end:
            candidate_end = cursor + duration
            if candidate_end > day_end:
                break
            if not index.has_conflict(cursor, candidate_end):
                by_day.setdefault(day, []).append(SlotDescriptor(cursor, candidate_end))
            cursor += step

        day += timedelta(days=1)

    return by_day


def _diversify(by_day: SlotsByDay, max_slots: int) -> list[SlotDescriptor]:
    """Spread max_slots across days, later days absorbing the remainder."""
    days = [day for day, slots in by_day.items() if slots]
    taken: dict[date, int] = {}
    remaining = max_slots

    for position, day in enumerate(days):
        days_left = len(days) - position
        share = remaining if days_left == 1 else remaining // days_left
        taken[day] = min(share, len(by_day[day]))
        remaining -= taken[day]

    # Days capped by their own supply leave a shortfall; fill it in time order
    for day in days:
        if remaining <= 0:
            break
        extra = min(remaining, len(by_day[day]) - taken[day])
        taken[day] += extra
        remaining -= extra

    return [slot for day in days for slot in by_day[day][:taken[day]]]


def limit_slots(by_day: SlotsByDay, limit: LimitConfig) -> list[SlotDescriptor]:
    """Apply the slot quota, then return the survivors in chronological order."""
    candidates = [slot for slots in by_day.values() for slot in slots]

    if limit.max_slots == 0 or len(candidates) <= limit.max_slots:
        selected = candidates
    elif limit.diversify:
        selected = _diversify(by_day, limit.max_slots)
    else:
        selected = candidates[:limit.max_slots]

    return sorted(selected)


def generate_slots(
    index: ConflictIndex,
    request: SlotRequest,
    tz: tzinfo,
) -> list[SlotDescriptor]:
    """Produce the final, limited and sorted list of open slots."""
    by_day = collect_candidates(index, request, tz)
    slots = limit_slots(by_day, request.limit)

    logger.debug(
        "Slot generation: %d conflict checks, %d candidates over %d days, %d returned",
        index.checks,
        sum(len(s) for s in by_day.values()),
        len(by_day),
        len(slots),
    )
    return slots
