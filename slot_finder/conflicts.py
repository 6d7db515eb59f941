"""
Conflict index over busy intervals.

Answers "does [start, end) overlap any busy interval?" in O(log n).
Intervals are kept sorted by start; alongside them we keep the running
maximum of their end times. Every interval that could overlap a candidate
starts before the candidate ends, so a bisect on the starts bounds the band,
and the running maximum tells us whether anything in that band is still
busy when the candidate begins. Overlapping or nested busy intervals are
handled exactly, without a linear scan.
"""

from bisect import bisect_left
from collections.abc import Iterable
from datetime import datetime

from .models import BusyInterval


class ConflictIndex:
    """Built fresh for each availability computation; never shared."""

    def __init__(self, intervals: Iterable[BusyInterval]):
        ordered = sorted(intervals, key=lambda b: (b.start, b.end))
        self._starts: list[datetime] = [b.start for b in ordered]
        self._max_ends: list[datetime] = []

        running_end: datetime | None = None
        for interval in ordered:
            if running_end is None or interval.end > running_end:
                running_end = interval.end
            self._max_ends.append(running_end)

        self.checks = 0

    def __len__(self) -> int:
        return len(self._starts)

    def has_conflict(self, start: datetime, end: datetime) -> bool:
        """True if [start, end) overlaps any busy interval (half-open test)."""
        self.checks += 1
        if not self._starts:
            return False

        # Intervals [0, band) start strictly before the candidate ends
        band = bisect_left(self._starts, end)
        if band == 0:
            return False
        return self._max_ends[band - 1] > start
