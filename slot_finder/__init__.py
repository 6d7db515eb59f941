"""
slot_finder - open meeting slots from calendar busy time.
"""

__version__ = "0.1.0"

from .availability import compute_availability, compute_formatted_availability
from .conflicts import ConflictIndex
from .errors import InvalidArgumentError, NoCalendarsSelectedError, SlotFinderError
from .formatting import compose_availability_message, format_slot, format_time_slot
from .models import (
    AvailabilityConfig,
    BusyInterval,
    FilterConfig,
    LimitConfig,
    RawEvent,
    SlotDescriptor,
    SlotRequest,
)
from .normalizer import normalize_events

__all__ = [
    "__version__",
    "AvailabilityConfig",
    "BusyInterval",
    "ConflictIndex",
    "FilterConfig",
    "InvalidArgumentError",
    "LimitConfig",
    "NoCalendarsSelectedError",
    "RawEvent",
    "SlotDescriptor",
    "SlotFinderError",
    "SlotRequest",
    "compose_availability_message",
    "compute_availability",
    "compute_formatted_availability",
    "format_slot",
    "format_time_slot",
    "normalize_events",
]
