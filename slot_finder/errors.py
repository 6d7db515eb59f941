"""Exception types raised by slot_finder."""


class SlotFinderError(Exception):
    """Base class for slot_finder errors."""


class InvalidArgumentError(SlotFinderError, ValueError):
    """A slot request was malformed (e.g. non-positive duration)."""


class NoCalendarsSelectedError(SlotFinderError):
    """No calendars were selected to read busy time from."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "No calendars selected. Set SELECTED_CALENDARS."
        )
