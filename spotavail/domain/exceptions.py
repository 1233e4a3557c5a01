"""
Domain-specific exception hierarchy for the spot availability model.
"""


class SpotAvailabilityError(Exception):
    """Base class for all application-level errors."""


class InvalidInterval(SpotAvailabilityError, ValueError):
    """Raised when an interval or time of day is malformed."""


class UnknownDay(SpotAvailabilityError, ValueError):
    """Raised when a day-of-week falls outside 0 (Sunday) to 6 (Saturday)."""


class ScheduleStoreError(SpotAvailabilityError):
    """Raised when schedule data cannot be fetched or parsed."""
