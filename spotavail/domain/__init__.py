"""
Domain layer - Pure availability logic without external dependencies.
"""

from .exceptions import InvalidInterval, ScheduleStoreError, SpotAvailabilityError, UnknownDay
from .intervals import Interval, contains, contains_range, normalize, overlaps
from .models import (
    BookingRequest,
    DateOverride,
    DaySchedule,
    EffectiveDayAvailability,
    Invalid,
    RecurringSchedule,
    SpotSchedule,
    Valid,
    ValidationResult,
)
from .resolver import RuleResolver
from .validator import BookingPolicy, BookingValidator

__all__ = [
    "BookingPolicy",
    "BookingRequest",
    "BookingValidator",
    "DateOverride",
    "DaySchedule",
    "EffectiveDayAvailability",
    "Interval",
    "Invalid",
    "InvalidInterval",
    "RecurringSchedule",
    "RuleResolver",
    "ScheduleStoreError",
    "SpotAvailabilityError",
    "SpotSchedule",
    "UnknownDay",
    "Valid",
    "ValidationResult",
    "contains",
    "contains_range",
    "normalize",
    "overlaps",
]
