"""
Advisory booking checks against a spot's effective availability.

This is the fast client-side pre-check only. It has no view of other
in-flight reservations, so the authoritative booking store must still
perform its own conflict check at commit time.
"""

from dataclasses import dataclass
from typing import Optional

from .formatting import format_windows
from .intervals import Interval, contains_range, first_uncovered, format_time_of_day
from .models import (
    BookingRequest,
    EffectiveDayAvailability,
    Invalid,
    SpotSchedule,
    Valid,
    ValidationResult,
)
from .resolver import RuleResolver

NO_SCHEDULE_REASON = "no availability schedule set"


@dataclass(frozen=True)
class BookingPolicy:
    """
    Duration limits applied before the schedule walk.

    Either limit may be None to disable it.
    """
    min_duration_minutes: Optional[int] = None
    max_duration_minutes: Optional[int] = None

    def check(self, request: BookingRequest) -> Optional[str]:
        """Return a reason string when the request breaks a limit."""
        duration = request.duration_minutes()
        if self.min_duration_minutes is not None and duration < self.min_duration_minutes:
            return f"Duration must be at least {self.min_duration_minutes} minutes"
        if self.max_duration_minutes is not None and duration > self.max_duration_minutes:
            hours, minutes = divmod(self.max_duration_minutes, 60)
            limit = f"{hours} hours" if not minutes else f"{self.max_duration_minutes} minutes"
            return f"Duration cannot exceed {limit}"
        return None


class BookingValidator:
    """
    Checks a booking request against a spot's schedule.

    Algorithm:
    1. Reject outright when the spot has no schedule at all
    2. Apply the optional duration policy
    3. Split the request at each local midnight
    4. Resolve each touched date and require the segment to be covered
       by open windows
    5. Report the first violation with a user-facing reason
    """

    def __init__(
        self,
        resolver: Optional[RuleResolver] = None,
        policy: Optional[BookingPolicy] = None,
    ):
        self.resolver = resolver or RuleResolver()
        self.policy = policy

    def validate(self, schedule: SpotSchedule, request: BookingRequest) -> ValidationResult:
        """
        Validate a booking request.

        Args:
            schedule: Recurring rules and overrides of the spot
            request: Requested booking interval in the spot's local time

        Returns:
            Valid, or Invalid carrying the reason and the offending date
        """
        start_date = request.start.date()

        if schedule.is_unset:
            return Invalid(reason=NO_SCHEDULE_REASON, violating_date=start_date)

        if self.policy is not None:
            reason = self.policy.check(request)
            if reason:
                return Invalid(reason=reason, violating_date=start_date)

        for day, segment in request.segments():
            effective = self.resolver.resolve_schedule(schedule, day)
            windows = effective.available_windows

            if not contains_range(windows, segment):
                return Invalid(
                    reason=self._describe_violation(effective, segment),
                    violating_date=day,
                )

        return Valid()

    @staticmethod
    def _describe_violation(effective: EffectiveDayAvailability, segment: Interval) -> str:
        if effective.unset:
            return f"not available on {effective.day_name}s"

        windows = effective.available_windows
        if not windows:
            return f"not available on {effective.day_name}, {effective.date.isoformat()}"

        minute = first_uncovered(windows, segment)
        if minute is None:
            minute = segment.start
        return (
            f"Selected time on {effective.day_name} "
            f"({format_time_of_day(minute)}) is outside available hours: "
            f"{format_windows(windows)}"
        )


def validate(
    resolver: RuleResolver,
    schedule: SpotSchedule,
    request: BookingRequest,
) -> ValidationResult:
    """Shorthand for ``BookingValidator(resolver).validate(schedule, request)``."""
    return BookingValidator(resolver=resolver).validate(schedule, request)

