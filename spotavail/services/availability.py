"""
Application services for checking spot availability.

The service coordinates fetching a spot's schedule via a store adapter and
delegates resolution and validation to the domain-level ``RuleResolver``
and ``BookingValidator``. The store is injected through a small protocol so
tests can swap in a stub.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import List, Protocol

from ..domain.models import BookingRequest, EffectiveDayAvailability, SpotSchedule, ValidationResult
from ..domain.resolver import RuleResolver
from ..domain.validator import BookingValidator

logger = logging.getLogger(__name__)


class ScheduleStoreProtocol(Protocol):
    """Protocol describing the schedule store behaviour needed by the service."""

    def fetch_schedule(self, spot_id: str) -> SpotSchedule:
        """Return recurring rules and overrides of a spot."""


class AvailabilityService:
    """
    Orchestrates schedule retrieval, resolution and booking checks.
    """

    def __init__(
        self,
        store: ScheduleStoreProtocol,
        resolver: RuleResolver | None = None,
        validator: BookingValidator | None = None,
    ) -> None:
        self._store = store
        self._resolver = resolver or RuleResolver()
        self._validator = validator or BookingValidator(resolver=self._resolver)

    def fetch_schedule(self, spot_id: str) -> SpotSchedule:
        """Fetch the schedule of a spot from the store."""
        return self._store.fetch_schedule(spot_id)

    def resolve_days(
        self,
        *,
        spot_id: str,
        start_date: date,
        end_date: date,
    ) -> List[EffectiveDayAvailability]:
        """
        Resolve every date from ``start_date`` to ``end_date`` inclusive.
        """
        if end_date < start_date:
            raise ValueError(f"End date {end_date} is before start date {start_date}")

        schedule = self.fetch_schedule(spot_id)
        days: List[EffectiveDayAvailability] = []

        current = start_date
        while current <= end_date:
            days.append(self._resolver.resolve_schedule(schedule, current))
            current = current + timedelta(days=1)

        return days

    def check_booking(
        self,
        *,
        spot_id: str,
        start: datetime,
        end: datetime,
    ) -> ValidationResult:
        """
        Validate a requested booking against the spot's schedule.

        The result is advisory; the booking store performs the
        authoritative conflict check when the booking is committed.
        """
        request = BookingRequest(start=start, end=end)
        schedule = self.fetch_schedule(spot_id)
        result = self._validator.validate(schedule, request)

        if result.is_valid:
            logger.info("Booking %s - %s on spot %s passes availability", request.start, request.end, spot_id)
        else:
            logger.info("Booking on spot %s rejected: %s", spot_id, result)

        return result
