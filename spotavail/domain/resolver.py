"""
Resolution of recurring rules and date overrides into effective availability.
"""

from datetime import date
from typing import Iterable, List

from .intervals import Interval
from .models import (
    DateOverride,
    EffectiveDayAvailability,
    RecurringSchedule,
    SpotSchedule,
    day_of_week,
    to_date,
)


class RuleResolver:
    """
    Produces the effective availability for a concrete calendar date.

    Algorithm:
    1. Collect the overrides whose ISO date matches the requested date
    2. If any carry windows, they replace the recurring rules outright
    3. Otherwise fall back to the recurring schedule for that weekday
    4. If neither applies, the day is unset (not the same as blocked)
    """

    def resolve(
        self,
        recurring: RecurringSchedule,
        overrides: Iterable[DateOverride],
        day: date,
    ) -> EffectiveDayAvailability:
        """
        Resolve one date.

        Args:
            recurring: Weekly schedule of the spot
            overrides: All date overrides of the spot
            day: Calendar date to resolve

        Returns:
            EffectiveDayAvailability with normalized intervals
        """
        day = to_date(day)
        override_windows = self._override_windows(overrides, day)

        if override_windows:
            return EffectiveDayAvailability(
                date=day,
                intervals=tuple(override_windows),
                source="override",
            )

        day_schedule = recurring.for_day(day_of_week(day))
        if day_schedule is not None:
            return EffectiveDayAvailability(
                date=day,
                intervals=day_schedule.intervals,
                source="recurring",
            )

        return EffectiveDayAvailability(date=day, source="unset")

    def resolve_schedule(self, schedule: SpotSchedule, day: date) -> EffectiveDayAvailability:
        """Resolve one date of a spot's schedule."""
        return self.resolve(schedule.recurring, schedule.overrides, day)

    @staticmethod
    def _override_windows(overrides: Iterable[DateOverride], day: date) -> List[Interval]:
        iso = day.isoformat()
        windows: List[Interval] = []

        for override in overrides:
            if override.iso == iso:
                windows.extend(override.windows)

        return windows
