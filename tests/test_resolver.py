"""
Tests for the rule resolver.
"""

from datetime import date

import pytest

from spotavail.domain.exceptions import UnknownDay
from spotavail.domain.intervals import Interval
from spotavail.domain.models import DateOverride, RecurringSchedule, SpotSchedule
from spotavail.domain.resolver import RuleResolver

TUESDAY = date(2024, 11, 26)


def weekday_schedule() -> RecurringSchedule:
    """Tuesday and Wednesday 09:00-17:00."""
    return RecurringSchedule.from_rules([
        {"day_of_week": 2, "start_time": "09:00", "end_time": "17:00"},
        {"day_of_week": 3, "start_time": "09:00", "end_time": "17:00"},
    ])


class TestRuleResolver:
    """Tests for RuleResolver."""

    def test_recurring_rule_used_without_override(self):
        effective = RuleResolver().resolve(weekday_schedule(), [], TUESDAY)

        assert effective.source == "recurring"
        assert effective.intervals == (Interval.from_strings("09:00", "17:00"),)

    def test_override_supersedes_recurring(self):
        """A blocked override replaces the recurring window entirely."""
        overrides = [DateOverride.full_day(TUESDAY, is_available=False)]

        effective = RuleResolver().resolve(weekday_schedule(), overrides, TUESDAY)

        assert effective.source == "override"
        assert effective.intervals == (Interval.full_day(available=False),)
        assert effective.is_blocked
        assert effective.available_windows == []

    def test_partial_override_is_not_merged(self):
        """Override windows replace the day, they are not added to it."""
        overrides = [
            DateOverride(date=TUESDAY, windows=(Interval.from_strings("18:00", "20:00", rate=6.0),)),
        ]

        effective = RuleResolver().resolve(weekday_schedule(), overrides, TUESDAY)

        assert effective.available_windows == [Interval.from_strings("18:00", "20:00", rate=6.0)]
        assert effective.rate_at(18 * 60) == 6.0

    def test_override_for_other_date_ignored(self):
        overrides = [DateOverride.full_day("2024-11-27", is_available=False)]

        effective = RuleResolver().resolve(weekday_schedule(), overrides, TUESDAY)

        assert effective.source == "recurring"

    def test_empty_override_falls_back(self):
        overrides = [DateOverride(date=TUESDAY)]

        effective = RuleResolver().resolve(weekday_schedule(), overrides, TUESDAY)

        assert effective.source == "recurring"

    def test_multiple_override_records_combined(self):
        overrides = [
            DateOverride(date=TUESDAY, windows=(Interval.from_strings("08:00", "10:00"),)),
            DateOverride(date=TUESDAY, windows=(Interval.from_strings("10:00", "12:00"),)),
        ]

        effective = RuleResolver().resolve(weekday_schedule(), overrides, TUESDAY)

        assert effective.intervals == (Interval.from_strings("08:00", "12:00"),)

    def test_unset_day(self):
        """No override and no rule yields an unset day, not a blocked one."""
        effective = RuleResolver().resolve(weekday_schedule(), [], date(2024, 11, 24))

        assert effective.unset
        assert effective.source == "unset"
        assert effective.intervals == ()
        assert not effective.is_blocked

    def test_override_on_unset_weekday(self):
        overrides = [DateOverride.full_day("2024-11-24", is_available=True)]

        effective = RuleResolver().resolve(weekday_schedule(), overrides, date(2024, 11, 24))

        assert effective.is_open_all_day

    def test_accepts_iso_string(self):
        effective = RuleResolver().resolve(weekday_schedule(), [], "2024-11-26")

        assert effective.date == TUESDAY
        assert effective.source == "recurring"

    def test_resolve_schedule(self):
        schedule = SpotSchedule(
            recurring=weekday_schedule(),
            overrides=(DateOverride.full_day(TUESDAY, is_available=False),),
        )

        assert RuleResolver().resolve_schedule(schedule, TUESDAY).is_blocked

    def test_unknown_day_lookup(self):
        with pytest.raises(UnknownDay):
            weekday_schedule().for_day(7)
