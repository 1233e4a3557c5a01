"""
Tests for domain models.
"""

from datetime import date, datetime

import pendulum
import pytest

from spotavail.domain.exceptions import InvalidInterval, UnknownDay
from spotavail.domain.intervals import Interval
from spotavail.domain.models import (
    BookingRequest,
    DateOverride,
    DaySchedule,
    EffectiveDayAvailability,
    RecurringSchedule,
    SpotSchedule,
    day_of_week,
)


class TestDayOfWeek:
    """Tests for the Sunday-based weekday index."""

    def test_known_dates(self):
        assert day_of_week(date(2024, 11, 24)) == 0  # Sunday
        assert day_of_week(date(2024, 11, 25)) == 1  # Monday
        assert day_of_week(date(2024, 11, 30)) == 6  # Saturday

    def test_pendulum_dates(self):
        assert day_of_week(pendulum.parse("2024-11-26", tz="Europe/Berlin")) == 2


class TestRecurringSchedule:
    """Tests for RecurringSchedule."""

    def test_from_rules_normalizes(self):
        """Rules for the same day are merged when they touch."""
        schedule = RecurringSchedule.from_rules([
            {"day_of_week": 2, "start_time": "09:00", "end_time": "12:00", "is_available": True},
            {"day_of_week": 2, "start_time": "12:00:00", "end_time": "17:00:00"},
        ])

        assert schedule.for_day(2).intervals == (Interval.from_strings("09:00", "17:00"),)
        assert schedule.for_day(3) is None

    def test_full_day_display_format(self):
        """A 23:59 end is stored as the canonical end of day."""
        schedule = RecurringSchedule.from_rules([
            {"day_of_week": 5, "start_time": "00:00", "end_time": "23:59"},
        ])

        assert schedule[5].intervals == (Interval.full_day(),)

    def test_unknown_day_rejected(self):
        with pytest.raises(UnknownDay):
            RecurringSchedule.from_rules([
                {"day_of_week": 7, "start_time": "09:00", "end_time": "17:00"},
            ])

    def test_for_day_out_of_range(self):
        with pytest.raises(UnknownDay):
            RecurringSchedule().for_day(-1)

    def test_day_schedule_rejects_unknown_day(self):
        with pytest.raises(UnknownDay):
            DaySchedule(day_of_week=9)

    def test_mismatched_key_rejected(self):
        with pytest.raises(UnknownDay):
            RecurringSchedule(days={1: DaySchedule(day_of_week=2, intervals=(Interval.full_day(),))})

    def test_empty_days_dropped(self):
        schedule = RecurringSchedule(days={1: DaySchedule(day_of_week=1)})

        assert schedule.is_empty
        assert 1 not in schedule

    def test_slot_grid_round_trip_to_rules(self):
        grid = {1: [18 <= slot < 34 for slot in range(48)]}

        rules = RecurringSchedule.from_slot_grid(grid).to_rules()

        assert rules == [
            {"day_of_week": 1, "start_time": "09:00", "end_time": "17:00", "is_available": True,
             "custom_rate": None},
        ]

    def test_rules_keep_custom_rate(self):
        """Day-of-week pricing survives writing the rules back out."""
        schedule = RecurringSchedule.from_rules([
            {"day_of_week": 1, "start_time": "09:00", "end_time": "17:00", "custom_rate": 6.5},
            {"day_of_week": 1, "start_time": "17:00", "end_time": "20:00"},
        ])

        rules = schedule.to_rules()

        assert [rule["custom_rate"] for rule in rules] == [6.5, None]
        assert RecurringSchedule.from_rules(rules) == schedule
        assert schedule.for_day(1).intervals[0] == Interval.from_strings("09:00", "17:00", rate=6.5)

    def test_unquoted_yaml_time_as_minutes(self):
        schedule = RecurringSchedule.from_rules([
            {"day_of_week": 3, "start_time": 570, "end_time": 1439},
        ])

        assert schedule.for_day(3).intervals == (Interval.from_strings("09:30", "24:00"),)

    def test_out_of_range_integer_time_rejected(self):
        """17:00:00 unquoted is 61200 in YAML and cannot be a minute of the day."""
        with pytest.raises(InvalidInterval):
            RecurringSchedule.from_rules([
                {"day_of_week": 3, "start_time": "09:00", "end_time": 61200},
            ])


class TestDateOverride:
    """Tests for DateOverride."""

    def test_full_day_block(self):
        override = DateOverride.full_day("2024-11-26", is_available=False)

        assert override.iso == "2024-11-26"
        assert override.windows == (Interval.full_day(available=False),)

    def test_from_records_groups_by_date(self):
        """Several rows for one date become one override with several windows."""
        overrides = DateOverride.from_records([
            {"override_date": "2024-11-27", "start_time": None, "end_time": None, "is_available": False},
            {"override_date": "2024-11-26", "start_time": "10:00", "end_time": "12:00",
             "is_available": True, "custom_rate": 4.5},
            {"override_date": "2024-11-26", "start_time": "14:00", "end_time": "16:00",
             "is_available": True, "custom_rate": None},
        ])

        assert [o.iso for o in overrides] == ["2024-11-26", "2024-11-27"]
        assert overrides[0].windows == (
            Interval.from_strings("10:00", "12:00", rate=4.5),
            Interval.from_strings("14:00", "16:00"),
        )
        assert overrides[1].windows == (Interval.full_day(available=False),)

    def test_half_open_record_rejected(self):
        with pytest.raises(InvalidInterval):
            DateOverride.from_records([
                {"override_date": "2024-11-26", "start_time": "10:00", "end_time": None, "is_available": True},
            ])

    def test_empty_override(self):
        assert DateOverride(date=date(2024, 11, 26)).is_empty


class TestEffectiveDayAvailability:
    """Tests for EffectiveDayAvailability."""

    def test_unavailable_takes_precedence(self):
        effective = EffectiveDayAvailability(
            date=date(2024, 11, 26),
            intervals=(
                Interval.full_day(rate=3.0),
                Interval.from_strings("12:00", "13:00", available=False),
            ),
            source="override",
        )

        assert effective.available_windows == [
            Interval.from_strings("00:00", "12:00", rate=3.0),
            Interval.from_strings("13:00", "24:00", rate=3.0),
        ]
        assert effective.rate_at(600) == 3.0
        assert effective.rate_at(750) is None
        assert not effective.is_blocked

    def test_unset_is_not_blocked(self):
        effective = EffectiveDayAvailability(date=date(2024, 11, 26))

        assert effective.unset
        assert not effective.is_blocked
        assert effective.day_name == "Tuesday"

    def test_blocked(self):
        effective = EffectiveDayAvailability(
            date=date(2024, 11, 26),
            intervals=(Interval.full_day(available=False),),
            source="override",
        )

        assert effective.is_blocked
        assert not effective.unset

    def test_unknown_source_rejected(self):
        with pytest.raises(ValueError):
            EffectiveDayAvailability(date=date(2024, 11, 26), source="guess")


class TestSpotSchedule:
    """Tests for SpotSchedule."""

    def test_unset_when_everything_empty(self):
        assert SpotSchedule().is_unset
        assert SpotSchedule(overrides=(DateOverride(date=date(2024, 11, 26)),)).is_unset

    def test_override_only_is_set(self):
        schedule = SpotSchedule(overrides=(DateOverride.full_day("2024-11-26", is_available=False),))

        assert not schedule.is_unset


class TestBookingRequest:
    """Tests for BookingRequest."""

    def test_seconds_truncated(self):
        request = BookingRequest(
            start=datetime(2024, 11, 26, 9, 0, 45),
            end=datetime(2024, 11, 26, 10, 0, 30, 999),
        )

        assert request.start == datetime(2024, 11, 26, 9, 0)
        assert request.end == datetime(2024, 11, 26, 10, 0)
        assert request.duration_minutes() == 60

    def test_empty_after_truncation_rejected(self):
        with pytest.raises(InvalidInterval):
            BookingRequest(
                start=datetime(2024, 11, 26, 9, 0, 10),
                end=datetime(2024, 11, 26, 9, 0, 50),
            )

    def test_single_day_segment(self):
        request = BookingRequest(
            start=pendulum.parse("2024-11-26 16:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-26 17:00", tz="Europe/Berlin"),
        )

        assert list(request.segments()) == [
            (date(2024, 11, 26), Interval(start=960, end=1020)),
        ]

    def test_split_at_midnight(self):
        """A request crossing midnight yields one segment per day."""
        request = BookingRequest(
            start=pendulum.parse("2024-11-25 23:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-27 01:00", tz="Europe/Berlin"),
        )

        assert list(request.segments()) == [
            (date(2024, 11, 25), Interval(start=1380, end=1440)),
            (date(2024, 11, 26), Interval.full_day()),
            (date(2024, 11, 27), Interval(start=0, end=60)),
        ]

    def test_end_at_midnight(self):
        request = BookingRequest(
            start=datetime(2024, 11, 26, 22, 0),
            end=datetime(2024, 11, 27, 0, 0),
        )

        assert list(request.segments()) == [
            (date(2024, 11, 26), Interval(start=1320, end=1440)),
        ]

    def test_repeated_autumn_hour(self):
        """02:45 CEST to 02:15 CET is 30 real minutes, not a reversed booking."""
        start = pendulum.datetime(2024, 10, 27, 0, 45, tz="UTC").in_tz("Europe/Berlin")
        end = start.add(minutes=30)

        request = BookingRequest(start=start, end=end)

        assert request.duration_minutes() == 30
        assert list(request.segments()) == [
            (date(2024, 10, 27), Interval(start=165, end=180)),
            (date(2024, 10, 27), Interval(start=120, end=135)),
        ]

    def test_skipped_spring_hour(self):
        start = pendulum.datetime(2024, 3, 31, 1, 30, tz="Europe/Berlin")
        end = start.add(hours=1)

        request = BookingRequest(start=start, end=end)

        assert request.duration_minutes() == 60
        assert list(request.segments()) == [
            (date(2024, 3, 31), Interval(start=90, end=120)),
            (date(2024, 3, 31), Interval(start=180, end=210)),
        ]

    def test_reversed_aware_request_rejected(self):
        start = pendulum.datetime(2024, 10, 27, 1, 15, tz="UTC").in_tz("Europe/Berlin")

        with pytest.raises(InvalidInterval):
            BookingRequest(start=start, end=start.subtract(minutes=30))
