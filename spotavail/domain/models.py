"""
Domain models for recurring schedules, date overrides and booking requests.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import pendulum

from .exceptions import InvalidInterval, UnknownDay
from .intervals import (
    DEFAULT_SLOT_MINUTES,
    Interval,
    contains,
    format_time_of_day,
    intervals_from_slots,
    normalize,
    parse_time_of_day,
    subtract,
)

# 0=Sunday, 6=Saturday
DAY_NAMES = {
    0: "Sunday",
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
}


def day_of_week(day: date) -> int:
    """Return the day-of-week index with 0=Sunday."""
    return day.isoweekday() % 7


def check_day_of_week(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value not in DAY_NAMES:
        raise UnknownDay(f"Day of week must be between 0 (Sunday) and 6 (Saturday), got {value!r}")
    return value


def to_date(value: Any) -> date:
    """Coerce an ISO string, date or datetime into a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        parsed = pendulum.parse(value, exact=True)
        if isinstance(parsed, datetime):
            return parsed.date()
        if isinstance(parsed, date):
            return parsed
    raise ValueError(f"Could not interpret {value!r} as a calendar date")


def _time_field(value: Any, end: bool = False) -> int:
    # Unquoted H:MM in YAML 1.1 loads as a base-60 integer, i.e. minutes since midnight
    if isinstance(value, int) and not isinstance(value, bool):
        value = format_time_of_day(value)
    return parse_time_of_day(value, end=end)


def _window_from_record(record: Mapping[str, Any], rate_key: str = "custom_rate") -> Interval:
    """Build a tagged interval from a rule or override row."""
    available = record.get("is_available")
    available = True if available is None else bool(available)
    rate = record.get(rate_key)
    rate = float(rate) if rate is not None else None
    start_time = record.get("start_time")
    end_time = record.get("end_time")

    if start_time is None and end_time is None:
        return Interval.full_day(available=available, rate=rate)
    if start_time is None or end_time is None:
        raise InvalidInterval("start_time and end_time must both be set or both be null")

    return Interval(
        start=_time_field(start_time),
        end=_time_field(end_time, end=True),
        available=available,
        rate=rate,
    )


@dataclass(frozen=True)
class DaySchedule:
    """
    The recurring intervals of one day of the week.

    Intervals are normalized on construction.
    """
    day_of_week: int
    intervals: Tuple[Interval, ...] = ()

    def __post_init__(self):
        check_day_of_week(self.day_of_week)
        object.__setattr__(self, "intervals", tuple(normalize(self.intervals)))

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day_of_week]

    @property
    def is_empty(self) -> bool:
        return not self.intervals


@dataclass(frozen=True)
class RecurringSchedule:
    """
    Weekly repeating schedule, keyed by day of week (0=Sunday).

    Replaced wholesale by a host; read-only on the booking path.
    """
    days: Mapping[int, DaySchedule] = field(default_factory=dict)

    def __post_init__(self):
        days: Dict[int, DaySchedule] = {}
        for key, schedule in self.days.items():
            check_day_of_week(key)
            if schedule.day_of_week != key:
                raise UnknownDay(
                    f"Schedule for day {schedule.day_of_week} stored under day {key}"
                )
            if not schedule.is_empty:
                days[key] = schedule
        object.__setattr__(self, "days", days)

    @classmethod
    def from_intervals(cls, intervals_by_day: Mapping[int, Iterable[Interval]]) -> "RecurringSchedule":
        return cls(
            days={
                day: DaySchedule(day_of_week=day, intervals=tuple(intervals))
                for day, intervals in intervals_by_day.items()
            }
        )

    @classmethod
    def from_rules(cls, rules: Iterable[Mapping[str, Any]]) -> "RecurringSchedule":
        """
        Build a schedule from ``availability_rules`` rows.

        Each row has ``day_of_week``, ``start_time``, ``end_time`` and an
        optional ``is_available`` flag (defaults to True).
        """
        grouped: Dict[int, List[Interval]] = {}
        for rule in rules:
            day = check_day_of_week(rule.get("day_of_week"))
            grouped.setdefault(day, []).append(_window_from_record(rule))
        return cls.from_intervals(grouped)

    @classmethod
    def from_slot_grid(
        cls,
        grid: Mapping[int, Sequence[bool]],
        slot_minutes: int = DEFAULT_SLOT_MINUTES,
    ) -> "RecurringSchedule":
        """Build a schedule from a weekly grid of open/closed slots per day."""
        return cls.from_intervals(
            {day: intervals_from_slots(slots, slot_minutes) for day, slots in grid.items()}
        )

    def for_day(self, day: int) -> Optional[DaySchedule]:
        """Get the schedule for a day of week, or None if nothing is set."""
        check_day_of_week(day)
        return self.days.get(day)

    def to_rules(self) -> List[Dict[str, Any]]:
        """Serialize back into ``availability_rules`` row shape."""
        rows: List[Dict[str, Any]] = []
        for day in sorted(self.days):
            for interval in self.days[day].intervals:
                rows.append(
                    {
                        "day_of_week": day,
                        "start_time": format_time_of_day(interval.start),
                        "end_time": format_time_of_day(interval.end),
                        "is_available": interval.available,
                        "custom_rate": interval.rate,
                    }
                )
        return rows

    @property
    def is_empty(self) -> bool:
        return not self.days

    def __getitem__(self, day: int) -> DaySchedule:
        schedule = self.for_day(day)
        if schedule is None:
            raise KeyError(day)
        return schedule

    def __contains__(self, day: object) -> bool:
        return day in self.days


@dataclass(frozen=True)
class DateOverride:
    """
    Replaces the recurring schedule for one calendar date.

    A single full-day block or unblock is the one-window case spanning
    ``[00:00, 24:00)``. An override without windows counts as absent.
    """
    date: date
    windows: Tuple[Interval, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "date", to_date(self.date))
        object.__setattr__(self, "windows", tuple(self.windows))

    @classmethod
    def full_day(cls, day: Any, is_available: bool, rate: Optional[float] = None) -> "DateOverride":
        return cls(date=day, windows=(Interval.full_day(available=is_available, rate=rate),))

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> List["DateOverride"]:
        """
        Group ``calendar_overrides`` rows by ``override_date``.

        Rows with null ``start_time``/``end_time`` cover the whole day.
        """
        grouped: Dict[date, List[Interval]] = {}
        for record in records:
            day = to_date(record.get("override_date"))
            grouped.setdefault(day, []).append(_window_from_record(record))
        return [cls(date=day, windows=tuple(windows)) for day, windows in sorted(grouped.items())]

    @property
    def iso(self) -> str:
        return self.date.isoformat()

    @property
    def is_empty(self) -> bool:
        return not self.windows


@dataclass(frozen=True)
class EffectiveDayAvailability:
    """
    Resolved availability for one concrete date.

    ``unset`` means neither an override nor a recurring rule applies, which
    is distinct from a day that is explicitly blocked.
    """
    date: date
    intervals: Tuple[Interval, ...] = ()
    source: str = "unset"

    SOURCES = ("override", "recurring", "unset")

    def __post_init__(self):
        if self.source not in self.SOURCES:
            raise ValueError(f"Unknown availability source: {self.source!r}")
        object.__setattr__(self, "intervals", tuple(normalize(self.intervals)))

    @property
    def unset(self) -> bool:
        return self.source == "unset"

    @property
    def day_of_week(self) -> int:
        return day_of_week(self.date)

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day_of_week]

    @property
    def available_windows(self) -> List[Interval]:
        """Open windows, with unavailable intervals taking precedence."""
        open_intervals = [iv for iv in self.intervals if iv.available]
        blocked = [iv for iv in self.intervals if not iv.available]
        return subtract(open_intervals, blocked)

    @property
    def is_blocked(self) -> bool:
        """True when a schedule applies but leaves nothing open."""
        return not self.unset and not self.available_windows

    @property
    def is_open_all_day(self) -> bool:
        windows = self.available_windows
        return len(windows) == 1 and windows[0].is_full_day

    def rate_at(self, minute: int) -> Optional[float]:
        """Custom rate of the open window containing ``minute``, if any."""
        for window in self.available_windows:
            if contains(window, minute):
                return window.rate
        return None


@dataclass(frozen=True)
class SpotSchedule:
    """Recurring rules plus date overrides for one spot."""
    recurring: RecurringSchedule = field(default_factory=RecurringSchedule)
    overrides: Tuple[DateOverride, ...] = ()
    spot_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "overrides", tuple(self.overrides))

    @property
    def is_unset(self) -> bool:
        """No recurring rule and no override anywhere."""
        return self.recurring.is_empty and all(o.is_empty for o in self.overrides)


def _instant(value: datetime) -> float:
    """Seconds since the epoch; naive values are read as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def _localized(value: datetime) -> pendulum.DateTime:
    """The same instant as a pendulum DateTime in the value's own zone."""
    return pendulum.from_timestamp(_instant(value), tz=value.tzinfo or pendulum.UTC)


def _minute_of_day(value: datetime) -> int:
    return value.hour * 60 + value.minute


def _split_at_offset_change(
    start: pendulum.DateTime,
    end: pendulum.DateTime,
) -> List[Tuple[pendulum.DateTime, pendulum.DateTime]]:
    """
    Split ``[start, end)`` wherever the UTC offset changes.

    Wall-clock minutes only increase within each piece, so a request
    through a repeated or skipped DST hour maps onto valid intervals.
    """
    last = end.subtract(minutes=1)
    offset = start.utcoffset()
    if last.utcoffset() == offset:
        return [(start, end)]

    # Bisect for the first minute on the new offset
    low, high = start, last
    while _instant(high) - _instant(low) > 60:
        mid = low.add(minutes=int(_instant(high) - _instant(low)) // 120)
        if mid.utcoffset() == offset:
            low = mid
        else:
            high = mid

    return [(start, high)] + _split_at_offset_change(high, end)


@dataclass(frozen=True)
class BookingRequest:
    """
    A requested ``[start, end)`` booking in the spot's local time.

    Seconds and microseconds are truncated on construction. Aware
    datetimes are ordered and measured by their absolute instant, so a
    booking across a DST fall-back is not mistaken for a reversed one.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        start = self.start.replace(second=0, microsecond=0)
        end = self.end.replace(second=0, microsecond=0)
        if _instant(start) >= _instant(end):
            raise InvalidInterval(f"Booking start {start} must be before end {end}")
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((_instant(self.end) - _instant(self.start)) // 60)

    def segments(self) -> Iterator[Tuple[date, Interval]]:
        """
        Split the request at each local midnight.

        Yields one (date, interval) pair per calendar day touched. A segment
        reaching midnight ends at 1440. A day with a UTC offset change inside
        the request yields one pair per offset, e.g. 02:45-03:00 and
        02:00-02:15 for a booking through the repeated autumn hour.
        """
        current = _localized(self.start)
        end = _localized(self.end)

        while _instant(current) < _instant(end):
            next_midnight = current.start_of("day").add(days=1)
            segment_end = min(end, next_midnight, key=_instant)
            for piece_start, piece_end in _split_at_offset_change(current, segment_end):
                yield piece_start.date(), Interval(
                    start=_minute_of_day(piece_start),
                    end=_minute_of_day(piece_end.subtract(minutes=1)) + 1,
                )
            current = segment_end


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a booking check."""

    @property
    def is_valid(self) -> bool:
        return isinstance(self, Valid)


@dataclass(frozen=True)
class Valid(ValidationResult):
    """The requested booking fits the effective availability."""


@dataclass(frozen=True)
class Invalid(ValidationResult):
    """The requested booking violates the schedule on ``violating_date``."""
    reason: str
    violating_date: Optional[date] = None

    def __str__(self) -> str:
        return self.reason
