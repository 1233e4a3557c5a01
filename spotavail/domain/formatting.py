"""
Human-readable summaries of schedules and effective availability.
"""

from typing import Iterable, List

from .intervals import DEFAULT_SLOT_MINUTES, Interval, format_time_of_day, slots_from_intervals
from .models import DAY_NAMES, EffectiveDayAvailability, RecurringSchedule

SHORT_DAY_NAMES = {day: name[:3] for day, name in DAY_NAMES.items()}

MAX_LISTED_RANGES = 2

OPEN_SLOT = "\u2588"
CLOSED_SLOT = "\u00b7"


def format_windows(windows: Iterable[Interval]) -> str:
    """Format intervals as ``09:00 - 12:00, 13:00 - 17:00``."""
    return ", ".join(str(window) for window in windows)


def summarize_intervals(intervals: Iterable[Interval]) -> str:
    """
    Short summary of one day's open intervals.

    Returns "Closed", "24h", up to two ranges, or "N slots" when there
    are more.
    """
    windows: List[Interval] = [iv for iv in intervals if iv.available]

    if not windows:
        return "Closed"
    if len(windows) == 1 and windows[0].is_full_day:
        return "24h"
    if len(windows) > MAX_LISTED_RANGES:
        return f"{len(windows)} slots"
    return ", ".join(
        f"{format_time_of_day(window.start)}-{format_time_of_day(window.end)}"
        for window in windows
    )


def slot_bar(intervals: Iterable[Interval], slot_minutes: int = DEFAULT_SLOT_MINUTES) -> str:
    """One character per slot of the day: open slots as a block, closed as a dot."""
    return "".join(
        OPEN_SLOT if active else CLOSED_SLOT
        for active in slots_from_intervals(intervals, slot_minutes)
    )


def summarize_day(effective: EffectiveDayAvailability) -> str:
    """Summary of a resolved date, distinguishing unset from closed."""
    if effective.unset:
        return "No schedule set"
    return summarize_intervals(effective.available_windows)


def summarize_week(recurring: RecurringSchedule) -> str:
    """
    One-line summary of a weekly schedule.

    Examples: "No schedule set", "Unavailable", "Available 24/7",
    "Mon, Tue, Wed".
    """
    if recurring.is_empty:
        return "No schedule set"

    open_days = sorted(
        day
        for day, schedule in recurring.days.items()
        if any(interval.available for interval in schedule.intervals)
    )

    if not open_days:
        return "Unavailable"

    if len(open_days) == len(DAY_NAMES) and all(
        schedule.intervals == (Interval.full_day(),)
        for schedule in recurring.days.values()
    ):
        return "Available 24/7"

    return ", ".join(SHORT_DAY_NAMES[day] for day in open_days)
