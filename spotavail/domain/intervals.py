"""
Interval model for a single day's availability.

Times of day are plain integers counting minutes since midnight. The value
1440 (``END_OF_DAY``) is only legal as an end bound and is the one canonical
way to say "until midnight". Display formats such as ``"23:59"`` are turned
into this form by ``parse_time_of_day`` and never used internally.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .exceptions import InvalidInterval

MINUTES_PER_DAY = 1440
END_OF_DAY = MINUTES_PER_DAY
DEFAULT_SLOT_MINUTES = 30

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?$")


@dataclass(frozen=True)
class Interval:
    """
    Represents an immutable half-open range ``[start, end)`` within one day.

    Invariant: 0 <= start < end <= 1440.
    """
    start: int
    end: int
    available: bool = True
    rate: Optional[float] = None

    def __post_init__(self):
        if isinstance(self.start, bool) or not isinstance(self.start, int):
            raise InvalidInterval(f"Start {self.start!r} must be an integer minute")
        if isinstance(self.end, bool) or not isinstance(self.end, int):
            raise InvalidInterval(f"End {self.end!r} must be an integer minute")
        if not 0 <= self.start < MINUTES_PER_DAY:
            raise InvalidInterval(f"Start {self.start} must be between 0 and 1439")
        if not 0 < self.end <= END_OF_DAY:
            raise InvalidInterval(f"End {self.end} must be between 1 and 1440")
        if self.start >= self.end:
            raise InvalidInterval(
                f"Start {format_time_of_day(self.start)} must be before "
                f"end {format_time_of_day(self.end)}"
            )

    @classmethod
    def full_day(cls, available: bool = True, rate: Optional[float] = None) -> "Interval":
        """Return the canonical ``[00:00, 24:00)`` interval."""
        return cls(start=0, end=END_OF_DAY, available=available, rate=rate)

    @classmethod
    def from_strings(
        cls,
        start: str,
        end: str,
        available: bool = True,
        rate: Optional[float] = None,
    ) -> "Interval":
        """Build an interval from ``HH:MM`` strings."""
        return cls(
            start=parse_time_of_day(start),
            end=parse_time_of_day(end, end=True),
            available=available,
            rate=rate,
        )

    @property
    def duration_minutes(self) -> int:
        return self.end - self.start

    @property
    def is_full_day(self) -> bool:
        return self.start == 0 and self.end == END_OF_DAY

    def same_tag(self, other: "Interval") -> bool:
        """Check whether both intervals carry the same availability and rate."""
        return self.available == other.available and self.rate == other.rate

    def overlaps(self, other: "Interval") -> bool:
        return overlaps(self, other)

    def contains(self, point: int) -> bool:
        return contains(self, point)

    def __str__(self) -> str:
        return f"{format_time_of_day(self.start)} - {format_time_of_day(self.end)}"


def parse_time_of_day(text: str, end: bool = False) -> int:
    """
    Convert an ``HH:MM`` or ``HH:MM:SS`` string to minutes since midnight.

    Seconds are ignored. When ``end`` is set, ``"23:59"``, ``"24:00"`` and
    ``"00:00"`` all mean end of day and map to 1440.

    Raises:
        InvalidInterval: If the string is not a time or is out of range
    """
    match = _TIME_PATTERN.match(text.strip()) if isinstance(text, str) else None
    if not match:
        raise InvalidInterval(f"Could not parse time of day: {text!r}")

    hours = int(match.group(1))
    minutes = int(match.group(2))
    if minutes > 59:
        raise InvalidInterval(f"Minutes out of range in {text!r}")

    value = hours * 60 + minutes
    if end and value in (0, MINUTES_PER_DAY - 1):
        return END_OF_DAY
    if value > END_OF_DAY or (value == END_OF_DAY and not end):
        raise InvalidInterval(f"Time of day out of range: {text!r}")
    return value


def format_time_of_day(minutes: int) -> str:
    """Format minutes since midnight as ``HH:MM`` (1440 becomes ``24:00``)."""
    if not 0 <= minutes <= END_OF_DAY:
        raise InvalidInterval(f"Time of day out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize(intervals: Iterable[Interval]) -> List[Interval]:
    """
    Sort intervals and merge touching or overlapping ones with equal tags.

    Example: [09:00-12:00, 12:00-17:00] -> [09:00-17:00]
    Intervals with different availability or rate are never merged.
    """
    sorted_intervals = sorted(
        intervals,
        key=lambda iv: (iv.start, iv.end, not iv.available, iv.rate is not None, iv.rate or 0),
    )
    merged: List[Interval] = []

    for current in sorted_intervals:
        # Merge into the most recent interval with the same tag, if it reaches us
        for index in range(len(merged) - 1, -1, -1):
            last = merged[index]
            if last.same_tag(current) and current.start <= last.end:
                merged[index] = Interval(
                    start=last.start,
                    end=max(last.end, current.end),
                    available=last.available,
                    rate=last.rate,
                )
                break
        else:
            merged.append(current)

    return sorted(merged, key=lambda iv: (iv.start, iv.end))


def overlaps(a: Interval, b: Interval) -> bool:
    """Strict half-open overlap test; touching boundaries do not overlap."""
    return a.start < b.end and b.start < a.end


def contains(interval: Interval, point: int) -> bool:
    """Check if a time of day falls inside ``[start, end)``."""
    return interval.start <= point < interval.end


def contains_range(covering: Iterable[Interval], target: Interval) -> bool:
    """
    Check whether ``target`` is fully covered by the union of ``covering``.

    Covering intervals may chain boundary to boundary; any gap fails.
    Tags are ignored, callers pass only the intervals that count as open.
    """
    cursor = target.start

    for interval in normalize(covering):
        if interval.end <= cursor:
            continue
        if interval.start > cursor:
            return False
        cursor = interval.end
        if cursor >= target.end:
            return True

    return False


def first_uncovered(covering: Iterable[Interval], target: Interval) -> Optional[int]:
    """Return the first minute of ``target`` not covered, or None."""
    cursor = target.start

    for interval in normalize(covering):
        if interval.end <= cursor:
            continue
        if interval.start > cursor:
            return cursor
        cursor = interval.end
        if cursor >= target.end:
            return None

    return cursor if cursor < target.end else None


def find_overlapping(existing: Iterable[Interval], candidate: Interval) -> List[Interval]:
    """
    Return the existing blocks that overlap a new block.

    Hosts may not enter overlapping blocks for one day; callers reject the
    candidate when this list is not empty.
    """
    return [interval for interval in existing if overlaps(interval, candidate)]


def subtract(base: Iterable[Interval], removed: Iterable[Interval]) -> List[Interval]:
    """
    Remove the ``removed`` ranges from ``base``, keeping base tags.

    Example:
    Base: [09:00-17:00]
    Removed: [12:00-13:00]
    Result: [09:00-12:00, 13:00-17:00]
    """
    holes = normalize(
        Interval(start=iv.start, end=iv.end) for iv in removed
    )
    result: List[Interval] = []

    for interval in normalize(base):
        current_start = interval.start

        for hole in holes:
            if hole.end <= current_start or hole.start >= interval.end:
                continue
            if current_start < hole.start:
                result.append(
                    Interval(
                        start=current_start,
                        end=hole.start,
                        available=interval.available,
                        rate=interval.rate,
                    )
                )
            current_start = max(current_start, hole.end)

        if current_start < interval.end:
            result.append(
                Interval(
                    start=current_start,
                    end=interval.end,
                    available=interval.available,
                    rate=interval.rate,
                )
            )

    return result


def _check_slot_minutes(slot_minutes: int) -> int:
    if slot_minutes <= 0 or MINUTES_PER_DAY % slot_minutes:
        raise InvalidInterval(f"Slot length {slot_minutes} must divide 1440 minutes")
    return MINUTES_PER_DAY // slot_minutes


def intervals_from_slots(
    slots: Sequence[bool],
    slot_minutes: int = DEFAULT_SLOT_MINUTES,
) -> List[Interval]:
    """
    Run-length encode a day's slot grid into available intervals.

    ``slots[i]`` is True when the slot starting at ``i * slot_minutes`` is
    open. A fully open grid becomes the single ``[00:00, 24:00)`` interval.
    """
    total = _check_slot_minutes(slot_minutes)
    if len(slots) != total:
        raise InvalidInterval(f"Expected {total} slots, got {len(slots)}")

    intervals: List[Interval] = []
    run_start: Optional[int] = None

    for slot in range(total + 1):
        active = slot < total and bool(slots[slot])
        if active and run_start is None:
            run_start = slot
        elif not active and run_start is not None:
            intervals.append(
                Interval(start=run_start * slot_minutes, end=slot * slot_minutes)
            )
            run_start = None

    return intervals


def slots_from_intervals(
    intervals: Iterable[Interval],
    slot_minutes: int = DEFAULT_SLOT_MINUTES,
) -> List[bool]:
    """
    Expand available intervals into a day's slot grid.

    A slot is open when any available interval touches it, so partial slots
    round outward.
    """
    total = _check_slot_minutes(slot_minutes)
    slots = [False] * total

    for interval in intervals:
        if not interval.available:
            continue
        first = interval.start // slot_minutes
        last = -(-interval.end // slot_minutes)
        for slot in range(first, min(last, total)):
            slots[slot] = True

    return slots
