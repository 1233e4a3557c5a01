"""
Conversion of stored table rows into domain schedules.
"""

import logging
from typing import Any, Iterable, Mapping, Optional

from ..domain.exceptions import ScheduleStoreError
from ..domain.models import DateOverride, RecurringSchedule, SpotSchedule

logger = logging.getLogger(__name__)


def build_spot_schedule(
    rules: Iterable[Mapping[str, Any]],
    overrides: Iterable[Mapping[str, Any]],
    spot_id: Optional[str] = None,
) -> SpotSchedule:
    """
    Build a SpotSchedule from ``availability_rules`` and ``calendar_overrides`` rows.

    Raises:
        ScheduleStoreError: If any row is malformed
    """
    rules = list(rules)
    overrides = list(overrides)

    try:
        recurring = RecurringSchedule.from_rules(rules)
        date_overrides = DateOverride.from_records(overrides)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ScheduleStoreError(f"Malformed schedule data for spot {spot_id}: {exc}") from exc

    logger.debug(
        "Loaded %d rule(s) and %d override row(s) for spot %s",
        len(rules),
        len(overrides),
        spot_id,
    )

    return SpotSchedule(recurring=recurring, overrides=tuple(date_overrides), spot_id=spot_id)
