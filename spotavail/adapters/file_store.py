"""
File-backed schedule store reading JSON or YAML documents.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..domain.exceptions import ScheduleStoreError
from ..domain.models import SpotSchedule
from .records import build_spot_schedule

logger = logging.getLogger(__name__)


class FileScheduleStore:
    """
    Store that loads spot schedules from a local document.

    Expected layout (JSON or YAML):

        spots:
          <spot_id>:
            availability_rules:
              - {day_of_week: 2, start_time: "09:00", end_time: "17:00"}
            calendar_overrides:
              - {override_date: "2024-11-26", start_time: null,
                 end_time: null, is_available: false}

    Quoting times is recommended. YAML reads an unquoted ``17:00`` as the
    base-60 integer 1020, which is accepted as minutes since midnight.
    """

    def __init__(self, path: Path):
        """
        Initialize the store.

        Args:
            path: Path to a .json, .yaml or .yml document
        """
        self.path = Path(path)
        self._spots: Dict[str, Any] | None = None

    def _load(self) -> Dict[str, Any]:
        """Load and cache the schedule document."""
        if self._spots is not None:
            return self._spots

        if not self.path.exists():
            raise ScheduleStoreError(f"Schedule file not found: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                if self.path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f) or {}
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
            raise ScheduleStoreError(f"Could not read schedule file {self.path}: {exc}") from exc

        spots = data.get("spots") if isinstance(data, dict) else None
        if not isinstance(spots, dict):
            raise ScheduleStoreError(f"Schedule file {self.path} must contain a 'spots' mapping")

        logger.debug("Loaded %d spot(s) from %s", len(spots), self.path)
        self._spots = {str(key): value for key, value in spots.items()}
        return self._spots

    def list_spots(self) -> List[str]:
        """Return the identifiers of all spots in the document."""
        return sorted(self._load())

    def fetch_schedule(self, spot_id: str) -> SpotSchedule:
        """
        Load the schedule of one spot.

        Unknown spots have no rules and no overrides, which the validator
        treats as "no availability schedule set".
        """
        entry = self._load().get(spot_id)
        if entry is None:
            logger.warning("Spot %s not found in %s", spot_id, self.path)
            entry = {}
        if not isinstance(entry, dict):
            raise ScheduleStoreError(f"Schedule entry for spot {spot_id} must be a mapping")

        return build_spot_schedule(
            rules=entry.get("availability_rules") or [],
            overrides=entry.get("calendar_overrides") or [],
            spot_id=spot_id,
        )
