"""
REST schedule store for PostgREST-style table endpoints.
"""

import logging
from typing import Any, Dict, List

import requests

from ..domain.exceptions import ScheduleStoreError
from ..domain.models import SpotSchedule
from .records import build_spot_schedule

logger = logging.getLogger(__name__)


class RestScheduleStore:
    """
    Client for the hosted database's REST interface.

    Reads the ``availability_rules`` and ``calendar_overrides`` tables
    filtered by ``spot_id``.
    """

    RULES_TABLE = "availability_rules"
    OVERRIDES_TABLE = "calendar_overrides"

    def __init__(self, base_url: str, api_key: str | None = None, timeout: float = 30.0):
        """
        Initialize the REST store.

        Args:
            base_url: Project URL, e.g. https://example.supabase.co
            api_key: Anonymous or service API key
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {"Accept": "application/json"}
        if api_key:
            self.headers["apikey"] = api_key
            self.headers["Authorization"] = f"Bearer {api_key}"

    def fetch_schedule(self, spot_id: str) -> SpotSchedule:
        """
        Fetch rules and overrides for one spot.

        Raises:
            ScheduleStoreError: If a request fails or returns unexpected data
        """
        rules = self._fetch_table(self.RULES_TABLE, spot_id, order="day_of_week,start_time")
        overrides = self._fetch_table(self.OVERRIDES_TABLE, spot_id, order="override_date")

        return build_spot_schedule(rules=rules, overrides=overrides, spot_id=spot_id)

    def _fetch_table(self, table: str, spot_id: str, order: str) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/rest/v1/{table}"
        params = {"select": "*", "spot_id": f"eq.{spot_id}", "order": order}

        logger.debug("GET %s for spot %s", url, spot_id)

        try:
            response = requests.get(
                url,
                headers=self.headers,
                params=params,
                timeout=self.timeout
            )
            response.raise_for_status()

        except requests.exceptions.RequestException as e:
            raise ScheduleStoreError(f"Failed to fetch {table} for spot {spot_id}: {e}") from e

        # requests' JSONDecodeError is both a ValueError and a RequestException
        try:
            data = response.json()
        except ValueError as e:
            raise ScheduleStoreError(f"Invalid JSON from {table} for spot {spot_id}: {e}") from e

        if not isinstance(data, list):
            raise ScheduleStoreError(f"Expected a list of rows from {table}, got {type(data).__name__}")

        return data
