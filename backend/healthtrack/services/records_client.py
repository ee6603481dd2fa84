"""
Client for the tracker REST API that stores the user's readings.

Endpoints (GET, one per tracker screen):
- BMI:          /api/v1/bmi/{user_id}
- Lab reports:  /api/v1/report/{user_id}
- Ear tests:    /api/v1/ear/{user_id}
- Eye tests:    /api/v1/eye/{user_id}
- Food log:     /api/v1/food/{user_id}
- Fluid log:    /api/v1/data/user/{user_id}

A 404 means the user has no records yet and is returned as an empty list.
"""

import logging
from typing import Any, List, Optional

import httpx

from healthtrack.config import settings
from healthtrack.models import Record
from healthtrack.parsers.record_parser import parse_payload
from healthtrack.trackers import TrackerConfig

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "application/json",
}


class RecordsClientError(Exception):
    """Exception raised for tracker API errors."""
    pass


class RecordsClient:
    """
    Async client for fetching a user's tracker records.

    Usage:
        client = RecordsClient()
        records = await client.fetch(get_tracker("bmi"), user_id="42")
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: API root; defaults to ``settings.API_BASE``
            timeout: Request timeout in seconds; defaults to ``settings.REQUEST_TIMEOUT``
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = (base_url or settings.API_BASE).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self.transport = transport

    async def fetch_payload(self, path: str) -> Any:
        """
        GET ``path`` and return the decoded JSON body, or ``None`` on 404.

        Raises:
            RecordsClientError: On network errors or unexpected statuses
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(f"{self.base_url}{path}", headers=DEFAULT_HEADERS)
            except httpx.RequestError as e:
                raise RecordsClientError(f"Network error: {str(e)}")

        if response.status_code == 404:
            logger.info("No records at %s", path)
            return None
        if response.status_code != 200:
            logger.warning("Tracker API %s returned %s: %s", path, response.status_code, response.text[:300])
            raise RecordsClientError(f"Failed to fetch records: {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise RecordsClientError(f"Invalid JSON from {path}: {e}")

    async def fetch(self, tracker: TrackerConfig, user_id: str) -> List[Record]:
        """
        Fetch and parse every record of ``tracker`` for one user.

        Returns:
            Records in the order the API sent them (often newest first)
        """
        if not tracker.endpoint:
            raise RecordsClientError(f"Tracker {tracker.name!r} has no API endpoint")

        payload = await self.fetch_payload(tracker.endpoint.format(user_id=user_id))
        if payload is None:
            return []
        return parse_payload(payload, tracker.timestamp_field)
