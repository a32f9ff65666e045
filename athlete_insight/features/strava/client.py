"""
Strava API client.

Provides methods for the Strava endpoints the cache needs.
Every request carries a bearer token obtained from the CredentialManager,
which refreshes it transparently.

Strava API Limits:
- 200 requests per 15 minutes
- 2,000 requests per day

The client does not throttle; bulk callers pace themselves
(see SyncConfig.STREAM_FETCH_DELAY_SECONDS).
"""

import logging
from typing import Any, Iterable, Optional

import httpx

from athlete_insight.config import settings
from athlete_insight.shared.constants import ALL_STREAM_KINDS, StreamKind
from athlete_insight.shared.errors import NetworkError
from .credentials import CredentialManager

logger = logging.getLogger(__name__)


class StravaClient:
    """
    Async client for Strava API.

    Usage:
        client = StravaClient(credentials)
        athlete = await client.get_athlete()
        activities = await client.get_activities(page=1, per_page=30)
        streams = await client.get_activity_streams(activity_id)
    """

    def __init__(
        self,
        credentials: CredentialManager,
        api_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None
    ):
        self.credentials = credentials
        self.api_url = (api_url or settings.strava_api_url).rstrip("/")
        self.transport = transport
        self.timeout = timeout or settings.request_timeout_seconds

    async def _api_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None
    ) -> Any:
        """
        Make an authenticated API request.

        Raises:
            AuthError: If no valid token can be obtained
            NetworkError: If the request fails or Strava returns an error
        """
        access_token = await self.credentials.get_valid_token()

        try:
            async with httpx.AsyncClient(
                transport=self.transport,
                timeout=self.timeout
            ) as client:
                response = await client.request(
                    method=method,
                    url=f"{self.api_url}{endpoint}",
                    headers={"Authorization": f"Bearer {access_token}"},
                    params=params
                )
        except httpx.TransportError as e:
            raise NetworkError(f"Request to {endpoint} failed: {e}") from e

        # Log rate limit headers from Strava
        if "X-RateLimit-Limit" in response.headers:
            logger.debug(
                f"Strava rate limit: {response.headers.get('X-RateLimit-Usage')} "
                f"/ {response.headers.get('X-RateLimit-Limit')}"
            )

        if response.status_code != 200:
            raise NetworkError(
                f"API error {endpoint}: {response.status_code} - {response.reason_phrase}",
                status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(
                f"API error {endpoint}: response is not JSON",
                status_code=response.status_code
            ) from e

    async def get_athlete(self) -> dict:
        """Get authenticated athlete profile."""
        return await self._api_request("GET", "/athlete")

    async def get_activities(
        self,
        page: int = 1,
        per_page: int = 30
    ) -> list[dict]:
        """
        Get one page of athlete activities, newest first.

        Args:
            page: Page number (1-based)
            per_page: Results per page (max 200)
        """
        return await self._api_request(
            "GET",
            "/athlete/activities",
            {"page": page, "per_page": min(per_page, 200)}
        )

    async def get_activity(self, activity_id: int) -> dict:
        """Get detailed activity info (without streams)."""
        return await self._api_request("GET", f"/activities/{activity_id}")

    async def get_activity_streams(
        self,
        activity_id: int,
        kinds: Iterable[StreamKind] = ALL_STREAM_KINDS
    ) -> dict:
        """
        Get activity streams keyed by type.

        Returns:
            {"heartrate": {"data": [...], ...}, "time": {...}, ...};
            kinds the device did not record are omitted by Strava.
        """
        return await self._api_request(
            "GET",
            f"/activities/{activity_id}/streams",
            {
                "keys": ",".join(kind.value for kind in kinds),
                "key_by_type": "true"
            }
        )
