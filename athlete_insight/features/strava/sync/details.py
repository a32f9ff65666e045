"""
Activity detail and stream synchronization.

Handles fetching detailed activities with their sensor streams and
caching them. A detail is served from the cache only once its streams
are stored.
"""

import logging
from typing import TYPE_CHECKING, Optional

from pydantic import ValidationError

from athlete_insight.shared.errors import AthleteInsightError, DataError
from ..client import StravaClient
from ..schemas import ActivityDetail, StreamData

if TYPE_CHECKING:
    from athlete_insight.features.store import CacheStore

logger = logging.getLogger(__name__)


class DetailSyncService:
    """
    Service for syncing activity details and streams.

    Handles:
    - Cache-first detail lookup (complete details only)
    - Detail + stream fetch with best-effort stream degrade
    - Detail cache invalidation
    """

    def __init__(self, store: "CacheStore", client: StravaClient):
        self.store = store
        self.client = client

    async def get_activity_detail(
        self,
        activity_id: int,
        refresh: bool = False
    ) -> ActivityDetail:
        """
        Get activity detail with streams.

        A cached detail is returned only if it has streams. Otherwise the
        detail is fetched, then its streams; if the stream request fails
        the detail is still cached and returned, with `streams_error` set.

        Args:
            activity_id: Strava activity ID
            refresh: Skip the cache lookup

        Raises:
            AuthError: No usable credentials
            NetworkError: Detail request failed
        """
        if not refresh:
            cached = await self.store.get_detail(activity_id)
            if cached and cached.is_complete:
                return cached

        data = await self.client.get_activity(activity_id)
        try:
            detail = ActivityDetail.model_validate(data)
        except ValidationError as e:
            raise DataError(f"Unexpected activity detail payload: {e}") from e

        try:
            detail.streams = await self.get_activity_streams(activity_id)
        except AthleteInsightError as e:
            logger.warning(f"Failed to fetch streams for activity {activity_id}: {e}")
            detail.streams_error = str(e)

        await self.store.put_detail(detail)
        return detail

    async def get_activity_streams(self, activity_id: int) -> StreamData:
        """
        Fetch every known stream kind for an activity in one request.

        Raises:
            NetworkError: Stream request failed
            DataError: Strava returned an unexpected payload
        """
        payload = await self.client.get_activity_streams(activity_id)

        # Without key_by_type Strava answers with a list of stream objects
        if isinstance(payload, list):
            payload = {
                entry.get("type"): entry
                for entry in payload
                if isinstance(entry, dict)
            }
        if not isinstance(payload, dict):
            raise DataError(f"Unexpected stream payload for activity {activity_id}")

        try:
            return StreamData.from_key_by_type(payload)
        except ValidationError as e:
            raise DataError(f"Invalid stream data for activity {activity_id}: {e}") from e

    async def clear_detail_cache(self, activity_id: Optional[int] = None) -> None:
        """Drop one cached detail, or all of them when no ID is given."""
        if activity_id is None:
            await self.store.clear_details()
        else:
            await self.store.delete_detail(activity_id)
