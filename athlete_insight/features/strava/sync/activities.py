"""
Activity synchronization.

Handles fetching activity pages from Strava and saving them to the cache.
"""

import logging
from typing import TYPE_CHECKING, Optional

from pydantic import ValidationError

from athlete_insight.shared.errors import DataError
from ..client import StravaClient
from ..credentials import CredentialManager
from ..schemas import Activity, ActivityPage
from .config import SyncConfig

if TYPE_CHECKING:
    from athlete_insight.features.store import CacheStore

logger = logging.getLogger(__name__)


class ActivitySyncService:
    """
    Service for syncing activity summaries from Strava.

    Handles:
    - Fetching one page of activities and upserting it into the cache
    - The paginated activity feed (first page on reset, next page after)
    - Reading and clearing cached activities
    """

    def __init__(
        self,
        store: "CacheStore",
        client: StravaClient,
        credentials: CredentialManager,
        per_page: Optional[int] = None
    ):
        self.store = store
        self.client = client
        self.credentials = credentials
        self.per_page = per_page or SyncConfig.ACTIVITIES_PER_PAGE
        self._next_page = 1
        self._has_more = True

    async def list_activities(
        self,
        page: int = 1,
        per_page: Optional[int] = None
    ) -> list[Activity]:
        """
        Fetch one page of activities and cache every item.

        Returns the fetched page only, not the merged cache.

        Raises:
            AuthError: No usable credentials
            NetworkError: Strava returned a non-success status
            DataError: Strava returned an unexpected payload
        """
        per_page = per_page or self.per_page
        data = await self.client.get_activities(page=page, per_page=per_page)

        try:
            activities = [Activity.model_validate(item) for item in data]
        except (ValidationError, TypeError) as e:
            raise DataError(f"Unexpected activity list payload: {e}") from e

        await self.store.put_activities(activities)
        logger.debug(f"Cached {len(activities)} activities from page {page}")
        return activities

    async def load_activities(self, reset: bool = False) -> ActivityPage:
        """
        Advance the activity feed.

        Unauthenticated sessions get the whole cache. Otherwise `reset`
        restarts at page 1; each call fetches the next page until a short
        page signals the end.
        """
        if not await self.credentials.is_authenticated():
            cached = await self.store.get_cached_activities()
            return ActivityPage(
                activities=cached,
                page=0,
                has_more=False,
                from_cache=True
            )

        if reset:
            self._next_page = 1
            self._has_more = True

        if not self._has_more:
            return ActivityPage(
                activities=[],
                page=self._next_page,
                has_more=False
            )

        page = self._next_page
        activities = await self.list_activities(page=page)

        if len(activities) < self.per_page:
            self._has_more = False
        else:
            self._next_page += 1

        return ActivityPage(
            activities=activities,
            page=page,
            has_more=self._has_more
        )

    async def get_cached_activities(self) -> list[Activity]:
        """All cached activities, most recent first."""
        return await self.store.get_cached_activities()
