"""
Strava sync orchestration.

Single entry point for the presentation layer. Wires the credential
manager, API client and cache store together and delegates to the
activity, detail and backfill services.

Flow:
1. save_client_credentials() + get_authorization_url()
2. complete_authorization(code) after the OAuth redirect
3. load_activities() / list_activities() to fill the activity cache
4. get_activity_detail() on demand, fetch_all_streams_for_set() in bulk
5. compare_with_cohort() / build_llm_summary() on cached data
"""

import asyncio
import logging
from datetime import date
from typing import Iterable, Optional, Union

import httpx
from pydantic import ValidationError

from athlete_insight.shared.constants import ComparisonPeriod
from athlete_insight.shared.errors import AuthError, DataError
from athlete_insight.features.store import CacheStore, DataStats
from athlete_insight.features.analytics import (
    CohortComparison,
    build_llm_summary,
    compare_cohort,
)
from ..client import StravaClient
from ..credentials import CredentialManager
from ..oauth import StravaOAuth
from ..schemas import (
    Activity,
    ActivityDetail,
    ActivityPage,
    Athlete,
    BackfillResult,
    StreamData,
)
from .activities import ActivitySyncService
from .backfill import ProgressCallback, StreamBackfillRunner
from .config import SyncConfig
from .details import DetailSyncService

logger = logging.getLogger(__name__)


class StravaSyncService:
    """
    Main sync orchestrator.

    Usage:
        store = CacheStore.from_url("sqlite:///./athlete_insight.db")
        await store.init()
        sync = StravaSyncService(store)
        page = await sync.load_activities(reset=True)
        detail = await sync.get_activity_detail(page.activities[0].id)
    """

    def __init__(
        self,
        store: CacheStore,
        credentials: Optional[CredentialManager] = None,
        client: Optional[StravaClient] = None,
        per_page: Optional[int] = None,
        stream_delay_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.store = store
        self.oauth = credentials.oauth if credentials else StravaOAuth(transport=transport)
        self.credentials = credentials or CredentialManager(store, oauth=self.oauth)
        self.client = client or StravaClient(self.credentials, transport=transport)

        self.activity_sync = ActivitySyncService(
            store, self.client, self.credentials, per_page=per_page
        )
        self.detail_sync = DetailSyncService(store, self.client)
        self.backfill = StreamBackfillRunner(
            self.detail_sync.get_activity_detail,
            delay_seconds=stream_delay_seconds
        )

    # -------------------------------------------------------------------------
    # Authorization
    # -------------------------------------------------------------------------

    async def save_client_credentials(self, client_id: str, client_secret: str) -> None:
        await self.credentials.save_client_credentials(client_id, client_secret)

    async def get_authorization_url(self, redirect_uri: Optional[str] = None) -> str:
        """
        Authorization URL for the stored client id.

        Raises:
            AuthError: No client id saved yet
        """
        credentials = await self.credentials.get_credentials()
        if not credentials or not credentials.client_id:
            raise AuthError("Client id not configured")
        return self.oauth.get_authorization_url(credentials.client_id, redirect_uri)

    async def complete_authorization(
        self,
        code: str,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None
    ) -> None:
        """
        Exchange the OAuth code, using the stored client credentials
        unless given explicitly.

        Raises:
            AuthError: No client credentials available
            NetworkError: Token exchange failed
        """
        stored = await self.credentials.get_credentials()
        client_id = client_id or (stored.client_id if stored else None)
        client_secret = client_secret or (stored.client_secret if stored else None)
        if not client_id or not client_secret:
            raise AuthError("Client id and secret are required")

        await self.credentials.exchange_authorization_code(code, client_id, client_secret)

    async def is_authenticated(self) -> bool:
        return await self.credentials.is_authenticated()

    async def logout(self) -> None:
        """Forget credentials and drop cached activities and details."""
        await self.credentials.clear()
        await self.clear_activity_cache()
        logger.info("Logged out, activity cache cleared")

    # -------------------------------------------------------------------------
    # Activities
    # -------------------------------------------------------------------------

    async def list_activities(
        self,
        page: int = 1,
        per_page: Optional[int] = None
    ) -> list[Activity]:
        return await self.activity_sync.list_activities(page=page, per_page=per_page)

    async def load_activities(self, reset: bool = False) -> ActivityPage:
        return await self.activity_sync.load_activities(reset=reset)

    async def get_cached_activities(self) -> list[Activity]:
        return await self.activity_sync.get_cached_activities()

    async def clear_activity_cache(self) -> None:
        """Drop cached activities and their details."""
        await self.store.clear_activities()
        await self.store.clear_details()

    # -------------------------------------------------------------------------
    # Details and streams
    # -------------------------------------------------------------------------

    async def get_activity_detail(
        self,
        activity_id: int,
        refresh: bool = False
    ) -> ActivityDetail:
        return await self.detail_sync.get_activity_detail(activity_id, refresh=refresh)

    async def get_activity_streams(self, activity_id: int) -> StreamData:
        return await self.detail_sync.get_activity_streams(activity_id)

    async def clear_detail_cache(self, activity_id: Optional[int] = None) -> None:
        await self.detail_sync.clear_detail_cache(activity_id)

    async def fetch_all_streams_for_set(
        self,
        activities: Iterable[Union[Activity, int]],
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> BackfillResult:
        """
        Fetch details with streams for every activity in the set.

        Raises:
            ValueError: If the activity set is invalid
        """
        return await self.backfill.run(
            activities,
            on_progress=on_progress,
            cancel_event=cancel_event
        )

    # -------------------------------------------------------------------------
    # Athlete
    # -------------------------------------------------------------------------

    async def get_athlete(
        self,
        refresh: bool = False,
        preserve_local_fields: bool = False
    ) -> Athlete:
        """
        Cached athlete profile, fetched from Strava when missing or on refresh.

        A refetch replaces the cached profile; birth year and summary
        prefix are carried over only with preserve_local_fields.

        Raises:
            AuthError: No usable credentials
            NetworkError: Profile request failed
            DataError: Strava returned an unexpected payload
        """
        cached = await self.store.get_athlete()
        if cached and not refresh:
            return cached

        data = await self.client.get_athlete()
        try:
            athlete = Athlete.model_validate(data)
        except ValidationError as e:
            raise DataError(f"Unexpected athlete payload: {e}") from e

        if preserve_local_fields and cached:
            athlete.birth_year = cached.birth_year
            athlete.llm_summary_prefix = cached.llm_summary_prefix

        return await self.store.replace_athlete(athlete)

    async def update_birth_year(self, birth_year: int) -> Athlete:
        """
        Set the birth year used for heart rate zones.

        Raises:
            ValueError: Year outside 1900..current year
            AuthError: No profile cached and no usable credentials
            NetworkError: Profile request failed
        """
        current_year = date.today().year
        if (
            isinstance(birth_year, bool)
            or not isinstance(birth_year, int)
            or not SyncConfig.MIN_BIRTH_YEAR <= birth_year <= current_year
        ):
            raise ValueError(
                f"Birth year must be between {SyncConfig.MIN_BIRTH_YEAR} and {current_year}"
            )
        return await self._update_athlete(birth_year=birth_year)

    async def update_llm_summary_prefix(self, prefix: Optional[str]) -> Athlete:
        """
        Set the text prepended to LLM summaries.

        Raises:
            AuthError: No profile cached and no usable credentials
            NetworkError: Profile request failed
        """
        return await self._update_athlete(llm_summary_prefix=prefix or None)

    async def _update_athlete(self, **fields) -> Athlete:
        athlete = await self.get_athlete()
        updated = await self.store.update_athlete(athlete.id, **fields)
        if updated is None:
            raise DataError(f"Athlete {athlete.id} disappeared from cache")
        return updated

    # -------------------------------------------------------------------------
    # Data management
    # -------------------------------------------------------------------------

    async def export_all_data(self) -> str:
        return await self.store.export_all()

    async def import_all_data(self, snapshot: Union[str, bytes, dict]) -> dict[str, int]:
        """
        Replace the cache with an exported document.

        Raises:
            DataError: Invalid document or failed import
        """
        try:
            return await self.store.import_all(snapshot)
        finally:
            self.credentials.invalidate()

    async def reset_database(self) -> None:
        """Drop and recreate every table."""
        await self.store.reset_all()
        self.credentials.invalidate()

    async def get_data_stats(self) -> DataStats:
        return await self.store.stats()

    # -------------------------------------------------------------------------
    # Analytics
    # -------------------------------------------------------------------------

    async def compare_with_cohort(
        self,
        detail: ActivityDetail,
        period: Union[ComparisonPeriod, str] = ComparisonPeriod.MONTH,
        current_year: Optional[int] = None
    ) -> CohortComparison:
        """Rank an activity's effort within its cached month or year."""
        athlete = await self.store.get_athlete()
        all_cached = await self.store.get_cached_activities()
        return await compare_cohort(
            detail,
            all_cached,
            period,
            self.get_activity_detail,
            athlete,
            current_year
        )

    async def build_llm_summary(
        self,
        detail: ActivityDetail,
        current_year: Optional[int] = None
    ) -> str:
        """Text summary of an activity with its yearly context."""
        athlete = await self.store.get_athlete()
        all_cached = await self.store.get_cached_activities()
        return build_llm_summary(detail, athlete, all_cached, current_year)
