"""
Local cache store.

Owns the async engine and exposes every table operation the credential
and sync layers need. Each public method runs in its own transaction;
nothing outside this module mutates the tables.

Usage:
    store = CacheStore.from_url("sqlite:///./athlete_insight.db")
    await store.init()
    activities = await store.get_cached_activities()
    snapshot = await store.export_all()
"""

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from enum import Enum
from typing import Any, AsyncIterator, Optional, Union

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from athlete_insight.config import settings
from athlete_insight.db import Base, create_engine, create_session_factory
from athlete_insight.shared.constants import EXPORT_VERSION
from athlete_insight.shared.errors import DataError
from athlete_insight.features.strava.schemas import (
    Activity,
    ActivityDetail,
    Athlete,
    StravaCredentials,
)
from .repository import (
    SettingsRepository,
    AthleteRepository,
    ActivityRepository,
    ActivityDetailRepository,
)

logger = logging.getLogger(__name__)


class CacheTable(str, Enum):
    """Cache tables, valued by their export document key."""
    SETTINGS = "settings"
    ATHLETE = "athlete"
    ACTIVITIES = "activities"
    ACTIVITY_DETAILS = "activityDetails"


_REPOSITORIES = {
    CacheTable.SETTINGS: SettingsRepository,
    CacheTable.ATHLETE: AthleteRepository,
    CacheTable.ACTIVITIES: ActivityRepository,
    CacheTable.ACTIVITY_DETAILS: ActivityDetailRepository,
}


class DataStats(BaseModel):
    """Row counts per table and approximate serialized size."""
    settings: int
    activities: int
    activity_details: int
    athlete: int
    approx_size_bytes: Optional[int] = None

    @property
    def total_size(self) -> str:
        """Human readable size, 'Unknown' when it could not be measured."""
        if self.approx_size_bytes is None:
            return "Unknown"
        return f"{self.approx_size_bytes / 1024 / 1024:.2f} MB"


class CacheStore:
    """
    Durable multi-table cache.

    Tables: settings (credentials), athlete, activities, activity details.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession] | None = None
    ):
        self.engine = engine
        self._session_factory = session_factory or create_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str | None = None) -> "CacheStore":
        """Create a store for a database URL (defaults to settings)."""
        return cls(create_engine(database_url or settings.database_url))

    async def init(self) -> None:
        """Create tables if missing."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Session wrapped in a single transaction."""
        async with self._session_factory() as db:
            async with db.begin():
                yield db

    # -------------------------------------------------------------------------
    # Generic table operations
    # -------------------------------------------------------------------------

    async def count(self, table: CacheTable) -> int:
        async with self.transaction() as db:
            return await _REPOSITORIES[table](db).count()

    async def clear(self, table: CacheTable) -> int:
        """Empty one table. Returns rows removed."""
        async with self.transaction() as db:
            return await _REPOSITORIES[table](db).clear()

    async def scan(self, table: CacheTable) -> list[dict[str, Any]]:
        """Full table contents as export records."""
        async with self.transaction() as db:
            return await self._scan(db, table)

    async def clear_all(self) -> None:
        """Empty every table in one transaction."""
        async with self.transaction() as db:
            for repository in _REPOSITORIES.values():
                await repository(db).clear()

    async def reset_all(self) -> None:
        """Drop and recreate the whole schema."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Cache database reset")

    # -------------------------------------------------------------------------
    # Settings (credentials)
    # -------------------------------------------------------------------------

    async def get_credentials(self) -> StravaCredentials | None:
        async with self.transaction() as db:
            return await SettingsRepository(db).get_credentials()

    async def save_credentials(self, **fields: Any) -> StravaCredentials:
        """Create or partially update the credentials row."""
        async with self.transaction() as db:
            return await SettingsRepository(db).save_credentials(**fields)

    async def clear_credentials(self) -> None:
        await self.clear(CacheTable.SETTINGS)

    # -------------------------------------------------------------------------
    # Athlete
    # -------------------------------------------------------------------------

    async def get_athlete(self) -> Athlete | None:
        async with self.transaction() as db:
            return await AthleteRepository(db).get_athlete()

    async def replace_athlete(self, athlete: Athlete) -> Athlete:
        async with self.transaction() as db:
            return await AthleteRepository(db).replace(athlete)

    async def update_athlete(self, athlete_id: int, **fields: Any) -> Athlete | None:
        async with self.transaction() as db:
            return await AthleteRepository(db).update_fields(athlete_id, **fields)

    # -------------------------------------------------------------------------
    # Activities
    # -------------------------------------------------------------------------

    async def get_activity(self, activity_id: int) -> Activity | None:
        async with self.transaction() as db:
            return await ActivityRepository(db).get_activity(activity_id)

    async def put_activities(self, activities: list[Activity]) -> int:
        """Upsert a batch of activities in one transaction."""
        async with self.transaction() as db:
            repo = ActivityRepository(db)
            for activity in activities:
                await repo.put(activity)
        return len(activities)

    async def delete_activity(self, activity_id: int) -> bool:
        async with self.transaction() as db:
            return await ActivityRepository(db).delete_by_id(activity_id)

    async def clear_activities(self) -> int:
        return await self.clear(CacheTable.ACTIVITIES)

    async def get_cached_activities(self) -> list[Activity]:
        """All cached activities, newest local start time first."""
        async with self.transaction() as db:
            return await ActivityRepository(db).get_recent_first()

    # -------------------------------------------------------------------------
    # Activity details
    # -------------------------------------------------------------------------

    async def get_detail(self, activity_id: int) -> ActivityDetail | None:
        async with self.transaction() as db:
            return await ActivityDetailRepository(db).get_detail(activity_id)

    async def put_detail(self, detail: ActivityDetail) -> ActivityDetail:
        async with self.transaction() as db:
            return await ActivityDetailRepository(db).put(detail)

    async def delete_detail(self, activity_id: int) -> bool:
        async with self.transaction() as db:
            return await ActivityDetailRepository(db).delete_by_id(activity_id)

    async def clear_details(self) -> int:
        return await self.clear(CacheTable.ACTIVITY_DETAILS)

    async def count_complete_details(self) -> int:
        async with self.transaction() as db:
            return await ActivityDetailRepository(db).count_complete()

    # -------------------------------------------------------------------------
    # Export / Import
    # -------------------------------------------------------------------------

    async def _scan(self, db: AsyncSession, table: CacheTable) -> list[dict[str, Any]]:
        rows = await _REPOSITORIES[table](db).get_all()
        if table is CacheTable.SETTINGS:
            return [SettingsRepository.to_schema(row).to_record() for row in rows]
        return [row.data for row in rows]

    async def export_all(self) -> str:
        """
        Serialize every table into a versioned JSON document.

        Returns:
            JSON string: {version, timestamp, settings, activities,
            activityDetails, athlete}
        """
        async with self.transaction() as db:
            document = {
                "version": EXPORT_VERSION,
                "timestamp": _utc_timestamp(),
                "settings": await self._scan(db, CacheTable.SETTINGS),
                "activities": await self._scan(db, CacheTable.ACTIVITIES),
                "activityDetails": await self._scan(db, CacheTable.ACTIVITY_DETAILS),
                "athlete": await self._scan(db, CacheTable.ATHLETE),
            }
        return json.dumps(document, indent=2)

    async def import_all(self, snapshot: Union[str, bytes, dict]) -> dict[str, int]:
        """
        Replace the whole cache with an exported document.

        The document is parsed and validated before anything is touched.
        Then all tables are cleared in one transaction and repopulated in
        a second one; if repopulating fails the cache stays empty.

        Args:
            snapshot: JSON string/bytes or an already parsed document

        Returns:
            Rows imported per export key

        Raises:
            DataError: Malformed document, missing version/timestamp,
                       invalid records, or a failed insert stage
        """
        document = _parse_document(snapshot)
        rows = _build_rows(document)

        await self.clear_all()

        try:
            async with self.transaction() as db:
                for table, table_rows in rows.items():
                    await _REPOSITORIES[table](db).add_all(table_rows)
        except SQLAlchemyError as e:
            logger.error(f"Cache import failed after clear: {e}")
            raise DataError(f"Import failed, cache left empty: {e}") from e

        counts = {table.value: len(table_rows) for table, table_rows in rows.items()}
        logger.info(f"Cache imported: {counts}")
        return counts

    async def stats(self) -> DataStats:
        """
        Row counts per table plus approximate size.

        Size is the byte length of a full export; None if that fails.
        """
        async with self.transaction() as db:
            counts = {
                table: await repository(db).count()
                for table, repository in _REPOSITORIES.items()
            }

        try:
            exported = await self.export_all()
            size: Optional[int] = len(exported.encode("utf-8"))
        except (SQLAlchemyError, TypeError, ValueError) as e:
            logger.warning(f"Could not calculate cache size: {e}")
            size = None

        return DataStats(
            settings=counts[CacheTable.SETTINGS],
            activities=counts[CacheTable.ACTIVITIES],
            activity_details=counts[CacheTable.ACTIVITY_DETAILS],
            athlete=counts[CacheTable.ATHLETE],
            approx_size_bytes=size,
        )


# =============================================================================
# Helper Functions
# =============================================================================

def _utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_document(snapshot: Union[str, bytes, dict]) -> dict:
    if isinstance(snapshot, (str, bytes)):
        try:
            document = json.loads(snapshot)
        except json.JSONDecodeError as e:
            raise DataError(f"Invalid data format - not JSON: {e}") from e
    else:
        document = snapshot

    if not isinstance(document, dict):
        raise DataError("Invalid data format - expected an object")
    if not document.get("version") or not document.get("timestamp"):
        raise DataError("Invalid data format - missing version or timestamp")
    return document


def _records(document: dict, table: CacheTable) -> list:
    records = document.get(table.value)
    return records if isinstance(records, list) else []


def _build_rows(document: dict) -> dict[CacheTable, list]:
    """Validate every record and convert it to an ORM row."""
    try:
        return {
            CacheTable.SETTINGS: [
                SettingsRepository.to_row(StravaCredentials.model_validate(r))
                for r in _records(document, CacheTable.SETTINGS)
            ],
            CacheTable.ACTIVITIES: [
                ActivityRepository.to_row(Activity.model_validate(r))
                for r in _records(document, CacheTable.ACTIVITIES)
            ],
            CacheTable.ACTIVITY_DETAILS: [
                ActivityDetailRepository.to_row(ActivityDetail.model_validate(r))
                for r in _records(document, CacheTable.ACTIVITY_DETAILS)
            ],
            CacheTable.ATHLETE: [
                AthleteRepository.to_row(Athlete.model_validate(r))
                for r in _records(document, CacheTable.ATHLETE)
            ],
        }
    except ValidationError as e:
        raise DataError(f"Invalid record in import: {e}") from e
