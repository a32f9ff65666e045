"""
Cache repositories.

Data access layer for the four cache tables. Repositories translate
between ORM rows and the pydantic records in features.strava.schemas.
"""

from typing import Any

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from athlete_insight.shared.repository import BaseRepository
from athlete_insight.features.strava.schemas import (
    Activity,
    ActivityDetail,
    Athlete,
    StravaCredentials,
)
from .models import SettingsRow, AthleteRow, ActivityRow, ActivityDetailRow


class SettingsRepository(BaseRepository[SettingsRow]):
    """Repository for the single credentials row."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, SettingsRow)

    @staticmethod
    def to_schema(row: SettingsRow) -> StravaCredentials:
        return StravaCredentials(
            id=row.id,
            client_id=row.client_id,
            client_secret=row.client_secret,
            access_token=row.access_token,
            refresh_token=row.refresh_token,
            expires_at=row.expires_at,
            scope=row.scope,
        )

    @staticmethod
    def to_row(credentials: StravaCredentials) -> SettingsRow:
        return SettingsRow(
            id=credentials.id,
            client_id=credentials.client_id,
            client_secret=credentials.client_secret,
            access_token=credentials.access_token,
            refresh_token=credentials.refresh_token,
            expires_at=credentials.expires_at,
            scope=credentials.scope,
        )

    async def get_credentials(self) -> StravaCredentials | None:
        """
        Get stored credentials.

        Returns:
            StravaCredentials if saved, None otherwise
        """
        row = await self.get_first()
        return self.to_schema(row) if row else None

    async def save_credentials(self, **fields: Any) -> StravaCredentials:
        """
        Create the credentials row or update the given fields in place.

        Args:
            **fields: StravaCredentials field names and values

        Returns:
            Credentials as stored
        """
        row = await self.get_first()
        if row:
            row = await self.update(row, **fields)
        else:
            row = await self.create(**fields)
        return self.to_schema(row)


class AthleteRepository(BaseRepository[AthleteRow]):
    """Repository for the cached athlete profile."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, AthleteRow)

    @staticmethod
    def to_row(athlete: Athlete) -> AthleteRow:
        return AthleteRow(
            id=athlete.id,
            firstname=athlete.firstname,
            lastname=athlete.lastname,
            data=athlete.to_record(),
        )

    async def get_athlete(self) -> Athlete | None:
        row = await self.get_first()
        return Athlete.model_validate(row.data) if row else None

    async def replace(self, athlete: Athlete) -> Athlete:
        """
        Overwrite the cached profile wholesale.

        Any other athlete row is removed so exactly one record remains.
        """
        await self.clear()
        self.db.add(self.to_row(athlete))
        await self.db.flush()
        return athlete

    async def update_fields(self, athlete_id: int, **fields: Any) -> Athlete | None:
        """
        Update selected fields of the cached profile.

        Returns:
            Updated athlete, None if no such athlete is cached
        """
        row = await self.get_by_id(athlete_id)
        if not row:
            return None
        athlete = Athlete.model_validate({**row.data, **fields})
        await self.update(
            row,
            firstname=athlete.firstname,
            lastname=athlete.lastname,
            data=athlete.to_record(),
        )
        return athlete


class ActivityRepository(BaseRepository[ActivityRow]):
    """Repository for activity summaries."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, ActivityRow)

    @staticmethod
    def to_row(activity: Activity) -> ActivityRow:
        return ActivityRow(
            id=activity.id,
            name=activity.name,
            activity_type=activity.type,
            start_date_local=activity.start_date_local,
            data=activity.to_record(),
        )

    async def get_activity(self, activity_id: int) -> Activity | None:
        row = await self.get_by_id(activity_id)
        return Activity.model_validate(row.data) if row else None

    async def put(self, activity: Activity) -> Activity:
        """Upsert activity by Strava ID (last write wins)."""
        await self.upsert(self.to_row(activity))
        return activity

    async def get_recent_first(self) -> list[Activity]:
        """
        Get all activities.

        Returns:
            Activities ordered by local start time (newest first)
        """
        result = await self.db.execute(
            select(ActivityRow).order_by(
                desc(ActivityRow.start_date_local),
                desc(ActivityRow.id),
            )
        )
        return [Activity.model_validate(row.data) for row in result.scalars().all()]


class ActivityDetailRepository(BaseRepository[ActivityDetailRow]):
    """Repository for activity details."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, ActivityDetailRow)

    @staticmethod
    def to_row(detail: ActivityDetail) -> ActivityDetailRow:
        return ActivityDetailRow(
            id=detail.id,
            name=detail.name,
            activity_type=detail.type,
            start_date_local=detail.start_date_local,
            has_streams=1 if detail.is_complete else 0,
            data=detail.to_record(),
        )

    async def get_detail(self, activity_id: int) -> ActivityDetail | None:
        row = await self.get_by_id(activity_id)
        return ActivityDetail.model_validate(row.data) if row else None

    async def put(self, detail: ActivityDetail) -> ActivityDetail:
        """Upsert detail by Strava ID (last write wins)."""
        await self.upsert(self.to_row(detail))
        return detail

    async def count_complete(self) -> int:
        """Number of details with streams."""
        return await self.count(has_streams=1)

