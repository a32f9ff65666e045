"""
Strava synchronization.

Usage:
    from athlete_insight.features.strava.sync import StravaSyncService

    sync = StravaSyncService(store)
    page = await sync.list_activities(page=1)
    detail = await sync.get_activity_detail(activity_id)
    result = await sync.fetch_all_streams_for_set(activities, on_progress=print)
"""

from .config import SyncConfig
from .activities import ActivitySyncService
from .details import DetailSyncService
from .backfill import StreamBackfillRunner
from .service import StravaSyncService

__all__ = [
    "SyncConfig",
    "ActivitySyncService",
    "DetailSyncService",
    "StreamBackfillRunner",
    "StravaSyncService",
]
