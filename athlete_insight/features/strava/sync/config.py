"""
Strava sync configuration constants.

Contains all configuration values for sync behavior.
"""

from athlete_insight.config import settings


class SyncConfig:
    """Configuration for sync behavior."""

    # How many activities to fetch per API call
    ACTIVITIES_PER_PAGE = settings.activities_per_page

    # Delay between detail/stream requests during bulk backfill (seconds).
    # One request in flight at a time; this is the only throttling.
    STREAM_FETCH_DELAY_SECONDS = settings.stream_fetch_delay_seconds

    # Accepted birth years for heart-rate zone estimation
    MIN_BIRTH_YEAR = 1900
