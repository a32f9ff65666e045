"""
Strava integration.

Usage:
    from athlete_insight.features.strava import StravaClient, CredentialManager
    from athlete_insight.features.strava.sync import StravaSyncService

Components:
- StravaOAuth: authorization URL, code exchange, token refresh
- CredentialManager: token lifecycle for one session
- StravaClient: authenticated API requests
- sync/: activity, detail and stream synchronization
"""

from .oauth import StravaOAuth
from .credentials import CredentialManager
from .client import StravaClient
from .schemas import (
    StravaCredentials,
    TokenResponse,
    Athlete,
    Activity,
    ActivityDetail,
    StreamData,
    BackfillResult,
    ActivityPage,
)

__all__ = [
    "StravaOAuth",
    "CredentialManager",
    "StravaClient",
    # Schemas
    "StravaCredentials",
    "TokenResponse",
    "Athlete",
    "Activity",
    "ActivityDetail",
    "StreamData",
    "BackfillResult",
    "ActivityPage",
]
