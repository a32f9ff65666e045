"""
Local cache store.

Usage:
    from athlete_insight.features.store import CacheStore

Components:
- CacheStore: Table operations, export/import, stats, reset
- Repositories: Settings, Athlete, Activity, ActivityDetail

Models:
- SettingsRow, AthleteRow, ActivityRow, ActivityDetailRow
"""

from .models import SettingsRow, AthleteRow, ActivityRow, ActivityDetailRow
from .repository import (
    SettingsRepository,
    AthleteRepository,
    ActivityRepository,
    ActivityDetailRepository,
)
from .service import CacheStore, CacheTable, DataStats

__all__ = [
    # Models
    "SettingsRow",
    "AthleteRow",
    "ActivityRow",
    "ActivityDetailRow",
    # Repositories
    "SettingsRepository",
    "AthleteRepository",
    "ActivityRepository",
    "ActivityDetailRepository",
    # Store
    "CacheStore",
    "CacheTable",
    "DataStats",
]
