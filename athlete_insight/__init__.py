"""
athlete-insight: Strava activity cache and heart rate analytics.

Usage:
    from athlete_insight.features.store import CacheStore
    from athlete_insight.features.strava.sync import StravaSyncService
"""

__version__ = "0.1.0"
