"""
Heart rate analytics over cached activities.

Pure functions; nothing here talks to Strava or the cache.

Components:
- zones: max HR estimate, zone thresholds, time in zone
- effort: relative effort score, effort analysis
- comparison: month/year cohort ranking
- summary: text summary for LLM chats
- filters: activity list filters
"""

from .zones import (
    HeartRateZone,
    ZoneTime,
    max_heart_rate,
    zone_thresholds,
    classify_heart_rate,
    zones_for_athlete,
    zone_time_distribution,
)
from .effort import RelativeEffort, EffortAnalysis, relative_effort, effort_analysis
from .comparison import CohortEntry, CohortComparison, compare_cohort, in_same_period
from .summary import build_llm_summary
from .filters import ActivityFilter, filter_activities

__all__ = [
    # Zones
    "HeartRateZone",
    "ZoneTime",
    "max_heart_rate",
    "zone_thresholds",
    "classify_heart_rate",
    "zones_for_athlete",
    "zone_time_distribution",
    # Effort
    "RelativeEffort",
    "EffortAnalysis",
    "relative_effort",
    "effort_analysis",
    # Comparison
    "CohortEntry",
    "CohortComparison",
    "compare_cohort",
    "in_same_period",
    # Summary
    "build_llm_summary",
    # Filters
    "ActivityFilter",
    "filter_activities",
]
