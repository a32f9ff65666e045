"""
Activity list filters.

Used to narrow the cached list, e.g. to pick the set for a stream backfill.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional, Sequence

from athlete_insight.features.strava.schemas import Activity


@dataclass
class ActivityFilter:
    """
    Filter criteria; unset fields match everything.

    Date bounds are inclusive and compared with the local start time.
    """
    activity_type: Optional[str] = None
    search: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def matches(self, activity: Activity) -> bool:
        if self.activity_type and activity.type.lower() != self.activity_type.lower():
            return False

        if self.search and self.search.lower() not in activity.name.lower():
            return False

        if self.date_from or self.date_to:
            start = activity.start_local
            if start is None:
                return False
            if self.date_from and start < datetime.combine(self.date_from, time.min):
                return False
            if self.date_to and start > datetime.combine(self.date_to, time.max):
                return False

        return True


def filter_activities(
    activities: Sequence[Activity],
    criteria: ActivityFilter
) -> list[Activity]:
    """Activities matching all criteria, order preserved."""
    return [activity for activity in activities if criteria.matches(activity)]
