"""
Relative effort.

Weighted time-in-zone score: each heart-rate sample's time charge is
multiplied by its zone weight (1, 2, 3, 5, 8 for zones 1-5).

Derived values:
- relative_score: effort points per hour of classified time
- intensity_factor: average weight per second / 3
"""

from dataclasses import dataclass, field
from typing import Optional

from athlete_insight.shared.constants import ZONE_EFFORT_WEIGHTS
from athlete_insight.shared.formatters import round_half_up
from athlete_insight.features.strava.schemas import Activity, ActivityDetail, Athlete
from .zones import iter_zone_charges, zones_for_athlete


@dataclass
class RelativeEffort:
    """Relative effort of one activity."""
    total_effort_points: float
    total_classified_seconds: float
    relative_score: int
    intensity_factor: float
    zone_seconds: dict[int, float] = field(default_factory=dict)
    zone_multipliers: dict[int, int] = field(default_factory=lambda: dict(ZONE_EFFORT_WEIGHTS))

    @property
    def total_points(self) -> int:
        """Effort points rounded for display and ranking."""
        return int(round_half_up(self.total_effort_points))

    @property
    def time_in_zones_minutes(self) -> int:
        return int(round_half_up(self.total_classified_seconds / 60))


@dataclass
class EffortAnalysis:
    """Summary-level effort figures that need no streams."""
    speed_kmh: Optional[float]
    elevation_m_per_km: Optional[float]
    intensity_score: float


def relative_effort(
    detail: ActivityDetail,
    athlete: Optional[Athlete],
    current_year: Optional[int] = None
) -> Optional[RelativeEffort]:
    """
    Calculate relative effort from the heart rate stream.

    Returns:
        RelativeEffort, or None if the heart rate stream or the
        athlete's birth year is unavailable
    """
    zones = zones_for_athlete(athlete, current_year)
    if zones is None or not detail.streams or not detail.streams.heartrate:
        return None

    points = 0.0
    seconds = 0.0
    zone_seconds = {zone.number: 0.0 for zone in zones}

    for zone, increment in iter_zone_charges(
        detail.streams.heartrate, detail.streams.time, zones
    ):
        seconds += increment
        zone_seconds[zone.number] += increment
        points += increment * ZONE_EFFORT_WEIGHTS[zone.number]

    if seconds > 0:
        relative_score = int(round_half_up(points / seconds * 3600))
        intensity_factor = round_half_up(points / seconds / 3, 2)
    else:
        relative_score = 0
        intensity_factor = 0.0

    return RelativeEffort(
        total_effort_points=points,
        total_classified_seconds=seconds,
        relative_score=relative_score,
        intensity_factor=intensity_factor,
        zone_seconds=zone_seconds,
    )


def effort_analysis(activity: Activity) -> EffortAnalysis:
    """
    Speed, climbing rate and Strava's suffer score for an activity.

    Speed and climbing rate are None when time or distance is zero.
    """
    distance_km = activity.distance / 1000 if activity.distance else 0
    hours = activity.moving_time / 3600 if activity.moving_time else 0

    return EffortAnalysis(
        speed_kmh=distance_km / hours if hours > 0 else None,
        elevation_m_per_km=(
            activity.total_elevation_gain / distance_km if distance_km > 0 else None
        ),
        intensity_score=activity.suffer_score or 0,
    )
