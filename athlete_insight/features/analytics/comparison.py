"""
Cohort comparison.

Ranks an activity's relative effort against the other cached activities
of the same calendar month or year.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Optional, Sequence, Union

from athlete_insight.shared.constants import ComparisonPeriod
from athlete_insight.shared.formatters import round_half_up
from athlete_insight.features.strava.schemas import Activity, ActivityDetail, Athlete
from .effort import relative_effort

logger = logging.getLogger(__name__)

DetailFetcher = Callable[[int], Awaitable[ActivityDetail]]

NAME_DISPLAY_LENGTH = 20


@dataclass
class CohortEntry:
    """One activity's effort within a comparison."""
    activity_id: int
    name: str
    type: str
    start_date_local: Optional[datetime]
    effort: int
    distance_km: float
    is_current_activity: bool = False

    @property
    def display_name(self) -> str:
        if len(self.name) > NAME_DISPLAY_LENGTH:
            return self.name[:NAME_DISPLAY_LENGTH] + "..."
        return self.name


@dataclass
class CohortComparison:
    """
    Effort ranking of an activity within its month or year.

    `entries` are in chronological order. `rank` is the subject's
    1-based position by effort ascending; `percentile` is None when the
    cohort has a single member.
    """
    period: ComparisonPeriod
    entries: list[CohortEntry] = field(default_factory=list)
    rank: Optional[int] = None
    percentile: Optional[int] = None
    skipped_ids: list[int] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.entries)

    @property
    def subject(self) -> Optional[CohortEntry]:
        return next((e for e in self.entries if e.is_current_activity), None)


def in_same_period(
    candidate: Activity,
    subject: Activity,
    period: ComparisonPeriod
) -> bool:
    """True if both start in the same local calendar month/year."""
    candidate_start = candidate.start_local
    subject_start = subject.start_local
    if candidate_start is None or subject_start is None:
        return False
    if candidate_start.year != subject_start.year:
        return False
    if period == ComparisonPeriod.MONTH:
        return candidate_start.month == subject_start.month
    return True


def _entry(activity: Activity, effort: int, is_current: bool = False) -> CohortEntry:
    return CohortEntry(
        activity_id=activity.id,
        name=activity.name,
        type=activity.type,
        start_date_local=activity.start_local,
        effort=effort,
        distance_km=activity.distance / 1000 if activity.distance else 0.0,
        is_current_activity=is_current,
    )


async def compare_cohort(
    activity: ActivityDetail,
    all_cached: Sequence[Activity],
    period: Union[ComparisonPeriod, str],
    detail_fetcher: DetailFetcher,
    athlete: Optional[Athlete],
    current_year: Optional[int] = None
) -> CohortComparison:
    """
    Compare an activity's effort with its calendar cohort.

    Candidates share the subject's month (or year); the subject itself is
    excluded from the candidate scan and appended afterwards. Candidates
    whose detail cannot be loaded, or that have no heart rate stream,
    are skipped.

    Args:
        activity: Subject activity with streams
        all_cached: Cached activities to draw the cohort from
        period: "month" or "year"
        detail_fetcher: Loads a detail with streams by activity ID
        athlete: Athlete with birth year

    Returns:
        CohortComparison (empty when the athlete has no birth year)
    """
    period = ComparisonPeriod(period)
    comparison = CohortComparison(period=period)
    if athlete is None or not athlete.birth_year:
        return comparison

    candidates = [
        act for act in all_cached
        if act.id != activity.id and in_same_period(act, activity, period)
    ]

    for candidate in candidates:
        try:
            detail = await detail_fetcher(candidate.id)
        except Exception as e:
            logger.info(f"Skipping activity {candidate.id} - no detailed data available: {e}")
            comparison.skipped_ids.append(candidate.id)
            continue

        effort = relative_effort(detail, athlete, current_year)
        if effort is None:
            comparison.skipped_ids.append(candidate.id)
            continue
        comparison.entries.append(_entry(candidate, effort.total_points))

    subject_effort = relative_effort(activity, athlete, current_year)
    if subject_effort is not None:
        comparison.entries.append(
            _entry(activity, subject_effort.total_points, is_current=True)
        )

    comparison.entries.sort(key=lambda e: e.start_date_local or datetime.min)

    if subject_effort is not None:
        by_effort = sorted(comparison.entries, key=lambda e: e.effort)
        rank = next(i for i, e in enumerate(by_effort, start=1) if e.is_current_activity)
        comparison.rank = rank
        total = len(comparison.entries)
        if total > 1:
            comparison.percentile = int(round_half_up((total - rank) / (total - 1) * 100))

    return comparison
