"""
Plain-text activity summary for pasting into an LLM chat.

Layout:
    [athlete prefix]

    Activity: <name> (<type>) on <date> - Distance: ..., Time: ...,
    Avg_speed: ..., Elevation: ...[, HR_zones:[...]][, avg_HR:...]
    [, relative_effort:...pts]

    Year_<year>_context: totals, top activity types, and one compact
    entry per other activity of that year (newest first).
"""

import re
from collections import Counter
from typing import Optional, Sequence

from athlete_insight.shared.formatters import (
    format_distance_km,
    format_duration,
    format_speed_kmh,
    round_half_up,
)
from athlete_insight.features.strava.schemas import Activity, ActivityDetail, Athlete
from .effort import relative_effort
from .zones import zone_time_distribution

_ZONE_SUFFIX = re.compile(r"\s*\(Zone \d+\)")
TOP_ACTIVITY_TYPES = 3


def _zone_label(name: str) -> str:
    return re.sub(r"\s+", "_", _ZONE_SUFFIX.sub("", name))


def _date(activity: Activity) -> str:
    start = activity.start_local
    return start.date().isoformat() if start else "unknown"


def activity_line(
    detail: ActivityDetail,
    athlete: Optional[Athlete],
    current_year: Optional[int] = None
) -> str:
    """Main summary line for one activity."""
    line = f"Activity: {detail.name} ({detail.type}) on {_date(detail)} - "
    line += f"Distance: {format_distance_km(detail.distance)}, "
    line += (
        f"Time: {format_duration(detail.moving_time)} (moving) / "
        f"{format_duration(detail.elapsed_time)} (total), "
    )
    line += f"Avg_speed: {format_speed_kmh(detail.average_speed)}, "
    line += f"Elevation: {detail.total_elevation_gain:.0f}m"

    zones = zone_time_distribution(detail, athlete, current_year)
    if zones:
        labels = ",".join(f"{_zone_label(z.zone.name)}:{z.percentage}%" for z in zones)
        line += f", HR_zones:[{labels}]"

    if detail.average_heartrate:
        line += f", avg_HR:{detail.average_heartrate:.1f}bpm"

    effort = relative_effort(detail, athlete, current_year)
    if effort:
        line += f", relative_effort:{effort.total_points}pts"

    return line


def _compact(activity: Activity) -> str:
    hr = f"{activity.average_heartrate:.1f}bpm" if activity.average_heartrate else "N/A"
    return (
        f"{activity.name}({activity.type})_{_date(activity)}:"
        f"{activity.distance / 1000:.2f}km_{format_duration(activity.moving_time)}_"
        f"{format_speed_kmh(activity.average_speed)}_"
        f"{activity.total_elevation_gain:.0f}m_HR:{hr}"
    )


def year_context(detail: ActivityDetail, all_cached: Sequence[Activity]) -> Optional[str]:
    """
    Yearly context block, None when no other activity shares the year.
    """
    start = detail.start_local
    if start is None:
        return None

    others = [
        act for act in all_cached
        if act.id != detail.id and act.start_local and act.start_local.year == start.year
    ]
    if not others:
        return None

    total_km = (sum(act.distance for act in others) + detail.distance) / 1000
    total_s = sum(act.moving_time for act in others) + detail.moving_time
    avg_speed = total_km / (total_s / 3600) if total_s > 0 else 0.0

    types = Counter(act.type for act in [*others, detail])
    top_types = ",".join(
        f"{kind}:{count}" for kind, count in types.most_common(TOP_ACTIVITY_TYPES)
    )

    newest_first = sorted(others, key=lambda act: act.start_local, reverse=True)

    block = f"Year_{start.year}_context: "
    block += f"Total_activities:{len(others) + 1}, "
    block += f"Total_distance:{total_km:.1f}km, "
    block += f"Total_time:{int(round_half_up(total_s / 3600))}h, "
    block += f"Avg_pace_year:{avg_speed:.2f}km/h, "
    block += f"Activity_types:[{top_types}], "
    block += f"All_year_activities:[{'|'.join(_compact(act) for act in newest_first)}]"
    return block


def build_llm_summary(
    detail: ActivityDetail,
    athlete: Optional[Athlete],
    all_cached: Sequence[Activity] = (),
    current_year: Optional[int] = None
) -> str:
    """
    Build the full summary text, prefixed with the athlete's own text.
    """
    summary = activity_line(detail, athlete, current_year)

    context = year_context(detail, all_cached)
    if context:
        summary += f"\n\n{context}"

    if athlete and athlete.llm_summary_prefix:
        summary = f"{athlete.llm_summary_prefix}\n\n{summary}"

    return summary
