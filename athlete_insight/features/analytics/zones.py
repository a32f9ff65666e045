"""
Heart rate zones.

Zones are derived from an age-estimated maximum heart rate
(220 - age) and split at 60/70/80/90/100% of it.

Time in zone is charged per heart-rate sample: sample i covers
time[i+1] - time[i] seconds, the final sample covers 1 second.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterator, Optional, Sequence

from athlete_insight.shared.constants import (
    MAX_HR_BASE,
    TRAILING_SAMPLE_SECONDS,
    ZONE_NAMES,
    ZONE_UPPER_FRACTIONS,
)
from athlete_insight.shared.formatters import round_half_up
from athlete_insight.features.strava.schemas import ActivityDetail, Athlete


@dataclass(frozen=True)
class HeartRateZone:
    """One heart rate zone; a reading h belongs here if lower < h <= upper."""
    number: int
    name: str
    lower_bpm: float
    upper_bpm: float

    def contains(self, heart_rate: float) -> bool:
        return self.lower_bpm < heart_rate <= self.upper_bpm


@dataclass
class ZoneTime:
    """Time spent in one zone."""
    zone: HeartRateZone
    seconds: float
    minutes: int
    percentage: int


def max_heart_rate(birth_year: int, current_year: Optional[int] = None) -> int:
    """
    Estimate maximum heart rate.

    Formula: 220 - age, age = current_year - birth_year
    """
    year = current_year if current_year is not None else date.today().year
    return MAX_HR_BASE - (year - birth_year)


def zone_thresholds(max_hr: float) -> list[HeartRateZone]:
    """
    Five contiguous zones for a maximum heart rate.

    Upper bounds of zones 1-4 are rounded to whole bpm; zone 5 ends
    exactly at max_hr. Zone 1 starts at 0.
    """
    zones = []
    lower = 0.0
    for number, (fraction, name) in enumerate(zip(ZONE_UPPER_FRACTIONS, ZONE_NAMES), start=1):
        upper = max_hr if number == len(ZONE_UPPER_FRACTIONS) else round_half_up(max_hr * fraction)
        zones.append(HeartRateZone(number=number, name=name, lower_bpm=lower, upper_bpm=upper))
        lower = upper
    return zones


def classify_heart_rate(
    heart_rate: Optional[float],
    zones: Sequence[HeartRateZone]
) -> Optional[HeartRateZone]:
    """
    Lowest zone whose upper bound is >= heart_rate.

    Readings above max HR count as the top zone. Missing or
    non-positive readings are not classified.
    """
    if heart_rate is None or heart_rate <= 0:
        return None
    for zone in zones:
        if heart_rate <= zone.upper_bpm:
            return zone
    return zones[-1]


def zones_for_athlete(
    athlete: Optional[Athlete],
    current_year: Optional[int] = None
) -> Optional[list[HeartRateZone]]:
    """Zones for an athlete, None without a birth year."""
    if athlete is None or not athlete.birth_year:
        return None
    return zone_thresholds(max_heart_rate(athlete.birth_year, current_year))


def iter_zone_charges(
    heart_rate: Sequence[Optional[float]],
    time: Optional[Sequence[float]],
    zones: Sequence[HeartRateZone]
) -> Iterator[tuple[HeartRateZone, float]]:
    """
    Yield (zone, seconds) for every classified heart-rate sample.

    Without a following time sample the charge is 1 second.
    """
    time = time or []
    for index, hr in enumerate(heart_rate):
        zone = classify_heart_rate(hr, zones)
        if zone is None:
            continue
        if index < len(time) - 1:
            increment = time[index + 1] - time[index]
        else:
            increment = TRAILING_SAMPLE_SECONDS
        yield zone, increment


def zone_time_distribution(
    detail: ActivityDetail,
    athlete: Optional[Athlete],
    current_year: Optional[int] = None
) -> Optional[list[ZoneTime]]:
    """
    Time spent in each heart rate zone.

    Returns:
        ZoneTime per zone with time (zones without time omitted),
        None if the heart rate stream or birth year is missing
    """
    zones = zones_for_athlete(athlete, current_year)
    if zones is None or not detail.streams or not detail.streams.heartrate:
        return None

    seconds = {zone.number: 0.0 for zone in zones}
    for zone, increment in iter_zone_charges(
        detail.streams.heartrate, detail.streams.time, zones
    ):
        seconds[zone.number] += increment

    total = sum(seconds.values())
    return [
        ZoneTime(
            zone=zone,
            seconds=seconds[zone.number],
            minutes=int(round_half_up(seconds[zone.number] / 60)),
            percentage=int(round_half_up(seconds[zone.number] / total * 100)) if total > 0 else 0,
        )
        for zone in zones
        if seconds[zone.number] > 0
    ]
