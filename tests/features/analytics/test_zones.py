"""
Tests for heart rate zones.

Tests max HR estimation, zone thresholds, classification and
time-in-zone distribution.
"""

import pytest

from athlete_insight.features.analytics import (
    classify_heart_rate,
    max_heart_rate,
    zone_thresholds,
    zone_time_distribution,
)
from athlete_insight.features.strava.schemas import Athlete
from factories import make_detail


YEAR = 2025


# =============================================================================
# Test Max Heart Rate
# =============================================================================

class TestMaxHeartRate:
    """Tests for max_heart_rate (220 - age)."""

    def test_birth_year_1990(self):
        assert max_heart_rate(1990, current_year=YEAR) == 185

    @pytest.mark.parametrize("birth_year", [1940, 1975, 2000, 2015])
    def test_formula(self, birth_year):
        assert max_heart_rate(birth_year, current_year=YEAR) == 220 - (YEAR - birth_year)


# =============================================================================
# Test Zone Thresholds
# =============================================================================

class TestZoneThresholds:
    """Tests for zone_thresholds."""

    def test_bounds_for_185(self):
        """Upper bounds land on {111, 129.5, 148, 166.5, 185} after rounding."""
        zones = zone_thresholds(185)
        expected = [111, 129.5, 148, 166.5, 185]

        assert len(zones) == 5
        for zone, bound in zip(zones, expected):
            assert abs(zone.upper_bpm - bound) <= 0.5

    def test_top_zone_ends_at_max_hr(self):
        assert zone_thresholds(185)[-1].upper_bpm == 185
        assert zone_thresholds(171.5)[-1].upper_bpm == 171.5

    @pytest.mark.parametrize("max_hr", [140, 163, 185, 201])
    def test_bounds_non_decreasing(self, max_hr):
        zones = zone_thresholds(max_hr)
        uppers = [zone.upper_bpm for zone in zones]
        assert uppers == sorted(uppers)
        assert zones[0].lower_bpm == 0
        for previous, zone in zip(zones, zones[1:]):
            assert zone.lower_bpm == previous.upper_bpm

    def test_zone_names(self):
        zones = zone_thresholds(185)
        assert zones[0].name == "Recovery (Zone 1)"
        assert zones[4].name == "Neuromuscular Power (Zone 5)"


# =============================================================================
# Test Classification
# =============================================================================

class TestClassifyHeartRate:
    """Tests for classify_heart_rate."""

    @pytest.fixture
    def zones(self):
        return zone_thresholds(185)

    def test_every_positive_reading_has_one_zone(self, zones):
        for hr in range(1, 230):
            zone = classify_heart_rate(hr, zones)
            assert zone is not None
            matching = [z for z in zones if z.contains(hr)]
            if hr <= 185:
                assert matching == [zone]

    def test_boundaries_belong_to_lower_zone(self, zones):
        assert classify_heart_rate(111, zones).number == 1
        assert classify_heart_rate(112, zones).number == 2

    def test_above_max_is_top_zone(self, zones):
        assert classify_heart_rate(210, zones).number == 5

    def test_missing_or_non_positive(self, zones):
        assert classify_heart_rate(None, zones) is None
        assert classify_heart_rate(0, zones) is None
        assert classify_heart_rate(-5, zones) is None


# =============================================================================
# Test Zone Time Distribution
# =============================================================================

class TestZoneTimeDistribution:
    """Tests for zone_time_distribution."""

    def test_one_minute_activity(self, athlete):
        """100 bpm for 30s + final 1s, 160 bpm for 30s."""
        detail = make_detail(heartrate=[100, 160, 100], time=[0, 30, 60])

        zones = zone_time_distribution(detail, athlete, current_year=YEAR)

        assert [z.zone.number for z in zones] == [1, 4]
        assert zones[0].seconds == 31
        assert zones[1].seconds == 30
        assert zones[0].percentage == 51
        assert zones[1].percentage == 49
        assert zones[0].minutes == 1

    def test_empty_zones_omitted(self, athlete):
        detail = make_detail(heartrate=[120, 120, 120], time=[0, 10, 20])

        zones = zone_time_distribution(detail, athlete, current_year=YEAR)

        assert len(zones) == 1
        assert zones[0].zone.number == 2
        assert zones[0].percentage == 100

    def test_gaps_in_heart_rate_skipped(self, athlete):
        detail = make_detail(heartrate=[None, 0, 150], time=[0, 10, 20])

        zones = zone_time_distribution(detail, athlete, current_year=YEAR)

        assert len(zones) == 1
        assert zones[0].seconds == 1

    def test_without_time_stream_each_sample_is_one_second(self, athlete):
        detail = make_detail(heartrate=[100, 100, 100])

        zones = zone_time_distribution(detail, athlete, current_year=YEAR)

        assert zones[0].seconds == 3

    def test_no_birth_year(self):
        detail = make_detail(heartrate=[100, 160], time=[0, 30])
        assert zone_time_distribution(detail, Athlete(id=1), current_year=YEAR) is None
        assert zone_time_distribution(detail, None, current_year=YEAR) is None

    def test_no_heart_rate_stream(self, athlete):
        assert zone_time_distribution(make_detail(), athlete, current_year=YEAR) is None

    def test_only_unusable_samples(self, athlete):
        detail = make_detail(heartrate=[0, 0], time=[0, 10])
        assert zone_time_distribution(detail, athlete, current_year=YEAR) == []
