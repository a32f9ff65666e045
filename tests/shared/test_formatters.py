"""
Tests for shared formatters.
"""

from athlete_insight.shared.formatters import (
    format_distance_km,
    format_duration,
    format_speed_kmh,
    round_half_up,
)


# =============================================================================
# Test round_half_up
# =============================================================================

class TestRoundHalfUp:
    """Tests for round_half_up (half away from zero)."""

    def test_half_rounds_up(self):
        """166.5 -> 167 where round() would give 166."""
        assert round_half_up(166.5) == 167
        assert round(166.5) == 166

    def test_below_half_rounds_down(self):
        assert round_half_up(129.49) == 129

    def test_digits(self):
        assert round_half_up(0.125, 2) == 0.13

    def test_negative(self):
        assert round_half_up(-2.5) == -3

    def test_zero(self):
        assert round_half_up(0) == 0


# =============================================================================
# Test format_duration
# =============================================================================

class TestFormatDuration:
    """Tests for format_duration."""

    def test_hours(self):
        assert format_duration(3903) == "1h 5m 3s"

    def test_minutes(self):
        assert format_duration(240) == "4m 0s"

    def test_seconds(self):
        assert format_duration(12) == "12s"

    def test_none(self):
        assert format_duration(None) == "—"


# =============================================================================
# Test distance and speed
# =============================================================================

class TestDistanceAndSpeed:
    """Tests for format_distance_km and format_speed_kmh."""

    def test_distance(self):
        assert format_distance_km(12345.6) == "12.35 km"

    def test_speed(self):
        """3.33 m/s is 11.988 km/h."""
        assert format_speed_kmh(3.33) == "11.99km/h"

    def test_missing(self):
        assert format_distance_km(None) == "—"
        assert format_speed_kmh(None) == "—"
