"""
Tests for the LLM text summary.
"""

from athlete_insight.features.analytics import build_llm_summary
from athlete_insight.features.strava.schemas import Activity
from factories import make_activity_payload, make_detail


YEAR = 2025


def _subject():
    return make_detail(1, heartrate=[100, 160, 100], time=[0, 30, 60])


# =============================================================================
# Test Activity Line
# =============================================================================

class TestActivityLine:
    """Tests for the main summary line."""

    def test_full_line(self, athlete):
        summary = build_llm_summary(_subject(), athlete, [], current_year=YEAR)

        assert summary == (
            "Activity: Morning Run 1 (Run) on 2025-03-10 - Distance: 10.00 km, "
            "Time: 50m 0s (moving) / 53m 20s (total), Avg_speed: 11.99km/h, "
            "Elevation: 120m, HR_zones:[Recovery:51%,Lactate_Threshold:49%], "
            "avg_HR:150.0bpm, relative_effort:181pts"
        )

    def test_without_birth_year(self):
        summary = build_llm_summary(_subject(), None, [], current_year=YEAR)

        assert "HR_zones" not in summary
        assert "relative_effort" not in summary
        assert "avg_HR:150.0bpm" in summary

    def test_prefix(self, athlete):
        athlete.llm_summary_prefix = "I am training for a marathon."

        summary = build_llm_summary(_subject(), athlete, [], current_year=YEAR)

        assert summary.startswith("I am training for a marathon.\n\nActivity: ")


# =============================================================================
# Test Year Context
# =============================================================================

class TestYearContext:
    """Tests for the yearly context block."""

    def test_context_block(self, athlete):
        subject = _subject()
        ride = Activity.model_validate(make_activity_payload(
            2,
            start="2025-01-05T09:00:00Z",
            type="Ride",
            distance=20000.0,
            moving_time=3600,
            average_speed=5.0,
            total_elevation_gain=50.0,
            average_heartrate=None,
        ))
        last_year = Activity.model_validate(make_activity_payload(3, start="2024-12-30T09:00:00Z"))

        summary = build_llm_summary(
            subject, athlete, [subject, ride, last_year], current_year=YEAR
        )

        _, context = summary.split("\n\n")
        assert context == (
            "Year_2025_context: Total_activities:2, Total_distance:30.0km, "
            "Total_time:2h, Avg_pace_year:16.36km/h, Activity_types:[Ride:1,Run:1], "
            "All_year_activities:[Morning Run 2(Ride)_2025-01-05:20.00km_1h 0m 0s_"
            "18.00km/h_50m_HR:N/A]"
        )

    def test_newest_first(self, athlete):
        subject = _subject()
        older = Activity.model_validate(make_activity_payload(2, start="2025-01-01T09:00:00Z"))
        newer = Activity.model_validate(make_activity_payload(3, start="2025-06-01T09:00:00Z"))

        summary = build_llm_summary(subject, athlete, [older, newer], current_year=YEAR)

        listing = summary.split("All_year_activities:[")[1]
        assert listing.index("Morning Run 3") < listing.index("Morning Run 2")
        assert "HR:150.0bpm" in listing

    def test_no_context_without_other_activities(self, athlete):
        subject = _subject()
        summary = build_llm_summary(subject, athlete, [subject], current_year=YEAR)
        assert "Year_" not in summary
