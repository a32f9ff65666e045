"""
Unified constants for Strava data and heart-rate analytics.

Single source of truth for stream kinds, zone definitions and
cache document versioning.
"""

from enum import Enum


class StreamKind(str, Enum):
    """
    Stream kinds requested from Strava.

    Values are Strava's own stream keys.
    """
    TIME = "time"
    DISTANCE = "distance"
    LATLNG = "latlng"
    ALTITUDE = "altitude"
    VELOCITY_SMOOTH = "velocity_smooth"
    HEARTRATE = "heartrate"
    CADENCE = "cadence"
    WATTS = "watts"
    TEMP = "temp"
    MOVING = "moving"
    GRADE_SMOOTH = "grade_smooth"


ALL_STREAM_KINDS: list[StreamKind] = list(StreamKind)


class ComparisonPeriod(str, Enum):
    """Calendar window for cohort comparison."""
    MONTH = "month"
    YEAR = "year"


# OAuth scope requested on authorization
STRAVA_OAUTH_SCOPE = "read,activity:read_all"

# Refresh when the access token expires within this window
TOKEN_REFRESH_MARGIN_MS = 5 * 60 * 1000


# =============================================================================
# Heart rate zones
# =============================================================================

# Upper bound of zones 1-4 as a fraction of max HR; zone 5 ends at max HR
ZONE_UPPER_FRACTIONS: tuple[float, ...] = (0.6, 0.7, 0.8, 0.9, 1.0)

ZONE_NAMES: tuple[str, ...] = (
    "Recovery (Zone 1)",
    "Aerobic Base (Zone 2)",
    "Aerobic (Zone 3)",
    "Lactate Threshold (Zone 4)",
    "Neuromuscular Power (Zone 5)",
)

# Relative effort multiplier per zone
ZONE_EFFORT_WEIGHTS: dict[int, int] = {1: 1, 2: 2, 3: 3, 4: 5, 5: 8}

# Time charged to the last HR sample (no following sample bounds it)
TRAILING_SAMPLE_SECONDS = 1

MAX_HR_BASE = 220


# =============================================================================
# Cache export document
# =============================================================================

EXPORT_VERSION = 4
