"""
Formatting utilities for text summaries.
"""


def format_duration(seconds: int | float | None) -> str:
    """
    Format seconds as 'Xh Ym Zs'.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string (e.g., '1h 5m 3s', '4m 0s', '12s')
    """
    if seconds is None:
        return "—"

    total = int(seconds)
    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60

    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    elif minutes > 0:
        return f"{minutes}m {secs}s"
    else:
        return f"{secs}s"


def format_distance_km(distance_m: float | None) -> str:
    """
    Format distance in meters as kilometers with two decimals.

    Returns:
        Formatted string (e.g., '12.35 km')
    """
    if distance_m is None:
        return "—"
    return f"{distance_m / 1000:.2f} km"


def format_speed_kmh(speed_mps: float | None) -> str:
    """Format m/s as 'N.NNkm/h'."""
    if speed_mps is None:
        return "—"
    return f"{speed_mps * 3.6:.2f}km/h"


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round half away from zero for non-negative values.

    Python's round() uses banker's rounding (166.5 -> 166);
    zone bounds and percentages expect 166.5 -> 167.
    """
    factor = 10 ** digits
    return int(value * factor + 0.5) / factor if value >= 0 else -round_half_up(-value, digits)
