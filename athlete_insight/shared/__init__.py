"""
Shared building blocks: errors, constants, formatters, base repository.
"""

from .errors import AthleteInsightError, AuthError, NetworkError, DataError
from .constants import StreamKind, ComparisonPeriod, ALL_STREAM_KINDS
from .repository import BaseRepository

__all__ = [
    "AthleteInsightError",
    "AuthError",
    "NetworkError",
    "DataError",
    "StreamKind",
    "ComparisonPeriod",
    "ALL_STREAM_KINDS",
    "BaseRepository",
]
