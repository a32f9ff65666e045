"""
Error taxonomy shared by the credential, sync and store layers.

Analytics never raise for missing inputs: they return None instead.
"""

from typing import Optional


class AthleteInsightError(Exception):
    """Base library error."""
    pass


class AuthError(AthleteInsightError):
    """Missing or invalid credentials or tokens."""
    pass


class NetworkError(AthleteInsightError):
    """Remote call failed (non-success HTTP status or transport failure)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DataError(AthleteInsightError):
    """Malformed or schema-incompatible import payload."""
    pass
