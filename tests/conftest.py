"""
Shared fixtures.

Every test gets its own in-memory SQLite cache; the Strava API is
replaced by httpx.MockTransport routes (see factories.StravaMock).
"""

import pytest

from athlete_insight.features.store import CacheStore
from athlete_insight.features.strava.schemas import Athlete
from factories import StravaMock


@pytest.fixture
async def store():
    """Fresh in-memory cache store."""
    cache = CacheStore.from_url("sqlite:///:memory:")
    await cache.init()
    yield cache
    await cache.close()


@pytest.fixture
def strava():
    """Strava API route table."""
    return StravaMock()


@pytest.fixture
def athlete():
    """Athlete born 1990; analytics tests run as of 2025 (max HR 185)."""
    return Athlete(id=42, firstname="Ann", lastname="Runner", birth_year=1990)


@pytest.fixture
def clock():
    """Controllable epoch-ms clock."""

    class Clock:
        now = 1_700_000_000_000

        def __call__(self) -> int:
            return self.now

    return Clock()
