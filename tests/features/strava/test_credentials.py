"""
Tests for CredentialManager.

Tests the token validity window, refresh, single-flight refresh and
the OAuth code exchange.
"""

import asyncio

import httpx
import pytest

from athlete_insight.features.strava import CredentialManager, StravaCredentials, StravaOAuth
from athlete_insight.shared.errors import AuthError, NetworkError
from factories import form_data


MINUTE_MS = 60 * 1000


def _token_route(strava, expires_at_s: int, access_token: str = "new-access"):
    strava.add_json("POST", "/oauth/token", {
        "access_token": access_token,
        "refresh_token": "new-refresh",
        "expires_at": expires_at_s,
        "expires_in": 21600,
    })


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def manager(store, strava, clock):
    return CredentialManager(store, oauth=StravaOAuth(transport=strava.transport), clock=clock)


async def _save(store, **fields):
    defaults = {
        "client_id": "12345",
        "client_secret": "secret",
        "access_token": "old-access",
        "refresh_token": "old-refresh",
    }
    defaults.update(fields)
    await store.save_credentials(**defaults)


# =============================================================================
# Test Token Validity
# =============================================================================

class TestTokenValidity:
    """Tests for the 5 minute refresh window."""

    @pytest.mark.asyncio
    async def test_token_far_from_expiry_is_used(self, store, strava, manager, clock):
        await _save(store, expires_at=clock.now + 10 * MINUTE_MS)

        token = await manager.get_valid_token()

        assert token == "old-access"
        assert strava.requests == []

    @pytest.mark.asyncio
    async def test_token_near_expiry_is_refreshed(self, store, strava, manager, clock):
        await _save(store, expires_at=clock.now + 4 * MINUTE_MS)
        _token_route(strava, clock.now // 1000 + 21600)

        token = await manager.get_valid_token()

        assert token == "new-access"
        sent = form_data(strava.calls("POST", "/oauth/token")[0])
        assert sent["grant_type"] == "refresh_token"
        assert sent["refresh_token"] == "old-refresh"

        stored = await store.get_credentials()
        assert stored.access_token == "new-access"
        assert stored.refresh_token == "new-refresh"
        assert stored.expires_at == (clock.now // 1000 + 21600) * 1000

    @pytest.mark.asyncio
    async def test_expired_token_is_refreshed(self, store, strava, manager, clock):
        await _save(store, expires_at=clock.now - MINUTE_MS)
        _token_route(strava, clock.now // 1000 + 21600)

        assert await manager.get_valid_token() == "new-access"

    @pytest.mark.asyncio
    async def test_unknown_expiry_is_used(self, store, strava, manager):
        await _save(store, expires_at=None)

        assert await manager.get_valid_token() == "old-access"
        assert strava.requests == []

    @pytest.mark.asyncio
    async def test_is_token_fresh(self, manager, clock):
        fresh = StravaCredentials(access_token="a", expires_at=clock.now + 6 * MINUTE_MS)
        stale = StravaCredentials(access_token="a", expires_at=clock.now + 5 * MINUTE_MS)
        empty = StravaCredentials(expires_at=clock.now + 60 * MINUTE_MS)

        assert manager.is_token_fresh(fresh)
        assert not manager.is_token_fresh(stale)
        assert not manager.is_token_fresh(empty)


# =============================================================================
# Test Refresh Failures
# =============================================================================

class TestRefreshFailures:
    """Tests for refresh error paths."""

    @pytest.mark.asyncio
    async def test_no_credentials(self, manager):
        with pytest.raises(AuthError):
            await manager.get_valid_token()

    @pytest.mark.asyncio
    async def test_no_refresh_token(self, store, manager, clock):
        await _save(store, refresh_token=None, expires_at=clock.now - MINUTE_MS)

        with pytest.raises(AuthError):
            await manager.get_valid_token()

    @pytest.mark.asyncio
    async def test_refresh_without_secret(self, store, manager):
        await _save(store, client_secret=None)

        with pytest.raises(AuthError):
            await manager.refresh()

    @pytest.mark.asyncio
    async def test_refresh_rejected(self, store, strava, manager, clock):
        await _save(store, expires_at=clock.now - MINUTE_MS)
        strava.add_json("POST", "/oauth/token", {"message": "Bad Request"}, status_code=400)

        with pytest.raises(NetworkError) as exc_info:
            await manager.get_valid_token()

        assert exc_info.value.status_code == 400
        assert (await store.get_credentials()).access_token == "old-access"

    @pytest.mark.asyncio
    async def test_next_call_retries_after_failure(self, store, strava, manager, clock):
        await _save(store, expires_at=clock.now - MINUTE_MS)
        strava.add_json("POST", "/oauth/token", {"message": "Bad Request"}, status_code=400)

        with pytest.raises(NetworkError):
            await manager.get_valid_token()

        _token_route(strava, clock.now // 1000 + 21600)
        assert await manager.get_valid_token() == "new-access"
        assert len(strava.calls("POST", "/oauth/token")) == 2


# =============================================================================
# Test Single-Flight Refresh
# =============================================================================

class TestSingleFlight:
    """Concurrent callers share one refresh."""

    @pytest.mark.asyncio
    async def test_concurrent_callers(self, store, strava, manager, clock):
        await _save(store, expires_at=clock.now + MINUTE_MS)
        _token_route(strava, clock.now // 1000 + 21600)
        await manager.get_credentials()

        tokens = await asyncio.gather(*(manager.get_valid_token() for _ in range(5)))

        assert tokens == ["new-access"] * 5
        assert len(strava.calls("POST", "/oauth/token")) == 1

    @pytest.mark.asyncio
    async def test_expiry_never_moves_backwards(self, store, strava, manager, clock):
        await _save(store, access_token=None, expires_at=clock.now + 60 * MINUTE_MS)
        _token_route(strava, clock.now // 1000 + 60)

        await manager.get_valid_token()

        assert (await store.get_credentials()).expires_at == clock.now + 60 * MINUTE_MS

    @pytest.mark.asyncio
    async def test_explicit_refresh_joins_in_flight(self, store, strava, manager, clock):
        await _save(store, expires_at=clock.now + MINUTE_MS)
        _token_route(strava, clock.now // 1000 + 21600)
        await manager.get_credentials()

        await asyncio.gather(
            manager.refresh(),
            manager.get_valid_token(),
            manager.refresh(),
        )

        assert len(strava.calls("POST", "/oauth/token")) == 1
        assert (await store.get_credentials()).access_token == "new-access"

    @pytest.mark.asyncio
    async def test_earlier_provider_expiry_forces_next_refresh(self, store, strava, manager, clock):
        await _save(store, access_token=None, expires_at=clock.now + 60 * MINUTE_MS)
        strava.add("POST", "/oauth/token", lambda request: httpx.Response(200, json={
            "access_token": "short-lived",
            "refresh_token": "new-refresh",
            "expires_at": clock.now // 1000 + 60,
        }))

        assert await manager.get_valid_token() == "short-lived"
        assert await manager.get_valid_token() == "short-lived"

        assert len(strava.calls("POST", "/oauth/token")) == 2
        assert (await store.get_credentials()).expires_at == clock.now + 60 * MINUTE_MS


# =============================================================================
# Test Authorization
# =============================================================================

class TestAuthorization:
    """Tests for the code exchange and session state."""

    @pytest.mark.asyncio
    async def test_exchange_stores_everything(self, store, strava, manager, clock):
        strava.add_json("POST", "/oauth/token", {
            "access_token": "first-access",
            "refresh_token": "first-refresh",
            "expires_at": clock.now // 1000 + 21600,
            "scope": "read,activity:read_all",
        })

        await manager.exchange_authorization_code("the-code", "12345", "secret")

        stored = await store.get_credentials()
        assert stored.client_id == "12345"
        assert stored.client_secret == "secret"
        assert stored.access_token == "first-access"
        assert stored.scope == "read,activity:read_all"
        assert await manager.is_authenticated()

    @pytest.mark.asyncio
    async def test_save_client_credentials(self, store, manager):
        await manager.save_client_credentials("12345", "secret")

        assert not await manager.is_authenticated()
        assert (await store.get_credentials()).client_id == "12345"

    @pytest.mark.asyncio
    async def test_clear(self, store, manager):
        await _save(store)
        assert await manager.is_authenticated()

        await manager.clear()

        assert not await manager.is_authenticated()
        assert await store.get_credentials() is None

    @pytest.mark.asyncio
    async def test_invalidate_rereads_store(self, store, manager):
        await _save(store)
        assert (await manager.get_credentials()).access_token == "old-access"

        await store.save_credentials(access_token="changed")
        assert (await manager.get_credentials()).access_token == "old-access"

        manager.invalidate()
        assert (await manager.get_credentials()).access_token == "changed"
