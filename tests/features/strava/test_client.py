"""
Tests for StravaClient.
"""

import httpx
import pytest

from athlete_insight.features.strava import CredentialManager, StravaClient
from athlete_insight.shared.errors import AuthError, NetworkError


API = "/api/v3"


@pytest.fixture
async def client(store, strava):
    await store.save_credentials(access_token="token-1", expires_at=None)
    return StravaClient(CredentialManager(store), transport=strava.transport)


class TestStravaClient:
    """Tests for authenticated requests."""

    @pytest.mark.asyncio
    async def test_bearer_token(self, client, strava):
        strava.add_json("GET", f"{API}/athlete", {"id": 42})

        athlete = await client.get_athlete()

        request = strava.calls("GET", f"{API}/athlete")[0]
        assert request.headers["Authorization"] == "Bearer token-1"
        assert athlete == {"id": 42}

    @pytest.mark.asyncio
    async def test_activities_page_params(self, client, strava):
        strava.add_json("GET", f"{API}/athlete/activities", [])

        await client.get_activities(page=3, per_page=500)

        request = strava.calls("GET", f"{API}/athlete/activities")[0]
        assert request.url.params["page"] == "3"
        assert request.url.params["per_page"] == "200"

    @pytest.mark.asyncio
    async def test_stream_request(self, client, strava):
        strava.add_json("GET", f"{API}/activities/7/streams", {})

        await client.get_activity_streams(7)

        request = strava.calls("GET", f"{API}/activities/7/streams")[0]
        assert request.url.params["key_by_type"] == "true"
        assert request.url.params["keys"].split(",") == [
            "time", "distance", "latlng", "altitude", "velocity_smooth",
            "heartrate", "cadence", "watts", "temp", "moving", "grade_smooth",
        ]

    @pytest.mark.asyncio
    async def test_error_status(self, client, strava):
        strava.add(
            "GET", f"{API}/activities/7",
            httpx.Response(429, json={"message": "Rate Limit Exceeded"})
        )

        with pytest.raises(NetworkError) as exc_info:
            await client.get_activity(7)

        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_non_json_body(self, client, strava):
        strava.add(
            "GET", f"{API}/activities/7/streams",
            httpx.Response(200, text="<html>upstream</html>")
        )

        with pytest.raises(NetworkError) as exc_info:
            await client.get_activity_streams(7)

        assert exc_info.value.status_code == 200

    @pytest.mark.asyncio
    async def test_not_found(self, client):
        with pytest.raises(NetworkError) as exc_info:
            await client.get_activity(404404)
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_transport_error(self, store):
        def fail(request):
            raise httpx.ReadTimeout("timed out", request=request)

        await store.save_credentials(access_token="token-1")
        client = StravaClient(CredentialManager(store), transport=httpx.MockTransport(fail))

        with pytest.raises(NetworkError) as exc_info:
            await client.get_athlete()

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_no_credentials(self, store, strava):
        client = StravaClient(CredentialManager(store), transport=strava.transport)

        with pytest.raises(AuthError):
            await client.get_athlete()

        assert strava.requests == []
