"""
Strava OAuth flow.

Handles:
- Authorization URL generation
- Code exchange for tokens
- Token refresh

Client id and secret are passed per call; nothing is read from the
environment.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from athlete_insight.config import settings
from athlete_insight.shared.constants import STRAVA_OAUTH_SCOPE
from athlete_insight.shared.errors import NetworkError
from .schemas import TokenResponse

logger = logging.getLogger(__name__)


class StravaOAuth:
    """
    Strava OAuth handler.

    Usage:
        oauth = StravaOAuth()
        auth_url = oauth.get_authorization_url(
            client_id="12345",
            redirect_uri="http://localhost:5173"
        )
        tokens = await oauth.exchange_code(code, client_id, client_secret)
        tokens = await oauth.refresh_token(refresh_token, client_id, client_secret)
    """

    def __init__(
        self,
        oauth_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None
    ):
        base = (oauth_url or settings.strava_oauth_url).rstrip("/")
        self.authorize_url = f"{base}/authorize"
        self.token_url = f"{base}/token"
        self.transport = transport
        self.timeout = timeout or settings.request_timeout_seconds

    def get_authorization_url(
        self,
        client_id: str,
        redirect_uri: Optional[str] = None,
        scope: str = STRAVA_OAUTH_SCOPE
    ) -> str:
        """
        Generate Strava OAuth authorization URL.

        Args:
            client_id: Strava application client ID
            redirect_uri: URL to redirect after authorization
            scope: OAuth scope (default: read,activity:read_all)

        Consent is always requested again (approval_prompt=force) so a
        reconnect can widen the granted scope.

        Returns:
            Authorization URL string
        """
        params = {
            "client_id": client_id,
            "redirect_uri": redirect_uri or settings.strava_redirect_uri,
            "response_type": "code",
            "scope": scope,
            "approval_prompt": "force",
        }
        return f"{self.authorize_url}?{urlencode(params)}"

    async def exchange_code(
        self,
        code: str,
        client_id: str,
        client_secret: str
    ) -> TokenResponse:
        """
        Exchange authorization code for tokens.

        Args:
            code: Authorization code from Strava callback
            client_id: Strava application client ID
            client_secret: Strava application client secret

        Returns:
            TokenResponse with access/refresh token and expiry (seconds)

        Raises:
            NetworkError: If token exchange fails
        """
        return await self._token_request(
            {
                "client_id": client_id,
                "client_secret": client_secret,
                "code": code,
                "grant_type": "authorization_code"
            },
            action="exchange"
        )

    async def refresh_token(
        self,
        refresh_token: str,
        client_id: str,
        client_secret: str
    ) -> TokenResponse:
        """
        Refresh an expired access token.

        Args:
            refresh_token: Current refresh token
            client_id: Strava application client ID
            client_secret: Strava application client secret

        Returns:
            TokenResponse with the new token pair

        Raises:
            NetworkError: If token refresh fails
        """
        return await self._token_request(
            {
                "client_id": client_id,
                "client_secret": client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token"
            },
            action="refresh"
        )

    async def _token_request(self, data: dict, action: str) -> TokenResponse:
        try:
            async with httpx.AsyncClient(
                transport=self.transport,
                timeout=self.timeout
            ) as client:
                response = await client.post(self.token_url, data=data)
        except httpx.TransportError as e:
            logger.error(f"Strava token {action} failed: {e}")
            raise NetworkError(f"Token {action} failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Strava token {action} failed: {response.text}")
            raise NetworkError(
                f"Token {action} failed: {response.status_code}",
                status_code=response.status_code
            )

        try:
            return TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Strava token {action} returned an unexpected body: {response.text}")
            raise NetworkError(
                f"Token {action} failed: unexpected response body",
                status_code=response.status_code
            ) from e
