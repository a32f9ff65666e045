"""
Strava credential lifecycle.

One CredentialManager per session owns the OAuth token state: it keeps
an in-memory copy of the stored credentials, refreshes the access token
shortly before it expires, and writes every token change through to the
cache store.
"""

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Callable, Optional

from athlete_insight.shared.constants import TOKEN_REFRESH_MARGIN_MS
from athlete_insight.shared.errors import AuthError
from .oauth import StravaOAuth
from .schemas import StravaCredentials, TokenResponse

if TYPE_CHECKING:
    from athlete_insight.features.store import CacheStore

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class CredentialManager:
    """
    Owns OAuth token state for one session.

    Concurrent get_valid_token() calls near expiry share a single
    refresh instead of each spending the refresh token.

    Usage:
        credentials = CredentialManager(store)
        await credentials.exchange_authorization_code(code, client_id, secret)
        token = await credentials.get_valid_token()
    """

    def __init__(
        self,
        store: "CacheStore",
        oauth: Optional[StravaOAuth] = None,
        clock: Optional[Callable[[], int]] = None
    ):
        self.store = store
        self.oauth = oauth or StravaOAuth()
        self._clock = clock or _now_ms
        self._credentials: Optional[StravaCredentials] = None
        self._loaded = False
        self._refresh_task: Optional[asyncio.Task] = None
        # Provider expiry when it was earlier than the stored one
        self._provider_expires_at: Optional[int] = None

    # -------------------------------------------------------------------------
    # Cached state
    # -------------------------------------------------------------------------

    async def get_credentials(self) -> Optional[StravaCredentials]:
        """Stored credentials, read from the store once per session."""
        if not self._loaded:
            self._credentials = await self.store.get_credentials()
            self._loaded = True
        return self._credentials

    def invalidate(self) -> None:
        """Drop the in-memory copy; the next access re-reads the store."""
        self._credentials = None
        self._loaded = False
        self._provider_expires_at = None

    async def save_client_credentials(
        self,
        client_id: str,
        client_secret: str
    ) -> StravaCredentials:
        """Store the Strava application id and secret."""
        self._credentials = await self.store.save_credentials(
            client_id=client_id,
            client_secret=client_secret
        )
        self._loaded = True
        return self._credentials

    async def is_authenticated(self) -> bool:
        credentials = await self.get_credentials()
        return bool(credentials and credentials.access_token)

    async def clear(self) -> None:
        """Forget all credentials (logout)."""
        await self.store.clear_credentials()
        self._credentials = None
        self._loaded = True
        self._provider_expires_at = None

    # -------------------------------------------------------------------------
    # Token Management
    # -------------------------------------------------------------------------

    def is_token_fresh(self, credentials: StravaCredentials) -> bool:
        """
        Check the access token against the 5 minute refresh margin.

        A token without a known expiry is used as is. When Strava reported
        an expiry earlier than the stored one, the earlier one decides.
        """
        if not credentials.access_token:
            return False
        expires_at = credentials.expires_at
        if self._provider_expires_at is not None:
            expires_at = (
                self._provider_expires_at if expires_at is None
                else min(expires_at, self._provider_expires_at)
            )
        if expires_at is None:
            return True
        return self._clock() < expires_at - TOKEN_REFRESH_MARGIN_MS

    async def get_valid_token(self) -> str:
        """
        Get a valid access token, refreshing if needed.

        Raises:
            AuthError: No client id/secret/refresh token to refresh with
            NetworkError: Refresh request failed
        """
        credentials = await self.get_credentials()
        if credentials and self.is_token_fresh(credentials):
            return credentials.access_token

        if not credentials or not credentials.can_refresh:
            raise AuthError("missing credentials")

        await self._refresh_once()
        return self._credentials.access_token

    async def _refresh_once(self) -> None:
        """Join the in-flight refresh or start one."""
        if self._refresh_task is None:
            task = asyncio.create_task(self._do_refresh())
            task.add_done_callback(self._clear_refresh_task)
            self._refresh_task = task
        await asyncio.shield(self._refresh_task)

    def _clear_refresh_task(self, task: asyncio.Task) -> None:
        if self._refresh_task is task:
            self._refresh_task = None

    async def refresh(self) -> None:
        """
        Exchange the stored refresh token for a new token pair.

        Joins a refresh already in flight.

        Raises:
            AuthError: Refresh token or client credentials missing
            NetworkError: Strava returned a non-success status
        """
        await self._refresh_once()

    async def _do_refresh(self) -> None:
        credentials = await self.get_credentials()
        if not credentials or not credentials.refresh_token or not credentials.client_secret:
            raise AuthError("Missing refresh token or client credentials")
        if not credentials.client_id:
            raise AuthError("Missing client id")

        logger.info("Refreshing Strava access token")
        tokens = await self.oauth.refresh_token(
            credentials.refresh_token,
            credentials.client_id,
            credentials.client_secret
        )
        await self._save_tokens(tokens)

    async def exchange_authorization_code(
        self,
        code: str,
        client_id: str,
        client_secret: str
    ) -> None:
        """
        Complete the OAuth flow with the code from the redirect.

        Raises:
            NetworkError: Strava returned a non-success status
        """
        await self.get_credentials()
        tokens = await self.oauth.exchange_code(code, client_id, client_secret)
        await self._save_tokens(
            tokens,
            client_id=client_id,
            client_secret=client_secret
        )
        logger.info("Strava authorization completed")

    async def _save_tokens(self, tokens: TokenResponse, **extra) -> None:
        """Write new tokens through to the store and the in-memory copy."""
        expires_at = tokens.expires_at_ms
        current = self._credentials.expires_at if self._credentials else None
        self._provider_expires_at = None
        if current is not None and expires_at < current:
            logger.warning(
                f"Keeping stored token expiry {current}, provider reported {expires_at}"
            )
            self._provider_expires_at = expires_at
            expires_at = current

        fields = {
            "access_token": tokens.access_token,
            "refresh_token": tokens.refresh_token,
            "expires_at": expires_at,
            **extra,
        }
        if tokens.scope is not None:
            fields["scope"] = tokens.scope

        self._credentials = await self.store.save_credentials(**fields)
        self._loaded = True
