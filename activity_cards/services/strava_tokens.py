"""
Helpers for storing and refreshing Strava OAuth tokens.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict

from activity_cards.clients import SQLiteStore, StravaOAuthClient, StravaTokenBundle
from activity_cards.clients.strava_auth import OAuthTokenNotFoundError
from activity_cards.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)


class StravaTokenService:
    """Manages access to persisted Strava OAuth tokens."""

    REFRESH_WINDOW_SECONDS = 5 * 60

    def __init__(
        self,
        store: SQLiteStore,
        oauth_client: StravaOAuthClient,
        token_cipher: TokenCipherService,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._oauth = oauth_client
        self._cipher = token_cipher
        self._clock = clock

    def store_tokens(
        self, user_id: str, bundle: StravaTokenBundle, *, scope: str | None = None
    ) -> None:
        """Persist a freshly issued token bundle for ``user_id``."""
        existing = self._store.get_account(user_id) or {}
        now = datetime.now(timezone.utc).isoformat()
        self._store.put_account(
            {
                "user_id": user_id,
                "provider": "strava",
                "access_token_encrypted": self._cipher.encrypt(bundle.access_token),
                "refresh_token_encrypted": self._cipher.encrypt(bundle.refresh_token),
                "expires_at": bundle.expires_at,
                "scope": scope,
                "athlete": bundle.athlete or existing.get("athlete") or {},
                "created_at": existing.get("created_at") or now,
                "updated_at": now,
            }
        )

    def needs_refresh(self, expires_at: int | None) -> bool:
        """True when the token expires within the refresh window (or never recorded one)."""
        if not expires_at:
            return True
        return self._clock() + self.REFRESH_WINDOW_SECONDS > expires_at

    async def get_valid_access_token(self, user_id: str) -> str:
        """Return a usable access token, refreshing it first when close to expiry."""
        account = self._store.get_account(user_id)
        if not account:
            raise OAuthTokenNotFoundError(f"No Strava account stored for user {user_id}.")

        if not self.needs_refresh(account.get("expires_at")):
            return self._cipher.decrypt(account["access_token_encrypted"])

        logger.info("Refreshing Strava token for user %s", user_id)
        refresh_token = self._cipher.decrypt(account["refresh_token_encrypted"])
        bundle = await self._oauth.refresh_token(refresh_token)
        self.store_tokens(user_id, bundle)
        return bundle.access_token

    def get_athlete(self, user_id: str) -> Dict[str, Any] | None:
        account = self._store.get_account(user_id)
        if not account:
            return None
        return account.get("athlete") or {}

    async def revoke(self, user_id: str) -> None:
        """Deauthorize with Strava (best effort) and forget the stored account."""
        account = self._store.get_account(user_id)
        if not account:
            return
        try:
            access_token = self._cipher.decrypt(account["access_token_encrypted"])
            await self._oauth.deauthorize(access_token)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Failed to deauthorize Strava access for user %s", user_id)
        self._store.delete_account(user_id)


__all__ = ["StravaTokenService"]
