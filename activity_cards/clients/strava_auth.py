"""
Strava OAuth utilities.

These helpers manage the athlete authentication flow and token refresh lifecycle.
"""

from __future__ import annotations

import base64
import binascii
import hmac
import json
import logging
from dataclasses import dataclass, field
from hashlib import sha256
from typing import Any, Dict
from urllib.parse import urlencode

import httpx

from fastapi import status

from activity_cards.core.config import OAuthSettings, StravaSettings

logger = logging.getLogger(__name__)


class InvalidSignatureError(Exception):
    """Raised when a signed payload was tampered with or is malformed."""


class SignedPayloadEncoder:
    """Encode and decode signed payloads (OAuth state, session cookies)."""

    _SIGNATURE_LENGTH = 32

    def __init__(self, secret_key: str) -> None:
        self._secret_key = secret_key.encode("utf-8")

    def encode(self, payload: Dict[str, Any]) -> str:
        serialized = json.dumps(payload, separators=(",", ":"), sort_keys=True)
        signature = hmac.new(self._secret_key, serialized.encode("utf-8"), sha256).digest()
        return base64.urlsafe_b64encode(signature + serialized.encode("utf-8")).decode("utf-8")

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            decoded = base64.urlsafe_b64decode(token.encode("utf-8"))
        except (binascii.Error, ValueError) as exc:
            raise InvalidSignatureError("Signed payload is not valid base64.") from exc

        signature = decoded[: self._SIGNATURE_LENGTH]
        serialized = decoded[self._SIGNATURE_LENGTH :]
        expected_signature = hmac.new(self._secret_key, serialized, sha256).digest()
        if not hmac.compare_digest(signature, expected_signature):
            raise InvalidSignatureError("Invalid payload signature.")
        try:
            payload = json.loads(serialized)
        except ValueError as exc:
            raise InvalidSignatureError("Signed payload is not valid JSON.") from exc
        if not isinstance(payload, dict):
            raise InvalidSignatureError("Signed payload must be a JSON object.")
        return payload


class OAuthTokenExchangeError(Exception):
    """Raised when the token endpoint returns an error."""


class OAuthTokenNotFoundError(Exception):
    """Raised when no persisted OAuth token is available for a user."""


@dataclass
class StravaTokenBundle:
    """Tokens returned by the Strava token endpoint."""

    access_token: str
    refresh_token: str
    expires_at: int
    athlete: Dict[str, Any] = field(default_factory=dict)

    @property
    def athlete_id(self) -> str | None:
        athlete_id = self.athlete.get("id")
        return str(athlete_id) if athlete_id is not None else None


class StravaOAuthClient:
    """Build Strava authorization URLs and exchange authorization codes."""

    def __init__(
        self,
        strava_settings: StravaSettings,
        oauth_settings: OAuthSettings,
        *,
        timeout: float = 10.0,
    ) -> None:
        self._strava = strava_settings
        self._oauth = oauth_settings
        self._timeout = timeout

    @property
    def token_url(self) -> str:
        return self._strava.token_url

    def build_authorization_url(self, state: str) -> str:
        """Construct the Strava OAuth consent URL."""
        params = {
            "client_id": self._strava.client_id,
            "redirect_uri": str(self._strava.redirect_uri),
            "response_type": "code",
            "approval_prompt": self._oauth.approval_prompt,
            "scope": ",".join(self._oauth.scopes),
            "state": state,
        }
        query = urlencode(params)
        return f"{self._strava.authorize_url}?{query}"

    async def exchange_authorization_code(self, code: str) -> StravaTokenBundle:
        """Exchange an authorization code for tokens and the athlete profile."""
        payload = {
            "code": code,
            "client_id": self._strava.client_id,
            "client_secret": self._strava.client_secret,
            "grant_type": "authorization_code",
        }
        token_payload = await self._post_token(payload)
        bundle = self._parse_bundle(token_payload)
        if not bundle.athlete_id:
            raise OAuthTokenExchangeError("Token payload did not include the athlete.")
        return bundle

    async def refresh_token(self, refresh_token: str) -> StravaTokenBundle:
        """Refresh the access token using a stored refresh token.

        Strava may rotate the refresh token, so callers must persist the
        returned bundle as a whole.
        """
        payload = {
            "client_id": self._strava.client_id,
            "client_secret": self._strava.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }
        token_payload = await self._post_token(payload)
        return self._parse_bundle(token_payload)

    async def deauthorize(self, access_token: str) -> bool:
        """Revoke the application's access for the athlete."""
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(
                self._strava.deauthorize_url,
                data={"access_token": access_token},
            )
        if response.status_code != status.HTTP_200_OK:
            logger.warning("Strava deauthorization returned %s", response.status_code)
            return False
        return True

    async def _post_token(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(self._strava.token_url, data=payload)

        if response.status_code != status.HTTP_200_OK:
            raise OAuthTokenExchangeError(response.text)
        return response.json()

    @staticmethod
    def _parse_bundle(token_payload: Dict[str, Any]) -> StravaTokenBundle:
        access_token = token_payload.get("access_token")
        refresh_token = token_payload.get("refresh_token")
        expires_at = token_payload.get("expires_at")

        if not access_token or not refresh_token or not expires_at:
            raise OAuthTokenExchangeError("Incomplete token payload returned from Strava.")

        return StravaTokenBundle(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=int(expires_at),
            athlete=token_payload.get("athlete") or {},
        )


__all__ = [
    "InvalidSignatureError",
    "OAuthTokenExchangeError",
    "OAuthTokenNotFoundError",
    "SignedPayloadEncoder",
    "StravaOAuthClient",
    "StravaTokenBundle",
]
