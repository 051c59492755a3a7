from __future__ import annotations

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from activity_cards.clients import SQLiteStore, StravaTokenBundle
from activity_cards.clients.strava_auth import (
    OAuthTokenExchangeError,
    OAuthTokenNotFoundError,
)
from activity_cards.services.strava_tokens import StravaTokenService
from activity_cards.services.token_cipher import TokenCipherService

NOW = 1_700_000_000


class DummyOAuthClient:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.refresh_calls: list[str] = []
        self.deauthorized: list[str] = []

    async def refresh_token(self, refresh_token: str) -> StravaTokenBundle:
        self.refresh_calls.append(refresh_token)
        if self.fail:
            raise OAuthTokenExchangeError("bad refresh token")
        return StravaTokenBundle(
            access_token="refreshed-access",
            refresh_token="rotated-refresh",
            expires_at=NOW + 6 * 3600,
        )

    async def deauthorize(self, access_token: str) -> bool:
        self.deauthorized.append(access_token)
        return True


@pytest.fixture
def store(tmp_path) -> SQLiteStore:
    return SQLiteStore(str(tmp_path / "tokens.db"))


@pytest.fixture
def cipher() -> TokenCipherService:
    return TokenCipherService(secret="secret-key")


def _service(store, cipher, oauth_client) -> StravaTokenService:
    return StravaTokenService(store, oauth_client, cipher, clock=lambda: NOW)


def _seed(service: StravaTokenService, *, expires_at: int) -> None:
    service.store_tokens(
        "42",
        StravaTokenBundle(
            access_token="initial-access",
            refresh_token="initial-refresh",
            expires_at=expires_at,
            athlete={"id": 42, "firstname": "Ada", "lastname": "Lovelace"},
        ),
        scope="read,activity:read_all",
    )


@pytest.mark.asyncio
async def test_valid_token_is_returned_without_refresh(store, cipher) -> None:
    oauth_client = DummyOAuthClient()
    service = _service(store, cipher, oauth_client)
    _seed(service, expires_at=NOW + 3600)

    token = await service.get_valid_access_token("42")

    assert token == "initial-access"
    assert oauth_client.refresh_calls == []


@pytest.mark.asyncio
async def test_token_expiring_within_five_minutes_is_refreshed(store, cipher) -> None:
    oauth_client = DummyOAuthClient()
    service = _service(store, cipher, oauth_client)
    _seed(service, expires_at=NOW + 299)

    token = await service.get_valid_access_token("42")

    assert token == "refreshed-access"
    assert oauth_client.refresh_calls == ["initial-refresh"]

    stored = store.get_account("42")
    assert stored is not None
    assert cipher.decrypt(stored["access_token_encrypted"]) == "refreshed-access"
    assert cipher.decrypt(stored["refresh_token_encrypted"]) == "rotated-refresh"
    assert stored["expires_at"] == NOW + 6 * 3600
    # Refresh responses carry no athlete; the profile from sign-in is kept.
    assert stored["athlete"]["firstname"] == "Ada"
    assert stored["scope"] == "read,activity:read_all"


@pytest.mark.asyncio
async def test_token_outside_window_is_not_refreshed(store, cipher) -> None:
    oauth_client = DummyOAuthClient()
    service = _service(store, cipher, oauth_client)
    _seed(service, expires_at=NOW + 301)

    assert await service.get_valid_access_token("42") == "initial-access"
    assert oauth_client.refresh_calls == []


@pytest.mark.asyncio
async def test_token_expiring_exactly_at_window_edge_is_not_refreshed(store, cipher) -> None:
    oauth_client = DummyOAuthClient()
    service = _service(store, cipher, oauth_client)
    _seed(service, expires_at=NOW + StravaTokenService.REFRESH_WINDOW_SECONDS)

    assert not service.needs_refresh(NOW + 300)
    assert await service.get_valid_access_token("42") == "initial-access"
    assert oauth_client.refresh_calls == []


@pytest.mark.asyncio
async def test_missing_expiry_forces_refresh(store, cipher) -> None:
    oauth_client = DummyOAuthClient()
    service = _service(store, cipher, oauth_client)
    _seed(service, expires_at=0)

    assert await service.get_valid_access_token("42") == "refreshed-access"


@pytest.mark.asyncio
async def test_unknown_user_raises(store, cipher) -> None:
    service = _service(store, cipher, DummyOAuthClient())

    with pytest.raises(OAuthTokenNotFoundError):
        await service.get_valid_access_token("nobody")


@pytest.mark.asyncio
async def test_refresh_failure_propagates_and_keeps_stored_tokens(store, cipher) -> None:
    service = _service(store, cipher, DummyOAuthClient(fail=True))
    _seed(service, expires_at=NOW - 10)

    with pytest.raises(OAuthTokenExchangeError):
        await service.get_valid_access_token("42")

    stored = store.get_account("42")
    assert cipher.decrypt(stored["access_token_encrypted"]) == "initial-access"


@pytest.mark.asyncio
async def test_revoke_deauthorizes_and_forgets_account(store, cipher) -> None:
    oauth_client = DummyOAuthClient()
    service = _service(store, cipher, oauth_client)
    _seed(service, expires_at=NOW + 3600)

    await service.revoke("42")

    assert oauth_client.deauthorized == ["initial-access"]
    assert store.get_account("42") is None
    assert service.get_athlete("42") is None
