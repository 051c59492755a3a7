"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from activity_cards.cards import CardRenderer
from activity_cards.clients import (
    SignedPayloadEncoder,
    SQLiteStore,
    StravaAPIClient,
    StravaOAuthClient,
)
from activity_cards.core.config import get_settings
from activity_cards.services import (
    ActivityService,
    SessionManager,
    StravaTokenService,
    TokenCipherService,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_signed_payload_encoder() -> SignedPayloadEncoder:
    """Signer for OAuth state and session cookies."""
    settings = _settings()
    secret = settings.security.session_secret or settings.strava.client_secret
    return SignedPayloadEncoder(secret_key=secret)


@lru_cache()
def get_strava_oauth_client() -> StravaOAuthClient:
    """Create a singleton Strava OAuth client."""
    settings = _settings()
    return StravaOAuthClient(
        settings.strava, settings.oauth, timeout=settings.http_timeout_seconds
    )


@lru_cache()
def get_strava_api_client() -> StravaAPIClient:
    """Provide the Strava REST client."""
    settings = _settings()
    return StravaAPIClient(
        settings.strava.api_base_url, timeout=settings.http_timeout_seconds
    )


@lru_cache()
def get_sqlite_store() -> SQLiteStore:
    """Provide shared SQLite record store."""
    settings = _settings()
    return SQLiteStore(settings.database_path)


@lru_cache()
def get_token_cipher_service() -> TokenCipherService:
    """Provide symmetric encryption helper for token storage."""
    settings = _settings()
    secret = settings.security.token_encryption_secret or settings.strava.client_secret
    return TokenCipherService(
        secret=secret,
        previous_secrets=settings.security.previous_token_encryption_secrets,
    )


@lru_cache()
def get_strava_token_service() -> StravaTokenService:
    """Provide helper for managing Strava OAuth tokens."""
    return StravaTokenService(
        store=get_sqlite_store(),
        oauth_client=get_strava_oauth_client(),
        token_cipher=get_token_cipher_service(),
    )


@lru_cache()
def get_session_manager() -> SessionManager:
    settings = _settings()
    return SessionManager(
        get_signed_payload_encoder(), ttl_seconds=settings.session_ttl_seconds
    )


def get_activity_service() -> ActivityService:
    """Build an activity service backed by the shared store and clients."""
    settings = _settings()
    return ActivityService(
        api_client=get_strava_api_client(),
        token_service=get_strava_token_service(),
        store=get_sqlite_store(),
        per_page=settings.activities_per_page,
        cache_ttl_seconds=settings.activity_cache_ttl_seconds,
    )


@lru_cache()
def get_card_renderer() -> CardRenderer:
    return CardRenderer()


__all__ = [
    "get_activity_service",
    "get_card_renderer",
    "get_session_manager",
    "get_signed_payload_encoder",
    "get_sqlite_store",
    "get_strava_api_client",
    "get_strava_oauth_client",
    "get_strava_token_service",
    "get_token_cipher_service",
]
