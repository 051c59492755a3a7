"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_activity_service,
    get_card_renderer,
    get_session_manager,
    get_signed_payload_encoder,
    get_sqlite_store,
    get_strava_api_client,
    get_strava_oauth_client,
    get_strava_token_service,
    get_token_cipher_service,
)
from .config import get_app_settings, get_oauth_settings, get_session_cookie_name
from .session import optional_user_id, require_user_id

__all__ = [
    "get_activity_service",
    "get_app_settings",
    "get_card_renderer",
    "get_oauth_settings",
    "get_session_cookie_name",
    "get_session_manager",
    "get_signed_payload_encoder",
    "get_sqlite_store",
    "get_strava_api_client",
    "get_strava_oauth_client",
    "get_strava_token_service",
    "get_token_cipher_service",
    "optional_user_id",
    "require_user_id",
]
