"""
FastAPI dependencies exposing settings, or one settings group, to routes.

Everything resolves through ``get_app_settings`` so a single dependency
override swaps the configuration seen by every route.
"""

from typing import Annotated

from fastapi import Depends

from activity_cards.core.config import AppSettings, OAuthSettings, get_settings


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning application settings."""
    return get_settings()


def get_oauth_settings(
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> OAuthSettings:
    """State lifetime, scopes and approval prompt for the Strava sign-in routes."""
    return settings.oauth


def get_session_cookie_name(
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> str:
    return settings.session_cookie_name


__all__ = ["get_app_settings", "get_oauth_settings", "get_session_cookie_name"]
