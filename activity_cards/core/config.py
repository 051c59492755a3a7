"""
Application configuration models and helpers.

Centralizes settings management so the web routes, the Strava clients and the
maintenance scripts share one configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

import os

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


def _split_csv(value: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
    if isinstance(value, tuple):
        return value
    if isinstance(value, list):
        return tuple(value)
    return tuple(item.strip() for item in value.split(",") if item.strip())


class StravaSettings(BaseSettings):
    """Configuration required for interacting with the Strava API."""

    model_config = SettingsConfigDict(populate_by_name=True)

    client_id: str = Field(..., validation_alias="STRAVA_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="STRAVA_CLIENT_SECRET")
    redirect_uri: AnyHttpUrl = Field(..., validation_alias="STRAVA_REDIRECT_URI")
    api_base_url: str = Field(
        "https://www.strava.com/api/v3", validation_alias="STRAVA_API_BASE_URL"
    )
    authorize_url: str = Field(
        "https://www.strava.com/oauth/authorize", validation_alias="STRAVA_OAUTH_URL"
    )
    token_url: str = Field(
        "https://www.strava.com/oauth/token", validation_alias="STRAVA_TOKEN_URL"
    )
    deauthorize_url: str = Field(
        "https://www.strava.com/oauth/deauthorize",
        validation_alias="STRAVA_DEAUTHORIZE_URL",
    )


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens."
        ),
    )
    previous_token_encryption_secrets: Annotated[tuple[str, ...], NoDecode] = Field(
        (),
        validation_alias="TOKEN_ENCRYPTION_PREVIOUS_SECRETS",
        description="Comma-separated secrets that stored tokens may still be encrypted with.",
    )
    session_secret: Optional[str] = Field(
        None,
        validation_alias="SESSION_SECRET",
        description="Secret used to sign session cookies and OAuth state.",
    )

    @field_validator("previous_token_encryption_secrets", mode="before")
    @classmethod
    def _split_previous_secrets(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        return _split_csv(value)


class OAuthSettings(BaseSettings):
    """OAuth flow configuration."""

    state_ttl_seconds: int = Field(900, validation_alias="OAUTH_STATE_TTL")
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("read", "activity:read_all", "profile:read_all"),
        validation_alias="OAUTH_SCOPES",
    )
    approval_prompt: str = Field("auto", validation_alias="OAUTH_APPROVAL_PROMPT")

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        return _split_csv(value)


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    database_path: str = Field(
        "data/activity_cards.db", validation_alias="DATABASE_PATH"
    )
    activities_per_page: int = Field(30, validation_alias="ACTIVITIES_PER_PAGE")
    activity_cache_ttl_seconds: int = Field(
        300,
        validation_alias="ACTIVITY_CACHE_TTL",
        description="How long a fetched activity listing is served from cache.",
    )
    session_cookie_name: str = Field(
        "activity_cards_session", validation_alias="SESSION_COOKIE_NAME"
    )
    session_ttl_seconds: int = Field(
        60 * 60 * 24 * 30, validation_alias="SESSION_TTL_SECONDS"
    )
    http_timeout_seconds: float = Field(10.0, validation_alias="HTTP_TIMEOUT_SECONDS")
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    strava: StravaSettings = Field(default_factory=StravaSettings)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in {"prod", "production"}


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "OAuthSettings",
    "SecuritySettings",
    "StravaSettings",
    "get_settings",
]
