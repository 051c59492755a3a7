"""Expose constructed client wrappers."""

from .sqlite_store import SQLiteStore
from .strava_api import StravaAPIClient, StravaAPIError
from .strava_auth import (
    InvalidSignatureError,
    OAuthTokenExchangeError,
    OAuthTokenNotFoundError,
    SignedPayloadEncoder,
    StravaOAuthClient,
    StravaTokenBundle,
)

__all__ = [
    "InvalidSignatureError",
    "OAuthTokenExchangeError",
    "OAuthTokenNotFoundError",
    "SQLiteStore",
    "SignedPayloadEncoder",
    "StravaAPIClient",
    "StravaAPIError",
    "StravaOAuthClient",
    "StravaTokenBundle",
]
