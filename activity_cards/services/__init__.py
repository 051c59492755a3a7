"""Service layer exports."""

from .activities import ActivityService
from .sessions import SessionManager
from .strava_tokens import StravaTokenService
from .token_cipher import TokenCipherService

__all__ = [
    "ActivityService",
    "SessionManager",
    "StravaTokenService",
    "TokenCipherService",
]
