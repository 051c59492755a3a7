"""
Dependencies resolving the signed-in athlete from the session cookie.
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status

from activity_cards.dependencies.clients import get_session_manager
from activity_cards.dependencies.config import get_session_cookie_name
from activity_cards.services import SessionManager


def optional_user_id(
    request: Request,
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
    cookie_name: Annotated[str, Depends(get_session_cookie_name)],
) -> Optional[str]:
    """User id of the signed-in athlete, or ``None`` for anonymous visitors."""
    return sessions.read(request.cookies.get(cookie_name))


def require_user_id(
    user_id: Annotated[Optional[str], Depends(optional_user_id)],
) -> str:
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign in with Strava to continue.",
        )
    return user_id


__all__ = ["optional_user_id", "require_user_id"]
