"""Signed-cookie sessions for signed-in athletes."""

from __future__ import annotations

import logging
import time
from typing import Callable

from activity_cards.clients.strava_auth import InvalidSignatureError, SignedPayloadEncoder

logger = logging.getLogger(__name__)


class SessionManager:
    """Issue and read session cookie values carrying the athlete's user id."""

    def __init__(
        self,
        encoder: SignedPayloadEncoder,
        *,
        ttl_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._encoder = encoder
        self._ttl_seconds = ttl_seconds
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def issue(self, user_id: str) -> str:
        return self._encoder.encode(
            {"kind": "session", "user_id": user_id, "issued_at": int(self._clock())}
        )

    def read(self, cookie_value: str | None) -> str | None:
        """Return the user id for a valid, unexpired cookie value."""
        if not cookie_value:
            return None
        try:
            payload = self._encoder.decode(cookie_value)
        except InvalidSignatureError:
            logger.info("Ignoring session cookie with invalid signature")
            return None

        if payload.get("kind") != "session":
            return None
        issued_at = payload.get("issued_at")
        if not isinstance(issued_at, int) or self._clock() - issued_at > self._ttl_seconds:
            return None
        user_id = payload.get("user_id")
        return str(user_id) if user_id else None


__all__ = ["SessionManager"]
