"""
Activity retrieval with a short-lived SQLite cache in front of the Strava API.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import httpx
from pydantic import ValidationError

from activity_cards.clients import SQLiteStore, StravaAPIClient, StravaAPIError
from activity_cards.clients.strava_auth import (
    OAuthTokenExchangeError,
    OAuthTokenNotFoundError,
)
from activity_cards.models import Activity
from activity_cards.services.strava_tokens import StravaTokenService

logger = logging.getLogger(__name__)

_FETCH_ERRORS = (
    StravaAPIError,
    httpx.HTTPError,
    OAuthTokenNotFoundError,
    OAuthTokenExchangeError,
    ValidationError,
    ValueError,
)


class ActivityService:
    """Lists and loads activities for a signed-in athlete."""

    def __init__(
        self,
        *,
        api_client: StravaAPIClient,
        token_service: StravaTokenService,
        store: SQLiteStore,
        per_page: int = 30,
        cache_ttl_seconds: int = 300,
    ) -> None:
        self._api = api_client
        self._tokens = token_service
        self._store = store
        self._per_page = per_page
        self._cache_ttl = timedelta(seconds=cache_ttl_seconds)

    async def list_recent(
        self, user_id: str, *, page: int = 1, force_refresh: bool = False
    ) -> List[Activity]:
        """Return recent activities; an empty list when Strava cannot be reached."""
        if not force_refresh:
            cached = self._cached_listing(user_id, page)
            if cached is not None:
                return cached

        try:
            access_token = await self._tokens.get_valid_access_token(user_id)
            payload = await self._api.list_activities(
                access_token, per_page=self._per_page, page=page
            )
            activities = [Activity.model_validate(item) for item in payload]
        except _FETCH_ERRORS:
            logger.exception("Error fetching Strava activities for user %s", user_id)
            return []

        self._store.put_activities(user_id, payload)
        self._store.put_activity_listing(user_id, page, [a.id for a in activities])
        return activities

    async def get_activity(self, user_id: str, activity_id: int) -> Optional[Activity]:
        """Return the detailed activity from cache or Strava, or ``None`` if unavailable.

        Summaries cached by :meth:`list_recent` are not trusted here since the
        listing endpoint omits detail-only fields.
        """
        cached = self._store.get_activity(user_id, activity_id, detailed_only=True)
        if cached is not None:
            try:
                return Activity.model_validate(cached)
            except ValidationError:
                logger.warning("Discarding malformed cached activity %s", activity_id)

        try:
            access_token = await self._tokens.get_valid_access_token(user_id)
            payload = await self._api.get_activity(access_token, activity_id)
            if payload is None:
                return None
            activity = Activity.model_validate(payload)
        except _FETCH_ERRORS:
            logger.exception("Error fetching Strava activity %s", activity_id)
            return None

        self._store.put_activities(user_id, [payload], detailed=True)
        return activity

    def _cached_listing(self, user_id: str, page: int) -> Optional[List[Activity]]:
        listing = self._store.get_activity_listing(user_id, page)
        if listing is None:
            return None
        activity_ids, fetched_at = listing
        if fetched_at.tzinfo is None:
            fetched_at = fetched_at.replace(tzinfo=timezone.utc)
        if datetime.now(timezone.utc) - fetched_at > self._cache_ttl:
            return None

        activities: List[Activity] = []
        for activity_id in activity_ids:
            payload = self._store.get_activity(user_id, activity_id)
            if payload is None:
                # Partially evicted listing; let the caller refetch.
                return None
            activities.append(Activity.model_validate(payload))
        return activities


__all__ = ["ActivityService"]
