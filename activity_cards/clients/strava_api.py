"""Thin asynchronous client for the Strava REST API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from fastapi import status

from activity_cards.utils.http import RetryConfig, request_with_retry

logger = logging.getLogger(__name__)


class StravaAPIError(Exception):
    """Raised when the Strava API responds with an unexpected status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StravaAPIClient:
    """Fetch athlete and activity records on behalf of an access token."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        retry_config: RetryConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retry_config = retry_config or RetryConfig()
        self._transport = transport

    async def list_activities(
        self, access_token: str, *, per_page: int = 30, page: int = 1
    ) -> List[Dict[str, Any]]:
        """Return the athlete's most recent activities, newest first."""
        response = await self._get(
            access_token,
            "/athlete/activities",
            params={"per_page": per_page, "page": page},
        )
        payload = response.json()
        if not isinstance(payload, list):
            raise StravaAPIError("Unexpected activity listing payload.")
        return payload

    async def get_activity(
        self, access_token: str, activity_id: int
    ) -> Optional[Dict[str, Any]]:
        """Return a single activity, or ``None`` when Strava does not know it."""
        try:
            response = await self._get(access_token, f"/activities/{activity_id}")
        except StravaAPIError as exc:
            if exc.status_code == status.HTTP_404_NOT_FOUND:
                return None
            raise
        return response.json()

    async def get_athlete(self, access_token: str) -> Dict[str, Any]:
        """Return the profile of the athlete who owns ``access_token``."""
        response = await self._get(access_token, "/athlete")
        payload = response.json()
        if not isinstance(payload, dict):
            raise StravaAPIError("Unexpected athlete payload.")
        return payload

    async def _get(
        self,
        access_token: str,
        path: str,
        *,
        params: Dict[str, Any] | None = None,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {access_token}"}
        async with httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            response = await request_with_retry(
                client.get,
                path,
                params=params,
                headers=headers,
                retry_config=self._retry_config,
            )

        if response.status_code != status.HTTP_200_OK:
            logger.warning("Strava API %s returned %s", path, response.status_code)
            raise StravaAPIError(
                f"Strava API request to {path} failed with status {response.status_code}",
                status_code=response.status_code,
            )
        return response


__all__ = ["StravaAPIClient", "StravaAPIError"]
