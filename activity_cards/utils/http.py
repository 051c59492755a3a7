"""HTTP utilities providing retry/backoff semantics."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class RetryConfig:
    def __init__(self, *, attempts: int = 3, backoff_seconds: float = 0.5) -> None:
        self.attempts = attempts
        self.backoff_seconds = backoff_seconds


async def request_with_retry(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    retry_config: RetryConfig | None = None,
    **kwargs,
) -> httpx.Response:
    """Call ``func`` until it returns a non-retryable response.

    Transport failures and throttling/server errors are retried with linear
    backoff. Client errors are returned to the caller untouched.
    """
    config = retry_config or RetryConfig()
    attempt = 0
    last_exception: Exception | None = None
    response: httpx.Response | None = None

    while attempt < config.attempts:
        try:
            response = await func(*args, **kwargs)
            last_exception = None
        except httpx.TransportError as exc:
            last_exception = exc
            response = None
        else:
            if response.status_code not in RETRYABLE_STATUS_CODES:
                return response

        attempt += 1
        if attempt >= config.attempts:
            break
        logger.debug("Retrying request (attempt %s of %s)", attempt + 1, config.attempts)
        await asyncio.sleep(config.backoff_seconds * attempt)

    if last_exception is not None:
        raise last_exception
    if response is None:
        raise RuntimeError("Request failed without raising an exception")
    return response


__all__ = ["RETRYABLE_STATUS_CODES", "RetryConfig", "request_with_retry"]
