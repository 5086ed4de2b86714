"""Retry-with-backoff and HTTP error classification for provider calls.

Only server-class failures are retried: 5xx responses and transport
errors (connection failures, timeouts).  A 4xx response is returned to
the caller immediately; any other ``httpx.RequestError`` is raised at once
as ``UpstreamGenericError``.  The delay before attempt ``n + 1`` is
``base_delay * 2 ** (n - 1)``, i.e. 1s, 2s, 4s with the defaults.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

from triage_interview.constants import RETRY_BASE_DELAY, RETRY_MAX_ATTEMPTS
from triage_interview.errors import (
    UpstreamAuthError,
    UpstreamError,
    UpstreamGenericError,
    UpstreamRateLimitError,
)

logger = logging.getLogger(__name__)

SendFn = Callable[[], Awaitable[httpx.Response]]
SleepFn = Callable[[float], Awaitable[None]]


async def send_with_retry(
    send: SendFn,
    *,
    max_attempts: int = RETRY_MAX_ATTEMPTS,
    base_delay: float = RETRY_BASE_DELAY,
    sleep: SleepFn = asyncio.sleep,
) -> httpx.Response:
    """Call *send* until it yields a non-5xx response or attempts run out.

    Returns the last response (which may still be 5xx after the final
    attempt).  A transport error on the final attempt is raised as
    ``UpstreamGenericError``.
    """
    attempts = max(1, max_attempts)
    for attempt in range(1, attempts + 1):
        try:
            response = await send()
        except httpx.TransportError as exc:
            if attempt == attempts:
                detail = str(exc) or type(exc).__name__
                logger.warning("Provider unreachable after %d attempts: %s", attempts, detail)
                raise UpstreamGenericError.from_detail(detail) from exc
            logger.info("Transport error on attempt %d/%d: %s", attempt, attempts, exc)
        except httpx.RequestError as exc:
            # TooManyRedirects, DecodingError: never retried
            detail = str(exc) or type(exc).__name__
            logger.warning("Provider request failed: %s", detail)
            raise UpstreamGenericError.from_detail(detail) from exc
        else:
            if response.status_code < 500 or attempt == attempts:
                return response
            logger.info(
                "Server error %d on attempt %d/%d", response.status_code, attempt, attempts
            )

        await sleep(base_delay * 2 ** (attempt - 1))

    # Unreachable: the final attempt either returns or raises
    raise UpstreamGenericError.from_detail("Request failed after retries")


def _error_detail(response: httpx.Response) -> str:
    """Best-effort human-readable error text from a provider response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return f"{response.status_code} {error['message']}"
        if isinstance(error, str):
            return f"{response.status_code} {error}"
    text = response.text.strip()
    return f"{response.status_code} {text}" if text else f"HTTP {response.status_code}"


def classify_http_error(response: httpx.Response) -> UpstreamError:
    """Map a non-2xx provider response to an upstream error kind.

    401 / 403 -> ``UpstreamAuthError``; 429 -> ``UpstreamRateLimitError``;
    anything else -> ``UpstreamGenericError`` with a truncated diagnostic.
    """
    detail = _error_detail(response)
    status = response.status_code
    if status in (401, 403):
        return UpstreamAuthError(detail=detail)
    if status == 429:
        return UpstreamRateLimitError(detail=detail)
    return UpstreamGenericError.from_detail(detail)
