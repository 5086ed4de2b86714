"""Global exception handlers — map SDK exceptions to HTTP status codes.

The SDK raises ``ValueError`` for conditions such as an unknown session or
a phase operation in the wrong status.  Rather than catching these in
every route, global handlers inspect the message and pick the status code.
Upstream (language-model) failures map by class and carry a user-facing
message that is safe to return.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from triage_interview.errors import (
    UpstreamAuthError,
    UpstreamError,
    UpstreamRateLimitError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# --- Keyword patterns in ValueError messages and their HTTP status codes ---
# Checked in order; first match wins.
_VALUE_ERROR_PATTERNS: list[tuple[str, int]] = [
    ("not found", 404),
    # Wrong status (e.g. complete_phase2 during phase1)
    ("only valid during", 400),
]

# --- Client-safe messages keyed by HTTP status code ---
_SAFE_MESSAGES: dict[int, str] = {
    404: "Resource not found",
    400: "Invalid request",
}

# --- Upstream error classes and their HTTP status codes ---
_UPSTREAM_STATUS: list[tuple[type[UpstreamError], int]] = [
    (UpstreamAuthError, 401),
    (UpstreamRateLimitError, 429),
]
_UPSTREAM_DEFAULT_STATUS = 502


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map SDK ``ValueError`` to a contextual HTTP error response.

    The raw message is logged server-side; the client gets a generic one.
    """
    msg = str(exc)
    status = 400
    for pattern, code in _VALUE_ERROR_PATTERNS:
        if pattern in msg.lower():
            status = code
            break

    logger.warning("ValueError [%d] at %s: %s", status, request.url, msg)
    safe_detail = _SAFE_MESSAGES.get(status, "Invalid request")
    return JSONResponse(status_code=status, content={"detail": safe_detail})


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Map start-parameter validation failures to 400 with their message."""
    logger.info("ValidationError at %s: %s", request.url, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    """Map language-model failures to 401 / 429 / 502 with the user message."""
    status = _UPSTREAM_DEFAULT_STATUS
    for cls, code in _UPSTREAM_STATUS:
        if isinstance(exc, cls):
            status = code
            break
    logger.warning(
        "%s [%d] at %s: %s", type(exc).__name__, status, request.url, exc.detail or exc.user_message,
    )
    return JSONResponse(status_code=status, content={"detail": exc.user_message})


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    """Map ``KeyError`` (e.g. unknown question id) to 404."""
    logger.warning("KeyError at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
