#  Latam Site - Error Responses
#
#  Uniform JSON error body {"error": ..., "path"?: ...} shared by the
#  exception handlers in app.py and the ASGI middleware that rejects
#  requests before routing.
#
#  Depends on: exceptions.py
#  Used by:    app.py, middleware/sanitize.py

import math

from fastapi.responses import JSONResponse

from latam_site.exceptions import (
    AuthError,
    DeliveryError,
    NotFoundError,
    PayloadTooLargeError,
    RateLimitError,
    SiteError,
    ValidationError,
)

INTERNAL_ERROR_MESSAGE = "Error interno del servidor"


def error_response(status_code: int, message: str, path: str | None = None,
                   headers: dict | None = None, **extra) -> JSONResponse:
    content = {"error": message}
    if path is not None:
        content["path"] = path
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def retry_after_seconds(retry_after: float) -> int:
    """Whole seconds for the Retry-After header, never below 1."""
    return max(1, math.ceil(retry_after))


def rate_limit_headers(limit: int, remaining: int) -> dict[str, str]:
    return {"X-RateLimit-Limit": str(limit), "X-RateLimit-Remaining": str(remaining)}


def response_for(exc: SiteError) -> JSONResponse:
    """Map a taxonomy error to its HTTP response."""
    if isinstance(exc, NotFoundError):
        return error_response(404, str(exc), path=exc.path)
    if isinstance(exc, RateLimitError):
        seconds = retry_after_seconds(exc.retry_after)
        headers = {"Retry-After": str(seconds)}
        if exc.limit:
            headers.update(rate_limit_headers(exc.limit, 0))
        return error_response(
            429, str(exc),
            headers=headers,
            retryAfter=seconds,
        )
    if isinstance(exc, PayloadTooLargeError):
        return error_response(413, str(exc))
    if isinstance(exc, ValidationError):
        return error_response(400, str(exc))
    if isinstance(exc, AuthError):
        return error_response(403, str(exc))
    if isinstance(exc, DeliveryError):
        return error_response(500, str(exc))
    return error_response(500, INTERNAL_ERROR_MESSAGE)
