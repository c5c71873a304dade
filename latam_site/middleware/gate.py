#  Latam Site - Request Gate Dependencies
#
#  FastAPI dependencies that gate routes after the ASGI middleware has run:
#  general_rate_limit -> csrf_protect (router level), then contact_rate_limit
#  (contact route only). Each raises a taxonomy error that app.py turns into
#  the uniform JSON error body.
#
#  Depends on: container.py, rate_limit.py, responses.py, services/csrf.py, config.py
#  Used by:    app.py, routes/contact.py

import logging

from dependency_injector.wiring import inject, Provide
from fastapi import Depends, Request, Response

from latam_site.config import CSRF_BODY_FIELD, CSRF_HEADER_NAME, SESSION_COOKIE_NAME
from latam_site.container import Container
from latam_site.exceptions import CsrfError, RateLimitError
from latam_site.rate_limit import CONTACT, GENERAL, RateLimiter, get_client_identity
from latam_site.responses import rate_limit_headers
from latam_site.services.csrf import TokenStore

logger = logging.getLogger("latam_site.gate")

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})

_CSRF_REJECTED = "Token CSRF inválido o ausente"


def _enforce(rate_limiter: RateLimiter, policy: str, request: Request,
             response: Response) -> None:
    identity = get_client_identity(request)
    decision = rate_limiter.allow(policy, identity)
    if not decision.allowed:
        logger.warning(
            "Rate limit '%s' exceeded by %s on %s (retry in %.0fs)",
            policy, identity, request.url.path, decision.retry_after,
        )
        raise RateLimitError(
            rate_limiter.policy(policy).message,
            retry_after=decision.retry_after,
            policy=policy,
            limit=decision.limit,
        )
    # A later, stricter policy on the same route overwrites these
    response.headers.update(rate_limit_headers(decision.limit, decision.remaining))


@inject
async def general_rate_limit(
    request: Request,
    response: Response,
    rate_limiter: RateLimiter = Depends(Provide[Container.rate_limiter]),
) -> None:
    """Per-identity quota shared by every gated route."""
    _enforce(rate_limiter, GENERAL, request, response)


@inject
async def contact_rate_limit(
    request: Request,
    response: Response,
    rate_limiter: RateLimiter = Depends(Provide[Container.rate_limiter]),
) -> None:
    """Stricter quota for contact-form submissions, independent of the general one."""
    _enforce(rate_limiter, CONTACT, request, response)


async def _presented_token(request: Request) -> str | None:
    """Token from the X-CSRF-Token header, else from a `_csrf` body field."""
    token = request.headers.get(CSRF_HEADER_NAME)
    if token:
        return token

    content_type = request.headers.get("content-type", "")
    value = None
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            value = body.get(CSRF_BODY_FIELD)
    elif content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        value = form.get(CSRF_BODY_FIELD)
    return value if isinstance(value, str) else None


@inject
async def csrf_protect(
    request: Request,
    token_store: TokenStore = Depends(Provide[Container.token_store]),
) -> None:
    """Reject state-changing requests without the session's current token.

    Tokens are single-use: a request that passes consumes its token.
    """
    if request.method in SAFE_METHODS:
        return

    session_id = request.cookies.get(SESSION_COOKIE_NAME)
    presented = await _presented_token(request)
    if not token_store.validate(session_id, presented):
        logger.warning(
            "CSRF check failed on %s %s (session=%s, token=%s)",
            request.method, request.url.path,
            "present" if session_id else "missing",
            "present" if presented else "missing",
        )
        raise CsrfError(_CSRF_REJECTED)

    token_store.revoke(session_id)
