#  Latam Site - CSRF Token Route
#
#  Issues a token bound to the caller's session cookie, minting the
#  session cookie on first contact.
#
#  Depends on: container.py, services/csrf.py, config.py
#  Used by:    app.py

import logging

from dependency_injector.wiring import inject, Provide
from fastapi import APIRouter, Depends, Request, Response

from latam_site.config import CSRF_TOKEN_TTL, SESSION_COOKIE_NAME, SESSION_COOKIE_SECURE
from latam_site.container import Container
from latam_site.models.schemas import CsrfTokenOut
from latam_site.services.csrf import TokenStore

logger = logging.getLogger("latam_site.csrf")

router = APIRouter(tags=["csrf"])


@router.get("/csrf-token")
@inject
async def get_csrf_token(
    request: Request,
    response: Response,
    token_store: TokenStore = Depends(Provide[Container.token_store]),
) -> CsrfTokenOut:
    """Issue a fresh token for this session; any previous token stops working."""
    session_id = request.cookies.get(SESSION_COOKIE_NAME)
    if not session_id:
        session_id = TokenStore.new_session_id()
        logger.debug("Starting new session")

    token = token_store.issue(session_id)
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_id,
        max_age=int(CSRF_TOKEN_TTL),
        httponly=True,
        samesite="lax",
        secure=SESSION_COOKIE_SECURE,
    )
    return CsrfTokenOut(csrfToken=token.value)
