#  Latam Site - CSRF Token Store
#
#  Issues and validates anti-forgery tokens bound to a session id.
#  One active token per session; issue() overwrites, revoke() consumes.
#
#  Depends on: services/store.py, config.py
#  Used by:    container.py, routes/csrf.py, middleware/gate.py

import hmac
import logging
import secrets
import time
from dataclasses import dataclass

from latam_site.config import CSRF_TOKEN_TTL
from latam_site.services.store import KeyValueStore

logger = logging.getLogger("latam_site.csrf")

_KEY_PREFIX = "csrf:"


@dataclass(frozen=True)
class CsrfToken:
    value: str
    issued_at: float
    session_id: str


class TokenStore:
    """Server-side CSRF tokens keyed by session id."""

    def __init__(self, store: KeyValueStore, ttl_seconds: float = CSRF_TOKEN_TTL,
                 clock=time.time):
        self._store = store
        self._ttl = ttl_seconds
        self._clock = clock

    @staticmethod
    def new_session_id() -> str:
        return secrets.token_urlsafe(32)

    def issue(self, session_id: str) -> CsrfToken:
        token = CsrfToken(
            value=secrets.token_urlsafe(32),
            issued_at=self._clock(),
            session_id=session_id,
        )
        self._store.set(_KEY_PREFIX + session_id, token, ttl=self._ttl)
        logger.debug("Issued CSRF token for session %s…", session_id[:8])
        return token

    def validate(self, session_id: str | None, presented: str | None) -> bool:
        """True iff the session has a live token equal to ``presented``.

        Never raises; missing session, missing token, expiry and mismatch
        all return False.
        """
        if not session_id or not presented:
            return False
        token: CsrfToken | None = self._store.get(_KEY_PREFIX + session_id)
        if token is None:
            return False
        if self._clock() - token.issued_at >= self._ttl:
            return False
        return hmac.compare_digest(token.value.encode(), presented.encode())

    def revoke(self, session_id: str) -> None:
        self._store.evict(_KEY_PREFIX + session_id)
