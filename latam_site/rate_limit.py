#  Latam Site - Rate Limiter
#
#  Shared slowapi limiter instance (storage + fixed-window strategy) and the
#  policy layer the request gate calls: one bucket per (policy, identity),
#  counted in the configured `limits` storage.
#
#  Depends on: config.py
#  Used by:    container.py, middleware/gate.py

import time
from dataclasses import dataclass
from typing import NamedTuple

from limits import RateLimitItem, parse
from limits.strategies import RateLimiter as WindowStrategy
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from latam_site.config import (
    RATE_LIMIT_CONTACT,
    RATE_LIMIT_GENERAL,
    RATE_LIMIT_STORAGE_URI,
    TRUST_PROXY,
)

GENERAL = "general"
CONTACT = "contact"


def get_client_identity(request: Request) -> str:
    """Rate-limit key for a request: the source address.

    Behind a trusted proxy the first X-Forwarded-For hop is the client.
    """
    if TRUST_PROXY:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return get_remote_address(request)


# Holder for the configured `limits` storage and fixed-window strategy
# (`limiter.limiter`). Routes are gated by the dependencies in
# middleware/gate.py, not by `@limiter.limit` decorators.
limiter = Limiter(
    key_func=get_client_identity,
    storage_uri=RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
)


@dataclass(frozen=True)
class RatePolicy:
    name: str
    limit: RateLimitItem
    message: str

    @classmethod
    def from_string(cls, name: str, limit: str, message: str) -> "RatePolicy":
        return cls(name=name, limit=parse(limit), message=message)

    @property
    def window_seconds(self) -> int:
        return self.limit.get_expiry()


class RateDecision(NamedTuple):
    allowed: bool
    retry_after: float | None = None
    remaining: int = 0
    limit: int = 0


def default_policies() -> list[RatePolicy]:
    return [
        RatePolicy.from_string(
            GENERAL, RATE_LIMIT_GENERAL,
            "Demasiadas solicitudes desde esta IP, intente nuevamente más tarde",
        ),
        RatePolicy.from_string(
            CONTACT, RATE_LIMIT_CONTACT,
            "Has alcanzado el límite de envíos. Intenta nuevamente en 1 hora",
        ),
    ]


class RateLimiter:
    """Evaluates named policies against fixed-window buckets.

    The window starts at an identity's first hit and every hit counts, so a
    denied request still advances the bucket. Buckets expire with their
    window inside the storage; nothing here holds per-identity state.
    """

    def __init__(self, strategy: WindowStrategy, policies: list[RatePolicy]):
        self._strategy = strategy
        self._policies = {p.name: p for p in policies}

    def policy(self, name: str) -> RatePolicy:
        return self._policies[name]

    def allow(self, policy: str, identity: str) -> RateDecision:
        p = self._policies[policy]
        if self._strategy.hit(p.limit, p.name, identity):
            stats = self._strategy.get_window_stats(p.limit, p.name, identity)
            return RateDecision(allowed=True, remaining=stats.remaining, limit=p.limit.amount)
        stats = self._strategy.get_window_stats(p.limit, p.name, identity)
        return RateDecision(
            allowed=False,
            retry_after=max(stats.reset_time - time.time(), 0.0),
            limit=p.limit.amount,
        )
