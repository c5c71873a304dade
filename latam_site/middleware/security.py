#  Latam Site - Security Headers
#
#  Adds CSP, HSTS and the usual hardening headers to every response,
#  including gate rejections.
#
#  Depends on: config.py
#  Used by:    app.py

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from latam_site.config import CSP_DIRECTIVES, HSTS_MAX_AGE


def build_csp(directives: dict[str, list[str]]) -> str:
    """Render a directive map as a Content-Security-Policy value.

    Directives with no sources (e.g. upgrade-insecure-requests) render bare.
    """
    parts = []
    for name, sources in directives.items():
        parts.append(" ".join([name, *sources]) if sources else name)
    return "; ".join(parts)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, directives: dict[str, list[str]] | None = None,
                 hsts_max_age: int = HSTS_MAX_AGE):
        super().__init__(app)
        self._headers = {
            "Content-Security-Policy": build_csp(directives or CSP_DIRECTIVES),
            "Strict-Transport-Security": f"max-age={hsts_max_age}; includeSubDomains; preload",
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "SAMEORIGIN",
            "X-XSS-Protection": "0",
            "Referrer-Policy": "strict-origin-when-cross-origin",
            "Cross-Origin-Opener-Policy": "same-origin",
            "X-DNS-Prefetch-Control": "off",
        }

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in self._headers.items():
            response.headers.setdefault(name, value)
        return response
