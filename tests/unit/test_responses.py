#  Latam Site - Error Response Tests
#
#  Tests for the taxonomy -> HTTP status mapping and the uniform error body.
#
#  Depends on: latam_site/responses.py, latam_site/exceptions.py
#  Used by:    pytest

import json

import pytest

from latam_site.exceptions import (
    AuthError,
    CsrfError,
    DeliveryError,
    NotFoundError,
    PayloadTooLargeError,
    RateLimitError,
    SiteError,
    ValidationError,
)
from latam_site.responses import (
    INTERNAL_ERROR_MESSAGE,
    error_response,
    response_for,
    retry_after_seconds,
)


def _body(resp):
    return json.loads(resp.body)


class TestResponseFor:
    @pytest.mark.parametrize("exc, status", [
        (ValidationError("bad"), 400),
        (PayloadTooLargeError("big"), 413),
        (AuthError("no"), 403),
        (CsrfError("no token"), 403),
        (DeliveryError("smtp down"), 500),
    ])
    def test_status_mapping(self, exc, status):
        resp = response_for(exc)
        assert resp.status_code == status
        assert _body(resp) == {"error": str(exc)}

    def test_not_found_includes_path(self):
        resp = response_for(NotFoundError("/missing?x=1"))
        assert resp.status_code == 404
        assert _body(resp) == {"error": "Ruta no encontrada", "path": "/missing?x=1"}

    def test_rate_limit_sets_retry_after(self):
        resp = response_for(RateLimitError("Demasiadas solicitudes", retry_after=41.2))
        assert resp.status_code == 429
        assert resp.headers["retry-after"] == "42"
        assert _body(resp) == {"error": "Demasiadas solicitudes", "retryAfter": 42}

    def test_rate_limit_with_ceiling_adds_quota_headers(self):
        resp = response_for(RateLimitError("Demasiadas solicitudes", retry_after=5, limit=100))
        assert resp.headers["x-ratelimit-limit"] == "100"
        assert resp.headers["x-ratelimit-remaining"] == "0"

    def test_unknown_site_error_hides_detail(self):
        resp = response_for(SiteError("internal detail"))
        assert resp.status_code == 500
        assert _body(resp) == {"error": INTERNAL_ERROR_MESSAGE}


class TestHelpers:
    @pytest.mark.parametrize("raw, expected", [(0, 1), (0.2, 1), (1.0, 1), (59.01, 60)])
    def test_retry_after_rounds_up(self, raw, expected):
        assert retry_after_seconds(raw) == expected

    def test_error_response_omits_path_when_absent(self):
        assert _body(error_response(400, "x")) == {"error": "x"}
