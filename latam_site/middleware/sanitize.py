#  Latam Site - Request Sanitizer
#
#  Pure ASGI middleware: enforces the body size limit, then strips keys that
#  look like query-operator injection ("$where", "a.b") from JSON and
#  urlencoded bodies and from the query string, before anything downstream
#  reads the request.
#
#  Depends on: responses.py, exceptions.py
#  Used by:    app.py

import json
import logging
from urllib.parse import parse_qsl, urlencode

from latam_site.exceptions import PayloadTooLargeError, ValidationError
from latam_site.responses import response_for

logger = logging.getLogger("latam_site.sanitize")

_TOO_LARGE = "El cuerpo de la solicitud excede el tamaño permitido"
_BAD_JSON = "JSON inválido en el cuerpo de la solicitud"


def is_prohibited_key(key: str) -> bool:
    return key.startswith("$") or "." in key


def sanitize_value(value):
    """Return (clean_value, removed) with prohibited keys dropped recursively."""
    if isinstance(value, dict):
        clean = {}
        removed = False
        for key, item in value.items():
            if isinstance(key, str) and is_prohibited_key(key):
                removed = True
                continue
            clean[key], child_removed = sanitize_value(item)
            removed = removed or child_removed
        return clean, removed
    if isinstance(value, list):
        clean_items = []
        removed = False
        for item in value:
            clean_item, child_removed = sanitize_value(item)
            clean_items.append(clean_item)
            removed = removed or child_removed
        return clean_items, removed
    return value, False


def sanitize_pairs(pairs: list[tuple[str, str]]) -> tuple[list[tuple[str, str]], bool]:
    """Urlencoded form: keys may use bracket/dot syntax, so check the base name too."""
    kept = [(k, v) for k, v in pairs if not is_prohibited_key(k) and "[$" not in k]
    return kept, len(kept) != len(pairs)


class RequestSanitizerMiddleware:
    def __init__(self, app, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")

        query = scope.get("query_string", b"")
        if query:
            pairs = parse_qsl(query.decode("latin-1"), keep_blank_values=True)
            kept, removed = sanitize_pairs(pairs)
            if removed:
                logger.warning("Removed prohibited query keys on %s", path)
                scope = dict(scope, query_string=urlencode(kept).encode("latin-1"))

        headers = dict(scope.get("headers") or [])
        declared = headers.get(b"content-length")
        if declared is not None and declared.isdigit() and int(declared) > self.max_body_bytes:
            await self._reject(PayloadTooLargeError(_TOO_LARGE), scope, receive, send)
            return

        if scope.get("method") in ("GET", "HEAD", "OPTIONS") and declared is None:
            await self.app(scope, receive, send)
            return

        body = b""
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            body += message.get("body", b"")
            more_body = message.get("more_body", False)
            if len(body) > self.max_body_bytes:
                await self._reject(PayloadTooLargeError(_TOO_LARGE), scope, receive, send)
                return

        content_type = headers.get(b"content-type", b"").decode("latin-1").lower()
        if body and content_type.startswith("application/json"):
            try:
                data = json.loads(body)
            except ValueError:
                await self._reject(ValidationError(_BAD_JSON), scope, receive, send)
                return
            data, removed = sanitize_value(data)
            if removed:
                logger.warning("Removed prohibited body keys on %s", path)
                body = json.dumps(data).encode()
        elif body and content_type.startswith("application/x-www-form-urlencoded"):
            pairs = parse_qsl(body.decode("latin-1"), keep_blank_values=True)
            kept, removed = sanitize_pairs(pairs)
            if removed:
                logger.warning("Removed prohibited form keys on %s", path)
                body = urlencode(kept).encode("latin-1")

        raw_headers = [
            (k, v) for k, v in scope.get("headers") or [] if k != b"content-length"
        ]
        raw_headers.append((b"content-length", str(len(body)).encode()))
        scope = dict(scope, headers=raw_headers)

        replayed = False

        async def replay():
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, exc, scope, receive, send):
        logger.warning("Rejected request to %s: %s", scope.get("path", ""), exc)
        response = response_for(exc)
        await response(scope, receive, send)
