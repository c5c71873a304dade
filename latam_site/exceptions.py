#  Latam Site - Custom Exceptions
#
#  Typed exception hierarchy so the gate stages and routes can map failures
#  to HTTP status codes without pattern-matching on message strings.
#  Messages are user-facing (Spanish) and must never carry internal detail.
#
#  Depends on: (none)
#  Used by:    middleware/*, services/*, routes/*, app.py

class SiteError(Exception):
    """Base exception for all request-handling failures."""


class ValidationError(SiteError):
    """Bad or missing input."""


class PayloadTooLargeError(ValidationError):
    """Request body exceeds the configured size limit."""


class AuthError(SiteError):
    """Request is not authorized to mutate state."""


class CsrfError(AuthError):
    """Anti-forgery token missing, stale, or bound to another session."""


class RateLimitError(SiteError):
    """Client identity exceeded a rate-limit policy."""

    def __init__(self, message: str, retry_after: float, policy: str = "", limit: int = 0):
        super().__init__(message)
        self.retry_after = retry_after
        self.policy = policy
        self.limit = limit


class DeliveryError(SiteError):
    """A downstream send (email, AI proxy) failed or timed out."""


class NotFoundError(SiteError):
    """No route or static page matches the requested path."""

    def __init__(self, path: str, message: str = "Ruta no encontrada"):
        super().__init__(message)
        self.path = path
