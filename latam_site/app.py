#  Latam Site - FastAPI Application
#
#  Main app setup: lifespan, middleware chain, error responder, router
#  includes. Creates the DI container and manages collaborator lifecycle.
#
#  Request flow, outermost first:
#    CORS -> security headers -> request id -> body limit + sanitize
#    -> general rate limit -> CSRF (router deps) -> contact rate limit
#    (contact route) -> handler -> error responder
#
#  Depends on: config.py, container.py, routes/*.py, middleware/*.py
#  Used by:    run.py

import logging
import time
import uuid
from contextlib import AsyncExitStack, asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from latam_site.config import (
    ALLOWED_ORIGINS,
    CSRF_HEADER_NAME,
    ENVIRONMENT,
    MAX_BODY_BYTES,
    PORT,
    STATIC_DIR,
    validate_config,
)
from latam_site.container import Container
from latam_site.exceptions import SiteError
from latam_site.logging_config import set_client, set_request_id
from latam_site.middleware.gate import csrf_protect, general_rate_limit
from latam_site.middleware.sanitize import RequestSanitizerMiddleware
from latam_site.middleware.security import SecurityHeadersMiddleware
from latam_site.rate_limit import get_client_identity
from latam_site.responses import INTERNAL_ERROR_MESSAGE, error_response, response_for
from latam_site.routes.chat import router as chat_router
from latam_site.routes.contact import router as contact_router
from latam_site.routes.csrf import router as csrf_router
from latam_site.routes.health import router as health_router
from latam_site.routes.site import fallback_router, router as site_router
from latam_site.routes.sitemap import router as sitemap_router

logger = logging.getLogger("latam_site.app")

# Create and wire the DI container
container = Container()

# Gate for every route except health and static assets
_gate_dep = [Depends(general_rate_limit), Depends(csrf_protect)]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle.

    Uses AsyncExitStack so that if any startup step fails, all previously
    initialized resources are cleaned up in reverse order.
    """
    logger.info("Site backend starting...")

    # Validate critical config before anything else
    validate_config()

    http_client = container.http_client()
    email = container.email()

    async with AsyncExitStack() as stack:
        # Shared httpx client, closed on shutdown
        stack.push_async_callback(http_client.aclose)

        if email.configured:
            await email.verify_connection()

        logger.info(
            "Listening on port %s (env=%s, email to=%s)",
            PORT, ENVIRONMENT, email.recipient or "not configured",
        )
        logger.info("Security: CSP, CORS, CSRF, rate limiting, input sanitization enabled")

        yield

    logger.info("Site backend shutting down")


app = FastAPI(
    title="Comercio y Negocios Latam - Site Backend",
    version="1.0.0",
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Error responder: every failure ends as {"error": ..., "path"?: ...}
# ---------------------------------------------------------------------------

@app.exception_handler(SiteError)
async def site_error_handler(request: Request, exc: SiteError):
    return response_for(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning("Invalid request body on %s: %s", request.url.path, exc.errors())
    return error_response(400, "Datos de entrada inválidos")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return error_response(404, "Ruta no encontrada", path=request.url.path)
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
    return error_response(500, INTERNAL_ERROR_MESSAGE)


# ---------------------------------------------------------------------------
# Middleware (added innermost first)
# ---------------------------------------------------------------------------

app.add_middleware(RequestSanitizerMiddleware, max_body_bytes=MAX_BODY_BYTES)


# Request ID tracing + one access line per request
access_logger = logging.getLogger("latam_site.access")


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = uuid.uuid4().hex[:12]
        set_request_id(rid)
        client = get_client_identity(request)
        set_client(client)
        started = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            response.headers["X-Request-ID"] = rid
            return response
        finally:
            access_logger.info(
                "%s %s %d",
                request.method, request.url.path, status,
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": status,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                    "client": client,
                },
            )
            set_request_id(None)
            set_client(None)


app.add_middleware(RequestIDMiddleware)

app.add_middleware(SecurityHeadersMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", CSRF_HEADER_NAME],
)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

# Health check (public, never gated, for liveness probes)
app.include_router(health_router, prefix="/api")

# Gated API routes
app.include_router(csrf_router, prefix="/api", dependencies=_gate_dep)
app.include_router(contact_router, prefix="/api", dependencies=_gate_dep)
app.include_router(chat_router, prefix="/api", dependencies=_gate_dep)

# Gated site routes
app.include_router(site_router, dependencies=_gate_dep)
app.include_router(sitemap_router, dependencies=_gate_dep)

# Static assets (ungated, served before the catch-all)
for _subdir in ("css", "js", "img", "pages"):
    if (STATIC_DIR / _subdir).is_dir():
        app.mount(f"/{_subdir}", StaticFiles(directory=str(STATIC_DIR / _subdir)), name=_subdir)

# Clean URLs + 404, must stay last
app.include_router(fallback_router, dependencies=_gate_dep)
