#  Latam Site - Site Routes
#
#  Service banner, clean-URL page serving, and the catch-all 404.
#  fallback_router must be included last so it only sees unmatched paths.
#
#  Depends on: config.py, exceptions.py, models/schemas.py
#  Used by:    app.py

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse

from latam_site.config import APP_VERSION, SITE_NAME, STATIC_DIR
from latam_site.exceptions import NotFoundError
from latam_site.models.schemas import BannerOut

router = APIRouter(tags=["site"])
fallback_router = APIRouter(include_in_schema=False)


@router.get("/")
async def banner() -> BannerOut:
    return BannerOut(
        message=f"Backend API - {SITE_NAME}",
        status="online",
        version=APP_VERSION,
        endpoints={
            "health": "/api/health",
            "csrf": "/api/csrf-token",
            "contact": "POST /api/contact",
        },
    )


def resolve_clean_url(static_dir: Path, path: str) -> Path | None:
    """Map an extension-less path to pages/<path>.html or <path>.html.

    Returns None when nothing matches or the candidate escapes static_dir.
    """
    if "." in path or path in ("", "/"):
        return None
    clean = path.strip("/")
    if clean.startswith("pages/"):
        clean = clean[len("pages/"):]
    root = static_dir.resolve()
    for candidate in (static_dir / "pages" / f"{clean}.html", static_dir / f"{clean}.html"):
        resolved = candidate.resolve()
        if resolved.is_relative_to(root) and resolved.is_file():
            return resolved
    return None


def _original_url(request: Request) -> str:
    query = request.url.query
    return request.url.path + (f"?{query}" if query else "")


@fallback_router.api_route(
    "/{full_path:path}",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"],
)
async def fallback(request: Request, full_path: str):
    if request.method in ("GET", "HEAD"):
        page = resolve_clean_url(STATIC_DIR, request.url.path)
        if page is not None:
            return FileResponse(page, media_type="text/html")
    raise NotFoundError(_original_url(request))
