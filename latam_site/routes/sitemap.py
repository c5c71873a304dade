#  Latam Site - Sitemap Routes
#
#  sitemap.xml and robots.txt, generated per request.
#
#  Depends on: services/sitemap.py, config.py
#  Used by:    app.py

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse, Response

from latam_site.config import SITE_BASE_URL, SITE_PAGES, STATIC_DIR
from latam_site.services.sitemap import build_robots, build_sitemap, discover_pages, merge_pages

router = APIRouter(tags=["seo"])


@router.get("/sitemap.xml")
async def sitemap() -> Response:
    pages = merge_pages(SITE_PAGES, discover_pages(STATIC_DIR))
    return Response(
        content=build_sitemap(SITE_BASE_URL, pages),
        media_type="application/xml",
    )


@router.get("/robots.txt")
async def robots() -> PlainTextResponse:
    return PlainTextResponse(build_robots(SITE_BASE_URL))
