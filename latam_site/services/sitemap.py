#  Latam Site - Sitemap & Robots
#
#  Generates sitemap.xml from the configured page list plus any pages found
#  in the static directory, and a robots.txt pointing at it.
#
#  Depends on: (none)
#  Used by:    routes/sitemap.py

import xml.etree.ElementTree as ET
from datetime import date, datetime, timezone
from pathlib import Path

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


def discover_pages(static_dir: Path) -> list[dict]:
    """Pages served through clean URLs: pages/<name>.html -> /<name>."""
    pages_dir = static_dir / "pages"
    if not pages_dir.is_dir():
        return []
    found = []
    for html_file in sorted(pages_dir.glob("*.html")):
        mtime = datetime.fromtimestamp(html_file.stat().st_mtime, tz=timezone.utc)
        found.append({
            "path": "/" + html_file.stem,
            "lastmod": mtime.date().isoformat(),
            "changefreq": "monthly",
            "priority": 0.6,
        })
    return found


def merge_pages(configured: list[dict], discovered: list[dict]) -> list[dict]:
    """Configured entries win; discovered pages fill in the rest, in order."""
    seen = {p["path"] for p in configured}
    merged = list(configured)
    for page in discovered:
        if page["path"] not in seen:
            merged.append(page)
            seen.add(page["path"])
    return merged


def build_sitemap(base_url: str, pages: list[dict], today: date | None = None) -> str:
    today = today or date.today()
    ET.register_namespace("", SITEMAP_NS)
    urlset = ET.Element(f"{{{SITEMAP_NS}}}urlset")
    for page in pages:
        url = ET.SubElement(urlset, f"{{{SITEMAP_NS}}}url")
        path = page["path"] if page["path"].startswith("/") else "/" + page["path"]
        ET.SubElement(url, f"{{{SITEMAP_NS}}}loc").text = base_url.rstrip("/") + path
        ET.SubElement(url, f"{{{SITEMAP_NS}}}lastmod").text = page.get("lastmod") or today.isoformat()
        if page.get("changefreq"):
            ET.SubElement(url, f"{{{SITEMAP_NS}}}changefreq").text = page["changefreq"]
        if page.get("priority") is not None:
            ET.SubElement(url, f"{{{SITEMAP_NS}}}priority").text = f"{float(page['priority']):.1f}"
    body = ET.tostring(urlset, encoding="unicode")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + body


def build_robots(base_url: str, disallow: list[str] | None = None) -> str:
    lines = ["User-agent: *", "Allow: /"]
    for path in disallow if disallow is not None else ["/api/"]:
        lines.append(f"Disallow: {path}")
    lines.append("")
    lines.append(f"Sitemap: {base_url.rstrip('/')}/sitemap.xml")
    return "\n".join(lines) + "\n"
