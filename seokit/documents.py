"""robots.txt, sitemap.xml and site.webmanifest builders."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any
from xml.sax.saxutils import escape

from seokit.config import SeoConfig

BLOCKED_BOTS = ("AhrefsBot", "SemrushBot", "DotBot")

DISALLOW_ALL = "User-Agent: *\nDisallow: /\n"


def build_robots_txt(config: SeoConfig) -> str:
    if not config.enabled:
        return DISALLOW_ALL

    robots = config.robots
    lines = ["User-Agent: *", "Allow: /"]
    lines.extend(f"Disallow: {path}" for path in robots.disallow)
    lines.append("")
    if robots.sitemap:
        lines.extend([f"Sitemap: {config.site_url}{robots.sitemap_path}", ""])
    lines.append("Crawl-delay: 1")
    for bot in BLOCKED_BOTS:
        lines.extend(["", f"User-Agent: {bot}", "Disallow: /"])
    return "\n".join(lines) + "\n"


@dataclass(slots=True)
class SitemapEntry:
    loc: str
    lastmod: str
    changefreq: str
    priority: float


def sitemap_entries(config: SeoConfig, today: date | None = None) -> list[SitemapEntry]:
    today_str = (today or date.today()).isoformat()
    entries = [
        SitemapEntry(
            loc=f"{config.site_url}{'' if path == '/' else path}",
            lastmod=page.lastmod or today_str,
            changefreq=page.changefreq or "weekly",
            priority=page.priority if page.priority is not None else 0.8,
        )
        for path, page in config.pages.items()
    ]
    if not entries:
        entries.append(
            SitemapEntry(loc=config.site_url, lastmod=today_str, changefreq="daily", priority=1.0)
        )
    return entries


def build_sitemap_xml(config: SeoConfig, today: date | None = None) -> str:
    urls = "\n".join(
        "  <url>\n"
        f"    <loc>{escape(entry.loc)}</loc>\n"
        f"    <lastmod>{escape(entry.lastmod)}</lastmod>\n"
        f"    <changefreq>{entry.changefreq}</changefreq>\n"
        f"    <priority>{entry.priority}</priority>\n"
        "  </url>"
        for entry in sitemap_entries(config, today)
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"\n'
        '        xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"\n'
        '        xsi:schemaLocation="http://www.sitemaps.org/schemas/sitemap/0.9\n'
        '        http://www.sitemaps.org/schemas/sitemap/0.9/sitemap.xsd">\n'
        f"{urls}\n"
        "</urlset>"
    )


def build_webmanifest(config: SeoConfig) -> dict[str, Any]:
    wm = config.webmanifest
    manifest: dict[str, Any] = {
        "name": config.site_name,
        "short_name": config.site_name,
        "description": config.description,
        "start_url": wm.start_url,
        "display": wm.display,
        "background_color": wm.background_color,
        "theme_color": wm.theme_color,
    }
    if wm.icons:
        manifest["icons"] = [icon.model_dump(exclude_none=True) for icon in wm.icons]
    return manifest
