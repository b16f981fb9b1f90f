"""Page head metadata: title, meta, Open Graph, Twitter card, JSON-LD.

``page_head`` merges (lowest to highest priority) the site defaults, the
configured overrides for the path, and the caller's overrides, then
``build_head`` turns the result into tags. ``render_head_html`` serialises
tags for server-rendered pages.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from html import escape

from seokit.config import PageSEO, SeoConfig

OG_IMAGE_WIDTH = "1200"
OG_IMAGE_HEIGHT = "630"
MANIFEST_PATH = "/site.webmanifest"


@dataclass(slots=True)
class MetaTag:
    content: str
    name: str | None = None
    property: str | None = None


@dataclass(slots=True)
class LinkTag:
    rel: str
    href: str


@dataclass(slots=True)
class HeadTags:
    title: str
    meta: list[MetaTag] = field(default_factory=list)
    links: list[LinkTag] = field(default_factory=list)
    json_ld: list[str] = field(default_factory=list)


def absolute_image_url(image: str | None, site_url: str, default_image: str = "") -> str:
    image = image or default_image
    if not image:
        return ""
    if image.startswith(("http://", "https://")):
        return image
    return f"{site_url}/{image.lstrip('/')}"


def build_head(page: PageSEO, config: SeoConfig) -> HeadTags:
    site_url = page.url or config.site_url
    image_url = absolute_image_url(page.image, config.site_url, config.default_image)
    should_index = config.enabled and not page.noindex
    should_follow = config.enabled and not page.nofollow

    title = page.title or ""
    description = page.description or ""
    og_type = page.type or config.default_type
    site_name = page.site_name or config.site_name
    image_alt = page.title or config.site_name

    meta = [MetaTag(name="description", content=description)]
    if page.keywords:
        meta.append(MetaTag(name="keywords", content=", ".join(page.keywords)))
    if page.author:
        meta.append(MetaTag(name="author", content=page.author))
    meta.append(
        MetaTag(
            name="robots",
            content=f"{'index' if should_index else 'noindex'}, "
            f"{'follow' if should_follow else 'nofollow'}",
        )
    )

    meta.extend(
        [
            MetaTag(property="og:title", content=title),
            MetaTag(property="og:description", content=description),
            MetaTag(property="og:type", content=og_type),
            MetaTag(property="og:url", content=page.canonical or page.url or site_url),
            MetaTag(property="og:site_name", content=site_name),
            MetaTag(property="og:locale", content=page.locale or config.default_locale),
        ]
    )
    if image_url:
        meta.extend(
            [
                MetaTag(property="og:image", content=image_url),
                MetaTag(property="og:image:width", content=OG_IMAGE_WIDTH),
                MetaTag(property="og:image:height", content=OG_IMAGE_HEIGHT),
                MetaTag(property="og:image:alt", content=image_alt),
            ]
        )
    meta.extend(MetaTag(property="og:locale:alternate", content=loc) for loc in page.alternate_locales)
    if config.social.facebook.app_id:
        meta.append(MetaTag(property="fb:app_id", content=config.social.facebook.app_id))

    meta.extend(
        [
            MetaTag(name="twitter:card", content="summary_large_image"),
            MetaTag(name="twitter:title", content=title),
            MetaTag(name="twitter:description", content=description),
        ]
    )
    if image_url:
        meta.extend(
            [
                MetaTag(name="twitter:image", content=image_url),
                MetaTag(name="twitter:image:alt", content=image_alt),
            ]
        )
    twitter = config.social.twitter
    if twitter.site:
        meta.append(MetaTag(name="twitter:site", content=twitter.site))
    if twitter.creator:
        meta.append(MetaTag(name="twitter:creator", content=twitter.creator))

    if og_type == "article":
        if page.author:
            meta.append(MetaTag(property="article:author", content=page.author))
        if page.published_time:
            meta.append(MetaTag(property="article:published_time", content=page.published_time))
        if page.modified_time:
            meta.append(MetaTag(property="article:modified_time", content=page.modified_time))

    links = []
    if page.canonical or page.url:
        links.append(LinkTag(rel="canonical", href=page.canonical or page.url or site_url))
    links.append(LinkTag(rel="manifest", href=MANIFEST_PATH))

    json_ld = []
    if page.structured_data:
        json_ld.append(json.dumps(page.structured_data, ensure_ascii=False))

    return HeadTags(title=title, meta=meta, links=links, json_ld=json_ld)


def page_head(path: str, config: SeoConfig, overrides: PageSEO | None = None) -> HeadTags:
    """Head tags for ``path`` with site defaults and per-page config applied."""
    merged = {
        "site_name": config.site_name,
        "locale": config.default_locale,
        "type": config.default_type,
        "image": config.default_image,
        "url": f"{config.site_url}{path}" if config.site_url else path,
    }
    configured = config.pages.get(path)
    if configured is not None:
        merged.update(configured.model_dump(exclude_unset=True, include=set(PageSEO.model_fields)))
    if overrides is not None:
        merged.update(overrides.model_dump(exclude_unset=True))
    return build_head(PageSEO.model_validate(merged), config)


def _script_safe(payload: str) -> str:
    return payload.replace("</", "<\\/")


def render_head_html(head: HeadTags) -> str:
    parts = [f"<title>{escape(head.title)}</title>"]
    for tag in head.meta:
        if tag.property:
            parts.append(f'<meta property="{escape(tag.property)}" content="{escape(tag.content)}" />')
        elif tag.name:
            parts.append(f'<meta name="{escape(tag.name)}" content="{escape(tag.content)}" />')
    for link in head.links:
        parts.append(f'<link rel="{escape(link.rel)}" href="{escape(link.href)}" />')
    for payload in head.json_ld:
        parts.append(f'<script type="application/ld+json">{_script_safe(payload)}</script>')
    return "\n".join(parts)
