"""Configuration for seokit.

Two layers, both resolved once at startup and passed down:

* ``Settings``: process environment (deployment mode, fallback origin,
  browser binary, cache directory).
* ``SeoConfig``: the site's SEO configuration, read from the JSON file named
  by ``SEOKIT_CONFIG`` and validated with pydantic. Every field has a default,
  so an absent file yields a working (OG-disabled) configuration.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

OgFormat = Literal["webp", "jpeg", "png"]
PageType = Literal["website", "article", "product", "profile"]
ChangeFreq = Literal["always", "hourly", "daily", "weekly", "monthly", "yearly", "never"]


@dataclass(slots=True)
class Settings:
    """Runtime settings loaded from environment variables."""

    environment: str
    site_url: str | None
    browser_executable: str | None
    cache_dir: Path
    config_path: Path | None
    dev_origin: str
    log_level: str

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


def _log_level(value: str) -> str:
    level = value.strip().upper()
    if isinstance(logging.getLevelName(level), int):
        return level
    return "INFO"


def get_settings() -> Settings:
    """Load settings from environment."""
    config_path = os.getenv("SEOKIT_CONFIG")
    return Settings(
        environment=os.getenv("SEOKIT_ENV", "production").strip().lower(),
        site_url=os.getenv("SEOKIT_SITE_URL") or None,
        browser_executable=os.getenv("CHROME_PATH") or None,
        cache_dir=Path(os.getenv("SEOKIT_CACHE_DIR", ".seokit-og-cache")),
        config_path=Path(config_path) if config_path else None,
        dev_origin=os.getenv("SEOKIT_DEV_ORIGIN", "http://localhost:3000").rstrip("/"),
        log_level=_log_level(os.getenv("SEOKIT_LOG_LEVEL", "INFO")),
    )


class PageSEO(BaseModel):
    title: str | None = None
    description: str | None = None
    keywords: list[str] = Field(default_factory=list)
    image: str | None = None
    url: str | None = None
    type: PageType | None = None
    author: str | None = None
    published_time: str | None = None
    modified_time: str | None = None
    site_name: str | None = None
    locale: str | None = None
    alternate_locales: list[str] = Field(default_factory=list)
    noindex: bool = False
    nofollow: bool = False
    canonical: str | None = None
    structured_data: dict[str, Any] | list[dict[str, Any]] | None = None


class PageConfig(PageSEO):
    """Per-path overrides; the sitemap fields only matter to sitemap.xml."""

    changefreq: ChangeFreq | None = None
    priority: float | None = Field(default=None, ge=0.0, le=1.0)
    lastmod: str | None = None


class RobotsConfig(BaseModel):
    enabled: bool = True
    disallow: list[str] = Field(default_factory=lambda: ["/api/", "/admin/"])
    sitemap: bool = True
    sitemap_path: str = "/sitemap.xml"


class TwitterConfig(BaseModel):
    site: str | None = None
    creator: str | None = None


class FacebookConfig(BaseModel):
    app_id: str | None = None


class SocialConfig(BaseModel):
    twitter: TwitterConfig = Field(default_factory=TwitterConfig)
    facebook: FacebookConfig = Field(default_factory=FacebookConfig)


class ViewportConfig(BaseModel):
    width: int = Field(default=1440, gt=0, le=4096)
    height: int = Field(default=754, gt=0, le=4096)


class OgCacheConfig(BaseModel):
    # Seconds.
    ttl: float = Field(default=24 * 60 * 60, ge=0)
    memory_ttl: float = Field(default=60 * 60, ge=0)


class OgImageConfig(BaseModel):
    enabled: bool = False
    route: str = "/api/og"
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)
    quality: int = Field(default=85, ge=1, le=100)
    format: OgFormat = "webp"
    cache: OgCacheConfig = Field(default_factory=OgCacheConfig)
    allowed_hosts: list[str] = Field(default_factory=list)


class ManifestIcon(BaseModel):
    src: str
    sizes: str | None = None
    type: str | None = None
    purpose: str | None = None


class WebManifestConfig(BaseModel):
    start_url: str = "/"
    display: str = "standalone"
    background_color: str = "#ffffff"
    theme_color: str = "#000000"
    icons: list[ManifestIcon] = Field(default_factory=list)


class SeoConfig(BaseModel):
    enabled: bool = True
    site_url: str = ""
    site_name: str = ""
    description: str = ""
    default_locale: str = "en"
    default_image: str = ""
    default_type: PageType = "website"
    pages: dict[str, PageConfig] = Field(default_factory=dict)
    robots: RobotsConfig = Field(default_factory=RobotsConfig)
    social: SocialConfig = Field(default_factory=SocialConfig)
    og_image: OgImageConfig = Field(default_factory=OgImageConfig)
    webmanifest: WebManifestConfig = Field(default_factory=WebManifestConfig)


def load_config(path: Path | None = None, settings: Settings | None = None) -> SeoConfig:
    """Resolve the SEO config: defaults, then the JSON file, then env fallbacks.

    Raises ValueError if the file is unreadable or fails validation.
    """
    settings = settings or get_settings()
    path = path or settings.config_path

    data: dict[str, Any] = {}
    if path is not None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ValueError(f"Cannot read SEO config {path}: {exc}") from exc

    try:
        config = SeoConfig.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid SEO config: {exc}") from exc

    if not config.site_url and settings.site_url:
        config = config.model_copy(update={"site_url": settings.site_url})
    return config.model_copy(update={"site_url": config.site_url.rstrip("/")})
