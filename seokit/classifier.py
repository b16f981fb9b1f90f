"""Pick a render profile from the requesting client's user agent."""

from __future__ import annotations

from dataclasses import dataclass

from seokit.config import OgImageConfig
from seokit.models import RenderProfile

# Link-preview scrapers. Facebook's is the strictest about size and format.
CRAWLER_SIGNATURES = (
    "facebookexternalhit",
    "facebot",
    "meta-externalagent",
    "twitterbot",
    "linkedinbot",
    "slackbot",
    "discordbot",
    "whatsapp",
    "telegrambot",
    "pinterestbot",
)

CRAWLER_PROFILE = RenderProfile(
    name="crawler",
    viewport_width=1200,
    viewport_height=630,
    output_format="jpeg",
    quality=90,
    navigation_timeout_ms=30_000,
    post_load_wait_ms=2_000,
    ready_timeout_ms=5_000,
    cache_max_age=7 * 24 * 60 * 60,
    immutable=True,
)


@dataclass(slots=True)
class Classification:
    is_crawler: bool
    profile: RenderProfile


def default_profile(og: OgImageConfig) -> RenderProfile:
    return RenderProfile(
        name="default",
        viewport_width=og.viewport.width,
        viewport_height=og.viewport.height,
        output_format=og.format,
        quality=og.quality,
        navigation_timeout_ms=15_000,
        post_load_wait_ms=1_000,
        ready_timeout_ms=0,
        cache_max_age=24 * 60 * 60,
    )


def is_preview_crawler(user_agent: str | None) -> bool:
    if not user_agent:
        return False
    ua = user_agent.lower()
    return any(sig in ua for sig in CRAWLER_SIGNATURES)


def classify(user_agent: str | None, og: OgImageConfig) -> Classification:
    if is_preview_crawler(user_agent):
        return Classification(is_crawler=True, profile=CRAWLER_PROFILE)
    return Classification(is_crawler=False, profile=default_profile(og))
