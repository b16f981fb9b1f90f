"""On-demand Open Graph image generation.

Flow per request: classify the client, derive the cache key, try the
two-tier cache, and on a miss render the page, transcode the screenshot and
persist it. Render or transcode failures fall back to a redirect to the
configured default image, or a failure outcome carrying the error message.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from collections.abc import Awaitable, Callable, Mapping

from seokit.browser import capture_screenshot, request_host, resolve_origin, resolve_target_url
from seokit.cache import ImageCache, cache_key
from seokit.classifier import classify
from seokit.config import SeoConfig, Settings
from seokit.imaging import transcode
from seokit.models import (
    Disabled,
    Failed,
    OgImageOutcome,
    Redirect,
    RenderedImage,
    RenderProfile,
    Served,
)

logger = logging.getLogger(__name__)

Renderer = Callable[[str, RenderProfile, Settings], Awaitable[RenderedImage]]
Transcoder = Callable[[bytes, str, int, int, int], bytes]


def etag_for(body: bytes) -> str:
    return f'"{hashlib.sha256(body).hexdigest()[:32]}"'


class OgImageService:
    def __init__(
        self,
        config: SeoConfig,
        settings: Settings,
        cache: ImageCache,
        *,
        renderer: Renderer = capture_screenshot,
        transcoder: Transcoder = transcode,
    ) -> None:
        self.config = config
        self.settings = settings
        self.cache = cache
        self.renderer = renderer
        self.transcoder = transcoder

    def _served(self, body: bytes, profile: RenderProfile, cache_status: str) -> Served:
        return Served(
            body=body,
            content_type=profile.content_type,
            cache_control=profile.cache_control,
            etag=etag_for(body),
            cache_status=cache_status,
        )

    async def generate(self, path: str, headers: Mapping[str, str]) -> OgImageOutcome:
        og = self.config.og_image
        if not og.enabled:
            return Disabled()

        headers = {k.lower(): v for k, v in headers.items()}
        classification = classify(headers.get("user-agent"), og)
        profile = classification.profile
        host = request_host(headers, self.config)
        key = cache_key(path, host, profile.output_format)

        cached = await asyncio.to_thread(self.cache.get, key, og.cache.memory_ttl, og.cache.ttl)
        if cached:
            return self._served(cached, profile, "HIT")

        target_url = resolve_target_url(path, headers, self.settings, self.config)
        logger.info(
            "Rendering OG image for %s (profile=%s, format=%s)",
            target_url,
            profile.name,
            profile.output_format,
        )
        try:
            shot = await self.renderer(target_url, profile, self.settings)
            body = await asyncio.to_thread(
                self.transcoder,
                shot.data,
                profile.output_format,
                profile.viewport_width,
                profile.viewport_height,
                profile.quality,
            )
            if not body:
                raise RuntimeError("Rendered image is empty")
        except Exception as exc:  # noqa: BLE001
            logger.error("OG image capture failed for %s: %s", target_url, exc)
            return self._fallback(str(exc), headers)

        await asyncio.to_thread(self.cache.put, key, body, profile.output_format)
        return self._served(body, profile, "MISS")

    def _fallback(self, reason: str, headers: Mapping[str, str]) -> Redirect | Failed:
        image = self.config.default_image
        if not image:
            return Failed(reason=reason)
        if image.startswith(("http://", "https://")):
            return Redirect(url=image, reason=reason)
        origin = resolve_origin(headers, self.settings, self.config)
        return Redirect(url=f"{origin}/{image.lstrip('/')}", reason=reason)
