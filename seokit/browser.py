"""Playwright page capture for OG images."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from playwright.async_api import Browser, Error as PlaywrightError, Page, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from seokit.config import SeoConfig, Settings
from seokit.models import RenderedImage, RenderProfile
from seokit.safety import host_allowed

logger = logging.getLogger(__name__)

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--hide-scrollbars",
]

CHROME_CANDIDATES = (
    "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "/Applications/Chromium.app/Contents/MacOS/Chromium",
    "/usr/bin/google-chrome",
    "/usr/bin/chromium",
    "/usr/bin/chromium-browser",
)

ALLOWED_PROTOCOLS = ("http", "https")

CAPTURE_CSS = """
html, body { margin: 0 !important; padding: 0 !important; overflow: hidden !important; }
::-webkit-scrollbar { display: none !important; }
.og-hide, [data-og-hide] { display: none !important; }
"""


class RenderError(RuntimeError):
    """Raised when the headless browser cannot produce a screenshot."""


def find_executable(settings: Settings) -> str | None:
    """Return a Chrome binary to launch, or None for Playwright's bundled Chromium."""
    configured = settings.browser_executable
    if not settings.is_development:
        if configured and not Path(configured).exists():
            raise RenderError(f"Chrome/Chromium executable not found at CHROME_PATH={configured}")
        return configured

    candidates = ([configured] if configured else []) + list(CHROME_CANDIDATES)
    for candidate in candidates:
        if Path(candidate).exists():
            return candidate
    return None


def _header(headers: Mapping[str, str], name: str) -> str:
    value = headers.get(name, "")
    # Proxies may append a list; the first value is the client-facing one.
    return value.split(",", 1)[0].strip()


def request_host(headers: Mapping[str, str], config: SeoConfig) -> str:
    host = _header(headers, "x-forwarded-host") or _header(headers, "host")
    if host and not host_allowed(host, config.og_image.allowed_hosts):
        logger.warning("Ignoring malformed or disallowed host %r", host)
        return ""
    return host


def resolve_origin(headers: Mapping[str, str], settings: Settings, config: SeoConfig) -> str:
    """Origin of the site that served the request; may be empty."""
    if settings.is_development:
        return settings.dev_origin
    host = request_host(headers, config)
    if host:
        protocol = _header(headers, "x-forwarded-proto").lower()
        if protocol not in ALLOWED_PROTOCOLS:
            protocol = "http" if "localhost" in host else "https"
        return f"{protocol}://{host}"
    return (config.site_url or settings.site_url or "").rstrip("/")


def resolve_target_url(
    path: str, headers: Mapping[str, str], settings: Settings, config: SeoConfig
) -> str:
    origin = resolve_origin(headers, settings, config)
    if not origin:
        logger.warning("No origin resolved for %s; navigation will likely fail", path)
    return f"{origin}{path}"


async def _navigate(page: Page, url: str, profile: RenderProfile) -> None:
    try:
        await page.goto(url, wait_until="networkidle", timeout=profile.navigation_timeout_ms)
    except PlaywrightTimeoutError:
        logger.warning(
            "Navigation to %s timed out after %dms, capturing current state",
            url,
            profile.navigation_timeout_ms,
        )


async def _wait_for_ready(page: Page, profile: RenderProfile) -> None:
    try:
        await page.wait_for_function(
            "document.readyState === 'complete'", timeout=profile.ready_timeout_ms
        )
    except PlaywrightTimeoutError:
        logger.warning("Document not ready after %dms", profile.ready_timeout_ms)


async def capture_screenshot(url: str, profile: RenderProfile, settings: Settings) -> RenderedImage:
    """Render ``url`` in headless Chromium and return a viewport-sized PNG."""
    executable = find_executable(settings)
    browser: Browser | None = None
    try:
        async with async_playwright() as pw:
            try:
                try:
                    browser = await pw.chromium.launch(
                        headless=True, args=LAUNCH_ARGS, executable_path=executable
                    )
                except PlaywrightError as exc:
                    raise RenderError(f"Failed to launch browser: {exc}") from exc

                page = await browser.new_page(device_scale_factor=1)
                await page.set_viewport_size(
                    {"width": profile.viewport_width, "height": profile.viewport_height}
                )
                await _navigate(page, url, profile)
                await page.add_style_tag(content=CAPTURE_CSS)
                await page.wait_for_timeout(profile.post_load_wait_ms)
                if profile.ready_timeout_ms > 0:
                    await _wait_for_ready(page, profile)

                data = await page.screenshot(
                    type="png",
                    clip={
                        "x": 0,
                        "y": 0,
                        "width": profile.viewport_width,
                        "height": profile.viewport_height,
                    },
                )
            finally:
                if browser is not None:
                    await browser.close()
    except PlaywrightError as exc:
        logger.exception("Playwright failure for %s", url)
        raise RenderError(f"Browser error: {exc}") from exc

    return RenderedImage(data=data, width=profile.viewport_width, height=profile.viewport_height)
