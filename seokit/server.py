"""FastAPI app serving robots.txt, sitemap.xml, site.webmanifest and OG images."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse, Response

from seokit.cache import ImageCache
from seokit.config import SeoConfig, Settings, get_settings, load_config
from seokit.documents import build_robots_txt, build_sitemap_xml, build_webmanifest
from seokit.models import Disabled, HealthResponse, Redirect, Served
from seokit.og import OgImageService, Renderer
from seokit.safety import MAX_PATH_LENGTH, validate_page_path

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("seokit.server")


def create_app(
    config: SeoConfig | None = None,
    settings: Settings | None = None,
    *,
    cache: ImageCache | None = None,
    renderer: Renderer | None = None,
) -> FastAPI:
    """Build the app. Config is resolved here once and shared by every route."""
    settings = settings or get_settings()
    config = config or load_config(settings=settings)
    cache = cache or ImageCache(settings.cache_dir)
    if renderer is not None:
        og_service = OgImageService(config, settings, cache, renderer=renderer)
    else:
        og_service = OgImageService(config, settings, cache)

    app = FastAPI(title="seokit")
    app.state.config = config
    app.state.og_service = og_service

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse()

    @app.get("/site.webmanifest")
    async def webmanifest() -> JSONResponse:
        return JSONResponse(
            build_webmanifest(config),
            media_type="application/manifest+json",
            headers={"Cache-Control": "public, max-age=3600"},
        )

    if config.robots.enabled:

        @app.get("/robots.txt", response_class=PlainTextResponse)
        async def robots_txt() -> PlainTextResponse:
            return PlainTextResponse(build_robots_txt(config))

    if config.robots.sitemap:

        async def sitemap_xml() -> Response:
            return Response(
                content=build_sitemap_xml(config),
                media_type="application/xml",
                headers={"Cache-Control": "public, max-age=3600, s-maxage=3600"},
            )

        app.add_api_route(config.robots.sitemap_path, sitemap_xml, methods=["GET"])

    if config.og_image.enabled:

        async def og_image(
            request: Request,
            path: str = Query("/", max_length=MAX_PATH_LENGTH, description="Page path to render"),
        ) -> Response:
            try:
                path = validate_page_path(path)
            except ValueError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc

            outcome = await og_service.generate(path, request.headers)
            if isinstance(outcome, Served):
                return Response(
                    content=outcome.body,
                    media_type=outcome.content_type,
                    headers=outcome.headers(),
                )
            if isinstance(outcome, Redirect):
                logger.info("Redirecting OG request for %s to %s", path, outcome.url)
                return RedirectResponse(outcome.url, status_code=302)
            if isinstance(outcome, Disabled):
                raise HTTPException(status_code=404, detail="OG image generation is not enabled")
            raise HTTPException(status_code=500, detail=f"Failed to capture image: {outcome.reason}")

        app.add_api_route(config.og_image.route, og_image, methods=["GET"])

    return app


app = create_app()
