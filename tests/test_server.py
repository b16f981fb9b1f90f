from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from seokit.browser import RenderError
from seokit.cache import ImageCache, cache_key
from seokit.config import SeoConfig
from seokit.server import create_app


@pytest.fixture
def make_client(settings, cache_dir):
    def _make(config: SeoConfig, renderer=None) -> tuple[TestClient, ImageCache]:
        cache = ImageCache(cache_dir)
        app = create_app(config, settings, cache=cache, renderer=renderer)
        return TestClient(app), cache

    return _make


def test_health(make_client) -> None:
    client, _ = make_client(SeoConfig())
    assert client.get("/health").json() == {"status": "ok"}


def test_robots_when_seo_disabled(make_client) -> None:
    client, _ = make_client(SeoConfig(enabled=False))

    resp = client.get("/robots.txt")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    assert resp.text == "User-Agent: *\nDisallow: /\n"


def test_robots_lists_disallow_and_sitemap(make_client) -> None:
    client, _ = make_client(SeoConfig(site_url="https://x.test", robots={"disallow": ["/private/"]}))

    body = client.get("/robots.txt").text

    assert "Disallow: /private/\n" in body
    assert "Sitemap: https://x.test/sitemap.xml\n" in body


def test_robots_route_not_mounted_when_disabled(make_client) -> None:
    client, _ = make_client(SeoConfig(robots={"enabled": False}))
    assert client.get("/robots.txt").status_code == 404


def test_sitemap_single_page(make_client) -> None:
    config = SeoConfig(
        site_url="https://x.test",
        pages={"/about": {"priority": 0.5, "changefreq": "monthly"}},
    )
    client, _ = make_client(config)

    resp = client.get("/sitemap.xml")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/xml")
    assert resp.text.count("<url>") == 1
    assert "<loc>https://x.test/about</loc>" in resp.text
    assert "<priority>0.5</priority>" in resp.text
    assert "<changefreq>monthly</changefreq>" in resp.text


def test_sitemap_custom_path(make_client) -> None:
    client, _ = make_client(SeoConfig(robots={"sitemap_path": "/sitemap-main.xml"}))

    assert client.get("/sitemap-main.xml").status_code == 200
    assert client.get("/sitemap.xml").status_code == 404


def test_webmanifest(make_client) -> None:
    client, _ = make_client(SeoConfig(site_name="Example", description="An example site"))

    resp = client.get("/site.webmanifest")

    assert resp.headers["content-type"].startswith("application/manifest+json")
    data = json.loads(resp.text)
    assert data["name"] == "Example"
    assert data["short_name"] == "Example"
    assert data["display"] == "standalone"
    assert "icons" not in data


def test_og_disabled_returns_not_found(make_client, renderer_factory) -> None:
    renderer = renderer_factory()
    client, _ = make_client(SeoConfig(), renderer)

    resp = client.get("/api/og", params={"path": "/"})

    assert resp.status_code == 404
    assert renderer.calls == []


def test_og_miss_renders_and_caches(make_client, renderer_factory) -> None:
    renderer = renderer_factory()
    client, cache = make_client(SeoConfig(og_image={"enabled": True}), renderer)

    resp = client.get("/api/og", params={"path": "/"})

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/webp"
    assert resp.headers["etag"]
    assert resp.headers["cache-control"] == "public, max-age=86400, s-maxage=86400"
    assert resp.headers["x-content-type-options"] == "nosniff"
    assert resp.content[:4] == b"RIFF"

    key = cache_key("/", "testserver", "webp")
    assert cache.in_memory(key)
    assert cache.disk_path(key, "webp").exists()


def test_og_default_path(make_client, renderer_factory) -> None:
    renderer = renderer_factory()
    client, _ = make_client(SeoConfig(og_image={"enabled": True}), renderer)

    client.get("/api/og")

    assert renderer.calls == [("https://testserver/", "default")]


def test_og_failure_redirects_to_default_image(make_client, renderer_factory) -> None:
    renderer = renderer_factory(exc=RenderError("Failed to launch browser"))
    config = SeoConfig(default_image="https://cdn.test/default.png", og_image={"enabled": True})
    client, _ = make_client(config, renderer)

    resp = client.get("/api/og", params={"path": "/"}, follow_redirects=False)

    assert resp.status_code == 302
    assert resp.headers["location"] == "https://cdn.test/default.png"


def test_og_failure_without_fallback_is_server_error(make_client, renderer_factory) -> None:
    renderer = renderer_factory(exc=RenderError("Failed to launch browser"))
    client, _ = make_client(SeoConfig(og_image={"enabled": True}), renderer)

    resp = client.get("/api/og", params={"path": "/"})

    assert resp.status_code == 500
    assert "Failed to launch browser" in resp.json()["detail"]


def test_og_rejects_foreign_path(make_client, renderer_factory) -> None:
    renderer = renderer_factory()
    client, _ = make_client(SeoConfig(og_image={"enabled": True}), renderer)

    resp = client.get("/api/og", params={"path": "//evil.test/x"})

    assert resp.status_code == 400
    assert renderer.calls == []


def test_og_custom_route(make_client, renderer_factory) -> None:
    config = SeoConfig(og_image={"enabled": True, "route": "/og.png"})
    client, _ = make_client(config, renderer_factory())

    assert client.get("/og.png").status_code == 200


def test_og_forwarded_headers_cannot_redirect_render(make_client, renderer_factory) -> None:
    renderer = renderer_factory()
    config = SeoConfig(
        site_url="https://site.test",
        og_image={"enabled": True, "allowed_hosts": ["site.test"]},
    )
    client, _ = make_client(config, renderer)

    client.get("/api/og", params={"path": "/x"}, headers={"x-forwarded-host": "evil.test/.site.test"})
    second = client.get(
        "/api/og", params={"path": "/x"}, headers={"x-forwarded-host": "evil.test#.site.test"}
    )
    client.get(
        "/api/og",
        params={"path": "/etc/passwd"},
        headers={"x-forwarded-host": "site.test", "x-forwarded-proto": "file"},
    )

    assert renderer.calls == [
        ("https://site.test/x", "default"),
        ("https://site.test/etc/passwd", "default"),
    ]
    assert second.headers["x-og-cache"] == "HIT"
