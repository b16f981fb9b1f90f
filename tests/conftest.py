from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from seokit.config import Settings
from seokit.models import RenderedImage


def _png(width: int, height: int, color: tuple[int, int, int] = (30, 120, 200)) -> bytes:
    out = BytesIO()
    Image.new("RGB", (width, height), color).save(out, "PNG")
    return out.getvalue()


class FakeRenderer:
    """Stands in for ``capture_screenshot`` and records each call."""

    def __init__(self, data: bytes | None = None, exc: Exception | None = None) -> None:
        self.data = data
        self.exc = exc
        self.calls: list[tuple[str, str]] = []

    async def __call__(self, url, profile, settings) -> RenderedImage:
        self.calls.append((url, profile.name))
        if self.exc is not None:
            raise self.exc
        data = self.data if self.data is not None else _png(profile.viewport_width, profile.viewport_height)
        return RenderedImage(data=data, width=profile.viewport_width, height=profile.viewport_height)


@pytest.fixture
def png_factory():
    return _png


@pytest.fixture
def renderer_factory():
    return FakeRenderer


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "og-cache"


@pytest.fixture
def settings(cache_dir: Path) -> Settings:
    return Settings(
        environment="production",
        site_url=None,
        browser_executable=None,
        cache_dir=cache_dir,
        config_path=None,
        dev_origin="http://localhost:3000",
        log_level="INFO",
    )
