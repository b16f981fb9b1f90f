"""Data types shared by the OG image pipeline and the HTTP layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel

from seokit.config import OgFormat

CONTENT_TYPES: dict[str, str] = {
    "webp": "image/webp",
    "jpeg": "image/jpeg",
    "png": "image/png",
}


@dataclass(frozen=True, slots=True)
class RenderProfile:
    """How to render, encode and cache one OG image request."""

    name: str
    viewport_width: int
    viewport_height: int
    output_format: OgFormat
    quality: int
    navigation_timeout_ms: int
    post_load_wait_ms: int
    ready_timeout_ms: int
    cache_max_age: int
    immutable: bool = False

    @property
    def content_type(self) -> str:
        return CONTENT_TYPES[self.output_format]

    @property
    def cache_control(self) -> str:
        value = f"public, max-age={self.cache_max_age}, s-maxage={self.cache_max_age}"
        if self.immutable:
            value += ", immutable"
        return value


@dataclass(slots=True)
class RenderedImage:
    data: bytes
    width: int
    height: int


@dataclass(slots=True)
class CacheEntry:
    buffer: bytes
    written_at: float


@dataclass(slots=True)
class Served:
    body: bytes
    content_type: str
    cache_control: str
    etag: str
    cache_status: Literal["HIT", "MISS"]

    def headers(self) -> dict[str, str]:
        return {
            "Cache-Control": self.cache_control,
            "ETag": self.etag,
            "X-Content-Type-Options": "nosniff",
            "X-OG-Cache": self.cache_status,
        }


@dataclass(slots=True)
class Redirect:
    url: str
    reason: str


@dataclass(slots=True)
class Failed:
    reason: str


@dataclass(slots=True)
class Disabled:
    pass


OgImageOutcome = Served | Redirect | Failed | Disabled


class HealthResponse(BaseModel):
    status: str = "ok"
