"""Two-tier (memory + disk) cache for generated OG images."""

from __future__ import annotations

import hashlib
import logging
import time
from collections.abc import Callable
from pathlib import Path

from seokit.models import CacheEntry

logger = logging.getLogger(__name__)

EXTENSIONS: dict[str, str] = {"webp": "webp", "jpeg": "jpg", "png": "png"}


def cache_key(path: str, host: str, output_format: str) -> str:
    # Header values cannot contain a newline, so the join is unambiguous.
    raw = "\n".join((host, path, output_format)).encode("utf-8")
    return hashlib.sha256(raw).hexdigest()


class ImageCache:
    """Memory tier in front of a disk tier, both keyed by ``cache_key``.

    The memory tier is unbounded; stale entries are dropped when read. Disk
    entries live until their mtime is older than the disk TTL or the directory
    is cleared externally. All failures on the disk side are logged and
    treated as a miss (reads) or ignored (writes).
    """

    def __init__(self, cache_dir: Path, clock: Callable[[], float] = time.time) -> None:
        self.cache_dir = cache_dir
        self._clock = clock
        self._memory: dict[str, CacheEntry] = {}

    def disk_path(self, key: str, output_format: str) -> Path:
        return self.cache_dir / f"{key}_{output_format}.{EXTENSIONS[output_format]}"

    def in_memory(self, key: str) -> bool:
        return key in self._memory

    def get(self, key: str, memory_ttl: float, disk_ttl: float) -> bytes | None:
        now = self._clock()
        entry = self._memory.get(key)
        if entry is not None:
            if entry.buffer and now - entry.written_at < memory_ttl:
                return entry.buffer
            self._memory.pop(key, None)

        for path in (self.disk_path(key, fmt) for fmt in EXTENSIONS):
            try:
                if not path.is_file():
                    continue
                if now - path.stat().st_mtime >= disk_ttl:
                    continue
                buffer = path.read_bytes()
            except OSError:
                logger.warning("Failed to read cache file %s", path, exc_info=True)
                continue
            if not buffer:
                continue
            self._memory[key] = CacheEntry(buffer=buffer, written_at=now)
            return buffer
        return None

    def put(self, key: str, buffer: bytes, output_format: str) -> None:
        path = self.disk_path(key, output_format)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(buffer)
        except OSError:
            logger.warning("Failed to write cache file %s", path, exc_info=True)
        self._memory[key] = CacheEntry(buffer=buffer, written_at=self._clock())
