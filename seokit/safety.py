"""Validation of caller-supplied page paths and forwarded hosts."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

MAX_PATH_LENGTH = 2048

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_HOST_RE = re.compile(r"([A-Za-z0-9](?:[A-Za-z0-9.-]*[A-Za-z0-9])?)(?::\d{1,5})?")


def validate_page_path(path: str) -> str:
    """Return ``path`` if it is a site-relative path, else raise ValueError.

    The path is appended to the resolved origin before navigation, so anything
    that could change the origin (scheme, ``//host``, backslashes) is refused.
    """
    if not path:
        return "/"
    if len(path) > MAX_PATH_LENGTH:
        raise ValueError("Path is too long")
    if not path.startswith("/"):
        raise ValueError("Path must start with '/'")
    if path.startswith("//") or "\\" in path:
        raise ValueError("Path must not reference another host")
    if _CONTROL_CHARS.search(path):
        raise ValueError("Path contains control characters")
    parts = urlsplit(path)
    if parts.scheme or parts.netloc:
        raise ValueError("Path must not contain a scheme or host")
    return path


def parse_host(host: str) -> str | None:
    """Return the lowercased hostname of a bare ``hostname[:port]`` value, else None."""
    match = _HOST_RE.fullmatch(host)
    if match is None:
        return None
    return match.group(1).lower()


def host_allowed(host: str, allowlist: list[str]) -> bool:
    """Reject malformed hosts; otherwise allow any host when the list is empty,
    else require an exact or subdomain match."""
    hostname = parse_host(host)
    if hostname is None:
        return False
    if not allowlist:
        return True
    return any(hostname == d.lower() or hostname.endswith(f".{d.lower()}") for d in allowlist)
