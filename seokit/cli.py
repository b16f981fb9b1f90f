"""CLI for seokit."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from seokit.cache import ImageCache
from seokit.config import get_settings, load_config
from seokit.documents import build_robots_txt, build_sitemap_xml
from seokit.models import Redirect, Served
from seokit.og import OgImageService
from seokit.safety import validate_page_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="seokit", description="SEO documents and OG images")
    parser.add_argument("--config", type=Path, help="SEO config JSON (overrides SEOKIT_CONFIG)")
    sub = parser.add_subparsers(dest="command", required=True)

    og_cmd = sub.add_parser("og", help="Render the OG image for a page path")
    og_cmd.add_argument("path", help="Page path, e.g. /about")
    og_cmd.add_argument("--host", default="", help="Host header to render against")
    og_cmd.add_argument("--proto", default="", help="Forwarded protocol (http/https)")
    og_cmd.add_argument("--user-agent", default="", help="Client user agent to classify")
    og_cmd.add_argument("--out", type=Path, required=True, help="Output image file")

    sub.add_parser("robots", help="Print robots.txt")
    sub.add_parser("sitemap", help="Print sitemap.xml")
    return parser


async def _run_og(args: argparse.Namespace) -> int:
    settings = get_settings()
    config = load_config(args.config, settings)
    if not config.og_image.enabled:
        # The CLI renders regardless of the HTTP switch.
        config = config.model_copy(
            update={"og_image": config.og_image.model_copy(update={"enabled": True})}
        )
    service = OgImageService(config, settings, ImageCache(settings.cache_dir))

    headers = {"host": args.host, "user-agent": args.user_agent}
    if args.proto:
        headers["x-forwarded-proto"] = args.proto
    outcome = await service.generate(args.path, headers)

    if isinstance(outcome, Served):
        args.out.parent.mkdir(parents=True, exist_ok=True)
        args.out.write_bytes(outcome.body)
        print(f"Saved {args.out} ({outcome.content_type}, {len(outcome.body)} bytes, {outcome.cache_status})")
        return 0
    if isinstance(outcome, Redirect):
        print(f"Render failed ({outcome.reason}); fallback image is {outcome.url}")
        return 1
    print(f"Render failed: {outcome.reason}")
    return 1


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    if args.command == "og":
        try:
            args.path = validate_page_path(args.path)
        except ValueError as exc:
            parser.error(f"invalid page path {args.path!r}: {exc}")
        raise SystemExit(asyncio.run(_run_og(args)))
    config = load_config(args.config)
    if args.command == "robots":
        print(build_robots_txt(config), end="")
    elif args.command == "sitemap":
        print(build_sitemap_xml(config))
