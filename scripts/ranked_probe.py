"""Developer-only probe for the ranked VOD pipeline.

Runs one page of the pipeline against the live MCSR Ranked API and prints
every death link found. Uses the same settings (.env) as the web app.

Usage::

    python -m scripts.ranked_probe [--user NAME] [--before ID] [--season N]
"""
from __future__ import annotations

import argparse
import sys

from ranked_vods.errors import APIError
from ranked_vods.services.vod_service import build_default_service


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Print death VOD links for one page of ranked matches.")
    parser.add_argument("--user", help="player nickname or uuid (default: all users)")
    parser.add_argument("--before", help="only matches with an id below this one")
    parser.add_argument("--season", help="season number (8 or later)")
    parser.add_argument("--cache-dir", help="override VOD_CACHE_DIR")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    service = build_default_service(cache_dir=args.cache_dir)
    try:
        page = service.get_vods(args.user, args.before, args.season)
    except APIError as exc:
        print(f"{exc.code}: {exc.message} ✗", file=sys.stderr)
        return 1

    for event in page.events:
        print(f"{event.wall_clock_label}  {event.nickname:<20} {event.vod_link}")
    print(f"deaths: {len(page.events)}  next cursor: {page.next_cursor}")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual execution.
    sys.exit(main())
