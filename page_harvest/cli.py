"""Command-line entry point for the page harvester."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from functools import partial
from pathlib import Path
from typing import Sequence

from .config import DEFAULT_USER_AGENT, IF_EXISTS_CHOICES, IF_EXISTS_FAIL, HarvestConfig
from .errors import HarvestError
from .harvester import run_harvest
from .session import static_session

logger = logging.getLogger("page_harvest.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Render a web page via Playwright and save its images, video embeds and links "
            "under output/<site>/."
        ),
    )
    parser.add_argument("--url", required=True, help="Absolute URL of the page to harvest")
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Navigation timeout in seconds",
    )
    parser.add_argument(
        "--wait",
        type=float,
        default=0.0,
        help="Seconds to wait after the page has loaded before reading it",
    )
    parser.add_argument(
        "--user-agent",
        default=DEFAULT_USER_AGENT,
        help="User agent for the browser page and image requests",
    )
    parser.add_argument(
        "--connect",
        default=None,
        metavar="WS_ENDPOINT",
        help="Connect to a running Playwright browser server instead of launching Chromium",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of images fetched concurrently (manifest order is unaffected)",
    )
    parser.add_argument(
        "--if-exists",
        choices=IF_EXISTS_CHOICES,
        default=IF_EXISTS_FAIL,
        help="What to do when the output directory already exists",
    )
    parser.add_argument(
        "--from-file",
        type=Path,
        default=None,
        help="Read saved markup from this file instead of rendering --url in a browser",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    config = HarvestConfig(
        output_root=Path("output").resolve(),
        navigation_timeout=args.timeout,
        wait_after_load=args.wait,
        user_agent=args.user_agent,
        connect_endpoint=args.connect,
        image_workers=max(1, args.workers),
        if_exists=args.if_exists,
    )

    session_factory = None
    if args.from_file is not None:
        try:
            markup = args.from_file.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error("Could not read %s: %s", args.from_file, exc)
            return 1
        session_factory = partial(static_session, markup, args.url)

    try:
        asyncio.run(run_harvest(args.url, config, session_factory=session_factory))
    except HarvestError as exc:
        logger.error("Harvest of %s aborted: %s", args.url, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
