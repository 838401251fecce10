"""CLI entrypoint: sync GitHub repositories into the Contentful projects section."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from config import Settings
from orchestrator import run_sync
from utils import configure_logging


def _triggered_by() -> str:
    return "github-actions" if os.getenv("GITHUB_ACTIONS") == "true" else "local"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="github-sync",
        description="Sync GitHub repositories to the Projects section in Contentful CMS",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="verbose output")
    sub = parser.add_subparsers(dest="command", required=True)

    sync = sub.add_parser("sync", help="Sync GitHub projects to Contentful")
    sync.add_argument("--force", action="store_true", help="Force update all projects")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        settings = Settings.load_from_env_file()
        if args.force:
            settings.sync.force_update = True
        settings.validate_required()
    except Exception as exc:
        print(f"error: config: {exc}", file=sys.stderr)
        return 1

    if args.command == "sync":
        try:
            stats = asyncio.run(run_sync(settings, triggered_by=_triggered_by()))
        except asyncio.TimeoutError:
            print(f"error: sync: run exceeded {settings.sync.run_timeout:.0f}s deadline", file=sys.stderr)
            return 1
        except Exception as exc:
            print(f"error: sync: {exc}", file=sys.stderr)
            return 1
        print(f"Sync complete: {stats.total} projects ({stats.new_added} new, {stats.featured} featured) - {stats.status}")
        return 0

    return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
