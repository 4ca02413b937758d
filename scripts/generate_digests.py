#!/usr/bin/env python3
"""
Weekly Digest Batch

Runs the same batch as the scheduled job and POST /api/admin/generate-digests,
outside the API server.

Usage:
    python scripts/generate_digests.py
    python scripts/generate_digests.py --date 2026-10-14   # week containing date
    python scripts/generate_digests.py --no-llm            # baseline insights only
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
load_dotenv(project_root / ".env")

from learnloop.services.digest import (  # noqa: E402
    generate_weekly_digests_for_all_users,
    week_bounds,
)
from learnloop.services.llm.client import get_text_generator  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate weekly learning digests")
    parser.add_argument(
        "--date",
        help="Any date (YYYY-MM-DD) inside the target week; defaults to today",
    )
    parser.add_argument(
        "--no-llm",
        action="store_true",
        help="Skip generated insights",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser.parse_args()


async def main(args: argparse.Namespace) -> int:
    now = None
    if args.date:
        now = datetime.strptime(args.date, "%Y-%m-%d").replace(
            hour=12, tzinfo=timezone.utc
        )

    week_start, week_end = week_bounds(now or datetime.now(timezone.utc))
    print(f"📅 Week {week_start.date()} - {week_end.date()}")

    generator = None if args.no_llm else get_text_generator()
    result = await generate_weekly_digests_for_all_users(now=now, generator=generator)

    icon = "✅" if result.success else "❌"
    print(f"{icon} {result.message}")
    return 0 if result.success and result.failed == 0 else 1


if __name__ == "__main__":
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    if not args.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        logging.getLogger("LiteLLM").setLevel(logging.WARNING)
    sys.exit(asyncio.run(main(args)))
