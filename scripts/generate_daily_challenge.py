#!/usr/bin/env python3
"""
Generate today's daily challenge ahead of time.

Runs the same date-seeded search as the game, outside of it, and writes the
result to a JSON document the game picks up instead of resolving live.
Only one metadata batch is kept in flight, with a pause between batches,
to stay well under the API rate limits.

Usage:
    python scripts/generate_daily_challenge.py
    python scripts/generate_daily_challenge.py --locale en --output data/daily-challenge.json
    python scripts/generate_daily_challenge.py --date 2024-03-15
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

# Fix Windows console encoding
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from wikigolf.config import DAILY_CHALLENGE_JSON_PATH, LOG_LEVEL, SUPPORTED_LOCALES  # noqa: E402
from wikigolf.daily import ArticleResolver, DailyChallenge, DailyChallengeBuilder  # noqa: E402
from wikigolf.errors import WikiGolfError  # noqa: E402
from wikigolf.wikipedia import BoundedPool, WikiApiClient  # noqa: E402

# Offline runs favour politeness over speed
GENERATOR_CONCURRENCY = 1
GENERATOR_WAVE_DELAY = 1.0


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Generate the Wikipedia Golf daily challenge",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--locale",
        choices=SUPPORTED_LOCALES,
        default="ja",
        help="Wikipedia language edition (default: ja)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=DAILY_CHALLENGE_JSON_PATH,
        help=f"Output JSON path (default: {DAILY_CHALLENGE_JSON_PATH})",
    )
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Generate for this date (YYYY-MM-DD) instead of today in Asia/Tokyo",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args()


def save_to_file(challenge: DailyChallenge, output_path: Path) -> None:
    """Write the challenge document, creating parent directories."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(challenge.to_dict(), f, ensure_ascii=False, indent=2)


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Set up logging
    log_level = logging.DEBUG if args.verbose else LOG_LEVEL
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    client = WikiApiClient(args.locale)
    resolver = ArticleResolver(
        client,
        pool=BoundedPool(
            max_concurrent=GENERATOR_CONCURRENCY,
            wave_delay=GENERATOR_WAVE_DELAY,
        ),
    )
    # Start parseability is checked by the game itself when it loads live
    builder = DailyChallengeBuilder(
        resolver_for=lambda locale: resolver,
        start_requires_parse=False,
    )

    print("\n=== Generating daily challenge ===")
    try:
        with client:
            challenge = builder.build(args.locale, args.date)
    except WikiGolfError as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1

    print(f"  Date:   {challenge.date}")
    print(f"  Locale: {challenge.locale}")
    print(f"  Goal:   {challenge.goal.title} (ID: {challenge.goal.id})")
    print(f"  Start:  {challenge.start.title} (ID: {challenge.start.id})")

    try:
        save_to_file(challenge, args.output)
    except OSError as e:
        print(f"\nError: could not write {args.output}: {e}", file=sys.stderr)
        return 1

    print(f"\nSaved to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
