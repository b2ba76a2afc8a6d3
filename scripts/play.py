#!/usr/bin/env python3
"""
Wikipedia Golf CLI - reach the goal article in as few strokes as possible.

Usage:
    python scripts/play.py                      # today's daily challenge
    python scripts/play.py --mode random
    python scripts/play.py --mode daily-ta     # daily challenge against the clock
    python scripts/play.py --mode custom --start "Cat" --goal "Dog" --locale en

Controls:
    <number>  follow the numbered link
    <text>    follow the link matching the text
    b         go back (the stroke is given back; not in time attack)
    q         quit
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Fix Windows console encoding
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from wikigolf.config import DEFAULT_LOCALE, SUPPORTED_LOCALES  # noqa: E402
from wikigolf.daily import (  # noqa: E402
    clear_expired_daily_challenge_cache,
    load_daily_challenge_with_cache,
    read_cached_daily_challenge,
)
from wikigolf.errors import WikiGolfError  # noqa: E402
from wikigolf.game import GameSession, format_time  # noqa: E402
from wikigolf.wikipedia import WikiApiClient  # noqa: E402

DISPLAY_LINKS = 50


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Play Wikipedia Golf in the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--mode",
        choices=["daily", "daily-ta", "random", "custom"],
        default="daily",
        help="Game mode (default: daily)",
    )
    parser.add_argument("--start", type=str, help="Start article (custom mode)")
    parser.add_argument("--goal", type=str, help="Goal article (custom mode)")
    parser.add_argument(
        "--locale",
        choices=SUPPORTED_LOCALES,
        default=DEFAULT_LOCALE,
        help=f"Wikipedia language edition (default: {DEFAULT_LOCALE})",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args()


def start_game(session: GameSession, args: argparse.Namespace) -> None:
    """Start the requested mode; an unavailable daily challenge falls back to random."""
    if args.mode == "custom":
        session.start_custom(args.start, args.goal)
        return

    if args.mode in ("daily", "daily-ta"):
        cached = read_cached_daily_challenge(args.locale)
        if cached is None:
            print("Resolving today's challenge...")
        try:
            challenge = load_daily_challenge_with_cache(args.locale)
        except WikiGolfError as e:
            print(f"Daily challenge unavailable ({e}). Starting a random game instead.")
        else:
            print(f"Daily challenge for {challenge.date}")
            session.start_daily(challenge, time_attack=args.mode == "daily-ta")
            return

    session.start_random()


def prompt_choice(links: list[str]) -> str:
    """Read a command; returns a link title, 'b' or 'q'."""
    while True:
        try:
            choice = input("> ").strip()
        except EOFError:
            return "q"

        if choice.lower() in ("b", "q"):
            return choice.lower()

        if choice.isdigit():
            idx = int(choice) - 1
            if 0 <= idx < len(links):
                return links[idx]
            print(f"Invalid number. Enter 1-{len(links)}")
            continue

        if choice in links:
            return choice

        matches = [link for link in links if choice.lower() in link.lower()]
        if len(matches) == 1:
            return matches[0]
        if matches:
            print(f"Multiple matches ({len(matches)}). Be more specific:")
            for m in matches[:10]:
                print(f"  - {m}")
        else:
            print("No match found. Try again.")


def show_page(session: GameSession) -> None:
    state = session.state
    print("\n" + "=" * 60)
    print(f"Current: {state.current_title}")
    print(f"Goal:    {state.goal_title}")
    print(f"Strokes: {state.stroke}")
    if session.is_time_attack:
        print(f"Time:    {format_time(session.elapsed)}s")
    print("=" * 60)

    if state.goal_title in session.links:
        print(f"\n*** GOAL '{state.goal_title}' IS ON THIS PAGE! ***\n")

    for i, link in enumerate(session.links[:DISPLAY_LINKS], 1):
        marker = " <<<" if link == state.goal_title else ""
        print(f"  {i:3}. {link}{marker}")
    if len(session.links) > DISPLAY_LINKS:
        print(f"\n  ... and {len(session.links) - DISPLAY_LINKS} more (type a title to select)")


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.mode == "custom" and not (args.start and args.goal):
        print("Error: --mode custom needs --start and --goal", file=sys.stderr)
        return 1

    clear_expired_daily_challenge_cache()

    with WikiApiClient(args.locale) as client:
        session = GameSession(client)
        try:
            start_game(session, args)
        except WikiGolfError as e:
            print(f"Error: could not start the game: {e}", file=sys.stderr)
            return 1

        while not session.is_over:
            show_page(session)
            choice = prompt_choice(session.links)
            if choice == "q":
                print("\nGame abandoned")
                return 130
            if choice == "b":
                if session.is_time_attack:
                    print("Going back is disabled in time attack")
                elif session.back() is None:
                    print("Nothing to go back to")
                continue
            try:
                session.navigate(choice)
            except WikiGolfError as e:
                print(f"Could not load '{choice}': {e}")

    state = session.state
    print("\n" + "=" * 60)
    print(f"Goal reached! '{state.start_title}' -> '{state.goal_title}' in {state.stroke} strokes")
    if session.is_time_attack:
        print(f"Time: {format_time(session.elapsed)}s")
    print("=" * 60)
    for entry in state.history:
        print(f"  {entry.stroke}. {entry.title}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
