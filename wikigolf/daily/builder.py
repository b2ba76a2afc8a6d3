"""
Daily challenge construction.

Goal and start are resolved sequentially: the start search is anchored on
the resolved goal id. A pre-generated document for today, when present,
replaces live resolution entirely.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Callable

from wikigolf.config import DAILY_CHALLENGE_JSON_PATH, DAILY_TIMEZONE
from wikigolf.daily import seed
from wikigolf.daily.models import DailyChallenge
from wikigolf.daily.resolver import ArticleResolver, default_resolver_for
from wikigolf.errors import CacheCorruptError

logger = logging.getLogger(__name__)


class PregeneratedChallengeSource:
    """
    Reads the document written by ``scripts/generate_daily_challenge.py``.

    Never raises: a missing, unreadable, outdated or foreign-locale document
    simply yields None so the caller can resolve live.
    """

    def __init__(self, path: Path | str = DAILY_CHALLENGE_JSON_PATH) -> None:
        self.path = Path(path)

    def load(self, locale: str, today: str) -> DailyChallenge | None:
        if not self.path.exists():
            logger.info(f"No pre-generated daily challenge at {self.path}, resolving via API")
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            challenge = DailyChallenge.from_dict(data)
        except (OSError, ValueError, CacheCorruptError) as e:
            logger.error(f"Failed to read pre-generated daily challenge: {e}")
            return None

        if challenge.date != today or challenge.locale != locale:
            logger.info(
                f"Pre-generated challenge is for {challenge.date}/{challenge.locale}, "
                f"not {today}/{locale}; resolving via API"
            )
            return None

        if not challenge.is_complete:
            logger.warning("Pre-generated challenge has empty titles, resolving via API")
            return None

        logger.info(f"Loaded today's daily challenge from {self.path}")
        return DailyChallenge(
            locale=challenge.locale,
            date=challenge.date,
            goal=challenge.goal,
            start=challenge.start,
            from_json=True,
        )


class DailyChallengeBuilder:
    """
    Builds today's challenge for a locale.

    Failures from either resolution step propagate unchanged; recovery is
    the cache layer's job.
    """

    def __init__(
        self,
        resolver_for: Callable[[str], ArticleResolver] = default_resolver_for,
        clock: Callable[[], datetime] = seed.now,
        tz: str = DAILY_TIMEZONE,
        pregenerated: PregeneratedChallengeSource | None = None,
        start_requires_parse: bool = True,
    ) -> None:
        """
        Initialize the builder.

        Args:
            resolver_for: Returns the article resolver for a locale
            clock: Returns the current instant
            tz: Timezone that defines "today"
            pregenerated: Optional pre-generated document source
            start_requires_parse: Require the start article to render
        """
        self._resolver_for = resolver_for
        self._clock = clock
        self._tz = tz
        self._pregenerated = pregenerated
        self._start_requires_parse = start_requires_parse

    def today(self) -> date:
        return seed.to_local_calendar_date(self._clock(), self._tz)

    def build(self, locale: str, day: date | None = None) -> DailyChallenge:
        """
        Resolve the challenge for ``day`` (default: today) from the API.

        Raises:
            ArticleNotFoundError: If goal or start cannot be resolved
            WikipediaError: If an API request fails unrecoverably
        """
        day = day or self.today()
        resolver = self._resolver_for(locale)
        base_id = seed.compute_daily_base_id(day)
        logger.info(f"Building daily challenge for {day.isoformat()} ({locale}), base id {base_id}")

        logger.info("Searching for goal article...")
        goal = resolver.find_article(seed.goal_seed(base_id))

        logger.info("Searching for start article...")
        start = resolver.find_article(
            seed.start_seed(goal.id),
            require_parseable=self._start_requires_parse,
        )

        logger.info(f"Daily challenge: '{start.title}' ({start.id}) -> '{goal.title}' ({goal.id})")
        return DailyChallenge(
            locale=locale,
            date=day.isoformat(),
            goal=goal,
            start=start,
        )

    def fetch(self, locale: str) -> DailyChallenge:
        """Today's challenge: pre-generated document if it matches, else live."""
        day = self.today()
        if self._pregenerated is not None:
            challenge = self._pregenerated.load(locale, day.isoformat())
            if challenge is not None:
                return challenge
        return self.build(locale, day)
