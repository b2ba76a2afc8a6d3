"""
Per-locale, per-day cache of the daily challenge.

Usage:
    from wikigolf.daily.cache import (
        clear_expired_daily_challenge_cache,
        load_daily_challenge_with_cache,
        read_cached_daily_challenge,
    )

    clear_expired_daily_challenge_cache()
    challenge = read_cached_daily_challenge("ja")  # instant, may be None
    challenge = load_daily_challenge_with_cache("ja")  # may hit the API

An entry is only ever served on the day (Asia/Tokyo) it was written for.
Stale or malformed entries are deleted on sight and treated as a miss.
Entries missing a title are repaired from the stored page id instead of
being rebuilt from scratch.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from wikigolf.config import DAILY_TIMEZONE
from wikigolf.daily import seed
from wikigolf.daily.builder import DailyChallengeBuilder, PregeneratedChallengeSource
from wikigolf.daily.models import ArticleRef, CachedEntry, DailyChallenge
from wikigolf.daily.resolver import ArticleResolver, default_resolver_for
from wikigolf.daily.storage import JsonFileStore, KeyValueStore
from wikigolf.errors import CacheCorruptError, IncompleteChallengeError, WikipediaError

logger = logging.getLogger(__name__)

STORAGE_PREFIX = "dailyChallenge"


def build_storage_key(locale: str) -> str:
    return f"{STORAGE_PREFIX}:{locale}"


class DailyChallengeCache:
    """
    Serves today's challenge from persistent storage, building it on a miss.

    State per (locale, day): NoEntry -> Built -> Verified, or
    Built(incomplete) -> Repaired -> Verified. Any entry whose date is not
    today goes straight back to NoEntry.
    """

    def __init__(
        self,
        store: KeyValueStore,
        builder: DailyChallengeBuilder,
        resolver_for: Callable[[str], ArticleResolver] = default_resolver_for,
        clock: Callable[[], datetime] = seed.now,
        tz: str = DAILY_TIMEZONE,
    ) -> None:
        """
        Initialize the cache.

        Args:
            store: Persistent key-value storage
            builder: Builds a challenge on cache miss
            resolver_for: Returns the article resolver for a locale (parse lookups)
            clock: Returns the current instant
            tz: Timezone that defines "today"
        """
        self._store = store
        self._builder = builder
        self._resolver_for = resolver_for
        self._clock = clock
        self._tz = tz

    def today(self) -> str:
        return seed.today_iso(self._clock(), self._tz)

    # -------------------------------------------------------------------------
    # Storage access
    # -------------------------------------------------------------------------

    def _discard(self, key: str) -> None:
        try:
            self._store.remove(key)
        except OSError as e:
            logger.warning(f"Failed to remove cache entry {key}: {e}")

    def _read_entry(self, locale: str, today: str) -> DailyChallenge | None:
        key = build_storage_key(locale)
        try:
            raw = self._store.get(key)
        except OSError as e:
            logger.warning(f"Failed to read cached daily challenge: {e}")
            return None

        if not raw:
            return None

        try:
            entry = CachedEntry.from_json(raw)
        except CacheCorruptError as e:
            logger.warning(f"Cached daily challenge is malformed, removing it: {e}")
            self._discard(key)
            return None

        if entry.date != today:
            logger.info(f"Cached daily challenge is stale ({entry.date} != {today}), removing it")
            self._discard(key)
            return None

        if entry.challenge.locale != locale:
            logger.warning(f"Cached daily challenge is for locale {entry.challenge.locale}, removing it")
            self._discard(key)
            return None

        return entry.challenge

    def write(self, locale: str, challenge: DailyChallenge, today: str | None = None) -> None:
        """Persist ``challenge`` as today's entry; failures are only logged."""
        entry = CachedEntry(date=today or self.today(), challenge=challenge)
        try:
            self._store.set(build_storage_key(locale), entry.to_json())
        except OSError as e:
            logger.warning(f"Failed to write daily challenge cache: {e}")

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    def read(self, locale: str) -> DailyChallenge | None:
        """
        Today's cached challenge, or None. Never raises.

        Intended for an optimistic first render before ``load`` completes.
        """
        challenge = self._read_entry(locale, self.today())
        if challenge is not None:
            logger.debug(f"Loaded daily challenge from cache ({locale})")
        return challenge

    def load(self, locale: str) -> DailyChallenge:
        """
        Today's challenge: cached if fresh, otherwise built and persisted.

        Incomplete entries are repaired and API-built entries verified before
        being returned.

        Raises:
            ArticleNotFoundError: If the challenge cannot be built
            WikipediaError: If building failed on an API request
            IncompleteChallengeError: If a missing title cannot be recovered
        """
        today = self.today()
        challenge = self._read_entry(locale, today)

        if challenge is not None:
            logger.info(f"Restored daily challenge from cache ({locale}, {today})")
        else:
            try:
                challenge = self._builder.fetch(locale)
            except Exception as e:
                logger.error(f"Failed to obtain daily challenge: {e}")
                raise
            self.write(locale, challenge, today)

        goal_repaired = not challenge.goal.is_complete
        challenge = self.repair(locale, challenge, today)

        if goal_repaired:
            # The goal was just read back from the parse API
            return challenge
        return self.verify(locale, challenge, today)

    def repair(
        self,
        locale: str,
        challenge: DailyChallenge,
        today: str | None = None,
    ) -> DailyChallenge:
        """
        Fill in missing titles from the stored page ids.

        A complete challenge is returned unchanged without any request.
        Whatever could be recovered is persisted before raising.

        Raises:
            IncompleteChallengeError: If a title is still missing afterwards
        """
        if challenge.is_complete:
            return challenge

        logger.info("Daily challenge is incomplete, fetching missing titles...")
        resolver = self._resolver_for(locale)
        goal = challenge.goal
        start = challenge.start
        failures: list[str] = []

        if not goal.is_complete:
            goal = self._recover_title(resolver, "goal", goal, failures)
        if not start.is_complete:
            start = self._recover_title(resolver, "start", start, failures)

        updated = challenge.with_articles(goal=goal, start=start)
        self.write(locale, updated, today)

        if not updated.is_complete:
            raise IncompleteChallengeError(
                "Could not load the daily challenge completely: " + "; ".join(failures)
            )
        return updated

    def _recover_title(
        self,
        resolver: ArticleResolver,
        role: str,
        article: ArticleRef,
        failures: list[str],
    ) -> ArticleRef:
        try:
            parsed = resolver.fetch_page_parse_with_fallback(article)
        except WikipediaError as e:
            logger.error(f"Failed to recover {role} title: {e}")
            failures.append(f"{role} ({article.id}): {e}")
            return article

        recovered = ArticleRef(
            id=parsed.id if parsed.id is not None else article.id,
            title=parsed.title,
        )
        if not recovered.is_complete:
            logger.error(f"Recovered {role} article {recovered.id} has an empty title")
            failures.append(f"{role} ({recovered.id}): empty title")
            return article

        logger.info(f"Recovered {role} title: {recovered.title}")
        return recovered

    def verify(
        self,
        locale: str,
        challenge: DailyChallenge,
        today: str | None = None,
    ) -> DailyChallenge:
        """
        Re-check the goal against the API and follow renames/redirects.

        Pre-generated challenges are trusted and skipped. A failed check is
        logged and the challenge returned as it is.
        """
        if challenge.from_json:
            return challenge

        resolver = self._resolver_for(locale)
        try:
            # Stored id only, no id+1 fallback
            parsed = resolver.fetch_page_parse_with_fallback(challenge.goal, max_attempts=1)
        except WikipediaError as e:
            logger.warning(f"Failed to verify goal article: {e}")
            return challenge

        resolved = ArticleRef(
            id=parsed.id if parsed.id is not None else challenge.goal.id,
            title=parsed.title or challenge.goal.title,
        )
        if resolved == challenge.goal:
            return challenge

        logger.info(f"Goal article updated: {challenge.goal.title} -> {resolved.title}")
        updated = challenge.with_articles(goal=resolved)
        self.write(locale, updated, today)
        return updated

    def clear_expired(self) -> None:
        """
        Delete every cached challenge not written for today, in any locale.

        Unparsable entries are deleted too. Never raises.
        """
        today = self.today()
        prefix = f"{STORAGE_PREFIX}:"

        try:
            keys = [key for key in self._store.keys() if key.startswith(prefix)]
        except OSError as e:
            logger.warning(f"Failed to clean up daily challenge cache: {e}")
            return

        for key in keys:
            try:
                raw = self._store.get(key)
            except OSError as e:
                logger.warning(f"Failed to read cache entry {key}: {e}")
                continue
            if not raw:
                continue

            try:
                entry_date = CachedEntry.from_json(raw).date
            except CacheCorruptError:
                entry_date = None

            if entry_date != today:
                logger.debug(f"Removing expired cache entry {key} ({entry_date})")
                self._discard(key)


# Module-level instance for convenience (created on first use)
_default_cache: DailyChallengeCache | None = None


def get_default_cache() -> DailyChallengeCache:
    """Cache bound to the on-disk store and the live Wikipedia API."""
    global _default_cache
    if _default_cache is None:
        _default_cache = DailyChallengeCache(
            store=JsonFileStore(),
            builder=DailyChallengeBuilder(pregenerated=PregeneratedChallengeSource()),
        )
    return _default_cache


def load_daily_challenge_with_cache(locale: str) -> DailyChallenge:
    return get_default_cache().load(locale)


def read_cached_daily_challenge(locale: str) -> DailyChallenge | None:
    return get_default_cache().read(locale)


def clear_expired_daily_challenge_cache() -> None:
    get_default_cache().clear_expired()
