"""
Unit tests for DailyChallengeCache: freshness, repair, verification and
expiry sweeping.
"""

import json

import pytest

from wikigolf.daily.cache import DailyChallengeCache, build_storage_key
from wikigolf.daily.models import ArticleRef, CachedEntry, DailyChallenge
from wikigolf.daily.storage import MemoryStore
from wikigolf.errors import ArticleNotFoundError, IncompleteChallengeError

from conftest import TODAY

KEY = build_storage_key("ja")


def make_challenge(goal=(533203, "ゴール記事"), start=(534205, "スタート記事"), **kwargs):
    return DailyChallenge(
        locale=kwargs.pop("locale", "ja"),
        date=kwargs.pop("date", TODAY),
        goal=ArticleRef(*goal),
        start=ArticleRef(*start),
        **kwargs,
    )


def put(store, challenge, day=TODAY, key=KEY):
    store.set(key, CachedEntry(date=day, challenge=challenge).to_json())


class FailingStore(MemoryStore):
    """Store whose every operation fails like an unavailable disk."""

    def get(self, key):
        raise OSError("storage unavailable")

    def set(self, key, value):
        raise OSError("storage unavailable")

    def keys(self):
        raise OSError("storage unavailable")


class TestRead:
    """Test the optimistic, never-raising read."""

    def test_storage_key(self):
        assert build_storage_key("en") == "dailyChallenge:en"

    def test_fresh_entry(self, cache, store):
        put(store, make_challenge())
        assert cache.read("ja") == make_challenge()

    def test_stale_entry_is_deleted(self, cache, store):
        put(store, make_challenge(date="2024-03-14"), day="2024-03-14")

        assert cache.read("ja") is None
        assert KEY not in store

    def test_corrupt_entry_is_a_miss(self, cache, store):
        store.set(KEY, "{not json")

        assert cache.read("ja") is None
        assert KEY not in store

    @pytest.mark.parametrize(
        "raw",
        [
            "[]",
            json.dumps({"date": TODAY}),
            json.dumps({"date": TODAY, "challenge": {"locale": "ja", "date": TODAY}}),
            json.dumps({"date": 20240315, "challenge": make_challenge().to_dict()}),
        ],
    )
    def test_malformed_entry_is_a_miss(self, cache, store, raw):
        store.set(KEY, raw)
        assert cache.read("ja") is None
        assert KEY not in store

    def test_foreign_locale_entry_is_a_miss(self, cache, store):
        put(store, make_challenge(locale="en"))
        assert cache.read("ja") is None

    def test_store_failure_reads_as_miss(self, builder, resolver, clock):
        cache = DailyChallengeCache(FailingStore(), builder, lambda locale: resolver, clock)
        assert cache.read("ja") is None

    def test_read_makes_no_requests(self, cache, store, fake_api):
        put(store, make_challenge())
        cache.read("ja")
        assert fake_api.query_calls == []
        assert fake_api.parse_calls == []


class TestLoad:
    """Test the full load path."""

    def test_miss_builds_and_persists(self, cache, store, daily_api):
        challenge = cache.load("ja")

        assert challenge.goal == ArticleRef(533203, "ゴール記事")
        assert challenge.start == ArticleRef(534205, "スタート記事")
        entry = CachedEntry.from_json(store.get(KEY))
        assert entry.date == TODAY
        assert entry.challenge == challenge

    def test_second_load_uses_cache(self, cache, daily_api):
        cache.load("ja")
        queries = len(daily_api.query_calls)

        assert cache.load("ja").goal.id == 533203
        assert len(daily_api.query_calls) == queries

    def test_hit_verifies_goal(self, cache, store, daily_api):
        put(store, make_challenge())

        cache.load("ja")
        assert daily_api.parse_calls == [533203]
        assert daily_api.query_calls == []

    def test_pregenerated_entry_skips_verification(self, cache, store, daily_api):
        put(store, make_challenge(from_json=True))

        challenge = cache.load("ja")
        assert challenge.from_json is True
        assert daily_api.parse_calls == []

    def test_renamed_goal_is_updated(self, cache, store, daily_api):
        put(store, make_challenge())
        daily_api.renamed[533203] = (533203, "ゴール記事 (改名)")

        challenge = cache.load("ja")
        assert challenge.goal == ArticleRef(533203, "ゴール記事 (改名)")
        assert CachedEntry.from_json(store.get(KEY)).challenge.goal.title == "ゴール記事 (改名)"

    def test_verification_failure_keeps_challenge(self, cache, store, fake_api):
        put(store, make_challenge(goal=(700, "消えた記事")))

        challenge = cache.load("ja")
        assert challenge.goal == ArticleRef(700, "消えた記事")
        assert fake_api.parse_calls == [700]

    def test_verification_never_moves_to_neighbouring_id(self, cache, store, fake_api):
        """A deleted goal must not be replaced by whatever sits at id+1."""
        put(store, make_challenge(goal=(700, "消えた記事")))
        fake_api.add_article(701, "無関係な記事")

        challenge = cache.load("ja")
        assert challenge.goal == ArticleRef(700, "消えた記事")
        assert fake_api.parse_calls == [700]
        assert CachedEntry.from_json(store.get(KEY)).challenge.goal == ArticleRef(700, "消えた記事")

    def test_build_failure_propagates(self, cache, store, fake_api):
        with pytest.raises(ArticleNotFoundError):
            cache.load("ja")
        assert KEY not in store

    def test_store_write_failure_still_returns(self, builder, resolver, daily_api, clock):
        cache = DailyChallengeCache(FailingStore(), builder, lambda locale: resolver, clock)
        assert cache.load("ja").goal.id == 533203


class TestRepair:
    """Test recovery of missing titles from stored ids."""

    def test_complete_challenge_is_untouched(self, cache, fake_api):
        challenge = make_challenge()

        first = cache.repair("ja", challenge)
        second = cache.repair("ja", first)

        assert first == challenge
        assert second == challenge
        assert fake_api.parse_calls == []

    def test_missing_goal_title_is_recovered(self, cache, store, daily_api):
        put(store, make_challenge(goal=(533203, "")))

        challenge = cache.load("ja")
        assert challenge.goal.title == "ゴール記事"
        # No separate verification after a goal repair
        assert daily_api.parse_calls == [533203]
        stored = CachedEntry.from_json(store.get(KEY)).challenge
        assert stored.goal.title == "ゴール記事"

    def test_missing_start_title_is_recovered(self, cache, store, daily_api):
        put(store, make_challenge(start=(534205, "")))

        challenge = cache.load("ja")
        assert challenge.start.title == "スタート記事"
        assert daily_api.parse_calls == [534205, 533203]

    def test_unrecoverable_title_raises(self, cache, store, daily_api):
        put(store, make_challenge(goal=(533203, ""), start=(999, "")))

        with pytest.raises(IncompleteChallengeError):
            cache.load("ja")

        # The recovered goal title is kept for the next attempt
        stored = CachedEntry.from_json(store.get(KEY)).challenge
        assert stored.goal.title == "ゴール記事"
        assert stored.start.title == ""

    def test_blank_recovered_title_is_reported(self, cache, store, daily_api):
        put(store, make_challenge(goal=(533203, "")))
        daily_api.renamed[533203] = (533203, "")

        with pytest.raises(IncompleteChallengeError, match=r"goal \(533203\): empty title"):
            cache.load("ja")
        assert CachedEntry.from_json(store.get(KEY)).challenge.goal == ArticleRef(533203, "")


class TestClearExpired:
    """Test the startup sweep."""

    def test_removes_stale_entries_in_every_locale(self, cache, store):
        put(store, make_challenge(), key=build_storage_key("ja"))
        put(store, make_challenge(locale="en", date="2024-03-14"), day="2024-03-14", key=build_storage_key("en"))
        store.set("dailyChallenge:old", "{not json")
        store.set("unrelated", "keep me")

        cache.clear_expired()

        assert set(store.keys()) == {build_storage_key("ja"), "unrelated"}

    def test_never_raises(self, builder, resolver, clock):
        cache = DailyChallengeCache(FailingStore(), builder, lambda locale: resolver, clock)
        cache.clear_expired()
