"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides
fixtures available to all test files. Nothing here touches the network:
the Wikipedia API is replaced by an in-memory fake.
"""

from __future__ import annotations

import threading
import time
from datetime import datetime, timezone
from pathlib import Path

import pytest

from wikigolf.daily.builder import DailyChallengeBuilder
from wikigolf.daily.cache import DailyChallengeCache
from wikigolf.daily.resolver import ArticleResolver
from wikigolf.daily.storage import MemoryStore
from wikigolf.errors import ApiError, TransportError
from wikigolf.wikipedia.api import ParsedArticle
from wikigolf.wikipedia.batching import BoundedPool

# 2024-03-15 03:00 in Asia/Tokyo
FIXED_NOW = datetime(2024, 3, 14, 18, 0, tzinfo=timezone.utc)
TODAY = "2024-03-15"


def article_html(links: list[str]) -> str:
    """Minimal parse-API body linking to the given titles."""
    anchors = " ".join(
        f'<a href="/wiki/{title.replace(" ", "_")}" title="{title}">{title}</a>'
        for title in links
    )
    return f'<div class="mw-parser-output"><p>{anchors}</p></div>'


class FakeWikiApi:
    """
    In-memory stand-in for WikiApiClient.

    Attributes:
        pages: page id -> metadata overrides ({"title": ..., "ns": ...})
        links: title -> titles linked from that article
        unparseable: page ids whose parse request fails
        renamed: page id -> (canonical id, canonical title) reported by parse
        failing_batches: first id of batches whose metadata query fails
        slow_batches: first id of batches that respond late
    """

    def __init__(self, pages: dict[int, dict] | None = None, locale: str = "ja") -> None:
        self.locale = locale
        self.pages = dict(pages or {})
        self.links: dict[str, list[str]] = {}
        self.unparseable: set[int] = set()
        self.renamed: dict[int, tuple[int, str]] = {}
        self.failing_batches: set[int] = set()
        self.slow_batches: set[int] = set()
        self.random_queue: list[list[str]] = []

        self.query_calls: list[list[int]] = []
        self.parse_calls: list[int | str] = []
        self.parse_timeouts: list[float] = []
        self._lock = threading.Lock()

    def add_article(self, page_id: int, title: str, links: list[str] | None = None, **extra) -> None:
        self.pages[page_id] = {"title": title, "ns": 0, **extra}
        self.links[title] = list(links or [])

    def query_pages(self, page_ids: list[int]) -> dict[str, dict]:
        with self._lock:
            self.query_calls.append(list(page_ids))
        if page_ids and page_ids[0] in self.slow_batches:
            time.sleep(0.05)
        if page_ids and page_ids[0] in self.failing_batches:
            raise TransportError(f"batch starting at {page_ids[0]} failed")

        result = {}
        for page_id in page_ids:
            page = self.pages.get(page_id)
            if page is None:
                result[str(page_id)] = {"pageid": page_id, "missing": ""}
            else:
                result[str(page_id)] = {"pageid": page_id, **page}
        return result

    def parse(self, page_id: int | None = None, title: str | None = None, timeout: float = 2) -> ParsedArticle:
        with self._lock:
            self.parse_calls.append(page_id if page_id is not None else title)
            self.parse_timeouts.append(timeout)

        if page_id is not None:
            if page_id in self.unparseable or page_id not in self.pages:
                raise ApiError("nosuchpageid", f"There is no page with ID {page_id}.")
            canonical_id, canonical_title = self.renamed.get(
                page_id, (page_id, self.pages[page_id]["title"])
            )
            return ParsedArticle(
                id=canonical_id,
                title=canonical_title,
                html=article_html(self.links.get(canonical_title, [])),
            )

        for pid, page in self.pages.items():
            if page["title"] == title:
                return ParsedArticle(id=pid, title=title, html=article_html(self.links.get(title, [])))
        raise ApiError("missingtitle", "The page you specified doesn't exist.")

    def random_titles(self, limit: int = 1) -> list[str]:
        return self.random_queue.pop(0)[:limit]

    def article_url(self, title: str) -> str:
        return f"https://{self.locale}.wikipedia.org/w/api.php?action=parse&page={title}"

    @property
    def queried_ids(self) -> list[int]:
        return sorted(pid for call in self.query_calls for pid in call)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def clock():
    """Clock frozen at 2024-03-15 (Asia/Tokyo)."""
    return lambda: FIXED_NOW


@pytest.fixture
def fake_api() -> FakeWikiApi:
    return FakeWikiApi()


@pytest.fixture
def pool() -> BoundedPool:
    """Wave scheduler without inter-wave delay."""
    return BoundedPool(max_concurrent=5, wave_delay=0)


@pytest.fixture
def resolver(fake_api: FakeWikiApi, pool: BoundedPool) -> ArticleResolver:
    return ArticleResolver(fake_api, pool=pool, max_offset=200, batch_size=50)


@pytest.fixture
def builder(resolver: ArticleResolver, clock) -> DailyChallengeBuilder:
    return DailyChallengeBuilder(resolver_for=lambda locale: resolver, clock=clock)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def cache(store: MemoryStore, builder: DailyChallengeBuilder, resolver: ArticleResolver, clock) -> DailyChallengeCache:
    return DailyChallengeCache(
        store=store,
        builder=builder,
        resolver_for=lambda locale: resolver,
        clock=clock,
    )


@pytest.fixture
def daily_api(fake_api: FakeWikiApi) -> FakeWikiApi:
    """
    Articles for the 2024-03-15 challenge.

    Base id 533100, so the goal search starts at 533200 and the start search
    at 533203 + 1000 = 534203.
    """
    fake_api.add_article(533203, "ゴール記事")
    fake_api.add_article(533197, "遠い記事")
    fake_api.add_article(534205, "スタート記事", links=["中間記事"])
    fake_api.add_article(534210, "中間記事", links=["ゴール記事"])
    return fake_api
