"""
Resolve candidate page ids into real, in-scope Wikipedia articles.

The search checks candidate ids around a seed in bulk metadata batches,
a few batches at a time. The first valid candidate in generation order wins,
regardless of which request happened to finish first.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Protocol

from wikigolf.config import (
    ARTICLE_FETCH_MAX_ATTEMPTS,
    ARTICLE_NAMESPACE,
    MAX_CONCURRENT_BATCHES,
    MAX_SEARCH_OFFSET,
    PAGEID_CHUNK_SIZE,
    WAVE_DELAY_SECONDS,
)
from wikigolf.daily.candidates import build_candidate_batches
from wikigolf.daily.models import ArticleRef
from wikigolf.errors import ArticleNotFoundError, WikipediaError
from wikigolf.wikipedia.api import ParsedArticle, WikiApiClient
from wikigolf.wikipedia.batching import BoundedPool

logger = logging.getLogger(__name__)

# Deletion discussion pages sometimes sit in the main namespace on jawiki
DELETION_DISCUSSION_MARKER = "削除依頼"

# Project namespace prefixes that slip through without an ns field
PROJECT_NAMESPACE_PREFIXES = ("Wikipedia:", "WP:", "プロジェクト:")


class WikiApi(Protocol):
    """The subset of WikiApiClient the resolver depends on."""

    def query_pages(self, page_ids: list[int]) -> dict[str, dict[str, Any]]: ...

    def parse(
        self,
        page_id: int | None = None,
        title: str | None = None,
        timeout: float = ...,
    ) -> ParsedArticle: ...


def is_valid_article_page(page: dict[str, Any] | None) -> bool:
    """
    Whether a metadata record denotes an existing main-namespace article.

    The API marks absent pages with ``missing``/``invalid`` keys (their
    values are empty strings, so presence is what counts).
    """
    if not page or "missing" in page or "invalid" in page:
        return False

    title = page.get("title")
    if not title:
        logger.debug(f"Page {page.get('pageid')} has no title, skipping")
        return False

    if DELETION_DISCUSSION_MARKER in title or title.startswith(PROJECT_NAMESPACE_PREFIXES):
        logger.debug(f"Page {page.get('pageid')} ({title}) is a project page, skipping")
        return False

    namespace = page.get("ns")
    if namespace is not None and namespace != ARTICLE_NAMESPACE:
        logger.debug(f"Page {page.get('pageid')} ({title}) is in namespace {namespace}, skipping")
        return False

    return True


class ArticleResolver:
    """
    Finds the first usable article near a seed page id.

    Attributes are fixed at construction; the resolver keeps no state
    between searches.
    """

    def __init__(
        self,
        client: WikiApi,
        pool: BoundedPool | None = None,
        max_offset: int = MAX_SEARCH_OFFSET,
        batch_size: int = PAGEID_CHUNK_SIZE,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            client: Wikipedia API client for one locale
            pool: Wave scheduler for batch lookups
            max_offset: Candidate ids checked on each side of the seed
            batch_size: Ids per bulk metadata query
        """
        self._client = client
        self._pool = pool or BoundedPool(
            max_concurrent=MAX_CONCURRENT_BATCHES,
            wave_delay=WAVE_DELAY_SECONDS,
        )
        self._max_offset = max_offset
        self._batch_size = batch_size

    def find_article(self, base_id: int, require_parseable: bool = False) -> ArticleRef:
        """
        Resolve the first valid article at or around ``base_id``.

        Args:
            base_id: Seed page id
            require_parseable: Also require that the article renders

        Returns:
            ArticleRef with canonical id and title

        Raises:
            ArticleNotFoundError: If no candidate qualifies
        """
        batches = build_candidate_batches(base_id, self._max_offset, self._batch_size)
        logger.info(
            f"Searching near id {base_id}: {sum(len(b) for b in batches)} candidates "
            f"in {len(batches)} batches"
        )

        for wave in self._pool.waves(self._client.query_pages, batches):
            # Whole wave is complete here; scan it in candidate order
            for outcome in wave:
                if not outcome.ok:
                    logger.error(f"Page metadata lookup failed: {outcome.error}")
                    continue

                pages = outcome.value or {}
                for candidate_id in outcome.item:
                    page = pages.get(str(candidate_id))
                    if not is_valid_article_page(page):
                        continue

                    article = ArticleRef(id=page.get("pageid", candidate_id), title=page["title"])
                    if require_parseable and not self._is_parseable(article):
                        continue

                    logger.info(f"Found valid article: id {article.id} - {article.title}")
                    return article

        raise ArticleNotFoundError(base_id, parseable=require_parseable)

    def _is_parseable(self, article: ArticleRef) -> bool:
        try:
            self.fetch_page_parse_with_fallback(article, max_attempts=1)
        except WikipediaError as e:
            logger.info(f"Article id {article.id} ({article.title}) cannot be parsed ({e}), trying next")
            return False
        return True

    def fetch_page_parse_with_fallback(
        self,
        identifier: ArticleRef,
        max_attempts: int = ARTICLE_FETCH_MAX_ATTEMPTS,
    ) -> ParsedArticle:
        """
        Parse an article, stepping to id+1, id+2, ... when parsing fails.

        Without an id the title is parsed once. Each attempt carries the
        client's strict parse timeout.

        Args:
            identifier: Article id (preferred) and/or title
            max_attempts: Number of consecutive ids to try

        Returns:
            ParsedArticle with canonical id, title and HTML

        Raises:
            WikipediaError: The last error observed once attempts run out
        """
        if identifier.id is None:
            logger.debug(f"Parsing article '{identifier.title}'")
            return self._client.parse(title=identifier.title)

        attempts = max(1, max_attempts)
        candidate_id = identifier.id
        for attempt in range(attempts):
            try:
                logger.debug(f"Parsing article id {candidate_id}")
                parsed = self._client.parse(page_id=candidate_id)
            except WikipediaError:
                if attempt == attempts - 1:
                    raise
                candidate_id += 1
                continue

            if parsed.id is None:
                parsed.id = candidate_id
            if not parsed.title:
                parsed.title = identifier.title
            return parsed

        raise AssertionError("unreachable")


@lru_cache(maxsize=None)
def default_resolver_for(locale: str) -> ArticleResolver:
    """Shared resolver (and API client) per locale."""
    return ArticleResolver(WikiApiClient(locale))
