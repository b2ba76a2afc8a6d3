"""
Client for the public MediaWiki action API.

Wraps the three operations the game depends on: bulk page metadata lookup,
article parsing by id or title, and random article selection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

from wikigolf.config import (
    ARTICLE_FETCH_TIMEOUT,
    PARSE_RETRY_ATTEMPTS,
    QUERY_RETRY_ATTEMPTS,
    QUERY_RETRY_BASE_DELAY,
    SUPPORTED_LOCALES,
    USER_AGENT,
    WIKIPEDIA_API_URL,
    WIKIPEDIA_TIMEOUT,
)
from wikigolf.errors import ApiError, EmptyArticleError, TransportError
from wikigolf.wikipedia.retry import RetryPolicy

logger = logging.getLogger(__name__)


@dataclass
class ParsedArticle:
    """
    Rendered article returned by the parse API.

    Attributes:
        id: Canonical page id (None if the API did not report one)
        title: Canonical article title
        html: Rendered article HTML
    """

    id: int | None
    title: str
    html: str


class WikiApiClient:
    """
    Thin wrapper around ``https://<locale>.wikipedia.org/w/api.php``.

    Transport failures are raised as TransportError, error objects in the
    response body as ApiError. Metadata queries are retried with backoff;
    parse requests use their own (by default single-attempt) policy and a
    strict timeout.
    """

    def __init__(
        self,
        locale: str = "ja",
        session: requests.Session | None = None,
        query_retry: RetryPolicy | None = None,
        parse_retry: RetryPolicy | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            locale: Wikipedia language edition ("ja" or "en")
            session: Optional requests session (shared connection pool)
            query_retry: Retry policy for metadata queries
            parse_retry: Retry policy for parse requests
        """
        if locale not in SUPPORTED_LOCALES:
            raise ValueError(f"Unsupported locale '{locale}'")
        self.locale = locale
        self.api_url = WIKIPEDIA_API_URL.format(locale=locale)

        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": USER_AGENT})
        self._query_retry = query_retry or RetryPolicy(
            max_attempts=QUERY_RETRY_ATTEMPTS,
            base_delay=QUERY_RETRY_BASE_DELAY,
        )
        self._parse_retry = parse_retry or RetryPolicy(max_attempts=PARSE_RETRY_ATTEMPTS)

    def _get_json(self, params: dict[str, Any], timeout: float) -> dict[str, Any]:
        """Issue one GET and return the decoded body, raising on errors."""
        params = {"format": "json", **params}
        try:
            response = self._session.get(self.api_url, params=params, timeout=timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise TransportError(f"{params.get('action')} request failed: {e}") from e
        except ValueError as e:
            raise TransportError(f"{params.get('action')} returned invalid JSON") from e

        if not isinstance(data, dict):
            raise TransportError(f"{params.get('action')} returned unexpected payload")

        if "error" in data:
            error = data["error"] or {}
            raise ApiError(
                code=str(error.get("code", "unknown")),
                info=str(error.get("info", "")),
            )
        return data

    def query_pages(self, page_ids: list[int]) -> dict[str, dict[str, Any]]:
        """
        Look up metadata for up to 50 page ids in one request.

        Returns:
            Mapping of page id (as string) to the API's page record, which
            carries ``pageid``, ``title``, ``ns`` and ``missing``/``invalid``
            flags as reported.

        Raises:
            TransportError: If all retries failed
            ApiError: If the API reported an error
        """
        query_ids = "|".join(str(page_id) for page_id in page_ids)
        params = {"action": "query", "pageids": query_ids}

        data = self._query_retry.call(
            lambda: self._get_json(params, timeout=WIKIPEDIA_TIMEOUT),
            description=f"Metadata query ({len(page_ids)} ids)",
        )
        return (data.get("query") or {}).get("pages") or {}

    def parse(
        self,
        page_id: int | None = None,
        title: str | None = None,
        timeout: float = ARTICLE_FETCH_TIMEOUT,
    ) -> ParsedArticle:
        """
        Fetch the rendered content of an article by id, or by title.

        Raises:
            TransportError: On network failure or timeout
            ApiError: If the API reported an error (e.g. missing page)
            EmptyArticleError: If the article has no content
        """
        if page_id is not None:
            params: dict[str, Any] = {"action": "parse", "pageid": page_id}
            label = f"id {page_id}"
        elif title:
            params = {"action": "parse", "page": title}
            label = f"'{title}'"
        else:
            raise ValueError("parse() needs a page_id or a title")

        logger.debug(f"Parsing article {label}")
        data = self._parse_retry.call(
            lambda: self._get_json(params, timeout=timeout),
            description=f"Parse {label}",
        )

        parsed = data.get("parse") or {}
        html = (parsed.get("text") or {}).get("*")
        if not html:
            raise EmptyArticleError(f"Article content is empty for {label}")

        return ParsedArticle(
            id=parsed.get("pageid", page_id),
            title=parsed.get("title") or title or "",
            html=html,
        )

    def random_titles(self, limit: int = 1) -> list[str]:
        """Return titles of random main-namespace articles."""
        params = {
            "action": "query",
            "list": "random",
            "rnnamespace": 0,
            "rnlimit": limit,
        }
        data = self._query_retry.call(
            lambda: self._get_json(params, timeout=WIKIPEDIA_TIMEOUT),
            description="Random article query",
        )
        return [item["title"] for item in (data.get("query") or {}).get("random", [])]

    def article_url(self, title: str) -> str:
        """URL of the parse request for a title (stored in game history)."""
        return requests.Request(
            "GET",
            self.api_url,
            params={"action": "parse", "page": title, "format": "json"},
        ).prepare().url

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "WikiApiClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()
