"""
Exception hierarchy for Wikipedia Golf.

Transport problems are retried, API-reported errors are not, and an
exhausted candidate search is terminal for the daily challenge build.
"""

from __future__ import annotations


class WikiGolfError(Exception):
    """Base class for all errors raised by this package."""


class WikipediaError(WikiGolfError):
    """A single Wikipedia API request failed."""


class TransportError(WikipediaError):
    """Network failure, timeout, non-2xx status, or undecodable body."""


class ApiError(WikipediaError):
    """The API answered with an error object in the response body."""

    def __init__(self, code: str, info: str = "") -> None:
        self.code = code
        self.info = info
        super().__init__(info or code)


class EmptyArticleError(WikipediaError):
    """A parse request succeeded but returned no article content."""


class ArticleNotFoundError(WikiGolfError):
    """No candidate near the base id denotes a usable article."""

    def __init__(self, base_id: int, parseable: bool = False) -> None:
        self.base_id = base_id
        kind = "parseable Wikipedia article" if parseable else "valid Wikipedia article"
        super().__init__(f"Could not resolve a {kind} near id {base_id}")


class CacheCorruptError(WikiGolfError):
    """A persisted daily challenge entry is malformed."""


class IncompleteChallengeError(WikiGolfError):
    """A daily challenge title could not be recovered."""
