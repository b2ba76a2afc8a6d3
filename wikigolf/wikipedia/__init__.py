"""
Wikipedia interaction module.

Provides the MediaWiki API client, retry and batching helpers,
and link extraction from rendered articles.
"""

from wikigolf.wikipedia.api import ParsedArticle, WikiApiClient
from wikigolf.wikipedia.batching import BoundedPool, Outcome, chunk
from wikigolf.wikipedia.retry import RetryPolicy
from wikigolf.wikipedia.scraper import extract_links

__all__ = [
    "WikiApiClient",
    "ParsedArticle",
    "BoundedPool",
    "Outcome",
    "chunk",
    "RetryPolicy",
    "extract_links",
]
