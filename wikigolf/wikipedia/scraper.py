"""
Link extraction from rendered article HTML.

The parse API returns the article body only (``div.mw-parser-output``);
this module picks out the clickable links that lead to other articles.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import unquote

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# Pattern for valid Wikipedia article hrefs
ARTICLE_PATTERN = re.compile(r"^/wiki/([^#?]+)")

# Namespaces that are never articles (English and Japanese names)
# Note: Use spaces not underscores - titles get underscores converted to spaces
EXCLUDED_PREFIXES = (
    "Wikipedia:",
    "Help:",
    "Template:",
    "Template talk:",
    "Category:",
    "Portal:",
    "File:",
    "Special:",
    "Talk:",
    "User:",
    "User talk:",
    "Module:",
    "MediaWiki:",
    "Draft:",
    "MOS:",
    "WP:",
    "ヘルプ:",
    "Template‐ノート:",
    "カテゴリ:",
    "ポータル:",
    "ファイル:",
    "画像:",
    "特別:",
    "ノート:",
    "利用者:",
    "利用者‐会話:",
    "プロジェクト:",
    "モジュール:",
)

# Containers whose links are not part of the playable article body
SKIP_CLASSES = {
    "navbox",
    "infobox",
    "sidebar",
    "references",
    "reflist",
    "refbegin",
    "mw-references-wrap",
    "toc",
    "vertical-navbox",
    "navigation-not-searchable",
}


def href_to_title(href: str | None) -> str | None:
    """Convert a ``/wiki/...`` href into an article title, or None."""
    if not href:
        return None
    match = ARTICLE_PATTERN.match(href)
    if not match:
        return None
    return unquote(match.group(1)).replace("_", " ")


def is_article_title(title: str) -> bool:
    """Whether a title belongs to the main article namespace."""
    return bool(title) and not title.startswith(EXCLUDED_PREFIXES)


def extract_links(html: str) -> list[str]:
    """
    Extract unique article titles linked from the article body.

    Links inside navboxes, infoboxes, reference lists and similar containers
    are skipped, as are links to non-article namespaces. Order of first
    appearance is preserved.
    """
    soup = BeautifulSoup(html, "lxml")
    root = soup.find("div", {"class": "mw-parser-output"}) or soup

    links: list[str] = []
    seen: set[str] = set()

    for anchor in root.find_all("a", href=True):
        skip = False
        for parent in anchor.parents:
            if parent is root:
                break
            if SKIP_CLASSES & set(parent.get("class") or []):
                skip = True
                break
        if skip:
            continue

        # Red links point to index.php and never match the pattern
        title = href_to_title(anchor.get("href"))
        if title is None or not is_article_title(title):
            continue

        if title not in seen:
            links.append(title)
            seen.add(title)

    logger.debug(f"Found {len(links)} links")
    return links
