"""
Daily challenge records and their persisted JSON form.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Any

from wikigolf.config import SUPPORTED_LOCALES
from wikigolf.errors import CacheCorruptError


@dataclass(frozen=True)
class ArticleRef:
    """
    One Wikipedia article.

    Attributes:
        id: External page id (None until resolved)
        title: Article title; empty means the title still needs resolving
    """

    id: int | None
    title: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.title and self.title.strip())

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title}

    @classmethod
    def from_dict(cls, data: Any) -> ArticleRef:
        if not isinstance(data, dict):
            raise CacheCorruptError(f"Article entry is not an object: {data!r}")

        page_id = data.get("id")
        if page_id is not None and (isinstance(page_id, bool) or not isinstance(page_id, int)):
            raise CacheCorruptError(f"Invalid article id: {page_id!r}")

        title = data.get("title")
        if title is None:
            title = ""
        if not isinstance(title, str):
            raise CacheCorruptError(f"Invalid article title: {title!r}")

        if page_id is None and not title:
            raise CacheCorruptError("Article entry has neither id nor title")
        return cls(id=page_id, title=title)


@dataclass(frozen=True)
class DailyChallenge:
    """
    The canonical start/goal pair for one locale and day.

    Attributes:
        locale: Wikipedia language edition
        date: Calendar date (YYYY-MM-DD, Asia/Tokyo)
        goal: Article the player must reach
        start: Article the player starts from
        from_json: Loaded from a pre-generated document (skips verification)
    """

    locale: str
    date: str
    goal: ArticleRef
    start: ArticleRef
    from_json: bool = False

    @property
    def is_complete(self) -> bool:
        return self.goal.is_complete and self.start.is_complete

    def with_articles(
        self,
        goal: ArticleRef | None = None,
        start: ArticleRef | None = None,
    ) -> DailyChallenge:
        return replace(self, goal=goal or self.goal, start=start or self.start)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "locale": self.locale,
            "date": self.date,
            "goal": self.goal.to_dict(),
            "start": self.start.to_dict(),
        }
        if self.from_json:
            data["fromJson"] = True
        return data

    @classmethod
    def from_dict(cls, data: Any) -> DailyChallenge:
        """
        Build a challenge from its JSON object.

        Raises:
            CacheCorruptError: If a required field is missing or mistyped
        """
        if not isinstance(data, dict):
            raise CacheCorruptError("Challenge is not an object")

        locale = data.get("locale")
        if locale not in SUPPORTED_LOCALES:
            raise CacheCorruptError(f"Invalid locale: {locale!r}")

        day = data.get("date")
        if not isinstance(day, str) or not day:
            raise CacheCorruptError(f"Invalid date: {day!r}")

        if "goal" not in data or "start" not in data:
            raise CacheCorruptError("Challenge is missing goal or start")

        return cls(
            locale=locale,
            date=day,
            goal=ArticleRef.from_dict(data["goal"]),
            start=ArticleRef.from_dict(data["start"]),
            from_json=bool(data.get("fromJson", False)),
        )


@dataclass(frozen=True)
class CachedEntry:
    """
    Persisted cache record for one locale.

    Attributes:
        date: Day the entry was written for (YYYY-MM-DD, Asia/Tokyo)
        challenge: The cached challenge
    """

    date: str
    challenge: DailyChallenge

    def to_json(self) -> str:
        return json.dumps(
            {"date": self.date, "challenge": self.challenge.to_dict()},
            ensure_ascii=False,
        )

    @classmethod
    def from_json(cls, raw: str) -> CachedEntry:
        """
        Parse a stored entry.

        Raises:
            CacheCorruptError: If the payload is not valid JSON or malformed
        """
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise CacheCorruptError(f"Cached entry is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise CacheCorruptError("Cached entry is not an object")

        day = data.get("date")
        if not isinstance(day, str):
            raise CacheCorruptError(f"Cached entry has invalid date: {day!r}")

        if not data.get("challenge"):
            raise CacheCorruptError("Cached entry has no challenge")

        return cls(date=day, challenge=DailyChallenge.from_dict(data["challenge"]))
