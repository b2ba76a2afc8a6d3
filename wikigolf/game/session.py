"""
Game session: start modes, navigation, stroke counting and game over.

The session talks to the Wikipedia API for article content and for random
start/goal selection; the daily challenge is resolved by the caller
(see ``wikigolf.daily``) and handed in already complete.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from wikigolf.config import MAIN_PAGE_TITLES, WIKIPEDIA_TIMEOUT
from wikigolf.daily.models import DailyChallenge
from wikigolf.game.state import GAMEOVER, PLAYING, GameState, HistoryEntry
from wikigolf.wikipedia.api import WikiApiClient
from wikigolf.wikipedia.scraper import extract_links

logger = logging.getLogger(__name__)

DAILY = "daily"
DAILY_TA = "daily-ta"
RANDOM = "random"
CUSTOM = "custom"


class GameSession:
    """
    Drives one game of Wikipedia Golf.

    Article HTML is cached per session so that going back never refetches.
    In daily time attack the clock runs from the moment the start article is
    shown until the goal is reached, and going back is disabled.
    """

    def __init__(
        self,
        client: WikiApiClient,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the session.

        Args:
            client: Wikipedia API client; its locale is the game's locale
            clock: Monotonic clock for time attack (injected in tests)
        """
        self._client = client
        self._clock = clock
        self._article_cache: dict[str, str] = {}
        self.state: GameState | None = None
        self.mode: str | None = None
        self.html: str = ""
        self.links: list[str] = []

    @property
    def locale(self) -> str:
        return self._client.locale

    @property
    def is_over(self) -> bool:
        return self.state is not None and self.state.status == GAMEOVER

    @property
    def is_time_attack(self) -> bool:
        return self.mode == DAILY_TA

    @property
    def can_go_back(self) -> bool:
        return (
            self.state is not None
            and not self.is_time_attack
            and len(self.state.history) > 1
        )

    @property
    def elapsed(self) -> float | None:
        """Seconds on the time attack clock, None for untimed games."""
        if self.state is None:
            return None
        return self.state.elapsed(self._clock())

    def _begin(self, start_title: str, goal_title: str, mode: str) -> GameState:
        logger.info(f"Starting {mode} game: '{start_title}' -> '{goal_title}'")
        self.mode = mode
        self.state = GameState(
            start_title=start_title,
            goal_title=goal_title,
            main_page_title=MAIN_PAGE_TITLES.get(self.locale, ""),
            status=PLAYING,
        )
        self._load(start_title)

        if self.is_time_attack:
            self.state.started_at = self._clock()
            if self.is_over:
                self.state.finished_at = self.state.started_at
        return self.state

    def start_daily(self, challenge: DailyChallenge, time_attack: bool = False) -> GameState:
        """Start today's daily challenge, optionally against the clock."""
        if challenge.locale != self.locale:
            raise ValueError(
                f"Challenge locale '{challenge.locale}' does not match session locale '{self.locale}'"
            )
        if not challenge.is_complete:
            raise ValueError("Daily challenge is missing a title")
        mode = DAILY_TA if time_attack else DAILY
        return self._begin(challenge.start.title, challenge.goal.title, mode)

    def start_random(self) -> GameState:
        """Start a game between two random articles."""
        titles = self._client.random_titles(limit=2)
        while len(titles) < 2 or titles[0] == titles[1]:
            titles = self._client.random_titles(limit=2)
        return self._begin(titles[0], titles[1], RANDOM)

    def start_custom(self, start_title: str, goal_title: str) -> GameState:
        """Start a game between two given articles."""
        if not start_title or not goal_title:
            raise ValueError("Custom game needs both a start and a goal title")
        return self._begin(start_title, goal_title, CUSTOM)

    def _fetch_html(self, title: str) -> str:
        cache_key = f"{self.locale}:{title}"
        if cache_key not in self._article_cache:
            self._article_cache[cache_key] = self._client.parse(
                title=title, timeout=WIKIPEDIA_TIMEOUT
            ).html
        return self._article_cache[cache_key]

    def _load(self, title: str) -> None:
        self.html = self._fetch_html(title)
        self.links = extract_links(self.html)
        self.state.record_visit(title, self._client.article_url(title))

        if self.state.status == GAMEOVER:
            if self.state.started_at is not None and self.state.finished_at is None:
                self.state.finished_at = self._clock()
            logger.info(f"Goal reached in {self.state.stroke} strokes: {' -> '.join(self.state.path)}")

    def navigate(self, title: str) -> GameState:
        """
        Follow a link from the current article.

        Raises:
            RuntimeError: If no game is in progress
            ValueError: If ``title`` is not linked from the current article
            WikipediaError: If the article cannot be fetched
        """
        if self.state is None or self.state.status != PLAYING:
            raise RuntimeError("No game in progress")
        if title not in self.links:
            raise ValueError(f"'{title}' is not linked from '{self.state.current_title}'")

        logger.debug(f"Stroke {self.state.stroke + 1}: '{self.state.current_title}' -> '{title}'")
        self._load(title)
        return self.state

    def back(self) -> HistoryEntry | None:
        """
        Return to the previous article; the stroke count is restored.

        Raises:
            RuntimeError: In time attack, where going back is disabled
        """
        if self.state is None:
            return None
        if self.is_time_attack:
            raise RuntimeError("Going back is disabled in time attack")

        previous = self.state.go_back()
        if previous is not None:
            self.html = self._fetch_html(previous.title)
            self.links = extract_links(self.html)
        return previous
