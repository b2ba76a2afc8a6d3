"""
Game state dataclasses for tracking Wikipedia Golf progress.
"""

from __future__ import annotations

from dataclasses import dataclass, field

IDLE = "idle"
PLAYING = "playing"
GAMEOVER = "gameover"


def format_time(seconds: float) -> str:
    """Elapsed time with one decimal place, e.g. ``"10.5"``."""
    return f"{seconds:.1f}"


@dataclass(frozen=True)
class HistoryEntry:
    """
    One article visited during a game.

    Attributes:
        title: Article title
        url: Request URL the article was loaded from
        stroke: Stroke count after arriving on this article
    """

    title: str
    url: str
    stroke: int


@dataclass
class GameState:
    """
    Mutable state during a game.

    The stroke counter starts at -1 so that loading the start article
    brings it to 0; every later article adds one stroke.

    Attributes:
        start_title: Starting article
        goal_title: Article to reach
        main_page_title: Visiting this page never counts as a stroke
        status: idle, playing or gameover
        history: Articles visited so far, oldest first
        stroke: Current stroke count
        started_at: Monotonic clock reading when the start article was shown
            (timed games only)
        finished_at: Monotonic clock reading when the goal was reached
    """

    start_title: str
    goal_title: str
    main_page_title: str = ""
    status: str = IDLE
    history: list[HistoryEntry] = field(default_factory=list)
    stroke: int = -1
    started_at: float | None = None
    finished_at: float | None = None

    @property
    def current_title(self) -> str | None:
        return self.history[-1].title if self.history else None

    @property
    def is_won(self) -> bool:
        return self.current_title == self.goal_title

    @property
    def path(self) -> list[str]:
        return [entry.title for entry in self.history]

    def elapsed(self, now: float) -> float | None:
        """
        Seconds since the timer started, frozen once the goal is reached.

        Returns:
            None for untimed games
        """
        if self.started_at is None:
            return None
        end = self.finished_at if self.finished_at is not None else now
        return end - self.started_at

    def record_visit(self, title: str, url: str) -> None:
        """Count a stroke for arriving on ``title`` and check for the goal."""
        if self.status == PLAYING and title != self.main_page_title:
            self.stroke += 1
            self.history.append(HistoryEntry(title=title, url=url, stroke=self.stroke))

        if title == self.goal_title:
            self.status = GAMEOVER

    def go_back(self) -> HistoryEntry | None:
        """
        Return to the previous article without counting a stroke.

        Returns:
            The entry now current, or None if there is nowhere to go back to
        """
        if len(self.history) <= 1:
            return None

        self.history.pop()
        previous = self.history[-1]
        self.stroke = previous.stroke
        self.status = PLAYING
        return previous
