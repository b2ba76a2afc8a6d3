"""
Game module.

Provides game state management and play:
- GameState: Tracks strokes, history and status
- HistoryEntry: Records a single visited article
- GameSession: Starts games, follows links and times daily time attack
- format_time: Elapsed seconds for display
"""

from wikigolf.game.session import GameSession
from wikigolf.game.state import GameState, HistoryEntry, format_time

__all__ = [
    "GameSession",
    "GameState",
    "HistoryEntry",
    "format_time",
]
