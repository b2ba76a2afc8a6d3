"""
Daily challenge module.

Provides the deterministic, date-seeded start/goal pair shared by every
player on a given day:
- seed: Date (Asia/Tokyo) to base page id
- candidates: Search order around a seed
- resolver: Candidate ids to verified articles
- builder: Goal and start resolution
- cache: Per-day persisted cache with repair and verification
"""

from wikigolf.daily.builder import DailyChallengeBuilder, PregeneratedChallengeSource
from wikigolf.daily.cache import (
    DailyChallengeCache,
    clear_expired_daily_challenge_cache,
    load_daily_challenge_with_cache,
    read_cached_daily_challenge,
)
from wikigolf.daily.candidates import build_candidate_ids
from wikigolf.daily.models import ArticleRef, CachedEntry, DailyChallenge
from wikigolf.daily.resolver import ArticleResolver, is_valid_article_page
from wikigolf.daily.seed import compute_daily_base_id, to_local_calendar_date, today_iso
from wikigolf.daily.storage import JsonFileStore, MemoryStore

__all__ = [
    "ArticleRef",
    "ArticleResolver",
    "CachedEntry",
    "DailyChallenge",
    "DailyChallengeBuilder",
    "DailyChallengeCache",
    "JsonFileStore",
    "MemoryStore",
    "PregeneratedChallengeSource",
    "build_candidate_ids",
    "clear_expired_daily_challenge_cache",
    "compute_daily_base_id",
    "is_valid_article_page",
    "load_daily_challenge_with_cache",
    "read_cached_daily_challenge",
    "to_local_calendar_date",
    "today_iso",
]
