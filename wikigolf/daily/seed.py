"""
Date-derived seeds for the daily challenge.

The calendar date is always taken in a fixed timezone so that every player
shares the same day, whatever their local clock says.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from wikigolf.config import (
    DAILY_ID_MULTIPLIERS,
    DAILY_TIMEZONE,
    GOAL_OFFSET,
    START_OFFSET,
)


def now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_local_calendar_date(instant: datetime, tz: str = DAILY_TIMEZONE) -> date:
    """
    Calendar date of an instant in the given timezone.

    Naive datetimes are interpreted as UTC.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(ZoneInfo(tz)).date()


def today_iso(instant: datetime | None = None, tz: str = DAILY_TIMEZONE) -> str:
    """Today's date in the fixed timezone as YYYY-MM-DD."""
    return to_local_calendar_date(instant or now(), tz).isoformat()


def compute_daily_base_id(day: date) -> int:
    """
    Deterministic base page id for a calendar date.

    The trailing multiplication by the day of month spreads consecutive days
    further apart in the page id space.

    >>> compute_daily_base_id(date(2024, 3, 15))
    533100
    """
    weighted = (
        day.year * DAILY_ID_MULTIPLIERS["year"]
        + day.month * DAILY_ID_MULTIPLIERS["month"]
        + day.day * DAILY_ID_MULTIPLIERS["day"]
    )
    return weighted * day.day


def goal_seed(base_id: int) -> int:
    return base_id + GOAL_OFFSET


def start_seed(goal_id: int) -> int:
    # Anchored on the resolved goal id, not the raw seed
    return goal_id + START_OFFSET
