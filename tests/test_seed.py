"""
Unit tests for date seeds and candidate ordering.
"""

from datetime import date, datetime, timedelta, timezone

from wikigolf.daily.candidates import build_candidate_batches, build_candidate_ids
from wikigolf.daily.seed import (
    compute_daily_base_id,
    goal_seed,
    start_seed,
    to_local_calendar_date,
    today_iso,
)


class TestDailyBaseId:
    """Test the date to base id formula."""

    def test_known_date(self):
        """(2024*10 + 3*100 + 15*1000) * 15 = 533100."""
        assert compute_daily_base_id(date(2024, 3, 15)) == 533100

    def test_deterministic(self):
        """Same date always yields the same id."""
        day = date(2025, 12, 31)
        assert compute_daily_base_id(day) == compute_daily_base_id(date(2025, 12, 31))

    def test_consecutive_days_differ(self):
        """Day-of-month amplification spreads consecutive days apart."""
        ids = [compute_daily_base_id(date(2024, 3, d)) for d in range(1, 32)]
        assert len(set(ids)) == len(ids)
        assert ids[15] - ids[14] > 10_000

    def test_derived_seeds(self):
        assert goal_seed(533100) == 533200
        assert start_seed(533203) == 534203


class TestFixedTimezone:
    """Test that 'today' is always taken in Asia/Tokyo."""

    def test_utc_evening_is_next_day_in_tokyo(self):
        instant = datetime(2024, 3, 14, 15, 0, tzinfo=timezone.utc)
        assert to_local_calendar_date(instant) == date(2024, 3, 15)

    def test_just_before_midnight_in_tokyo(self):
        instant = datetime(2024, 3, 14, 14, 59, 59, tzinfo=timezone.utc)
        assert to_local_calendar_date(instant) == date(2024, 3, 14)

    def test_caller_timezone_is_irrelevant(self):
        """The same instant expressed in another offset gives the same day."""
        utc = datetime(2024, 3, 14, 16, 0, tzinfo=timezone.utc)
        new_york = utc.astimezone(timezone(timedelta(hours=-4)))
        assert to_local_calendar_date(new_york) == to_local_calendar_date(utc)

    def test_naive_datetime_is_utc(self):
        assert to_local_calendar_date(datetime(2024, 3, 14, 15, 0)) == date(2024, 3, 15)

    def test_today_iso_format(self):
        instant = datetime(2024, 1, 4, 23, 0, tzinfo=timezone.utc)
        assert today_iso(instant) == "2024-01-05"


class TestCandidateIds:
    """Test the outward expanding search order."""

    def test_begins_alternating_outward(self):
        assert build_candidate_ids(100)[:5] == [100, 101, 99, 102, 98]

    def test_length(self):
        assert len(build_candidate_ids(10_000, max_offset=300)) == 601

    def test_skips_non_positive(self):
        ids = build_candidate_ids(3, max_offset=5)
        assert ids == [3, 4, 2, 5, 1, 6, 7, 8]
        assert all(i > 0 for i in ids)

    def test_non_positive_base(self):
        assert build_candidate_ids(0, max_offset=2) == [1, 2]

    def test_deterministic(self):
        assert build_candidate_ids(533200) == build_candidate_ids(533200)

    def test_batches_preserve_order(self):
        batches = build_candidate_batches(100, max_offset=60, batch_size=50)
        assert [len(b) for b in batches] == [50, 50, 21]
        assert [i for b in batches for i in b] == build_candidate_ids(100, max_offset=60)
