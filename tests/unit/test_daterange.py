"""
Tests for date range resolution.

The fixed clock reads Sunday 2025-06-15 12:00 UTC.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from tests.conftest import NOW
from trailmark.components.reports import (
    EPOCH,
    PERIODS,
    DateRange,
    period_range,
    resolve_date_range,
)


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=UTC)


class TestPeriodRange:
    """Test period token resolution."""

    @pytest.mark.parametrize(
        ("token", "days"),
        [("last_7_days", 7), ("last_28_days", 28), ("last_30_days", 30), ("last_90_days", 90)],
    )
    def test_rolling(self, token: str, days: int) -> None:
        window = period_range(token, NOW)

        assert window.start == NOW - timedelta(days=days)
        assert window.end == NOW

    def test_today(self) -> None:
        assert period_range("today", NOW) == DateRange(utc(2025, 6, 15), NOW)

    def test_yesterday(self) -> None:
        assert period_range("yesterday", NOW) == DateRange(utc(2025, 6, 14), utc(2025, 6, 15))

    def test_this_week_starts_monday(self) -> None:
        assert period_range("this_week", NOW).start == utc(2025, 6, 9)

    def test_this_month(self) -> None:
        assert period_range("this_month", NOW).start == utc(2025, 6, 1)

    def test_last_month(self) -> None:
        window = period_range("last_month", NOW)

        assert window.start == utc(2025, 5, 1)
        assert window.end == utc(2025, 6, 1) - timedelta(microseconds=1)

    def test_this_year(self) -> None:
        assert period_range("this_year", NOW).start == utc(2025, 1, 1)

    def test_last_12_months(self) -> None:
        assert period_range("last_12_months", NOW).start == utc(2024, 6, 15)

    def test_last_12_months_leap_day(self) -> None:
        assert period_range("last_12_months", utc(2024, 2, 29, 8)).start == utc(2023, 2, 28)

    def test_all_time_starts_at_epoch(self) -> None:
        window = period_range("all_time", NOW)

        assert window.start == EPOCH
        assert window.end == NOW

    @pytest.mark.parametrize("token", [None, "", "fortnight"])
    def test_unknown_means_last_30_days(self, token: str | None) -> None:
        assert period_range(token, NOW).start == NOW - timedelta(days=30)

    def test_every_token_resolves(self) -> None:
        for token in PERIODS:
            window = period_range(token, NOW)
            assert window.start <= window.end


class TestResolveDateRange:
    def test_explicit_bounds_win(self) -> None:
        start, end = utc(2025, 1, 1), utc(2025, 1, 31)

        assert resolve_date_range(NOW, start, end, period="today") == DateRange(start, end)

    def test_naive_bounds_are_utc(self) -> None:
        window = resolve_date_range(NOW, datetime(2025, 1, 1), datetime(2025, 1, 2))

        assert window.start == utc(2025, 1, 1)

    def test_one_bound_is_ignored(self) -> None:
        window = resolve_date_range(NOW, start=utc(2025, 1, 1), period="today")

        assert window.start == utc(2025, 6, 15)

    def test_fallback_period(self) -> None:
        window = resolve_date_range(NOW, fallback_period="all_time")

        assert window.start == EPOCH

    def test_period_beats_fallback(self) -> None:
        window = resolve_date_range(NOW, period="today", fallback_period="all_time")

        assert window.start == utc(2025, 6, 15)

    def test_contains(self) -> None:
        window = DateRange(utc(2025, 6, 1), utc(2025, 6, 2))

        assert window.contains(utc(2025, 6, 1, 12)) is True
        assert window.contains(utc(2025, 6, 2)) is True
        assert window.contains(utc(2025, 6, 3)) is False
