"""
Date range resolution.

Turns explicit bounds or a period token into a concrete [start, end] window.
Calendar tokens (today, this_week, ...) resolve against UTC midnight.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from trailmark.core.entities import ensure_utc

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

DEFAULT_PERIOD = "last_30_days"

ROLLING_DAYS: dict[str, int] = {
    "last_7_days": 7,
    "last_28_days": 28,
    "last_30_days": 30,
    "last_90_days": 90,
}

PERIODS: tuple[str, ...] = (
    "today",
    "yesterday",
    "last_7_days",
    "last_28_days",
    "last_30_days",
    "last_90_days",
    "last_12_months",
    "this_week",
    "this_month",
    "last_month",
    "this_year",
    "all_time",
)


@dataclass(frozen=True)
class DateRange:
    """Inclusive window in UTC."""

    start: datetime
    end: datetime

    def contains(self, ts: datetime) -> bool:
        return self.start <= ensure_utc(ts) <= self.end


def _midnight(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def _one_year_earlier(day: datetime) -> datetime:
    try:
        return day.replace(year=day.year - 1)
    except ValueError:
        # Feb 29 -> Feb 28
        return day.replace(year=day.year - 1, day=28)


def period_range(period: str | None, now: datetime) -> DateRange:
    """Resolve a period token relative to now. Unknown tokens mean last_30_days."""
    now = ensure_utc(now)
    today = _midnight(now)
    token = period or DEFAULT_PERIOD

    if token in ROLLING_DAYS:
        return DateRange(now - timedelta(days=ROLLING_DAYS[token]), now)
    if token == "today":
        return DateRange(today, now)
    if token == "yesterday":
        return DateRange(today - timedelta(days=1), today)
    if token == "last_12_months":
        return DateRange(_one_year_earlier(today), now)
    if token == "this_week":
        return DateRange(today - timedelta(days=today.weekday()), now)
    if token == "this_month":
        return DateRange(today.replace(day=1), now)
    if token == "last_month":
        first_this_month = today.replace(day=1)
        last_month_end = first_this_month - timedelta(microseconds=1)
        return DateRange(_midnight(last_month_end).replace(day=1), last_month_end)
    if token == "this_year":
        return DateRange(today.replace(month=1, day=1), now)
    if token == "all_time":
        return DateRange(EPOCH, now)

    return DateRange(now - timedelta(days=ROLLING_DAYS[DEFAULT_PERIOD]), now)


def resolve_date_range(
    now: datetime,
    start: datetime | None = None,
    end: datetime | None = None,
    period: str | None = None,
    fallback_period: str | None = None,
) -> DateRange:
    """
    Explicit start/end win (both required), then period, then fallback_period.
    """
    if start is not None and end is not None:
        return DateRange(ensure_utc(start), ensure_utc(end))
    return period_range(period or fallback_period, now)
