"""
Dimensional aggregation over an event snapshot.

Buckets events by one primary dimension, accumulates the closed metric set
per bucket, sorts and caps. Pure: no I/O and no caching.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta
from enum import Enum
from typing import Any

from trailmark.core.entities import (
    CLICK,
    FORM_SUBMIT,
    PAGEVIEW,
    RAGE_CLICK,
    SCROLL,
    Event,
    ReportFilters,
    ensure_utc,
)
from trailmark.core.sessions import session_key, session_pageview_counts, visitor_key

# --- Enums ---


class Metric(str, Enum):
    """Closed metric set. Values are the wire names."""

    PAGE_VIEWS = "pageViews"
    CLICKS = "clicks"
    EVENTS = "events"
    VISITORS = "visitors"
    SESSIONS = "sessions"
    SCROLLS = "scrolls"
    FORM_SUBMITS = "formSubmits"
    RAGE_CLICKS = "rageClicks"
    BOTS = "bots"
    BOUNCE_RATE = "bounceRate"


class Dimension(str, Enum):
    DATE = "date"
    HOUR = "hour"
    WEEK = "week"
    MONTH = "month"
    PAGE = "page"
    DEVICE = "device"
    BROWSER = "browser"
    COUNTRY = "country"
    CITY = "city"
    OS = "os"
    REFERRER = "referrer"
    EVENT_TYPE = "eventType"


TIME_DIMENSIONS = frozenset({Dimension.DATE, Dimension.HOUR, Dimension.WEEK, Dimension.MONTH})

DEFAULT_ROW_CAP = 100


def parse_metrics(names: Iterable[str]) -> list[Metric]:
    """Known metrics in request order; unknown names are dropped."""
    known = {m.value for m in Metric}
    seen: list[Metric] = []
    for name in names:
        if name in known and Metric(name) not in seen:
            seen.append(Metric(name))
    return seen


def parse_dimension(names: list[str] | None) -> Dimension:
    """Primary (first) dimension; missing or unknown means date."""
    if not names:
        return Dimension.DATE
    try:
        return Dimension(names[0])
    except ValueError:
        return Dimension.DATE


# --- Filtering ---


def apply_report_filters(events: Iterable[Event], filters: ReportFilters | None) -> list[Event]:
    """Conjunction of the report's filters. Empty filter values are ignored."""
    if filters is None:
        return list(events)

    out: list[Event] = []
    for e in events:
        if filters.exclude_bots and e.is_bot:
            continue
        if filters.exclude_internal and e.is_internal:
            continue
        if filters.event_type and e.event_type != filters.event_type:
            continue
        if filters.device and e.device != filters.device:
            continue
        if filters.country and e.country != filters.country:
            continue
        if filters.page and (not e.page or filters.page not in e.page):
            continue
        out.append(e)
    return out


# --- Bucketing ---


def bucket_label(event: Event, dimension: Dimension) -> str:
    """Group label of an event under the given dimension (UTC)."""
    ts = ensure_utc(event.timestamp)

    if dimension == Dimension.DATE:
        return ts.strftime("%Y-%m-%d")
    if dimension == Dimension.HOUR:
        return f"{ts.strftime('%Y-%m-%d')} {ts.hour}:00"
    if dimension == Dimension.MONTH:
        return ts.strftime("%Y-%m")
    if dimension == Dimension.WEEK:
        # Sunday-aligned: weekday() is Mon=0..Sun=6
        week_start = ts - timedelta(days=(ts.weekday() + 1) % 7)
        return f"Week of {week_start.strftime('%Y-%m-%d')}"
    if dimension == Dimension.PAGE:
        return event.page or "/"
    if dimension == Dimension.REFERRER:
        return event.referrer or "Direct"
    if dimension == Dimension.EVENT_TYPE:
        return event.event_type
    if dimension == Dimension.DEVICE:
        return event.device or "Unknown"
    if dimension == Dimension.BROWSER:
        return event.browser or "Unknown"
    if dimension == Dimension.COUNTRY:
        return event.country or "Unknown"
    if dimension == Dimension.CITY:
        return event.city or "Unknown"
    if dimension == Dimension.OS:
        return event.os or "Unknown"
    return ts.strftime("%Y-%m-%d")


_TYPE_COUNTERS: dict[str, Metric] = {
    PAGEVIEW: Metric.PAGE_VIEWS,
    CLICK: Metric.CLICKS,
    SCROLL: Metric.SCROLLS,
    FORM_SUBMIT: Metric.FORM_SUBMITS,
    RAGE_CLICK: Metric.RAGE_CLICKS,
}


class BucketAccumulator:
    """Running counters for one bucket."""

    def __init__(self, label: str) -> None:
        self.label = label
        self.counts: dict[Metric, int] = {
            Metric.EVENTS: 0,
            Metric.PAGE_VIEWS: 0,
            Metric.CLICKS: 0,
            Metric.SCROLLS: 0,
            Metric.FORM_SUBMITS: 0,
            Metric.RAGE_CLICKS: 0,
            Metric.BOTS: 0,
        }
        self.visitors: set[str] = set()
        self.sessions: set[str] = set()

    def add(self, event: Event) -> None:
        self.counts[Metric.EVENTS] += 1
        counter = _TYPE_COUNTERS.get(event.event_type)
        if counter is not None:
            self.counts[counter] += 1
        if event.is_bot:
            self.counts[Metric.BOTS] += 1
        self.visitors.add(visitor_key(event))
        self.sessions.add(session_key(event))

    def bounce_rate(self, session_counts: dict[str, int]) -> int:
        """
        Rounded percentage of this bucket's sessions with exactly one page view.

        session_counts covers the whole filtered set, not just this bucket.
        """
        if not self.sessions:
            return 0
        single = sum(1 for key in self.sessions if session_counts.get(key, 0) == 1)
        return round_half_up(single / len(self.sessions) * 100)

    def value(self, metric: Metric, session_counts: dict[str, int]) -> int:
        if metric == Metric.VISITORS:
            return len(self.visitors)
        if metric == Metric.SESSIONS:
            return len(self.sessions)
        if metric == Metric.BOUNCE_RATE:
            return self.bounce_rate(session_counts)
        return self.counts[metric]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values."""
    return int(value + 0.5)


# --- Aggregation ---


def aggregate(
    events: list[Event],
    dimension: Dimension,
    metrics: list[Metric],
    row_cap: int = DEFAULT_ROW_CAP,
) -> list[dict[str, Any]]:
    """
    Bucket, compute, sort and cap.

    Each row is {"dimension": label, <metric>: value, ...} with every
    requested metric present.
    """
    if not events:
        return []

    buckets: dict[str, BucketAccumulator] = {}
    for event in events:
        label = bucket_label(event, dimension)
        acc = buckets.get(label)
        if acc is None:
            acc = buckets[label] = BucketAccumulator(label)
        acc.add(event)

    session_counts = session_pageview_counts(events) if Metric.BOUNCE_RATE in metrics else {}

    accumulators = list(buckets.values())
    if dimension in TIME_DIMENSIONS:
        accumulators.sort(key=lambda a: a.label)
    else:
        sort_metric = metrics[0] if metrics else Metric.EVENTS
        accumulators.sort(key=lambda a: a.value(sort_metric, session_counts), reverse=True)

    rows: list[dict[str, Any]] = []
    for acc in accumulators[:row_cap]:
        row: dict[str, Any] = {"dimension": acc.label}
        for metric in metrics:
            row[metric.value] = acc.value(metric, session_counts)
        rows.append(row)
    return rows
