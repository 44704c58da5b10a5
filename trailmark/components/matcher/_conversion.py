"""
Conversion analysis for a custom event definition.

Sessions (shared session-key policy) are split into converted and
non-converted: a session converts when any of its events matches the rules.
"""

from __future__ import annotations

from dataclasses import dataclass

from trailmark.core.entities import PAGEVIEW, Event, ensure_utc
from trailmark.core.sessions import group_by_session

from ._rules import EventRule, matches


def round_two_decimals_pct(numerator: int, denominator: int) -> float:
    """Percentage with two decimals; 0 when denominator is 0."""
    if denominator <= 0:
        return 0.0
    return int(numerator / denominator * 10000 + 0.5) / 100


@dataclass(frozen=True)
class PageConversion:
    page: str
    page_views: int
    conversions: int
    conversion_rate: float
    unique_converters: int


@dataclass(frozen=True)
class SourceConversion:
    source: str
    sessions: int
    conversions: int
    conversion_rate: float


@dataclass(frozen=True)
class DailyConversion:
    date: str
    events: int
    conversions: int


@dataclass(frozen=True)
class ConversionAnalysis:
    total_sessions: int
    total_conversions: int
    overall_conversion_rate: float
    page_analysis: list[PageConversion]
    source_analysis: list[SourceConversion]
    daily_trend: list[DailyConversion]


def analyze_conversions(events: list[Event], rules: list[EventRule]) -> ConversionAnalysis:
    """Page, source and daily conversion breakdowns over an event set."""
    sessions = group_by_session(events)

    page_stats: dict[str, list[int]] = {}
    page_converters: dict[str, set[str]] = {}
    source_stats: dict[str, list[int]] = {}
    total_conversions = 0

    for sid, session_events in sessions.items():
        converted = any(matches(e, rules) for e in session_events)
        if converted:
            total_conversions += 1

        pages = {e.page for e in session_events if e.page and e.event_type == PAGEVIEW}
        converter = session_events[0].visitor_id or sid
        for page in pages:
            stats = page_stats.setdefault(page, [0, 0])
            converters = page_converters.setdefault(page, set())
            stats[0] += 1
            if converted:
                stats[1] += 1
                converters.add(converter)

        source = session_events[0].traffic_source or "direct"
        s_stats = source_stats.setdefault(source, [0, 0])
        s_stats[0] += 1
        if converted:
            s_stats[1] += 1

    page_analysis = sorted(
        (
            PageConversion(
                page=page,
                page_views=views,
                conversions=conv,
                conversion_rate=round_two_decimals_pct(conv, views),
                unique_converters=len(page_converters[page]),
            )
            for page, (views, conv) in page_stats.items()
        ),
        key=lambda p: p.conversions,
        reverse=True,
    )

    source_analysis = sorted(
        (
            SourceConversion(
                source=source,
                sessions=total,
                conversions=conv,
                conversion_rate=round_two_decimals_pct(conv, total),
            )
            for source, (total, conv) in source_stats.items()
        ),
        key=lambda s: s.conversions,
        reverse=True,
    )

    daily: dict[str, list[int]] = {}
    for e in events:
        day = ensure_utc(e.timestamp).strftime("%Y-%m-%d")
        d_stats = daily.setdefault(day, [0, 0])
        d_stats[0] += 1
        if matches(e, rules):
            d_stats[1] += 1
    daily_trend = [
        DailyConversion(date=day, events=total, conversions=conv)
        for day, (total, conv) in sorted(daily.items())
    ]

    return ConversionAnalysis(
        total_sessions=len(sessions),
        total_conversions=total_conversions,
        overall_conversion_rate=round_two_decimals_pct(total_conversions, len(sessions)),
        page_analysis=page_analysis,
        source_analysis=source_analysis,
        daily_trend=daily_trend,
    )
