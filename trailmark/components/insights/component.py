"""
Insights component - Channel, engagement, geography and activity breakdowns.

Windowed views resolve their range like reports (explicit bounds, else
period, else last 30 days). realtime always covers the last 30 minutes;
journeys and visitors read the latest N events.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from trailmark.components.reports import DEFAULT_PERIOD, DateRange, resolve_date_range
from trailmark.core.ports import EventStorePort, TimePort

from . import _breakdowns
from .models import (
    DEFAULT_CONFIG,
    BreakdownInput,
    BreakdownOutput,
    BreakdownView,
    InsightsConfig,
)

_WINDOWED = {
    BreakdownView.ACQUISITION: _breakdowns.acquisition,
    BreakdownView.ENGAGEMENT: _breakdowns.engagement,
    BreakdownView.TRAFFIC_SOURCES: _breakdowns.traffic_sources,
    BreakdownView.GEOGRAPHY: _breakdowns.geography,
    BreakdownView.TECH: _breakdowns.tech,
}


def run_breakdown(
    inp: BreakdownInput,
    *,
    event_store: EventStorePort,
    time_port: TimePort | None = None,
    config: InsightsConfig = DEFAULT_CONFIG,
) -> BreakdownOutput:
    """Compute one breakdown view for a project."""
    now = time_port.now_utc() if time_port else datetime.now(UTC)

    if inp.view == BreakdownView.REALTIME:
        window = DateRange(now - timedelta(minutes=config.realtime_minutes), now)
        events = event_store.range_query(inp.project_id, window.start, window.end)
        return BreakdownOutput(
            view=inp.view,
            period=None,
            date_range=window,
            data=_breakdowns.realtime(events, now),
        )

    if inp.view == BreakdownView.JOURNEYS:
        events = event_store.recent(inp.project_id, config.journeys_limit)
        return BreakdownOutput(
            view=inp.view, period=None, date_range=None, data=_breakdowns.journeys(events)
        )

    if inp.view == BreakdownView.VISITORS:
        events = event_store.recent(inp.project_id, config.visitors_limit)
        return BreakdownOutput(
            view=inp.view, period=None, date_range=None, data=_breakdowns.visitors(events)
        )

    window = resolve_date_range(now, start=inp.start, end=inp.end, period=inp.period)
    events = event_store.range_query(inp.project_id, window.start, window.end)
    period = inp.period or DEFAULT_PERIOD
    data = {"period": period, **_WINDOWED[inp.view](events)}
    return BreakdownOutput(view=inp.view, period=period, date_range=window, data=data)
