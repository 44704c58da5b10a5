"""
Session and visitor identity policy.

Every engine that counts sessions (report aggregation, funnels, conversion
analysis, breakdown views) keys them through session_key so the same event
set always yields the same session count. Cookieless events carry neither a
session id nor a visitor id and therefore count as one session each.
"""

from __future__ import annotations

from collections import defaultdict

from trailmark.core.entities import PAGEVIEW, Event


def session_key(event: Event) -> str:
    """Session id, else visitor id, else the event's own id."""
    return event.session_id or event.visitor_id or event.id


def visitor_key(event: Event) -> str:
    """Visitor id, else the event's own id."""
    return event.visitor_id or event.id


def group_by_session(events: list[Event]) -> dict[str, list[Event]]:
    """Group events by session key, each group sorted ascending by time."""
    sessions: dict[str, list[Event]] = defaultdict(list)
    for event in events:
        sessions[session_key(event)].append(event)
    for group in sessions.values():
        group.sort(key=lambda e: e.timestamp)
    return dict(sessions)


def session_pageview_counts(events: list[Event]) -> dict[str, int]:
    """Number of page views per session key over the whole set."""
    counts: dict[str, int] = defaultdict(int)
    for event in events:
        if event.event_type == PAGEVIEW:
            counts[session_key(event)] += 1
    return dict(counts)
