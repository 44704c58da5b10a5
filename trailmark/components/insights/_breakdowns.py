"""
Breakdown views over an event snapshot.

Each view is a pure function of a list of events and returns a JSON-ready
dict with wire (camelCase) keys. Users are counted by visitor_key, sessions by
session_key.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from typing import Any
from urllib.parse import urlparse

from trailmark.core.entities import PAGEVIEW, Event, ensure_utc, metadata_value
from trailmark.core.sessions import group_by_session, session_key, visitor_key


class Tally:
    """Distinct users/sessions plus event and pageview counts for one key."""

    def __init__(self) -> None:
        self.users: set[str] = set()
        self.sessions: set[str] = set()
        self.events = 0
        self.page_views = 0
        self.bounces = 0

    def add(self, event: Event, bounced: bool = False) -> None:
        sid = session_key(event)
        if sid not in self.sessions and bounced:
            self.bounces += 1
        self.users.add(visitor_key(event))
        self.sessions.add(sid)
        self.events += 1
        if event.event_type == PAGEVIEW:
            self.page_views += 1

    def row(self, **extra: Any) -> dict[str, Any]:
        return {
            **extra,
            "users": len(self.users),
            "sessions": len(self.sessions),
            "events": self.events,
        }


def _tally_by(events: Iterable[Event], key: Callable[[Event], str | None]) -> dict[str, Tally]:
    tallies: dict[str, Tally] = {}
    for e in events:
        k = key(e)
        if k is None:
            continue
        tallies.setdefault(k, Tally()).add(e)
    return tallies


def _by_users(rows: list[dict[str, Any]], limit: int | None = None) -> list[dict[str, Any]]:
    rows.sort(key=lambda r: r["users"], reverse=True)
    return rows[:limit] if limit else rows


def _counts(counter: Counter[str]) -> list[dict[str, Any]]:
    return [{"name": name, "count": count} for name, count in counter.most_common()]


def _first_events(events: Iterable[Event]) -> list[Event]:
    return [group[0] for group in group_by_session(list(events)).values()]


# --- Acquisition ---


def acquisition(events: list[Event]) -> dict[str, Any]:
    """Per-channel users/sessions/events/pageViews and the top 20 referrers."""
    channels = _tally_by(events, lambda e: e.traffic_source or "direct")
    referrers = _tally_by(events, lambda e: e.referrer or "Direct")

    sources = _by_users(
        [t.row(source=name) | {"pageViews": t.page_views} for name, t in channels.items()]
    )
    ref_rows = _by_users(
        [
            {"referrer": name, "users": len(t.users), "sessions": len(t.sessions)}
            for name, t in referrers.items()
        ],
        limit=20,
    )
    return {
        "totalUsers": len({visitor_key(e) for e in events}),
        "totalSessions": len({session_key(e) for e in events}),
        "sources": sources,
        "referrers": ref_rows,
    }


# --- Engagement ---


def average_session_duration(events: list[Event]) -> int:
    """Mean duration in seconds over sessions with more than one event."""
    total = timedelta()
    counted = 0
    for group in group_by_session(events).values():
        if len(group) > 1:
            total += ensure_utc(group[-1].timestamp) - ensure_utc(group[0].timestamp)
            counted += 1
    if counted == 0:
        return 0
    return int(total.total_seconds() / counted + 0.5)


def engagement(events: list[Event]) -> dict[str, Any]:
    """Event types, top pages, landing pages and average session duration."""
    pageviews = [e for e in events if e.event_type == PAGEVIEW]

    pages = _tally_by(pageviews, lambda e: e.page or "/")
    page_rows = [
        {"page": name, "views": t.events, "users": len(t.users)} for name, t in pages.items()
    ]
    page_rows.sort(key=lambda r: r["views"], reverse=True)

    landing = _tally_by(
        (e for e in _first_events(events) if e.event_type == PAGEVIEW and e.page),
        lambda e: e.page,
    )
    landing_rows = [
        {"page": name, "sessions": t.events, "users": len(t.users)}
        for name, t in landing.items()
    ]
    landing_rows.sort(key=lambda r: r["sessions"], reverse=True)

    return {
        "totalEvents": len(events),
        "totalPageViews": len(pageviews),
        "totalUsers": len({visitor_key(e) for e in events}),
        "avgSessionDuration": average_session_duration(events),
        "eventTypes": _counts(Counter(e.event_type for e in events)),
        "pages": page_rows[:20],
        "landingPages": landing_rows[:20],
    }


# --- Traffic sources ---

PLATFORM_MARKERS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("google",), "Google"),
    (("facebook", "instagram", "meta"), "Meta"),
    (("bing", "microsoft"), "Microsoft"),
    (("tiktok",), "TikTok"),
    (("twitter", "x.com"), "X (Twitter)"),
    (("linkedin",), "LinkedIn"),
    (("pinterest",), "Pinterest"),
    (("youtube",), "YouTube"),
)


def source_name(event: Event) -> str:
    """utm_source, else the referrer host, else "(direct)"."""
    utm_source = metadata_value(event, "utm_source", "utmSource")
    if utm_source:
        return str(utm_source)
    if not event.referrer or event.referrer == "Direct":
        return "(direct)"
    url = event.referrer if event.referrer.startswith("http") else "http://" + event.referrer
    try:
        return urlparse(url).hostname or event.referrer
    except ValueError:
        return event.referrer


def medium_name(event: Event) -> str:
    utm_medium = metadata_value(event, "utm_medium", "utmMedium")
    if utm_medium:
        return str(utm_medium)
    channel = event.traffic_source or "direct"
    return "(none)" if channel == "direct" else channel


def platform_name(source: str) -> str:
    lowered = source.lower()
    for markers, platform in PLATFORM_MARKERS:
        if any(m in lowered for m in markers):
            return platform
    if lowered == "(direct)":
        return "(direct)"
    return "Manual"


def traffic_sources(events: list[Event]) -> dict[str, Any]:
    """
    Channel, source, source/medium, medium, platform and campaign tables.

    A session bounces when it has at most one pageview; bounceRate is a
    fraction of the bucket's sessions.
    """
    bounced = {
        sid
        for sid, group in group_by_session(events).items()
        if sum(1 for e in group if e.event_type == PAGEVIEW) <= 1
    }

    tables: dict[str, dict[str, Tally]] = {
        "channels": {},
        "sources": {},
        "sourceMediums": {},
        "mediums": {},
        "sourcePlatforms": {},
        "campaigns": {},
    }

    for e in events:
        is_bounce = session_key(e) in bounced
        source = source_name(e)
        medium = medium_name(e)
        keys = {
            "channels": e.traffic_source or "direct",
            "sources": source,
            "sourceMediums": f"{source} / {medium}",
            "mediums": medium,
            "sourcePlatforms": platform_name(source),
        }
        campaign = metadata_value(e, "utm_campaign", "utmCampaign")
        if campaign:
            keys["campaigns"] = str(campaign)
        for table, key in keys.items():
            tables[table].setdefault(key, Tally()).add(e, bounced=is_bounce)

    limits = {"sources": 50, "sourceMediums": 50}
    result: dict[str, Any] = {}
    for table, tallies in tables.items():
        rows = [
            t.row(name=name)
            | {
                "pageViews": t.page_views,
                "bounceRate": t.bounces / len(t.sessions) if t.sessions else 0,
            }
            for name, t in tallies.items()
        ]
        result[table] = _by_users(rows, limits.get(table))
    return result


# --- Geography & tech ---


def _city_label(event: Event) -> str:
    return f"{event.city or 'Unknown'}, {event.country or 'Unknown'}"


def _language(event: Event) -> str | None:
    lang = metadata_value(event, "language")
    return str(lang) if lang else None


def geography(events: list[Event]) -> dict[str, Any]:
    """Countries, cities ("City, Country") and metadata languages."""
    countries = _tally_by(events, lambda e: e.country or "Unknown")
    cities = _tally_by(events, _city_label)
    languages = _tally_by(events, _language)
    city_country = {_city_label(e): e.country or "Unknown" for e in events}

    return {
        "countries": _by_users([t.row(name=n) for n, t in countries.items()], 50),
        "cities": _by_users(
            [t.row(name=n) | {"country": city_country[n]} for n, t in cities.items()], 50
        ),
        "languages": _by_users(
            [{"name": n, "users": len(t.users), "events": t.events} for n, t in languages.items()],
            30,
        ),
    }


def tech(events: list[Event]) -> dict[str, Any]:
    def table(key: Callable[[Event], str | None]) -> list[dict[str, Any]]:
        return _by_users([t.row(name=n) for n, t in _tally_by(events, key).items()])

    return {
        "browsers": table(lambda e: e.browser or "Unknown"),
        "operatingSystems": table(lambda e: e.os or "Unknown"),
        "devices": table(lambda e: e.device or "Unknown"),
    }


# --- Realtime ---


def realtime(events: list[Event], now: datetime) -> dict[str, Any]:
    """Activity over the last 30 minutes; events must already be windowed."""
    now = ensure_utc(now)
    five_ago = now - timedelta(minutes=5)

    per_minute = []
    for i in range(29, -1, -1):
        start = now - timedelta(minutes=i + 1)
        end = now - timedelta(minutes=i)
        users = {visitor_key(e) for e in events if start <= ensure_utc(e.timestamp) < end}
        per_minute.append({"minute": f"-{i + 1} min", "users": len(users)})

    pageviews = [e for e in events if e.event_type == PAGEVIEW]
    pages = _tally_by(pageviews, lambda e: e.page or "/")
    top_pages = sorted(
        ({"page": n, "activeUsers": len(t.users), "views": t.events} for n, t in pages.items()),
        key=lambda r: r["activeUsers"],
        reverse=True,
    )[:20]

    def active(key: Callable[[Event], str], label: str) -> list[dict[str, Any]]:
        rows = [{label: n, "activeUsers": len(t.users)} for n, t in _tally_by(events, key).items()]
        rows.sort(key=lambda r: r["activeUsers"], reverse=True)
        return rows

    return {
        "activeUsers30": len({visitor_key(e) for e in events}),
        "activeUsers5": len(
            {visitor_key(e) for e in events if ensure_utc(e.timestamp) >= five_ago}
        ),
        "pageViews30": len(pageviews),
        "perMinute": per_minute,
        "topPages": top_pages,
        "topSources": active(lambda e: e.traffic_source or "direct", "source"),
        "topCountries": active(lambda e: e.country or "Unknown", "country"),
        "eventTypes": _counts(Counter(e.event_type for e in events)),
        "totalEvents": len(events),
    }


# --- Journeys & visitors ---


def _journey_step(event: Event) -> dict[str, Any]:
    return {
        "id": event.id,
        "eventType": event.event_type,
        "page": event.page,
        "timestamp": ensure_utc(event.timestamp),
        "metadata": event.metadata,
    }


def journeys(events: list[Event]) -> list[dict[str, Any]]:
    """Sessions with duration and page lists, newest session first."""
    out = []
    for sid, group in group_by_session(events).items():
        first, last = group[0], group[-1]
        pages = [e.page for e in group if e.event_type == PAGEVIEW]
        duration = ensure_utc(last.timestamp) - ensure_utc(first.timestamp)
        out.append(
            {
                "sessionId": sid,
                "visitorId": first.visitor_id or "anonymous",
                "device": first.device,
                "browser": first.browser,
                "os": first.os,
                "country": first.country,
                "city": first.city,
                "region": first.region,
                "isBot": first.is_bot,
                "isInternal": first.is_internal,
                "referrer": first.referrer,
                "startTime": ensure_utc(first.timestamp),
                "endTime": ensure_utc(last.timestamp),
                "duration": int(duration.total_seconds() + 0.5),
                "pageCount": len(pages),
                "pages": pages,
                "eventCount": len(group),
                "events": [_journey_step(e) for e in group],
            }
        )
    out.sort(key=lambda j: j["startTime"], reverse=True)
    return out


def visitors(events: list[Event]) -> list[dict[str, Any]]:
    """One row per visitor (cookieless traffic grouped by device fingerprint)."""
    rows: dict[str, dict[str, Any]] = {}
    sessions: dict[str, set[str]] = {}
    pages: dict[str, list[str]] = {}

    for e in events:
        vid = e.visitor_id or f"anon-{e.device}-{e.browser}-{e.os}"
        ts = ensure_utc(e.timestamp)
        row = rows.get(vid)
        if row is None:
            row = rows[vid] = {
                "visitorId": vid,
                "device": e.device,
                "browser": e.browser,
                "os": e.os,
                "country": e.country,
                "city": e.city,
                "region": e.region,
                "ip": e.ip,
                "isBot": e.is_bot,
                "isInternal": e.is_internal,
                "firstSeen": ts,
                "lastSeen": ts,
                "totalEvents": 0,
                "totalPageViews": 0,
            }
            sessions[vid] = set()
            pages[vid] = []
        row["totalEvents"] += 1
        if e.event_type == PAGEVIEW:
            row["totalPageViews"] += 1
        if e.session_id:
            sessions[vid].add(e.session_id)
        if e.page and e.page not in pages[vid]:
            pages[vid].append(e.page)
        row["firstSeen"] = min(row["firstSeen"], ts)
        row["lastSeen"] = max(row["lastSeen"], ts)

    out = []
    for vid, row in rows.items():
        row["totalSessions"] = len(sessions[vid]) or 1
        row["pages"] = pages[vid]
        out.append(row)
    out.sort(key=lambda r: r["lastSeen"], reverse=True)
    return out
