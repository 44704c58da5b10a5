"""
Event store port.

Append-only persistence with range and filtered queries. Results are always
newest first. Bulk deletes exist only for visitor erasure and retention purge.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from trailmark.core.entities import Event, ensure_utc

DEFAULT_FILTERED_LIMIT = 1000
MAX_FILTERED_LIMIT = 10000


@dataclass(frozen=True)
class EventFilters:
    """
    Predicates for filtered_query. None means "no constraint".

    page is a case-insensitive substring match; everything else is equality.
    """

    start: datetime | None = None
    end: datetime | None = None
    event_type: str | None = None
    device: str | None = None
    browser: str | None = None
    os: str | None = None
    country: str | None = None
    referrer: str | None = None
    is_bot: bool | None = None
    is_internal: bool | None = None
    is_server: bool | None = None
    traffic_source: str | None = None
    page: str | None = None
    visitor_id: str | None = None


def matches_filters(event: Event, filters: EventFilters) -> bool:
    """Evaluate EventFilters against a single event (used by in-memory stores)."""
    ts = ensure_utc(event.timestamp)
    if filters.start is not None and ts < ensure_utc(filters.start):
        return False
    if filters.end is not None and ts > ensure_utc(filters.end):
        return False

    equalities = (
        (filters.event_type, event.event_type),
        (filters.device, event.device),
        (filters.browser, event.browser),
        (filters.os, event.os),
        (filters.country, event.country),
        (filters.referrer, event.referrer),
        (filters.traffic_source, event.traffic_source),
        (filters.visitor_id, event.visitor_id),
        (filters.is_bot, event.is_bot),
        (filters.is_internal, event.is_internal),
        (filters.is_server, event.is_server),
    )
    for wanted, actual in equalities:
        if wanted is not None and wanted != actual:
            return False

    if filters.page:
        if filters.page.lower() not in (event.page or "").lower():
            return False
    return True


class EventStorePort(Protocol):
    """Append-only event store."""

    def append(self, event: Event) -> str:
        """Persist an event and return its id."""
        ...

    def range_query(self, project_id: str, start: datetime, end: datetime) -> list[Event]:
        """Events with start <= timestamp <= end, newest first."""
        ...

    def filtered_query(
        self,
        project_id: str,
        filters: EventFilters,
        limit: int = DEFAULT_FILTERED_LIMIT,
    ) -> list[Event]:
        """Events matching all filters, newest first, at most limit."""
        ...

    def recent(self, project_id: str, limit: int) -> list[Event]:
        """Latest events, newest first."""
        ...

    def list_visitor(self, project_id: str, visitor_id: str) -> list[Event]:
        """All events of one visitor, newest first."""
        ...

    def delete_visitor(self, project_id: str, visitor_id: str) -> int:
        """Delete all events of one visitor. Returns deleted count."""
        ...

    def purge_before(self, project_id: str, cutoff: datetime) -> int:
        """Delete events strictly older than cutoff. Returns deleted count."""
        ...
