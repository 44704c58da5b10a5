"""
In-memory adapters for the event store and project-owned repositories.

Used for development, tests and the default "memory" backend. Each store
guards its state with a lock because sync FastAPI routes run in a threadpool.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from threading import Lock
from typing import Generic, Protocol, TypeVar

from trailmark.core.entities import (
    ConsentRecord,
    ConsentSettings,
    CustomEventDefinition,
    CustomReport,
    Event,
    Funnel,
    InternalIpRule,
    Project,
    ensure_utc,
)
from trailmark.core.ports import DEFAULT_FILTERED_LIMIT, EventFilters, matches_filters


class _Scoped(Protocol):
    id: str
    project_id: str


T = TypeVar("T", bound=_Scoped)


def _newest_first(events: list[Event]) -> list[Event]:
    return sorted(events, key=lambda e: ensure_utc(e.timestamp), reverse=True)


# --- Events ---


class InMemoryEventStore:
    """EventStorePort over a list."""

    def __init__(self) -> None:
        self._events: list[Event] = []
        self._lock = Lock()

    def append(self, event: Event) -> str:
        with self._lock:
            self._events.append(event)
        return event.id

    def _project(self, project_id: str) -> list[Event]:
        with self._lock:
            return [e for e in self._events if e.project_id == project_id]

    def range_query(self, project_id: str, start: datetime, end: datetime) -> list[Event]:
        lo, hi = ensure_utc(start), ensure_utc(end)
        return _newest_first(
            [e for e in self._project(project_id) if lo <= ensure_utc(e.timestamp) <= hi]
        )

    def filtered_query(
        self,
        project_id: str,
        filters: EventFilters,
        limit: int = DEFAULT_FILTERED_LIMIT,
    ) -> list[Event]:
        matched = [e for e in self._project(project_id) if matches_filters(e, filters)]
        return _newest_first(matched)[:limit]

    def recent(self, project_id: str, limit: int) -> list[Event]:
        return _newest_first(self._project(project_id))[:limit]

    def list_visitor(self, project_id: str, visitor_id: str) -> list[Event]:
        return _newest_first(
            [e for e in self._project(project_id) if e.visitor_id == visitor_id]
        )

    def _delete_where(self, project_id: str, predicate: Callable[[Event], bool]) -> int:
        with self._lock:
            before = len(self._events)
            self._events = [
                e for e in self._events if not (e.project_id == project_id and predicate(e))
            ]
            return before - len(self._events)

    def delete_visitor(self, project_id: str, visitor_id: str) -> int:
        return self._delete_where(project_id, lambda e: e.visitor_id == visitor_id)

    def purge_before(self, project_id: str, cutoff: datetime) -> int:
        limit = ensure_utc(cutoff)
        return self._delete_where(project_id, lambda e: ensure_utc(e.timestamp) < limit)

    def get_all(self) -> list[Event]:
        """Get all stored events (for testing)."""
        with self._lock:
            return list(self._events)


# --- Keyed repositories ---


class _ProjectScopedRepo(Generic[T]):
    """id -> item map where every item carries a project_id."""

    def __init__(self) -> None:
        self._items: dict[str, T] = {}
        self._lock = Lock()

    def get(self, project_id: str, item_id: str) -> T | None:
        with self._lock:
            item = self._items.get(item_id)
        if item is None or item.project_id != project_id:
            return None
        return item

    def list_for_project(self, project_id: str) -> list[T]:
        with self._lock:
            return [i for i in self._items.values() if i.project_id == project_id]

    def save(self, item: T) -> T:
        with self._lock:
            self._items[item.id] = item
        return item

    def delete(self, project_id: str, item_id: str) -> bool:
        with self._lock:
            item = self._items.get(item_id)
            if item is None or item.project_id != project_id:
                return False
            del self._items[item_id]
            return True


class InMemoryReportRepo(_ProjectScopedRepo[CustomReport]):
    pass


class InMemoryFunnelRepo(_ProjectScopedRepo[Funnel]):
    pass


class InMemoryCustomEventRepo(_ProjectScopedRepo[CustomEventDefinition]):
    pass


class InMemoryInternalIpRuleRepo(_ProjectScopedRepo[InternalIpRule]):
    def add(self, rule: InternalIpRule) -> InternalIpRule:
        return self.save(rule)


# --- Projects & consent ---


class InMemoryProjectRepo:
    def __init__(self) -> None:
        self._projects: dict[str, Project] = {}

    def get(self, project_id: str) -> Project | None:
        return self._projects.get(project_id)

    def save(self, project: Project) -> Project:
        self._projects[project.id] = project
        return project


class InMemoryConsentSettingsRepo:
    def __init__(self) -> None:
        self._settings: dict[str, ConsentSettings] = {}

    def get(self, project_id: str) -> ConsentSettings | None:
        return self._settings.get(project_id)

    def upsert(self, settings: ConsentSettings) -> ConsentSettings:
        self._settings[settings.project_id] = settings
        return settings


class InMemoryConsentRecordRepo:
    def __init__(self) -> None:
        self._records: list[ConsentRecord] = []
        self._lock = Lock()

    def add(self, record: ConsentRecord) -> ConsentRecord:
        with self._lock:
            self._records.append(record)
        return record

    def list_for_project(
        self,
        project_id: str,
        visitor_id: str | None = None,
        limit: int = 100,
    ) -> list[ConsentRecord]:
        with self._lock:
            records = [
                r
                for r in self._records
                if r.project_id == project_id
                and (visitor_id is None or r.visitor_id == visitor_id)
            ]
        records.sort(key=lambda r: ensure_utc(r.timestamp), reverse=True)
        return records[:limit]

    def delete_visitor(self, project_id: str, visitor_id: str) -> int:
        with self._lock:
            before = len(self._records)
            self._records = [
                r
                for r in self._records
                if not (r.project_id == project_id and r.visitor_id == visitor_id)
            ]
            return before - len(self._records)
