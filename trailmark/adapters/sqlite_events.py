"""
SQLite event store.

Implements EventStorePort on a single append-only table. Timestamps are stored
as fixed-width UTC strings so lexical order equals chronological order.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import UTC, datetime
from typing import Any

from trailmark.core.entities import Event, ensure_utc
from trailmark.core.ports import DEFAULT_FILTERED_LIMIT, EventFilters

TS_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

SCHEMA = """
CREATE TABLE IF NOT EXISTS events (
    id TEXT PRIMARY KEY,
    project_id TEXT NOT NULL,
    visitor_id TEXT,
    session_id TEXT,
    event_type TEXT NOT NULL DEFAULT 'pageview',
    page TEXT,
    referrer TEXT,
    device TEXT,
    browser TEXT,
    os TEXT,
    country TEXT,
    city TEXT,
    region TEXT,
    ip TEXT,
    is_bot INTEGER NOT NULL DEFAULT 0,
    is_internal INTEGER NOT NULL DEFAULT 0,
    is_server INTEGER NOT NULL DEFAULT 0,
    traffic_source TEXT,
    metadata TEXT,
    timestamp TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_events_project_ts ON events (project_id, timestamp);
CREATE INDEX IF NOT EXISTS idx_events_project_visitor ON events (project_id, visitor_id);
"""

COLUMNS = (
    "id",
    "project_id",
    "visitor_id",
    "session_id",
    "event_type",
    "page",
    "referrer",
    "device",
    "browser",
    "os",
    "country",
    "city",
    "region",
    "ip",
    "is_bot",
    "is_internal",
    "is_server",
    "traffic_source",
    "metadata",
    "timestamp",
)

# Filter attribute -> column for equality predicates
_EQUALITY_FILTERS = (
    "event_type",
    "device",
    "browser",
    "os",
    "country",
    "referrer",
    "traffic_source",
    "visitor_id",
)
_FLAG_FILTERS = ("is_bot", "is_internal", "is_server")


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def format_ts(dt: datetime) -> str:
    return ensure_utc(dt).strftime(TS_FORMAT)


def parse_ts(s: str) -> datetime:
    return datetime.strptime(s, TS_FORMAT).replace(tzinfo=UTC)


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection
        if connection is not None:
            connection.row_factory = dict_factory

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        return conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None


class SQLiteEventStore(SQLiteRepoBase):
    """SQLite implementation of EventStorePort."""

    def init_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.executescript(SCHEMA)
            if self._should_close():
                conn.commit()
        finally:
            if self._should_close():
                conn.close()

    def _map_row(self, row: dict[str, Any]) -> Event:
        return Event(
            id=row["id"],
            project_id=row["project_id"],
            visitor_id=row["visitor_id"],
            session_id=row["session_id"],
            event_type=row["event_type"],
            page=row["page"],
            referrer=row["referrer"],
            device=row["device"],
            browser=row["browser"],
            os=row["os"],
            country=row["country"],
            city=row["city"],
            region=row["region"],
            ip=row["ip"],
            is_bot=bool(row["is_bot"]),
            is_internal=bool(row["is_internal"]),
            is_server=bool(row["is_server"]),
            traffic_source=row["traffic_source"],
            metadata=json.loads(row["metadata"]) if row["metadata"] else None,
            timestamp=parse_ts(row["timestamp"]),
        )

    def _select(self, where: str, params: list[Any], limit: int | None = None) -> list[Event]:
        query = f"SELECT * FROM events WHERE {where} ORDER BY timestamp DESC"
        if limit is not None:
            query += " LIMIT ?"
            params = [*params, limit]
        conn = self._get_conn()
        try:
            rows = conn.execute(query, params).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def _delete(self, where: str, params: list[Any]) -> int:
        conn = self._get_conn()
        try:
            cursor = conn.execute(f"DELETE FROM events WHERE {where}", params)
            if self._should_close():
                conn.commit()
            return cursor.rowcount
        finally:
            if self._should_close():
                conn.close()

    def append(self, event: Event) -> str:
        conn = self._get_conn()
        try:
            conn.execute(
                f"INSERT INTO events ({', '.join(COLUMNS)}) "
                f"VALUES ({', '.join('?' for _ in COLUMNS)})",
                (
                    event.id,
                    event.project_id,
                    event.visitor_id,
                    event.session_id,
                    event.event_type,
                    event.page,
                    event.referrer,
                    event.device,
                    event.browser,
                    event.os,
                    event.country,
                    event.city,
                    event.region,
                    event.ip,
                    int(event.is_bot),
                    int(event.is_internal),
                    int(event.is_server),
                    event.traffic_source,
                    json.dumps(event.metadata) if event.metadata is not None else None,
                    format_ts(event.timestamp),
                ),
            )
            if self._should_close():
                conn.commit()
            return event.id
        finally:
            if self._should_close():
                conn.close()

    def range_query(self, project_id: str, start: datetime, end: datetime) -> list[Event]:
        return self._select(
            "project_id = ? AND timestamp >= ? AND timestamp <= ?",
            [project_id, format_ts(start), format_ts(end)],
        )

    def filtered_query(
        self,
        project_id: str,
        filters: EventFilters,
        limit: int = DEFAULT_FILTERED_LIMIT,
    ) -> list[Event]:
        clauses = ["project_id = ?"]
        params: list[Any] = [project_id]

        if filters.start is not None:
            clauses.append("timestamp >= ?")
            params.append(format_ts(filters.start))
        if filters.end is not None:
            clauses.append("timestamp <= ?")
            params.append(format_ts(filters.end))
        for attr in _EQUALITY_FILTERS:
            value = getattr(filters, attr)
            if value is not None:
                clauses.append(f"{attr} = ?")
                params.append(value)
        for attr in _FLAG_FILTERS:
            flag = getattr(filters, attr)
            if flag is not None:
                clauses.append(f"{attr} = ?")
                params.append(int(flag))
        if filters.page:
            clauses.append("LOWER(page) LIKE ?")
            params.append(f"%{filters.page.lower()}%")

        return self._select(" AND ".join(clauses), params, limit)

    def recent(self, project_id: str, limit: int) -> list[Event]:
        return self._select("project_id = ?", [project_id], limit)

    def list_visitor(self, project_id: str, visitor_id: str) -> list[Event]:
        return self._select("project_id = ? AND visitor_id = ?", [project_id, visitor_id])

    def delete_visitor(self, project_id: str, visitor_id: str) -> int:
        return self._delete("project_id = ? AND visitor_id = ?", [project_id, visitor_id])

    def purge_before(self, project_id: str, cutoff: datetime) -> int:
        return self._delete("project_id = ? AND timestamp < ?", [project_id, format_ts(cutoff)])
