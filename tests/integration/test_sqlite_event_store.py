"""
Integration tests for the SQLite event store against a real database file.
"""

from __future__ import annotations

import sqlite3
from datetime import timedelta

import pytest

from tests.conftest import NOW, PROJECT_ID, make_event
from trailmark.adapters.sqlite_events import SQLiteEventStore, format_ts, parse_ts
from trailmark.core.ports import EventFilters


@pytest.fixture
def store(tmp_path) -> SQLiteEventStore:
    s = SQLiteEventStore(str(tmp_path / "events.db"))
    s.init_schema()
    return s


def test_timestamp_round_trip() -> None:
    ts = NOW + timedelta(microseconds=123)

    assert parse_ts(format_ts(ts)) == ts
    assert format_ts(NOW) == "2025-06-15T12:00:00.000000Z"


def test_append_and_read_back(store: SQLiteEventStore) -> None:
    event = make_event(
        device="desktop",
        is_bot=True,
        traffic_source="social",
        metadata={"utm_source": "newsletter", "depth": 3},
    )

    assert store.append(event) == event.id

    [loaded] = store.recent(PROJECT_ID, 10)
    assert loaded == event


def test_init_schema_is_idempotent(store: SQLiteEventStore) -> None:
    store.append(make_event())

    store.init_schema()

    assert len(store.recent(PROJECT_ID, 10)) == 1


def test_range_query_inclusive_newest_first(store: SQLiteEventStore) -> None:
    for hours in (0, 1, 2, 5):
        store.append(make_event(page=f"/{hours}", timestamp=NOW - timedelta(hours=hours)))
    store.append(make_event(project_id="other", timestamp=NOW))

    events = store.range_query(PROJECT_ID, NOW - timedelta(hours=2), NOW)

    assert [e.page for e in events] == ["/0", "/1", "/2"]


def test_filtered_query(store: SQLiteEventStore) -> None:
    store.append(make_event(page="/Docs/Intro", browser="Chrome", timestamp=NOW))
    store.append(
        make_event(page="/docs", browser="Chrome", is_bot=True, timestamp=NOW - timedelta(1))
    )
    store.append(make_event(page="/pricing", browser="Firefox", timestamp=NOW))

    by_page = store.filtered_query(PROJECT_ID, EventFilters(page="docs"))
    humans = store.filtered_query(PROJECT_ID, EventFilters(browser="Chrome", is_bot=False))
    windowed = store.filtered_query(
        PROJECT_ID, EventFilters(start=NOW - timedelta(hours=1)), limit=1
    )

    assert [e.page for e in by_page] == ["/Docs/Intro", "/docs"]
    assert [e.page for e in humans] == ["/Docs/Intro"]
    assert len(windowed) == 1


def test_visitor_listing_and_erasure(store: SQLiteEventStore) -> None:
    store.append(make_event(visitor_id="v1", timestamp=NOW - timedelta(minutes=5)))
    store.append(make_event(visitor_id="v1", timestamp=NOW))
    store.append(make_event(visitor_id="v2"))
    store.append(make_event(project_id="other", visitor_id="v1"))

    assert len(store.list_visitor(PROJECT_ID, "v1")) == 2
    assert store.delete_visitor(PROJECT_ID, "v1") == 2
    assert store.list_visitor(PROJECT_ID, "v1") == []
    assert len(store.list_visitor("other", "v1")) == 1


def test_purge_before_is_strict(store: SQLiteEventStore) -> None:
    cutoff = NOW - timedelta(days=30)
    store.append(make_event(timestamp=cutoff))
    store.append(make_event(timestamp=cutoff - timedelta(seconds=1)))

    assert store.purge_before(PROJECT_ID, cutoff) == 1
    assert [e.timestamp for e in store.recent(PROJECT_ID, 10)] == [cutoff]


def test_external_connection(tmp_path) -> None:
    conn = sqlite3.connect(str(tmp_path / "shared.db"))
    store = SQLiteEventStore("unused", connection=conn)
    store.init_schema()

    store.append(make_event())
    conn.commit()

    assert len(store.recent(PROJECT_ID, 5)) == 1
    conn.close()
