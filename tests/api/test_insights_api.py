"""
Tests for breakdown views, the filtered event listing and the health check.
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from tests.conftest import NOW, PROJECT_ID, make_event
from trailmark.adapters.memory import InMemoryEventStore
from trailmark.api import main
from trailmark.components.insights import BreakdownView

BASE = f"/api/projects/{PROJECT_ID}"


@pytest.fixture
def seeded(event_store: InMemoryEventStore) -> InMemoryEventStore:
    event_store.append(
        make_event(
            page="/",
            browser="Chrome",
            country="DE",
            traffic_source="organic_search",
            referrer="https://www.google.com/",
            timestamp=NOW - timedelta(minutes=2),
        )
    )
    event_store.append(
        make_event(
            event_type="click",
            page="/",
            browser="Chrome",
            country="DE",
            timestamp=NOW - timedelta(minutes=1),
        )
    )
    event_store.append(
        make_event(
            visitor_id="v2",
            session_id="s2",
            page="/docs",
            browser="Firefox",
            is_bot=True,
            timestamp=NOW - timedelta(days=2),
        )
    )
    return event_store


class TestBreakdownRoutes:
    """Test one GET route per breakdown view."""

    @pytest.mark.parametrize("view", list(BreakdownView))
    def test_every_view_is_routed(
        self, client: TestClient, seeded: InMemoryEventStore, view: BreakdownView
    ) -> None:
        response = client.get(f"{BASE}/{view.value}")

        assert response.status_code == 200

    def test_acquisition_default_period(
        self, client: TestClient, seeded: InMemoryEventStore
    ) -> None:
        data = client.get(f"{BASE}/acquisition").json()

        assert data["period"] == "last_30_days"
        assert data["totalUsers"] == 2
        assert data["totalSessions"] == 2

    def test_period_param(self, client: TestClient, seeded: InMemoryEventStore) -> None:
        data = client.get(f"{BASE}/engagement", params={"period": "today"}).json()

        assert data["period"] == "today"
        assert data["totalEvents"] == 2

    def test_tech(self, client: TestClient, seeded: InMemoryEventStore) -> None:
        data = client.get(f"{BASE}/tech").json()

        browsers = {b["name"]: b for b in data["browsers"]}
        assert browsers["Chrome"]["events"] == 2
        assert browsers["Firefox"]["users"] == 1

    def test_traffic_sources(self, client: TestClient, seeded: InMemoryEventStore) -> None:
        data = client.get(f"{BASE}/traffic-sources").json()

        platforms = {p["name"] for p in data["sourcePlatforms"]}
        assert platforms == {"Google", "(direct)"}

    def test_realtime(self, client: TestClient, seeded: InMemoryEventStore) -> None:
        data = client.get(f"{BASE}/realtime").json()

        assert data["activeUsers30"] == 1
        assert data["activeUsers5"] == 1
        assert data["pageViews30"] == 1
        assert len(data["perMinute"]) == 30

    def test_journeys(self, client: TestClient, seeded: InMemoryEventStore) -> None:
        data = client.get(f"{BASE}/journeys").json()

        assert [j["sessionId"] for j in data] == ["s1", "s2"]
        assert data[0]["duration"] == 60
        assert data[0]["events"][1]["eventType"] == "click"

    def test_visitors(self, client: TestClient, seeded: InMemoryEventStore) -> None:
        data = client.get(f"{BASE}/visitors").json()

        assert [v["visitorId"] for v in data] == ["v1", "v2"]
        assert data[0]["totalEvents"] == 2
        assert data[1]["isBot"] is True


class TestFilteredEvents:
    """Test /events/filtered."""

    def test_all_newest_first(self, client: TestClient, seeded: InMemoryEventStore) -> None:
        data = client.get(f"{BASE}/events/filtered").json()

        assert [e["eventType"] for e in data] == ["click", "pageview", "pageview"]

    def test_camel_case_filters(self, client: TestClient, seeded: InMemoryEventStore) -> None:
        data = client.get(
            f"{BASE}/events/filtered", params={"eventType": "pageview", "isBot": "false"}
        ).json()

        assert len(data) == 1
        assert data[0]["browser"] == "Chrome"

    def test_page_substring(self, client: TestClient, seeded: InMemoryEventStore) -> None:
        data = client.get(f"{BASE}/events/filtered", params={"page": "DOC"}).json()

        assert [e["page"] for e in data] == ["/docs"]

    def test_window_and_limit(self, client: TestClient, seeded: InMemoryEventStore) -> None:
        params = {"from": (NOW - timedelta(hours=1)).isoformat(), "limit": 1}

        data = client.get(f"{BASE}/events/filtered", params=params).json()

        assert len(data) == 1
        assert data[0]["eventType"] == "click"


def test_health() -> None:
    response = TestClient(main.app).get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
