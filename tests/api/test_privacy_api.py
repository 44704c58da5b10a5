"""
Tests for the privacy administration API: consent settings and records,
internal IPs, visitor erasure and export, retention purge.
"""

from __future__ import annotations

import csv
import io
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from tests.conftest import NOW, PROJECT_ID, make_event
from trailmark.adapters.memory import (
    InMemoryConsentRecordRepo,
    InMemoryEventStore,
)
from trailmark.components.privacy import EXPORT_CSV_COLUMNS
from trailmark.core.entities import ConsentRecord

BASE = f"/api/projects/{PROJECT_ID}"


class TestConsentSettingsApi:
    """Test /consent-settings."""

    def test_defaults(self, client: TestClient) -> None:
        data = client.get(f"{BASE}/consent-settings").json()

        assert data["consentMode"] == "opt-in"
        assert data["anonymizeIp"] is True
        assert data["dataRetentionDays"] == 365

    def test_upsert_accepts_string_flags(self, client: TestClient) -> None:
        response = client.post(
            f"{BASE}/consent-settings",
            json={"consentMode": "opt-out", "cookielessMode": "true", "respectDnt": "0"},
        )

        assert response.status_code == 200
        data = client.get(f"{BASE}/consent-settings").json()
        assert data["consentMode"] == "opt-out"
        assert data["cookielessMode"] is True
        assert data["respectDnt"] is False
        assert data["updatedAt"].startswith("2025-06-15T12:00:00")

    def test_upsert_rejects_bad_mode(self, client: TestClient) -> None:
        response = client.post(f"{BASE}/consent-settings", json={"consentMode": "maybe"})

        assert response.status_code == 400
        assert response.json()["detail"][0]["field"] == "consentMode"


class TestConsentRecordsApi:
    """Test /consent-records."""

    def test_lists_newest_first_with_limit(
        self, client: TestClient, record_repo: InMemoryConsentRecordRepo
    ) -> None:
        for i in range(3):
            record_repo.add(
                ConsentRecord(
                    project_id=PROJECT_ID,
                    visitor_id=f"v{i}",
                    timestamp=NOW - timedelta(minutes=i),
                )
            )

        data = client.get(f"{BASE}/consent-records", params={"limit": 2}).json()

        assert [r["visitorId"] for r in data] == ["v0", "v1"]

    def test_limit_bounds(self, client: TestClient) -> None:
        assert client.get(f"{BASE}/consent-records", params={"limit": 0}).status_code == 422


class TestInternalIpsApi:
    """Test /internal-ips."""

    def test_add_list_delete(self, client: TestClient) -> None:
        created = client.post(
            f"{BASE}/internal-ips",
            json={"ip": "10.0.0.0/8", "ruleType": "cidr", "label": "VPN"},
        )
        assert created.status_code == 201
        rule_id = created.json()["id"]

        assert [r["label"] for r in client.get(f"{BASE}/internal-ips").json()] == ["VPN"]
        assert client.delete(f"{BASE}/internal-ips/{rule_id}").status_code == 204
        assert client.get(f"{BASE}/internal-ips").json() == []

    def test_invalid_rule_type(self, client: TestClient) -> None:
        response = client.post(f"{BASE}/internal-ips", json={"ip": "10.0.0.1", "ruleType": "x"})

        assert response.status_code == 400

    def test_delete_missing(self, client: TestClient) -> None:
        assert client.delete(f"{BASE}/internal-ips/nope").status_code == 404


class TestVisitorDataApi:
    """Test erasure and export of one visitor's data."""

    @pytest.fixture(autouse=True)
    def populated(
        self, event_store: InMemoryEventStore, record_repo: InMemoryConsentRecordRepo
    ) -> None:
        event_store.append(make_event(visitor_id="v1", page="/a", browser="Firefox"))
        event_store.append(make_event(visitor_id="v2"))
        record_repo.add(ConsentRecord(project_id=PROJECT_ID, visitor_id="v1", consent_given=True))

    def test_export_json(self, client: TestClient) -> None:
        data = client.get(f"{BASE}/visitor/v1/data").json()

        assert data["visitorId"] == "v1"
        assert data["exportDate"].startswith("2025-06-15")
        assert [e["page"] for e in data["events"]] == ["/a"]
        assert data["consentRecords"][0]["consentGiven"] is True

    def test_export_csv(self, client: TestClient) -> None:
        response = client.get(f"{BASE}/visitor/v1/data", params={"format": "csv"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "visitor-v1-data.csv" in response.headers["content-disposition"]
        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == list(EXPORT_CSV_COLUMNS)
        assert len(rows) == 2
        assert rows[1][5] == "Firefox"

    def test_export_unknown_format(self, client: TestClient) -> None:
        assert client.get(f"{BASE}/visitor/v1/data", params={"format": "xml"}).status_code == 422

    def test_erase(self, client: TestClient, event_store: InMemoryEventStore) -> None:
        response = client.delete(f"{BASE}/visitor/v1")

        assert response.status_code == 200
        data = response.json()
        assert data["eventsDeleted"] == 1
        assert data["consentsDeleted"] == 1
        assert [e.visitor_id for e in event_store.get_all()] == ["v2"]


class TestPurgeApi:
    """Test /purge."""

    @pytest.fixture(autouse=True)
    def aged(self, event_store: InMemoryEventStore) -> None:
        for days in (1, 50, 400):
            event_store.append(make_event(timestamp=NOW - timedelta(days=days)))

    def test_default_retention(self, client: TestClient) -> None:
        data = client.post(f"{BASE}/purge").json()

        assert data["retentionDays"] == 365
        assert data["eventsDeleted"] == 1
        assert data["message"] == "Purged 1 events older than 365 days"

    def test_explicit_retention(self, client: TestClient) -> None:
        data = client.post(f"{BASE}/purge", json={"retentionDays": 30}).json()

        assert data["retentionDays"] == 30
        assert data["eventsDeleted"] == 2

    def test_project_retention(self, client: TestClient) -> None:
        client.post(f"{BASE}/consent-settings", json={"dataRetentionDays": 10})

        data = client.post(f"{BASE}/purge").json()

        assert data["retentionDays"] == 10
        assert data["eventsDeleted"] == 2

    def test_rejects_non_positive_days(self, client: TestClient) -> None:
        assert client.post(f"{BASE}/purge", json={"retentionDays": 0}).status_code == 422
