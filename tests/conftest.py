"""Shared fixtures: fixed clock, stub geo, in-memory stores and event factory."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from trailmark.adapters.clock import FixedClock
from trailmark.adapters.memory import (
    InMemoryConsentRecordRepo,
    InMemoryConsentSettingsRepo,
    InMemoryCustomEventRepo,
    InMemoryEventStore,
    InMemoryFunnelRepo,
    InMemoryInternalIpRuleRepo,
    InMemoryProjectRepo,
    InMemoryReportRepo,
)
from trailmark.components.identity import EMPTY_GEO, GeoResult
from trailmark.core.entities import Event
from trailmark.rules.loader import load_rules
from trailmark.rules.models import Rules

PROJECT_ID = "proj-1"
NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=UTC)


class StubGeo:
    """GeoLookupPort answering from a fixed table and recording calls."""

    def __init__(self, table: dict[str, GeoResult] | None = None) -> None:
        self.table = table or {}
        self.calls: list[str] = []

    def lookup(self, ip: str) -> GeoResult:
        self.calls.append(ip)
        return self.table.get(ip, EMPTY_GEO)


def make_event(**overrides: Any) -> Event:
    """Event with sensible defaults for tests."""
    data: dict[str, Any] = {
        "project_id": PROJECT_ID,
        "visitor_id": "v1",
        "session_id": "s1",
        "event_type": "pageview",
        "page": "/",
        "timestamp": NOW,
    }
    data.update(overrides)
    return Event(**data)


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def rules(project_root: Path) -> Rules:
    """The real rules.yaml."""
    return load_rules(project_root / "rules.yaml")


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def geo() -> StubGeo:
    return StubGeo()


@pytest.fixture
def event_store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def project_repo() -> InMemoryProjectRepo:
    return InMemoryProjectRepo()


@pytest.fixture
def settings_repo() -> InMemoryConsentSettingsRepo:
    return InMemoryConsentSettingsRepo()


@pytest.fixture
def record_repo() -> InMemoryConsentRecordRepo:
    return InMemoryConsentRecordRepo()


@pytest.fixture
def ip_rule_repo() -> InMemoryInternalIpRuleRepo:
    return InMemoryInternalIpRuleRepo()


@pytest.fixture
def report_repo() -> InMemoryReportRepo:
    return InMemoryReportRepo()


@pytest.fixture
def funnel_repo() -> InMemoryFunnelRepo:
    return InMemoryFunnelRepo()


@pytest.fixture
def custom_event_repo() -> InMemoryCustomEventRepo:
    return InMemoryCustomEventRepo()
