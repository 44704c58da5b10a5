"""Test app with every router mounted and dependencies overridden."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tests.conftest import StubGeo
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
from trailmark.api import deps
from trailmark.api.routes import (
    collect,
    custom_events,
    events,
    funnels,
    insights,
    privacy,
    reports,
)
from trailmark.rules.models import Rules

# Public address that is neither private nor skipped by the geo lookup
CLIENT_IP = "203.0.113.45"


@pytest.fixture
def app(
    rules: Rules,
    clock: FixedClock,
    geo: StubGeo,
    event_store: InMemoryEventStore,
    project_repo: InMemoryProjectRepo,
    settings_repo: InMemoryConsentSettingsRepo,
    record_repo: InMemoryConsentRecordRepo,
    ip_rule_repo: InMemoryInternalIpRuleRepo,
    report_repo: InMemoryReportRepo,
    funnel_repo: InMemoryFunnelRepo,
    custom_event_repo: InMemoryCustomEventRepo,
) -> FastAPI:
    """Test FastAPI app wired to fresh in-memory stores."""
    app = FastAPI()
    app.include_router(collect.router, prefix="/api")
    for module in (reports, funnels, custom_events, events, privacy, insights):
        app.include_router(module.router, prefix="/api/projects")

    app.dependency_overrides.update(
        {
            deps.get_rules: lambda: rules,
            deps.get_clock: lambda: clock,
            deps.get_geo: lambda: geo,
            deps.get_event_store: lambda: event_store,
            deps.get_project_repo: lambda: project_repo,
            deps.get_consent_settings_repo: lambda: settings_repo,
            deps.get_consent_record_repo: lambda: record_repo,
            deps.get_ip_rule_repo: lambda: ip_rule_repo,
            deps.get_report_repo: lambda: report_repo,
            deps.get_funnel_repo: lambda: funnel_repo,
            deps.get_custom_event_repo: lambda: custom_event_repo,
        }
    )
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client sending beacons from a public address."""
    return TestClient(app, headers={"X-Forwarded-For": CLIENT_IP})
