"""
Tests for stored definitions: validation, partial updates and lookups.
"""

from __future__ import annotations

import pytest

from tests.conftest import PROJECT_ID
from trailmark.adapters.memory import (
    InMemoryCustomEventRepo,
    InMemoryFunnelRepo,
    InMemoryReportRepo,
)
from trailmark.components.definitions import (
    DefinitionService,
    create_custom_event_service,
    create_funnel_service,
    create_report_service,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_update,
    validate_custom_event,
    validate_funnel,
    validate_report,
)
from trailmark.core.entities import (
    CustomEventDefinition,
    CustomReport,
    Funnel,
    FunnelStep,
    RuleSpec,
)


@pytest.fixture
def report_service(report_repo: InMemoryReportRepo) -> DefinitionService[CustomReport]:
    return create_report_service(report_repo)


@pytest.fixture
def funnel_service(funnel_repo: InMemoryFunnelRepo) -> DefinitionService[Funnel]:
    return create_funnel_service(funnel_repo)


@pytest.fixture
def custom_event_service(
    custom_event_repo: InMemoryCustomEventRepo,
) -> DefinitionService[CustomEventDefinition]:
    return create_custom_event_service(custom_event_repo)


# --- Validation ---


class TestValidation:
    """Test per-kind validators."""

    def test_report_requires_name(self) -> None:
        errors = validate_report(CustomReport(project_id=PROJECT_ID, name="  "))

        assert [e.code for e in errors] == ["name_required"]
        assert errors[0].field == "name"

    def test_report_rejects_unknown_period(self) -> None:
        report = CustomReport(project_id=PROJECT_ID, name="Weekly", date_range="fortnight")

        assert [e.code for e in validate_report(report)] == ["invalid_date_range"]

    def test_funnel_requires_steps(self) -> None:
        errors = validate_funnel(Funnel(project_id=PROJECT_ID, name="Signup"))

        assert [e.code for e in errors] == ["steps_required"]

    def test_funnel_step_needs_value(self) -> None:
        funnel = Funnel(
            project_id=PROJECT_ID,
            name="Signup",
            steps=[FunnelStep(name="Home", type="pageview", value="")],
        )

        assert [e.code for e in validate_funnel(funnel)] == ["invalid_step"]

    def test_custom_event_operator(self) -> None:
        definition = CustomEventDefinition(
            project_id=PROJECT_ID,
            name="Pricing views",
            rules=[
                RuleSpec(field="page", operator="contains", value="/pricing"),
                RuleSpec(field="page", operator="sounds_like", value="x"),
            ],
        )

        errors = validate_custom_event(definition)

        assert [e.code for e in errors] == ["invalid_operator"]
        assert "sounds_like" in errors[0].message


# --- CRUD ---


class TestDefinitionCrud:
    """Test run_* entry points over the service."""

    def test_create_and_get(self, report_service: DefinitionService[CustomReport]) -> None:
        created = run_create(
            CustomReport(project_id=PROJECT_ID, name="Traffic", metrics=["users"]),
            report_service,
        )

        assert created.success is True
        fetched = run_get(PROJECT_ID, created.item.id, report_service)
        assert fetched.item == created.item

    def test_create_invalid_not_stored(
        self, funnel_service: DefinitionService[Funnel]
    ) -> None:
        out = run_create(Funnel(project_id=PROJECT_ID, name=""), funnel_service)

        assert out.success is False
        assert out.item is None
        assert run_list(PROJECT_ID, funnel_service).total == 0

    def test_list_scoped_to_project(self, report_service: DefinitionService[CustomReport]) -> None:
        run_create(CustomReport(project_id=PROJECT_ID, name="A"), report_service)
        run_create(CustomReport(project_id="other", name="B"), report_service)

        listed = run_list(PROJECT_ID, report_service)

        assert listed.total == 1
        assert listed.items[0].name == "A"

    def test_get_other_project_is_not_found(
        self, report_service: DefinitionService[CustomReport]
    ) -> None:
        created = run_create(CustomReport(project_id="other", name="B"), report_service)

        out = run_get(PROJECT_ID, created.item.id, report_service)

        assert out.success is False
        assert out.errors[0].code == "not_found"
        assert "Report with ID" in out.errors[0].message

    def test_update_keeps_immutable_fields(
        self, report_service: DefinitionService[CustomReport]
    ) -> None:
        created = run_create(CustomReport(project_id=PROJECT_ID, name="Old"), report_service).item

        out = run_update(
            PROJECT_ID,
            created.id,
            {"name": "New", "id": "hijack", "project_id": "other", "chart_type": "bar"},
            report_service,
        )

        assert out.success is True
        assert out.item.id == created.id
        assert out.item.project_id == PROJECT_ID
        assert out.item.created_at == created.created_at
        assert out.item.name == "New"
        assert out.item.chart_type == "bar"
        assert out.item.updated_at >= created.updated_at

    def test_update_revalidates(
        self, custom_event_service: DefinitionService[CustomEventDefinition]
    ) -> None:
        created = run_create(
            CustomEventDefinition(project_id=PROJECT_ID, name="Clicks"), custom_event_service
        ).item

        out = run_update(
            PROJECT_ID,
            created.id,
            {"rules": [{"field": "eventType", "operator": "between", "value": "a"}]},
            custom_event_service,
        )

        assert out.success is False
        assert out.errors[0].code == "invalid_operator"
        assert run_get(PROJECT_ID, created.id, custom_event_service).item.rules == []

    def test_update_rejects_malformed_fields(
        self, funnel_service: DefinitionService[Funnel]
    ) -> None:
        created = run_create(
            Funnel(
                project_id=PROJECT_ID,
                name="Signup",
                steps=[FunnelStep(name="Home", type="pageview", value="/")],
            ),
            funnel_service,
        ).item

        out = run_update(
            PROJECT_ID, created.id, {"steps": [{"name": "x", "type": "hover"}]}, funnel_service
        )

        assert out.success is False
        assert out.errors[0].code == "invalid_definition"

    def test_update_missing(self, funnel_service: DefinitionService[Funnel]) -> None:
        out = run_update(PROJECT_ID, "missing", {"name": "x"}, funnel_service)

        assert out.success is False
        assert out.errors[0].code == "not_found"

    def test_delete(self, funnel_service: DefinitionService[Funnel]) -> None:
        created = run_create(
            Funnel(
                project_id=PROJECT_ID,
                name="Signup",
                steps=[FunnelStep(name="Home", type="pageview", value="/")],
            ),
            funnel_service,
        ).item

        assert run_delete(PROJECT_ID, created.id, funnel_service).success is True
        second = run_delete(PROJECT_ID, created.id, funnel_service)
        assert second.success is False
        assert second.errors[0].code == "not_found"
