"""
DefinitionService - Stored report, funnel and custom event definitions.

Handles creation, updates, deletion and validation. Engines only ever read
definitions that passed validation here.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from trailmark.components.matcher import unknown_operators
from trailmark.components.reports import PERIODS
from trailmark.core.entities import CustomEventDefinition, CustomReport, Funnel

from .models import DefinitionValidationError
from .ports import DefinitionRepoPort

T = TypeVar("T", bound=BaseModel)

Validator = Callable[[Any], list[DefinitionValidationError]]

# Fields never changed by an update
IMMUTABLE_FIELDS = frozenset({"id", "project_id", "created_at"})


# --- Validation Functions ---


def _require_name(name: str | None) -> list[DefinitionValidationError]:
    if not name or not name.strip():
        return [
            DefinitionValidationError(
                code="name_required", message="Name is required", field="name"
            )
        ]
    return []


def validate_report(report: CustomReport) -> list[DefinitionValidationError]:
    errors = _require_name(report.name)
    if report.date_range not in PERIODS:
        errors.append(
            DefinitionValidationError(
                code="invalid_date_range",
                message=f"Unknown date range: {report.date_range}",
                field="dateRange",
            )
        )
    return errors


def validate_funnel(funnel: Funnel) -> list[DefinitionValidationError]:
    errors = _require_name(funnel.name)
    if not funnel.steps:
        errors.append(
            DefinitionValidationError(
                code="steps_required", message="At least one step is required", field="steps"
            )
        )
    for i, step in enumerate(funnel.steps):
        if not step.value:
            errors.append(
                DefinitionValidationError(
                    code="invalid_step",
                    message=f"Step {i + 1} needs a value",
                    field="steps",
                )
            )
    return errors


def validate_custom_event(definition: CustomEventDefinition) -> list[DefinitionValidationError]:
    errors = _require_name(definition.name)
    for name in unknown_operators(definition.rules):
        errors.append(
            DefinitionValidationError(
                code="invalid_operator",
                message=f"Unknown operator: {name}",
                field="rules",
            )
        )
    return errors


# --- Service ---


class DefinitionService(Generic[T]):
    """CRUD over one kind of definition."""

    def __init__(
        self,
        repo: DefinitionRepoPort[T],
        validator: Validator,
        kind: str,
    ) -> None:
        self._repo = repo
        self._validate = validator
        self._kind = kind

    def not_found(self, item_id: str) -> list[DefinitionValidationError]:
        return [
            DefinitionValidationError(
                code="not_found",
                message=f"{self._kind} with ID {item_id} not found",
            )
        ]

    def get(self, project_id: str, item_id: str) -> T | None:
        return self._repo.get(project_id, item_id)

    def list_for_project(self, project_id: str) -> list[T]:
        return self._repo.list_for_project(project_id)

    def create(self, item: T) -> tuple[T | None, list[DefinitionValidationError]]:
        errors = self._validate(item)
        if errors:
            return None, errors
        return self._repo.save(item), []

    def update(
        self,
        project_id: str,
        item_id: str,
        updates: dict[str, Any],
    ) -> tuple[T | None, list[DefinitionValidationError]]:
        """
        Apply a partial update.

        Returns:
            Tuple of (item, errors). Item is None if not found or validation fails.
        """
        existing = self._repo.get(project_id, item_id)
        if existing is None:
            return None, self.not_found(item_id)

        changes = {k: v for k, v in updates.items() if k not in IMMUTABLE_FIELDS}
        changes["updated_at"] = datetime.now(UTC)
        try:
            updated = type(existing).model_validate({**existing.model_dump(), **changes})
        except PydanticValidationError as e:
            return None, [
                DefinitionValidationError(code="invalid_definition", message=str(e))
            ]

        errors = self._validate(updated)
        if errors:
            return None, errors
        return self._repo.save(updated), []

    def delete(
        self, project_id: str, item_id: str
    ) -> tuple[bool, list[DefinitionValidationError]]:
        if not self._repo.delete(project_id, item_id):
            return False, self.not_found(item_id)
        return True, []


# --- Factories ---


def create_report_service(
    repo: DefinitionRepoPort[CustomReport],
) -> DefinitionService[CustomReport]:
    return DefinitionService(repo, validate_report, "Report")


def create_funnel_service(repo: DefinitionRepoPort[Funnel]) -> DefinitionService[Funnel]:
    return DefinitionService(repo, validate_funnel, "Funnel")


def create_custom_event_service(
    repo: DefinitionRepoPort[CustomEventDefinition],
) -> DefinitionService[CustomEventDefinition]:
    return DefinitionService(repo, validate_custom_event, "Custom event")
