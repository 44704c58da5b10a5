"""
Definitions component - Report, funnel and custom event CRUD.

Shell Layer - wraps DefinitionService results in output models.
"""

from __future__ import annotations

from typing import Any

from ._impl import DefinitionService
from .models import DefinitionListOutput, DefinitionOutput


def run_list(project_id: str, service: DefinitionService[Any]) -> DefinitionListOutput[Any]:
    """List a project's definitions."""
    items = service.list_for_project(project_id)
    return DefinitionListOutput(items=items, total=len(items))


def run_get(
    project_id: str,
    item_id: str,
    service: DefinitionService[Any],
) -> DefinitionOutput[Any]:
    item = service.get(project_id, item_id)
    if item is None:
        return DefinitionOutput(item=None, errors=service.not_found(item_id), success=False)
    return DefinitionOutput(item=item)


def run_create(item: Any, service: DefinitionService[Any]) -> DefinitionOutput[Any]:
    """Validate and store a new definition."""
    created, errors = service.create(item)
    return DefinitionOutput(item=created, errors=errors, success=created is not None)


def run_update(
    project_id: str,
    item_id: str,
    updates: dict[str, Any],
    service: DefinitionService[Any],
) -> DefinitionOutput[Any]:
    """Apply a partial update (snake_case field names)."""
    updated, errors = service.update(project_id, item_id, updates)
    return DefinitionOutput(item=updated, errors=errors, success=updated is not None)


def run_delete(
    project_id: str,
    item_id: str,
    service: DefinitionService[Any],
) -> DefinitionOutput[Any]:
    deleted, errors = service.delete(project_id, item_id)
    return DefinitionOutput(item=None, errors=errors, success=deleted)
