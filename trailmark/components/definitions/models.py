"""
Definitions component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")

# --- Validation Errors ---


@dataclass(frozen=True)
class DefinitionValidationError:
    """Definition validation error."""

    code: str
    message: str
    field: str | None = None


# --- Output Models ---


@dataclass(frozen=True)
class DefinitionOutput(Generic[T]):
    """Output from a create / update / get / delete operation."""

    item: T | None
    errors: list[DefinitionValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class DefinitionListOutput(Generic[T]):
    items: list[T]
    total: int
