"""
Definitions component port definitions.
"""

from __future__ import annotations

from typing import Protocol, TypeVar

T = TypeVar("T")


class DefinitionRepoPort(Protocol[T]):
    """Common shape of report, funnel and custom event repositories."""

    def get(self, project_id: str, item_id: str) -> T | None: ...

    def list_for_project(self, project_id: str) -> list[T]: ...

    def save(self, item: T) -> T: ...

    def delete(self, project_id: str, item_id: str) -> bool: ...
