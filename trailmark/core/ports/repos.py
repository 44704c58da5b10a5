"""
Repository ports for project-owned records.

Definitions (reports, funnels, custom events) are read by the engines and
written by the CRUD routes. Consent settings and internal IP rules are read on
every ingest.
"""

from __future__ import annotations

from typing import Protocol

from trailmark.core.entities import (
    ConsentRecord,
    ConsentSettings,
    CustomEventDefinition,
    CustomReport,
    Funnel,
    InternalIpRule,
    Project,
)


class ProjectRepoPort(Protocol):
    def get(self, project_id: str) -> Project | None: ...

    def save(self, project: Project) -> Project: ...


class ConsentSettingsRepoPort(Protocol):
    def get(self, project_id: str) -> ConsentSettings | None:
        """Stored settings, or None when the project never saved any."""
        ...

    def upsert(self, settings: ConsentSettings) -> ConsentSettings: ...


class InternalIpRuleRepoPort(Protocol):
    def list_for_project(self, project_id: str) -> list[InternalIpRule]: ...

    def add(self, rule: InternalIpRule) -> InternalIpRule: ...

    def delete(self, project_id: str, rule_id: str) -> bool: ...


class ConsentRecordRepoPort(Protocol):
    def add(self, record: ConsentRecord) -> ConsentRecord: ...

    def list_for_project(
        self,
        project_id: str,
        visitor_id: str | None = None,
        limit: int = 100,
    ) -> list[ConsentRecord]:
        """Newest first, optionally for one visitor."""
        ...

    def delete_visitor(self, project_id: str, visitor_id: str) -> int: ...


class ReportRepoPort(Protocol):
    def get(self, project_id: str, report_id: str) -> CustomReport | None: ...

    def list_for_project(self, project_id: str) -> list[CustomReport]: ...

    def save(self, report: CustomReport) -> CustomReport: ...

    def delete(self, project_id: str, report_id: str) -> bool: ...


class FunnelRepoPort(Protocol):
    def get(self, project_id: str, funnel_id: str) -> Funnel | None: ...

    def list_for_project(self, project_id: str) -> list[Funnel]: ...

    def save(self, funnel: Funnel) -> Funnel: ...

    def delete(self, project_id: str, funnel_id: str) -> bool: ...


class CustomEventRepoPort(Protocol):
    def get(self, project_id: str, definition_id: str) -> CustomEventDefinition | None: ...

    def list_for_project(self, project_id: str) -> list[CustomEventDefinition]: ...

    def save(self, definition: CustomEventDefinition) -> CustomEventDefinition: ...

    def delete(self, project_id: str, definition_id: str) -> bool: ...
