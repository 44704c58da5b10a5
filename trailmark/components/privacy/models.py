"""
Privacy component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from trailmark.core.entities import (
    ConsentMode,
    ConsentRecord,
    ConsentSettings,
    Event,
    InternalIpRule,
    IpRuleType,
)

# --- Validation Error ---


@dataclass(frozen=True)
class PrivacyValidationError:
    """Privacy validation error."""

    code: str
    message: str
    field_name: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class UpsertSettingsInput:
    """Owner-supplied settings; None keeps the default."""

    project_id: str
    consent_mode: ConsentMode | None = None
    respect_dnt: bool | None = None
    anonymize_ip: bool | None = None
    cookieless_mode: bool | None = None
    data_retention_days: int | None = None


@dataclass(frozen=True)
class RecordConsentInput:
    project_id: str
    client_ip: str
    visitor_id: str | None = None
    consent_given: Any = None
    user_agent: str | None = None
    consent_version: int | None = None
    categories_accepted: list[str] | None = None


@dataclass(frozen=True)
class AddIpRuleInput:
    project_id: str
    ip: str
    rule_type: IpRuleType | str = "exact"
    label: str | None = None


@dataclass(frozen=True)
class PurgeInput:
    project_id: str
    retention_days: int | None = None


# --- Output Models ---


@dataclass(frozen=True)
class SettingsOutput:
    settings: ConsentSettings | None
    errors: list[PrivacyValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ConsentRecordOutput:
    record: ConsentRecord | None
    errors: list[PrivacyValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class IpRuleOutput:
    rule: InternalIpRule | None
    errors: list[PrivacyValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ErasureOutput:
    visitor_id: str
    events_deleted: int
    consents_deleted: int

    @property
    def message(self) -> str:
        return (
            f"Deleted {self.events_deleted} events and {self.consents_deleted} "
            f"consent records for visitor {self.visitor_id}"
        )


@dataclass(frozen=True)
class VisitorExport:
    project_id: str
    visitor_id: str
    export_date: datetime
    events: list[Event]
    consent_records: list[ConsentRecord]


@dataclass(frozen=True)
class PurgeOutput:
    retention_days: int
    cutoff: datetime
    events_deleted: int

    @property
    def message(self) -> str:
        return f"Purged {self.events_deleted} events older than {self.retention_days} days"
