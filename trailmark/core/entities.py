"""
Domain entities for trailmark.

- Event: one recorded interaction (immutable, append-only)
- Project: collaborator record carrying the registered domain
- ConsentSettings: per-project privacy toggles read on every ingest
- InternalIpRule: exact / prefix / CIDR rule marking traffic internal
- CustomReport, Funnel, CustomEventDefinition: stored query definitions
- ConsentRecord: a visitor's consent decision (hashed IP only)

Flags are real booleans here. String encodings ("true"/"false") live at the
wire boundary in trailmark.api.schemas.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

# --- Enums / Literals ---

ConsentMode = Literal["opt-in", "opt-out"]
IpRuleType = Literal["exact", "prefix", "cidr"]
FunnelStepType = Literal["pageview", "event", "click"]

# Well-known event types emitted by the tracking snippet. Custom event types
# are plain strings and pass through untouched.
PAGEVIEW = "pageview"
CLICK = "click"
SCROLL = "scroll"
FORM_SUBMIT = "form_submit"
RAGE_CLICK = "rage_click"


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


# --- Events ---


class Event(BaseModel):
    """
    One recorded interaction.

    Invariants:
    - immutable after creation; never updated, only bulk-deleted
    - cookieless projects store visitor_id = session_id = None
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    project_id: str
    visitor_id: str | None = None
    session_id: str | None = None
    event_type: str = PAGEVIEW
    page: str | None = None
    referrer: str | None = None
    device: str | None = None
    browser: str | None = None
    os: str | None = None
    country: str | None = None
    city: str | None = None
    region: str | None = None
    ip: str | None = None
    is_bot: bool = False
    is_internal: bool = False
    is_server: bool = False
    traffic_source: str | None = None
    metadata: dict[str, Any] | None = None
    timestamp: datetime = Field(default_factory=_utcnow)


# Wire (camelCase) names accepted wherever a rule or filter names a field.
EVENT_FIELD_ALIASES: dict[str, str] = {
    "projectId": "project_id",
    "visitorId": "visitor_id",
    "sessionId": "session_id",
    "eventType": "event_type",
    "isBot": "is_bot",
    "isInternal": "is_internal",
    "isServer": "is_server",
    "trafficSource": "traffic_source",
}


def event_field(event: Event, name: str) -> Any:
    """Look up an event attribute by snake_case or camelCase name."""
    attr = EVENT_FIELD_ALIASES.get(name, name)
    if attr not in Event.model_fields:
        return None
    return getattr(event, attr)


def metadata_value(event: Event, *keys: str) -> Any:
    """First non-empty metadata value among keys, or None."""
    if not isinstance(event.metadata, dict):
        return None
    for key in keys:
        value = event.metadata.get(key)
        if value:
            return value
    return None


# --- Projects & privacy settings ---


class Project(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str = ""
    domain: str | None = None


class ConsentSettings(BaseModel):
    """
    Per-project consent configuration.

    A project without a stored row behaves as default_consent_settings().
    """

    project_id: str
    consent_mode: ConsentMode = "opt-in"
    respect_dnt: bool = True
    anonymize_ip: bool = True
    cookieless_mode: bool = False
    data_retention_days: int = 365
    updated_at: datetime = Field(default_factory=_utcnow)


def default_consent_settings(project_id: str) -> ConsentSettings:
    return ConsentSettings(project_id=project_id)


class InternalIpRule(BaseModel):
    id: str = Field(default_factory=_new_id)
    project_id: str
    ip: str
    rule_type: IpRuleType = "exact"
    label: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class ConsentRecord(BaseModel):
    id: str = Field(default_factory=_new_id)
    project_id: str
    visitor_id: str | None = None
    consent_given: bool = False
    ip_hash: str = ""
    user_agent: str | None = None
    consent_version: int | None = None
    categories_accepted: list[str] | None = None
    timestamp: datetime = Field(default_factory=_utcnow)


# --- Stored query definitions ---


class ReportFilters(BaseModel):
    """Optional report predicates; empty values are ignored."""

    exclude_bots: bool = False
    exclude_internal: bool = False
    event_type: str | None = None
    device: str | None = None
    country: str | None = None
    page: str | None = None


class CustomReport(BaseModel):
    id: str = Field(default_factory=_new_id)
    project_id: str
    name: str
    description: str | None = None
    metrics: list[str] = Field(default_factory=list)
    dimensions: list[str] = Field(default_factory=list)
    chart_type: str = "line"
    date_range: str = "last_30_days"
    filters: ReportFilters | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class FunnelStep(BaseModel):
    name: str
    type: FunnelStepType
    value: str


class Funnel(BaseModel):
    id: str = Field(default_factory=_new_id)
    project_id: str
    name: str
    description: str | None = None
    steps: list[FunnelStep] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class RuleSpec(BaseModel):
    """Raw {field, operator, value} triple as stored on a definition."""

    field: str
    operator: str
    value: str = ""


class CustomEventDefinition(BaseModel):
    id: str = Field(default_factory=_new_id)
    project_id: str
    name: str
    description: str | None = None
    category: str = "custom"
    status: str = "active"
    rules: list[RuleSpec] = Field(default_factory=list)
    color: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
