"""
Wire models.

Request and response bodies use camelCase on the wire and snake_case in
Python. Component outputs (dataclasses and entities) are converted with
model_validate via from_attributes.
"""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from trailmark.core.entities import ConsentMode, FunnelStepType, IpRuleType


def _coerce_wire_bool(value: Any) -> Any:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1"):
            return True
        if lowered in ("false", "0", ""):
            return False
    return value


# Accepts true/false, "true"/"false", 1/0 and "1"/"0"
WireBool = Annotated[bool, BeforeValidator(_coerce_wire_bool)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class DateRangeModel(CamelModel):
    start: datetime = Field(alias="from")
    end: datetime = Field(alias="to")


class MessageResponse(CamelModel):
    message: str


# --- Events ---
class BeaconRequest(CamelModel):
    project_id: str | None = None
    visitor_id: str | None = None
    session_id: str | None = None
    event_type: str | None = None
    page: str | None = None
    hostname: str | None = None
    referrer: str | None = None
    user_agent: str | None = None
    dnt: Any = None
    consent_given: Any = None
    device: str | None = None
    browser: str | None = None
    os: str | None = None
    country: str | None = None
    metadata: dict[str, Any] | None = None


class EventResponse(CamelModel):
    id: str
    project_id: str
    visitor_id: str | None
    session_id: str | None
    event_type: str
    page: str | None
    referrer: str | None
    device: str | None
    browser: str | None
    os: str | None
    country: str | None
    city: str | None
    region: str | None
    ip: str | None
    is_bot: bool
    is_internal: bool
    is_server: bool
    traffic_source: str | None
    metadata: dict[str, Any] | None
    timestamp: datetime


# --- Consent ---
class ConsentRequest(CamelModel):
    project_id: str | None = None
    visitor_id: str | None = None
    consent_given: Any = None
    consent_version: int | None = None
    categories_accepted: list[str] | None = None


class ConsentRecordResponse(CamelModel):
    id: str
    project_id: str
    visitor_id: str | None
    consent_given: bool
    ip_hash: str
    user_agent: str | None
    consent_version: int | None
    categories_accepted: list[str] | None
    timestamp: datetime


class ConsentSettingsRequest(CamelModel):
    consent_mode: str | None = None
    respect_dnt: WireBool | None = None
    anonymize_ip: WireBool | None = None
    cookieless_mode: WireBool | None = None
    data_retention_days: int | None = None


class ConsentSettingsResponse(CamelModel):
    project_id: str
    consent_mode: ConsentMode
    respect_dnt: bool
    anonymize_ip: bool
    cookieless_mode: bool
    data_retention_days: int
    updated_at: datetime


class ConsentConfigResponse(CamelModel):
    """Public subset read by the tracking snippet."""

    consent_mode: ConsentMode
    respect_dnt: bool
    cookieless_mode: bool


# --- Internal IPs ---
class IpRuleRequest(CamelModel):
    ip: str
    rule_type: str = "exact"
    label: str | None = None


class IpRuleResponse(CamelModel):
    id: str
    project_id: str
    ip: str
    rule_type: IpRuleType
    label: str | None
    created_at: datetime


# --- Visitor data ---
class ErasureResponse(CamelModel):
    message: str
    events_deleted: int
    consents_deleted: int


class VisitorExportResponse(CamelModel):
    project_id: str
    visitor_id: str
    export_date: datetime
    events: list[EventResponse]
    consent_records: list[ConsentRecordResponse]


class PurgeRequest(CamelModel):
    retention_days: int | None = Field(default=None, ge=1)


class PurgeResponse(CamelModel):
    message: str
    retention_days: int
    cutoff: datetime
    events_deleted: int


# --- Reports ---
class ReportFiltersModel(CamelModel):
    exclude_bots: WireBool = False
    exclude_internal: WireBool = False
    event_type: str | None = None
    device: str | None = None
    country: str | None = None
    page: str | None = None


class ReportCreateRequest(CamelModel):
    name: str
    description: str | None = None
    metrics: list[str] = []
    dimensions: list[str] = []
    chart_type: str = "line"
    date_range: str = "last_30_days"
    filters: ReportFiltersModel | None = None


class ReportUpdateRequest(CamelModel):
    name: str | None = None
    description: str | None = None
    metrics: list[str] | None = None
    dimensions: list[str] | None = None
    chart_type: str | None = None
    date_range: str | None = None
    filters: ReportFiltersModel | None = None


class ReportResponse(CamelModel):
    id: str
    project_id: str
    name: str
    description: str | None
    metrics: list[str]
    dimensions: list[str]
    chart_type: str
    date_range: str
    filters: ReportFiltersModel | None
    created_at: datetime
    updated_at: datetime


class ReportSummary(CamelModel):
    id: str
    name: str
    chart_type: str
    metrics: list[str]
    dimensions: list[str]
    date_range: str


class ReportDataResponse(CamelModel):
    report: ReportSummary
    total_events: int
    rows: list[dict[str, Any]]


# --- Funnels ---
class FunnelStepModel(CamelModel):
    name: str
    type: FunnelStepType
    value: str


class FunnelCreateRequest(CamelModel):
    name: str
    description: str | None = None
    steps: list[FunnelStepModel] = []


class FunnelUpdateRequest(CamelModel):
    name: str | None = None
    description: str | None = None
    steps: list[FunnelStepModel] | None = None


class FunnelResponse(CamelModel):
    id: str
    project_id: str
    name: str
    description: str | None
    steps: list[FunnelStepModel]
    created_at: datetime
    updated_at: datetime


class StepResultModel(CamelModel):
    name: str
    type: str
    value: str
    users: int
    drop_off: int
    drop_off_rate: float


class FunnelAnalysisResponse(CamelModel):
    funnel: FunnelResponse
    date_range: DateRangeModel
    total_sessions: int
    steps: list[StepResultModel]
    overall_conversion: float


# --- Custom events ---
class RuleModel(CamelModel):
    field: str
    operator: str
    value: str = ""


class CustomEventCreateRequest(CamelModel):
    name: str
    description: str | None = None
    category: str = "custom"
    status: str = "active"
    rules: list[RuleModel] = []
    color: str | None = None


class CustomEventUpdateRequest(CamelModel):
    name: str | None = None
    description: str | None = None
    category: str | None = None
    status: str | None = None
    rules: list[RuleModel] | None = None
    color: str | None = None


class CustomEventResponse(CamelModel):
    id: str
    project_id: str
    name: str
    description: str | None
    category: str
    status: str
    rules: list[RuleModel]
    color: str | None
    created_at: datetime
    updated_at: datetime


class MatchesResponse(CamelModel):
    definition: CustomEventResponse
    date_range: DateRangeModel
    total_matches: int
    events: list[EventResponse]


class PageConversionModel(CamelModel):
    page: str
    page_views: int
    conversions: int
    conversion_rate: float
    unique_converters: int


class SourceConversionModel(CamelModel):
    source: str
    sessions: int
    conversions: int
    conversion_rate: float


class DailyConversionModel(CamelModel):
    date: str
    events: int
    conversions: int


class ConversionAnalysisResponse(CamelModel):
    definition: CustomEventResponse
    date_range: DateRangeModel
    total_sessions: int
    total_conversions: int
    overall_conversion_rate: float
    page_analysis: list[PageConversionModel]
    source_analysis: list[SourceConversionModel]
    daily_trend: list[DailyConversionModel]
