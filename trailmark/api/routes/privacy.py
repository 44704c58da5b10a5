"""
Privacy administration: consent settings, consent records, internal IP
rules, visitor erasure and export, retention purge.
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from trailmark.adapters.clock import SystemClock
from trailmark.api.deps import (
    get_clock,
    get_consent_record_repo,
    get_consent_settings_repo,
    get_event_store,
    get_ip_rule_repo,
    get_rules,
)
from trailmark.api.errors import raise_for_errors
from trailmark.api.schemas import (
    ConsentRecordResponse,
    ConsentSettingsRequest,
    ConsentSettingsResponse,
    ErasureResponse,
    IpRuleRequest,
    IpRuleResponse,
    PurgeRequest,
    PurgeResponse,
    VisitorExportResponse,
)
from trailmark.components.privacy import (
    AddIpRuleInput,
    PurgeInput,
    UpsertSettingsInput,
    events_to_csv,
    get_effective_settings,
    run_add_ip_rule,
    run_delete_ip_rule,
    run_erase_visitor,
    run_export_visitor,
    run_purge,
    run_upsert_settings,
)
from trailmark.core.ports import (
    ConsentRecordRepoPort,
    ConsentSettingsRepoPort,
    EventStorePort,
    InternalIpRuleRepoPort,
)
from trailmark.rules.models import Rules

router = APIRouter()


# --- Consent settings ---


@router.get("/{project_id}/consent-settings", response_model=ConsentSettingsResponse)
def get_consent_settings(
    project_id: str,
    settings_repo: ConsentSettingsRepoPort = Depends(get_consent_settings_repo),
) -> ConsentSettingsResponse:
    """Stored settings, or the defaults when none were saved."""
    return ConsentSettingsResponse.model_validate(
        get_effective_settings(project_id, settings_repo)
    )


@router.post("/{project_id}/consent-settings", response_model=ConsentSettingsResponse)
def upsert_consent_settings(
    project_id: str,
    data: ConsentSettingsRequest,
    settings_repo: ConsentSettingsRepoPort = Depends(get_consent_settings_repo),
    clock: SystemClock = Depends(get_clock),
) -> ConsentSettingsResponse:
    result = run_upsert_settings(
        UpsertSettingsInput(
            project_id=project_id,
            consent_mode=data.consent_mode,  # type: ignore[arg-type]
            respect_dnt=data.respect_dnt,
            anonymize_ip=data.anonymize_ip,
            cookieless_mode=data.cookieless_mode,
            data_retention_days=data.data_retention_days,
        ),
        settings_repo=settings_repo,
        time_port=clock,
    )
    if not result.success:
        raise_for_errors(result.errors)
    return ConsentSettingsResponse.model_validate(result.settings)


# --- Consent records ---


@router.get("/{project_id}/consent-records", response_model=list[ConsentRecordResponse])
def list_consent_records(
    project_id: str,
    limit: int = Query(100, ge=1, le=1000),
    record_repo: ConsentRecordRepoPort = Depends(get_consent_record_repo),
) -> list[ConsentRecordResponse]:
    records = record_repo.list_for_project(project_id, limit=limit)
    return [ConsentRecordResponse.model_validate(r) for r in records]


# --- Internal IPs ---


@router.get("/{project_id}/internal-ips", response_model=list[IpRuleResponse])
def list_internal_ips(
    project_id: str,
    rule_repo: InternalIpRuleRepoPort = Depends(get_ip_rule_repo),
) -> list[IpRuleResponse]:
    return [IpRuleResponse.model_validate(r) for r in rule_repo.list_for_project(project_id)]


@router.post("/{project_id}/internal-ips", response_model=IpRuleResponse, status_code=201)
def add_internal_ip(
    project_id: str,
    data: IpRuleRequest,
    rule_repo: InternalIpRuleRepoPort = Depends(get_ip_rule_repo),
) -> IpRuleResponse:
    """Add an exact, prefix or CIDR rule marking traffic internal."""
    result = run_add_ip_rule(
        AddIpRuleInput(
            project_id=project_id,
            ip=data.ip,
            rule_type=data.rule_type,
            label=data.label,
        ),
        rule_repo=rule_repo,
    )
    if not result.success:
        raise_for_errors(result.errors)
    return IpRuleResponse.model_validate(result.rule)


@router.delete("/{project_id}/internal-ips/{rule_id}", status_code=204)
def delete_internal_ip(
    project_id: str,
    rule_id: str,
    rule_repo: InternalIpRuleRepoPort = Depends(get_ip_rule_repo),
) -> None:
    result = run_delete_ip_rule(project_id, rule_id, rule_repo=rule_repo)
    if not result.success:
        raise_for_errors(result.errors)


# --- Visitor data ---


@router.delete("/{project_id}/visitor/{visitor_id}", response_model=ErasureResponse)
def erase_visitor(
    project_id: str,
    visitor_id: str,
    event_store: EventStorePort = Depends(get_event_store),
    record_repo: ConsentRecordRepoPort = Depends(get_consent_record_repo),
) -> ErasureResponse:
    """Right to erasure: delete the visitor's events and consent records."""
    result = run_erase_visitor(
        project_id, visitor_id, event_store=event_store, record_repo=record_repo
    )
    return ErasureResponse(
        message=result.message,
        events_deleted=result.events_deleted,
        consents_deleted=result.consents_deleted,
    )


@router.get(
    "/{project_id}/visitor/{visitor_id}/data",
    response_model=VisitorExportResponse,
    responses={200: {"content": {"text/csv": {}}}},
)
def export_visitor(
    project_id: str,
    visitor_id: str,
    export_format: Literal["json", "csv"] = Query("json", alias="format"),
    event_store: EventStorePort = Depends(get_event_store),
    record_repo: ConsentRecordRepoPort = Depends(get_consent_record_repo),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> VisitorExportResponse | StreamingResponse:
    """Data portability export as JSON, or the visitor's events as CSV."""
    export = run_export_visitor(
        project_id,
        visitor_id,
        event_store=event_store,
        record_repo=record_repo,
        time_port=clock,
        limit=rules.query.export_limit,
    )
    if export_format == "csv":
        return StreamingResponse(
            iter([events_to_csv(export.events)]),
            media_type="text/csv",
            headers={
                "Content-Disposition": f'attachment; filename="visitor-{visitor_id}-data.csv"'
            },
        )
    return VisitorExportResponse.model_validate(export)


@router.post("/{project_id}/purge", response_model=PurgeResponse)
def purge_events(
    project_id: str,
    data: PurgeRequest | None = None,
    event_store: EventStorePort = Depends(get_event_store),
    settings_repo: ConsentSettingsRepoPort = Depends(get_consent_settings_repo),
    clock: SystemClock = Depends(get_clock),
) -> PurgeResponse:
    """Delete events older than the retention window."""
    result = run_purge(
        PurgeInput(
            project_id=project_id,
            retention_days=data.retention_days if data else None,
        ),
        event_store=event_store,
        settings_repo=settings_repo,
        time_port=clock,
    )
    return PurgeResponse(
        message=result.message,
        retention_days=result.retention_days,
        cutoff=result.cutoff,
        events_deleted=result.events_deleted,
    )
