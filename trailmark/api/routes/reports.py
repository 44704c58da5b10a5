"""Custom report definitions and report execution."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from trailmark.adapters.clock import SystemClock
from trailmark.api.deps import (
    get_clock,
    get_event_store,
    get_report_repo,
    get_report_service,
    get_rules,
)
from trailmark.api.errors import raise_for_errors
from trailmark.api.schemas import (
    ReportCreateRequest,
    ReportDataResponse,
    ReportResponse,
    ReportSummary,
    ReportUpdateRequest,
)
from trailmark.components.definitions import (
    DefinitionService,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_update,
)
from trailmark.components.reports import RunReportInput, run_report
from trailmark.core.entities import CustomReport
from trailmark.core.ports import EventStorePort, ReportRepoPort
from trailmark.rules.models import Rules

router = APIRouter()


@router.get("/{project_id}/reports", response_model=list[ReportResponse])
def list_reports(
    project_id: str,
    service: DefinitionService[CustomReport] = Depends(get_report_service),
) -> list[ReportResponse]:
    """List a project's reports."""
    result = run_list(project_id, service)
    return [ReportResponse.model_validate(r) for r in result.items]


@router.post("/{project_id}/reports", response_model=ReportResponse, status_code=201)
def create_report(
    project_id: str,
    data: ReportCreateRequest,
    service: DefinitionService[CustomReport] = Depends(get_report_service),
) -> ReportResponse:
    """Create a report definition."""
    result = run_create(CustomReport(project_id=project_id, **data.model_dump()), service)
    if not result.success:
        raise_for_errors(result.errors)
    return ReportResponse.model_validate(result.item)


@router.get("/{project_id}/reports/{report_id}", response_model=ReportResponse)
def get_report(
    project_id: str,
    report_id: str,
    service: DefinitionService[CustomReport] = Depends(get_report_service),
) -> ReportResponse:
    result = run_get(project_id, report_id, service)
    if not result.success:
        raise_for_errors(result.errors)
    return ReportResponse.model_validate(result.item)


@router.patch("/{project_id}/reports/{report_id}", response_model=ReportResponse)
def update_report(
    project_id: str,
    report_id: str,
    data: ReportUpdateRequest,
    service: DefinitionService[CustomReport] = Depends(get_report_service),
) -> ReportResponse:
    """Partially update a report definition."""
    result = run_update(project_id, report_id, data.model_dump(exclude_unset=True), service)
    if not result.success:
        raise_for_errors(result.errors)
    return ReportResponse.model_validate(result.item)


@router.delete("/{project_id}/reports/{report_id}", status_code=204)
def delete_report(
    project_id: str,
    report_id: str,
    service: DefinitionService[CustomReport] = Depends(get_report_service),
) -> None:
    result = run_delete(project_id, report_id, service)
    if not result.success:
        raise_for_errors(result.errors)


@router.get("/{project_id}/reports/{report_id}/data", response_model=ReportDataResponse)
def report_data(
    project_id: str,
    report_id: str,
    start: datetime | None = Query(None, alias="from"),
    end: datetime | None = Query(None, alias="to"),
    period: str | None = None,
    report_repo: ReportRepoPort = Depends(get_report_repo),
    event_store: EventStorePort = Depends(get_event_store),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> ReportDataResponse:
    """
    Execute a stored report.

    Window: from/to when both given, else period, else the report's own range.
    """
    result = run_report(
        RunReportInput(
            project_id=project_id,
            report_id=report_id,
            start=start,
            end=end,
            period=period,
        ),
        report_repo=report_repo,
        event_store=event_store,
        time_port=clock,
        row_cap=rules.query.report_row_cap,
    )
    if not result.success:
        raise_for_errors(result.errors)
    return ReportDataResponse(
        report=ReportSummary.model_validate(result.report),
        total_events=result.total_events,
        rows=result.rows,
    )
