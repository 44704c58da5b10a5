"""Funnel definitions and funnel analysis."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from trailmark.adapters.clock import SystemClock
from trailmark.api.deps import get_clock, get_event_store, get_funnel_repo, get_funnel_service
from trailmark.api.errors import raise_for_errors
from trailmark.api.schemas import (
    DateRangeModel,
    FunnelAnalysisResponse,
    FunnelCreateRequest,
    FunnelResponse,
    FunnelUpdateRequest,
    StepResultModel,
)
from trailmark.components.definitions import (
    DefinitionService,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_update,
)
from trailmark.components.funnels import FunnelAnalysisInput, run_funnel_analysis
from trailmark.core.entities import Funnel
from trailmark.core.ports import EventStorePort, FunnelRepoPort

router = APIRouter()


@router.get("/{project_id}/funnels", response_model=list[FunnelResponse])
def list_funnels(
    project_id: str,
    service: DefinitionService[Funnel] = Depends(get_funnel_service),
) -> list[FunnelResponse]:
    result = run_list(project_id, service)
    return [FunnelResponse.model_validate(f) for f in result.items]


@router.post("/{project_id}/funnels", response_model=FunnelResponse, status_code=201)
def create_funnel(
    project_id: str,
    data: FunnelCreateRequest,
    service: DefinitionService[Funnel] = Depends(get_funnel_service),
) -> FunnelResponse:
    """Create a funnel; at least one step is required."""
    result = run_create(Funnel(project_id=project_id, **data.model_dump()), service)
    if not result.success:
        raise_for_errors(result.errors)
    return FunnelResponse.model_validate(result.item)


@router.get("/{project_id}/funnels/{funnel_id}", response_model=FunnelResponse)
def get_funnel(
    project_id: str,
    funnel_id: str,
    service: DefinitionService[Funnel] = Depends(get_funnel_service),
) -> FunnelResponse:
    result = run_get(project_id, funnel_id, service)
    if not result.success:
        raise_for_errors(result.errors)
    return FunnelResponse.model_validate(result.item)


@router.patch("/{project_id}/funnels/{funnel_id}", response_model=FunnelResponse)
def update_funnel(
    project_id: str,
    funnel_id: str,
    data: FunnelUpdateRequest,
    service: DefinitionService[Funnel] = Depends(get_funnel_service),
) -> FunnelResponse:
    result = run_update(project_id, funnel_id, data.model_dump(exclude_unset=True), service)
    if not result.success:
        raise_for_errors(result.errors)
    return FunnelResponse.model_validate(result.item)


@router.delete("/{project_id}/funnels/{funnel_id}", status_code=204)
def delete_funnel(
    project_id: str,
    funnel_id: str,
    service: DefinitionService[Funnel] = Depends(get_funnel_service),
) -> None:
    result = run_delete(project_id, funnel_id, service)
    if not result.success:
        raise_for_errors(result.errors)


@router.get(
    "/{project_id}/funnels/{funnel_id}/analysis",
    response_model=FunnelAnalysisResponse,
)
def funnel_analysis(
    project_id: str,
    funnel_id: str,
    start: datetime | None = Query(None, alias="from"),
    end: datetime | None = Query(None, alias="to"),
    funnel_repo: FunnelRepoPort = Depends(get_funnel_repo),
    event_store: EventStorePort = Depends(get_event_store),
    clock: SystemClock = Depends(get_clock),
) -> FunnelAnalysisResponse:
    """Per-step session counts and drop-off; from defaults to 30 days ago, to to now."""
    result = run_funnel_analysis(
        FunnelAnalysisInput(project_id=project_id, funnel_id=funnel_id, start=start, end=end),
        funnel_repo=funnel_repo,
        event_store=event_store,
        time_port=clock,
    )
    analysis = result.result
    if not result.success or analysis is None:
        raise_for_errors(result.errors)
    return FunnelAnalysisResponse(
        funnel=FunnelResponse.model_validate(result.funnel),
        date_range=DateRangeModel.model_validate(result.date_range),
        total_sessions=analysis.total_sessions,
        steps=[StepResultModel.model_validate(s) for s in analysis.steps],
        overall_conversion=analysis.overall_conversion,
    )
