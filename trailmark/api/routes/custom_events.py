"""Custom event definitions, their matching events and conversion analysis."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from trailmark.adapters.clock import SystemClock
from trailmark.api.deps import (
    get_clock,
    get_custom_event_repo,
    get_custom_event_service,
    get_event_store,
    get_rules,
)
from trailmark.api.errors import raise_for_errors
from trailmark.api.schemas import (
    ConversionAnalysisResponse,
    CustomEventCreateRequest,
    CustomEventResponse,
    CustomEventUpdateRequest,
    DateRangeModel,
    EventResponse,
    MatchesResponse,
)
from trailmark.components.definitions import (
    DefinitionService,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_update,
)
from trailmark.components.matcher import (
    DefinitionWindowInput,
    run_conversion_analysis,
    run_matches,
)
from trailmark.core.entities import CustomEventDefinition
from trailmark.core.ports import CustomEventRepoPort, EventStorePort
from trailmark.rules.models import Rules

router = APIRouter()


@router.get("/{project_id}/custom-events", response_model=list[CustomEventResponse])
def list_custom_events(
    project_id: str,
    service: DefinitionService[CustomEventDefinition] = Depends(get_custom_event_service),
) -> list[CustomEventResponse]:
    result = run_list(project_id, service)
    return [CustomEventResponse.model_validate(d) for d in result.items]


@router.post(
    "/{project_id}/custom-events",
    response_model=CustomEventResponse,
    status_code=201,
)
def create_custom_event(
    project_id: str,
    data: CustomEventCreateRequest,
    service: DefinitionService[CustomEventDefinition] = Depends(get_custom_event_service),
) -> CustomEventResponse:
    """Create a custom event definition; unknown rule operators are rejected."""
    definition = CustomEventDefinition(project_id=project_id, **data.model_dump())
    result = run_create(definition, service)
    if not result.success:
        raise_for_errors(result.errors)
    return CustomEventResponse.model_validate(result.item)


@router.get("/{project_id}/custom-events/{definition_id}", response_model=CustomEventResponse)
def get_custom_event(
    project_id: str,
    definition_id: str,
    service: DefinitionService[CustomEventDefinition] = Depends(get_custom_event_service),
) -> CustomEventResponse:
    result = run_get(project_id, definition_id, service)
    if not result.success:
        raise_for_errors(result.errors)
    return CustomEventResponse.model_validate(result.item)


@router.patch(
    "/{project_id}/custom-events/{definition_id}",
    response_model=CustomEventResponse,
)
def update_custom_event(
    project_id: str,
    definition_id: str,
    data: CustomEventUpdateRequest,
    service: DefinitionService[CustomEventDefinition] = Depends(get_custom_event_service),
) -> CustomEventResponse:
    updates = data.model_dump(exclude_unset=True)
    result = run_update(project_id, definition_id, updates, service)
    if not result.success:
        raise_for_errors(result.errors)
    return CustomEventResponse.model_validate(result.item)


@router.delete("/{project_id}/custom-events/{definition_id}", status_code=204)
def delete_custom_event(
    project_id: str,
    definition_id: str,
    service: DefinitionService[CustomEventDefinition] = Depends(get_custom_event_service),
) -> None:
    result = run_delete(project_id, definition_id, service)
    if not result.success:
        raise_for_errors(result.errors)


@router.get(
    "/{project_id}/custom-events/{definition_id}/matches",
    response_model=MatchesResponse,
)
def custom_event_matches(
    project_id: str,
    definition_id: str,
    start: datetime | None = Query(None, alias="from"),
    end: datetime | None = Query(None, alias="to"),
    period: str | None = None,
    definition_repo: CustomEventRepoPort = Depends(get_custom_event_repo),
    event_store: EventStorePort = Depends(get_event_store),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> MatchesResponse:
    """Events matching the definition, newest first."""
    result = run_matches(
        DefinitionWindowInput(
            project_id=project_id,
            definition_id=definition_id,
            start=start,
            end=end,
            period=period,
        ),
        definition_repo=definition_repo,
        event_store=event_store,
        time_port=clock,
        match_cap=rules.query.match_cap,
    )
    if not result.success:
        raise_for_errors(result.errors)
    return MatchesResponse(
        definition=CustomEventResponse.model_validate(result.definition),
        date_range=DateRangeModel.model_validate(result.date_range),
        total_matches=result.total_matches,
        events=[EventResponse.model_validate(e) for e in result.events],
    )


@router.get(
    "/{project_id}/custom-events/{definition_id}/conversion-analysis",
    response_model=ConversionAnalysisResponse,
)
def custom_event_conversion(
    project_id: str,
    definition_id: str,
    start: datetime | None = Query(None, alias="from"),
    end: datetime | None = Query(None, alias="to"),
    period: str | None = None,
    definition_repo: CustomEventRepoPort = Depends(get_custom_event_repo),
    event_store: EventStorePort = Depends(get_event_store),
    clock: SystemClock = Depends(get_clock),
) -> ConversionAnalysisResponse:
    """Conversion rate by landing page, traffic source and day."""
    result = run_conversion_analysis(
        DefinitionWindowInput(
            project_id=project_id,
            definition_id=definition_id,
            start=start,
            end=end,
            period=period,
        ),
        definition_repo=definition_repo,
        event_store=event_store,
        time_port=clock,
    )
    analysis = result.analysis
    if not result.success or analysis is None:
        raise_for_errors(result.errors)
    return ConversionAnalysisResponse.model_validate(
        {
            "definition": CustomEventResponse.model_validate(result.definition),
            "date_range": DateRangeModel.model_validate(result.date_range),
            "total_sessions": analysis.total_sessions,
            "total_conversions": analysis.total_conversions,
            "overall_conversion_rate": analysis.overall_conversion_rate,
            "page_analysis": analysis.page_analysis,
            "source_analysis": analysis.source_analysis,
            "daily_trend": analysis.daily_trend,
        }
    )
