"""
Public collection routes: beacon ingestion, consent records and the consent
configuration read by the tracking snippet.

No authentication; CORS is open for these paths.
"""

from typing import Any, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, ValidationError

from trailmark.adapters.clock import SystemClock
from trailmark.api.deps import (
    get_clock,
    get_consent_record_repo,
    get_consent_settings_repo,
    get_event_store,
    get_geo,
    get_ingest_config,
    get_ip_rule_repo,
    get_project_repo,
    get_rules,
)
from trailmark.api.errors import raise_for_errors
from trailmark.api.schemas import (
    BeaconRequest,
    ConsentConfigResponse,
    ConsentRecordResponse,
    ConsentRequest,
    EventResponse,
    MessageResponse,
)
from trailmark.components.identity import GeoLookupPort, extract_client_ip
from trailmark.components.ingest import BeaconInput, IngestConfig, RequestContext, run_ingest
from trailmark.components.privacy import (
    RecordConsentInput,
    get_effective_settings,
    run_record_consent,
)
from trailmark.core.ports import (
    ConsentRecordRepoPort,
    ConsentSettingsRepoPort,
    EventStorePort,
    InternalIpRuleRepoPort,
    ProjectRepoPort,
)
from trailmark.rules.models import Rules

router = APIRouter()

M = TypeVar("M", bound=BaseModel)


# --- Helpers ---


async def _json_body(request: Request) -> dict[str, Any]:
    """Raw JSON object body; 400 when malformed or not an object."""
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body") from None
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="JSON body must be an object")
    return body


def _parse(model: type[M], body: dict[str, Any]) -> M:
    try:
        return model.model_validate(body)
    except ValidationError as e:
        detail = e.errors(include_url=False, include_context=False)
        raise HTTPException(status_code=400, detail=detail) from None


def _request_context(request: Request) -> RequestContext:
    return RequestContext(
        forwarded_for=request.headers.get("x-forwarded-for"),
        real_ip=request.headers.get("x-real-ip"),
        peer=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        dnt=request.headers.get("dnt"),
    )


# --- Routes ---


@router.options("/events", status_code=204)
def events_preflight() -> Response:
    """Bare preflight for beacons sent without an Origin header."""
    return Response(status_code=204)


@router.post(
    "/events",
    status_code=201,
    response_model=EventResponse | MessageResponse,
    responses={200: {"model": MessageResponse}, 400: {"description": "Malformed body"}},
)
def collect_event(
    request: Request,
    response: Response,
    raw: dict[str, Any] = Depends(_json_body),
    event_store: EventStorePort = Depends(get_event_store),
    settings_repo: ConsentSettingsRepoPort = Depends(get_consent_settings_repo),
    ip_rule_repo: InternalIpRuleRepoPort = Depends(get_ip_rule_repo),
    project_repo: ProjectRepoPort = Depends(get_project_repo),
    geo: GeoLookupPort = Depends(get_geo),
    clock: SystemClock = Depends(get_clock),
    config: IngestConfig = Depends(get_ingest_config),
) -> EventResponse | MessageResponse:
    """
    Record one tracking beacon.

    201 with the stored event, or 200 with a message when the consent gate
    suppressed it.
    """
    body = _parse(BeaconRequest, raw)

    beacon = BeaconInput(
        project_id=body.project_id or "",
        visitor_id=body.visitor_id,
        session_id=body.session_id,
        event_type=body.event_type,
        page=body.page,
        hostname=body.hostname,
        referrer=body.referrer,
        user_agent=body.user_agent,
        dnt=body.dnt,
        consent_given=body.consent_given,
        device=body.device,
        browser=body.browser,
        os=body.os,
        country=body.country,
        metadata=body.metadata,
    )
    result = run_ingest(
        beacon,
        _request_context(request),
        event_store=event_store,
        settings_repo=settings_repo,
        ip_rule_repo=ip_rule_repo,
        project_repo=project_repo,
        geo=geo,
        time_port=clock,
        config=config,
    )

    if not result.success:
        raise_for_errors(result.errors)

    if not result.recorded:
        response.status_code = 200
        return MessageResponse(message=result.message or "Event not recorded")

    return EventResponse.model_validate(result.event)


@router.post("/consent", status_code=201, response_model=ConsentRecordResponse)
def record_consent(
    request: Request,
    raw: dict[str, Any] = Depends(_json_body),
    record_repo: ConsentRecordRepoPort = Depends(get_consent_record_repo),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> ConsentRecordResponse:
    """Store a visitor's consent decision (IP kept only as a salted hash)."""
    body = _parse(ConsentRequest, raw)

    ctx = _request_context(request)
    result = run_record_consent(
        RecordConsentInput(
            project_id=body.project_id or "",
            client_ip=extract_client_ip(ctx.forwarded_for, ctx.real_ip, ctx.peer),
            visitor_id=body.visitor_id,
            consent_given=body.consent_given,
            user_agent=ctx.user_agent,
            consent_version=body.consent_version,
            categories_accepted=body.categories_accepted,
        ),
        record_repo=record_repo,
        salt=rules.privacy.ip_hash_salt,
        time_port=clock,
    )
    if not result.success:
        raise_for_errors(result.errors)
    return ConsentRecordResponse.model_validate(result.record)


@router.get("/consent-config/{project_id}", response_model=ConsentConfigResponse)
def consent_config(
    project_id: str,
    settings_repo: ConsentSettingsRepoPort = Depends(get_consent_settings_repo),
) -> ConsentConfigResponse:
    """Public consent configuration for the tracking snippet."""
    return ConsentConfigResponse.model_validate(
        get_effective_settings(project_id, settings_repo)
    )
