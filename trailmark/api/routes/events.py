"""Filtered raw event listing."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from trailmark.api.deps import get_event_store, get_rules
from trailmark.api.schemas import EventResponse
from trailmark.core.ports import EventFilters, EventStorePort
from trailmark.rules.models import Rules

router = APIRouter()


@router.get("/{project_id}/events/filtered", response_model=list[EventResponse])
def filtered_events(
    project_id: str,
    start: datetime | None = Query(None, alias="from"),
    end: datetime | None = Query(None, alias="to"),
    event_type: str | None = Query(None, alias="eventType"),
    device: str | None = None,
    browser: str | None = None,
    os: str | None = None,
    country: str | None = None,
    referrer: str | None = None,
    is_bot: bool | None = Query(None, alias="isBot"),
    is_internal: bool | None = Query(None, alias="isInternal"),
    is_server: bool | None = Query(None, alias="isServer"),
    traffic_source: str | None = Query(None, alias="trafficSource"),
    page: str | None = None,
    visitor_id: str | None = Query(None, alias="visitorId"),
    limit: int | None = Query(None, ge=1),
    event_store: EventStorePort = Depends(get_event_store),
    rules: Rules = Depends(get_rules),
) -> list[EventResponse]:
    """
    Events matching every given filter, newest first.

    limit defaults to the configured page size and is capped at the maximum.
    """
    filters = EventFilters(
        start=start,
        end=end,
        event_type=event_type,
        device=device,
        browser=browser,
        os=os,
        country=country,
        referrer=referrer,
        is_bot=is_bot,
        is_internal=is_internal,
        is_server=is_server,
        traffic_source=traffic_source,
        page=page,
        visitor_id=visitor_id,
    )
    capped = min(limit or rules.query.filtered_default_limit, rules.query.filtered_max_limit)
    events = event_store.filtered_query(project_id, filters, capped)
    return [EventResponse.model_validate(e) for e in events]
