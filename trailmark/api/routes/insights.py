"""
Breakdown views: acquisition, engagement, traffic sources, geography, tech,
realtime, journeys and visitors.

One GET route per view, all sharing the same query parameters. Windowed views
honour from/to/period; realtime, journeys and visitors ignore them.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query

from trailmark.adapters.clock import SystemClock
from trailmark.api.deps import get_clock, get_event_store, get_insights_config
from trailmark.components.insights import (
    BreakdownInput,
    BreakdownView,
    InsightsConfig,
    run_breakdown,
)
from trailmark.core.ports import EventStorePort

router = APIRouter()


def _breakdown_endpoint(view: BreakdownView) -> Callable[..., Any]:
    def endpoint(
        project_id: str,
        start: datetime | None = Query(None, alias="from"),
        end: datetime | None = Query(None, alias="to"),
        period: str | None = None,
        event_store: EventStorePort = Depends(get_event_store),
        clock: SystemClock = Depends(get_clock),
        config: InsightsConfig = Depends(get_insights_config),
    ) -> Any:
        result = run_breakdown(
            BreakdownInput(
                project_id=project_id,
                view=view,
                start=start,
                end=end,
                period=period,
            ),
            event_store=event_store,
            time_port=clock,
            config=config,
        )
        return result.data

    endpoint.__name__ = f"{view.name.lower()}_breakdown"
    return endpoint


for _view in BreakdownView:
    router.add_api_route(
        f"/{{project_id}}/{_view.value}",
        _breakdown_endpoint(_view),
        methods=["GET"],
        response_model=dict[str, Any] | list[dict[str, Any]],
        summary=f"{_view.value.replace('-', ' ').capitalize()} breakdown",
    )
