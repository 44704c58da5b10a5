"""
Funnels component - Sequential per-session step matching.

Each session is scanned in timestamp order with a single cursor starting at
step 0. An event is tested only against the step under the cursor; a match
advances the cursor. There is no backtracking: an event that would satisfy a
later step is ignored until the cursor gets there. Scanning stops once every
step has been reached.

Step predicates:
- pageview: a pageview event whose page contains the value
- event: event type equals the value
- click: a click event whose metadata text or target contains the value
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from trailmark.components.reports import DateRange
from trailmark.core.entities import CLICK, PAGEVIEW, Event, Funnel, FunnelStep, ensure_utc
from trailmark.core.ports import EventStorePort, FunnelRepoPort, TimePort
from trailmark.core.sessions import group_by_session

from .models import (
    FunnelAnalysisInput,
    FunnelAnalysisOutput,
    FunnelResult,
    FunnelValidationError,
    StepResult,
)

DEFAULT_WINDOW_DAYS = 30


def round_one_decimal(value: float) -> float:
    return int(value * 10 + 0.5) / 10


def step_matches(event: Event, step: FunnelStep) -> bool:
    if step.type == "pageview":
        return event.event_type == PAGEVIEW and step.value in (event.page or "")
    if step.type == "event":
        return event.event_type == step.value
    if step.type == "click":
        if event.event_type != CLICK:
            return False
        meta = event.metadata if isinstance(event.metadata, dict) else {}
        text = str(meta.get("text") or "")
        target = str(meta.get("target") or "")
        return step.value in text or step.value in target
    return False


def steps_reached(session_events: list[Event], steps: list[FunnelStep]) -> int:
    """Number of steps a time-ordered session completes."""
    cursor = 0
    for event in session_events:
        if cursor >= len(steps):
            break
        if step_matches(event, steps[cursor]):
            cursor += 1
    return cursor


def analyze_funnel(steps: list[FunnelStep], events: list[Event]) -> FunnelResult:
    """Users per step, drop-off and overall conversion over an event set."""
    sessions = group_by_session(events)

    users = [0] * len(steps)
    for session_events in sessions.values():
        reached = steps_reached(session_events, steps)
        for i in range(reached):
            users[i] += 1

    results: list[StepResult] = []
    for i, step in enumerate(steps):
        if i == 0:
            drop_off, drop_off_rate = 0, 0.0
        else:
            drop_off = users[i - 1] - users[i]
            drop_off_rate = (
                round_one_decimal(drop_off / users[i - 1] * 100) if users[i - 1] > 0 else 0.0
            )
        results.append(
            StepResult(
                name=step.name,
                type=step.type,
                value=step.value,
                users=users[i],
                drop_off=drop_off,
                drop_off_rate=drop_off_rate,
            )
        )

    overall = 0.0
    if len(users) > 1 and users[0] > 0:
        overall = round_one_decimal(users[-1] / users[0] * 100)

    return FunnelResult(steps=results, overall_conversion=overall, total_sessions=len(sessions))


def funnel_window(
    now: datetime,
    start: datetime | None,
    end: datetime | None,
) -> DateRange:
    """Each missing bound defaults on its own: start to 30 days ago, end to now."""
    return DateRange(
        ensure_utc(start) if start is not None else now - timedelta(days=DEFAULT_WINDOW_DAYS),
        ensure_utc(end) if end is not None else now,
    )


def run_funnel_analysis(
    inp: FunnelAnalysisInput,
    *,
    funnel_repo: FunnelRepoPort,
    event_store: EventStorePort,
    time_port: TimePort | None = None,
) -> FunnelAnalysisOutput:
    """Analyze a stored funnel over a window."""
    funnel: Funnel | None = funnel_repo.get(inp.project_id, inp.funnel_id)
    if funnel is None:
        return FunnelAnalysisOutput(
            funnel=None,
            date_range=None,
            result=None,
            errors=[FunnelValidationError(code="not_found", message="Funnel not found")],
            success=False,
        )

    now = time_port.now_utc() if time_port else datetime.now(UTC)
    window = funnel_window(now, inp.start, inp.end)
    events = event_store.range_query(inp.project_id, window.start, window.end)
    return FunnelAnalysisOutput(
        funnel=funnel,
        date_range=window,
        result=analyze_funnel(funnel.steps, events),
    )
