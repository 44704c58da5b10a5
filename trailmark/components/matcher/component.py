"""
Matcher component - Custom event matches and conversion analysis.

Both entry points load a stored definition, resolve the window (explicit
bounds, else period, else last 30 days) and evaluate the definition's rules
over the project's events in that window.
"""

from __future__ import annotations

from datetime import UTC, datetime

from trailmark.components.reports import DateRange, resolve_date_range
from trailmark.core.entities import CustomEventDefinition
from trailmark.core.ports import CustomEventRepoPort, EventStorePort, TimePort

from ._conversion import analyze_conversions
from ._rules import matches, parse_rules
from .models import (
    ConversionOutput,
    DefinitionWindowInput,
    MatcherValidationError,
    MatchesOutput,
)

DEFAULT_MATCH_CAP = 200


def _not_found() -> list[MatcherValidationError]:
    return [MatcherValidationError(code="not_found", message="Custom event not found")]


def _load(
    inp: DefinitionWindowInput,
    definition_repo: CustomEventRepoPort,
    time_port: TimePort | None,
) -> tuple[CustomEventDefinition | None, DateRange | None]:
    definition = definition_repo.get(inp.project_id, inp.definition_id)
    if definition is None:
        return None, None
    now = time_port.now_utc() if time_port else datetime.now(UTC)
    return definition, resolve_date_range(now, start=inp.start, end=inp.end, period=inp.period)


def run_matches(
    inp: DefinitionWindowInput,
    *,
    definition_repo: CustomEventRepoPort,
    event_store: EventStorePort,
    time_port: TimePort | None = None,
    match_cap: int = DEFAULT_MATCH_CAP,
) -> MatchesOutput:
    """Events in the window matching the definition (newest first, capped)."""
    definition, window = _load(inp, definition_repo, time_port)
    if definition is None or window is None:
        return MatchesOutput(definition=None, date_range=None, errors=_not_found(), success=False)

    rules = parse_rules(definition.rules)
    events = event_store.range_query(inp.project_id, window.start, window.end)
    matched = [e for e in events if matches(e, rules)]
    return MatchesOutput(
        definition=definition,
        date_range=window,
        total_matches=len(matched),
        events=matched[:match_cap],
    )


def run_conversion_analysis(
    inp: DefinitionWindowInput,
    *,
    definition_repo: CustomEventRepoPort,
    event_store: EventStorePort,
    time_port: TimePort | None = None,
) -> ConversionOutput:
    """Session conversion breakdowns for the definition."""
    definition, window = _load(inp, definition_repo, time_port)
    if definition is None or window is None:
        return ConversionOutput(
            definition=None, date_range=None, errors=_not_found(), success=False
        )

    events = event_store.range_query(inp.project_id, window.start, window.end)
    return ConversionOutput(
        definition=definition,
        date_range=window,
        analysis=analyze_conversions(events, parse_rules(definition.rules)),
    )
