"""
Matcher component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from trailmark.components.reports import DateRange
from trailmark.core.entities import CustomEventDefinition, Event

from ._conversion import ConversionAnalysis

# --- Validation Error ---


@dataclass(frozen=True)
class MatcherValidationError:
    """Matcher validation error."""

    code: str
    message: str
    field_name: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class DefinitionWindowInput:
    """A stored definition evaluated over a window."""

    project_id: str
    definition_id: str
    start: datetime | None = None
    end: datetime | None = None
    period: str | None = None


# --- Output Models ---


@dataclass(frozen=True)
class MatchesOutput:
    definition: CustomEventDefinition | None
    date_range: DateRange | None
    total_matches: int = 0
    events: list[Event] = field(default_factory=list)
    errors: list[MatcherValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ConversionOutput:
    definition: CustomEventDefinition | None
    date_range: DateRange | None
    analysis: ConversionAnalysis | None = None
    errors: list[MatcherValidationError] = field(default_factory=list)
    success: bool = True
