"""
Funnels component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from trailmark.components.reports import DateRange
from trailmark.core.entities import Funnel

# --- Validation Error ---


@dataclass(frozen=True)
class FunnelValidationError:
    """Funnel validation error."""

    code: str
    message: str
    field_name: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class FunnelAnalysisInput:
    project_id: str
    funnel_id: str
    start: datetime | None = None
    end: datetime | None = None


# --- Output Models ---


@dataclass(frozen=True)
class StepResult:
    """Sessions reaching one step, and the loss from the previous step."""

    name: str
    type: str
    value: str
    users: int
    drop_off: int
    drop_off_rate: float


@dataclass(frozen=True)
class FunnelResult:
    steps: list[StepResult]
    overall_conversion: float
    total_sessions: int


@dataclass(frozen=True)
class FunnelAnalysisOutput:
    funnel: Funnel | None
    date_range: DateRange | None
    result: FunnelResult | None
    errors: list[FunnelValidationError] = field(default_factory=list)
    success: bool = True
