"""
Reports component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from trailmark.core.entities import CustomReport

from ._daterange import DateRange

# --- Validation Error ---


@dataclass(frozen=True)
class ReportValidationError:
    """Report validation error."""

    code: str
    message: str
    field_name: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class RunReportInput:
    """Execute a stored report over a window."""

    project_id: str
    report_id: str
    start: datetime | None = None
    end: datetime | None = None
    period: str | None = None


# --- Output Models ---


@dataclass(frozen=True)
class ReportOutput:
    """Rows for one report execution."""

    report: CustomReport | None
    date_range: DateRange | None
    rows: list[dict[str, Any]] = field(default_factory=list)
    total_events: int = 0
    errors: list[ReportValidationError] = field(default_factory=list)
    success: bool = True
