"""
Reports component - Ad-hoc dimensional query engine.

"metric X grouped by dimension Y over date range Z, optionally filtered".

Invariants:
- Stateless: events are fetched for the window and aggregated on demand
- Unknown metrics are ignored; unknown dimensions fall back to date
- Every requested known metric is present in every row
- Empty filtered set yields rows=[] and total_events=0
"""

from __future__ import annotations

from datetime import UTC, datetime

from trailmark.core.entities import CustomReport
from trailmark.core.ports import EventStorePort, ReportRepoPort, TimePort

from ._aggregate import (
    DEFAULT_ROW_CAP,
    aggregate,
    apply_report_filters,
    parse_dimension,
    parse_metrics,
)
from ._daterange import DateRange, resolve_date_range
from .models import ReportOutput, ReportValidationError, RunReportInput


def execute_report(
    report: CustomReport,
    window: DateRange,
    event_store: EventStorePort,
    row_cap: int = DEFAULT_ROW_CAP,
) -> tuple[list[dict], int]:
    """Run a report definition over a window. Returns (rows, total_events)."""
    events = event_store.range_query(report.project_id, window.start, window.end)
    filtered = apply_report_filters(events, report.filters)
    rows = aggregate(
        filtered,
        parse_dimension(report.dimensions),
        parse_metrics(report.metrics),
        row_cap=row_cap,
    )
    return rows, len(filtered)


def run_report(
    inp: RunReportInput,
    *,
    report_repo: ReportRepoPort,
    event_store: EventStorePort,
    time_port: TimePort | None = None,
    row_cap: int = DEFAULT_ROW_CAP,
) -> ReportOutput:
    """
    Execute a stored report.

    Window: explicit start/end, else the requested period, else the report's
    own date-range token.
    """
    report = report_repo.get(inp.project_id, inp.report_id)
    if report is None:
        return ReportOutput(
            report=None,
            date_range=None,
            errors=[ReportValidationError(code="not_found", message="Report not found")],
            success=False,
        )

    now = time_port.now_utc() if time_port else datetime.now(UTC)
    window = resolve_date_range(
        now,
        start=inp.start,
        end=inp.end,
        period=inp.period,
        fallback_period=report.date_range,
    )
    rows, total = execute_report(report, window, event_store, row_cap=row_cap)
    return ReportOutput(report=report, date_range=window, rows=rows, total_events=total)
