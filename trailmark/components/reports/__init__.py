"""
Reports component - Date ranges, dimensional aggregation and stored reports.
"""

from ._aggregate import (
    DEFAULT_ROW_CAP,
    TIME_DIMENSIONS,
    BucketAccumulator,
    Dimension,
    Metric,
    aggregate,
    apply_report_filters,
    bucket_label,
    parse_dimension,
    parse_metrics,
    round_half_up,
)
from ._daterange import (
    DEFAULT_PERIOD,
    EPOCH,
    PERIODS,
    DateRange,
    period_range,
    resolve_date_range,
)
from .component import execute_report, run_report
from .models import ReportOutput, ReportValidationError, RunReportInput

__all__ = [
    # Entry points
    "run_report",
    "execute_report",
    # Date ranges
    "DEFAULT_PERIOD",
    "EPOCH",
    "PERIODS",
    "DateRange",
    "period_range",
    "resolve_date_range",
    # Aggregation
    "DEFAULT_ROW_CAP",
    "TIME_DIMENSIONS",
    "BucketAccumulator",
    "Dimension",
    "Metric",
    "aggregate",
    "apply_report_filters",
    "bucket_label",
    "parse_dimension",
    "parse_metrics",
    "round_half_up",
    # Models
    "ReportOutput",
    "ReportValidationError",
    "RunReportInput",
]
