"""
Insights component - Breakdown views over stored events.
"""

from ._breakdowns import (
    Tally,
    acquisition,
    average_session_duration,
    engagement,
    geography,
    journeys,
    medium_name,
    platform_name,
    realtime,
    source_name,
    tech,
    traffic_sources,
    visitors,
)
from .component import run_breakdown
from .models import (
    DEFAULT_CONFIG,
    RECENT_VIEWS,
    BreakdownInput,
    BreakdownOutput,
    BreakdownView,
    InsightsConfig,
)

__all__ = [
    # Entry points
    "run_breakdown",
    # Views
    "Tally",
    "acquisition",
    "average_session_duration",
    "engagement",
    "geography",
    "journeys",
    "medium_name",
    "platform_name",
    "realtime",
    "source_name",
    "tech",
    "traffic_sources",
    "visitors",
    # Models
    "DEFAULT_CONFIG",
    "RECENT_VIEWS",
    "BreakdownInput",
    "BreakdownOutput",
    "BreakdownView",
    "InsightsConfig",
]
