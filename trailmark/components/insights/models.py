"""
Insights component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from trailmark.components.reports import DateRange

# --- Enums ---


class BreakdownView(str, Enum):
    ACQUISITION = "acquisition"
    ENGAGEMENT = "engagement"
    TRAFFIC_SOURCES = "traffic-sources"
    GEOGRAPHY = "geography"
    TECH = "tech"
    REALTIME = "realtime"
    JOURNEYS = "journeys"
    VISITORS = "visitors"


# Views computed over the latest N events rather than a date window
RECENT_VIEWS = frozenset({BreakdownView.JOURNEYS, BreakdownView.VISITORS})


# --- Configuration ---


@dataclass(frozen=True)
class InsightsConfig:
    journeys_limit: int = 1000
    visitors_limit: int = 5000
    realtime_minutes: int = 30


DEFAULT_CONFIG = InsightsConfig()


# --- Input / Output ---


@dataclass(frozen=True)
class BreakdownInput:
    project_id: str
    view: BreakdownView
    start: datetime | None = None
    end: datetime | None = None
    period: str | None = None


@dataclass(frozen=True)
class BreakdownOutput:
    view: BreakdownView
    period: str | None
    date_range: DateRange | None
    data: Any = None
    errors: list[str] = field(default_factory=list)
    success: bool = True
