# trailmark: ports (protocol interfaces)
# Abstract interfaces for adapters; no implementations here

from trailmark.core.ports.events import (
    DEFAULT_FILTERED_LIMIT,
    MAX_FILTERED_LIMIT,
    EventFilters,
    EventStorePort,
    matches_filters,
)
from trailmark.core.ports.repos import (
    ConsentRecordRepoPort,
    ConsentSettingsRepoPort,
    CustomEventRepoPort,
    FunnelRepoPort,
    InternalIpRuleRepoPort,
    ProjectRepoPort,
    ReportRepoPort,
)
from trailmark.core.ports.time import TimePort

__all__ = [
    # Events
    "DEFAULT_FILTERED_LIMIT",
    "MAX_FILTERED_LIMIT",
    "EventFilters",
    "EventStorePort",
    "matches_filters",
    # Repositories
    "ConsentRecordRepoPort",
    "ConsentSettingsRepoPort",
    "CustomEventRepoPort",
    "FunnelRepoPort",
    "InternalIpRuleRepoPort",
    "ProjectRepoPort",
    "ReportRepoPort",
    # Time
    "TimePort",
]
