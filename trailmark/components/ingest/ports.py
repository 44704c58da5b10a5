"""
Ingest component port definitions.

The pipeline reads project facts through these and appends to the event store.
"""

from __future__ import annotations

from trailmark.components.identity import GeoLookupPort
from trailmark.core.ports import (
    ConsentSettingsRepoPort,
    EventStorePort,
    InternalIpRuleRepoPort,
    ProjectRepoPort,
    TimePort,
)

__all__ = [
    "ConsentSettingsRepoPort",
    "EventStorePort",
    "GeoLookupPort",
    "InternalIpRuleRepoPort",
    "ProjectRepoPort",
    "TimePort",
]
