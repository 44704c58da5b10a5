"""
Ingest component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from trailmark.components.attribution import DEFAULT_CONFIG as DEFAULT_ATTRIBUTION
from trailmark.components.attribution import AttributionConfig
from trailmark.components.classify import DEFAULT_CONFIG as DEFAULT_CLASSIFIER
from trailmark.components.classify import ClassifierConfig
from trailmark.components.consent import SuppressReason
from trailmark.components.identity import DEFAULT_CONFIG as DEFAULT_IDENTITY
from trailmark.components.identity import IdentityConfig
from trailmark.core.entities import Event

# --- Validation Error ---


@dataclass(frozen=True)
class IngestValidationError:
    """Ingest validation error."""

    code: str
    message: str
    field_name: str | None = None


# --- Configuration ---


@dataclass(frozen=True)
class IngestConfig:
    """Pipeline configuration, one section per stage."""

    classifier: ClassifierConfig = DEFAULT_CLASSIFIER
    attribution: AttributionConfig = DEFAULT_ATTRIBUTION
    identity: IdentityConfig = DEFAULT_IDENTITY


DEFAULT_CONFIG = IngestConfig()


# --- Input Models ---


@dataclass(frozen=True)
class BeaconInput:
    """Beacon payload fields, as posted by the tracking snippet."""

    project_id: str
    visitor_id: str | None = None
    session_id: str | None = None
    event_type: str | None = None
    page: str | None = None
    hostname: str | None = None
    referrer: str | None = None
    user_agent: str | None = None
    dnt: Any = None
    consent_given: Any = None
    device: str | None = None
    browser: str | None = None
    os: str | None = None
    country: str | None = None
    metadata: dict[str, Any] | None = None


@dataclass(frozen=True)
class RequestContext:
    """Transport facts of the beacon request."""

    forwarded_for: str | None = None
    real_ip: str | None = None
    peer: str | None = None
    user_agent: str | None = None
    dnt: str | None = None


# --- Output Models ---


@dataclass(frozen=True)
class IngestOutput:
    """
    Result of one beacon.

    recorded=False with no errors means the consent gate suppressed it.
    """

    event: Event | None
    recorded: bool
    reason: SuppressReason | None = None
    message: str | None = None
    errors: list[IngestValidationError] = field(default_factory=list)
    success: bool = True
