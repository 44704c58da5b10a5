"""
Ingest component - Beacon to stored event.

Pipeline: consent gate -> identity & geo -> bot/server classifier ->
traffic source -> event store.

Invariants:
- Suppressed beacons store nothing and are not errors
- Cookieless projects store visitor_id = session_id = None
- Geo and parsing failures degrade to None; the event is still recorded
- Missing consent settings behave as the defaults (opt-in, DNT respected,
  IP anonymized, identified)
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from trailmark.components.attribution import classify_traffic_source
from trailmark.components.classify import classify_user_agent, normalize_user_agent
from trailmark.components.consent import (
    ConsentSignals,
    IdentityMode,
    IpMode,
    evaluate_consent,
)
from trailmark.components.identity import (
    IdentityInput,
    extract_client_ip,
    resolve_identity,
)
from trailmark.core.entities import PAGEVIEW, Event, default_consent_settings

from .models import (
    DEFAULT_CONFIG,
    BeaconInput,
    IngestConfig,
    IngestOutput,
    IngestValidationError,
    RequestContext,
)
from .ports import (
    ConsentSettingsRepoPort,
    EventStorePort,
    GeoLookupPort,
    InternalIpRuleRepoPort,
    ProjectRepoPort,
    TimePort,
)

logger = logging.getLogger(__name__)


def _now(time_port: TimePort | None) -> datetime:
    return time_port.now_utc() if time_port else datetime.now(UTC)


def run_ingest(
    beacon: BeaconInput,
    ctx: RequestContext,
    *,
    event_store: EventStorePort,
    settings_repo: ConsentSettingsRepoPort,
    ip_rule_repo: InternalIpRuleRepoPort,
    project_repo: ProjectRepoPort,
    geo: GeoLookupPort | None = None,
    time_port: TimePort | None = None,
    config: IngestConfig = DEFAULT_CONFIG,
) -> IngestOutput:
    """
    Ingest one beacon.

    Args:
        beacon: Payload fields posted by the tracking snippet.
        ctx: Request headers and peer address.
        event_store: Event store port.
        settings_repo: Consent settings lookup.
        ip_rule_repo: Internal IP rule lookup.
        project_repo: Project lookup (for the registered domain).
        geo: Optional geo lookup; None skips geography.
        time_port: Optional clock.
        config: Classifier / attribution / identity configuration.

    Returns:
        IngestOutput with the stored event, or recorded=False with the
        suppression reason.
    """
    if not beacon.project_id:
        return IngestOutput(
            event=None,
            recorded=False,
            errors=[
                IngestValidationError(
                    code="invalid_payload",
                    message="projectId is required",
                    field_name="projectId",
                )
            ],
            success=False,
        )

    settings = settings_repo.get(beacon.project_id) or default_consent_settings(
        beacon.project_id
    )

    decision = evaluate_consent(
        ConsentSignals(
            dnt_header=ctx.dnt,
            dnt_body=beacon.dnt,
            consent_given=beacon.consent_given,
        ),
        settings,
    )
    if not decision.record:
        return IngestOutput(
            event=None,
            recorded=False,
            reason=decision.reason,
            message=decision.message,
        )

    project = project_repo.get(beacon.project_id)
    project_domain = project.domain if project else None

    identity = resolve_identity(
        IdentityInput(
            client_ip=extract_client_ip(ctx.forwarded_for, ctx.real_ip, ctx.peer),
            anonymize=decision.ip_mode == IpMode.ANONYMIZE,
            hostname=beacon.hostname,
            beacon_country=beacon.country,
        ),
        project_domain=project_domain,
        ip_rules=ip_rule_repo.list_for_project(beacon.project_id),
        geo=geo,
        config=config.identity,
    )

    flags = classify_user_agent(
        normalize_user_agent(beacon.user_agent, ctx.user_agent),
        config.classifier,
    )

    source = classify_traffic_source(
        beacon.referrer,
        beacon.page,
        project_domain,
        config.attribution,
    )

    cookieless = decision.identity_mode == IdentityMode.COOKIELESS
    event = Event(
        project_id=beacon.project_id,
        visitor_id=None if cookieless else beacon.visitor_id,
        session_id=None if cookieless else beacon.session_id,
        event_type=beacon.event_type or PAGEVIEW,
        page=beacon.page,
        referrer=beacon.referrer,
        device=beacon.device,
        browser=beacon.browser,
        os=beacon.os,
        country=identity.country,
        city=identity.city,
        region=identity.region,
        ip=identity.ip,
        is_bot=flags.is_bot,
        is_internal=identity.is_internal,
        is_server=flags.is_server,
        traffic_source=source.value,
        metadata=beacon.metadata,
        timestamp=_now(time_port),
    )
    event_store.append(event)

    logger.debug(
        "Recorded %s for project %s (bot=%s server=%s internal=%s source=%s)",
        event.event_type,
        event.project_id,
        event.is_bot,
        event.is_server,
        event.is_internal,
        event.traffic_source,
    )
    return IngestOutput(event=event, recorded=True)
