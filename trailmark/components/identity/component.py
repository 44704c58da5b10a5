"""
Identity & geo resolver.

Order of operations for one beacon:
1. geo lookup on the raw client IP (skipped for loopback / private ranges)
2. anonymize the IP when the consent decision asks for it
3. internal classification: foreign hostname, private raw IP, or a project
   internal-IP rule matching the stored IP

Invariants:
- Geo failure never fails ingestion; fields fall back to None
- Beacon-supplied country is used when the lookup yields none
- The raw IP never reaches storage when anonymization is on
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from trailmark.core.entities import InternalIpRule

from ._ip import anonymize_ip, is_foreign_hostname, is_private_ip, matches_ip_rule
from .models import (
    DEFAULT_CONFIG,
    EMPTY_GEO,
    GeoResult,
    IdentityConfig,
    IdentityInput,
    ResolvedIdentity,
)
from .ports import GeoLookupPort

logger = logging.getLogger(__name__)


def should_lookup_geo(ip: str, config: IdentityConfig = DEFAULT_CONFIG) -> bool:
    if not ip:
        return False
    return not ip.startswith(config.geo_skip_prefixes)


def lookup_geo(
    ip: str,
    geo: GeoLookupPort | None,
    config: IdentityConfig = DEFAULT_CONFIG,
) -> GeoResult:
    if geo is None or not should_lookup_geo(ip, config):
        return EMPTY_GEO
    try:
        return geo.lookup(ip)
    except Exception as e:
        # Adapters are expected to swallow their own failures; this is the backstop.
        logger.warning("Geo lookup raised: %s", e)
        return EMPTY_GEO


def is_internal_traffic(
    raw_ip: str,
    stored_ip: str | None,
    hostname: str | None,
    project_domain: str | None,
    rules: Iterable[InternalIpRule],
) -> bool:
    if is_foreign_hostname(hostname, project_domain):
        return True
    if is_private_ip(raw_ip):
        return True
    if stored_ip:
        return any(matches_ip_rule(stored_ip, rule) for rule in rules)
    return False


def resolve_identity(
    inp: IdentityInput,
    *,
    project_domain: str | None,
    ip_rules: Iterable[InternalIpRule],
    geo: GeoLookupPort | None = None,
    config: IdentityConfig = DEFAULT_CONFIG,
) -> ResolvedIdentity:
    """Resolve stored IP, geography and internal flag for one beacon."""
    geo_result = lookup_geo(inp.client_ip, geo, config)

    stored_ip: str | None = inp.client_ip or None
    if stored_ip and inp.anonymize:
        stored_ip = anonymize_ip(stored_ip)

    return ResolvedIdentity(
        ip=stored_ip,
        country=geo_result.country or inp.beacon_country or None,
        city=geo_result.city,
        region=geo_result.region,
        is_internal=is_internal_traffic(
            inp.client_ip, stored_ip, inp.hostname, project_domain, ip_rules
        ),
    )
