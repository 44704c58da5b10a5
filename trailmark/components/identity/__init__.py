"""
Identity component - Client IP, anonymization, geography and internal traffic.
"""

from ._ip import (
    DEFAULT_HASH_SALT,
    anonymize_ip,
    extract_client_ip,
    hash_ip,
    ip_matches_cidr,
    is_foreign_hostname,
    is_private_ip,
    matches_ip_rule,
)
from .component import is_internal_traffic, lookup_geo, resolve_identity, should_lookup_geo
from .models import (
    DEFAULT_CONFIG,
    EMPTY_GEO,
    GeoResult,
    IdentityConfig,
    IdentityInput,
    ResolvedIdentity,
)
from .ports import GeoLookupPort

__all__ = [
    # Entry points
    "resolve_identity",
    "is_internal_traffic",
    "lookup_geo",
    "should_lookup_geo",
    # IP helpers
    "DEFAULT_HASH_SALT",
    "anonymize_ip",
    "extract_client_ip",
    "hash_ip",
    "ip_matches_cidr",
    "is_foreign_hostname",
    "is_private_ip",
    "matches_ip_rule",
    # Models
    "DEFAULT_CONFIG",
    "EMPTY_GEO",
    "GeoResult",
    "IdentityConfig",
    "IdentityInput",
    "ResolvedIdentity",
    # Ports
    "GeoLookupPort",
]
