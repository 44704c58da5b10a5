"""
Identity & geo resolver models.
"""

from __future__ import annotations

from dataclasses import dataclass

# --- Configuration ---


@dataclass(frozen=True)
class IdentityConfig:
    """Resolver configuration."""

    # Addresses never sent to the geo lookup (prefix match)
    geo_skip_prefixes: tuple[str, ...] = ("127.0.0.1", "::1", "192.168.", "10.")


DEFAULT_CONFIG = IdentityConfig()


# --- Geo ---


@dataclass(frozen=True)
class GeoResult:
    country: str | None = None
    city: str | None = None
    region: str | None = None


EMPTY_GEO = GeoResult()


# --- Input / Output ---


@dataclass(frozen=True)
class IdentityInput:
    """Request facts the resolver needs."""

    client_ip: str
    anonymize: bool = True
    hostname: str | None = None
    beacon_country: str | None = None


@dataclass(frozen=True)
class ResolvedIdentity:
    """Stored IP (possibly anonymized), geography and the internal flag."""

    ip: str | None
    country: str | None
    city: str | None
    region: str | None
    is_internal: bool
