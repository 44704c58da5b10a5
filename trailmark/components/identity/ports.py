"""
Identity component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from .models import GeoResult


class GeoLookupPort(Protocol):
    """IP geolocation lookup."""

    def lookup(self, ip: str) -> GeoResult:
        """
        Resolve country/city/region for an address.

        Must not raise; failures return an all-None GeoResult.
        """
        ...
