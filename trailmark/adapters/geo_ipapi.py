"""
ip-api.com geo lookup adapter.

Implements GeoLookupPort with a blocking httpx GET and a short timeout.
Never raises: transport errors, non-200 answers and malformed bodies all
produce an empty GeoResult.
"""

from __future__ import annotations

import logging

import httpx

from trailmark.components.identity import EMPTY_GEO, GeoResult

logger = logging.getLogger(__name__)

DEFAULT_URL_TEMPLATE = "http://ip-api.com/json/{ip}?fields=country,city,regionName"
DEFAULT_TIMEOUT_SECONDS = 2.0


class IpApiGeoLookup:
    """GeoLookupPort backed by ip-api.com."""

    def __init__(
        self,
        url_template: str = DEFAULT_URL_TEMPLATE,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.Client | None = None,
    ) -> None:
        self._url_template = url_template
        self._timeout = timeout
        self._client = client

    def lookup(self, ip: str) -> GeoResult:
        url = self._url_template.format(ip=ip)
        try:
            if self._client is not None:
                response = self._client.get(url, timeout=self._timeout)
            else:
                response = httpx.get(url, timeout=self._timeout)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Geo lookup failed: %s", e)
            return EMPTY_GEO

        if not isinstance(data, dict):
            return EMPTY_GEO
        return GeoResult(
            country=data.get("country") or None,
            city=data.get("city") or None,
            region=data.get("regionName") or None,
        )


class NullGeoLookup:
    """GeoLookupPort that knows nothing (geo disabled)."""

    def lookup(self, ip: str) -> GeoResult:
        return EMPTY_GEO
