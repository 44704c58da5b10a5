"""
Traffic source classifier.

Assigns exactly one channel from the referrer, the landing page URL and the
project domain. The cascade order is significant: a google.com referrer with
utm_medium=cpc on the landing page is organic_search, because referrer markers
are checked before landing-page parameters.

Cascade:
1. empty / "Direct" / "(none)" referrer -> direct
2. search marker in referrer -> organic_search
3. social marker in referrer -> social
4. webmail marker in referrer -> email
5. utm / click-id markers on the landing page -> paid_search, paid_social,
   display, affiliate, email
6. referrer host equals the project domain -> internal
7. anything else (including unparseable referrers) -> referral
"""

from __future__ import annotations

from urllib.parse import urlparse

from .models import DEFAULT_CONFIG, AttributionConfig, TrafficSource


def _strip_www(host: str) -> str:
    return host[4:] if host.startswith("www.") else host


def referrer_host(referrer: str | None) -> str | None:
    """
    Extract the lower-cased host of a referrer, without "www.".

    A scheme is assumed when missing. Returns None when no host can be parsed.
    """
    if not referrer:
        return None
    url = referrer if referrer.lower().startswith("http") else f"https://{referrer}"
    try:
        host = urlparse(url).hostname
    except ValueError:
        return None
    if not host:
        return None
    return _strip_www(host.lower())


def normalize_domain(domain: str | None) -> str | None:
    if not domain:
        return None
    return _strip_www(domain.strip().lower())


def classify_traffic_source(
    referrer: str | None,
    page: str | None = None,
    project_domain: str | None = None,
    config: AttributionConfig = DEFAULT_CONFIG,
) -> TrafficSource:
    """Classify one event into a channel."""
    if referrer is None or referrer.strip().lower() in config.direct_values:
        return TrafficSource.DIRECT

    ref = referrer.lower()
    if any(marker in ref for marker in config.search_markers):
        return TrafficSource.ORGANIC_SEARCH
    if any(marker in ref for marker in config.social_markers):
        return TrafficSource.SOCIAL
    if any(marker in ref for marker in config.email_markers):
        return TrafficSource.EMAIL

    landing = (page or "").lower()
    for markers, source in config.landing_markers:
        if any(marker in landing for marker in markers):
            return source

    domain = normalize_domain(project_domain)
    if domain and referrer_host(referrer) == domain:
        return TrafficSource.INTERNAL

    return TrafficSource.REFERRAL


# --- Attribution Service ---


class AttributionService:
    """Classifier bound to one configuration."""

    def __init__(self, config: AttributionConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    @property
    def config(self) -> AttributionConfig:
        return self._config

    def classify(
        self,
        referrer: str | None,
        page: str | None = None,
        project_domain: str | None = None,
    ) -> TrafficSource:
        return classify_traffic_source(referrer, page, project_domain, self._config)


# --- Factory ---


def create_attribution_service(
    config: AttributionConfig | None = None,
) -> AttributionService:
    """Create an AttributionService."""
    return AttributionService(config=config)
