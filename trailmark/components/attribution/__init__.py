"""
Attribution component - Traffic source (channel) classification.
"""

from .component import (
    AttributionService,
    classify_traffic_source,
    create_attribution_service,
    normalize_domain,
    referrer_host,
)
from .models import DEFAULT_CONFIG, AttributionConfig, TrafficSource

__all__ = [
    "DEFAULT_CONFIG",
    "AttributionConfig",
    "AttributionService",
    "TrafficSource",
    "classify_traffic_source",
    "create_attribution_service",
    "normalize_domain",
    "referrer_host",
]
