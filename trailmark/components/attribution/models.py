"""
Traffic source models.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# --- Enums ---


class TrafficSource(str, Enum):
    """Acquisition channel. Exactly one per event."""

    DIRECT = "direct"  # No referrer
    ORGANIC_SEARCH = "organic_search"  # Google, Bing, etc.
    SOCIAL = "social"  # Facebook, Reddit, etc.
    EMAIL = "email"  # Webmail or email campaigns
    PAID_SEARCH = "paid_search"  # CPC campaigns, gclid/msclkid
    PAID_SOCIAL = "paid_social"
    DISPLAY = "display"  # Display / banner ads
    AFFILIATE = "affiliate"
    INTERNAL = "internal"  # Referred by the project's own domain
    REFERRAL = "referral"  # Other websites


# --- Configuration ---


@dataclass(frozen=True)
class AttributionConfig:
    """
    Attribution configuration.

    Referrer markers are substrings of the lower-cased referrer. Landing
    markers are substrings of the lower-cased landing page URL.
    """

    search_markers: tuple[str, ...] = (
        "google.",
        "bing.",
        "yahoo.",
        "duckduckgo.",
        "baidu.",
        "yandex.",
        "ecosia.",
        "ask.",
    )

    social_markers: tuple[str, ...] = (
        "facebook.",
        "instagram.",
        "twitter.",
        "t.co",
        "linkedin.",
        "youtube.",
        "tiktok.",
        "reddit.",
        "pinterest.",
        "threads.",
    )

    email_markers: tuple[str, ...] = (
        "mail.",
        "outlook.",
        "gmail.",
        "yahoo.com/mail",
        "proton.",
    )

    # Checked in this order; first hit wins.
    landing_markers: tuple[tuple[tuple[str, ...], TrafficSource], ...] = (
        (("utm_medium=cpc", "utm_medium=paid", "gclid=", "msclkid="), TrafficSource.PAID_SEARCH),
        (("utm_medium=social", "utm_medium=paid_social"), TrafficSource.PAID_SOCIAL),
        (("utm_medium=display", "utm_medium=banner"), TrafficSource.DISPLAY),
        (("utm_medium=affiliate",), TrafficSource.AFFILIATE),
        (("utm_medium=email", "utm_medium=newsletter"), TrafficSource.EMAIL),
    )

    # Referrer values that mean "no referrer"
    direct_values: tuple[str, ...] = ("", "direct", "(none)")


DEFAULT_CONFIG = AttributionConfig()
