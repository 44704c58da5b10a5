"""
Bot/server classifier.

Pure function of the lower-cased user agent. The two flags are independent:
"googlebot" is a bot, "curl/8.0" is a server, "python-requests bot" is both.

Invariants:
- Empty or literal "unknown" user agents are server traffic
- Classification never raises
"""

from __future__ import annotations

from .models import DEFAULT_CONFIG, ClassifierConfig, UAFlags


def normalize_user_agent(beacon_ua: str | None, header_ua: str | None) -> str:
    """Beacon-supplied UA wins over the request header; result is lower-cased."""
    return (beacon_ua or header_ua or "").lower()


def is_bot_agent(ua: str, config: ClassifierConfig = DEFAULT_CONFIG) -> bool:
    ua_lower = ua.lower()
    return any(pattern in ua_lower for pattern in config.bot_patterns)


def is_server_agent(ua: str, config: ClassifierConfig = DEFAULT_CONFIG) -> bool:
    ua_lower = ua.lower()
    if ua_lower in ("", "unknown"):
        return True
    return any(pattern in ua_lower for pattern in config.server_patterns)


def classify_user_agent(
    user_agent: str | None,
    config: ClassifierConfig = DEFAULT_CONFIG,
) -> UAFlags:
    """Classify a user agent into independent bot/server flags."""
    ua = (user_agent or "").lower()
    return UAFlags(
        is_bot=is_bot_agent(ua, config),
        is_server=is_server_agent(ua, config),
    )
