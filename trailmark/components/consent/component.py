"""
Consent gate.

Decides whether an inbound beacon may be recorded at all, and if so whether
its IP is anonymized and whether visitor/session identifiers are kept.

Rules, in order:
1. respect-DNT on and the request signals DNT -> suppress(dnt)
2. opt-in mode and the payload does not assert consent -> suppress(no_consent)
3. otherwise record

Suppression is a normal outcome, not an error.
"""

from __future__ import annotations

import logging
from typing import Any

from trailmark.core.entities import ConsentSettings

from .models import (
    ConsentDecision,
    ConsentSignals,
    IdentityMode,
    IpMode,
    SuppressReason,
)

logger = logging.getLogger(__name__)


def signals_dnt(value: Any) -> bool:
    """DNT is on when the value is "1" or 1."""
    if isinstance(value, bool):
        return False
    return value == 1 or value == "1"


def asserts_consent(value: Any) -> bool:
    """Consent is asserted only by an explicit true or "true"."""
    return value is True or value == "true"


def evaluate_consent(signals: ConsentSignals, settings: ConsentSettings) -> ConsentDecision:
    """Evaluate one beacon against the project's consent settings."""
    if settings.respect_dnt and (
        signals_dnt(signals.dnt_header) or signals_dnt(signals.dnt_body)
    ):
        logger.debug("Beacon suppressed for project %s: DNT", settings.project_id)
        return ConsentDecision.suppress(SuppressReason.DNT)

    if settings.consent_mode == "opt-in" and not asserts_consent(signals.consent_given):
        logger.debug("Beacon suppressed for project %s: no consent", settings.project_id)
        return ConsentDecision.suppress(SuppressReason.NO_CONSENT)

    return ConsentDecision.allow(
        ip_mode=IpMode.ANONYMIZE if settings.anonymize_ip else IpMode.KEEP,
        identity_mode=(
            IdentityMode.COOKIELESS if settings.cookieless_mode else IdentityMode.IDENTIFIED
        ),
    )
