"""
Consent component - Ingestion-time privacy gate (DNT, opt-in, cookieless).
"""

from .component import asserts_consent, evaluate_consent, signals_dnt
from .models import (
    SUPPRESS_MESSAGES,
    ConsentDecision,
    ConsentSignals,
    IdentityMode,
    IpMode,
    SuppressReason,
)

__all__ = [
    "evaluate_consent",
    "asserts_consent",
    "signals_dnt",
    "SUPPRESS_MESSAGES",
    "ConsentDecision",
    "ConsentSignals",
    "IdentityMode",
    "IpMode",
    "SuppressReason",
]
