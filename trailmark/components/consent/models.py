"""
Consent gate models.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

# --- Enums ---


class SuppressReason(str, Enum):
    DNT = "dnt"
    NO_CONSENT = "no_consent"


class IpMode(str, Enum):
    ANONYMIZE = "anonymize"
    KEEP = "keep"


class IdentityMode(str, Enum):
    COOKIELESS = "cookieless"
    IDENTIFIED = "identified"


# --- Input ---


@dataclass(frozen=True)
class ConsentSignals:
    """
    Raw privacy signals from one beacon request.

    Values are kept as received; the gate decides what counts as a signal.
    """

    dnt_header: str | None = None
    dnt_body: Any = None
    consent_given: Any = None


# --- Output ---


SUPPRESS_MESSAGES: dict[SuppressReason, str] = {
    SuppressReason.DNT: "DNT respected, event not recorded",
    SuppressReason.NO_CONSENT: "Consent not given, event not recorded",
}


@dataclass(frozen=True)
class ConsentDecision:
    """Either record (with ip and identity modes) or suppress (with a reason)."""

    record: bool
    ip_mode: IpMode | None = None
    identity_mode: IdentityMode | None = None
    reason: SuppressReason | None = None

    @classmethod
    def allow(cls, ip_mode: IpMode, identity_mode: IdentityMode) -> ConsentDecision:
        return cls(record=True, ip_mode=ip_mode, identity_mode=identity_mode)

    @classmethod
    def suppress(cls, reason: SuppressReason) -> ConsentDecision:
        return cls(record=False, reason=reason)

    @property
    def message(self) -> str | None:
        if self.reason is None:
            return None
        return SUPPRESS_MESSAGES[self.reason]
