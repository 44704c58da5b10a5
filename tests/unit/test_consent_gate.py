"""
Tests for the consent gate.

DNT suppression, opt-in consent, and the ip/identity modes handed to the
rest of the ingest pipeline.
"""

from __future__ import annotations

import pytest

from trailmark.components.consent import (
    ConsentSignals,
    IdentityMode,
    IpMode,
    SuppressReason,
    asserts_consent,
    evaluate_consent,
    signals_dnt,
)
from trailmark.core.entities import ConsentSettings

# --- Fixtures ---


@pytest.fixture
def opt_in() -> ConsentSettings:
    """Default settings: opt-in, DNT respected, IP anonymized."""
    return ConsentSettings(project_id="p1")


@pytest.fixture
def opt_out() -> ConsentSettings:
    return ConsentSettings(project_id="p1", consent_mode="opt-out")


# --- Signal parsing ---


class TestSignals:
    """Test raw signal interpretation."""

    @pytest.mark.parametrize("value", ["1", 1])
    def test_dnt_on(self, value: object) -> None:
        """'1' and 1 signal DNT."""
        assert signals_dnt(value) is True

    @pytest.mark.parametrize("value", [None, "0", 0, "yes", True, ""])
    def test_dnt_off(self, value: object) -> None:
        """Anything else does not."""
        assert signals_dnt(value) is False

    @pytest.mark.parametrize("value", [True, "true"])
    def test_consent_asserted(self, value: object) -> None:
        assert asserts_consent(value) is True

    @pytest.mark.parametrize("value", [None, False, "false", "1", 1, "TRUE"])
    def test_consent_not_asserted(self, value: object) -> None:
        assert asserts_consent(value) is False


# --- Decisions ---


class TestEvaluateConsent:
    """Test gate decisions."""

    def test_dnt_header_suppresses(self, opt_out: ConsentSettings) -> None:
        """DNT header with respect-DNT suppresses even in opt-out mode."""
        decision = evaluate_consent(ConsentSignals(dnt_header="1"), opt_out)

        assert decision.record is False
        assert decision.reason == SuppressReason.DNT
        assert decision.message == "DNT respected, event not recorded"

    def test_dnt_body_suppresses(self, opt_in: ConsentSettings) -> None:
        """DNT in the payload counts too, and wins over consent."""
        decision = evaluate_consent(ConsentSignals(dnt_body=1, consent_given=True), opt_in)

        assert decision.reason == SuppressReason.DNT

    def test_dnt_ignored_when_not_respected(self) -> None:
        settings = ConsentSettings(project_id="p1", consent_mode="opt-out", respect_dnt=False)

        decision = evaluate_consent(ConsentSignals(dnt_header="1"), settings)

        assert decision.record is True

    def test_opt_in_without_consent_suppressed(self, opt_in: ConsentSettings) -> None:
        decision = evaluate_consent(ConsentSignals(consent_given=False), opt_in)

        assert decision.record is False
        assert decision.reason == SuppressReason.NO_CONSENT
        assert decision.message == "Consent not given, event not recorded"

    def test_opt_in_with_consent_recorded(self, opt_in: ConsentSettings) -> None:
        decision = evaluate_consent(ConsentSignals(consent_given="true"), opt_in)

        assert decision.record is True
        assert decision.reason is None
        assert decision.message is None

    def test_opt_out_records_without_consent(self, opt_out: ConsentSettings) -> None:
        decision = evaluate_consent(ConsentSignals(), opt_out)

        assert decision.record is True

    def test_modes_follow_settings(self) -> None:
        """Anonymize and cookieless toggles map onto the decision modes."""
        settings = ConsentSettings(
            project_id="p1",
            consent_mode="opt-out",
            anonymize_ip=False,
            cookieless_mode=True,
        )

        decision = evaluate_consent(ConsentSignals(), settings)

        assert decision.ip_mode == IpMode.KEEP
        assert decision.identity_mode == IdentityMode.COOKIELESS

    def test_default_modes(self, opt_in: ConsentSettings) -> None:
        decision = evaluate_consent(ConsentSignals(consent_given=True), opt_in)

        assert decision.ip_mode == IpMode.ANONYMIZE
        assert decision.identity_mode == IdentityMode.IDENTIFIED
