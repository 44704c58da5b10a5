"""
Tests for the identity & geo resolver.

IP extraction, anonymization, hashing, internal-traffic rules and geo
fallback behaviour.
"""

from __future__ import annotations

import hashlib

import pytest

from tests.conftest import StubGeo
from trailmark.components.identity import (
    GeoResult,
    IdentityInput,
    anonymize_ip,
    extract_client_ip,
    hash_ip,
    ip_matches_cidr,
    is_foreign_hostname,
    is_private_ip,
    matches_ip_rule,
    resolve_identity,
    should_lookup_geo,
)
from trailmark.core.entities import InternalIpRule


def rule(ip: str, rule_type: str = "exact") -> InternalIpRule:
    return InternalIpRule(project_id="p1", ip=ip, rule_type=rule_type)  # type: ignore[arg-type]


# --- Extraction ---


class TestExtractClientIp:
    """Test client address precedence."""

    def test_forwarded_for_first_entry(self) -> None:
        assert extract_client_ip("203.0.113.7, 10.0.0.1", "198.51.100.1", "1.1.1.1") == (
            "203.0.113.7"
        )

    def test_real_ip_when_no_forwarded(self) -> None:
        assert extract_client_ip(None, "198.51.100.1", "1.1.1.1") == "198.51.100.1"

    def test_peer_fallback(self) -> None:
        assert extract_client_ip(None, None, "1.1.1.1") == "1.1.1.1"

    def test_nothing_known(self) -> None:
        assert extract_client_ip(None, None, None) == ""


# --- Anonymization & hashing ---


class TestAnonymizeIp:
    """Test host-part zeroing."""

    def test_ipv4(self) -> None:
        assert anonymize_ip("203.0.113.45") == "203.0.113.0"

    def test_ipv6(self) -> None:
        assert anonymize_ip("2001:db8:85a3:1:2:3:4:5") == "2001:db8:85a3:1:0:0:0:0"

    def test_malformed_unchanged(self) -> None:
        assert anonymize_ip("not-an-ip") == "not-an-ip"

    def test_empty(self) -> None:
        assert anonymize_ip("") == ""


class TestHashIp:
    def test_salted_sha256_prefix(self) -> None:
        """16 hex chars of sha256(ip + salt)."""
        expected = hashlib.sha256(b"203.0.113.45salt").hexdigest()[:16]

        assert hash_ip("203.0.113.45", "salt") == expected
        assert len(hash_ip("203.0.113.45")) == 16

    def test_salt_changes_hash(self) -> None:
        assert hash_ip("1.2.3.4", "a") != hash_ip("1.2.3.4", "b")


# --- Matching ---


class TestCidr:
    """Test IPv4 CIDR membership."""

    def test_inside_range(self) -> None:
        assert ip_matches_cidr("10.1.2.3", "10.0.0.0", 8) is True

    def test_outside_range(self) -> None:
        assert ip_matches_cidr("11.1.2.3", "10.0.0.0", 8) is False

    def test_zero_bits_matches_all(self) -> None:
        assert ip_matches_cidr("203.0.113.45", "10.0.0.0", 0) is True

    def test_full_mask_is_exact(self) -> None:
        assert ip_matches_cidr("10.0.0.1", "10.0.0.1", 32) is True
        assert ip_matches_cidr("10.0.0.2", "10.0.0.1", 32) is False

    def test_ipv6_never_matches(self) -> None:
        assert ip_matches_cidr("::1", "10.0.0.0", 0) is False

    def test_malformed_never_matches(self) -> None:
        assert ip_matches_cidr("10.0.0", "10.0.0.0", 8) is False


class TestIpRules:
    """Test exact / prefix / cidr rules."""

    def test_exact(self) -> None:
        assert matches_ip_rule("203.0.113.0", rule("203.0.113.0")) is True
        assert matches_ip_rule("203.0.113.1", rule("203.0.113.0")) is False

    def test_prefix(self) -> None:
        assert matches_ip_rule("203.0.113.0", rule("203.0.", "prefix")) is True

    def test_cidr(self) -> None:
        assert matches_ip_rule("198.51.100.9", rule("198.51.100.0/24", "cidr")) is True
        assert matches_ip_rule("198.51.101.9", rule("198.51.100.0/24", "cidr")) is False

    def test_cidr_without_bits_is_host(self) -> None:
        assert matches_ip_rule("198.51.100.9", rule("198.51.100.9", "cidr")) is True

    def test_cidr_bad_bits(self) -> None:
        assert matches_ip_rule("198.51.100.9", rule("198.51.100.0/xx", "cidr")) is False


class TestPrivateAndHostname:
    @pytest.mark.parametrize("ip", ["127.0.0.1", "::1", "10.2.3.4", "192.168.1.1", "172.16.0.5"])
    def test_private(self, ip: str) -> None:
        assert is_private_ip(ip) is True

    @pytest.mark.parametrize("ip", ["", "203.0.113.45", "172.17.0.1"])
    def test_public(self, ip: str) -> None:
        assert is_private_ip(ip) is False

    def test_foreign_hostname(self) -> None:
        assert is_foreign_hostname("staging.other.com", "example.com") is True

    def test_own_hostname_and_subdomain(self) -> None:
        assert is_foreign_hostname("www.example.com", "example.com") is False
        assert is_foreign_hostname("blog.example.com", "example.com") is False

    def test_unknown_domain_undecided(self) -> None:
        assert is_foreign_hostname("other.com", None) is False


# --- Resolver ---


class TestResolveIdentity:
    """Test the full resolver."""

    def test_anonymized_ip_and_geo(self) -> None:
        geo = StubGeo({"203.0.113.45": GeoResult(country="Denmark", city="Aarhus", region="MJ")})

        resolved = resolve_identity(
            IdentityInput(client_ip="203.0.113.45", anonymize=True),
            project_domain="example.com",
            ip_rules=[],
            geo=geo,
        )

        assert resolved.ip == "203.0.113.0"
        assert resolved.country == "Denmark"
        assert resolved.city == "Aarhus"
        assert resolved.region == "MJ"
        assert resolved.is_internal is False
        # Lookup uses the raw address
        assert geo.calls == ["203.0.113.45"]

    def test_raw_ip_kept(self) -> None:
        resolved = resolve_identity(
            IdentityInput(client_ip="203.0.113.45", anonymize=False),
            project_domain=None,
            ip_rules=[],
        )

        assert resolved.ip == "203.0.113.45"

    def test_private_ip_skips_geo_and_is_internal(self) -> None:
        geo = StubGeo()

        resolved = resolve_identity(
            IdentityInput(client_ip="192.168.1.20"),
            project_domain=None,
            ip_rules=[],
            geo=geo,
        )

        assert geo.calls == []
        assert resolved.is_internal is True

    def test_beacon_country_fallback(self) -> None:
        resolved = resolve_identity(
            IdentityInput(client_ip="203.0.113.45", beacon_country="DK"),
            project_domain=None,
            ip_rules=[],
            geo=StubGeo(),
        )

        assert resolved.country == "DK"
        assert resolved.city is None

    def test_rule_evaluated_on_stored_ip(self) -> None:
        """Rules see the anonymized address when anonymization is on."""
        resolved = resolve_identity(
            IdentityInput(client_ip="203.0.113.45", anonymize=True),
            project_domain=None,
            ip_rules=[rule("203.0.113.0")],
        )

        assert resolved.is_internal is True

    def test_foreign_hostname_is_internal(self) -> None:
        resolved = resolve_identity(
            IdentityInput(client_ip="203.0.113.45", hostname="localhost"),
            project_domain="example.com",
            ip_rules=[],
        )

        assert resolved.is_internal is True

    def test_geo_exception_degrades(self) -> None:
        class Exploding:
            def lookup(self, ip: str) -> GeoResult:
                raise RuntimeError("boom")

        resolved = resolve_identity(
            IdentityInput(client_ip="203.0.113.45"),
            project_domain=None,
            ip_rules=[],
            geo=Exploding(),
        )

        assert resolved.country is None
        assert resolved.ip == "203.0.113.0"

    def test_should_lookup_geo(self) -> None:
        assert should_lookup_geo("203.0.113.45") is True
        assert should_lookup_geo("127.0.0.1") is False
        assert should_lookup_geo("") is False
