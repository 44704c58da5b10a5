"""
IP address helpers: extraction, anonymization, hashing, matching.

All helpers are total: malformed input yields a defined result (unchanged
string, False) instead of raising.
"""

from __future__ import annotations

import hashlib

from trailmark.core.entities import InternalIpRule

# Loopbacks match exactly; the rest are prefixes.
LOOPBACK_ADDRESSES = ("127.0.0.1", "::1")
PRIVATE_PREFIXES = ("10.", "192.168.", "172.16.")

DEFAULT_HASH_SALT = "gdpr-salt-da"


def extract_client_ip(
    forwarded_for: str | None,
    real_ip: str | None,
    peer: str | None,
) -> str:
    """First X-Forwarded-For entry, else X-Real-IP, else the socket peer, else ""."""
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    if real_ip:
        return real_ip.strip()
    return peer or ""


def anonymize_ip(ip: str) -> str:
    """
    Zero the host part of an address.

    IPv4 keeps the first three octets ("203.0.113.45" -> "203.0.113.0").
    IPv6 keeps the first four groups and appends ":0:0:0:0".
    Anything else is returned unchanged.
    """
    if not ip:
        return ip
    if ":" in ip:
        return ":".join(ip.split(":")[:4]) + ":0:0:0:0"
    parts = ip.split(".")
    if len(parts) == 4:
        return ".".join(parts[:3]) + ".0"
    return ip


def hash_ip(ip: str, salt: str = DEFAULT_HASH_SALT) -> str:
    """Salted SHA-256 of the address, first 16 hex chars."""
    return hashlib.sha256((ip + salt).encode()).hexdigest()[:16]


def is_private_ip(ip: str) -> bool:
    if not ip:
        return False
    if ip in LOOPBACK_ADDRESSES:
        return True
    return ip.startswith(PRIVATE_PREFIXES)


def _ipv4_to_int(ip: str) -> int | None:
    parts = ip.split(".")
    if len(parts) != 4:
        return None
    value = 0
    for part in parts:
        if not part.isdigit():
            return None
        octet = int(part)
        if octet > 255:
            return None
        value = (value << 8) | octet
    return value


def ip_matches_cidr(ip: str, range_ip: str, bits: int) -> bool:
    """
    IPv4 CIDR membership using an unsigned 32-bit mask.

    bits == 0 matches every IPv4 address. IPv6 never matches.
    """
    if ":" in ip or ":" in range_ip:
        return False
    if bits < 0 or bits > 32:
        return False
    ip_int = _ipv4_to_int(ip)
    range_int = _ipv4_to_int(range_ip)
    if ip_int is None or range_int is None:
        return False
    mask = 0 if bits == 0 else (0xFFFFFFFF << (32 - bits)) & 0xFFFFFFFF
    return (ip_int & mask) == (range_int & mask)


def matches_ip_rule(ip: str, rule: InternalIpRule) -> bool:
    """Evaluate one internal-IP rule (exact, prefix or cidr "a.b.c.d/bits")."""
    if not ip or not rule.ip:
        return False
    if rule.rule_type == "exact":
        return ip == rule.ip
    if rule.rule_type == "prefix":
        return ip.startswith(rule.ip)
    if rule.rule_type == "cidr":
        range_ip, _, bits_str = rule.ip.partition("/")
        bits_str = bits_str or "32"
        if not bits_str.isdigit():
            return False
        return ip_matches_cidr(ip, range_ip, int(bits_str))
    return False


def strip_www(host: str) -> str:
    host = host.strip().lower()
    return host[4:] if host.startswith("www.") else host


def is_foreign_hostname(hostname: str | None, project_domain: str | None) -> bool:
    """
    True when the beacon hostname is neither the project domain nor a subdomain.

    Only decides when both are known; otherwise False.
    """
    if not hostname or not project_domain:
        return False
    host = strip_www(hostname)
    domain = strip_www(project_domain)
    return host != domain and not host.endswith("." + domain)
