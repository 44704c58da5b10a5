"""
Privacy component - Consent settings, consent records, internal IP rules,
visitor erasure, visitor export and retention purge.

Invariants:
- Consent records never hold a raw IP, only a salted hash prefix
- Erasure removes the visitor's events and consent records together
- Purge deletes only events strictly older than now - retention days
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import UTC, datetime, timedelta

from trailmark.components.consent import asserts_consent
from trailmark.components.identity import DEFAULT_HASH_SALT, hash_ip
from trailmark.core.entities import (
    ConsentRecord,
    ConsentSettings,
    Event,
    InternalIpRule,
    default_consent_settings,
)
from trailmark.core.ports import (
    ConsentRecordRepoPort,
    ConsentSettingsRepoPort,
    EventStorePort,
    InternalIpRuleRepoPort,
    TimePort,
)

from .models import (
    AddIpRuleInput,
    ConsentRecordOutput,
    ErasureOutput,
    IpRuleOutput,
    PrivacyValidationError,
    PurgeInput,
    PurgeOutput,
    RecordConsentInput,
    SettingsOutput,
    UpsertSettingsInput,
    VisitorExport,
)

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 365
EXPORT_CSV_COLUMNS = (
    "id",
    "eventType",
    "page",
    "referrer",
    "device",
    "browser",
    "os",
    "country",
    "city",
    "timestamp",
)
_CSV_ATTRS = {"eventType": "event_type"}

VALID_CONSENT_MODES = ("opt-in", "opt-out")
VALID_RULE_TYPES = ("exact", "prefix", "cidr")


def _now(time_port: TimePort | None) -> datetime:
    return time_port.now_utc() if time_port else datetime.now(UTC)


# --- Consent settings ---


def get_effective_settings(
    project_id: str,
    settings_repo: ConsentSettingsRepoPort,
) -> ConsentSettings:
    """Stored settings, else the defaults."""
    return settings_repo.get(project_id) or default_consent_settings(project_id)


def run_upsert_settings(
    inp: UpsertSettingsInput,
    *,
    settings_repo: ConsentSettingsRepoPort,
    time_port: TimePort | None = None,
) -> SettingsOutput:
    """Create or replace a project's consent settings; unspecified fields take defaults."""
    errors: list[PrivacyValidationError] = []
    if inp.consent_mode is not None and inp.consent_mode not in VALID_CONSENT_MODES:
        errors.append(
            PrivacyValidationError(
                code="invalid_consent_mode",
                message=f"consentMode must be one of {', '.join(VALID_CONSENT_MODES)}",
                field_name="consentMode",
            )
        )
    if inp.data_retention_days is not None and inp.data_retention_days < 1:
        errors.append(
            PrivacyValidationError(
                code="invalid_retention",
                message="dataRetentionDays must be at least 1",
                field_name="dataRetentionDays",
            )
        )
    if errors:
        return SettingsOutput(settings=None, errors=errors, success=False)

    defaults = default_consent_settings(inp.project_id)
    settings = ConsentSettings(
        project_id=inp.project_id,
        consent_mode=inp.consent_mode or defaults.consent_mode,
        respect_dnt=defaults.respect_dnt if inp.respect_dnt is None else inp.respect_dnt,
        anonymize_ip=defaults.anonymize_ip if inp.anonymize_ip is None else inp.anonymize_ip,
        cookieless_mode=(
            defaults.cookieless_mode if inp.cookieless_mode is None else inp.cookieless_mode
        ),
        data_retention_days=inp.data_retention_days or defaults.data_retention_days,
        updated_at=_now(time_port),
    )
    return SettingsOutput(settings=settings_repo.upsert(settings))


# --- Consent records ---


def run_record_consent(
    inp: RecordConsentInput,
    *,
    record_repo: ConsentRecordRepoPort,
    salt: str = DEFAULT_HASH_SALT,
    time_port: TimePort | None = None,
) -> ConsentRecordOutput:
    """Store a visitor's consent decision with a hashed IP."""
    if not inp.project_id:
        return ConsentRecordOutput(
            record=None,
            errors=[
                PrivacyValidationError(
                    code="invalid_payload",
                    message="projectId is required",
                    field_name="projectId",
                )
            ],
            success=False,
        )

    record = ConsentRecord(
        project_id=inp.project_id,
        visitor_id=inp.visitor_id,
        consent_given=asserts_consent(inp.consent_given),
        ip_hash=hash_ip(inp.client_ip, salt) if inp.client_ip else "",
        user_agent=inp.user_agent,
        consent_version=inp.consent_version,
        categories_accepted=inp.categories_accepted,
        timestamp=_now(time_port),
    )
    return ConsentRecordOutput(record=record_repo.add(record))


# --- Internal IP rules ---


def validate_ip_rule(inp: AddIpRuleInput) -> list[PrivacyValidationError]:
    errors: list[PrivacyValidationError] = []
    if not inp.ip or not inp.ip.strip():
        errors.append(
            PrivacyValidationError(code="invalid_ip", message="ip is required", field_name="ip")
        )
    if inp.rule_type not in VALID_RULE_TYPES:
        errors.append(
            PrivacyValidationError(
                code="invalid_rule_type",
                message=f"ruleType must be one of {', '.join(VALID_RULE_TYPES)}",
                field_name="ruleType",
            )
        )
    elif inp.rule_type == "cidr" and inp.ip:
        _, _, bits = inp.ip.partition("/")
        if bits and (not bits.isdigit() or int(bits) > 32):
            errors.append(
                PrivacyValidationError(
                    code="invalid_ip",
                    message="CIDR rules take the form a.b.c.d/bits with bits 0-32",
                    field_name="ip",
                )
            )
    return errors


def run_add_ip_rule(
    inp: AddIpRuleInput,
    *,
    rule_repo: InternalIpRuleRepoPort,
) -> IpRuleOutput:
    errors = validate_ip_rule(inp)
    if errors:
        return IpRuleOutput(rule=None, errors=errors, success=False)
    rule = InternalIpRule(
        project_id=inp.project_id,
        ip=inp.ip.strip(),
        rule_type=inp.rule_type,  # type: ignore[arg-type]
        label=inp.label,
    )
    return IpRuleOutput(rule=rule_repo.add(rule))


def run_delete_ip_rule(
    project_id: str,
    rule_id: str,
    *,
    rule_repo: InternalIpRuleRepoPort,
) -> IpRuleOutput:
    if not rule_repo.delete(project_id, rule_id):
        return IpRuleOutput(
            rule=None,
            errors=[
                PrivacyValidationError(
                    code="not_found",
                    message=f"Internal IP rule with ID {rule_id} not found",
                )
            ],
            success=False,
        )
    return IpRuleOutput(rule=None)


# --- Erasure / export / purge ---


def run_erase_visitor(
    project_id: str,
    visitor_id: str,
    *,
    event_store: EventStorePort,
    record_repo: ConsentRecordRepoPort,
) -> ErasureOutput:
    """Right to erasure: delete all events and consent records of a visitor."""
    events_deleted = event_store.delete_visitor(project_id, visitor_id)
    consents_deleted = record_repo.delete_visitor(project_id, visitor_id)
    logger.info(
        "Erased visitor data for project %s: %d events, %d consent records",
        project_id,
        events_deleted,
        consents_deleted,
    )
    return ErasureOutput(
        visitor_id=visitor_id,
        events_deleted=events_deleted,
        consents_deleted=consents_deleted,
    )


def run_export_visitor(
    project_id: str,
    visitor_id: str,
    *,
    event_store: EventStorePort,
    record_repo: ConsentRecordRepoPort,
    time_port: TimePort | None = None,
    limit: int = 10000,
) -> VisitorExport:
    """Data portability: a visitor's events and consent records."""
    events = event_store.list_visitor(project_id, visitor_id)[:limit]
    records = record_repo.list_for_project(project_id, visitor_id=visitor_id, limit=limit)
    return VisitorExport(
        project_id=project_id,
        visitor_id=visitor_id,
        export_date=_now(time_port),
        events=events,
        consent_records=records,
    )


def events_to_csv(events: list[Event]) -> str:
    """CSV with a fixed header row; empty cells for missing values."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(EXPORT_CSV_COLUMNS)
    for e in events:
        row = []
        for column in EXPORT_CSV_COLUMNS:
            value = getattr(e, _CSV_ATTRS.get(column, column))
            if value is None:
                row.append("")
            elif isinstance(value, datetime):
                row.append(value.isoformat())
            else:
                row.append(str(value))
        writer.writerow(row)
    return output.getvalue()


def run_purge(
    inp: PurgeInput,
    *,
    event_store: EventStorePort,
    settings_repo: ConsentSettingsRepoPort,
    time_port: TimePort | None = None,
) -> PurgeOutput:
    """
    Retention purge. Days: explicit value, else the project setting, else 365.
    """
    stored = settings_repo.get(inp.project_id)
    retention_days = (
        inp.retention_days
        or (stored.data_retention_days if stored else None)
        or DEFAULT_RETENTION_DAYS
    )
    cutoff = _now(time_port) - timedelta(days=retention_days)
    deleted = event_store.purge_before(inp.project_id, cutoff)
    logger.info(
        "Purged %d events older than %d days for project %s",
        deleted,
        retention_days,
        inp.project_id,
    )
    return PurgeOutput(retention_days=retention_days, cutoff=cutoff, events_deleted=deleted)
