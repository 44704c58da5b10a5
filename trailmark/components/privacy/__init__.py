"""
Privacy component - Consent settings/records, IP rules, erasure, export, purge.
"""

from .component import (
    DEFAULT_RETENTION_DAYS,
    EXPORT_CSV_COLUMNS,
    events_to_csv,
    get_effective_settings,
    run_add_ip_rule,
    run_delete_ip_rule,
    run_erase_visitor,
    run_export_visitor,
    run_purge,
    run_record_consent,
    run_upsert_settings,
    validate_ip_rule,
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

__all__ = [
    # Entry points
    "get_effective_settings",
    "run_add_ip_rule",
    "run_delete_ip_rule",
    "run_erase_visitor",
    "run_export_visitor",
    "run_purge",
    "run_record_consent",
    "run_upsert_settings",
    # Helpers
    "DEFAULT_RETENTION_DAYS",
    "EXPORT_CSV_COLUMNS",
    "events_to_csv",
    "validate_ip_rule",
    # Models
    "AddIpRuleInput",
    "ConsentRecordOutput",
    "ErasureOutput",
    "IpRuleOutput",
    "PrivacyValidationError",
    "PurgeInput",
    "PurgeOutput",
    "RecordConsentInput",
    "SettingsOutput",
    "UpsertSettingsInput",
    "VisitorExport",
]
