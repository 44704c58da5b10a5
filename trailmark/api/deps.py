import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from trailmark.adapters.clock import SystemClock
from trailmark.adapters.geo_ipapi import IpApiGeoLookup, NullGeoLookup
from trailmark.adapters.memory import (
    InMemoryConsentRecordRepo,
    InMemoryConsentSettingsRepo,
    InMemoryCustomEventRepo,
    InMemoryEventStore,
    InMemoryFunnelRepo,
    InMemoryInternalIpRuleRepo,
    InMemoryProjectRepo,
    InMemoryReportRepo,
)
from trailmark.adapters.sqlite_events import SQLiteEventStore
from trailmark.components.attribution import AttributionConfig
from trailmark.components.classify import ClassifierConfig
from trailmark.components.definitions import (
    DefinitionService,
    create_custom_event_service,
    create_funnel_service,
    create_report_service,
)
from trailmark.components.identity import GeoLookupPort, IdentityConfig
from trailmark.components.ingest import IngestConfig
from trailmark.components.insights import InsightsConfig
from trailmark.core.entities import CustomEventDefinition, CustomReport, Funnel
from trailmark.core.ports import EventStorePort
from trailmark.rules.loader import load_rules
from trailmark.rules.models import Rules

STORE_BACKENDS = ("memory", "sqlite")


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("TRAILMARK_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "trailmark.db")
        self.rules_path = Path(
            os.environ.get("TRAILMARK_RULES_PATH", str(self.base_dir / "rules.yaml"))
        )
        self.store_backend = os.environ.get("TRAILMARK_STORE", "memory").lower()
        self.host = os.environ.get("TRAILMARK_HOST", "127.0.0.1")
        self.port = int(os.environ.get("TRAILMARK_PORT", "8000"))
        # Unset means "follow rules.yaml geo.enabled"
        geo_env = os.environ.get("TRAILMARK_GEO")
        self.geo_enabled: bool | None = (
            None if geo_env is None else geo_env.lower() in ("1", "true", "yes")
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Component configuration ---
def get_ingest_config(rules: Rules = Depends(get_rules)) -> IngestConfig:
    return IngestConfig(
        classifier=ClassifierConfig(
            bot_patterns=tuple(rules.classifier.bot_patterns),
            server_patterns=tuple(rules.classifier.server_patterns),
        ),
        attribution=AttributionConfig(
            search_markers=tuple(rules.attribution.search_markers),
            social_markers=tuple(rules.attribution.social_markers),
            email_markers=tuple(rules.attribution.email_markers),
        ),
        identity=IdentityConfig(geo_skip_prefixes=tuple(rules.geo.skip_prefixes)),
    )


def get_insights_config(rules: Rules = Depends(get_rules)) -> InsightsConfig:
    return InsightsConfig(
        journeys_limit=rules.query.journeys_limit,
        visitors_limit=rules.query.visitors_limit,
    )


# --- Event store ---
_event_store_instance: EventStorePort | None = None


def get_event_store(settings: Settings = Depends(get_settings)) -> EventStorePort:
    """Get event store singleton for the configured backend."""
    global _event_store_instance
    if _event_store_instance is None:
        if settings.store_backend not in STORE_BACKENDS:
            raise ValueError(f"Unknown store backend: {settings.store_backend}")
        if settings.store_backend == "sqlite":
            settings.data_dir.mkdir(parents=True, exist_ok=True)
            store = SQLiteEventStore(settings.db_path)
            store.init_schema()
            _event_store_instance = store
        else:
            _event_store_instance = InMemoryEventStore()
    return _event_store_instance


# --- Repos ---
# Definitions, settings and consent records live in memory for the process.
_project_repo = InMemoryProjectRepo()
_consent_settings_repo = InMemoryConsentSettingsRepo()
_consent_record_repo = InMemoryConsentRecordRepo()
_ip_rule_repo = InMemoryInternalIpRuleRepo()
_report_repo = InMemoryReportRepo()
_funnel_repo = InMemoryFunnelRepo()
_custom_event_repo = InMemoryCustomEventRepo()


def get_project_repo() -> InMemoryProjectRepo:
    return _project_repo


def get_consent_settings_repo() -> InMemoryConsentSettingsRepo:
    return _consent_settings_repo


def get_consent_record_repo() -> InMemoryConsentRecordRepo:
    return _consent_record_repo


def get_ip_rule_repo() -> InMemoryInternalIpRuleRepo:
    return _ip_rule_repo


def get_report_repo() -> InMemoryReportRepo:
    return _report_repo


def get_funnel_repo() -> InMemoryFunnelRepo:
    return _funnel_repo


def get_custom_event_repo() -> InMemoryCustomEventRepo:
    return _custom_event_repo


# --- Component Services ---
def get_report_service(
    repo: InMemoryReportRepo = Depends(get_report_repo),
) -> DefinitionService[CustomReport]:
    """Get custom report definition service."""
    return create_report_service(repo)


def get_funnel_service(
    repo: InMemoryFunnelRepo = Depends(get_funnel_repo),
) -> DefinitionService[Funnel]:
    """Get funnel definition service."""
    return create_funnel_service(repo)


def get_custom_event_service(
    repo: InMemoryCustomEventRepo = Depends(get_custom_event_repo),
) -> DefinitionService[CustomEventDefinition]:
    """Get custom event definition service."""
    return create_custom_event_service(repo)


# --- Geo ---
_geo_instance: IpApiGeoLookup | None = None


def get_geo(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> GeoLookupPort:
    """Geo lookup singleton; a null lookup when geo is disabled."""
    global _geo_instance
    enabled = rules.geo.enabled if settings.geo_enabled is None else settings.geo_enabled
    if not enabled:
        return NullGeoLookup()
    if _geo_instance is None:
        _geo_instance = IpApiGeoLookup(
            url_template=rules.geo.url_template,
            timeout=rules.geo.timeout_seconds,
        )
    return _geo_instance


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance
