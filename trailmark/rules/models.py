"""
Schema for rules.yaml.

Every section is required; a rules file missing a section fails validation at
startup rather than silently falling back to built-in defaults.
"""

from pydantic import BaseModel, Field, field_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class ClassifierRules(BaseModel):
    """User-agent substrings, matched against the lower-cased UA."""

    bot_patterns: list[str]
    server_patterns: list[str]

    @field_validator("bot_patterns", "server_patterns")
    @classmethod
    def lowercase(cls, v: list[str]) -> list[str]:
        return [p.lower() for p in v if p]


class AttributionRules(BaseModel):
    """Referrer substrings per organic channel."""

    search_markers: list[str]
    social_markers: list[str]
    email_markers: list[str]


class GeoRules(BaseModel):
    enabled: bool
    url_template: str
    timeout_seconds: float = Field(gt=0)
    skip_prefixes: list[str]


class PrivacyRules(BaseModel):
    ip_hash_salt: str
    default_retention_days: int = Field(ge=1)


class QueryRules(BaseModel):
    report_row_cap: int = Field(ge=1)
    match_cap: int = Field(ge=1)
    filtered_default_limit: int = Field(ge=1)
    filtered_max_limit: int = Field(ge=1)
    journeys_limit: int = Field(ge=1)
    visitors_limit: int = Field(ge=1)
    export_limit: int = Field(ge=1)


class Rules(BaseModel):
    project: ProjectRules
    classifier: ClassifierRules
    attribution: AttributionRules
    geo: GeoRules
    privacy: PrivacyRules
    query: QueryRules
