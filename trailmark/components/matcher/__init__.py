"""
Matcher component - Custom event rule DSL, matches and conversion analysis.
"""

from ._conversion import (
    ConversionAnalysis,
    DailyConversion,
    PageConversion,
    SourceConversion,
    analyze_conversions,
    round_two_decimals_pct,
)
from ._rules import (
    EventRule,
    Operator,
    matches,
    parse_operator,
    parse_rule,
    parse_rules,
    rule_matches,
    unknown_operators,
)
from .component import DEFAULT_MATCH_CAP, run_conversion_analysis, run_matches
from .models import (
    ConversionOutput,
    DefinitionWindowInput,
    MatcherValidationError,
    MatchesOutput,
)

__all__ = [
    # Entry points
    "run_matches",
    "run_conversion_analysis",
    "DEFAULT_MATCH_CAP",
    # Rules
    "EventRule",
    "Operator",
    "matches",
    "parse_operator",
    "parse_rule",
    "parse_rules",
    "rule_matches",
    "unknown_operators",
    # Conversion
    "ConversionAnalysis",
    "DailyConversion",
    "PageConversion",
    "SourceConversion",
    "analyze_conversions",
    "round_two_decimals_pct",
    # Models
    "ConversionOutput",
    "DefinitionWindowInput",
    "MatcherValidationError",
    "MatchesOutput",
]
