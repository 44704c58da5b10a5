"""
Rule DSL for custom events.

A rule is {field, operator, value}; a definition's rules combine with AND.
String operators compare lower-cased text. regex searches the raw field text
case-insensitively.

contains_any splits its value on "," with no escaping, so a token cannot
itself contain a comma.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from trailmark.core.entities import Event, RuleSpec, event_field

logger = logging.getLogger(__name__)


class Operator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    CONTAINS_ANY = "contains_any"
    REGEX = "regex"


@dataclass(frozen=True)
class EventRule:
    """A parsed rule. operator is None when the stored name is unknown."""

    field: str
    operator: Operator | None
    value: str


def parse_operator(name: str) -> Operator | None:
    try:
        return Operator(name)
    except ValueError:
        return None


def parse_rule(spec: RuleSpec) -> EventRule:
    return EventRule(field=spec.field, operator=parse_operator(spec.operator), value=spec.value)


def parse_rules(specs: Iterable[RuleSpec]) -> list[EventRule]:
    return [parse_rule(s) for s in specs]


def unknown_operators(specs: Iterable[RuleSpec]) -> list[str]:
    """Operator names that are not part of the DSL, in order."""
    return [s.operator for s in specs if parse_operator(s.operator) is None]


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def rule_matches(event: Event, rule: EventRule) -> bool:
    """Evaluate one rule against one event."""
    raw = _text(event_field(event, rule.field))
    field_value = raw.lower()
    value = rule.value.lower()
    op = rule.operator

    if op is None:
        return False
    if op == Operator.EQUALS:
        return field_value == value
    if op == Operator.NOT_EQUALS:
        return field_value != value
    if op == Operator.CONTAINS:
        return value in field_value
    if op == Operator.NOT_CONTAINS:
        return value not in field_value
    if op == Operator.STARTS_WITH:
        return field_value.startswith(value)
    if op == Operator.ENDS_WITH:
        return field_value.endswith(value)
    if op == Operator.CONTAINS_ANY:
        return any(token.strip() in field_value for token in value.split(","))
    if op == Operator.REGEX:
        try:
            return re.search(rule.value, raw, re.IGNORECASE) is not None
        except (re.error, OverflowError, RecursionError):
            logger.debug("Invalid regex in rule on %s: %r", rule.field, rule.value)
            return False
    return False


def matches(event: Event, rules: Iterable[EventRule]) -> bool:
    """AND of all rules. An empty rule list matches every event."""
    return all(rule_matches(event, rule) for rule in rules)
