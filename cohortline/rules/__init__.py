"""Classification rules and the rule set."""

from cohortline.rules.factory import (
    build_rule,
    build_rules,
    custom_rule,
    default_rules,
    spend_range_rule,
    threshold_above_rule,
)
from cohortline.rules.models import Predicate, Rule
from cohortline.rules.rule_set import RuleSet

__all__ = [
    "Predicate",
    "Rule",
    "RuleSet",
    "build_rule",
    "build_rules",
    "custom_rule",
    "default_rules",
    "spend_range_rule",
    "threshold_above_rule",
]
