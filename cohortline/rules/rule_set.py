"""Ordered, append-only collection of rules."""

import threading
from collections.abc import Iterable

from cohortline.domain.enums import CohortType
from cohortline.domain.models import Customer
from cohortline.observability.logging import get_logger
from cohortline.observability.metrics import RULE_EVALUATION_ERRORS
from cohortline.rules.models import Rule

logger = get_logger(__name__)


class RuleSet:
    """Rules evaluated in insertion order.

    The rule list is an immutable tuple swapped on append (copy-on-write),
    so a concurrent ``classify`` sees either the list before or after an
    ``add_rule``, never a partial one. Appends are serialized by a lock.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: tuple[Rule, ...] = tuple(rules)
        self._write_lock = threading.Lock()

    @property
    def rules(self) -> tuple[Rule, ...]:
        """Snapshot of the current rules."""
        return self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def add_rule(self, rule: Rule) -> None:
        """Append a rule; visible to classifications that start afterwards."""
        with self._write_lock:
            self._rules = (*self._rules, rule)
        logger.info("rule_added", rule=rule.name, cohort_type=rule.cohort_type.value)

    def cohort_types(self) -> set[CohortType]:
        """Cohort types that at least one rule can assign."""
        return {rule.cohort_type for rule in self._rules}

    def matching_rules(self, customer: Customer | None) -> list[Rule]:
        """Rules that match ``customer``, in rule order.

        A rule that raises is logged and treated as not matching; the
        remaining rules are still evaluated.
        """
        if customer is None:
            return []

        matched: list[Rule] = []
        for rule in self._rules:
            try:
                if rule.evaluate(customer):
                    matched.append(rule)
            except Exception as e:
                RULE_EVALUATION_ERRORS.labels(rule=rule.name).inc()
                logger.error(
                    "rule_evaluation_failed",
                    rule=rule.name,
                    customer_id=customer.customer_id,
                    error=str(e),
                )
        return matched

    def classify(self, customer: Customer | None) -> set[CohortType]:
        """Union of the cohort types of every matching rule.

        Pure in ``customer`` and the rule list; no store access.
        """
        return {rule.cohort_type for rule in self.matching_rules(customer)}
