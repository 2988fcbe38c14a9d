"""Unit tests for RuleSet."""

import threading

from cohortline.domain.enums import CohortType, UserType
from cohortline.domain.models import Customer
from cohortline.rules.factory import custom_rule, default_rules, threshold_above_rule
from cohortline.rules.models import Rule
from cohortline.rules.rule_set import RuleSet


def _failing_rule() -> Rule:
    def predicate(customer: Customer) -> bool:
        raise RuntimeError("boom")

    return Rule(name="Broken", cohort_type=CohortType.FRAUD, predicate=predicate)


class TestDefaultScenario:
    """The default rule set against the reference customers."""

    def test_high_spender_is_premium(self, make_customer) -> None:
        customer = make_customer("a", 6000.0, UserType.PAID)
        assert RuleSet(default_rules()).classify(customer) == {CohortType.PREMIUM}

    def test_free_mid_spender_is_normal(self, make_customer) -> None:
        customer = make_customer("b", 4000.0, UserType.FREE)
        assert RuleSet(default_rules()).classify(customer) == {CohortType.NORMAL}

    def test_paid_mid_spender_is_normal_and_premium(self, make_customer) -> None:
        customer = make_customer("c", 4000.0, UserType.PAID)
        assert RuleSet(default_rules()).classify(customer) == {
            CohortType.NORMAL,
            CohortType.PREMIUM,
        }

    def test_low_spender_matches_nothing(self, make_customer) -> None:
        customer = make_customer("d", 1000.0, UserType.PAID)
        assert RuleSet(default_rules()).classify(customer) == set()


class TestRuleSet:
    """Tests for evaluation and appends."""

    def test_null_customer(self) -> None:
        rule_set = RuleSet(default_rules())

        assert rule_set.classify(None) == set()
        assert rule_set.matching_rules(None) == []

    def test_failing_rule_is_isolated(self, make_customer) -> None:
        """Rules after a failing one still contribute."""
        rule_set = RuleSet([_failing_rule(), threshold_above_rule()])

        result = rule_set.classify(make_customer(daily_spend=9000.0))

        assert result == {CohortType.PREMIUM}

    def test_classification_is_deterministic(self, make_customer) -> None:
        rule_set = RuleSet(default_rules())
        customer = make_customer(daily_spend=4500.0, user_type=UserType.PAID)

        assert rule_set.classify(customer) == rule_set.classify(customer)

    def test_add_rule_extends_the_set(self, make_customer) -> None:
        rule_set = RuleSet(default_rules())
        customer = make_customer(daily_spend=20000.0, user_type=UserType.PAID)
        assert CohortType.VIP not in rule_set.classify(customer)

        rule_set.add_rule(custom_rule(CohortType.VIP, min_threshold=15000.0))

        assert len(rule_set) == 4
        assert rule_set.classify(customer) == {CohortType.PREMIUM, CohortType.VIP}
        assert rule_set.cohort_types() == {CohortType.PREMIUM, CohortType.NORMAL, CohortType.VIP}

    def test_snapshot_is_unaffected_by_later_appends(self) -> None:
        rule_set = RuleSet(default_rules())
        snapshot = rule_set.rules

        rule_set.add_rule(custom_rule(CohortType.VIP))

        assert len(snapshot) == 3
        assert len(rule_set.rules) == 4

    def test_concurrent_appends_are_all_kept(self) -> None:
        rule_set = RuleSet()

        def add_many() -> None:
            for _ in range(50):
                rule_set.add_rule(custom_rule(CohortType.FRAUD))

        threads = [threading.Thread(target=add_many) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(rule_set) == 200
