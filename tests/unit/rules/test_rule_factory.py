"""Unit tests for rule constructors and the configuration builder."""

import pytest

from cohortline.config.models.rules import RuleConfig, RulesConfig
from cohortline.domain.enums import CohortType, UserType
from cohortline.rules.factory import (
    build_rule,
    build_rules,
    custom_rule,
    default_rules,
    spend_range_rule,
    threshold_above_rule,
)


class TestThresholdAboveRule:
    """Boundary laws of the daily-spend rule."""

    @pytest.mark.parametrize(
        ("spend", "expected"),
        [(5000.0, False), (5000.01, True), (4999.99, False), (6000.0, True)],
    )
    def test_threshold_is_strict(self, make_customer, spend: float, expected: bool) -> None:
        rule = threshold_above_rule()
        assert rule.evaluate(make_customer(daily_spend=spend)) is expected

    def test_ignores_user_type(self, make_customer) -> None:
        rule = threshold_above_rule()
        assert rule.evaluate(make_customer(daily_spend=6000.0, user_type=UserType.FREE))

    def test_null_spend_does_not_match(self, make_customer) -> None:
        assert threshold_above_rule().evaluate(make_customer(daily_spend=None)) is False

    def test_null_customer_does_not_match(self) -> None:
        assert threshold_above_rule().evaluate(None) is False

    def test_identity(self) -> None:
        rule = threshold_above_rule(7500.0)

        assert rule.name == "DailySpend"
        assert rule.cohort_type is CohortType.PREMIUM
        assert rule.cohort_id == "DailySpend_PREMIUM"
        assert rule.params == {"threshold": 7500.0}


class TestSpendRangeRule:
    """Boundary laws of the mid-spend rule and its PAID-gated variant."""

    @pytest.mark.parametrize(
        ("spend", "expected"),
        [(3000.0, False), (5000.0, False), (4000.0, True), (3000.01, True), (4999.99, True)],
    )
    def test_bounds_are_strict(self, make_customer, spend: float, expected: bool) -> None:
        rule = spend_range_rule(CohortType.NORMAL)
        assert rule.evaluate(make_customer(daily_spend=spend)) is expected

    def test_gated_variant_requires_paid(self, make_customer) -> None:
        rule = spend_range_rule(CohortType.NORMAL, require_paid_user=True)

        assert rule.evaluate(make_customer(daily_spend=4000.0, user_type=UserType.PAID))
        assert not rule.evaluate(make_customer(daily_spend=4000.0, user_type=UserType.FREE))

    def test_premium_variant_is_gated_by_default(self, make_customer) -> None:
        rule = spend_range_rule(CohortType.PREMIUM)

        assert rule.params["require_paid_user"] is True
        assert not rule.evaluate(make_customer(daily_spend=4000.0, user_type=UserType.FREE))

    def test_missing_user_type_fails_the_gate(self, make_customer) -> None:
        rule = spend_range_rule(CohortType.PREMIUM)
        assert not rule.evaluate(make_customer(daily_spend=4000.0, user_type=None))

    def test_null_spend_does_not_match(self, make_customer) -> None:
        assert not spend_range_rule().evaluate(make_customer(daily_spend=None))


class TestCustomRule:
    """Custom rules: optional inclusive bounds and PAID requirement."""

    def test_bounds_are_inclusive(self, make_customer) -> None:
        rule = custom_rule(CohortType.VIP, min_threshold=100.0, max_threshold=200.0)

        assert rule.evaluate(make_customer(daily_spend=100.0))
        assert rule.evaluate(make_customer(daily_spend=200.0))
        assert not rule.evaluate(make_customer(daily_spend=99.99))
        assert not rule.evaluate(make_customer(daily_spend=200.01))

    def test_unset_bounds_are_not_checked(self, make_customer) -> None:
        rule = custom_rule(CohortType.FRAUD)

        assert rule.evaluate(make_customer(daily_spend=None))
        assert rule.name == "CustomRule-FRAUD"

    def test_null_spend_fails_a_configured_bound(self, make_customer) -> None:
        rule = custom_rule(CohortType.VIP, min_threshold=0.0)
        assert not rule.evaluate(make_customer(daily_spend=None))

    def test_require_paid_user(self, make_customer) -> None:
        rule = custom_rule(CohortType.VIP, min_threshold=10000.0, require_paid_user=True)

        assert rule.evaluate(make_customer(daily_spend=12000.0, user_type=UserType.PAID))
        assert not rule.evaluate(make_customer(daily_spend=12000.0, user_type=UserType.FREE))


class TestBuildRules:
    """Tests for the configuration-driven builder."""

    def test_builds_configured_rules_in_order(self) -> None:
        config = RulesConfig(
            configurations=[
                RuleConfig(type="daily-spend", max_threshold=8000.0),
                RuleConfig(type="mid-spend", cohort_type=CohortType.PREMIUM),
                RuleConfig(type="custom-rule", cohort_type=CohortType.VIP, min_threshold=1.0),
            ]
        )

        rules = build_rules(config)

        assert [r.cohort_id for r in rules] == [
            "DailySpend_PREMIUM",
            "MidSpend_PREMIUM",
            "CustomRule-VIP_VIP",
        ]
        assert rules[0].params["threshold"] == 8000.0

    def test_type_is_case_insensitive(self) -> None:
        rule = build_rule(RuleConfig(type="Daily-Spend"))
        assert rule is not None
        assert rule.params["threshold"] == 5000.0

    def test_mid_spend_defaults_to_normal(self) -> None:
        rule = build_rule(RuleConfig(type="mid-spend"))
        assert rule is not None
        assert rule.cohort_type is CohortType.NORMAL

    def test_unknown_type_is_skipped(self) -> None:
        config = RulesConfig(
            configurations=[
                RuleConfig(type="loyalty-points"),
                RuleConfig(type="daily-spend"),
            ]
        )
        assert [r.name for r in build_rules(config)] == ["DailySpend"]

    def test_custom_rule_without_cohort_type_is_skipped(self) -> None:
        assert build_rule(RuleConfig(type="custom-rule", min_threshold=1.0)) is None

    def test_disabled_configuration_uses_defaults(self) -> None:
        config = RulesConfig(
            enabled=False,
            configurations=[RuleConfig(type="custom-rule", cohort_type=CohortType.VIP)],
        )
        assert _ids(build_rules(config)) == _ids(default_rules())

    def test_no_valid_rules_uses_defaults(self) -> None:
        config = RulesConfig(configurations=[RuleConfig(type="unknown")])
        assert _ids(build_rules(config)) == _ids(default_rules())

    def test_empty_configuration_uses_defaults(self) -> None:
        assert _ids(build_rules(RulesConfig())) == _ids(default_rules())


def _ids(rules) -> list[str]:
    return [r.cohort_id for r in rules]
