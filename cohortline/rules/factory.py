"""Rule constructors and the configuration-driven rule builder.

Three rule shapes exist:

- daily-spend: spend strictly above a threshold (default 5000) -> PREMIUM.
- mid-spend: spend strictly between 3000 and 5000. The NORMAL variant
  ignores the user type; the PREMIUM variant also requires a PAID user.
- custom-rule: independently optional lower bound, upper bound and PAID
  requirement. Bounds are inclusive and an unset bound is not checked.
"""

from cohortline.config.models.rules import RuleConfig, RulesConfig
from cohortline.domain.enums import CohortType, UserType
from cohortline.domain.models import Customer
from cohortline.observability.logging import get_logger
from cohortline.rules.models import Rule

logger = get_logger(__name__)

DEFAULT_DAILY_SPEND_THRESHOLD = 5000.0
DEFAULT_MID_SPEND_MIN = 3000.0
DEFAULT_MID_SPEND_MAX = 5000.0


def threshold_above_rule(
    threshold: float = DEFAULT_DAILY_SPEND_THRESHOLD,
    cohort_type: CohortType = CohortType.PREMIUM,
) -> Rule:
    """Match customers whose daily spend is strictly above ``threshold``."""

    def predicate(customer: Customer) -> bool:
        if customer.daily_spend is None:
            return False
        return customer.daily_spend > threshold

    return Rule(
        name="DailySpend",
        cohort_type=cohort_type,
        predicate=predicate,
        params={"threshold": threshold},
    )


def spend_range_rule(
    cohort_type: CohortType = CohortType.NORMAL,
    min_threshold: float = DEFAULT_MID_SPEND_MIN,
    max_threshold: float = DEFAULT_MID_SPEND_MAX,
    require_paid_user: bool | None = None,
) -> Rule:
    """Match customers with ``min_threshold < daily_spend < max_threshold``.

    When ``require_paid_user`` is left unset, the PREMIUM variant gates on
    PAID users and every other cohort type does not.
    """
    gated = cohort_type is CohortType.PREMIUM if require_paid_user is None else require_paid_user

    def predicate(customer: Customer) -> bool:
        spend = customer.daily_spend
        if spend is None:
            return False
        if not min_threshold < spend < max_threshold:
            return False
        return not gated or customer.user_type is UserType.PAID

    return Rule(
        name="MidSpend",
        cohort_type=cohort_type,
        predicate=predicate,
        params={
            "min_threshold": min_threshold,
            "max_threshold": max_threshold,
            "require_paid_user": gated,
        },
    )


def custom_rule(
    cohort_type: CohortType,
    min_threshold: float | None = None,
    max_threshold: float | None = None,
    require_paid_user: bool | None = None,
) -> Rule:
    """Match customers within optional inclusive spend bounds.

    A customer without a daily spend fails any configured bound.
    """

    def predicate(customer: Customer) -> bool:
        spend = customer.daily_spend
        if min_threshold is not None and (spend is None or spend < min_threshold):
            return False
        if max_threshold is not None and (spend is None or spend > max_threshold):
            return False
        if require_paid_user and customer.user_type is not UserType.PAID:
            return False
        return True

    return Rule(
        name=f"CustomRule-{cohort_type.value}",
        cohort_type=cohort_type,
        predicate=predicate,
        params={
            "min_threshold": min_threshold,
            "max_threshold": max_threshold,
            "require_paid_user": bool(require_paid_user),
        },
    )


def default_rules() -> list[Rule]:
    """DailySpend -> PREMIUM, MidSpend -> NORMAL, MidSpend(PAID) -> PREMIUM."""
    return [
        threshold_above_rule(),
        spend_range_rule(CohortType.NORMAL),
        spend_range_rule(CohortType.PREMIUM),
    ]


def build_rule(config: RuleConfig) -> Rule | None:
    """Build a single rule, or return None if the entry is invalid."""
    kind = config.type.strip().lower()

    if kind == "daily-spend":
        if config.max_threshold is None:
            return threshold_above_rule()
        return threshold_above_rule(config.max_threshold)

    if kind == "mid-spend":
        return spend_range_rule(config.cohort_type or CohortType.NORMAL)

    if kind == "custom-rule":
        if config.cohort_type is None:
            logger.warning("custom_rule_missing_cohort_type")
            return None
        return custom_rule(
            config.cohort_type,
            min_threshold=config.min_threshold,
            max_threshold=config.max_threshold,
            require_paid_user=config.require_paid_user,
        )

    logger.warning("unknown_rule_type", rule_type=config.type)
    return None


def build_rules(config: RulesConfig) -> list[Rule]:
    """Build the rule list from configuration.

    Falls back to ``default_rules()`` when configuration is disabled or no
    configured entry produces a valid rule. A failing entry is logged and
    skipped.
    """
    if not config.enabled:
        logger.info("rule_configuration_disabled", using="defaults")
        return default_rules()

    rules: list[Rule] = []
    for entry in config.configurations:
        try:
            rule = build_rule(entry)
        except Exception as e:
            logger.error("rule_build_failed", rule_type=entry.type, error=str(e))
            continue
        if rule is not None:
            rules.append(rule)
            logger.info("rule_created", rule=rule.name, cohort_type=rule.cohort_type.value)

    if not rules:
        logger.warning("no_valid_rules_configured", using="defaults")
        return default_rules()

    return rules
