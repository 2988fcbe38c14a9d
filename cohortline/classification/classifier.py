"""Classifier: applies the rule set to one customer and persists matches."""

from cohortline.domain.enums import CohortType
from cohortline.domain.models import Customer
from cohortline.observability.logging import get_logger
from cohortline.observability.metrics import (
    CUSTOMERS_CLASSIFIED,
    MEMBERSHIP_WRITE_FAILURES,
    MEMBERSHIPS_WRITTEN,
)
from cohortline.rules.rule_set import RuleSet
from cohortline.stores.membership import MembershipStore

logger = get_logger(__name__)


class Classifier:
    """Classify customers and record their cohort memberships.

    Stateless between calls. Each call commits its own writes before
    returning; nothing is batched. Because the result depends only on the
    customer snapshot and the rule set, and membership writes are
    idempotent, the same update may be classified any number of times and
    from any ingestion path.
    """

    def __init__(self, rule_set: RuleSet, membership_store: MembershipStore) -> None:
        self._rule_set = rule_set
        self._membership_store = membership_store

    @property
    def rule_set(self) -> RuleSet:
        return self._rule_set

    async def classify(
        self,
        customer: Customer | None,
        *,
        source: str = "manual",
    ) -> set[CohortType]:
        """Classify ``customer`` and write one membership fact per match.

        A write failure for one cohort type is logged and does not stop the
        writes for the others; the matched set is returned regardless.

        Args:
            customer: Snapshot to classify; None yields an empty set
            source: Ingestion path, for logs and metrics

        Returns:
            Cohort types the customer matched
        """
        if customer is None:
            logger.warning("classify_null_customer", source=source)
            return set()

        matched = self._rule_set.classify(customer)
        CUSTOMERS_CLASSIFIED.labels(source=source).inc()

        for cohort_type in sorted(matched, key=lambda c: c.value):
            await self._record(customer.customer_id, cohort_type)

        logger.info(
            "customer_classified",
            customer_id=customer.customer_id,
            cohort_types=sorted(c.value for c in matched),
            source=source,
        )
        return matched

    async def _record(self, customer_id: str, cohort_type: CohortType) -> None:
        try:
            added = await self._membership_store.add_customer_to_cohort_type(
                cohort_type, customer_id
            )
        except Exception as e:
            MEMBERSHIP_WRITE_FAILURES.labels(cohort_type=cohort_type.value).inc()
            logger.error(
                "membership_write_failed",
                customer_id=customer_id,
                cohort_type=cohort_type.value,
                error=str(e),
            )
            return

        if added:
            MEMBERSHIPS_WRITTEN.labels(cohort_type=cohort_type.value).inc()
        else:
            MEMBERSHIP_WRITE_FAILURES.labels(cohort_type=cohort_type.value).inc()
            logger.warning(
                "membership_write_rejected",
                customer_id=customer_id,
                cohort_type=cohort_type.value,
            )
