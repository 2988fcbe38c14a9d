"""CohortService: the classification and query facade exposed to callers."""

from cohortline.classification.classifier import Classifier
from cohortline.domain.enums import CohortType
from cohortline.domain.models import Customer
from cohortline.rules.models import Rule
from cohortline.stores.membership import MembershipStore


class CohortService:
    """Entry point for the query surface and administrative tooling.

    Answers the three query shapes (is X in Y, cohorts of X, members of Y)
    and runs manual reclassification through the same classifier the
    consumers use. Missing arguments yield False or empty results.
    """

    def __init__(self, classifier: Classifier, membership_store: MembershipStore) -> None:
        self._classifier = classifier
        self._membership_store = membership_store

    async def classify(self, customer: Customer | None) -> set[CohortType]:
        """Classify a customer synchronously (manual reclassification)."""
        return await self._classifier.classify(customer, source="manual")

    def add_rule(self, rule: Rule) -> None:
        """Append a rule to the live rule set."""
        self._classifier.rule_set.add_rule(rule)

    async def is_customer_in_cohort_type(
        self,
        customer_id: str | None,
        cohort_type: CohortType | None,
    ) -> bool:
        return await self._membership_store.is_customer_in_cohort_type(
            customer_id, cohort_type
        )

    async def get_customer_cohort_types(self, customer_id: str | None) -> set[CohortType]:
        return await self._membership_store.find_cohort_types_by_customer_id(customer_id)

    async def get_customer_ids_by_cohort_type(
        self,
        cohort_type: CohortType | None,
    ) -> set[str]:
        return await self._membership_store.get_customer_ids_by_cohort_type(cohort_type)
