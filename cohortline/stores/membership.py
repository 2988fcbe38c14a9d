"""MembershipStore abstract interface.

Durable mapping between customers and cohort types. Membership is
monotonic: facts are only ever added, never removed.
"""

from abc import ABC, abstractmethod

from cohortline.domain.enums import CohortType


class MembershipStore(ABC):
    """Abstract interface for cohort membership storage.

    Contract relied on by the classifier and the query surface:

    - ``add_customer_to_cohort_type`` is idempotent and safe to call
      concurrently for the same or different keys; re-adding an existing
      fact succeeds without raising.
    - Every operation degrades to ``False`` or an empty set on a missing
      argument instead of raising.
    - Reads may briefly lag writes made by another process.
    """

    @abstractmethod
    async def add_customer_to_cohort_type(
        self,
        cohort_type: CohortType | None,
        customer_id: str | None,
    ) -> bool:
        """Record that ``customer_id`` belongs to ``cohort_type``.

        Returns:
            True if the fact is stored (new or already present), False if
            an argument was missing.
        """
        pass

    @abstractmethod
    async def is_customer_in_cohort_type(
        self,
        customer_id: str | None,
        cohort_type: CohortType | None,
    ) -> bool:
        """Check whether the fact (customer_id, cohort_type) exists."""
        pass

    @abstractmethod
    async def get_customer_ids_by_cohort_type(
        self,
        cohort_type: CohortType | None,
    ) -> set[str]:
        """All customers that belong to ``cohort_type``."""
        pass

    @abstractmethod
    async def find_cohort_types_by_customer_id(
        self,
        customer_id: str | None,
    ) -> set[CohortType]:
        """All cohort types ``customer_id`` belongs to."""
        pass
