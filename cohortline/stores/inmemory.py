"""In-memory implementations of MembershipStore and CustomerStore.

Used by tests and single-process development runs. Not durable.
"""

import asyncio
from collections import defaultdict

from cohortline.domain.enums import CohortType
from cohortline.domain.models import Customer, MembershipFact
from cohortline.stores.customer import CustomerStore
from cohortline.stores.membership import MembershipStore


class InMemoryMembershipStore(MembershipStore):
    """Membership facts held in two mirrored indexes.

    The lock keeps both indexes in step when several consumers write
    concurrently.
    """

    def __init__(self) -> None:
        self._by_cohort: dict[CohortType, set[str]] = defaultdict(set)
        self._by_customer: dict[str, set[CohortType]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def add_customer_to_cohort_type(
        self,
        cohort_type: CohortType | None,
        customer_id: str | None,
    ) -> bool:
        if cohort_type is None or not customer_id:
            return False
        async with self._lock:
            self._by_cohort[cohort_type].add(customer_id)
            self._by_customer[customer_id].add(cohort_type)
        return True

    async def is_customer_in_cohort_type(
        self,
        customer_id: str | None,
        cohort_type: CohortType | None,
    ) -> bool:
        if cohort_type is None or not customer_id:
            return False
        return cohort_type in self._by_customer.get(customer_id, ())

    async def get_customer_ids_by_cohort_type(
        self,
        cohort_type: CohortType | None,
    ) -> set[str]:
        if cohort_type is None:
            return set()
        return set(self._by_cohort.get(cohort_type, ()))

    async def find_cohort_types_by_customer_id(
        self,
        customer_id: str | None,
    ) -> set[CohortType]:
        if not customer_id:
            return set()
        return set(self._by_customer.get(customer_id, ()))

    def facts(self) -> set[MembershipFact]:
        """Every stored fact (test utility)."""
        return {
            MembershipFact(customer_id=customer_id, cohort_type=cohort_type)
            for customer_id, cohort_types in self._by_customer.items()
            for cohort_type in cohort_types
        }

    def clear(self) -> None:
        """Drop all facts (test utility)."""
        self._by_cohort.clear()
        self._by_customer.clear()


class InMemoryCustomerStore(CustomerStore):
    """Customer snapshots in a dict keyed by customer id."""

    def __init__(self) -> None:
        self._customers: dict[str, Customer] = {}

    async def save(self, customer: Customer) -> Customer:
        self._customers[customer.customer_id] = customer
        return customer

    async def get(self, customer_id: str | None) -> Customer | None:
        if not customer_id:
            return None
        return self._customers.get(customer_id)

    async def list_all(self) -> list[Customer]:
        return list(self._customers.values())
