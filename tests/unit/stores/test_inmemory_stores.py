"""Unit tests for the in-memory stores."""

import asyncio

import pytest

from cohortline.domain.enums import CohortType, UserType
from cohortline.stores.inmemory import InMemoryCustomerStore, InMemoryMembershipStore


@pytest.fixture
def store() -> InMemoryMembershipStore:
    return InMemoryMembershipStore()


class TestInMemoryMembershipStore:
    """Tests for InMemoryMembershipStore."""

    async def test_add_and_query_both_directions(self, store):
        assert await store.add_customer_to_cohort_type(CohortType.VIP, "c-1")

        assert await store.is_customer_in_cohort_type("c-1", CohortType.VIP)
        assert await store.get_customer_ids_by_cohort_type(CohortType.VIP) == {"c-1"}
        assert await store.find_cohort_types_by_customer_id("c-1") == {CohortType.VIP}

    async def test_re_adding_is_idempotent(self, store):
        await store.add_customer_to_cohort_type(CohortType.VIP, "c-1")
        assert await store.add_customer_to_cohort_type(CohortType.VIP, "c-1")

        assert len(store.facts()) == 1

    async def test_missing_arguments(self, store):
        assert await store.add_customer_to_cohort_type(None, "c-1") is False
        assert await store.add_customer_to_cohort_type(CohortType.VIP, None) is False
        assert await store.is_customer_in_cohort_type(None, CohortType.VIP) is False
        assert await store.get_customer_ids_by_cohort_type(None) == set()
        assert await store.find_cohort_types_by_customer_id("") == set()
        assert store.facts() == set()

    async def test_unknown_keys_are_empty(self, store):
        assert await store.is_customer_in_cohort_type("nobody", CohortType.FRAUD) is False
        assert await store.get_customer_ids_by_cohort_type(CohortType.FRAUD) == set()

    async def test_concurrent_writers(self, store):
        await asyncio.gather(*(
            store.add_customer_to_cohort_type(cohort_type, f"c-{i % 5}")
            for i in range(50)
            for cohort_type in (CohortType.NORMAL, CohortType.PREMIUM)
        ))

        assert len(store.facts()) == 10
        assert await store.get_customer_ids_by_cohort_type(CohortType.NORMAL) == {
            f"c-{i}" for i in range(5)
        }

    async def test_returned_sets_are_copies(self, store):
        await store.add_customer_to_cohort_type(CohortType.VIP, "c-1")

        ids = await store.get_customer_ids_by_cohort_type(CohortType.VIP)
        ids.add("intruder")

        assert await store.get_customer_ids_by_cohort_type(CohortType.VIP) == {"c-1"}


class TestInMemoryCustomerStore:
    """Tests for InMemoryCustomerStore."""

    async def test_save_is_an_upsert(self, make_customer):
        store = InMemoryCustomerStore()

        await store.save(make_customer("c-1", 100.0, UserType.FREE))
        await store.save(make_customer("c-1", 200.0, UserType.PAID))

        customer = await store.get("c-1")
        assert customer is not None
        assert customer.daily_spend == 200.0
        assert customer.user_type is UserType.PAID
        assert len(await store.list_all()) == 1

    async def test_get_missing(self):
        store = InMemoryCustomerStore()

        assert await store.get("nobody") is None
        assert await store.get(None) is None
