"""Redis implementations of MembershipStore and CustomerStore.

Key structure:
- {prefix}:membership:cohort:{COHORT_TYPE} - set of customer ids in the cohort
- {prefix}:membership:customer:{customer_id} - set of cohort types for the customer
- {prefix}:record:{customer_id} - hash holding the customer snapshot
- {prefix}:customers - set of every known customer id

Each namespace holds keys of a single Redis type, so no customer id can
make one key land on another of a different type.

SADD and HSET are idempotent, so re-delivered updates leave the same state.
"""

import redis.asyncio as redis
from redis.exceptions import RedisError

from cohortline.domain.enums import CohortType, UserType
from cohortline.domain.models import Customer
from cohortline.errors import StoreError
from cohortline.observability.logging import get_logger
from cohortline.stores.customer import CustomerStore
from cohortline.stores.membership import MembershipStore

logger = get_logger(__name__)


def _decode(value: bytes | str) -> str:
    return value.decode() if isinstance(value, bytes) else value


class RedisMembershipStore(MembershipStore):
    """Membership facts as a pair of mirrored Redis sets.

    Both sets are written in one MULTI/EXEC pipeline so the two query
    directions never disagree. Write errors are raised as StoreError; read
    errors are logged and degrade to empty results.
    """

    def __init__(self, client: redis.Redis, key_prefix: str = "cohortline") -> None:
        self._client = client
        self._prefix = key_prefix

    def _cohort_key(self, cohort_type: CohortType) -> str:
        return f"{self._prefix}:membership:cohort:{cohort_type.value}"

    def _customer_key(self, customer_id: str) -> str:
        return f"{self._prefix}:membership:customer:{customer_id}"

    async def add_customer_to_cohort_type(
        self,
        cohort_type: CohortType | None,
        customer_id: str | None,
    ) -> bool:
        if cohort_type is None or not customer_id:
            return False
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.sadd(self._cohort_key(cohort_type), customer_id)
                pipe.sadd(self._customer_key(customer_id), cohort_type.value)
                await pipe.execute()
        except RedisError as e:
            raise StoreError(
                f"Failed to add {customer_id} to {cohort_type.value}: {e}"
            ) from e
        return True

    async def is_customer_in_cohort_type(
        self,
        customer_id: str | None,
        cohort_type: CohortType | None,
    ) -> bool:
        if cohort_type is None or not customer_id:
            return False
        try:
            return bool(
                await self._client.sismember(self._cohort_key(cohort_type), customer_id)
            )
        except RedisError as e:
            logger.error(
                "membership_lookup_failed",
                customer_id=customer_id,
                cohort_type=cohort_type.value,
                error=str(e),
            )
            return False

    async def get_customer_ids_by_cohort_type(
        self,
        cohort_type: CohortType | None,
    ) -> set[str]:
        if cohort_type is None:
            return set()
        try:
            members = await self._client.smembers(self._cohort_key(cohort_type))
        except RedisError as e:
            logger.error(
                "cohort_members_lookup_failed",
                cohort_type=cohort_type.value,
                error=str(e),
            )
            return set()
        return {_decode(member) for member in members}

    async def find_cohort_types_by_customer_id(
        self,
        customer_id: str | None,
    ) -> set[CohortType]:
        if not customer_id:
            return set()
        try:
            members = await self._client.smembers(self._customer_key(customer_id))
        except RedisError as e:
            logger.error(
                "customer_cohorts_lookup_failed",
                customer_id=customer_id,
                error=str(e),
            )
            return set()

        cohort_types: set[CohortType] = set()
        for member in members:
            try:
                cohort_types.add(CohortType(_decode(member)))
            except ValueError:
                logger.warning(
                    "unknown_cohort_type_stored",
                    customer_id=customer_id,
                    value=_decode(member),
                )
        return cohort_types


class RedisCustomerStore(CustomerStore):
    """Customer snapshots as Redis hashes plus an id index set."""

    def __init__(self, client: redis.Redis, key_prefix: str = "cohortline") -> None:
        self._client = client
        self._prefix = key_prefix

    def _customer_key(self, customer_id: str) -> str:
        return f"{self._prefix}:record:{customer_id}"

    def _index_key(self) -> str:
        return f"{self._prefix}:customers"

    async def save(self, customer: Customer) -> Customer:
        mapping: dict[str, str] = {"customerId": customer.customer_id}
        if customer.daily_spend is not None:
            mapping["dailySpend"] = repr(customer.daily_spend)
        if customer.user_type is not None:
            mapping["userType"] = customer.user_type.value

        key = self._customer_key(customer.customer_id)
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                # Replace the whole snapshot so cleared fields don't linger
                pipe.delete(key)
                pipe.hset(key, mapping=mapping)
                pipe.sadd(self._index_key(), customer.customer_id)
                await pipe.execute()
        except RedisError as e:
            raise StoreError(f"Failed to save customer {customer.customer_id}: {e}") from e
        return customer

    async def get(self, customer_id: str | None) -> Customer | None:
        if not customer_id:
            return None
        try:
            raw = await self._client.hgetall(self._customer_key(customer_id))
        except RedisError as e:
            logger.error("customer_lookup_failed", customer_id=customer_id, error=str(e))
            return None
        if not raw:
            return None
        return self._from_hash(raw)

    async def list_all(self) -> list[Customer]:
        try:
            ids = await self._client.smembers(self._index_key())
        except RedisError as e:
            raise StoreError(f"Failed to list customers: {e}") from e

        customers: list[Customer] = []
        for customer_id in sorted(_decode(i) for i in ids):
            customer = await self.get(customer_id)
            if customer is not None:
                customers.append(customer)
        return customers

    @staticmethod
    def _from_hash(raw: dict) -> Customer:
        fields = {_decode(k): _decode(v) for k, v in raw.items()}
        spend = fields.get("dailySpend")
        user_type = fields.get("userType")
        return Customer(
            customer_id=fields["customerId"],
            daily_spend=float(spend) if spend is not None else None,
            user_type=UserType(user_type) if user_type else None,
        )
