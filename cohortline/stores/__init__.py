"""Membership and customer stores.

- MembershipStore: which customers belong to which cohort types
- CustomerStore: raw customer snapshots
"""

from cohortline.stores.customer import CustomerStore
from cohortline.stores.inmemory import InMemoryCustomerStore, InMemoryMembershipStore
from cohortline.stores.membership import MembershipStore
from cohortline.stores.redis import RedisCustomerStore, RedisMembershipStore

__all__ = [
    "CustomerStore",
    "InMemoryCustomerStore",
    "InMemoryMembershipStore",
    "MembershipStore",
    "RedisCustomerStore",
    "RedisMembershipStore",
]
