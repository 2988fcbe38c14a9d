"""Domain types: customers, cohort types and membership facts."""

from cohortline.domain.enums import ChangeKind, CohortType, UserType
from cohortline.domain.models import Customer, MembershipFact, ShardCursor

__all__ = [
    "ChangeKind",
    "CohortType",
    "Customer",
    "MembershipFact",
    "ShardCursor",
    "UserType",
]
