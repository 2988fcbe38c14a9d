"""Closed enumerations shared across the pipeline."""

from enum import Enum


class CohortType(str, Enum):
    """Cohort a customer can be classified into.

    The set is fixed; adding a member requires a release.
    """

    FRAUD = "FRAUD"
    PREMIUM = "PREMIUM"
    NORMAL = "NORMAL"
    VIP = "VIP"


class UserType(str, Enum):
    """Billing tier of a customer."""

    PAID = "PAID"
    FREE = "FREE"


class ChangeKind(str, Enum):
    """Kind of row-level change carried by a change-stream record."""

    CREATED = "created"
    UPDATED = "updated"
    REMOVED = "removed"

    @classmethod
    def from_event_name(cls, event_name: str) -> "ChangeKind | None":
        """Map a DynamoDB stream event name (INSERT/MODIFY/REMOVE) or a
        native kind name onto a ChangeKind. Unknown names map to None."""
        normalized = (event_name or "").strip().upper()
        return _EVENT_NAMES.get(normalized)


_EVENT_NAMES: dict[str, ChangeKind] = {
    "INSERT": ChangeKind.CREATED,
    "CREATED": ChangeKind.CREATED,
    "MODIFY": ChangeKind.UPDATED,
    "UPDATED": ChangeKind.UPDATED,
    "REMOVE": ChangeKind.REMOVED,
    "REMOVED": ChangeKind.REMOVED,
}
