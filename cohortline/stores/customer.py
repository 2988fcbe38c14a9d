"""CustomerStore abstract interface.

Raw customer snapshots keyed by customer id. Writes are plain upserts: the
last snapshot written wins.
"""

from abc import ABC, abstractmethod

from cohortline.domain.models import Customer


class CustomerStore(ABC):
    """Abstract interface for customer record storage."""

    @abstractmethod
    async def save(self, customer: Customer) -> Customer:
        """Upsert a customer snapshot.

        Raises:
            StoreError: If the backend rejects the write
        """
        pass

    @abstractmethod
    async def get(self, customer_id: str | None) -> Customer | None:
        """Get a customer by id, or None if unknown."""
        pass

    @abstractmethod
    async def list_all(self) -> list[Customer]:
        """Every stored customer. Used by the table scan consumer."""
        pass
