"""MessageQueue abstract interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class QueueMessage:
    """A received message.

    ``receipt_handle`` identifies this particular delivery and is what
    ``delete`` acknowledges; a redelivered message gets a new handle.
    """

    message_id: str
    body: str
    receipt_handle: str


class MessageQueue(ABC):
    """Abstract interface for the customer-update queue.

    Delivery is at-least-once: a message that is received but not deleted
    becomes visible again later.
    """

    @abstractmethod
    async def resolve_endpoint(self, queue_name: str) -> str:
        """Return the endpoint for ``queue_name``, creating the queue if missing.

        Raises:
            EndpointUnavailableError: If the queue can be neither found nor created
        """
        pass

    @abstractmethod
    async def receive(
        self,
        endpoint: str,
        max_messages: int,
        wait_seconds: int,
    ) -> list[QueueMessage]:
        """Receive up to ``max_messages``, long-polling up to ``wait_seconds``."""
        pass

    @abstractmethod
    async def delete(self, endpoint: str, message: QueueMessage) -> None:
        """Acknowledge ``message`` so it is not redelivered."""
        pass
