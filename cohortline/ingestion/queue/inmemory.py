"""In-memory MessageQueue for tests and local runs."""

import asyncio
from collections import deque
from uuid import uuid4

from cohortline.errors import EndpointUnavailableError
from cohortline.ingestion.queue.interface import MessageQueue, QueueMessage


class _Queue:
    def __init__(self) -> None:
        self.pending: deque[tuple[str, str]] = deque()
        self.in_flight: dict[str, tuple[str, str]] = {}
        self.arrived = asyncio.Event()


class InMemoryMessageQueue(MessageQueue):
    """Queues held in process memory.

    Received messages move to an in-flight set until deleted.
    ``redeliver_unacknowledged`` plays the role of a visibility timeout
    expiring, making in-flight messages receivable again.
    """

    def __init__(self, auto_create: bool = True) -> None:
        self._queues: dict[str, _Queue] = {}
        self._auto_create = auto_create

    def create_queue(self, queue_name: str) -> str:
        self._queues.setdefault(queue_name, _Queue())
        return queue_name

    def send(self, queue_name: str, body: str) -> str:
        """Enqueue a message body, returning its message id."""
        queue = self._queues.setdefault(queue_name, _Queue())
        message_id = str(uuid4())
        queue.pending.append((message_id, body))
        queue.arrived.set()
        return message_id

    def pending_count(self, queue_name: str) -> int:
        queue = self._queues.get(queue_name)
        return len(queue.pending) if queue else 0

    def in_flight_count(self, queue_name: str) -> int:
        queue = self._queues.get(queue_name)
        return len(queue.in_flight) if queue else 0

    def redeliver_unacknowledged(self, queue_name: str) -> int:
        """Return in-flight messages to the queue. Returns how many moved."""
        queue = self._queues.get(queue_name)
        if queue is None:
            return 0
        moved = list(queue.in_flight.values())
        queue.in_flight.clear()
        queue.pending.extend(moved)
        if moved:
            queue.arrived.set()
        return len(moved)

    async def resolve_endpoint(self, queue_name: str) -> str:
        if queue_name not in self._queues:
            if not self._auto_create:
                raise EndpointUnavailableError(f"Queue not found: {queue_name}")
            self.create_queue(queue_name)
        return queue_name

    async def receive(
        self,
        endpoint: str,
        max_messages: int,
        wait_seconds: int,
    ) -> list[QueueMessage]:
        queue = self._queues.get(endpoint)
        if queue is None:
            raise EndpointUnavailableError(f"Queue not found: {endpoint}")

        if not queue.pending and wait_seconds > 0:
            queue.arrived.clear()
            try:
                await asyncio.wait_for(queue.arrived.wait(), timeout=wait_seconds)
            except TimeoutError:
                return []

        messages: list[QueueMessage] = []
        while queue.pending and len(messages) < max_messages:
            message_id, body = queue.pending.popleft()
            receipt_handle = str(uuid4())
            queue.in_flight[receipt_handle] = (message_id, body)
            messages.append(
                QueueMessage(message_id=message_id, body=body, receipt_handle=receipt_handle)
            )
        return messages

    async def delete(self, endpoint: str, message: QueueMessage) -> None:
        queue = self._queues.get(endpoint)
        if queue is not None:
            queue.in_flight.pop(message.receipt_handle, None)
