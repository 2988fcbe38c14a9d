"""Amazon SQS implementation of MessageQueue.

boto3 clients are blocking, so each call runs in a worker thread via
``asyncio.to_thread``.
"""

import asyncio
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from cohortline.errors import EndpointUnavailableError
from cohortline.ingestion.queue.interface import MessageQueue, QueueMessage
from cohortline.observability.logging import get_logger

logger = get_logger(__name__)

_QUEUE_MISSING_CODES = frozenset({
    "AWS.SimpleQueueService.NonExistentQueue",
    "QueueDoesNotExist",
})


class SqsMessageQueue(MessageQueue):
    """SQS-backed customer-update queue.

    Queue URLs are cached after the first successful resolution. A missing
    queue is created on demand.
    """

    def __init__(self, client: Any) -> None:
        """Initialize with a boto3 SQS client."""
        self._client = client
        self._urls: dict[str, str] = {}

    async def resolve_endpoint(self, queue_name: str) -> str:
        cached = self._urls.get(queue_name)
        if cached:
            return cached

        try:
            response = await asyncio.to_thread(self._client.get_queue_url, QueueName=queue_name)
            url = response["QueueUrl"]
            logger.debug("queue_url_resolved", queue_name=queue_name, queue_url=url)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") not in _QUEUE_MISSING_CODES:
                raise EndpointUnavailableError(f"Cannot resolve queue {queue_name}: {e}") from e
            url = await self._create(queue_name)
        except BotoCoreError as e:
            raise EndpointUnavailableError(f"Cannot resolve queue {queue_name}: {e}") from e

        self._urls[queue_name] = url
        return url

    async def _create(self, queue_name: str) -> str:
        logger.debug("queue_missing_creating", queue_name=queue_name)
        try:
            response = await asyncio.to_thread(self._client.create_queue, QueueName=queue_name)
        except (BotoCoreError, ClientError) as e:
            raise EndpointUnavailableError(f"Cannot create queue {queue_name}: {e}") from e
        url = response["QueueUrl"]
        logger.info("queue_created", queue_name=queue_name, queue_url=url)
        return url

    async def receive(
        self,
        endpoint: str,
        max_messages: int,
        wait_seconds: int,
    ) -> list[QueueMessage]:
        try:
            response = await asyncio.to_thread(
                self._client.receive_message,
                QueueUrl=endpoint,
                MaxNumberOfMessages=max_messages,
                WaitTimeSeconds=wait_seconds,
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _QUEUE_MISSING_CODES:
                # Deleted under us; resolve (and recreate) on the next cycle
                self._urls = {k: v for k, v in self._urls.items() if v != endpoint}
                raise EndpointUnavailableError(f"Queue disappeared: {endpoint}") from e
            raise

        return [
            QueueMessage(
                message_id=raw["MessageId"],
                body=raw.get("Body", ""),
                receipt_handle=raw["ReceiptHandle"],
            )
            for raw in response.get("Messages", [])
        ]

    async def delete(self, endpoint: str, message: QueueMessage) -> None:
        await asyncio.to_thread(
            self._client.delete_message,
            QueueUrl=endpoint,
            ReceiptHandle=message.receipt_handle,
        )
