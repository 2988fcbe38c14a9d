"""Unit tests for the queue adapters."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from cohortline.errors import EndpointUnavailableError
from cohortline.ingestion.queue.inmemory import InMemoryMessageQueue
from cohortline.ingestion.queue.interface import QueueMessage
from cohortline.ingestion.queue.sqs import SqsMessageQueue

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/000000000000/customer-updates"


def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class TestInMemoryMessageQueue:
    """Tests for InMemoryMessageQueue."""

    async def test_receive_moves_messages_in_flight(self):
        queue = InMemoryMessageQueue()
        queue.send("q", "one")
        queue.send("q", "two")

        messages = await queue.receive("q", max_messages=10, wait_seconds=0)

        assert [m.body for m in messages] == ["one", "two"]
        assert queue.pending_count("q") == 0
        assert queue.in_flight_count("q") == 2

    async def test_delete_acknowledges(self):
        queue = InMemoryMessageQueue()
        queue.send("q", "one")
        [message] = await queue.receive("q", max_messages=1, wait_seconds=0)

        await queue.delete("q", message)

        assert queue.in_flight_count("q") == 0
        assert queue.redeliver_unacknowledged("q") == 0

    async def test_empty_receive_waits_then_returns_nothing(self):
        queue = InMemoryMessageQueue()
        queue.create_queue("q")

        assert await queue.receive("q", max_messages=10, wait_seconds=0) == []

    async def test_no_auto_create(self):
        queue = InMemoryMessageQueue(auto_create=False)

        with pytest.raises(EndpointUnavailableError):
            await queue.resolve_endpoint("q")


class TestSqsMessageQueue:
    """Tests for SqsMessageQueue against a mocked boto3 client."""

    async def test_resolves_and_caches_url(self):
        client = MagicMock()
        client.get_queue_url.return_value = {"QueueUrl": QUEUE_URL}
        queue = SqsMessageQueue(client)

        assert await queue.resolve_endpoint("customer-updates") == QUEUE_URL
        assert await queue.resolve_endpoint("customer-updates") == QUEUE_URL

        client.get_queue_url.assert_called_once_with(QueueName="customer-updates")

    async def test_creates_missing_queue(self):
        client = MagicMock()
        client.get_queue_url.side_effect = _client_error(
            "AWS.SimpleQueueService.NonExistentQueue", "GetQueueUrl"
        )
        client.create_queue.return_value = {"QueueUrl": QUEUE_URL}
        queue = SqsMessageQueue(client)

        assert await queue.resolve_endpoint("customer-updates") == QUEUE_URL
        client.create_queue.assert_called_once_with(QueueName="customer-updates")

    async def test_create_failure_is_endpoint_unavailable(self):
        client = MagicMock()
        client.get_queue_url.side_effect = _client_error("QueueDoesNotExist", "GetQueueUrl")
        client.create_queue.side_effect = _client_error("AccessDenied", "CreateQueue")
        queue = SqsMessageQueue(client)

        with pytest.raises(EndpointUnavailableError):
            await queue.resolve_endpoint("customer-updates")

    async def test_connection_failure_is_endpoint_unavailable(self):
        client = MagicMock()
        client.get_queue_url.side_effect = EndpointConnectionError(endpoint_url="http://x")
        queue = SqsMessageQueue(client)

        with pytest.raises(EndpointUnavailableError):
            await queue.resolve_endpoint("customer-updates")

    async def test_receive_maps_messages(self):
        client = MagicMock()
        client.receive_message.return_value = {
            "Messages": [
                {"MessageId": "m-1", "Body": "{}", "ReceiptHandle": "rh-1"},
            ]
        }
        queue = SqsMessageQueue(client)

        messages = await queue.receive(QUEUE_URL, max_messages=10, wait_seconds=5)

        assert messages == [QueueMessage(message_id="m-1", body="{}", receipt_handle="rh-1")]
        client.receive_message.assert_called_once_with(
            QueueUrl=QUEUE_URL,
            MaxNumberOfMessages=10,
            WaitTimeSeconds=5,
        )

    async def test_receive_without_messages(self):
        client = MagicMock()
        client.receive_message.return_value = {}
        queue = SqsMessageQueue(client)

        assert await queue.receive(QUEUE_URL, max_messages=10, wait_seconds=5) == []

    async def test_deleted_queue_drops_cached_url(self):
        client = MagicMock()
        client.get_queue_url.return_value = {"QueueUrl": QUEUE_URL}
        client.receive_message.side_effect = _client_error(
            "AWS.SimpleQueueService.NonExistentQueue", "ReceiveMessage"
        )
        queue = SqsMessageQueue(client)
        await queue.resolve_endpoint("customer-updates")

        with pytest.raises(EndpointUnavailableError):
            await queue.receive(QUEUE_URL, max_messages=10, wait_seconds=5)

        await queue.resolve_endpoint("customer-updates")
        assert client.get_queue_url.call_count == 2

    async def test_delete_uses_receipt_handle(self):
        client = MagicMock()
        queue = SqsMessageQueue(client)

        await queue.delete(QUEUE_URL, QueueMessage("m-1", "{}", "rh-1"))

        client.delete_message.assert_called_once_with(QueueUrl=QUEUE_URL, ReceiptHandle="rh-1")
