"""Customer-update queue: contract, adapters and consumer."""

from cohortline.ingestion.queue.consumer import PollReport, QueueConsumer, QueueConsumerState
from cohortline.ingestion.queue.inmemory import InMemoryMessageQueue
from cohortline.ingestion.queue.interface import MessageQueue, QueueMessage
from cohortline.ingestion.queue.sqs import SqsMessageQueue

__all__ = [
    "InMemoryMessageQueue",
    "MessageQueue",
    "PollReport",
    "QueueConsumer",
    "QueueConsumerState",
    "QueueMessage",
    "SqsMessageQueue",
]
