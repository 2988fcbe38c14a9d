"""Customer table change stream: contract, adapters and consumer."""

from cohortline.ingestion.stream.consumer import (
    StreamConsumer,
    StreamConsumerState,
    StreamPollReport,
)
from cohortline.ingestion.stream.dynamodb import DynamoDbChangeStream
from cohortline.ingestion.stream.inmemory import InMemoryChangeStream
from cohortline.ingestion.stream.interface import (
    ChangeRecord,
    ChangeStream,
    PullResult,
    StartPosition,
)

__all__ = [
    "ChangeRecord",
    "ChangeStream",
    "DynamoDbChangeStream",
    "InMemoryChangeStream",
    "PullResult",
    "StartPosition",
    "StreamConsumer",
    "StreamConsumerState",
    "StreamPollReport",
]
