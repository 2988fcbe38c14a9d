"""Queue and change-stream construction from settings."""

from typing import Any

import boto3
from botocore.config import Config

from cohortline.config.models.storage import AWSConfig
from cohortline.ingestion.queue.inmemory import InMemoryMessageQueue
from cohortline.ingestion.queue.interface import MessageQueue
from cohortline.ingestion.queue.sqs import SqsMessageQueue
from cohortline.ingestion.stream.dynamodb import DynamoDbChangeStream
from cohortline.ingestion.stream.inmemory import InMemoryChangeStream
from cohortline.ingestion.stream.interface import ChangeStream
from cohortline.observability.logging import get_logger

logger = get_logger(__name__)


def create_aws_client(service_name: str, config: AWSConfig) -> Any:
    """Create a boto3 client with bounded connect and read timeouts.

    Credentials come from the standard AWS provider chain.
    """
    client_config = Config(
        region_name=config.region,
        connect_timeout=config.connect_timeout_seconds,
        read_timeout=config.read_timeout_seconds,
        retries={"max_attempts": 2, "mode": "standard"},
    )
    client = boto3.client(
        service_name,
        endpoint_url=config.endpoint_url,
        config=client_config,
    )
    logger.info(
        "aws_client_created",
        service=service_name,
        region=config.region,
        endpoint_url=config.endpoint_url,
    )
    return client


def create_message_queue(config: AWSConfig) -> MessageQueue:
    """Create the customer-update queue adapter for ``config.backend``."""
    if config.backend == "aws":
        return SqsMessageQueue(create_aws_client("sqs", config))
    return InMemoryMessageQueue()


def create_change_stream(config: AWSConfig) -> ChangeStream:
    """Create the change-stream adapter for ``config.backend``."""
    if config.backend == "aws":
        return DynamoDbChangeStream(create_aws_client("dynamodbstreams", config))
    return InMemoryChangeStream()
