"""Storage and AWS connection configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

StoreBackend = Literal["inmemory", "redis"]
IngestionBackend = Literal["inmemory", "aws"]


class RedisConfig(BaseModel):
    """Redis connection used by the membership and customer stores."""

    url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")
    key_prefix: str = Field(default="cohortline", description="Prefix for every key")
    socket_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Per-command socket timeout",
    )


class StorageConfig(BaseModel):
    """Membership and customer store backends."""

    backend: StoreBackend = Field(default="inmemory", description="Store backend")
    redis: RedisConfig = Field(default_factory=RedisConfig)


class AWSConfig(BaseModel):
    """AWS clients for SQS and DynamoDB Streams.

    ``endpoint_url`` points the clients at LocalStack during development.
    """

    backend: IngestionBackend = Field(
        default="inmemory",
        description="Queue/stream backend: inmemory or aws",
    )
    region: str = Field(default="us-east-1", description="AWS region")
    endpoint_url: str | None = Field(default=None, description="Endpoint override")
    connect_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Connect timeout for AWS calls",
    )
    read_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Read timeout for AWS calls; must exceed the queue long-poll wait",
    )
