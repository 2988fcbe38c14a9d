"""Ingestion configuration models.

Intervals, batch sizes and timeouts for the queue consumer, the change
stream consumer and the optional table scan fallback.
"""

from pydantic import BaseModel, Field


class QueueConsumerConfig(BaseModel):
    """Customer-update queue polling."""

    enabled: bool = Field(default=True, description="Run the queue consumer")
    queue_name: str = Field(default="customer-updates", description="Queue to poll")
    poll_interval_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Delay between poll cycles",
    )
    max_messages: int = Field(
        default=10,
        ge=1,
        le=10,
        description="Messages received per cycle (SQS caps this at 10)",
    )
    wait_time_seconds: int = Field(
        default=5,
        ge=0,
        le=20,
        description="Long-poll wait per receive call",
    )
    processing_budget_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Time allowed for processing a batch, on top of the wait",
    )


class StreamConsumerConfig(BaseModel):
    """Customer table change stream polling."""

    enabled: bool = Field(default=True, description="Run the stream consumer")
    table_name: str = Field(default="Customers", description="Table whose stream is watched")
    poll_interval_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Delay between poll cycles",
    )
    batch_limit: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Records pulled per shard per cycle",
    )
    initial_delay_seconds: float = Field(
        default=5.0,
        ge=0,
        description="Wait before the first discovery attempt",
    )
    discovery_backoff_initial_seconds: float = Field(
        default=1.0,
        gt=0,
        description="First retry delay when the stream is not visible yet",
    )
    discovery_backoff_max_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound for the discovery retry delay",
    )
    call_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for a single stream call",
    )
    processing_budget_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Time allowed for classifying a cycle's records, on top of call timeouts",
    )


class ScanConsumerConfig(BaseModel):
    """Table scan fallback for deployments without a change stream."""

    enabled: bool = Field(default=False, description="Run the scan consumer")
    poll_interval_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Delay between scans",
    )
    dedup_window_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Skip customers reclassified within this window",
    )
    processing_budget_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Time allowed for one full scan",
    )


class IngestionConfig(BaseModel):
    """Top-level ingestion configuration."""

    queue: QueueConsumerConfig = Field(default_factory=QueueConsumerConfig)
    stream: StreamConsumerConfig = Field(default_factory=StreamConsumerConfig)
    scan: ScanConsumerConfig = Field(default_factory=ScanConsumerConfig)
