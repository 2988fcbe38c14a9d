"""Ingestion: payload parsing, queue and stream adapters, and consumers."""

from cohortline.ingestion.dedup import DedupWindow
from cohortline.ingestion.factory import create_change_stream, create_message_queue
from cohortline.ingestion.payloads import (
    customer_from_fields,
    customer_from_image,
    customer_from_message,
)
from cohortline.ingestion.poller import PeriodicPoller
from cohortline.ingestion.queue import QueueConsumer
from cohortline.ingestion.scan import TableScanConsumer
from cohortline.ingestion.stream import StreamConsumer

__all__ = [
    "DedupWindow",
    "PeriodicPoller",
    "QueueConsumer",
    "StreamConsumer",
    "TableScanConsumer",
    "create_change_stream",
    "create_message_queue",
    "customer_from_fields",
    "customer_from_image",
    "customer_from_message",
]
