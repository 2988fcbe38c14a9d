"""Queue consumer: polls customer-update messages and classifies them."""

from dataclasses import dataclass
from enum import Enum

from cohortline.classification.classifier import Classifier
from cohortline.config.models.ingestion import QueueConsumerConfig
from cohortline.errors import EndpointUnavailableError
from cohortline.ingestion.payloads import customer_from_message
from cohortline.ingestion.poller import PeriodicPoller
from cohortline.ingestion.queue.interface import MessageQueue, QueueMessage
from cohortline.observability.logging import get_logger
from cohortline.observability.metrics import QUEUE_MESSAGES
from cohortline.stores.customer import CustomerStore

logger = get_logger(__name__)


class QueueConsumerState(str, Enum):
    """Where the consumer is within its cycle."""

    IDLE = "idle"
    POLLING = "polling"
    DRAINING = "draining"


@dataclass
class PollReport:
    """Outcome of one queue poll cycle."""

    received: int = 0
    processed: int = 0
    failed: int = 0
    skipped: bool = False


class QueueConsumer(PeriodicPoller):
    """Consumes customer-update messages.

    Per message: parse, upsert the raw customer, classify, and only then
    delete. A message that fails any step stays unacknowledged and is
    redelivered later; the rest of the batch carries on.
    """

    name = "queue"

    def __init__(
        self,
        queue: MessageQueue,
        customer_store: CustomerStore,
        classifier: Classifier,
        config: QueueConsumerConfig | None = None,
    ) -> None:
        self._config = config or QueueConsumerConfig()
        super().__init__(self._config.poll_interval_seconds)
        self._queue = queue
        self._customer_store = customer_store
        self._classifier = classifier
        self._state = QueueConsumerState.IDLE

    @property
    def state(self) -> QueueConsumerState:
        return self._state

    def cycle_timeout(self) -> float:
        return self._config.wait_time_seconds + self._config.processing_budget_seconds

    async def poll_once(self) -> PollReport:
        """Receive one batch and process it."""
        report = PollReport()
        queue_name = self._config.queue_name

        try:
            endpoint = await self._queue.resolve_endpoint(queue_name)
        except EndpointUnavailableError as e:
            # Expected while the queue is still being provisioned
            logger.debug("queue_endpoint_unavailable", queue_name=queue_name, error=str(e))
            report.skipped = True
            return report

        self._state = QueueConsumerState.POLLING
        try:
            try:
                messages = await self._queue.receive(
                    endpoint,
                    self._config.max_messages,
                    self._config.wait_time_seconds,
                )
            except EndpointUnavailableError as e:
                logger.debug("queue_endpoint_unavailable", queue_name=queue_name, error=str(e))
                report.skipped = True
                return report
            except Exception as e:
                logger.warning(
                    "queue_receive_failed",
                    queue_name=queue_name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                report.skipped = True
                return report

            report.received = len(messages)
            if not messages:
                return report

            self._state = QueueConsumerState.DRAINING
            for message in messages:
                if await self._handle(endpoint, message):
                    report.processed += 1
                else:
                    report.failed += 1
        finally:
            self._state = QueueConsumerState.IDLE

        logger.info(
            "queue_batch_processed",
            queue_name=queue_name,
            received=report.received,
            processed=report.processed,
            failed=report.failed,
        )
        return report

    async def _handle(self, endpoint: str, message: QueueMessage) -> bool:
        try:
            customer = customer_from_message(message.body)
            await self._customer_store.save(customer)
            cohort_types = await self._classifier.classify(customer, source="queue")
        except Exception as e:
            QUEUE_MESSAGES.labels(outcome="failed").inc()
            logger.error(
                "queue_message_failed",
                message_id=message.message_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        try:
            await self._queue.delete(endpoint, message)
        except Exception as e:
            # Redelivery is harmless: the next pass writes the same facts
            logger.warning(
                "queue_message_delete_failed",
                message_id=message.message_id,
                error=str(e),
            )

        QUEUE_MESSAGES.labels(outcome="processed").inc()
        logger.debug(
            "queue_message_processed",
            message_id=message.message_id,
            customer_id=customer.customer_id,
            cohort_types=sorted(c.value for c in cohort_types),
        )
        return True
