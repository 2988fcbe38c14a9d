"""Table scan consumer: periodic full scans of the customer store.

A fallback for deployments where the change stream is not available. Every
pass sees every customer, so the dedup window suppresses customers that
were classified a moment ago.
"""

from cohortline.classification.classifier import Classifier
from cohortline.config.models.ingestion import ScanConsumerConfig
from cohortline.ingestion.dedup import DedupWindow
from cohortline.ingestion.poller import PeriodicPoller
from cohortline.observability.logging import get_logger
from cohortline.observability.metrics import SCAN_ITEMS_SKIPPED
from cohortline.stores.customer import CustomerStore

logger = get_logger(__name__)


class TableScanConsumer(PeriodicPoller):
    """Reclassifies stored customers not seen within the dedup window."""

    name = "scan"

    def __init__(
        self,
        customer_store: CustomerStore,
        classifier: Classifier,
        config: ScanConsumerConfig | None = None,
        dedup: DedupWindow | None = None,
    ) -> None:
        self._config = config or ScanConsumerConfig()
        super().__init__(self._config.poll_interval_seconds)
        self._customer_store = customer_store
        self._classifier = classifier
        self._dedup = dedup or DedupWindow(self._config.dedup_window_seconds)

    @property
    def dedup(self) -> DedupWindow:
        return self._dedup

    def cycle_timeout(self) -> float:
        return self._config.processing_budget_seconds

    async def poll_once(self) -> int:
        """Scan once. Returns the number of customers classified."""
        customers = await self._customer_store.list_all()

        classified = 0
        skipped = 0
        for customer in customers:
            if not self._dedup.should_process(customer.customer_id):
                skipped += 1
                continue
            try:
                await self._classifier.classify(customer, source="scan")
                classified += 1
            except Exception as e:
                logger.error(
                    "scan_item_failed",
                    customer_id=customer.customer_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        if skipped:
            SCAN_ITEMS_SKIPPED.inc(skipped)
        evicted = self._dedup.evict_expired()

        logger.debug(
            "scan_completed",
            scanned=len(customers),
            classified=classified,
            skipped=skipped,
            evicted=evicted,
        )
        return classified

    async def on_stopped(self) -> None:
        self._dedup.clear()
