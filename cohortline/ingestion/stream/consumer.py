"""Stream consumer: follows the customer table's change stream.

Discovery resolves the table's live stream and opens one cursor per shard
at the trim horizon, so nothing is missed at the cost of replaying retained
history after a restart. Each poll cycle then pulls a bounded batch from
every shard and classifies the post-images of created and updated rows.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, wait_exponential

from cohortline.classification.classifier import Classifier
from cohortline.config.models.ingestion import StreamConsumerConfig
from cohortline.domain.enums import ChangeKind
from cohortline.domain.models import ShardCursor
from cohortline.errors import CursorExpiredError, MalformedPayloadError, StreamUnavailableError
from cohortline.ingestion.payloads import customer_from_image
from cohortline.ingestion.poller import PeriodicPoller
from cohortline.ingestion.stream.interface import ChangeRecord, ChangeStream, StartPosition
from cohortline.observability.logging import get_logger
from cohortline.observability.metrics import STREAM_RECORDS

logger = get_logger(__name__)

_CLASSIFIED_KINDS = frozenset({ChangeKind.CREATED, ChangeKind.UPDATED})


class StreamConsumerState(str, Enum):
    """Lifecycle of the stream consumer."""

    UNINITIALIZED = "uninitialized"
    DISCOVERING = "discovering"
    TRACKING = "tracking"
    POLLING = "polling"
    STOPPED = "stopped"


@dataclass
class StreamPollReport:
    """Outcome of one stream poll cycle."""

    shards_polled: int = 0
    records: int = 0
    classified: int = 0
    skipped: int = 0
    shard_errors: int = 0


class StreamConsumer(PeriodicPoller):
    """Polls every tracked shard and classifies changed customers.

    Cursors are owned by this instance: created by discovery, advanced by
    each pull, and discarded on stop. A cursor whose position is None
    belongs to a closed shard that has been read to its end.
    """

    name = "stream"

    def __init__(
        self,
        stream: ChangeStream,
        classifier: Classifier,
        config: StreamConsumerConfig | None = None,
    ) -> None:
        self._config = config or StreamConsumerConfig()
        super().__init__(self._config.poll_interval_seconds)
        self._stream = stream
        self._classifier = classifier
        self._cursors: dict[str, ShardCursor] = {}
        self._state = StreamConsumerState.UNINITIALIZED
        self._rediscover = False
        # Shards listed by the last discovery
        self._listed_shards = 0

    @property
    def state(self) -> StreamConsumerState:
        return self._state

    @property
    def cursors(self) -> dict[str, ShardCursor]:
        """Snapshot of the tracked shard cursors."""
        return dict(self._cursors)

    def cycle_timeout(self) -> float:
        # A pull per tracked shard, plus a full rediscovery: one listing and
        # one cursor per listed shard
        calls = len(self._cursors) + 1 + max(self._listed_shards, len(self._cursors), 1)
        return self._config.call_timeout_seconds * calls + self._config.processing_budget_seconds

    async def prepare(self) -> None:
        """Wait out the initial delay, then discover until the stream is visible."""
        if self._config.initial_delay_seconds > 0:
            await asyncio.sleep(self._config.initial_delay_seconds)
        await self.discover_with_retry()

    async def discover_with_retry(self) -> int:
        """Run discovery, retrying with exponential backoff until it succeeds.

        Only cancellation ends the retries; ``stop()`` cancels them.
        """
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(Exception),
            wait=wait_exponential(
                multiplier=self._config.discovery_backoff_initial_seconds,
                max=self._config.discovery_backoff_max_seconds,
            ),
            before_sleep=self._log_discovery_retry,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self.discover()
        return 0

    def _log_discovery_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        # Expected while the table is still being created
        logger.info(
            "stream_discovery_retry",
            table_name=self._config.table_name,
            attempt=retry_state.attempt_number,
            retry_in_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
            error=str(error) if error else None,
        )

    async def discover(self) -> int:
        """Start tracking any shard that has no cursor yet.

        Shards already tracked, including exhausted ones, keep their cursor.

        Returns:
            Number of shards newly tracked

        Raises:
            StreamUnavailableError: If the stream is not visible or has no shards
        """
        self._state = StreamConsumerState.DISCOVERING
        table_name = self._config.table_name
        timeout = self._config.call_timeout_seconds

        shard_ids = await asyncio.wait_for(self._stream.list_shards(table_name), timeout)
        if not shard_ids:
            raise StreamUnavailableError(f"Stream for {table_name} has no shards")

        self._listed_shards = len(shard_ids)

        # Exhausted shards that the stream no longer lists have been trimmed
        listed = set(shard_ids)
        for shard_id, cursor in list(self._cursors.items()):
            if cursor.position is None and shard_id not in listed:
                del self._cursors[shard_id]

        added = 0
        for shard_id in shard_ids:
            if shard_id in self._cursors:
                continue
            position = await asyncio.wait_for(
                self._stream.get_cursor(table_name, shard_id, StartPosition.TRIM_HORIZON),
                timeout,
            )
            self._cursors[shard_id] = ShardCursor(shard_id=shard_id, position=position)
            added += 1

        self._rediscover = False
        self._state = StreamConsumerState.TRACKING
        logger.info(
            "stream_shards_discovered",
            table_name=table_name,
            shard_count=len(shard_ids),
            new_shards=added,
        )
        return added

    async def poll_once(self) -> StreamPollReport:
        """Pull one batch from every live shard."""
        report = StreamPollReport()

        if self._rediscover or not self._cursors:
            try:
                await self.discover()
            except Exception as e:
                logger.info(
                    "stream_rediscovery_failed",
                    table_name=self._config.table_name,
                    error=str(e),
                )
                if not self._cursors:
                    return report
                self._state = StreamConsumerState.TRACKING

        self._state = StreamConsumerState.POLLING
        try:
            for cursor in list(self._cursors.values()):
                if cursor.position is None:
                    continue
                await self._poll_shard(cursor, report)
        finally:
            if self._state is StreamConsumerState.POLLING:
                self._state = StreamConsumerState.TRACKING

        if report.records or report.shard_errors:
            logger.info(
                "stream_batch_processed",
                table_name=self._config.table_name,
                shards_polled=report.shards_polled,
                records=report.records,
                classified=report.classified,
                skipped=report.skipped,
                shard_errors=report.shard_errors,
            )
        return report

    async def _poll_shard(self, cursor: ShardCursor, report: StreamPollReport) -> None:
        shard_id = cursor.shard_id
        try:
            result = await asyncio.wait_for(
                self._stream.pull(cursor.position, self._config.batch_limit),
                self._config.call_timeout_seconds,
            )
        except CursorExpiredError as e:
            # The stored cursor is useless; reopen the shard on rediscovery
            logger.warning("stream_cursor_expired", shard_id=shard_id, error=str(e))
            self._cursors.pop(shard_id, None)
            self._rediscover = True
            report.shard_errors += 1
            return
        except Exception as e:
            # Keep the cursor; the next tick retries from the same position
            logger.warning(
                "stream_pull_failed",
                shard_id=shard_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            report.shard_errors += 1
            return

        report.shards_polled += 1
        for record in result.records:
            report.records += 1
            if await self._process_record(shard_id, record):
                report.classified += 1
            else:
                report.skipped += 1

        self._cursors[shard_id] = ShardCursor(shard_id=shard_id, position=result.next_cursor)
        if result.next_cursor is None:
            logger.info("stream_shard_exhausted", shard_id=shard_id)
            self._rediscover = True

    async def _process_record(self, shard_id: str, record: ChangeRecord) -> bool:
        kind = record.change_kind
        STREAM_RECORDS.labels(change_kind=kind.value if kind else "unknown").inc()
        if kind not in _CLASSIFIED_KINDS:
            return False

        try:
            customer = customer_from_image(record.post_image)
        except MalformedPayloadError as e:
            logger.warning(
                "stream_record_skipped",
                shard_id=shard_id,
                sequence_number=record.sequence_number,
                error=str(e),
                field=e.field,
            )
            return False
        except Exception as e:
            logger.error(
                "stream_record_failed",
                shard_id=shard_id,
                sequence_number=record.sequence_number,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        try:
            await self._classifier.classify(customer, source="stream")
        except Exception as e:
            logger.error(
                "stream_record_failed",
                shard_id=shard_id,
                customer_id=customer.customer_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
        return True

    async def on_stopped(self) -> None:
        self._cursors.clear()
        self._rediscover = False
        self._listed_shards = 0
        self._state = StreamConsumerState.STOPPED
