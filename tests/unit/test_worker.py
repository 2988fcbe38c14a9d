"""Unit tests for bootstrap and the ingestion worker."""

import asyncio
import json

import pytest

from cohortline.bootstrap import bootstrap, create_consumers
from cohortline.config.settings import Settings
from cohortline.domain.enums import ChangeKind, CohortType
from cohortline.ingestion.queue.consumer import QueueConsumer
from cohortline.ingestion.queue.inmemory import InMemoryMessageQueue
from cohortline.ingestion.scan import TableScanConsumer
from cohortline.ingestion.stream.consumer import StreamConsumer
from cohortline.ingestion.stream.inmemory import InMemoryChangeStream
from cohortline.worker import Worker


@pytest.fixture
def settings() -> Settings:
    return Settings(
        ingestion={
            "queue": {"poll_interval_seconds": 0.01, "wait_time_seconds": 0},
            "stream": {"poll_interval_seconds": 0.01, "initial_delay_seconds": 0},
        },
    )


class TestBootstrap:
    """Tests for component wiring."""

    def test_builds_default_components(self, settings):
        components = bootstrap(settings)

        assert len(components.rule_set) == 3
        assert isinstance(components.queue, InMemoryMessageQueue)
        assert isinstance(components.stream, InMemoryChangeStream)

    def test_uses_configured_rules(self):
        settings = Settings(
            rules={"configurations": [{"type": "custom-rule", "cohort_type": "VIP"}]}
        )

        components = bootstrap(settings)

        assert [r.cohort_type for r in components.rule_set.rules] == [CohortType.VIP]

    def test_creates_enabled_consumers(self, settings):
        consumers = create_consumers(bootstrap(settings))

        assert [type(c) for c in consumers] == [QueueConsumer, StreamConsumer]

    def test_scan_consumer_is_opt_in(self):
        settings = Settings(
            ingestion={
                "queue": {"enabled": False},
                "stream": {"enabled": False},
                "scan": {"enabled": True},
            }
        )

        consumers = create_consumers(bootstrap(settings))

        assert [type(c) for c in consumers] == [TableScanConsumer]


class TestWorker:
    """Tests for the worker lifecycle."""

    async def test_both_paths_feed_the_same_store(self, settings):
        """The same update via queue and stream yields one set of facts."""
        queue = InMemoryMessageQueue()
        stream = InMemoryChangeStream()
        stream.enable_stream("Customers")
        components = bootstrap(settings, queue=queue, stream=stream)
        worker = Worker(create_consumers(components))
        payload = {"customerId": "c", "dailySpend": 4000.0, "userType": "PAID"}

        queue.send("customer-updates", json.dumps(payload))
        stream.append("Customers", ChangeKind.UPDATED, payload)

        await worker.start()
        await asyncio.sleep(0.2)
        await worker.stop()

        service = components.service
        assert await service.get_customer_cohort_types("c") == {
            CohortType.NORMAL,
            CohortType.PREMIUM,
        }
        assert await components.customer_store.get("c") is not None
        assert all(not c.running for c in worker.consumers)

    async def test_stop_continues_after_a_failure(self, settings):
        class BrokenConsumer(QueueConsumer):
            async def stop(self) -> None:
                raise RuntimeError("stuck")

        components = bootstrap(settings)
        broken = BrokenConsumer(
            components.queue, components.customer_store, components.classifier
        )
        healthy = StreamConsumer(components.stream, components.classifier)
        worker = Worker([broken, healthy])

        await healthy.start()
        await worker.stop()

        assert not healthy.running
