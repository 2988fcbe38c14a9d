"""Component wiring shared by the worker and the API."""

from dataclasses import dataclass

import redis.asyncio as redis

from cohortline.classification.classifier import Classifier
from cohortline.classification.service import CohortService
from cohortline.config.settings import Settings
from cohortline.ingestion.factory import create_change_stream, create_message_queue
from cohortline.ingestion.poller import PeriodicPoller
from cohortline.ingestion.queue.consumer import QueueConsumer
from cohortline.ingestion.queue.interface import MessageQueue
from cohortline.ingestion.scan import TableScanConsumer
from cohortline.ingestion.stream.consumer import StreamConsumer
from cohortline.ingestion.stream.interface import ChangeStream
from cohortline.observability.logging import get_logger
from cohortline.rules.factory import build_rules
from cohortline.rules.rule_set import RuleSet
from cohortline.stores.customer import CustomerStore
from cohortline.stores.factory import create_stores
from cohortline.stores.membership import MembershipStore

logger = get_logger(__name__)


@dataclass
class Components:
    """Everything one process needs, built once at startup."""

    settings: Settings
    rule_set: RuleSet
    membership_store: MembershipStore
    customer_store: CustomerStore
    classifier: Classifier
    service: CohortService
    queue: MessageQueue
    stream: ChangeStream


def bootstrap(
    settings: Settings,
    *,
    redis_client: redis.Redis | None = None,
    queue: MessageQueue | None = None,
    stream: ChangeStream | None = None,
) -> Components:
    """Build stores, rules, classifier, service and ingestion adapters.

    Args:
        settings: Loaded settings
        redis_client: Existing Redis client (redis storage backend only)
        queue: Queue adapter to use instead of the configured one
        stream: Change-stream adapter to use instead of the configured one
    """
    membership_store, customer_store = create_stores(settings.storage, client=redis_client)
    rule_set = RuleSet(build_rules(settings.rules))
    classifier = Classifier(rule_set, membership_store)
    service = CohortService(classifier, membership_store)

    components = Components(
        settings=settings,
        rule_set=rule_set,
        membership_store=membership_store,
        customer_store=customer_store,
        classifier=classifier,
        service=service,
        queue=queue or create_message_queue(settings.aws),
        stream=stream or create_change_stream(settings.aws),
    )
    logger.info(
        "components_created",
        rule_count=len(rule_set),
        storage_backend=settings.storage.backend,
        ingestion_backend=settings.aws.backend,
    )
    return components


def create_consumers(components: Components) -> list[PeriodicPoller]:
    """Create the consumers enabled in settings."""
    config = components.settings.ingestion
    consumers: list[PeriodicPoller] = []

    if config.queue.enabled:
        consumers.append(
            QueueConsumer(
                components.queue,
                components.customer_store,
                components.classifier,
                config.queue,
            )
        )
    if config.stream.enabled:
        consumers.append(StreamConsumer(components.stream, components.classifier, config.stream))
    if config.scan.enabled:
        consumers.append(
            TableScanConsumer(components.customer_store, components.classifier, config.scan)
        )

    return consumers
