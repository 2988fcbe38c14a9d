"""Store construction from settings."""

import redis.asyncio as redis

from cohortline.config.models.storage import StorageConfig
from cohortline.observability.logging import get_logger
from cohortline.stores.customer import CustomerStore
from cohortline.stores.inmemory import InMemoryCustomerStore, InMemoryMembershipStore
from cohortline.stores.membership import MembershipStore
from cohortline.stores.redis import RedisCustomerStore, RedisMembershipStore

logger = get_logger(__name__)


def create_redis_client(config: StorageConfig) -> redis.Redis:
    """Create a Redis client for the configured URL."""
    client = redis.from_url(
        config.redis.url,
        decode_responses=True,
        socket_timeout=config.redis.socket_timeout_seconds,
    )
    url = config.redis.url
    logger.info("redis_client_created", url=url.split("@")[-1])
    return client


def create_stores(
    config: StorageConfig,
    client: redis.Redis | None = None,
) -> tuple[MembershipStore, CustomerStore]:
    """Create the membership and customer stores for ``config.backend``.

    Args:
        config: Storage configuration
        client: Existing Redis client to reuse (redis backend only)
    """
    if config.backend == "redis":
        client = client or create_redis_client(config)
        prefix = config.redis.key_prefix
        logger.info("stores_created", backend="redis", key_prefix=prefix)
        return RedisMembershipStore(client, prefix), RedisCustomerStore(client, prefix)

    logger.info("stores_created", backend="inmemory")
    return InMemoryMembershipStore(), InMemoryCustomerStore()
