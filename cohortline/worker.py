"""Ingestion worker entrypoint.

Runs the enabled consumers as independent background tasks until SIGINT or
SIGTERM.

Usage:
    # CLI command (defined in pyproject.toml)
    cohortline-worker

    # Programmatic usage
    from cohortline.worker import run_worker
    await run_worker()
"""

import asyncio
import signal
import sys

from cohortline.bootstrap import bootstrap, create_consumers
from cohortline.config import get_settings
from cohortline.ingestion.poller import PeriodicPoller
from cohortline.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)


class Worker:
    """Starts and stops a group of consumers together.

    Consumers share nothing but the stores; each runs on its own timer.
    """

    def __init__(self, consumers: list[PeriodicPoller]) -> None:
        self._consumers = consumers

    @property
    def consumers(self) -> list[PeriodicPoller]:
        return list(self._consumers)

    async def start(self) -> None:
        for consumer in self._consumers:
            await consumer.start()
        logger.info("worker_started", consumers=[c.name for c in self._consumers])

    async def stop(self) -> None:
        """Stop every consumer, even if stopping one of them fails."""
        for consumer in self._consumers:
            try:
                await consumer.stop()
            except Exception as e:
                logger.error("consumer_stop_failed", consumer=consumer.name, error=str(e))
        logger.info("worker_stopped")


async def run_worker() -> None:
    """Build components, start the consumers and block until shutdown."""
    settings = get_settings()

    logging_config = settings.observability.logging
    setup_logging(
        level=logging_config.level,
        format=logging_config.format,
        redact_secrets=logging_config.redact_secrets,
    )

    components = bootstrap(settings)
    worker = Worker(create_consumers(components))
    if not worker.consumers:
        logger.warning("no_consumers_enabled")

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def signal_handler(sig: signal.Signals) -> None:
        logger.info("shutdown_signal_received", signal=sig.name)
        shutdown_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler, sig)

    await worker.start()
    try:
        await shutdown_event.wait()
    finally:
        await worker.stop()


def main() -> None:
    """CLI entrypoint for the ingestion worker."""
    try:
        asyncio.run(run_worker())
    except KeyboardInterrupt:
        logger.info("worker_interrupted")
        sys.exit(0)
    except Exception as e:
        logger.error(
            "worker_startup_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
