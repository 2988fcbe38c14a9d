"""Base class for consumers that poll on a fixed delay."""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any

from cohortline.observability.logging import get_logger
from cohortline.observability.metrics import POLL_CYCLE_DURATION, POLL_ERRORS

logger = get_logger(__name__)


class PeriodicPoller(ABC):
    """Runs ``poll_once`` in a background task, sleeping between cycles.

    The delay is measured from the end of one cycle to the start of the
    next, so a slow cycle never overlaps the following one. Every cycle is
    bounded by ``cycle_timeout()``; a cycle that times out or raises is
    logged and the next one starts on schedule. Each poller owns its own
    task, so a stalled poller cannot delay another.
    """

    name: str = "poller"

    def __init__(self, poll_interval_seconds: float) -> None:
        self._poll_interval_seconds = poll_interval_seconds
        self._running = False
        self._poll_task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._running

    @abstractmethod
    async def poll_once(self) -> Any:
        """Run a single poll cycle."""
        pass

    @abstractmethod
    def cycle_timeout(self) -> float:
        """Upper bound, in seconds, for one poll cycle."""
        pass

    async def prepare(self) -> None:
        """Hook run once in the background task before the first cycle."""
        return None

    async def start(self) -> None:
        """Start the background poll loop."""
        if self._running:
            logger.warning("poller_already_running", consumer=self.name)
            return

        self._running = True
        self._poll_task = asyncio.create_task(self._run(), name=f"cohortline-{self.name}")

        logger.info(
            "poller_started",
            consumer=self.name,
            poll_interval_seconds=self._poll_interval_seconds,
        )

    async def stop(self) -> None:
        """Stop the loop, cancelling any in-flight cycle or retry wait."""
        if not self._running:
            return

        self._running = False

        if self._poll_task:
            self._poll_task.cancel()
            try:
                await self._poll_task
            except asyncio.CancelledError:
                pass
            self._poll_task = None

        await self.on_stopped()
        logger.info("poller_stopped", consumer=self.name)

    async def on_stopped(self) -> None:
        """Hook run after the loop has stopped."""
        return None

    async def _run(self) -> None:
        try:
            await self.prepare()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("poller_prepare_failed", consumer=self.name, error=str(e))

        while self._running:
            await self._run_cycle()
            await asyncio.sleep(self._poll_interval_seconds)

    async def _run_cycle(self) -> None:
        started = time.monotonic()
        timeout = self.cycle_timeout()
        try:
            await asyncio.wait_for(self.poll_once(), timeout=timeout)
        except TimeoutError:
            POLL_ERRORS.labels(consumer=self.name, error_type="TimeoutError").inc()
            logger.warning("poll_cycle_timed_out", consumer=self.name, timeout_seconds=timeout)
        except Exception as e:
            POLL_ERRORS.labels(consumer=self.name, error_type=type(e).__name__).inc()
            logger.error(
                "poll_cycle_failed",
                consumer=self.name,
                error=str(e),
                error_type=type(e).__name__,
            )
        finally:
            POLL_CYCLE_DURATION.labels(consumer=self.name).observe(time.monotonic() - started)
