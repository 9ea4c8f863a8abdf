"""Scrape gate: runs one collect/publish cycle per scrape request."""

import asyncio
import logging
import time
from enum import Enum

from prometheus_client import generate_latest


class GateState(Enum):
    """Collection cycle state."""

    IDLE = "idle"
    COLLECTING = "collecting"
    PUBLISHING = "publishing"


class ScrapeGate:
    """
    Serializes scrape cycles: IDLE -> COLLECTING -> PUBLISHING -> IDLE.

    A scrape that arrives while a cycle is running waits for the lock and
    then runs its own cycle, so every response reflects a collection that
    started after its request arrived. The registry is rendered before the
    lock is released, so no response can see a half-published cycle.
    """

    def __init__(self, workflow, logger: logging.Logger):
        """
        Initialize scrape gate.

        Args:
            workflow: CollectionWorkflow providing collect() and publish()
            logger: Logger instance
        """
        self.workflow = workflow
        self.registry = workflow.schema.registry
        self.logger = logger.getChild(self.__class__.__name__)
        self.state = GateState.IDLE
        self.cycles = 0
        # Created on first scrape so it binds to the serving event loop
        self._lock = None

    def _get_lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    def _transition(self, state: GateState) -> None:
        self.logger.debug(f"Scrape gate {self.state.value} -> {state.value}")
        self.state = state

    async def scrape(self) -> bytes:
        """
        Run one collection cycle and render the registry.

        Returns:
            bytes: Prometheus text exposition

        Raises:
            Exception: Only for errors outside per-mountpoint collection
        """
        async with self._get_lock():
            start_time = time.monotonic()
            try:
                self._transition(GateState.COLLECTING)
                cycle = await self.workflow.collect()

                self._transition(GateState.PUBLISHING)
                summary = self.workflow.publish(cycle)
                output = generate_latest(self.registry)

            except Exception:
                self.logger.error("Scrape cycle failed", exc_info=True)
                raise

            finally:
                self._transition(GateState.IDLE)

            self.cycles += 1
            self.logger.info(
                f"{len(cycle.stats)} btrfs stats collected and served",
                extra={
                    "published": summary.published,
                    "skipped": summary.skipped,
                    "failed_mountpoints": [outcome.mountpoint for outcome in cycle.failed],
                    "duration": round(time.monotonic() - start_time, 3)
                }
            )
            return output
