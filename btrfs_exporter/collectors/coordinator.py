"""Concurrent fan-out of device stats collection across mountpoints."""

import asyncio
import logging
import time
from typing import List

from ..config.models import CommandConfig
from ..utils.status import OutcomeStatus
from ..utils.metrics import CollectionOutcome, CycleResult, StatSet
from .device_collector import DeviceStatsCollector


class CollectionCoordinator:
    """
    Runs one DeviceStatsCollector per mountpoint concurrently and merges results.

    Every collector is awaited, so one cycle takes roughly as long as the
    slowest mountpoint (bounded by the command timeout). Failed mountpoints
    contribute nothing to the merged StatSet.
    """

    def __init__(self, mountpoints: List[str], config: CommandConfig, logger: logging.Logger):
        """
        Initialize coordinator.

        Args:
            mountpoints: Mount paths to collect from
            config: Command configuration shared by all collectors
            logger: Logger instance
        """
        self.config = config
        self.logger = logger.getChild(self.__class__.__name__)
        self.collectors = [
            DeviceStatsCollector(mountpoint, config, logger)
            for mountpoint in dict.fromkeys(mountpoints)
        ]

    async def collect(self) -> CycleResult:
        """
        Collect from all mountpoints and merge.

        Returns:
            CycleResult: Merged stats plus one outcome per mountpoint
        """
        start_time = time.monotonic()
        self.logger.debug(f"Collecting device stats from {len(self.collectors)} mountpoint(s)")

        tasks = [collector.collect() for collector in self.collectors]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        outcomes = []
        for collector, result in zip(self.collectors, results):
            if isinstance(result, BaseException):
                # safe_collect normally prevents this
                self.logger.error(f"Collector for {collector.mountpoint} raised: {result}")
                result = CollectionOutcome(
                    mountpoint=collector.mountpoint,
                    status=OutcomeStatus.ERROR,
                    message=f"Collection error: {result}",
                    error=str(result)
                )
            outcomes.append(result)

        return CycleResult(
            stats=self.merge(outcomes),
            outcomes=outcomes,
            duration=time.monotonic() - start_time
        )

    def merge(self, outcomes: List[CollectionOutcome]) -> StatSet:
        """
        Union the stats of all successful outcomes.

        On key collision the later mountpoint (in configuration order) wins.

        Args:
            outcomes: Per-mountpoint outcomes

        Returns:
            StatSet: Merged stats
        """
        merged = {}
        for outcome in outcomes:
            if not outcome.succeeded:
                continue
            for key, value in outcome.stats.items():
                if key in merged:
                    self.logger.debug(
                        f"Duplicate stat {key} from {outcome.mountpoint}, overriding {merged[key]} with {value}"
                    )
                merged[key] = value
        return merged
