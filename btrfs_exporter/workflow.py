"""Collection workflow wiring the coordinator to the metric publisher."""

import logging

from .collectors.coordinator import CollectionCoordinator
from .config.models import ExporterConfig
from .services.publisher import MetricPublisher, MetricSchema
from .utils.metrics import CycleResult, PublishSummary
from .utils.logger import setup_logger


class CollectionWorkflow:
    """
    Builds the collection pipeline from configuration.

    The two phases are exposed separately so the scrape gate can track
    which one is running.
    """

    def __init__(self, config: ExporterConfig, schema: MetricSchema, logger: logging.Logger = None):
        """
        Initialize collection workflow.

        Args:
            config: Exporter configuration
            schema: Metric schema the publisher writes to
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or setup_logger("workflow")
        self.schema = schema

        self.coordinator = CollectionCoordinator(
            config.mountpoints,
            config.command,
            self.logger
        )
        self.publisher = MetricPublisher(schema, self.logger)

        self.logger.info(
            f"Initialized collection for {len(self.coordinator.collectors)} mountpoint(s): "
            f"{', '.join(config.mountpoints)}"
        )

    async def collect(self) -> CycleResult:
        """Fan out to every mountpoint and merge the results."""
        cycle = await self.coordinator.collect()

        for outcome in cycle.failed:
            self.logger.warning(
                f"No stats from {outcome.mountpoint}: {outcome.message}",
                extra={"mountpoint": outcome.mountpoint, "status": outcome.status.value}
            )

        self.logger.debug(f"Stats collected: {cycle.stats}")
        return cycle

    def publish(self, cycle: CycleResult) -> PublishSummary:
        """Write a collected cycle to the gauges."""
        return self.publisher.publish(cycle.stats)
