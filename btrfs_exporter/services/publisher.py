"""Maps merged device stats onto the fixed set of btrfs gauges."""

import logging
from types import MappingProxyType
from typing import Mapping, Optional

from prometheus_client import CollectorRegistry, Gauge

from ..collectors.parser import KEY_SEPARATOR
from ..utils.metrics import PublishSummary, StatSet

DEVICE_LABEL = "device"

# stat name -> help text
STAT_DESCRIPTIONS = {
    "corruption_errs": "BTRFS Corruption Errors",
    "flush_io_errs": "BTRFS Flush IO Errors",
    "generation_errs": "BTRFS Generation Errors",
    "read_io_errs": "BTRFS Read IO Errors",
    "write_io_errs": "BTRFS Write IO Errors",
}


class MetricSchema:
    """
    Closed mapping of btrfs stat names to their registered gauges.

    Built once at startup; the gauge set cannot be changed afterwards.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None, namespace: str = "btrfs"):
        """
        Register one gauge per recognized stat.

        Args:
            registry: Registry to register gauges in (a fresh one if omitted)
            namespace: Metric name prefix
        """
        self.registry = registry if registry is not None else CollectorRegistry()
        self._gauges = MappingProxyType({
            stat_name: Gauge(
                stat_name,
                description,
                [DEVICE_LABEL],
                namespace=namespace,
                registry=self.registry
            )
            for stat_name, description in STAT_DESCRIPTIONS.items()
        })

    @property
    def gauges(self) -> Mapping[str, Gauge]:
        return self._gauges

    def gauge_for(self, stat_name: str) -> Optional[Gauge]:
        return self._gauges.get(stat_name)


class MetricPublisher:
    """Sets gauge values from a merged StatSet."""

    def __init__(self, schema: MetricSchema, logger: logging.Logger):
        """
        Initialize publisher.

        Args:
            schema: Shared, read-only metric schema
            logger: Logger instance
        """
        self.schema = schema
        self.logger = logger.getChild(self.__class__.__name__)

    def publish(self, stats: StatSet) -> PublishSummary:
        """
        Update one gauge sample per recognized stat.

        Values replace the previous sample for the same device. Unknown
        stats are logged and skipped.

        Args:
            stats: Merged "{device}_{stat_name}" -> value mapping

        Returns:
            PublishSummary: Published and skipped counts
        """
        summary = PublishSummary()

        for key, value in stats.items():
            device, separator, stat_name = key.partition(KEY_SEPARATOR)
            gauge = self.schema.gauge_for(stat_name) if separator else None

            if gauge is None:
                self.logger.warning(f"{stat_name or key} stat not handled")
                summary.skipped += 1
                continue

            gauge.labels(**{DEVICE_LABEL: device}).set(value)
            summary.published += 1

        return summary
