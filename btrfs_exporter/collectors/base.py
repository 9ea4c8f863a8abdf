"""Base collector abstract class for mountpoint collectors."""

from abc import ABC, abstractmethod
from typing import Any
import logging
import time
from functools import wraps

from ..utils.status import OutcomeStatus
from ..utils.metrics import CollectionOutcome


class BaseCollector(ABC):
    """Abstract base class for collectors bound to one mountpoint."""

    def __init__(self, mountpoint: str, config: Any, logger: logging.Logger):
        """
        Initialize base collector.

        Args:
            mountpoint: Filesystem mount path this collector queries
            config: Collector-specific configuration
            logger: Logger instance
        """
        self.mountpoint = mountpoint
        self.config = config
        self.logger = logger.getChild(self.__class__.__name__)

    @abstractmethod
    async def collect(self) -> CollectionOutcome:
        """
        Collect stats for the mountpoint.

        Returns:
            CollectionOutcome: Collection result

        Raises:
            Exception: Any collection errors (will be caught by safe_collect)

        Note:
            Implementations should use the @safe_collect decorator so that
            no exception ever reaches the coordinator.
        """
        pass


def safe_collect(func):
    """
    Decorator turning any unexpected collector exception into an ERROR outcome.

    Args:
        func: Collector method to wrap

    Returns:
        Wrapped coroutine that never raises (except on cancellation)
    """
    @wraps(func)
    async def wrapper(self, *args, **kwargs):
        start_time = time.monotonic()
        try:
            return await func(self, *args, **kwargs)
        except Exception as e:
            self.logger.error(f"Collection failed for {self.mountpoint}: {e}", exc_info=True)
            return CollectionOutcome(
                mountpoint=self.mountpoint,
                status=OutcomeStatus.ERROR,
                message=f"Collection error: {str(e)}",
                error=str(e),
                duration=time.monotonic() - start_time
            )
    return wrapper
