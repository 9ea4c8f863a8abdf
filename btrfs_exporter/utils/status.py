"""Collection outcome status enumeration."""

from enum import Enum


class OutcomeStatus(Enum):
    """Result of collecting device stats from one mountpoint."""

    OK = "ok"
    FAILED = "failed"
    TIMEOUT = "timeout"
    ERROR = "error"

    @property
    def is_success(self) -> bool:
        """
        Whether the outcome carries usable stats.

        Returns:
            bool: True only for OK
        """
        return self is OutcomeStatus.OK
