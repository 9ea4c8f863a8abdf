"""Data structures passed between collectors, coordinator and publisher."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
import time
from .status import OutcomeStatus

# Flattened "{device}_{stat_name}" -> counter value
StatSet = Dict[str, float]


@dataclass
class CollectionOutcome:
    """Result of one device stats invocation for a single mountpoint."""

    mountpoint: str
    status: OutcomeStatus
    stats: StatSet = field(default_factory=dict)
    message: str = ""  # Human-readable summary
    error: Optional[str] = None
    exit_code: Optional[int] = None
    duration: float = 0.0
    timestamp: Optional[float] = None

    def __post_init__(self):
        """Set timestamp if not provided."""
        if self.timestamp is None:
            self.timestamp = time.time()

    @property
    def succeeded(self) -> bool:
        return self.status.is_success


@dataclass
class CycleResult:
    """Merged result of one collection cycle across all mountpoints."""

    stats: StatSet
    outcomes: List[CollectionOutcome]
    duration: float = 0.0

    @property
    def failed(self) -> List[CollectionOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]


@dataclass
class PublishSummary:
    """Counts from one publish pass over a StatSet."""

    published: int = 0
    skipped: int = 0
