"""Latest-reading cache shared between the sampling thread and queries.

The sampler is the only writer. Each update swaps in a new immutable
Snapshot under a lock, so a reader sees either the old or the new
reading, never a mix of the two.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from core.calibration import Reading

logger = logging.getLogger(__name__)


class NoDataAvailable(Exception):
    """No successful sample has been taken yet."""

    def __init__(self, message: str = "No data"):
        super().__init__(message)


@dataclass(frozen=True)
class Snapshot:
    reading: Reading
    dewpoint: Optional[float]
    timestamp: float


class ReadingCache:
    """Holds the most recent successful sample."""

    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot: Optional[Snapshot] = None

    def update(self, reading: Reading, dewpoint: Optional[float], timestamp: float) -> Snapshot:
        """Publish a new sample. Timestamps never go backwards."""
        with self._lock:
            if self._snapshot is not None and timestamp < self._snapshot.timestamp:
                logger.debug(
                    "Clamping out-of-order timestamp %.3f to %.3f",
                    timestamp, self._snapshot.timestamp,
                )
                timestamp = self._snapshot.timestamp
            self._snapshot = Snapshot(reading, dewpoint, timestamp)
            return self._snapshot

    def latest(self) -> Snapshot:
        """Return the current snapshot or raise NoDataAvailable."""
        snapshot = self._snapshot
        if snapshot is None:
            raise NoDataAvailable()
        return snapshot

    @property
    def has_data(self) -> bool:
        return self._snapshot is not None
