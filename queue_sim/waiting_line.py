"""
Bounded FIFO waiting line holding the arrival timestamps of queued customers.
"""

from collections import deque
import logging
import config
from queue_sim.errors import QueueOverflowError, QueueUnderflowError

log = logging.getLogger(__name__)


class WaitingLine:
    """First-in-first-out store of arrival times with a fixed capacity."""

    def __init__(self, capacity: int = config.WAITING_LINE_CAPACITY):
        """Initialize an empty waiting line.

        Args:
            capacity: Maximum number of queued customers
        """
        if capacity <= 0:
            raise ValueError(f"capacity must be > 0, got {capacity}")
        self.capacity = capacity
        self._arrivals = deque()

    def enqueue(self, timestamp: float):
        """Append an arrival time at the tail.

        Args:
            timestamp: Arrival time of the queued customer

        Raises:
            QueueOverflowError: The line already holds `capacity` customers
        """
        if self.is_full():
            log.error(
                "Waiting line full (%d/%d) at t=%.4f",
                len(self._arrivals), self.capacity, timestamp,
            )
            raise QueueOverflowError(len(self._arrivals), self.capacity)
        self._arrivals.append(timestamp)

    def dequeue(self) -> float:
        """Remove and return the arrival time at the head.

        Raises:
            QueueUnderflowError: The line is empty
        """
        if not self._arrivals:
            raise QueueUnderflowError("dequeue from an empty waiting line")
        return self._arrivals.popleft()

    def is_full(self) -> bool:
        return len(self._arrivals) >= self.capacity

    def is_empty(self) -> bool:
        return not self._arrivals

    def size(self) -> int:
        return len(self._arrivals)

    def __len__(self) -> int:
        return len(self._arrivals)
