"""
Exceptions raised by the simulation core.
"""


class SimulationError(Exception):
    """Base class for simulation failures."""


class ConfigurationError(SimulationError, ValueError):
    """Invalid simulation parameters; raised before the run starts."""


class QueueOverflowError(SimulationError):
    """The waiting line is full. The run cannot continue without losing arrivals."""

    def __init__(self, queue_length: int, capacity: int):
        self.queue_length = queue_length
        self.capacity = capacity
        super().__init__(
            f"waiting line overflow: {queue_length} queued, capacity {capacity}; "
            "increase the waiting line capacity"
        )


class QueueUnderflowError(SimulationError):
    """Dequeue from an empty waiting line (engine invariant violated)."""
