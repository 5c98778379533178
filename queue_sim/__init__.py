"""Single-server (M/M/1) queue simulation.

The core is a hand-rolled discrete-event loop (``engine``) fed by an explicit
random-variate source (``variates``) and a bounded FIFO waiting line
(``waiting_line``). Reporting, the event trace and the SimPy reference model
sit around it.
"""

from queue_sim.engine import SimulationEngine, SimulationResult
from queue_sim.errors import (
    ConfigurationError,
    QueueOverflowError,
    QueueUnderflowError,
    SimulationError,
)
from queue_sim.variates import SequenceVariateSource, VariateSource
from queue_sim.waiting_line import WaitingLine

__all__ = [
    "ConfigurationError",
    "QueueOverflowError",
    "QueueUnderflowError",
    "SequenceVariateSource",
    "SimulationEngine",
    "SimulationError",
    "SimulationResult",
    "VariateSource",
    "WaitingLine",
]
