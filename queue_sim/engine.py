"""
Discrete-event simulation engine for a single-server FIFO queue.

The engine alternates between selecting the earlier of the next arrival and
the next departure and applying it. Time-weighted statistics are integrated
over each interval using the state that held during it, before the event's
transition is applied. An event scheduled past the horizon never executes:
the clock is advanced to the horizon and the run stops.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Optional
import logging
import math
import numbers
import config
from queue_sim.errors import ConfigurationError, QueueOverflowError, SimulationError
from queue_sim.event_log import Event, EventLog
from queue_sim.variates import VariateSource
from queue_sim.waiting_line import WaitingLine

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationResult:
    """Read-only snapshot of a finished run."""
    duration: float
    customers_served: int
    max_queue_length: int
    avg_wait: float
    avg_queue_length: float
    utilization: float
    throughput: float
    stability_warning: bool

    def as_dict(self) -> Dict:
        return asdict(self)


def _check_positive(name: str, value: float):
    if not isinstance(value, numbers.Real) or not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive finite number, got {value!r}")


class SimulationEngine:
    """M/M/1 queue simulated event by event up to a fixed horizon."""

    def __init__(
        self,
        arrival_rate: float = config.ARRIVAL_RATE,
        service_rate: float = config.SERVICE_RATE,
        horizon: float = config.SIM_DURATION,
        variates: Optional[VariateSource] = None,
        capacity: int = config.WAITING_LINE_CAPACITY,
        event_log: Optional[EventLog] = None,
    ):
        """Initialize the engine and schedule the first arrival.

        Args:
            arrival_rate: Poisson arrival rate (customers per time unit)
            service_rate: Exponential service rate (customers per time unit)
            horizon: Simulated time at which the run stops
            variates: Source of random durations; a fresh unseeded one if None
            capacity: Waiting line capacity
            event_log: Optional trace receiving one Event per step

        Raises:
            ConfigurationError: A rate, the horizon or the capacity is not positive
        """
        _check_positive("arrival_rate", arrival_rate)
        _check_positive("service_rate", service_rate)
        _check_positive("horizon", horizon)
        if not isinstance(capacity, numbers.Integral) or capacity <= 0:
            raise ConfigurationError(f"capacity must be a positive integer, got {capacity!r}")
        capacity = int(capacity)

        self.arrival_rate = float(arrival_rate)
        self.service_rate = float(service_rate)
        self.horizon = float(horizon)
        self.variates = variates if variates is not None else VariateSource()
        self.waiting_line = WaitingLine(capacity)
        self.event_log = event_log

        # Simulation state
        self.clock = 0.0
        self.server_busy = False
        self.next_arrival_time = self.variates.exponential(self.arrival_rate)
        self.next_departure_time: Optional[float] = None
        self.max_queue_length = 0
        self.finished = False

        # Running statistics
        self.area_under_queue_length = 0.0
        self.busy_time = 0.0
        self.total_wait_time = 0.0
        self.customers_served = 0
        self.arrivals = 0

        self.stability_warning = self.arrival_rate >= self.service_rate
        if self.stability_warning:
            log.warning(
                "Arrival rate %.4f >= service rate %.4f: the queue may grow without bound",
                self.arrival_rate, self.service_rate,
            )

    @property
    def queue_length(self) -> int:
        """Number of customers waiting (not in service)."""
        return self.waiting_line.size()

    def _advance(self, t: float) -> float:
        """Integrate statistics over [clock, t) and move the clock to t.

        Returns:
            Elapsed time
        """
        elapsed = t - self.clock
        self.area_under_queue_length += self.queue_length * elapsed
        if self.server_busy:
            self.busy_time += elapsed
        self.clock = t
        return elapsed

    def _start_service(self):
        self.next_departure_time = self.clock + self.variates.exponential(self.service_rate)

    def _record(self, event_type: str, elapsed: float, queue_before: int, busy_before: bool) -> Event:
        event = Event(
            timestamp=self.clock,
            event_type=event_type,
            elapsed=elapsed,
            queue_length_before=queue_before,
            server_busy_before=busy_before,
            queue_length=self.queue_length,
            server_busy=self.server_busy,
            customers_served=self.customers_served,
        )
        if self.event_log is not None:
            self.event_log.log_event(event)
        return event

    def _process_arrival(self) -> Event:
        queue_before, busy_before = self.queue_length, self.server_busy
        if busy_before and self.waiting_line.is_full():
            # Abort before touching any state; the run cannot be resumed
            self.finished = True
            log.error(
                "Waiting line full (%d/%d) at t=%.4f",
                queue_before, self.waiting_line.capacity, self.next_arrival_time,
            )
            raise QueueOverflowError(queue_before, self.waiting_line.capacity)

        elapsed = self._advance(self.next_arrival_time)
        self.arrivals += 1

        if not self.server_busy:
            # Served immediately, wait is zero
            self.server_busy = True
            self._start_service()
        else:
            self.waiting_line.enqueue(self.clock)
            self.max_queue_length = max(self.max_queue_length, self.queue_length)

        self.next_arrival_time = self.clock + self.variates.exponential(self.arrival_rate)
        return self._record("arrival", elapsed, queue_before, busy_before)

    def _process_departure(self) -> Event:
        queue_before, busy_before = self.queue_length, self.server_busy
        elapsed = self._advance(self.next_departure_time)
        self.customers_served += 1

        if not self.waiting_line.is_empty():
            arrival_time = self.waiting_line.dequeue()
            self.total_wait_time += self.clock - arrival_time
            self._start_service()
        else:
            self.server_busy = False
            self.next_departure_time = None

        return self._record("departure", elapsed, queue_before, busy_before)

    def _truncate(self) -> Event:
        queue_before, busy_before = self.queue_length, self.server_busy
        elapsed = self._advance(self.horizon)
        self.finished = True
        log.debug("Horizon %.4f reached, %d customers served", self.horizon, self.customers_served)
        return self._record("horizon", elapsed, queue_before, busy_before)

    def step(self) -> Optional[Event]:
        """Select and apply the next event.

        Returns:
            The Event recorded for this step, or None once the run is over
        """
        if self.finished:
            return None
        if self.clock >= self.horizon:
            self.finished = True
            return None

        arrival = self.next_arrival_time
        departure = self.next_departure_time

        if arrival <= self.horizon and (departure is None or arrival <= departure):
            return self._process_arrival()
        if departure is not None and departure <= self.horizon:
            return self._process_departure()
        # Nothing left to collect before the horizon
        return self._truncate()

    def run(self) -> SimulationResult:
        """Run to the horizon and return the final snapshot."""
        log.info(
            "Simulating M/M/1: lambda=%.4f mu=%.4f horizon=%.2f",
            self.arrival_rate, self.service_rate, self.horizon,
        )
        while self.step() is not None:
            pass
        result = self.result()
        log.info(
            "Run complete: %d arrivals, %d served, max queue %d",
            self.arrivals, result.customers_served, result.max_queue_length,
        )
        return result

    def result(self) -> SimulationResult:
        """Derive final metrics from the accumulated state.

        Raises:
            SimulationError: The run has not reached its terminal state
        """
        if not self.finished:
            raise SimulationError("simulation has not finished; call run() first")

        duration = self.clock
        served = self.customers_served
        return SimulationResult(
            duration=duration,
            customers_served=served,
            max_queue_length=self.max_queue_length,
            avg_wait=self.total_wait_time / served if served > 0 else 0.0,
            avg_queue_length=self.area_under_queue_length / duration,
            utilization=self.busy_time / duration,
            throughput=served / duration,
            stability_warning=self.stability_warning,
        )
