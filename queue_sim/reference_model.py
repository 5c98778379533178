"""
Reference model: the same M/M/1 queue written as SimPy processes.
Used to cross-check the hand-rolled engine on long runs.
"""

import simpy
import numpy as np
from typing import Optional
from queue_sim.engine import SimulationResult


class ReferenceQueue:
    """Single-server FIFO queue driven by SimPy processes."""

    def __init__(
        self,
        env: simpy.Environment,
        arrival_rate: float,
        service_rate: float,
        random_seed: Optional[int] = None,
    ):
        """Initialize reference model.

        Args:
            env: SimPy environment
            arrival_rate: Poisson arrival rate (customers per time unit)
            service_rate: Exponential service rate (customers per time unit)
            random_seed: Random seed for reproducibility
        """
        self.env = env
        self.arrival_rate = arrival_rate
        self.service_rate = service_rate
        self.rng = np.random.default_rng(random_seed)

        self.server = simpy.Resource(env, capacity=1)

        # Customers present (waiting + in service)
        self.in_system = 0

        # Metrics
        self.arrivals = 0
        self.customers_served = 0
        self.max_queue_length = 0
        self.total_wait_time = 0.0
        self.area_under_queue_length = 0.0
        self.busy_time = 0.0
        self.last_update_time = 0.0

    @property
    def queue_length(self) -> int:
        return max(self.in_system - 1, 0)

    def update_time_integrals(self):
        """Integrate queue length and busy time up to env.now."""
        elapsed = self.env.now - self.last_update_time
        self.area_under_queue_length += self.queue_length * elapsed
        if self.in_system > 0:
            self.busy_time += elapsed
        self.last_update_time = self.env.now

    def arrival_process(self):
        """SimPy process: generate customer arrivals."""
        while True:
            interarrival = self.rng.exponential(1.0 / self.arrival_rate)
            yield self.env.timeout(interarrival)

            self.update_time_integrals()
            self.arrivals += 1
            self.in_system += 1
            self.max_queue_length = max(self.max_queue_length, self.queue_length)

            self.env.process(self.service_process(self.env.now))

    def service_process(self, arrival_time: float):
        """SimPy process: wait for the server, then hold it for one service.

        Args:
            arrival_time: When the customer arrived
        """
        with self.server.request() as req:
            yield req
            self.total_wait_time += self.env.now - arrival_time

            service_time = self.rng.exponential(1.0 / self.service_rate)
            yield self.env.timeout(service_time)

            self.update_time_integrals()
            self.in_system -= 1
            self.customers_served += 1

    def run(self):
        """Start the arrival process."""
        self.env.process(self.arrival_process())

    def result(self) -> SimulationResult:
        """Snapshot in the same shape as the engine's result."""
        self.update_time_integrals()
        duration = self.env.now
        served = self.customers_served
        return SimulationResult(
            duration=duration,
            customers_served=served,
            max_queue_length=self.max_queue_length,
            avg_wait=self.total_wait_time / served if served > 0 else 0.0,
            avg_queue_length=self.area_under_queue_length / duration if duration > 0 else 0.0,
            utilization=self.busy_time / duration if duration > 0 else 0.0,
            throughput=served / duration if duration > 0 else 0.0,
            stability_warning=self.arrival_rate >= self.service_rate,
        )


def run_reference(
    arrival_rate: float,
    service_rate: float,
    horizon: float,
    random_seed: Optional[int] = None,
) -> SimulationResult:
    """Run the SimPy reference model up to the horizon.

    Returns:
        SimulationResult of the reference run
    """
    env = simpy.Environment()
    model = ReferenceQueue(env, arrival_rate, service_rate, random_seed=random_seed)
    model.run()
    env.run(until=horizon)
    return model.result()
