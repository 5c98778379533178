"""
Random variate generation for the queue simulation.
Exponential durations are drawn by inversion from uniforms in the open unit interval.
"""

from typing import Iterable, Optional
import numpy as np
import config
from queue_sim.errors import SimulationError


def uniform_variate(
    rng: np.random.Generator,
    raw_range: int = config.UNIFORM_RAW_RANGE,
) -> float:
    """Draw a uniform value strictly inside (0, 1).

    Args:
        rng: numpy random generator
        raw_range: Largest raw integer the generator may return

    Returns:
        (raw + 1) / (raw_range + 2), never exactly 0 or 1
    """
    raw = int(rng.integers(0, raw_range, endpoint=True))
    return (raw + 1.0) / (raw_range + 2.0)


def exponential_variate(rate: float, uniform: float) -> float:
    """Invert an open-interval uniform into an exponential duration.

    Args:
        rate: Rate parameter (> 0)
        uniform: Value in (0, 1)

    Returns:
        -ln(uniform) / rate
    """
    if rate <= 0:
        raise ValueError(f"rate must be > 0, got {rate}")
    return float(-np.log(uniform) / rate)


class VariateSource:
    """Owns a generator handle and produces uniform and exponential draws."""

    def __init__(
        self,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        raw_range: int = config.UNIFORM_RAW_RANGE,
    ):
        """Initialize variate source.

        Args:
            seed: Seed for a fresh generator (ignored when rng is given)
            rng: Existing generator to draw from
            raw_range: Largest raw integer draw
        """
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.raw_range = raw_range
        self.draws = 0

    def uniform(self) -> float:
        """Next uniform draw in (0, 1)."""
        self.draws += 1
        return uniform_variate(self.rng, self.raw_range)

    def exponential(self, rate: float) -> float:
        """Next exponential duration with the given rate."""
        return exponential_variate(rate, self.uniform())


class SequenceVariateSource(VariateSource):
    """Replays a fixed sequence of uniform draws."""

    def __init__(self, uniforms: Iterable[float]):
        self.draws = 0
        self.uniforms = list(uniforms)
        for u in self.uniforms:
            if not 0.0 < u < 1.0:
                raise ValueError(f"uniform draws must lie in (0, 1), got {u}")

    def uniform(self) -> float:
        if self.draws >= len(self.uniforms):
            raise SimulationError(
                f"uniform draw sequence exhausted after {self.draws} draws"
            )
        u = self.uniforms[self.draws]
        self.draws += 1
        return u
