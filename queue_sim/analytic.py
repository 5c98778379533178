"""
Closed-form steady-state values for the M/M/1 queue.
"""

from typing import Dict


def analytic_metrics(arrival_rate: float, service_rate: float) -> Dict[str, float]:
    """Steady-state M/M/1 performance measures.

    Args:
        arrival_rate: λ (customers per time unit)
        service_rate: μ (customers per time unit)

    Returns:
        Dict with rho (utilization), L, Lq (mean number in system / in queue),
        W, Wq (mean time in system / in queue)

    Raises:
        ValueError: λ >= μ, no steady state exists
    """
    if arrival_rate <= 0 or service_rate <= 0:
        raise ValueError("rates must be > 0")
    if arrival_rate >= service_rate:
        raise ValueError(
            f"System unstable: arrival rate {arrival_rate} >= service rate {service_rate}"
        )

    rho = arrival_rate / service_rate
    return {
        "rho": rho,
        "L": rho / (1 - rho),
        "Lq": rho**2 / (1 - rho),
        "W": 1.0 / (service_rate - arrival_rate),
        "Wq": rho / (service_rate - arrival_rate),
    }
