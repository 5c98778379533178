"""
Tests for the simulation engine.
"""

import logging
import math
import numpy as np
import pytest
from queue_sim.engine import SimulationEngine
from queue_sim.errors import ConfigurationError, QueueOverflowError, SimulationError
from queue_sim.event_log import EventLog
from queue_sim.variates import SequenceVariateSource, VariateSource


def fixed_draws(durations):
    """Uniform draws that invert to the given (duration, rate) pairs."""
    return SequenceVariateSource(math.exp(-rate * d) for d, rate in durations)


def hand_trace_source():
    # Arrivals at 2, 3, 7 then 207; services of 3.0, 1.5, 0.5
    return fixed_draws([
        (2.0, 0.5),    # first arrival
        (3.0, 1.0),    # service of customer 1
        (1.0, 0.5),    # next arrival -> 3
        (4.0, 0.5),    # next arrival -> 7
        (1.5, 1.0),    # service of customer 2, starts at 5
        (0.5, 1.0),    # service of customer 3, starts at 7
        (200.0, 0.5),  # next arrival -> 207, past the horizon
    ])


def test_hand_computed_trace_first_five_events():
    """Test the first five events against a trace worked out by hand."""
    engine = SimulationEngine(0.5, 1.0, 100.0, variates=hand_trace_source())

    events = [engine.step() for _ in range(5)]

    assert [e.event_type for e in events] == [
        "arrival", "arrival", "departure", "departure", "arrival",
    ]
    assert [e.timestamp for e in events] == pytest.approx([2.0, 3.0, 5.0, 6.5, 7.0])
    assert [e.queue_length for e in events] == [0, 1, 0, 0, 0]
    assert [e.server_busy for e in events] == [True, True, True, False, True]
    assert engine.customers_served == 2
    assert engine.total_wait_time == pytest.approx(2.0)


def test_hand_computed_trace_final_metrics():
    """Test final metrics of the hand-computed trace."""
    engine = SimulationEngine(0.5, 1.0, 100.0, variates=hand_trace_source())

    result = engine.run()

    assert result.duration == 100.0
    assert result.customers_served == 3
    assert result.max_queue_length == 1
    assert result.avg_wait == pytest.approx(2.0 / 3.0)
    assert result.avg_queue_length == pytest.approx(0.02)
    assert result.utilization == pytest.approx(0.05)
    assert result.throughput == pytest.approx(0.03)
    assert 0 < result.utilization < 1
    assert result.stability_warning is False


def test_fifo_wait_attribution():
    """Test that queued customers are served in arrival order with their own waits."""
    source = fixed_draws([
        (1.0, 0.5),    # arrival at 1
        (10.0, 1.0),   # served 1 -> 11
        (1.0, 0.5),    # arrival at 2, queued
        (2.0, 0.5),    # arrival at 4, queued
        (100.0, 0.5),  # arrival at 104, past the horizon
        (1.0, 1.0),    # customer from t=2 served 11 -> 12
        (5.0, 1.0),    # customer from t=4 served 12 -> 17
    ])
    log = EventLog()
    engine = SimulationEngine(0.5, 1.0, 50.0, variates=source, event_log=log)

    result = engine.run()

    # Waits: 11 - 2 = 9 and 12 - 4 = 8
    assert engine.total_wait_time == pytest.approx(17.0)
    assert result.customers_served == 3
    assert result.avg_wait == pytest.approx(17.0 / 3.0)
    assert result.max_queue_length == 2
    assert result.avg_queue_length == pytest.approx(17.0 / 50.0)
    assert result.utilization == pytest.approx(16.0 / 50.0)
    assert [e.queue_length for e in log.get_departures()] == [1, 0, 0]


def test_horizon_before_first_arrival():
    """Test the degenerate run where nothing arrives before the horizon."""
    engine = SimulationEngine(0.5, 1.0, 1.0, variates=fixed_draws([(5.0, 0.5)]))

    result = engine.run()

    assert result.customers_served == 0
    assert result.duration == 1.0
    assert result.avg_wait == 0.0
    assert result.utilization == 0.0
    assert result.avg_queue_length == 0.0
    assert engine.arrivals == 0


def test_departure_past_horizon_is_not_applied():
    """Test that an in-progress service at the horizon is not counted."""
    source = fixed_draws([
        (1.0, 0.5),   # arrival at 1
        (20.0, 1.0),  # departure at 21, past the horizon
        (30.0, 0.5),  # next arrival at 31
    ])
    engine = SimulationEngine(0.5, 1.0, 10.0, variates=source)

    result = engine.run()

    assert result.customers_served == 0
    assert result.duration == 10.0
    assert result.utilization == pytest.approx(0.9)
    assert engine.server_busy is True


def test_idle_tail_extends_to_horizon():
    """Test that an idle server with the next arrival past the horizon still runs the clock out."""
    source = fixed_draws([
        (1.0, 0.5),   # arrival at 1
        (1.0, 1.0),   # departure at 2
        (50.0, 0.5),  # next arrival at 51
    ])
    engine = SimulationEngine(0.5, 1.0, 10.0, variates=source)

    result = engine.run()

    assert result.duration == 10.0
    assert result.customers_served == 1
    assert result.utilization == pytest.approx(0.1)
    assert result.throughput == pytest.approx(0.1)


@pytest.mark.parametrize(
    "arrival_rate,service_rate,horizon,seed",
    [
        (0.5, 1.0, 100.0, 1),
        (0.9, 1.0, 500.0, 2),
        (1.0, 1.0, 300.0, 3),
        (3.0, 1.0, 50.0, 4),
        (0.1, 5.0, 20.0, 5),
    ],
)
def test_result_bounds(arrival_rate, service_rate, horizon, seed):
    """Test invariants that hold for any valid configuration."""
    engine = SimulationEngine(
        arrival_rate, service_rate, horizon, variates=VariateSource(seed=seed)
    )

    result = engine.run()

    assert result.duration <= horizon
    assert result.customers_served >= 0
    assert result.max_queue_length >= 0
    assert 0.0 <= result.utilization <= 1.0
    assert result.customers_served <= engine.arrivals
    # Every arrival is served, waiting or in service
    assert engine.arrivals == (
        result.customers_served + engine.queue_length + int(engine.server_busy)
    )


def test_integrals_are_replayable_and_non_decreasing():
    """Test that the integrals equal the Riemann sum over the logged steps."""
    log = EventLog()
    engine = SimulationEngine(0.8, 1.0, 400.0, variates=VariateSource(seed=11), event_log=log)

    prev_area, prev_busy = 0.0, 0.0
    while engine.step() is not None:
        assert engine.area_under_queue_length >= prev_area
        assert engine.busy_time >= prev_busy
        assert engine.queue_length == engine.waiting_line.size()
        prev_area, prev_busy = engine.area_under_queue_length, engine.busy_time

    area, busy = log.replay_integrals()
    assert area == engine.area_under_queue_length
    assert busy == engine.busy_time
    assert log.events[-1].event_type == "horizon"
    assert sum(e.elapsed for e in log.events) == pytest.approx(400.0)


def test_deterministic_replay():
    """Test that the same seed reproduces the full event trace."""
    logs = []
    for _ in range(2):
        log = EventLog()
        SimulationEngine(0.7, 1.0, 200.0, variates=VariateSource(seed=99), event_log=log).run()
        logs.append(log.events)

    assert len(logs[0]) > 0
    assert logs[0] == logs[1]


def test_result_is_idempotent():
    """Test that reading the snapshot twice gives identical results."""
    engine = SimulationEngine(0.5, 1.0, 100.0, variates=VariateSource(seed=42))
    engine.run()

    assert engine.result() == engine.result()
    assert engine.step() is None
    assert engine.result() == engine.result()


def test_result_before_finish_raises():
    """Test that the snapshot is unavailable mid-run."""
    engine = SimulationEngine(0.5, 1.0, 100.0, variates=VariateSource(seed=42))

    with pytest.raises(SimulationError):
        engine.result()


def test_unstable_configuration_warns_and_completes(caplog):
    """Test that arrival_rate >= service_rate sets the flag but still runs."""
    with caplog.at_level(logging.WARNING, logger="queue_sim.engine"):
        engine = SimulationEngine(2.0, 1.0, 200.0, variates=VariateSource(seed=7))
        result = engine.run()

    assert result.stability_warning is True
    assert result.duration == 200.0
    assert result.max_queue_length > 0
    assert any("may grow" in r.getMessage() for r in caplog.records)


def test_stable_scenario_runs_clean():
    """Test the stable scenario raises nothing and keeps utilization inside (0, 1)."""
    result = SimulationEngine(0.5, 1.0, 100.0, variates=VariateSource(seed=2024)).run()

    assert 0.0 < result.utilization < 1.0
    assert result.stability_warning is False


@pytest.mark.parametrize(
    "arrival_rate,service_rate,horizon",
    [
        (0.0, 1.0, 10.0),
        (1.0, -1.0, 10.0),
        (1.0, 1.0, 0.0),
        (float("nan"), 1.0, 10.0),
        (1.0, 1.0, float("inf")),
    ],
)
def test_invalid_configuration_rejected(arrival_rate, service_rate, horizon):
    """Test that non-positive parameters refuse to start."""
    with pytest.raises(ConfigurationError):
        SimulationEngine(arrival_rate, service_rate, horizon)


def test_invalid_capacity_rejected():
    """Test that a non-positive capacity refuses to start."""
    with pytest.raises(ValueError):
        SimulationEngine(0.5, 1.0, 10.0, capacity=0)


def test_overflow_aborts_run():
    """Test that a too-small waiting line aborts the run with context."""
    engine = SimulationEngine(5.0, 0.5, 100.0, variates=VariateSource(seed=1), capacity=2)

    with pytest.raises(QueueOverflowError) as excinfo:
        engine.run()

    assert excinfo.value.capacity == 2
    assert excinfo.value.queue_length == 2


def test_long_run_matches_mm1_theory():
    """Test long-run averages against steady-state M/M/1 values."""
    result = SimulationEngine(0.5, 1.0, 50000.0, variates=VariateSource(seed=3)).run()

    # rho = 0.5, Lq = 0.5, Wq = 1.0
    assert result.utilization == pytest.approx(0.5, abs=0.03)
    assert result.avg_queue_length == pytest.approx(0.5, rel=0.15)
    assert result.avg_wait == pytest.approx(1.0, rel=0.15)
    assert result.throughput == pytest.approx(0.5, rel=0.05)


def test_numpy_scalar_parameters_accepted():
    """Test that numpy scalars are valid rates, horizon and capacity."""
    engine = SimulationEngine(
        np.float32(0.5), np.float64(1.0), np.int64(100),
        variates=VariateSource(seed=1), capacity=np.int64(50),
    )

    result = engine.run()

    assert result.duration == 100.0
    assert engine.waiting_line.capacity == 50
    assert isinstance(engine.horizon, float)


def test_non_integral_capacity_rejected():
    with pytest.raises(ConfigurationError):
        SimulationEngine(0.5, 1.0, 10.0, capacity=2.5)


def test_overflow_leaves_state_untouched_and_ends_run():
    """Test that an overflowing arrival is not applied and the run cannot continue."""
    engine = SimulationEngine(5.0, 0.5, 100.0, variates=VariateSource(seed=1), capacity=2)

    with pytest.raises(QueueOverflowError):
        while engine.step() is not None:
            pass

    arrivals, clock = engine.arrivals, engine.clock
    area, busy = engine.area_under_queue_length, engine.busy_time

    assert engine.finished is True
    assert engine.queue_length == 2
    assert engine.step() is None
    assert (engine.arrivals, engine.clock) == (arrivals, clock)
    assert (engine.area_under_queue_length, engine.busy_time) == (area, busy)
