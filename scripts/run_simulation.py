"""
Command-line runner for the M/M/1 queue simulation.
Reads the parameters, runs the engine once and reports the results.
"""

from pathlib import Path
import argparse
import logging
import sys

# Ensure root directory is in path for config import
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

import config
from queue_sim.engine import SimulationEngine
from queue_sim.errors import ConfigurationError, QueueOverflowError
from queue_sim.event_log import EventLog
from queue_sim.metrics import MetricsComputer
from queue_sim.reference_model import run_reference
from queue_sim.variates import VariateSource


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Single-server (M/M/1) queue simulation")
    parser.add_argument("--arrival-rate", type=float, default=config.ARRIVAL_RATE,
                        help=f"Customers per time unit (default: {config.ARRIVAL_RATE})")
    parser.add_argument("--service-rate", type=float, default=config.SERVICE_RATE,
                        help=f"Customers per time unit (default: {config.SERVICE_RATE})")
    parser.add_argument("-t", "--time", dest="horizon", type=float, default=config.SIM_DURATION,
                        help=f"Total simulation time (default: {config.SIM_DURATION})")
    parser.add_argument("-s", "--seed", type=int, default=config.RANDOM_SEED,
                        help="Random seed (default: fresh entropy)")
    parser.add_argument("--capacity", type=int, default=config.WAITING_LINE_CAPACITY,
                        help=f"Waiting line capacity (default: {config.WAITING_LINE_CAPACITY})")
    parser.add_argument("-i", "--interactive", action="store_true",
                        help="Prompt for arrival rate, service rate and simulation time")
    parser.add_argument("--trace", action="store_true",
                        help=f"Write the event trace to CSV under {config.LOG_DIR}")
    parser.add_argument("-o", "--report", action="store_true",
                        help=f"Save a JSON report under {config.REPORT_DIR}")
    parser.add_argument("-p", "--plot", action="store_true",
                        help=f"Save a queue length plot under {config.PLOT_DIR}")
    parser.add_argument("--cross-check", action="store_true",
                        help="Also run the SimPy reference model and show its results")
    parser.add_argument("--run-id", default="default", help="Identifier used in output filenames")
    parser.add_argument("--log-level", default=config.LOG_LEVEL)
    return parser


def prompt_parameters(args: argparse.Namespace):
    """Ask for the three model parameters on stdin."""
    print("=== Single Server Queue Simulation ===")
    try:
        args.arrival_rate = float(input("Enter arrival rate  (customers per time unit, e.g. 0.5): "))
        args.service_rate = float(input("Enter service rate  (customers per time unit, e.g. 0.7): "))
        args.horizon = float(input("Enter total simulation time (e.g. 1000): "))
    except ValueError as exc:
        raise ConfigurationError(f"could not read parameter: {exc}") from exc


def run_single_simulation(args: argparse.Namespace) -> dict:
    """Run one simulation and produce the requested outputs.

    Args:
        args: Parsed command-line arguments

    Returns:
        Report dictionary
    """
    event_log = None
    if args.trace or args.plot or args.report:
        event_log = EventLog(
            output_dir=config.LOG_DIR if args.trace else None,
            run_id=args.run_id,
        )
    engine = SimulationEngine(
        arrival_rate=args.arrival_rate,
        service_rate=args.service_rate,
        horizon=args.horizon,
        variates=VariateSource(seed=args.seed),
        capacity=args.capacity,
        event_log=event_log,
    )
    result = engine.run()

    reference = None
    if args.cross_check:
        seed = None if args.seed is None else args.seed + config.REFERENCE_SEED_OFFSET
        reference = run_reference(args.arrival_rate, args.service_rate, args.horizon, random_seed=seed)

    metrics_computer = MetricsComputer(
        result=result,
        arrival_rate=args.arrival_rate,
        service_rate=args.service_rate,
        event_log=event_log,
        reference=reference,
        output_dir=config.REPORT_DIR,
        run_id=args.run_id,
    )
    report = metrics_computer.generate_report()

    print()
    print(metrics_computer.format_summary())

    comparison = report["analytic"]
    if comparison is not None:
        print("\n=== M/M/1 Steady State ===")
        for name, row in comparison.items():
            print(f"  {name:<18}: simulated {row['simulated']:.4f}  "
                  f"analytic {row['analytic']:.4f}  ({row['error_pct']:.1f}% off)")

    if reference is not None:
        print("\n=== SimPy Reference Model ===")
        print(f"  Customers served   : {reference.customers_served}")
        print(f"  Average wait       : {reference.avg_wait:.4f}")
        print(f"  Average in queue   : {reference.avg_queue_length:.4f}")
        print(f"  Utilization        : {reference.utilization:.4f}")

    if args.trace:
        print(f"\nEvent trace: {event_log.save_csv()}")
    if args.report:
        print(f"Report:      {metrics_computer.save_report_json(report)}")
    if args.plot:
        print(f"Plot:        {metrics_computer.plot_queue_length()}")

    return report


def main(argv=None) -> int:
    """Entry point for the simulation."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.interactive:
            prompt_parameters(args)
        run_single_simulation(args)
    except ConfigurationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1
    except QueueOverflowError as exc:
        print(f"Simulation aborted: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
