"""
Metrics reporting for the queue simulation.
Formats the final snapshot, compares it with M/M/1 theory and plots the trace.
"""

import json
from pathlib import Path
from typing import Dict, Optional
import numpy as np
import matplotlib.pyplot as plt
import config
from queue_sim.analytic import analytic_metrics
from queue_sim.engine import SimulationResult
from queue_sim.event_log import EventLog


class MetricsComputer:
    """Compute comparison metrics and generate reports for one run."""

    def __init__(
        self,
        result: SimulationResult,
        arrival_rate: float,
        service_rate: float,
        event_log: Optional[EventLog] = None,
        reference: Optional[SimulationResult] = None,
        output_dir: str = config.REPORT_DIR,
        run_id: str = "default",
    ):
        """Initialize metrics computer.

        Args:
            result: Snapshot of the finished engine run
            arrival_rate: Configured arrival rate
            service_rate: Configured service rate
            event_log: Trace of the run (needed for plots)
            reference: Snapshot of the SimPy reference run, if one was made
            output_dir: Output directory for reports
            run_id: Identifier for this run
        """
        self.result = result
        self.arrival_rate = arrival_rate
        self.service_rate = service_rate
        self.event_log = event_log
        self.reference = reference
        self.output_dir = Path(output_dir)
        self.run_id = run_id

    def compute_analytic_comparison(self) -> Optional[Dict[str, Dict[str, float]]]:
        """Compare simulated metrics with steady-state M/M/1 values.

        Returns:
            Dict keyed by metric with simulated, analytic and error_pct,
            or None when the queue has no steady state
        """
        if self.arrival_rate >= self.service_rate:
            return None

        theory = analytic_metrics(self.arrival_rate, self.service_rate)
        pairs = {
            "utilization": (self.result.utilization, theory["rho"]),
            "avg_queue_length": (self.result.avg_queue_length, theory["Lq"]),
            "avg_wait": (self.result.avg_wait, theory["Wq"]),
            "throughput": (self.result.throughput, self.arrival_rate),
        }
        return {
            name: {
                "simulated": simulated,
                "analytic": expected,
                "error_pct": abs(simulated - expected) / expected * 100,
            }
            for name, (simulated, expected) in pairs.items()
        }

    def generate_report(self) -> Dict:
        """Generate the metrics report.

        Returns:
            Report dictionary
        """
        report = {
            "run_id": self.run_id,
            "parameters": {
                "arrival_rate": self.arrival_rate,
                "service_rate": self.service_rate,
            },
            "results": self.result.as_dict(),
            "analytic": self.compute_analytic_comparison(),
        }
        if self.reference is not None:
            report["reference"] = self.reference.as_dict()
        if self.event_log is not None:
            report["events"] = {
                "total": len(self.event_log),
                "arrivals": len(self.event_log.get_arrivals()),
                "departures": len(self.event_log.get_departures()),
            }
        return report

    def format_summary(self) -> str:
        """Render the result block shown at the end of a run."""
        r = self.result
        lines = [
            "=== Simulation Results ===",
            f"Total simulated time        : {r.duration:.2f}",
            f"Customers served            : {r.customers_served}",
            f"Maximum queue length        : {r.max_queue_length}",
            f"Average waiting time        : {r.avg_wait:.4f} time units",
            f"Average number in queue     : {r.avg_queue_length:.4f}",
            f"Server utilization          : {r.utilization:.4f}",
            f"Throughput (cust/time unit) : {r.throughput:.4f}",
        ]
        if r.stability_warning:
            lines.append("")
            lines.append(
                "[Note] Arrival rate >= service rate. "
                "The system may be unstable (queue tends to grow)."
            )
        return "\n".join(lines)

    def save_report_json(self, report: Dict) -> str:
        """Save report as JSON file.

        Args:
            report: Report dictionary

        Returns:
            Path to saved file
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"report_{self.run_id}.json"

        # Handle non-serializable values
        def default_serializer(obj):
            if isinstance(obj, np.ndarray):
                return obj.tolist()
            if isinstance(obj, (np.integer, np.floating)):
                return float(obj)
            return str(obj)

        with open(path, "w") as f:
            json.dump(report, f, indent=2, default=default_serializer)

        return str(path)

    def plot_queue_length(self, plot_dir: str = config.PLOT_DIR) -> str:
        """Plot queue length over time as a step curve.

        Returns:
            Path to saved figure, or "" when there is no trace
        """
        if self.event_log is None:
            return ""

        df = self.event_log.get_dataframe()
        if df.empty:
            return ""

        fig, axes = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

        times = np.concatenate([[0.0], df["timestamp"].to_numpy(dtype=float)])
        queue = np.concatenate([[0], df["queue_length"].to_numpy(dtype=int)])
        busy = np.concatenate([[0], df["server_busy"].to_numpy(dtype=int)])

        axes[0].step(times, queue, where="post", linewidth=1.5, label="Queue length")
        axes[0].axhline(
            self.result.avg_queue_length, color="r", linestyle="--",
            label="Time average", linewidth=1.5,
        )
        axes[0].set_ylabel("Customers waiting")
        axes[0].set_title("Queue Length Over Time")
        axes[0].legend()
        axes[0].grid(True, alpha=0.3)

        axes[1].step(times, busy, where="post", linewidth=1.5, color="g")
        axes[1].set_ylabel("Server busy")
        axes[1].set_xlabel("Simulation Time")
        axes[1].set_yticks([0, 1])
        axes[1].set_title(f"Server Utilization {self.result.utilization:.3f}")
        axes[1].grid(True, alpha=0.3)

        path = Path(plot_dir) / f"queue_{self.run_id}.png"
        path.parent.mkdir(parents=True, exist_ok=True)
        plt.tight_layout()
        plt.savefig(path, dpi=150)
        plt.close(fig)

        return str(path)
