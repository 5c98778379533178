"""
Event trace for the simulation engine.
Keeps one record per engine step in memory and optionally streams it to CSV.
"""

import csv
from pathlib import Path
from dataclasses import dataclass, asdict
from typing import List, Optional, Tuple
import pandas as pd
import config


@dataclass(frozen=True)
class Event:
    """One engine step: the interval it closed and the state after it."""
    timestamp: float
    event_type: str  # "arrival", "departure", "horizon"
    elapsed: float  # time since the previous step
    queue_length_before: int  # state held during the elapsed interval
    server_busy_before: bool
    queue_length: int  # state after the transition
    server_busy: bool
    customers_served: int


class EventLog:
    """Manages the event trace in memory and, optionally, on disk."""

    def __init__(self, output_dir: Optional[str] = None, run_id: str = "default"):
        """Initialize event logger.

        Args:
            output_dir: Directory to store the CSV trace; None keeps it in memory only
            run_id: Identifier for this run (used in filename)
        """
        self.run_id = run_id
        self.events: List[Event] = []
        self.csv_path: Optional[Path] = None

        if output_dir is not None:
            out = Path(output_dir)
            out.mkdir(parents=True, exist_ok=True)
            self.csv_path = out / f"events_{run_id}.csv"
            self._init_csv()

    def _init_csv(self):
        """Initialize CSV file with header."""
        with open(self.csv_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=config.EVENT_LOG_COLUMNS)
            writer.writeheader()

    def log_event(self, event: Event):
        """Log a single event to memory and, if enabled, CSV.

        Args:
            event: Event object to log
        """
        self.events.append(event)

        if self.csv_path is not None:
            with open(self.csv_path, "a", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=config.EVENT_LOG_COLUMNS)
                writer.writerow(asdict(event))

    def __len__(self) -> int:
        return len(self.events)

    def get_dataframe(self) -> pd.DataFrame:
        """Return in-memory events as pandas DataFrame."""
        if not self.events:
            return pd.DataFrame(columns=config.EVENT_LOG_COLUMNS)

        return pd.DataFrame([asdict(e) for e in self.events])[config.EVENT_LOG_COLUMNS]

    def get_arrivals(self) -> List[Event]:
        """Get all arrival events."""
        return [e for e in self.events if e.event_type == "arrival"]

    def get_departures(self) -> List[Event]:
        """Get all departure events."""
        return [e for e in self.events if e.event_type == "departure"]

    def replay_integrals(self) -> Tuple[float, float]:
        """Rebuild the time-weighted integrals from the logged steps.

        Returns:
            (area_under_queue_length, busy_time)
        """
        area = 0.0
        busy = 0.0
        for e in self.events:
            area += e.queue_length_before * e.elapsed
            if e.server_busy_before:
                busy += e.elapsed
        return area, busy

    def save_csv(self) -> Optional[str]:
        """Return path to CSV file, if one is being written."""
        return str(self.csv_path) if self.csv_path is not None else None
