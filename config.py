"""
Configuration for the M/M/1 queue simulation.
"""

# ============================================================================
# QUEUE MODEL (defaults, overridable from the command line)
# ============================================================================

# Arrival process: Poisson with exponential interarrival times
ARRIVAL_RATE = 0.5  # customers per time unit (λ)

# Service time: exponential
SERVICE_RATE = 0.7  # customers per time unit (μ)

# Simulation horizon
SIM_DURATION = 1000.0  # time units

# ============================================================================
# WAITING LINE
# ============================================================================

# Fixed bound on queued customers; exceeding it aborts the run
WAITING_LINE_CAPACITY = 100000

# ============================================================================
# RANDOM VARIATES
# ============================================================================

# None = fresh OS entropy on every run
RANDOM_SEED = None

# Raw integer draws lie in [0, UNIFORM_RAW_RANGE] and are mapped into (0, 1)
UNIFORM_RAW_RANGE = 2**31 - 1

# ============================================================================
# REFERENCE MODEL (SimPy cross-check)
# ============================================================================

REFERENCE_SEED_OFFSET = 1000  # reference model seed = run seed + offset

# ============================================================================
# OUTPUT
# ============================================================================

OUTPUT_DIR = "outputs"
LOG_DIR = f"{OUTPUT_DIR}/logs"
PLOT_DIR = f"{OUTPUT_DIR}/plots"
REPORT_DIR = f"{OUTPUT_DIR}/reports"

LOG_LEVEL = "INFO"

# CSV event trace columns
EVENT_LOG_COLUMNS = [
    "timestamp",
    "event_type",  # "arrival", "departure", "horizon"
    "elapsed",
    "queue_length_before",
    "server_busy_before",
    "queue_length",
    "server_busy",
    "customers_served",
]
