"""Shared pytest setup: repository root on sys.path, non-interactive plotting."""

import matplotlib

matplotlib.use("Agg")
