"""Run one git operation across many repositories with bounded parallelism."""

__version__ = "1.0.0"
