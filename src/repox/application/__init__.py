"""Application services orchestrating domain and core capabilities."""

from .execution import RunResult, execute_run

__all__ = [
    "RunResult",
    "execute_run",
]
