"""Domain models and repox file parsing."""

from .models import (
    Operation,
    OperationOutcome,
    OperationRequest,
    OutcomeStatus,
    RemoteDescriptor,
    RunConfiguration,
)
from .remotes import derive_name, load_remotes, parse_remotes, render_remotes

__all__ = [
    "Operation",
    "OperationOutcome",
    "OperationRequest",
    "OutcomeStatus",
    "RemoteDescriptor",
    "RunConfiguration",
    "derive_name",
    "load_remotes",
    "parse_remotes",
    "render_remotes",
]
