"""Domain data structures."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class Operation(str, Enum):
    """Git operation applied to every configured remote."""

    CLONE = "clone"
    FETCH = "fetch"
    PULL = "pull"
    STATUS = "status"


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class RemoteDescriptor:
    """A single remote parsed from the repox file."""

    url: str
    name: str
    line_number: int = 0


@dataclass(frozen=True)
class OperationRequest:
    """One unit of work handed to a worker."""

    descriptor: RemoteDescriptor
    operation: Operation
    local_path: Path

    @property
    def name(self) -> str:
        return self.descriptor.name


@dataclass(frozen=True)
class OperationOutcome:
    """Result of running one operation against one repository."""

    name: str
    status: OutcomeStatus
    message: str = ""
    duration_ms: Optional[int] = None
    reason: str = ""

    @property
    def failed(self) -> bool:
        return self.status is OutcomeStatus.FAILURE


@dataclass(frozen=True)
class RunConfiguration:
    """Process-wide settings, built once at startup."""

    operation: Operation
    sub_directory: str
    base_directory: Path
    config_file: Path
    parallelism: int = 5
    timeout: Optional[float] = None
    failed_file: Optional[Path] = None

    @property
    def target_directory(self) -> Path:
        return self.base_directory / self.sub_directory
