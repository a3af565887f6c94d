"""The git executable behind a small capability interface.

``GitRunner.run`` executes one operation against one path and returns the raw
``(returncode, stdout, stderr)``; ``SubprocessGitRunner`` shells out, tests
substitute a programmable fake.
"""

from pathlib import Path
from typing import List, NamedTuple, Optional, Protocol

from ..domain.models import Operation
from .process_control import run_tracked

GIT_EXECUTABLE = "git"


class GitResult(NamedTuple):
    returncode: int
    stdout: str
    stderr: str


class GitRunner(Protocol):
    def run(
        self,
        operation: Operation,
        local_path: Path,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> GitResult:
        ...


def build_git_command(
    operation: Operation,
    local_path: Path,
    url: Optional[str] = None,
    executable: str = GIT_EXECUTABLE,
) -> List[str]:
    """Build the argument vector for one git operation."""
    if operation is Operation.CLONE:
        if not url:
            raise ValueError("clone requires a remote URL")
        return [executable, "clone", "--quiet", url, str(local_path)]

    command = [executable, "-C", str(local_path)]
    if operation is Operation.FETCH:
        return command + ["fetch", "--prune", "--quiet"]
    if operation is Operation.PULL:
        return command + ["pull", "--ff-only", "--no-rebase", "--no-stat", "--no-progress"]
    if operation is Operation.STATUS:
        return command + ["status", "--porcelain=v1", "--branch"]
    raise ValueError(f"unsupported operation: {operation}")


class SubprocessGitRunner:
    """Run git as a blocking, tracked subprocess."""

    def __init__(self, executable: str = GIT_EXECUTABLE):
        self.executable = executable

    def run(
        self,
        operation: Operation,
        local_path: Path,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> GitResult:
        command = build_git_command(operation, local_path, url, self.executable)
        returncode, stdout, stderr = run_tracked(command, timeout=timeout)
        return GitResult(returncode, stdout, stderr)
