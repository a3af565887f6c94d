"""Application service for one repox run: parse, resolve, schedule, report."""

import time
from dataclasses import dataclass, field
from functools import partial
from typing import List, Optional

from ..config import prepare_base_directory
from ..core.failed_remotes import failed_descriptors, save_failed_remotes
from ..core.git import GitRunner, SubprocessGitRunner
from ..core.invoker import invoke
from ..core.paths import build_requests
from ..core.process_control import clear_shutdown_request
from ..core.report import exit_code
from ..core.scheduler import ProgressCallback, run_operations
from ..domain.models import OperationOutcome, RemoteDescriptor, RunConfiguration
from ..domain.remotes import load_remotes
from ..infra.logger import log_info


@dataclass
class RunResult:
    descriptors: List[RemoteDescriptor] = field(default_factory=list)
    outcomes: List[OperationOutcome] = field(default_factory=list)
    duration: float = 0.0

    @property
    def exit_code(self) -> int:
        return exit_code(self.outcomes)


def execute_run(
    config: RunConfiguration,
    runner: Optional[GitRunner] = None,
    progress_cb: Optional[ProgressCallback] = None,
) -> RunResult:
    """Run ``config.operation`` over every remote in ``config.config_file``.

    Configuration problems raise ``ConfigurationError`` before any repository
    is touched; per-repository failures are returned as outcomes.
    """
    clear_shutdown_request()
    start_time = time.monotonic()

    descriptors = load_remotes(config.config_file)
    requests = build_requests(descriptors, config)
    prepare_base_directory(config)

    log_info(f"{config.operation.value} {len(requests)} repositories under {config.target_directory}")

    outcomes = run_operations(
        requests,
        config.parallelism,
        partial(invoke, runner=runner or SubprocessGitRunner(), timeout=config.timeout),
        progress_cb=progress_cb,
    )

    if config.failed_file is not None:
        save_failed_remotes(failed_descriptors(descriptors, outcomes), config.failed_file)

    return RunResult(
        descriptors=descriptors,
        outcomes=outcomes,
        duration=time.monotonic() - start_time,
    )
