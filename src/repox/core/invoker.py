"""Run one git operation against one repository and record the outcome.

``invoke()`` never raises for repository-level problems: missing checkouts,
git failures, timeouts and unexpected runner errors all come back as a failure outcome.
"""

import re
import shutil
import subprocess
import time
from pathlib import Path
from typing import List, Optional

from ..domain.models import Operation, OperationOutcome, OperationRequest, OutcomeStatus
from ..infra.logger import log_error, log_info, log_success, log_warning
from .git import GitResult, GitRunner
from .process_control import ProcessCanceled, is_shutdown_requested

MAX_MESSAGE_LENGTH = 200

SUCCESS_MESSAGES = {
    Operation.CLONE: "cloned",
    Operation.FETCH: "fetched",
    Operation.PULL: "pulled",
}

BRANCH_TRACKING_PATTERN = re.compile(r"\[(?P<tracking>[^\]]+)\]\s*$")


def classify_failure(stderr_text: str) -> str:
    """Map common git stderr to concise reason tags."""
    text = (stderr_text or "").lower()
    if not text:
        return "unknown"
    if "already exists and is not an empty directory" in text:
        return "destination_exists"
    if "could not create work tree dir" in text or "no space left on device" in text:
        return "local_write_error"
    if "not a git repository" in text:
        return "not_git_repo"
    if "couldn't find remote ref" in text or "no such remote" in text:
        return "remote_ref_missing"
    if "your local changes" in text or "would be overwritten" in text:
        return "local_changes_conflict"
    if "refusing to merge unrelated histories" in text:
        return "unrelated_histories"
    if "not possible to fast-forward" in text or "cannot fast-forward" in text:
        return "not_fast_forward"
    if "repository not found" in text or "does not appear to be a git repository" in text:
        return "repo_not_found"
    if "could not resolve host" in text or "failed to connect" in text or "timed out" in text:
        return "network_error"
    if "authentication failed" in text or "permission denied" in text:
        return "auth_error"
    return "unknown"


def summarize_error(stderr_text: str, returncode: int) -> str:
    """Pick the most useful line of git's stderr."""
    lines = [line.strip() for line in (stderr_text or "").splitlines() if line.strip()]
    for line in lines:
        if line.lower().startswith(("fatal:", "error:")):
            return line[:MAX_MESSAGE_LENGTH]
    if lines:
        return lines[-1][:MAX_MESSAGE_LENGTH]
    return f"git exited with code {returncode}"


def summarize_status(porcelain: str) -> str:
    """Reduce ``git status --porcelain=v1 --branch`` output to a short summary.

    >>> summarize_status("## main...origin/main [ahead 2]\\n M setup.py\\n")
    'ahead 2, dirty (1 change)'
    """
    parts: List[str] = []
    changes = 0

    for line in porcelain.splitlines():
        if line.startswith("## "):
            header = line[3:]
            if header.startswith("No commits yet"):
                parts.append("no commits")
                continue
            if header.startswith("HEAD (no branch)"):
                parts.append("detached")
                continue
            if "..." not in header:
                parts.append("no upstream")
                continue
            match = BRANCH_TRACKING_PATTERN.search(header)
            if match:
                for item in match.group("tracking").split(","):
                    item = item.strip()
                    if item == "gone":
                        parts.append("upstream gone")
                    elif item:
                        parts.append(item)
        elif line.strip():
            changes += 1

    if changes:
        parts.append(f"dirty ({changes} change{'s' if changes != 1 else ''})")
    return ", ".join(parts) if parts else "clean"


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _outcome(
    request: OperationRequest,
    status: OutcomeStatus,
    message: str,
    start: float,
    reason: str = "",
) -> OperationOutcome:
    return OperationOutcome(
        name=request.name,
        status=status,
        message=message,
        duration_ms=_elapsed_ms(start),
        reason=reason,
    )


def _check_checkout(request: OperationRequest, start: float) -> Optional[OperationOutcome]:
    """Failure outcome when the local checkout is missing, else None."""
    path = request.local_path
    if not path.exists():
        return _outcome(request, OutcomeStatus.FAILURE, "not cloned", start, "not_cloned")
    if not (path / ".git").exists():
        return _outcome(request, OutcomeStatus.FAILURE, "not a git repository", start, "not_git_repo")
    return None


def _cleanup_failed_clone(target_path: Path) -> None:
    if not target_path.exists():
        return
    try:
        shutil.rmtree(target_path)
    except OSError as exc:
        log_warning(f"could not remove incomplete clone {target_path}: {exc}")


def _run_git(
    request: OperationRequest,
    runner: GitRunner,
    timeout: Optional[float],
    start: float,
) -> OperationOutcome:
    created = False
    if request.operation is Operation.CLONE:
        if request.local_path.exists():
            if not request.local_path.is_dir():
                return _outcome(
                    request, OutcomeStatus.FAILURE, "path exists and is not a directory", start, "path_conflict"
                )
            if any(request.local_path.iterdir()):
                return _outcome(request, OutcomeStatus.SKIPPED, "already exists", start)
        else:
            created = True
        request.local_path.parent.mkdir(parents=True, exist_ok=True)
    else:
        missing = _check_checkout(request, start)
        if missing is not None:
            return missing

    try:
        result: GitResult = runner.run(
            request.operation,
            request.local_path,
            url=request.descriptor.url,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        if created:
            _cleanup_failed_clone(request.local_path)
        return _outcome(request, OutcomeStatus.FAILURE, "timed out", start, "timeout")
    except ProcessCanceled:
        if created:
            _cleanup_failed_clone(request.local_path)
        return _outcome(request, OutcomeStatus.FAILURE, "canceled", start, "canceled")
    except Exception:
        if created:
            _cleanup_failed_clone(request.local_path)
        raise

    if result.returncode != 0:
        if created:
            _cleanup_failed_clone(request.local_path)
        return _outcome(
            request,
            OutcomeStatus.FAILURE,
            summarize_error(result.stderr, result.returncode),
            start,
            classify_failure(result.stderr),
        )

    if request.operation is Operation.STATUS:
        return _outcome(request, OutcomeStatus.SUCCESS, summarize_status(result.stdout), start)
    return _outcome(request, OutcomeStatus.SUCCESS, SUCCESS_MESSAGES[request.operation], start)


def invoke(
    request: OperationRequest,
    runner: GitRunner,
    timeout: Optional[float] = None,
) -> OperationOutcome:
    """Execute ``request`` and return exactly one outcome."""
    start = time.monotonic()

    if is_shutdown_requested():
        outcome = _outcome(request, OutcomeStatus.FAILURE, "canceled", start, "canceled")
    else:
        log_info(f"{request.operation.value}: {request.name}")
        try:
            outcome = _run_git(request, runner, timeout, start)
        except Exception as exc:
            message = (str(exc) or type(exc).__name__)[:MAX_MESSAGE_LENGTH]
            outcome = _outcome(request, OutcomeStatus.FAILURE, message, start, "exception")

    if outcome.status is OutcomeStatus.FAILURE:
        log_error(f"{request.operation.value} failed [{outcome.reason}]: {request.name} - {outcome.message}")
    elif outcome.status is OutcomeStatus.SKIPPED:
        log_warning(f"{request.operation.value} skipped: {request.name} ({outcome.message})")
    else:
        log_success(f"{request.operation.value} done: {request.name} ({outcome.message})")
    return outcome
