"""Bounded worker pool running one operation per repository."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Sequence

from ..domain.models import OperationOutcome, OperationRequest, OutcomeStatus
from ..infra.logger import log_error, log_info, log_warning
from .process_control import request_shutdown

InvokeFn = Callable[[OperationRequest], OperationOutcome]
ProgressCallback = Callable[[int, int, int, int], None]


def run_operations(
    requests: Sequence[OperationRequest],
    parallelism: int,
    invoke_fn: InvokeFn,
    progress_cb: Optional[ProgressCallback] = None,
) -> List[OperationOutcome]:
    """Run ``invoke_fn`` over every request with at most ``parallelism`` in flight.

    Blocks until each request has produced exactly one outcome. A request whose
    invocation raises gets a failure outcome; the others keep running.

    Args:
        requests: work items, in the order they should be reported
        parallelism: maximum number of concurrent invocations (>= 1)
        invoke_fn: callable turning one request into one outcome
        progress_cb: called as ``(done, total, success, failure)`` before
            dispatch and after each completion

    Returns:
        Outcomes in input order, regardless of completion order.
    """
    if parallelism < 1:
        raise ValueError(f"parallelism must be >= 1, got {parallelism}")

    total = len(requests)
    if total == 0:
        log_warning("no repositories configured, nothing to do")
        return []

    workers = min(parallelism, total)
    log_info(f"start batch, total: {total}, parallel tasks: {workers}")

    outcomes: List[Optional[OperationOutcome]] = [None] * total
    success_count = 0
    fail_count = 0

    if progress_cb:
        progress_cb(0, total, success_count, fail_count)

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="repox") as executor:
        future_to_position = {
            executor.submit(invoke_fn, request): position
            for position, request in enumerate(requests)
        }

        try:
            # Only this thread writes into ``outcomes``.
            for future in as_completed(future_to_position):
                position = future_to_position[future]
                request = requests[position]
                try:
                    outcome = future.result()
                except Exception as exc:
                    log_error(f"unexpected error: {request.name} - {exc}")
                    outcome = OperationOutcome(
                        name=request.name,
                        status=OutcomeStatus.FAILURE,
                        message=f"unexpected error: {exc}",
                        reason="exception",
                    )

                outcomes[position] = outcome
                if outcome.failed:
                    fail_count += 1
                else:
                    success_count += 1

                if progress_cb:
                    progress_cb(success_count + fail_count, total, success_count, fail_count)
        except KeyboardInterrupt:
            # Workers see the flag and return "canceled"; running git processes are killed.
            request_shutdown()
            raise

    log_info(f"batch finished, ok: {success_count}, failed: {fail_count}")
    return [outcome for outcome in outcomes if outcome is not None]
