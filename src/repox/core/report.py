"""Summary report and exit code for a finished run."""

import sys
from typing import Dict, Optional, Sequence, TextIO

from ..domain.models import OperationOutcome, OutcomeStatus
from ..infra.logger import COLOR_ERROR, COLOR_SUCCESS, COLOR_WARNING, colorize

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

STATUS_COLORS = {
    OutcomeStatus.SUCCESS: COLOR_SUCCESS,
    OutcomeStatus.FAILURE: COLOR_ERROR,
    OutcomeStatus.SKIPPED: COLOR_WARNING,
}


def summarize(outcomes: Sequence[OperationOutcome]) -> Dict[str, int]:
    counts = {"total": len(outcomes), "success": 0, "failure": 0, "skipped": 0}
    for outcome in outcomes:
        counts[outcome.status.value] += 1
    return counts


def exit_code(outcomes: Sequence[OperationOutcome]) -> int:
    """0 when nothing failed, 1 otherwise."""
    if any(outcome.failed for outcome in outcomes):
        return EXIT_FAILURES
    return EXIT_OK


def format_report(outcomes: Sequence[OperationOutcome], stream: Optional[TextIO] = None) -> str:
    """Render one line per repository followed by a summary line.

    Colors are applied only when ``stream`` is a terminal.
    """
    stream = stream or sys.stdout
    counts = summarize(outcomes)
    summary = (
        f"total: {counts['total']}, success: {counts['success']}, "
        f"failure: {counts['failure']}, skipped: {counts['skipped']}"
    )
    if not outcomes:
        return f"no operations performed\n{summary}"

    name_width = max(len(outcome.name) for outcome in outcomes)
    status_width = max(len(status.value) for status in OutcomeStatus)

    lines = []
    for outcome in outcomes:
        label = outcome.status.value.upper().ljust(status_width)
        label = colorize(label, STATUS_COLORS[outcome.status], stream)
        line = f"{outcome.name.ljust(name_width)}  {label}  {outcome.message}"
        lines.append(line.rstrip())
    lines.append(summary)
    return "\n".join(lines)
