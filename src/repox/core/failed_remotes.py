# Failed-remotes file
#
# save_failed_remotes() writes the remotes whose operation failed in repox
# file format, so the run can be retried with ``-c <file>``.

from pathlib import Path
from typing import List, Sequence

from ..domain.models import OperationOutcome, RemoteDescriptor
from ..domain.remotes import render_remotes
from ..infra.logger import log_info, log_warning


def failed_descriptors(
    descriptors: Sequence[RemoteDescriptor],
    outcomes: Sequence[OperationOutcome],
) -> List[RemoteDescriptor]:
    """Descriptors whose outcome is a failure, in input order."""
    failed_names = {outcome.name for outcome in outcomes if outcome.failed}
    return [descriptor for descriptor in descriptors if descriptor.name in failed_names]


def save_failed_remotes(failed: Sequence[RemoteDescriptor], failed_file: Path) -> None:
    """Write failed remotes to ``failed_file``; remove the file when none failed."""
    if not failed:
        if failed_file.exists():
            try:
                failed_file.unlink()
            except OSError as exc:
                log_warning(f"could not remove stale failed-remotes file {failed_file}: {exc}")
        return

    try:
        failed_file.parent.mkdir(parents=True, exist_ok=True)
        failed_file.write_text(render_remotes(failed), encoding="utf-8")
    except OSError as exc:
        log_warning(f"could not save failed remotes to {failed_file}: {exc}")
        return

    log_warning(f"{len(failed)} repositories failed")
    log_info(f"failed remotes saved to {failed_file}, retry with: repox -c {failed_file} ...")
