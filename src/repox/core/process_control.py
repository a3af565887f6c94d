"""Tracked git subprocesses: timeouts and shutdown on interrupt."""

import os
import platform
import signal
import subprocess
import threading
from typing import Optional, Sequence, Set, Tuple


IS_WINDOWS = platform.system() == "Windows"

_active_processes: Set[subprocess.Popen] = set()
_active_processes_lock = threading.Lock()
_shutdown_event = threading.Event()

# Output still buffered in the pipes after a kill is read for at most this long.
DRAIN_TIMEOUT = 2.0


class ProcessCanceled(Exception):
    """Raised when a tracked process is stopped by a shutdown request."""


def start_tracked_process(command: Sequence[str], **kwargs) -> subprocess.Popen:
    """Start a subprocess and track it for shutdown cleanup.

    On POSIX the process leads its own session, so ``terminate_process`` can
    signal the helpers git spawns (ssh, git-remote-https) along with it.
    """
    if not IS_WINDOWS:
        kwargs.setdefault("start_new_session", True)
    process = subprocess.Popen(list(command), **kwargs)
    with _active_processes_lock:
        _active_processes.add(process)
    return process


def untrack_process(process: subprocess.Popen) -> None:
    """Remove process from tracked set."""
    with _active_processes_lock:
        _active_processes.discard(process)


def _signal_group(process: subprocess.Popen, sig: int) -> None:
    """Send ``sig`` to the process group led by ``process``."""
    try:
        os.killpg(process.pid, sig)
    except OSError:
        # Group already gone, or the process was started without its own session.
        if process.poll() is None:
            process.send_signal(sig)


def terminate_process(process: subprocess.Popen, timeout: float = 2.0) -> None:
    """Terminate a process and its children, killing them if they linger."""
    if IS_WINDOWS:
        if process.poll() is not None:
            return
        try:
            subprocess.run(
                ["taskkill", "/F", "/T", "/PID", str(process.pid)],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError:
            process.kill()
    else:
        # Children may outlive the leader, so signal the group even if it exited.
        _signal_group(process, signal.SIGTERM)

    try:
        process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        if IS_WINDOWS:
            process.kill()
        else:
            _signal_group(process, signal.SIGKILL)
        process.wait()


def _drain(process: subprocess.Popen) -> None:
    """Read what is left in the pipes without waiting on stray holders."""
    try:
        process.communicate(timeout=DRAIN_TIMEOUT)
    except subprocess.TimeoutExpired:
        for stream in (process.stdout, process.stderr):
            if stream is not None:
                stream.close()


def run_tracked(
    command: Sequence[str],
    cwd: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Tuple[int, str, str]:
    """Run a command to completion and return ``(returncode, stdout, stderr)``.

    Raises:
        subprocess.TimeoutExpired: the command outlived ``timeout``; it has
            already been terminated
        ProcessCanceled: shutdown was requested while the command ran
        OSError: the executable could not be started
    """
    if is_shutdown_requested():
        raise ProcessCanceled()

    process = start_tracked_process(
        command,
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
    )
    try:
        try:
            stdout, stderr = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            terminate_process(process)
            _drain(process)
            raise
    finally:
        untrack_process(process)

    if is_shutdown_requested():
        raise ProcessCanceled()

    return process.returncode, stdout or "", stderr or ""


def terminate_all_tracked_processes() -> None:
    """Terminate all tracked subprocesses."""
    with _active_processes_lock:
        processes = list(_active_processes)

    for process in processes:
        terminate_process(process)
        untrack_process(process)


def request_shutdown() -> None:
    """Signal shutdown and terminate running tracked subprocesses."""
    _shutdown_event.set()
    terminate_all_tracked_processes()


def clear_shutdown_request() -> None:
    """Clear shutdown signal before a new run."""
    _shutdown_event.clear()


def is_shutdown_requested() -> bool:
    return _shutdown_event.is_set()
