#!/usr/bin/env python3
# repox: run one git command across every repository listed in ~/.repox
#
# Flow:
#   1. parse command line arguments
#   2. build the run configuration (DEV, config file)
#   3. read the repox file and resolve local paths
#   4. run the operation in a bounded worker pool
#   5. print the per-repository report and summary
#
# Exit codes: 0 all ok/skipped, 1 some repository failed, 2 usage or
# configuration error, 130 interrupted.

import argparse
import sys
from typing import List, Mapping, Optional

from . import __version__
from .application.execution import execute_run
from .config import DEFAULT_PARALLELISM, build_run_configuration
from .core.git import GitRunner
from .core.process_control import request_shutdown
from .core.report import EXIT_INTERRUPTED, EXIT_USAGE, format_report
from .domain.models import Operation
from .errors import RepoxError
from .infra.logger import echo, log_error, log_info, log_warning, set_color


def validate_positive_int(value: str) -> int:
    """Parse an integer >= 1."""
    try:
        num = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"must be an integer: {value}")
    if num < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return num


def validate_positive_float(value: str) -> float:
    try:
        num = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"must be a number: {value}")
    if num <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than zero: {value}")
    return num


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repox",
        description="A git repository utility: run one command across many repositories.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  clone     Clone all repos
  fetch     Fetch all repos
  pull      Pull all repos
  status    Check status of all repos

Examples:
  %(prog)s clone github
  %(prog)s -p 10 pull codeberg
  %(prog)s -c failed.repox --save-failed failed.repox clone github

Repox file format (default ~/.repox):
  https://github.com/owner/repo.git
  git@codeberg.org:owner/other.git   # trailing comment
  # full-line comment

Repositories live under $DEV/<subdirectory>/<name>.
        """,
    )
    parser.add_argument(
        "-p", "--parallel",
        type=validate_positive_int,
        default=DEFAULT_PARALLELISM,
        metavar="N",
        help=f"number of repositories processed at once (default: {DEFAULT_PARALLELISM})",
    )
    parser.add_argument(
        "-c", "--config",
        default=None,
        metavar="FILE",
        help="use a specific repox file (default: ~/.repox)",
    )
    parser.add_argument(
        "-t", "--timeout",
        type=validate_positive_float,
        default=None,
        metavar="SECONDS",
        help="abort a single git command after this many seconds (default: no limit)",
    )
    parser.add_argument(
        "--save-failed",
        default=None,
        metavar="FILE",
        help="write the remotes that failed to FILE, in repox file format",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="disable colored output",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "command",
        choices=[operation.value for operation in Operation],
        metavar="COMMAND",
        help="one of: %(choices)s",
    )
    parser.add_argument(
        "subdirectory",
        metavar="SUB_DIRECTORY",
        help="directory under $DEV holding the repositories (e.g. github, codeberg)",
    )
    return parser


def print_summary(outcomes, duration: float) -> None:
    echo("")
    echo(format_report(outcomes, sys.stdout))
    minutes, seconds = divmod(int(duration), 60)
    log_info(f"elapsed: {minutes}m {seconds}s")


def main(
    argv: Optional[List[str]] = None,
    runner: Optional[GitRunner] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """Entry point.

    Returns:
        Process exit code. argparse usage errors exit with code 2 directly.
    """
    args = create_parser().parse_args(argv)
    if args.no_color:
        set_color(False)

    try:
        config = build_run_configuration(args, environ)
        result = execute_run(config, runner=runner)
    except RepoxError as exc:
        log_error(str(exc))
        return EXIT_USAGE
    except KeyboardInterrupt:
        log_warning("interrupted, stopping running git processes")
        request_shutdown()
        return EXIT_INTERRUPTED

    print_summary(result.outcomes, result.duration)
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
