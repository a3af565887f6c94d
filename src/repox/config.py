"""Build the run configuration from parsed arguments and the environment.

This is the only place that reads ``DEV`` and ``HOME``; everything downstream
receives a ``RunConfiguration``.
"""

import argparse
import os
from pathlib import Path
from typing import Mapping, Optional

from .domain.models import Operation, RunConfiguration
from .errors import ConfigurationError, UsageError

DEFAULT_PARALLELISM = 5
CONFIG_FILE_NAME = ".repox"
BASE_DIR_ENV = "DEV"


def default_config_file(environ: Mapping[str, str]) -> Path:
    """``<home>/.repox``."""
    home = environ.get("HOME")
    return (Path(home) if home else Path.home()) / CONFIG_FILE_NAME


def _expand(path: str, environ: Mapping[str, str]) -> Path:
    if path.startswith("~") and environ.get("HOME"):
        path = environ["HOME"] + path[1:]
    return Path(os.path.expanduser(path))


def build_run_configuration(
    args: argparse.Namespace,
    environ: Optional[Mapping[str, str]] = None,
) -> RunConfiguration:
    """Validate arguments and environment into a ``RunConfiguration``.

    Raises:
        UsageError: an argument value is out of range
        ConfigurationError: ``DEV`` is missing or the sub-directory is unusable
    """
    environ = os.environ if environ is None else environ

    if args.parallel < 1:
        raise UsageError(f"parallelism must be a positive integer: {args.parallel}")

    sub_directory = (args.subdirectory or "").strip()
    if not sub_directory:
        raise ConfigurationError("sub-directory must not be empty")
    if sub_directory in (".", "..") or "/" in sub_directory or os.sep in sub_directory:
        raise ConfigurationError(f"sub-directory must be a single directory name: {sub_directory!r}")

    base = (environ.get(BASE_DIR_ENV) or "").strip()
    if not base:
        raise ConfigurationError(f"environment variable {BASE_DIR_ENV} is not set")

    if args.config:
        config_file = _expand(args.config, environ)
    else:
        config_file = default_config_file(environ)

    return RunConfiguration(
        operation=Operation(args.command),
        sub_directory=sub_directory,
        base_directory=_expand(base, environ).absolute(),
        config_file=config_file,
        parallelism=args.parallel,
        timeout=args.timeout,
        failed_file=_expand(args.save_failed, environ) if args.save_failed else None,
    )


def prepare_base_directory(config: RunConfiguration) -> None:
    """Create ``DEV/<sub>`` for clone runs."""
    if config.operation is not Operation.CLONE:
        return
    target = config.target_directory
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigurationError(f"failed to create directory {target}: {exc}") from exc
