"""Map remotes to local working-directory paths."""

from pathlib import Path
from typing import List, Sequence, Union

from ..domain.models import OperationRequest, RemoteDescriptor, RunConfiguration
from ..errors import ConfigurationError


def _check_directories(base_directory: Union[str, Path], sub_directory: str) -> None:
    if not str(base_directory).strip():
        raise ConfigurationError("base directory must not be empty")
    if not sub_directory or not sub_directory.strip():
        raise ConfigurationError("sub-directory must not be empty")


def resolve_local_path(
    descriptor: RemoteDescriptor,
    base_directory: Union[str, Path],
    sub_directory: str,
) -> Path:
    """Return ``base_directory/sub_directory/descriptor.name``.

    Pure path composition, the filesystem is never touched.
    """
    _check_directories(base_directory, sub_directory)
    return Path(base_directory) / sub_directory / descriptor.name


def build_requests(
    descriptors: Sequence[RemoteDescriptor],
    config: RunConfiguration,
) -> List[OperationRequest]:
    """Build one request per descriptor, in input order."""
    _check_directories(config.base_directory, config.sub_directory)
    return [
        OperationRequest(
            descriptor=descriptor,
            operation=config.operation,
            local_path=resolve_local_path(descriptor, config.base_directory, config.sub_directory),
        )
        for descriptor in descriptors
    ]
