"""Repox file parsing and rendering in the domain layer.

File format::

    <git-remote-url>
    <git-remote-url>  # optional trailing comment
    # full-line comment
"""

import re
from pathlib import Path
from typing import Dict, Iterable, List

from ..errors import ConfigurationError, ParseError
from .models import RemoteDescriptor


COMMENT_CHAR = "#"
GIT_SUFFIX = ".git"
NAME_SEPARATOR_PATTERN = re.compile(r"[/:]")


def derive_name(url: str) -> str:
    """Derive the local directory name from a remote URL.

    ``https://host/owner/repo.git`` -> ``repo``; scp-style remotes without a
    slash (``host:repo.git``) split on the colon instead.
    """
    segment = NAME_SEPARATOR_PATTERN.split(url.rstrip("/"))[-1]
    if segment.endswith(GIT_SUFFIX):
        segment = segment[: -len(GIT_SUFFIX)]
    return segment


def _strip_comment(line: str) -> str:
    index = line.find(COMMENT_CHAR)
    if index != -1:
        line = line[:index]
    return line.strip()


def parse_remotes(content: str) -> List[RemoteDescriptor]:
    """Parse repox file content into descriptors, in file order.

    Raises:
        ParseError: a line holds more than one token or yields no usable name
        ConfigurationError: two remotes resolve to the same name
    """
    remotes: List[RemoteDescriptor] = []
    seen: Dict[str, RemoteDescriptor] = {}

    for line_number, raw_line in enumerate(content.splitlines(), start=1):
        url = _strip_comment(raw_line)
        if not url:
            continue

        if len(url.split()) != 1:
            raise ParseError(line_number, raw_line.strip())

        name = derive_name(url)
        if not name or name in (".", ".."):
            raise ParseError(line_number, raw_line.strip(), "cannot derive a repository name")

        previous = seen.get(name)
        if previous is not None:
            raise ConfigurationError(
                f"duplicate repository name {name!r}: "
                f"line {previous.line_number} ({previous.url}) and line {line_number} ({url})"
            )

        descriptor = RemoteDescriptor(url=url, name=name, line_number=line_number)
        seen[name] = descriptor
        remotes.append(descriptor)

    return remotes


def render_remotes(remotes: Iterable[RemoteDescriptor]) -> str:
    """Render descriptors back into repox file text, one URL per line."""
    lines = [remote.url for remote in remotes]
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def load_remotes(path: Path) -> List[RemoteDescriptor]:
    """Read and parse a repox file."""
    if not path.exists():
        raise ConfigurationError(f"no repox file found at {path}")
    if not path.is_file():
        raise ConfigurationError(f"not a regular file: {path}")

    try:
        content = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"could not read repox file {path}: {exc}") from exc

    return parse_remotes(content)
