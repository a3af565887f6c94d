"""Exception types raised before any repository operation starts."""

from typing import Optional


class RepoxError(Exception):
    """Base class for fatal repox errors."""


class UsageError(RepoxError):
    """Malformed command line arguments."""


class ConfigurationError(RepoxError):
    """Missing or invalid configuration (environment, config file, directories)."""


class ParseError(ConfigurationError):
    """A configuration line that is not a single remote URL."""

    def __init__(self, line_number: int, line: str, detail: Optional[str] = None):
        self.line_number = line_number
        self.line = line
        self.detail = detail or "expected a single remote URL"
        super().__init__(f"line {line_number}: {self.detail}: {line!r}")
