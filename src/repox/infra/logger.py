# Console logging: timestamped, level-tagged lines
#
# Functions:
#   - log_info() / log_success() / log_warning() to stdout
#   - log_error() to stderr
#   - set_color() to force colors off (--no-color)
#
# Lines written from worker threads are serialized by a lock.

import sys
import threading
from datetime import datetime
from typing import TextIO

import colorama
from colorama import Fore, Style

colorama.just_fix_windows_console()

COLOR_INFO = Fore.CYAN
COLOR_SUCCESS = Fore.GREEN
COLOR_ERROR = Fore.RED
COLOR_WARNING = Fore.YELLOW

_print_lock = threading.Lock()
_color_enabled = True


def set_color(enabled: bool) -> None:
    """Enable or disable ANSI colors for all subsequent output."""
    global _color_enabled
    _color_enabled = enabled


def use_color(stream: TextIO) -> bool:
    """Whether to colorize output written to ``stream``."""
    if not _color_enabled:
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def colorize(text: str, color: str, stream: TextIO) -> str:
    if use_color(stream):
        return f"{color}{text}{Style.RESET_ALL}"
    return text


def _get_timestamp() -> str:
    return datetime.now().strftime('%Y-%m-%d %H:%M:%S')


def _format_message(level: str, color: str, message: str, stream: TextIO) -> str:
    tag = colorize(f"[{level}]", color, stream)
    return f"{tag} [{_get_timestamp()}] {message}"


def _emit(level: str, color: str, message: str, stream: TextIO) -> None:
    line = _format_message(level, color, message, stream)
    with _print_lock:
        print(line, file=stream, flush=True)


def echo(text: str) -> None:
    """Print plain text to stdout under the output lock."""
    with _print_lock:
        print(text, file=sys.stdout, flush=True)


def log_info(message: str) -> None:
    _emit("INFO", COLOR_INFO, message, sys.stdout)


def log_success(message: str) -> None:
    _emit("SUCCESS", COLOR_SUCCESS, message, sys.stdout)


def log_error(message: str) -> None:
    """Log an error (goes to stderr)."""
    _emit("ERROR", COLOR_ERROR, message, sys.stderr)


def log_warning(message: str) -> None:
    _emit("WARNING", COLOR_WARNING, message, sys.stdout)
