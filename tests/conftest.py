from pathlib import Path
import sys
import threading

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from repox.core.git import GitResult  # noqa: E402


@pytest.fixture(autouse=True)
def _clear_shutdown_flag():
    from repox.core.process_control import clear_shutdown_request

    clear_shutdown_request()
    yield
    clear_shutdown_request()


class FakeGitRunner:
    """Programmable stand-in for the git executable.

    ``results`` maps a repository name to a ``GitResult`` (or an exception to
    raise). Clone calls that succeed create the target directory with a
    ``.git`` folder, like the real command would.
    """

    def __init__(self, results=None):
        self.results = dict(results or {})
        self.calls = []
        self._lock = threading.Lock()

    def run(self, operation, local_path, url=None, timeout=None):
        with self._lock:
            self.calls.append((operation.value, Path(local_path).name, url))
        result = self.results.get(Path(local_path).name, GitResult(0, "", ""))
        if isinstance(result, BaseException):
            raise result
        if operation.value == "clone" and result.returncode == 0:
            (Path(local_path) / ".git").mkdir(parents=True)
        return result


@pytest.fixture
def fake_runner():
    return FakeGitRunner()
