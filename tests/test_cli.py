import pytest

from conftest import FakeGitRunner
from repox.cli import main
from repox.core.git import GitResult
from repox.core.process_control import is_shutdown_requested


@pytest.fixture
def workspace(tmp_path):
    dev = tmp_path / "dev"
    dev.mkdir()
    config = tmp_path / "repos.repox"
    config.write_text(
        "https://example.com/a.git\n"
        "# not a repository\n"
        "https://example.com/b.git  # second one\n"
    )
    env = {"DEV": str(dev), "HOME": str(tmp_path)}
    return dev, config, env


def test_clone_scenario_creates_repositories(workspace, capsys):
    dev, config, env = workspace
    runner = FakeGitRunner()

    code = main(["-p", "2", "-c", str(config), "clone", "github"], runner=runner, environ=env)

    assert code == 0
    assert sorted(p.name for p in (dev / "github").iterdir()) == ["a", "b"]
    assert sorted(call[1] for call in runner.calls) == ["a", "b"]
    out = capsys.readouterr().out
    assert "total: 2, success: 2, failure: 0, skipped: 0" in out


def test_report_lines_follow_config_order(workspace, capsys):
    dev, config, env = workspace

    main(["-c", str(config), "clone", "github"], runner=FakeGitRunner(), environ=env)

    lines = [line for line in capsys.readouterr().out.splitlines() if "SUCCESS " in line]
    assert [line.split()[0] for line in lines] == ["a", "b"]


def test_status_without_checkout_fails_without_git(workspace, capsys):
    dev, config, env = workspace
    runner = FakeGitRunner()

    code = main(["-c", str(config), "status", "github"], runner=runner, environ=env)

    assert code == 1
    assert runner.calls == []
    out = capsys.readouterr().out
    assert "not cloned" in out
    assert "failure: 2" in out


def test_second_clone_is_skipped(workspace, capsys):
    dev, config, env = workspace
    runner = FakeGitRunner()
    main(["-c", str(config), "clone", "github"], runner=runner, environ=env)
    runner.calls.clear()

    code = main(["-c", str(config), "clone", "github"], runner=runner, environ=env)

    assert code == 0
    assert runner.calls == []
    assert "skipped: 2" in capsys.readouterr().out


def test_one_failure_sets_exit_code_and_saves_failed(workspace, tmp_path, capsys):
    dev, config, env = workspace
    failed_file = tmp_path / "failed.repox"
    runner = FakeGitRunner({"a": GitResult(128, "", "fatal: Could not resolve host: example.com")})

    code = main(
        ["-c", str(config), "--save-failed", str(failed_file), "clone", "github"],
        runner=runner,
        environ=env,
    )

    assert code == 1
    assert (dev / "github" / "b").is_dir()
    assert not (dev / "github" / "a").exists()
    assert failed_file.read_text() == "https://example.com/a.git\n"
    assert "Could not resolve host" in capsys.readouterr().out


def test_save_failed_removes_stale_file(workspace, tmp_path):
    dev, config, env = workspace
    failed_file = tmp_path / "failed.repox"
    failed_file.write_text("https://example.com/old.git\n")

    code = main(
        ["-c", str(config), "--save-failed", str(failed_file), "clone", "github"],
        runner=FakeGitRunner(),
        environ=env,
    )

    assert code == 0
    assert not failed_file.exists()


def test_malformed_line_is_configuration_error(tmp_path, capsys):
    dev = tmp_path / "dev"
    config = tmp_path / "bad.repox"
    config.write_text("https://example.com/a.git\nhttps://example.com/b.git extra\n")
    runner = FakeGitRunner()

    code = main(["-c", str(config), "clone", "github"], runner=runner, environ={"DEV": str(dev)})

    assert code == 2
    assert runner.calls == []
    assert not dev.exists()
    assert "line 2" in capsys.readouterr().err


def test_missing_config_file(tmp_path, capsys):
    code = main(
        ["-c", str(tmp_path / "nope"), "fetch", "github"],
        runner=FakeGitRunner(),
        environ={"DEV": str(tmp_path)},
    )

    assert code == 2
    assert "no repox file" in capsys.readouterr().err


def test_missing_dev(workspace, capsys):
    dev, config, env = workspace
    runner = FakeGitRunner()

    code = main(["-c", str(config), "clone", "github"], runner=runner, environ={"HOME": env["HOME"]})

    assert code == 2
    assert runner.calls == []


def test_empty_config_is_a_noop(tmp_path, capsys):
    config = tmp_path / ".repox"
    config.write_text("# nothing yet\n\n")

    code = main(["clone", "github"], runner=FakeGitRunner(), environ={"DEV": str(tmp_path), "HOME": str(tmp_path)})

    assert code == 0
    assert "no operations performed" in capsys.readouterr().out


@pytest.mark.parametrize("value", ["0", "-3", "two"])
def test_bad_parallelism_is_usage_error(workspace, value):
    dev, config, env = workspace
    runner = FakeGitRunner()

    with pytest.raises(SystemExit) as excinfo:
        main(["-p", value, "-c", str(config), "clone", "github"], runner=runner, environ=env)

    assert excinfo.value.code == 2
    assert runner.calls == []
    assert not (dev / "github").exists()


@pytest.mark.parametrize("argv", [["clone"], [], ["frobnicate", "github"]])
def test_missing_or_unknown_arguments(argv):
    with pytest.raises(SystemExit) as excinfo:
        main(argv, runner=FakeGitRunner(), environ={})

    assert excinfo.value.code == 2


def test_help_exits_zero(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--help"], runner=FakeGitRunner(), environ={})

    assert excinfo.value.code == 0
    assert "clone" in capsys.readouterr().out


def test_interrupt_exits_130_and_requests_shutdown(tmp_path, capsys):
    config = tmp_path / ".repox"
    config.write_text("".join(f"https://example.com/r{i}.git\n" for i in range(6)))
    runner = FakeGitRunner({"r0": KeyboardInterrupt()})

    code = main(
        ["-p", "1", "-c", str(config), "clone", "github"],
        runner=runner,
        environ={"DEV": str(tmp_path / "dev")},
    )

    assert code == 130
    assert is_shutdown_requested()
    # one worker takes requests in file order
    assert runner.calls[0][1] == "r0"
    names = [call[1] for call in runner.calls]
    assert len(names) == len(set(names))
    assert "interrupted" in capsys.readouterr().out
