"""Tests for the command line entry point."""

from unittest.mock import MagicMock

import pytest

from prettier_diff import cli
from prettier_diff.config import Config
from prettier_diff.processors import FilesNotFormattedError, RunSummary


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    """Stub out logging setup, git and the run itself."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for var in ("PRETTIER_DIFF_MARKERS", "PRETTIER_DIFF_EXTENSIONS", "PRETTIER_DIFF_COMMIT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(cli, "setup_logger", MagicMock())
    monkeypatch.setattr(cli.git_utils, "is_git_repo", lambda: True)
    monkeypatch.setattr(cli.git_utils, "prepare_ci_base", lambda base: base)
    fake_log = MagicMock()
    monkeypatch.setattr(cli, "log", fake_log)
    run = MagicMock(return_value=RunSummary(processed=["a.js"]))
    monkeypatch.setattr(cli, "run_prettier", run)
    return run, fake_log


def _options(run):
    return run.call_args.args[0]


class TestOptions:
    def test_flags(self, cli_env):
        run, _ = cli_env
        assert cli.main(["--check", "--staged", "--lines", "--pattern", "src/*"]) == 0
        options = _options(run)
        assert options.check and options.staged and options.lines
        assert not options.changed
        assert options.pattern == "src/*"
        assert options.markers is False

    def test_extensions_flag(self, cli_env):
        run, _ = cli_env
        cli.main(["--extensions", "ts, .js,"])
        assert _options(run).extensions == ["ts", "js"]

    def test_markers_from_config(self, cli_env, tmp_path):
        run, _ = cli_env
        (tmp_path / ".prettier-diff.yaml").write_text("markers: true\nextensions: [css]\n")
        cli.main(["--lines"])
        assert _options(run).markers is True
        assert _options(run).extensions == ["css"]

    def test_markers_flag(self, cli_env):
        run, _ = cli_env
        cli.main(["--lines", "--markers"])
        assert _options(run).markers is True

    def test_no_progress(self, cli_env):
        run, _ = cli_env
        cli.main(["--no-progress"])
        assert _options(run).progress is False

    def test_options_from_args_uses_config_base(self, monkeypatch):
        monkeypatch.setenv("PRETTIER_DIFF_COMMIT", "origin/main")
        args = cli.build_parser().parse_args([])
        assert cli.options_from_args(args, Config()).diff_base == "origin/main"

    def test_engine_uses_configured_command(self, cli_env, monkeypatch):
        run, _ = cli_env
        monkeypatch.setenv("PRETTIER_DIFF_COMMAND", "node_modules/.bin/prettier")
        cli.main([])
        engine = run.call_args.args[1]
        assert engine._command == ["node_modules/.bin/prettier"]


class TestExitCodes:
    def test_ok(self, cli_env):
        assert cli.main([]) == cli.EXIT_OK

    def test_not_formatted(self, cli_env, capsys):
        run, fake_log = cli_env
        run.side_effect = FilesNotFormattedError(RunSummary(unformatted=["a.js"]))
        assert cli.main(["--check"]) == cli.EXIT_NOT_FORMATTED
        fake_log.print_summary.assert_called_once_with(level="warn")
        assert "Some files are not formatted." in capsys.readouterr().out

    def test_not_formatted_with_failures(self, cli_env):
        run, _ = cli_env
        run.side_effect = FilesNotFormattedError(
            RunSummary(unformatted=["a.js"], failed=["b.js"])
        )
        assert cli.main(["--check"]) == cli.EXIT_ERROR

    def test_failed_files(self, cli_env, capsys):
        run, _ = cli_env
        run.return_value = RunSummary(processed=["a.js"], failed=["b.js", "c.js"])
        assert cli.main([]) == cli.EXIT_ERROR
        assert "An error occurred while formatting 2 file(s)." in capsys.readouterr().out

    def test_git_error(self, cli_env):
        run, fake_log = cli_env
        run.side_effect = cli.git_utils.GitError("fatal: not a git repository")
        assert cli.main([]) == cli.EXIT_ERROR
        fake_log.error.assert_called_once()

    def test_outside_git_repository(self, cli_env, monkeypatch):
        run, fake_log = cli_env
        monkeypatch.setattr(cli.git_utils, "is_git_repo", lambda: False)
        assert cli.main([]) == cli.EXIT_ERROR
        run.assert_not_called()
        assert "Not a git repository" in fake_log.error.call_args.args[0]
