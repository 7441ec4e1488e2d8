import subprocess
from unittest.mock import MagicMock

import pytest

from prettier_diff import engine as engine_mod
from prettier_diff.engine import FileInfo, FormatterError, PrettierEngine


def _completed(stdout="", stderr="", returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode,
                                       stdout=stdout, stderr=stderr)


@pytest.fixture
def fake_run(monkeypatch):
    mock = MagicMock(return_value=_completed())
    monkeypatch.setattr(engine_mod.subprocess, "run", mock)
    return mock


def test_format_passes_text_on_stdin(fake_run):
    fake_run.return_value = _completed(stdout="a;\n")
    out = PrettierEngine("prettier").format("a\n", filepath="src/a.js")
    assert out == "a;\n"
    cmd = fake_run.call_args.args[0]
    assert cmd == ["prettier", "--stdin-filepath", "src/a.js"]
    assert fake_run.call_args.kwargs["input"] == "a\n"


def test_format_with_range_and_config(fake_run):
    PrettierEngine("npx prettier").format(
        "abc", filepath="a.ts", config=".prettierrc", range_start=4, range_end=8
    )
    cmd = fake_run.call_args.args[0]
    assert cmd[:2] == ["npx", "prettier"]
    assert "--config" in cmd and ".prettierrc" in cmd
    assert "--range-start=4" in cmd
    assert "--range-end=8" in cmd


def test_format_failure_raises(fake_run):
    fake_run.return_value = _completed(stderr="[error] SyntaxError", returncode=2)
    with pytest.raises(FormatterError, match="SyntaxError"):
        PrettierEngine().format("(", filepath="a.js")


def test_missing_binary_raises_formatter_error(fake_run):
    fake_run.side_effect = FileNotFoundError("no such file: prettier")
    with pytest.raises(FormatterError, match="Could not start formatter"):
        PrettierEngine("prettier").format("a", filepath="a.js")


def test_get_file_info(fake_run):
    fake_run.return_value = _completed(
        stdout='{ "ignored": false, "inferredParser": "typescript" }\n'
    )
    assert PrettierEngine().get_file_info("a.ts") == FileInfo(False, "typescript")


def test_get_file_info_unknown_parser(fake_run):
    fake_run.return_value = _completed(stdout='{"ignored": true, "inferredParser": null}')
    info = PrettierEngine().get_file_info("a.bin")
    assert info.ignored
    assert info.inferred_parser is None


def test_get_file_info_bad_output(fake_run):
    fake_run.return_value = _completed(stdout="not json")
    with pytest.raises(FormatterError):
        PrettierEngine().get_file_info("a.ts")


def test_resolve_config(fake_run):
    fake_run.return_value = _completed(stdout=".prettierrc.json\n")
    assert PrettierEngine().resolve_config("a.ts") == ".prettierrc.json"


def test_resolve_config_none_found(fake_run):
    fake_run.return_value = _completed(stderr="Can not find configure file", returncode=1)
    assert PrettierEngine().resolve_config("a.ts") is None
