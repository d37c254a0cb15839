"""Tests for the coffee2es command line."""

import os
import subprocess
import sys
from pathlib import Path

SRC_DIR = Path(__file__).parent.parent / "src"


def run_cli(args: list[str], source: str = "") -> subprocess.CompletedProcess:
    env = dict(os.environ)
    env["PYTHONPATH"] = str(SRC_DIR)
    return subprocess.run(
        [sys.executable, "-m", "coffee2es", *args],
        input=source,
        capture_output=True,
        text=True,
        env=env,
    )


def test_stdin_to_stdout():
    result = run_cli([], "a = 1")
    assert result.returncode == 0
    assert result.stdout == "var a = 1;\n"


def test_dash_reads_stdin():
    result = run_cli(["-"], "a = 1")
    assert result.stdout == "var a = 1;\n"


def test_quote_and_tab_width():
    result = run_cli(["--quote", "single", "--tab-width", "4"], "f = -> 'x'")
    assert result.stdout == "var f = function() {\n    return 'x';\n};\n"


def test_stop_at_parse():
    result = run_cli(["--stop-at", "parse"], "a = 1")
    assert result.returncode == 0
    assert result.stdout == "Block\n  Assign\n    Literal a\n    Literal 1\n"


def test_input_and_output_files(tmp_path: Path):
    src = tmp_path / "in.coffee"
    out = tmp_path / "out.js"
    src.write_text("x = y")
    result = run_cli([str(src), "-o", str(out)])
    assert result.returncode == 0
    assert result.stdout == ""
    assert out.read_text() == "var x = y;\n"


def test_missing_input_file(tmp_path: Path):
    result = run_cli([str(tmp_path / "nope.coffee")])
    assert result.returncode == 1
    assert "cannot open" in result.stderr


def test_compile_error():
    result = run_cli([], 'a = "abc')
    assert result.returncode == 1
    assert result.stderr.startswith("error: 1:5: unterminated string literal")


def test_translation_error():
    result = run_cli([], "o = {@a: 1}")
    assert result.returncode == 1
    assert "error: can't convert node of type Value to ObjectProperty" in result.stderr


def test_unknown_flag():
    result = run_cli(["--frobnicate"])
    assert result.returncode == 2
    assert "unknown flag" in result.stderr


def test_bad_quote_style():
    result = run_cli(["--quote", "backtick"])
    assert result.returncode == 2


def test_help():
    result = run_cli(["--help"])
    assert result.returncode == 0
    assert result.stdout.startswith("coffee2es [OPTIONS]")


def test_verbose_logs_to_stderr():
    result = run_cli(["-v"], "a = 1")
    assert result.returncode == 0
    assert "coffee2es." in result.stderr
