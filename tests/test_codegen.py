"""Pytest-based codegen tests for coffee2es."""

from pathlib import Path

import pytest

CODEGEN_DIR = Path(__file__).parent / "codegen"


def parse_codegen_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse a .tests file into (name, input, expected) tuples.

    Expected is the compiled JavaScript, or 'error: <message>' when
    compilation must fail with a message containing <message>.
    """
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and lines[i] != "---":
                input_lines.append(lines[i])
                i += 1
            i += 1
            expected_lines: list[str] = []
            while i < len(lines) and lines[i] != "---":
                expected_lines.append(lines[i])
                i += 1
            i += 1
            result.append((test_name, "\n".join(input_lines), "\n".join(expected_lines).strip()))
        else:
            i += 1
    return result


def discover_codegen_tests() -> list[tuple[str, str, str]]:
    """Find all codegen tests, returns (test_id, input, expected)."""
    results = []
    for test_file in sorted(CODEGEN_DIR.glob("*.tests")):
        for name, input_code, expected in parse_codegen_file(test_file):
            results.append((f"{test_file.stem}/{name}", input_code, expected))
    return results


def pytest_generate_tests(metafunc):
    """Parametrize tests over codegen test files."""
    if "codegen_input" in metafunc.fixturenames:
        params = [
            pytest.param(input_code, expected, id=test_id)
            for test_id, input_code, expected in discover_codegen_tests()
        ]
        metafunc.parametrize("codegen_input,codegen_expected", params)


def normalize(code: str) -> str:
    return "\n".join(line.rstrip() for line in code.strip().split("\n"))


def test_codegen(codegen_input: str, codegen_expected: str, transpiled_output: str):
    """Verify compiled output matches expected code."""
    if codegen_expected.startswith("error:"):
        expected_msg = codegen_expected[6:].strip()
        if not transpiled_output.startswith("error:"):
            pytest.fail(f"Expected error containing '{expected_msg}', got:\n{transpiled_output}")
        if expected_msg not in transpiled_output:
            pytest.fail(f"Expected error containing '{expected_msg}', got: {transpiled_output}")
        return
    if normalize(transpiled_output) != normalize(codegen_expected):
        pytest.fail(
            f"Output mismatch:\n--- expected ---\n{codegen_expected}\n--- got ---\n{transpiled_output}"
        )
