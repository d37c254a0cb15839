"""Pytest configuration for the coffee2es test suite."""

import sys
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_DIR))

from coffee2es import (  # noqa: E402
    IllegalSourceError,
    ParseError,
    TokenizeError,
    TranslationError,
    compile,
)

COMPILE_ERRORS = (TokenizeError, ParseError, TranslationError, IllegalSourceError)


@pytest.fixture
def transpiled_output(codegen_input: str) -> str:
    """Compile a fixture input; errors come back as 'error: <message>'."""
    try:
        return compile(codegen_input)
    except COMPILE_ERRORS as e:
        return "error: " + e.msg
