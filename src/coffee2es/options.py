"""Compiler options."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .frontend.ast import Block

QUOTES: dict[str, str] = {"double": '"', "single": "'"}


@dataclass
class Options:
    """Formatting and parser options for a compile run.

    parse replaces the bundled CoffeeScript parser; it must return a Block.
    """

    tab_width: int = 2
    quote: str = "double"
    parse: Callable[[str], Block] | None = None

    def __post_init__(self) -> None:
        if self.quote not in QUOTES:
            raise ValueError("quote must be 'double' or 'single', got " + repr(self.quote))
        if self.tab_width < 1:
            raise ValueError("tab_width must be positive, got " + str(self.tab_width))
