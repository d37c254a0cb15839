"""Middleend - rewrite passes over the mapped ESTree program, run in order."""

from __future__ import annotations

import logging

from ..estree import Program
from .declarations import insert_declarations
from .supercalls import insert_super_calls
from .switches import insert_breaks

log = logging.getLogger("coffee2es.middleend")

PASSES = [insert_declarations, insert_super_calls, insert_breaks]


def run_passes(program: Program) -> None:
    for run in PASSES:
        log.debug("pass %s", run.__name__)
        run(program)


__all__ = ["insert_breaks", "insert_declarations", "insert_super_calls", "run_passes"]
