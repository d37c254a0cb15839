"""End switch cases with ``break`` so they never fall through."""

from __future__ import annotations

from ..estree import (
    BreakStatement,
    ContinueStatement,
    Program,
    ReturnStatement,
    SwitchStatement,
    ThrowStatement,
    walk,
)

TERMINAL = (ReturnStatement, ThrowStatement, BreakStatement, ContinueStatement)


def insert_breaks(program: Program) -> None:
    """Append a break to every non-empty case but the last.

    Empty cases are labels shared with the next case, and cases that
    already end in a jump need no break.
    """
    for node in walk(program):
        if not isinstance(node, SwitchStatement):
            continue
        for case in node.cases[:-1]:
            if case.consequent and not isinstance(case.consequent[-1], TERMINAL):
                case.consequent.append(BreakStatement())
