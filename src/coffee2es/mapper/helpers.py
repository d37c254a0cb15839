"""Runtime helpers emitted at the top of the program when used.

HELPERS maps a helper key to a builder taking the name the helper was
registered under.  The table is read-only.
"""

from __future__ import annotations

from typing import Callable

from ..estree import (
    AssignmentExpression,
    BinaryExpression,
    BlockStatement,
    ForOfStatement,
    FunctionExpression,
    Identifier,
    MemberExpression,
    ReturnStatement,
    Stmt,
    UnaryExpression,
    VariableDeclaration,
    VariableDeclarator,
    assign,
    call,
    expr_stmt,
    member,
    var,
)


def _modulo(name: str) -> Stmt:
    # (+a % (b = +b) + b) % b
    a, b = Identifier("a"), Identifier("b")
    coerced = AssignmentExpression("=", b, UnaryExpression("+", b))
    body = BinaryExpression(
        "%",
        BinaryExpression("+", BinaryExpression("%", UnaryExpression("+", a), coerced), b),
        b,
    )
    fn = FunctionExpression([a, b], BlockStatement([ReturnStatement(body)]))
    return var(Identifier(name), fn)


def _extend(name: str) -> Stmt:
    child, parent, key = Identifier("child"), Identifier("parent"), Identifier("key")
    copy = ForOfStatement(
        VariableDeclaration("let", [VariableDeclarator(key)]),
        call(member(Identifier("Object"), "keys"), [parent]),
        BlockStatement(
            [
                expr_stmt(
                    assign(
                        MemberExpression(child, key, True),
                        MemberExpression(parent, key, True),
                    )
                )
            ]
        ),
    )
    link = expr_stmt(
        call(
            member(Identifier("Object"), "setPrototypeOf"),
            [member(child, "prototype"), member(parent, "prototype")],
        )
    )
    record = expr_stmt(assign(member(child, "__super__"), member(parent, "prototype")))
    fn = FunctionExpression([child, parent], BlockStatement([copy, link, record, ReturnStatement(child)]))
    return var(Identifier(name), fn)


HELPERS: dict[str, Callable[[str], Stmt]] = {
    "modulo": _modulo,
    "extend": _extend,
}


def helper_statements(registry: dict[str, str]) -> list[Stmt]:
    """Definitions for every registered helper, in registration order."""
    return [HELPERS[key](name) for key, name in registry.items()]
