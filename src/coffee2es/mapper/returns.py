"""Implicit returns: the last statement of a function body yields its value."""

from __future__ import annotations

from ..estree import (
    BlockStatement,
    ClassDeclaration,
    CommentStatement,
    ExpressionStatement,
    IfStatement,
    ReturnStatement,
    Stmt,
    SwitchStatement,
    TryStatement,
)


def insert_returns(body: list[Stmt]) -> None:
    """Rewrite the last non-comment statement of body into a return, in place.

    Branches of if/else, every switch case, and the try block and catch
    body are handled recursively.  Loops and other statements are left
    alone.
    """
    idx = len(body) - 1
    while idx >= 0 and isinstance(body[idx], CommentStatement):
        idx -= 1
    if idx < 0:
        return
    stmt = body[idx]
    if isinstance(stmt, ExpressionStatement):
        body[idx] = ReturnStatement(stmt.expression)
    elif isinstance(stmt, IfStatement):
        _if_returns(stmt)
    elif isinstance(stmt, SwitchStatement):
        for case in stmt.cases:
            if case.consequent:
                insert_returns(case.consequent)
    elif isinstance(stmt, TryStatement):
        insert_returns(stmt.block.body)
        if stmt.handler is not None:
            insert_returns(stmt.handler.body.body)
    elif isinstance(stmt, BlockStatement):
        insert_returns(stmt.body)
    elif isinstance(stmt, ClassDeclaration):
        body.insert(idx + 1, ReturnStatement(stmt.id))


def _if_returns(stmt: IfStatement) -> None:
    insert_returns(stmt.consequent.body)
    if isinstance(stmt.alternate, IfStatement):
        _if_returns(stmt.alternate)
    elif isinstance(stmt.alternate, BlockStatement):
        insert_returns(stmt.alternate.body)
