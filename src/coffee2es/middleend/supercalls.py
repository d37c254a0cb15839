"""Add ``super(...arguments)`` to subclass constructors that never call super."""

from __future__ import annotations

import logging

from ..estree import (
    CallExpression,
    ClassDeclaration,
    ClassExpression,
    FunctionExpression,
    Identifier,
    MethodDefinition,
    Node,
    Program,
    SpreadElement,
    Super,
    children,
    expr_stmt,
    walk,
)

log = logging.getLogger("coffee2es.middleend")


def calls_super(node: Node) -> bool:
    """True if node calls super(), not counting nested functions or classes."""
    if isinstance(node, CallExpression) and isinstance(node.callee, Super):
        return True
    for child in children(node):
        if isinstance(child, (FunctionExpression, ClassExpression, ClassDeclaration)):
            continue
        if calls_super(child):
            return True
    return False


def insert_super_calls(program: Program) -> None:
    for node in walk(program):
        if not isinstance(node, (ClassDeclaration, ClassExpression)) or node.superclass is None:
            continue
        for item in node.body.body:
            if isinstance(item, MethodDefinition) and item.kind == "constructor" and not calls_super(item.value.body):
                log.debug("adding super call to constructor")
                call = CallExpression(Super(), [SpreadElement(Identifier("arguments"))])
                item.value.body.body.insert(0, expr_stmt(call))
