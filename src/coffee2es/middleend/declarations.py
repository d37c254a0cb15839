"""Declare implicitly declared variables.

CoffeeScript declares a variable at its first assignment.  A statement-level
assignment to names not yet in scope becomes a ``var`` declaration; any
other first assignment gets a bare ``var name;`` hoisted to the top of the
enclosing function.  Parameters, existing ``var`` declarations, catch
parameters, and loop bindings all count as declared.
"""

from __future__ import annotations

import logging

from ..estree import (
    ArrayPattern,
    ArrowFunctionExpression,
    AssignmentExpression,
    AssignmentPattern,
    BlockStatement,
    ClassBody,
    ClassDeclaration,
    ClassExpression,
    Expr,
    ExpressionStatement,
    ForOfStatement,
    ForStatement,
    FunctionExpression,
    Identifier,
    IfStatement,
    MemberExpression,
    MethodDefinition,
    Node,
    ObjectPattern,
    Program,
    Property,
    PropertyDefinition,
    RestElement,
    ReturnStatement,
    Stmt,
    SwitchStatement,
    ThrowStatement,
    TryStatement,
    VariableDeclaration,
    WhileStatement,
    children,
    var,
)
from ..mapper.scope import Scope

log = logging.getLogger("coffee2es.middleend")


def pattern_names(target: Node) -> tuple[list[str], bool]:
    """Names bound by an assignment target, and whether it also writes a member."""
    names: list[str] = []
    has_member = False

    def visit(node: Node) -> None:
        nonlocal has_member
        match node:
            case Identifier(name=name):
                names.append(name)
            case MemberExpression():
                has_member = True
            case ArrayPattern(elements=elements):
                for element in elements:
                    visit(element)
            case ObjectPattern(properties=properties):
                for prop in properties:
                    visit(prop.value if isinstance(prop, Property) else prop)
            case RestElement(argument=argument):
                visit(argument)
            case AssignmentPattern(left=left):
                visit(left)

    visit(target)
    return names, has_member


def insert_declarations(program: Program) -> None:
    Declarer().function_body(program.body, [])


class Declarer:
    """Walks the program in document order with a stack of scopes.

    scope is the innermost frame, used for lookups; function is the nearest
    function frame, which receives every new declaration.
    """

    def __init__(self) -> None:
        self.scope: Scope = Scope()
        self.function: Scope = self.scope
        self.hoisted: list[str] = []

    def function_body(self, body: list[Stmt], params: list[Expr]) -> None:
        saved = (self.scope, self.function, self.hoisted)
        frame = self.scope.child()
        for param in params:
            for name in pattern_names(param)[0]:
                frame.declare(name)
        self.scope = frame
        self.function = frame
        self.hoisted = []
        self.statements(body)
        body[0:0] = [var(Identifier(name)) for name in self.hoisted]
        self.scope, self.function, self.hoisted = saved

    def block_scope(self, names: list[str]) -> Scope:
        """Push a block frame holding names; the caller restores self.scope."""
        saved = self.scope
        self.scope = saved.child()
        for name in names:
            self.scope.declare(name)
        return saved

    def hoist(self, names: list[str]) -> None:
        for name in names:
            if not self.scope.check(name):
                log.debug("hoisting var %s", name)
                self.function.declare(name)
                self.hoisted.append(name)

    # ── Statements ───────────────────────────────────────────

    def statements(self, stmts: list[Stmt]) -> None:
        for i, stmt in enumerate(stmts):
            stmts[i] = self.statement(stmt)

    def statement(self, stmt: Stmt) -> Stmt:
        match stmt:
            case ExpressionStatement(expression=AssignmentExpression(operator="=", left=left, right=right)):
                names, has_member = pattern_names(left)
                if names and not has_member and not any(self.scope.check(n) for n in names):
                    for name in names:
                        self.function.declare(name)
                    self.expression(right)
                    return var(left, right)
                self.expression(stmt.expression)
            case ExpressionStatement(expression=expression):
                self.expression(expression)
            case VariableDeclaration(kind=kind, declarations=declarations):
                target = self.function if kind == "var" else self.scope
                for decl in declarations:
                    for name in pattern_names(decl.id)[0]:
                        target.declare(name)
                    if decl.init is not None:
                        self.expression(decl.init)
            case ReturnStatement(argument=argument) | ThrowStatement(argument=argument):
                if argument is not None:
                    self.expression(argument)
            case IfStatement(test=test, consequent=consequent, alternate=alternate):
                self.expression(test)
                self.statements(consequent.body)
                if alternate is not None:
                    stmt.alternate = self.statement(alternate)
            case BlockStatement(body=body):
                self.statements(body)
            case SwitchStatement(discriminant=discriminant, cases=cases):
                self.expression(discriminant)
                for case in cases:
                    if case.test is not None:
                        self.expression(case.test)
                    self.statements(case.consequent)
            case TryStatement(block=block, handler=handler, finalizer=finalizer):
                self.statements(block.body)
                if handler is not None:
                    names = pattern_names(handler.param)[0] if handler.param is not None else []
                    saved = self.block_scope(names)
                    self.statements(handler.body.body)
                    self.scope = saved
                if finalizer is not None:
                    self.statements(finalizer.body)
            case WhileStatement(test=test, body=body):
                self.expression(test)
                self.statements(body.body)
            case ForStatement(init=init, test=test, update=update, body=body):
                saved = self.block_scope([])
                if isinstance(init, VariableDeclaration):
                    self.statement(init)
                elif init is not None:
                    self.expression(init)
                for part in (test, update):
                    if part is not None:
                        self.expression(part)
                self.statements(body.body)
                self.scope = saved
            case ForOfStatement(left=left, right=right, body=body):
                self.expression(right)
                names: list[str] = []
                for decl in left.declarations:
                    names.extend(pattern_names(decl.id)[0])
                saved = self.block_scope(names)
                self.statements(body.body)
                self.scope = saved
            case ClassDeclaration(id=id_, superclass=superclass, body=body):
                self.function.declare(id_.name)
                self.class_body(superclass, body)
        return stmt

    def class_body(self, superclass: Expr | None, body: ClassBody) -> None:
        if superclass is not None:
            self.expression(superclass)
        for item in body.body:
            if isinstance(item, MethodDefinition):
                self.function_body(item.value.body.body, item.value.params)
            elif isinstance(item, PropertyDefinition) and item.value is not None:
                self.expression(item.value)

    # ── Expressions ──────────────────────────────────────────

    def expression(self, expr: Node) -> None:
        match expr:
            case AssignmentExpression(operator="=", left=left, right=right):
                self.hoist(pattern_names(left)[0])
                if isinstance(left, MemberExpression):
                    self.expression(left)
                self.expression(right)
            case FunctionExpression(params=params, body=body) | ArrowFunctionExpression(params=params, body=body):
                self.function_body(body.body, params)
            case ClassExpression(superclass=superclass, body=body):
                self.class_body(superclass, body)
            case _:
                for child in children(expr):
                    self.expression(child)
