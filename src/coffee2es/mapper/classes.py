"""Class definitions.

Methods become class methods and literal data becomes class fields.  Other
instance data is assigned to the prototype after the class.  Bound methods
are bound in the constructor, which is synthesized when the class has none.
"""

from __future__ import annotations

import logging

from ..errors import IllegalSourceError
from ..estree import (
    AssignmentExpression,
    BlockStatement,
    CallExpression,
    ClassBody,
    ClassDeclaration,
    ClassExpression,
    Expr,
    ExpressionStatement,
    FunctionExpression,
    Identifier,
    MemberExpression,
    MethodDefinition,
    NumericLiteral,
    PropertyDefinition,
    ReturnStatement,
    RestElement,
    SpreadElement,
    Stmt,
    StringLiteral,
    Super,
    ThisExpression,
    assign,
    call,
    expr_stmt,
    iife,
    member,
)
from ..frontend.ast import (
    Arr,
    Assign,
    Bool,
    Call,
    Class,
    Code,
    Comment,
    Literal,
    Node,
    Null,
    Obj,
    Op,
    Param,
    Undefined,
    Value,
    children,
)
from .classify import IDENTIFIER_RE, NUMBER_RE, is_identifier, is_this_property
from .context import Meta
from .expressions import cook_string

log = logging.getLogger("coffee2es.mapper")


def is_literal_data(node: Node) -> bool:
    """Value fit for a class field: literals and collections of literals."""
    if isinstance(node, Value) and not node.properties:
        node = node.base
    if isinstance(node, Literal):
        return node.value != "this" and not IDENTIFIER_RE.match(node.value)
    if isinstance(node, (Bool, Null, Undefined)):
        return True
    if isinstance(node, Op) and node.second is None and node.operator in ("-", "+"):
        return isinstance(node.first, Literal) and NUMBER_RE.match(node.first.value) is not None
    if isinstance(node, Arr):
        return all(is_literal_data(item) for item in node.objects)
    if isinstance(node, Obj):
        for prop in node.properties:
            if not (isinstance(prop, Assign) and prop.context == "object" and is_literal_data(prop.value)):
                return False
        return True
    return False


def find_super(node: Node) -> Call | None:
    """First super call in node, not looking into nested functions."""
    if isinstance(node, Call) and node.is_super:
        return node
    if isinstance(node, Code) and not node.bound:
        return None
    for child in children(node):
        found = find_super(child)
        if found is not None:
            return found
    return None


def assigns_this(node: Node) -> bool:
    """True if node assigns to a property of this."""
    if isinstance(node, Assign) and isinstance(node.variable, Value) and node.variable.properties:
        base = node.variable.base
        if isinstance(base, Literal) and base.value == "this":
            return True
    if isinstance(node, Code) and not node.bound:
        return False
    return any(assigns_this(child) for child in children(node))


def check_constructor(code: Code) -> None:
    """Reject constructors JavaScript cannot express.

    this may not be touched before super() runs, so @-parameters and
    assignments to this ahead of an explicit super call are errors.
    """
    for idx, stmt in enumerate(code.body.expressions):
        if find_super(stmt) is None:
            continue
        for param in code.params:
            if isinstance(param, Param) and is_this_property(param.name):
                raise IllegalSourceError(
                    "cannot assign constructor parameters to this and call super in the same constructor",
                    param.pos.line,
                    param.pos.col,
                )
        for earlier in code.body.expressions[:idx]:
            if assigns_this(earlier):
                raise IllegalSourceError(
                    "cannot assign to this before calling super in a constructor",
                    earlier.pos.line,
                    earlier.pos.col,
                )
        return


def is_super_statement(stmt: Stmt) -> bool:
    return (
        isinstance(stmt, ExpressionStatement)
        and isinstance(stmt.expression, CallExpression)
        and isinstance(stmt.expression.callee, Super)
    )


class ClassMapper:
    """Rules for ``class`` in statement and expression position."""

    def class_key(self, node: Node) -> Expr:
        if isinstance(node, Literal):
            if IDENTIFIER_RE.match(node.value):
                return Identifier(node.value)
            if NUMBER_RE.match(node.value):
                return NumericLiteral(node.value)
            return StringLiteral(cook_string(node.value))
        return self.map_object_key(node)

    def prototype_target(self, class_ref: Expr, key: Expr) -> Expr:
        proto = member(class_ref, "prototype")
        if isinstance(key, Identifier):
            return MemberExpression(proto, key)
        return MemberExpression(proto, key, True)

    def class_body(self, node: Class, class_ref: Expr, meta: Meta) -> tuple[ClassBody, list[Stmt]]:
        """Class members, plus prototype assignments to run after the class."""
        is_subclass = node.parent is not None
        class_meta = meta.extend(method_name=None, in_constructor=False, is_subclass=is_subclass, left=False)
        members: list = []
        trailing: list[Stmt] = []
        bound: list[str] = []
        constructor: MethodDefinition | None = None
        for expr in node.body.expressions:
            if isinstance(expr, Comment):
                continue
            if isinstance(expr, Value) and not expr.properties:
                expr = expr.base
            if isinstance(expr, Obj):
                props = [p for p in expr.properties if not isinstance(p, Comment)]
            elif isinstance(expr, Assign) and expr.context is None and is_this_property(expr.variable):
                props = [expr]
            else:
                raise IllegalSourceError(
                    "class bodies may only contain methods and properties",
                    expr.pos.line,
                    expr.pos.col,
                )
            for prop in props:
                if not isinstance(prop, Assign):
                    raise IllegalSourceError(
                        "class bodies may only contain methods and properties",
                        prop.pos.line,
                        prop.pos.col,
                    )
                static = is_this_property(prop.variable)
                if static:
                    key: Expr = Identifier(prop.variable.properties[0].name.value)
                else:
                    key = self.class_key(prop.variable)
                name = key.name if isinstance(key, Identifier) else None
                value = prop.value
                if isinstance(value, Code) and not static and name == "constructor":
                    if constructor is not None:
                        raise IllegalSourceError("cannot define more than one constructor in a class", prop.pos.line, prop.pos.col)
                    check_constructor(value)
                    ctor_meta = class_meta.extend(method_name="constructor", in_constructor=True)
                    fn = self.map_function(value, ctor_meta, method=True, constructor=True)
                    constructor = MethodDefinition(Identifier("constructor"), fn, "constructor")
                    members.append(constructor)
                elif isinstance(value, Code):
                    if value.bound and not static and name is not None:
                        bound.append(name)
                    method_meta = class_meta.extend(method_name=name or "constructor")
                    fn = self.map_function(value, method_meta, method=True)
                    members.append(MethodDefinition(key, fn, "method", static, not isinstance(key, (Identifier, StringLiteral, NumericLiteral))))
                elif static or is_literal_data(value):
                    members.append(PropertyDefinition(key, self.map_expression(value, class_meta), static))
                else:
                    log.debug("prototype assignment for %s", name)
                    target = self.prototype_target(class_ref, key)
                    trailing.append(expr_stmt(assign(target, self.map_expression(value, class_meta))))
        if bound:
            constructor = self.bind_methods(constructor, members, bound, is_subclass)
        return ClassBody(members), trailing

    def bind_methods(
        self, constructor: MethodDefinition | None, members: list, bound: list[str], is_subclass: bool
    ) -> MethodDefinition:
        binds = [
            expr_stmt(
                AssignmentExpression(
                    "=",
                    member(ThisExpression(), name),
                    call(member(member(ThisExpression(), name), "bind"), [ThisExpression()]),
                )
            )
            for name in bound
        ]
        if constructor is None:
            params: list[Expr] = []
            body: list[Stmt] = []
            if is_subclass:
                params = [RestElement(Identifier("args"))]
                body = [expr_stmt(CallExpression(Super(), [SpreadElement(Identifier("args"))]))]
            constructor = MethodDefinition(
                Identifier("constructor"),
                FunctionExpression(params, BlockStatement(body + binds)),
                "constructor",
            )
            members.insert(0, constructor)
            return constructor
        stmts = constructor.value.body.body
        at = 0
        for idx, stmt in enumerate(stmts):
            if is_super_statement(stmt):
                at = idx + 1
                break
        stmts[at:at] = binds
        return constructor

    def class_name(self, node: Class) -> str | None:
        """Last segment of the class variable: ``B`` for ``class A.B``."""
        if node.variable is None:
            return None
        if node.variable.properties:
            last = node.variable.properties[-1]
            if hasattr(last, "name") and IDENTIFIER_RE.match(last.name.value):
                return last.name.value
            return None
        base = node.variable.base
        if is_identifier(base):
            return base.value
        return None

    def superclass(self, node: Class, meta: Meta) -> Expr | None:
        if node.parent is None:
            return None
        return self.map_expression(node.parent, meta.extend(left=False))

    def map_class_statement(self, node: Class, meta: Meta) -> list[Stmt]:
        name = self.class_name(node)
        if node.variable is not None and not node.variable.properties and name is not None:
            body, trailing = self.class_body(node, Identifier(name), meta)
            return [ClassDeclaration(Identifier(name), self.superclass(node, meta), body)] + trailing
        # class A.B: assign a named class expression
        target = self.map_target(node.variable, meta)
        body, trailing = self.class_body(node, self.map_target(node.variable, meta), meta)
        cls = ClassExpression(Identifier(name) if name else None, self.superclass(node, meta), body)
        return [ExpressionStatement(assign(target, cls))] + trailing

    def map_class_expression(self, node: Class, meta: Meta) -> Expr:
        name = self.class_name(node)
        local = name or meta.scope.free_variable("_Class", single=True)
        body, trailing = self.class_body(node, Identifier(local), meta)
        superclass = self.superclass(node, meta)
        if not trailing:
            cls: Expr = ClassExpression(Identifier(name) if name else None, superclass, body)
        else:
            stmts: list[Stmt] = [ClassDeclaration(Identifier(local), superclass, body)]
            stmts.extend(trailing)
            stmts.append(ReturnStatement(Identifier(local)))
            cls = iife(stmts)
        if node.variable is not None and (node.variable.properties or name is not None):
            return assign(self.map_target(node.variable, meta), cls)
        return cls
