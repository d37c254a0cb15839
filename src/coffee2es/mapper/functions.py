"""Function literals and parameter lists."""

from __future__ import annotations

from ..errors import TranslationError
from ..estree import (
    ArrowFunctionExpression,
    AssignmentPattern,
    BinaryExpression,
    BlockStatement,
    Expr,
    FunctionExpression,
    Identifier,
    IfStatement,
    MemberExpression,
    RestElement,
    Stmt,
    ThisExpression,
    assign,
    call,
    expr_stmt,
    member,
    number,
    undefined,
    var,
)
from ..frontend.ast import Code, Expansion, Node, Param, node_type
from .classify import is_identifier, is_this_property
from .context import Meta
from .returns import insert_returns


class FunctionMapper:
    """Rules for ``->``/``=>`` functions and their parameters."""

    def map_function(self, node: Code, meta: Meta, method: bool = False, constructor: bool = False) -> Expr:
        """Function expression, or an arrow for a bound function outside a class.

        method marks class methods, which are always plain functions; bound
        methods are bound in the constructor instead.
        """
        inner = meta.extend(scope=meta.scope.child(), left=False)
        if not method and not node.bound:
            inner = inner.extend(method_name=None, in_constructor=False)
        params, setup = self.map_params(node.params, inner)
        body = setup + self.map_block(node.body, inner)
        if not (constructor or node.is_generator):
            insert_returns(body)
        block = BlockStatement(self.scoped_body(body, inner))
        if node.bound and not method:
            if node.is_generator:
                fn = FunctionExpression(params, block, True)
                return call(member(fn, "bind"), [ThisExpression()])
            return ArrowFunctionExpression(params, block)
        return FunctionExpression(params, block, node.is_generator)

    # ── Parameters ───────────────────────────────────────────

    def map_params(self, params: list[Node], meta: Meta) -> tuple[list[Expr], list[Stmt]]:
        """Target parameters plus setup statements for @-params and expansions."""
        for i, param in enumerate(params):
            if isinstance(param, Expansion) or (param.splat and i != len(params) - 1):
                return self.expand_params(params, i, meta)
        out: list[Expr] = []
        setup: list[Stmt] = []
        for param in params:
            target = self.param_target(param, meta, setup)
            if param.splat:
                out.append(RestElement(target))
            elif param.value is not None:
                out.append(AssignmentPattern(target, self.map_expression(param.value, meta)))
            else:
                out.append(target)
        return out, setup

    def param_target(self, param: Param, meta: Meta, setup: list[Stmt]) -> Expr:
        """Binding for one parameter; ``@name`` binds name and copies it to this."""
        name = param.name
        if is_this_property(name):
            prop = name.properties[0].name.value
            setup.append(expr_stmt(assign(member(ThisExpression(), prop), Identifier(prop))))
            return Identifier(prop)
        if is_identifier(name):
            return Identifier(name.value)
        return self.map_target(name, meta)

    def expand_params(self, params: list[Node], split: int, meta: Meta) -> tuple[list[Expr], list[Stmt]]:
        """A splat or ``...`` before the last parameter: take everything as
        one rest array and unpack it by position.

        ``(first, middle..., last) ->`` becomes ``(...args)`` followed by::

            var first = args[0];
            var middle = args.slice(1, args.length - 1);
            var last = args[args.length - 1];
        """
        args = meta.scope.free_variable("args", single=True)
        head = params[:split]
        rest = params[split]
        tail = params[split + 1 :]
        setup: list[Stmt] = []
        for i, param in enumerate(head):
            self.unpack_param(param, MemberExpression(Identifier(args), number(i), True), meta, setup)
        if isinstance(rest, Param):
            bounds: list[Expr] = [number(split)]
            if tail:
                bounds.append(BinaryExpression("-", member(Identifier(args), "length"), number(len(tail))))
            self.unpack_param(rest, call(member(Identifier(args), "slice"), bounds), meta, setup)
        for i, param in enumerate(tail):
            if not isinstance(param, Param) or param.splat:
                raise TranslationError(node_type(param), "Parameter")
            offset = BinaryExpression("-", member(Identifier(args), "length"), number(len(tail) - i))
            self.unpack_param(param, MemberExpression(Identifier(args), offset, True), meta, setup)
        return [RestElement(Identifier(args))], setup

    def unpack_param(self, param: Param, value: Expr, meta: Meta, setup: list[Stmt]) -> None:
        if is_this_property(param.name):
            target: Expr = member(ThisExpression(), param.name.properties[0].name.value)
            setup.append(expr_stmt(assign(target, value)))
        else:
            target = self.map_target(param.name, meta)
            setup.append(var(target, value))
        if param.value is not None:
            read = self.map_target(param.name, meta) if not is_this_property(param.name) else member(
                ThisExpression(), param.name.properties[0].name.value
            )
            fill = expr_stmt(assign(read, self.map_expression(param.value, meta)))
            test = BinaryExpression("===", self.copy_target(read), undefined())
            setup.append(IfStatement(test, BlockStatement([fill])))

    def copy_target(self, target: Expr) -> Expr:
        if isinstance(target, Identifier):
            return Identifier(target.name)
        if isinstance(target, MemberExpression):
            return MemberExpression(self.copy_target(target.object), self.copy_target(target.property), target.computed)
        if isinstance(target, ThisExpression):
            return ThisExpression()
        return target
