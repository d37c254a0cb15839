"""Statement and control-flow mapping rules.

Control structures in expression position become ternaries where both
branches are single expressions, comprehensions become ``map``/``filter``
chains, and anything else is wrapped in an arrow IIFE with implicit returns.
"""

from __future__ import annotations

from ..estree import (
    ArrayExpression,
    ArrayPattern,
    ArrowFunctionExpression,
    BinaryExpression,
    BlockStatement,
    BooleanLiteral,
    BreakStatement,
    CatchClause,
    CommentStatement,
    ConditionalExpression,
    ContinueStatement,
    DebuggerStatement,
    Expr,
    ExpressionStatement,
    ForOfStatement,
    ForStatement,
    Identifier,
    IfStatement,
    LogicalExpression,
    ReturnStatement,
    Stmt,
    SwitchCase,
    SwitchStatement,
    ThrowStatement,
    TryStatement,
    UpdateExpression,
    VariableDeclaration,
    VariableDeclarator,
    WhileStatement,
    assign,
    call,
    expr_stmt,
    iife,
    member,
    number,
    var,
    void0,
)
from ..frontend.ast import (
    Block,
    Comment,
    For,
    If,
    Node,
    Range,
    Return,
    StatementLiteral,
    Switch,
    Throw,
    Try,
    While,
)
from .classify import classify_statement, int_literal, is_compound_branch, is_identifier, is_literal_range
from .context import Meta
from .expressions import negate
from .returns import insert_returns


class StatementMapper:
    """Rules for statements and for control flow used as a value."""

    # ── Blocks ───────────────────────────────────────────────

    def map_block(self, block: Block | None, meta: Meta) -> list[Stmt]:
        if block is None:
            return []
        out: list[Stmt] = []
        for node in block.expressions:
            out.extend(self.map_statement(node, meta))
        return out

    def map_statement(self, node: Node, meta: Meta) -> list[Stmt]:
        rule = classify_statement(node)
        if rule == "expression":
            return [ExpressionStatement(self.map_expression(node, meta))]
        return getattr(self, "map_" + rule)(node, meta)

    def scoped_body(self, stmts: list[Stmt], meta: Meta) -> list[Stmt]:
        """Prepend a ``var`` for the temporaries of meta's scope."""
        temps = meta.scope.temporaries
        if temps:
            decl = VariableDeclaration("var", [VariableDeclarator(Identifier(name)) for name in temps])
            stmts.insert(0, decl)
        return stmts

    def wrap_iife(self, build, meta: Meta) -> Expr:
        """Arrow IIFE around the statements build(meta) returns, with implicit returns."""
        inner = meta.extend(scope=meta.scope.child())
        body = build(inner)
        insert_returns(body)
        return iife(self.scoped_body(body, inner))

    # ── Simple statements ────────────────────────────────────

    def map_return_statement(self, node: Return, meta: Meta) -> list[Stmt]:
        if node.expression is None:
            return [ReturnStatement()]
        return [ReturnStatement(self.map_expression(node.expression, meta))]

    def map_throw_statement(self, node: Throw, meta: Meta) -> list[Stmt]:
        return [ThrowStatement(self.map_expression(node.expression, meta))]

    def map_statement_literal(self, node: StatementLiteral, meta: Meta) -> list[Stmt]:
        if node.value == "break":
            return [BreakStatement()]
        if node.value == "continue":
            return [ContinueStatement()]
        return [DebuggerStatement()]

    def map_comment(self, node: Comment, meta: Meta) -> list[Stmt]:
        return [CommentStatement(node.comment)]

    # ── Conditionals ─────────────────────────────────────────

    def condition(self, node: If, meta: Meta) -> Expr:
        test = self.map_expression(node.condition, meta)
        if node.inverted:
            return negate(test)
        return test

    def branch_value(self, block: Block | None, meta: Meta) -> Expr:
        if block is None:
            return void0()
        exprs = [e for e in block.expressions if not isinstance(e, Comment)]
        return self.map_expression(exprs[0], meta)

    def conditional(self, node: If, meta: Meta) -> Expr:
        return ConditionalExpression(
            self.condition(node, meta),
            self.branch_value(node.body, meta),
            self.branch_value(node.else_body, meta),
        )

    def needs_if_statement(self, node: If) -> bool:
        return is_compound_branch(node.body) or is_compound_branch(node.else_body)

    def if_statement(self, node: If, meta: Meta) -> IfStatement:
        alternate: Stmt | None = None
        if node.else_body is not None:
            exprs = node.else_body.expressions
            if len(exprs) == 1 and isinstance(exprs[0], If):
                alternate = self.if_statement(exprs[0], meta)
            else:
                alternate = BlockStatement(self.map_block(node.else_body, meta))
        return IfStatement(self.condition(node, meta), BlockStatement(self.map_block(node.body, meta)), alternate)

    def map_if_statement(self, node: If, meta: Meta) -> list[Stmt]:
        if self.needs_if_statement(node):
            return [self.if_statement(node, meta)]
        return [ExpressionStatement(self.conditional(node, meta))]

    def map_if_expression(self, node: If, meta: Meta) -> Expr:
        if not self.needs_if_statement(node):
            return self.conditional(node, meta)
        return self.wrap_iife(lambda inner: [self.if_statement(node, inner)], meta)

    # ── Switch ───────────────────────────────────────────────

    def switch_statement(self, node: Switch, meta: Meta) -> SwitchStatement:
        """``switch`` with one case per test value; a missing subject switches on false."""
        if node.subject is None:
            discriminant: Expr = BooleanLiteral(False)
        else:
            discriminant = self.map_expression(node.subject, meta)
        cases: list[SwitchCase] = []
        for clause in node.cases:
            tests = [self.map_expression(cond, meta) for cond in clause.conditions]
            if node.subject is None:
                tests = [negate(test) for test in tests]
            for test in tests[:-1]:
                cases.append(SwitchCase(test, []))
            cases.append(SwitchCase(tests[-1], self.map_block(clause.block, meta)))
        if node.otherwise is not None:
            cases.append(SwitchCase(None, self.map_block(node.otherwise, meta)))
        return SwitchStatement(discriminant, cases)

    def map_switch_statement(self, node: Switch, meta: Meta) -> list[Stmt]:
        return [self.switch_statement(node, meta)]

    def map_switch_expression(self, node: Switch, meta: Meta) -> Expr:
        return self.wrap_iife(lambda inner: [self.switch_statement(node, inner)], meta)

    # ── Try ──────────────────────────────────────────────────

    def try_statement(self, node: Try, meta: Meta) -> TryStatement:
        block = BlockStatement(self.map_block(node.attempt, meta))
        handler: CatchClause | None = None
        if node.recovery is not None or node.error_variable is not None:
            if node.error_variable is not None:
                param = self.map_target(node.error_variable, meta)
            else:
                param = Identifier(meta.scope.free_variable("error", single=True))
            handler = CatchClause(param, BlockStatement(self.map_block(node.recovery, meta)))
        finalizer: BlockStatement | None = None
        if node.ensure is not None:
            finalizer = BlockStatement(self.map_block(node.ensure, meta))
        if handler is None and finalizer is None:
            handler = CatchClause(Identifier(meta.scope.free_variable("error", single=True)), BlockStatement([]))
        return TryStatement(block, handler, finalizer)

    def map_try_statement(self, node: Try, meta: Meta) -> list[Stmt]:
        return [self.try_statement(node, meta)]

    def map_try_expression(self, node: Try, meta: Meta) -> Expr:
        return self.wrap_iife(lambda inner: [self.try_statement(node, inner)], meta)

    # ── While ────────────────────────────────────────────────

    def while_statement(self, node: While, meta: Meta, body: list[Stmt]) -> WhileStatement:
        if node.condition is None:
            test: Expr = BooleanLiteral(True)
        else:
            test = self.map_expression(node.condition, meta)
            if node.inverted:
                test = negate(test)
        if node.guard is not None:
            body = [IfStatement(self.map_expression(node.guard, meta), BlockStatement(body))]
        return WhileStatement(test, BlockStatement(body))

    def map_while_statement(self, node: While, meta: Meta) -> list[Stmt]:
        return [self.while_statement(node, meta, self.map_block(node.body, meta))]

    def map_while_expression(self, node: While, meta: Meta) -> Expr:
        """Collect the value of each iteration into an array."""

        def build(inner: Meta) -> list[Stmt]:
            results = Identifier(inner.scope.free_variable("results", single=True))
            body = self.map_block(node.body, inner)
            self.push_last(body, results)
            loop = self.while_statement(node, inner, body)
            return [var(results, ArrayExpression([])), loop, ExpressionStatement(Identifier(results.name))]

        return self.wrap_iife(build, meta)

    def push_last(self, body: list[Stmt], results: Identifier) -> None:
        idx = len(body) - 1
        while idx >= 0 and isinstance(body[idx], CommentStatement):
            idx -= 1
        if idx >= 0 and isinstance(body[idx], ExpressionStatement):
            body[idx] = expr_stmt(call(member(Identifier(results.name), "push"), [body[idx].expression]))

    # ── For ──────────────────────────────────────────────────

    def loop_params(self, node: For, meta: Meta) -> list[Expr]:
        """Bindings for one iteration: [value], [value, index], or [[key, value]]."""
        name = self.map_target(node.name, meta)
        if node.index is None:
            return [name]
        index = self.map_target(node.index, meta)
        if node.object:
            return [ArrayPattern([name, index])]
        return [name, index]

    def loop_iterable(self, node: For, meta: Meta) -> Expr:
        source = self.map_expression(node.source, meta)
        if node.object:
            method = "keys" if node.index is None else "entries"
            return call(member(Identifier("Object"), method), [source])
        return source

    def counting_loop(self, node: For, meta: Meta, body: list[Stmt]) -> Stmt:
        """``for (let i = a; i <= b; i++)`` over a literal range."""
        rng = node.source
        start = int_literal(rng.from_)
        end = int_literal(rng.to)
        step = int_literal(node.step) if node.step is not None else (1 if start <= end else -1)
        name = node.name.value
        init = VariableDeclaration("let", [VariableDeclarator(Identifier(name), number(start))])
        if step > 0:
            op = "<" if rng.exclusive else "<="
        else:
            op = ">" if rng.exclusive else ">="
        test = BinaryExpression(op, Identifier(name), number(end))
        if step == 1 or step == -1:
            update: Expr = UpdateExpression("++" if step > 0 else "--", Identifier(name), False)
        else:
            update = assign(Identifier(name), number(abs(step)), "+=" if step > 0 else "-=")
        return ForStatement(init, test, update, BlockStatement(body))

    def is_counting_loop(self, node: For) -> bool:
        if not isinstance(node.source, Range) or not is_literal_range(node.source):
            return False
        if node.index is not None or not is_identifier(node.name):
            return False
        return node.step is None or int_literal(node.step) not in (None, 0)

    def map_for_statement(self, node: For, meta: Meta) -> list[Stmt]:
        body = self.map_block(node.body, meta)
        if node.guard is not None:
            body = [IfStatement(self.map_expression(node.guard, meta), BlockStatement(body))]
        if self.is_counting_loop(node):
            return [self.counting_loop(node, meta, body)]
        source = self.loop_iterable(node, meta)
        if node.step is not None:
            source = self.step_filter(source, node, meta)
        params = self.loop_params(node, meta)
        if len(params) == 2:
            # for value, index in xs
            left: Expr = ArrayPattern([params[1], params[0]])
            source = call(member(source, "entries"))
        else:
            left = params[0]
        binding = VariableDeclaration("let", [VariableDeclarator(left)])
        return [ForOfStatement(binding, source, BlockStatement(body))]

    # ── Comprehensions ───────────────────────────────────────

    def step_filter(self, source: Expr, node: For, meta: Meta) -> Expr:
        """Filter source down to the stepped elements."""
        step = self.map_expression(node.step, meta)
        if isinstance(node.source, Range):
            # index 0, then every index divisible by step + 1
            kept: Expr = LogicalExpression(
                "||",
                BinaryExpression("===", Identifier("_i"), number(0)),
                BinaryExpression(
                    "===",
                    BinaryExpression("%", Identifier("_i"), BinaryExpression("+", step, number(1))),
                    number(0),
                ),
            )
        else:
            kept = BinaryExpression("===", BinaryExpression("%", Identifier("_i"), step), number(0))
        predicate = ArrowFunctionExpression(
            [Identifier("_"), Identifier("_i")],
            BlockStatement([ReturnStatement(kept)]),
        )
        return call(member(source, "filter"), [predicate])

    def callback(self, node: For, meta: Meta, body: Block | None, value: Node | None) -> ArrowFunctionExpression:
        """Arrow over one element, returning value or the body's last expression."""
        inner = meta.extend(scope=meta.scope.child())
        if value is not None:
            stmts: list[Stmt] = [ReturnStatement(self.map_expression(value, inner))]
        else:
            stmts = self.map_block(body, inner)
            insert_returns(stmts)
        return ArrowFunctionExpression(self.loop_params(node, inner), BlockStatement(self.scoped_body(stmts, inner)))

    def map_comprehension(self, node: For, meta: Meta) -> Expr:
        """``for`` as a value: ``source.filter(...).map(...)``."""
        source = self.loop_iterable(node, meta)
        if node.step is not None:
            source = self.step_filter(source, node, meta)
        if node.guard is not None:
            source = call(member(source, "filter"), [self.callback(node, meta, None, node.guard)])
        return call(member(source, "map"), [self.callback(node, meta, node.body, None)])
