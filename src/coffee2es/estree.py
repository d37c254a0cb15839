"""Target tree: the ESTree subset the mapper produces and the printer consumes.

Architecture:
    Source -> Frontend (tokens, parse) -> Mapper -> [ESTree] -> Middleend passes -> Printer -> Text

Nodes are plain mutable dataclasses.  The mapper builds them once; only the
middleend passes rewrite them afterwards (hoisting declarations, adding
super calls and breaks).
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Node:
    """Base for all target nodes. Abstract."""


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass
class Expr(Node):
    """Base for expressions. Abstract."""


@dataclass
class Identifier(Expr):
    name: str


@dataclass
class StringLiteral(Expr):
    """String with its decoded value; the printer chooses quotes and escapes."""

    value: str


@dataclass
class NumericLiteral(Expr):
    """Number kept as raw source text so it prints back unchanged."""

    raw: str


@dataclass
class BooleanLiteral(Expr):
    value: bool


@dataclass
class NullLiteral(Expr):
    pass


@dataclass
class RegExpLiteral(Expr):
    raw: str


@dataclass
class ThisExpression(Expr):
    pass


@dataclass
class Super(Expr):
    """``super`` as a callee or member object."""


@dataclass
class ArrayExpression(Expr):
    elements: list[Expr]


@dataclass
class Property(Node):
    """Object literal or object pattern property.

    shorthand prints ``{a}`` instead of ``{a: a}``.
    """

    key: Expr
    value: Expr
    computed: bool = False
    shorthand: bool = False


@dataclass
class ObjectExpression(Expr):
    properties: list[Node]


@dataclass
class SpreadElement(Expr):
    argument: Expr


@dataclass
class FunctionExpression(Expr):
    params: list[Expr]
    body: BlockStatement
    generator: bool = False


@dataclass
class ArrowFunctionExpression(Expr):
    params: list[Expr]
    body: BlockStatement


@dataclass
class ClassExpression(Expr):
    id: Identifier | None
    superclass: Expr | None
    body: ClassBody


@dataclass
class UnaryExpression(Expr):
    """!, -, +, ~, typeof, void, delete."""

    operator: str
    argument: Expr


@dataclass
class UpdateExpression(Expr):
    operator: str
    argument: Expr
    prefix: bool


@dataclass
class BinaryExpression(Expr):
    operator: str
    left: Expr
    right: Expr


@dataclass
class LogicalExpression(Expr):
    """&& and ||."""

    operator: str
    left: Expr
    right: Expr


@dataclass
class AssignmentExpression(Expr):
    operator: str
    left: Expr
    right: Expr


@dataclass
class ConditionalExpression(Expr):
    test: Expr
    consequent: Expr
    alternate: Expr


@dataclass
class CallExpression(Expr):
    callee: Expr
    arguments: list[Expr]


@dataclass
class NewExpression(Expr):
    callee: Expr
    arguments: list[Expr]


@dataclass
class MemberExpression(Expr):
    """``object.property`` or, when computed, ``object[property]``."""

    object: Expr
    property: Expr
    computed: bool = False


@dataclass
class SequenceExpression(Expr):
    expressions: list[Expr]


@dataclass
class YieldExpression(Expr):
    argument: Expr | None
    delegate: bool = False


@dataclass
class Fragment(Expr):
    """Verbatim JavaScript: embedded code or fallback compiler output.

    precedence is the binding strength of the fragment's outermost operator,
    on the printer's scale; the printer parenthesizes when a position needs
    more.
    """

    code: str
    precedence: int


# ============================================================
# PATTERNS
# ============================================================


@dataclass
class ObjectPattern(Expr):
    properties: list[Node]


@dataclass
class ArrayPattern(Expr):
    elements: list[Expr]


@dataclass
class RestElement(Expr):
    argument: Expr


@dataclass
class AssignmentPattern(Expr):
    """Pattern with a default value (``a = 1`` in parameters)."""

    left: Expr
    right: Expr


# ============================================================
# STATEMENTS
# ============================================================


@dataclass
class Stmt(Node):
    """Base for statements. Abstract."""


@dataclass
class Program(Node):
    body: list[Stmt]


@dataclass
class BlockStatement(Stmt):
    body: list[Stmt]


@dataclass
class ExpressionStatement(Stmt):
    expression: Expr


@dataclass
class VariableDeclarator(Node):
    id: Expr
    init: Expr | None = None


@dataclass
class VariableDeclaration(Stmt):
    kind: str
    declarations: list[VariableDeclarator]


@dataclass
class ReturnStatement(Stmt):
    argument: Expr | None = None


@dataclass
class ThrowStatement(Stmt):
    argument: Expr


@dataclass
class BreakStatement(Stmt):
    pass


@dataclass
class ContinueStatement(Stmt):
    pass


@dataclass
class DebuggerStatement(Stmt):
    pass


@dataclass
class EmptyStatement(Stmt):
    pass


@dataclass
class CommentStatement(Stmt):
    """Block comment carried over from the source."""

    text: str


@dataclass
class IfStatement(Stmt):
    """alternate is a BlockStatement, a nested IfStatement (else-if), or None."""

    test: Expr
    consequent: BlockStatement
    alternate: Stmt | None = None


@dataclass
class SwitchCase(Node):
    """test is None for ``default``."""

    test: Expr | None
    consequent: list[Stmt]


@dataclass
class SwitchStatement(Stmt):
    discriminant: Expr
    cases: list[SwitchCase]


@dataclass
class CatchClause(Node):
    param: Expr | None
    body: BlockStatement


@dataclass
class TryStatement(Stmt):
    block: BlockStatement
    handler: CatchClause | None = None
    finalizer: BlockStatement | None = None


@dataclass
class WhileStatement(Stmt):
    test: Expr
    body: BlockStatement


@dataclass
class ForStatement(Stmt):
    init: Node | None
    test: Expr | None
    update: Expr | None
    body: BlockStatement


@dataclass
class ForOfStatement(Stmt):
    left: VariableDeclaration
    right: Expr
    body: BlockStatement


# ============================================================
# CLASSES
# ============================================================


@dataclass
class MethodDefinition(Node):
    """kind is 'constructor' or 'method'."""

    key: Expr
    value: FunctionExpression
    kind: str = "method"
    static: bool = False
    computed: bool = False


@dataclass
class PropertyDefinition(Node):
    """Class field: ``name = value;`` or ``static name = value;``."""

    key: Expr
    value: Expr | None
    static: bool = False
    computed: bool = False


@dataclass
class ClassBody(Node):
    body: list[Node] = field(default_factory=list)


@dataclass
class ClassDeclaration(Stmt):
    id: Identifier
    superclass: Expr | None
    body: ClassBody


# ============================================================
# BUILDERS
# ============================================================


def member(obj: Expr, name: str) -> MemberExpression:
    """Non-computed ``obj.name``."""
    return MemberExpression(obj, Identifier(name))


def call(callee: Expr, args: list[Expr] | None = None) -> CallExpression:
    return CallExpression(callee, args or [])


def number(value: int) -> NumericLiteral:
    return NumericLiteral(str(value))


def expr_stmt(expr: Expr) -> ExpressionStatement:
    return ExpressionStatement(expr)


def var(target: Expr, init: Expr | None = None) -> VariableDeclaration:
    """Single-declarator ``var`` statement."""
    return VariableDeclaration("var", [VariableDeclarator(target, init)])


def assign(target: Expr, value: Expr, operator: str = "=") -> AssignmentExpression:
    return AssignmentExpression(operator, target, value)


def not_(expr: Expr) -> UnaryExpression:
    return UnaryExpression("!", expr)


def undefined() -> Identifier:
    return Identifier("undefined")


def void0() -> UnaryExpression:
    return UnaryExpression("void", number(0))


def iife(body: list[Stmt]) -> CallExpression:
    """``(() => { body })()``, keeping ``this`` and ``arguments`` of the caller."""
    return CallExpression(ArrowFunctionExpression([], BlockStatement(body)), [])


# ============================================================
# TRAVERSAL
# ============================================================


def children(node: Node) -> list[Node]:
    """Direct child nodes in field order."""
    out: list[Node] = []
    for name in node.__dataclass_fields__:
        child = getattr(node, name)
        if isinstance(child, Node):
            out.append(child)
        elif isinstance(child, list):
            for item in child:
                if isinstance(item, Node):
                    out.append(item)
    return out


def walk(node: Node):
    """Yield node and every node below it, depth-first, pre-order."""
    yield node
    for child in children(node):
        yield from walk(child)
