"""CoffeeScript AST — parse-time node definitions.

The tree mirrors the node classes of the CoffeeScript 1.x compiler: a
``Value`` wraps a base plus a chain of accessor properties, ``Code`` is a
function literal, ``Op`` covers unary and binary operators, and so on.
Nodes are never mutated once the parser has built them.
"""

from __future__ import annotations

from dataclasses import dataclass, field


# ============================================================
# POSITION
# ============================================================


@dataclass
class Pos:
    """Source position, 1-indexed."""

    line: int
    col: int


@dataclass
class Node:
    """Base for all nodes."""

    pos: Pos


# ============================================================
# BLOCKS AND LITERALS
# ============================================================


@dataclass
class Block(Node):
    """A list of expressions/statements."""

    expressions: list[Node]


@dataclass
class Literal(Node):
    """Identifier, number, string, regex, or ``this``; value is the raw source text."""

    value: str


@dataclass
class PassthroughLiteral(Node):
    """Embedded JavaScript between backticks."""

    value: str


@dataclass
class StatementLiteral(Node):
    """break, continue, debugger."""

    value: str


@dataclass
class Bool(Node):
    """true/yes/on or false/no/off, normalized to 'true' or 'false'."""

    val: str


@dataclass
class Null(Node):
    pass


@dataclass
class Undefined(Node):
    pass


@dataclass
class Comment(Node):
    """Block comment (``### ... ###``)."""

    comment: str


# ============================================================
# VALUES AND ACCESSORS
# ============================================================


@dataclass
class Access(Node):
    """``.name``; soak for ``?.``."""

    name: Literal
    soak: bool = False


@dataclass
class Index(Node):
    """``[expr]``; soak for ``?[``."""

    index: Node
    soak: bool = False


@dataclass
class Range(Node):
    """``[from..to]`` or ``[from...to]``; either bound may be missing inside a slice."""

    from_: Node | None
    to: Node | None
    exclusive: bool


@dataclass
class Slice(Node):
    """``[from..to]`` used as an accessor."""

    range: Range


@dataclass
class Value(Node):
    """A base expression followed by accessor properties.

    ``this`` is set for ``@name`` shorthand.
    """

    base: Node
    properties: list[Node] = field(default_factory=list)
    this: bool = False


@dataclass
class Obj(Node):
    """Object literal. Properties are object-context Assigns or shorthand Values.

    generated is set for brace-less (implicit) objects.
    """

    properties: list[Node]
    generated: bool = False


@dataclass
class Arr(Node):
    """Array literal."""

    objects: list[Node]


@dataclass
class Parens(Node):
    """Parenthesized block."""

    body: Block


# ============================================================
# CALLS AND FUNCTIONS
# ============================================================


@dataclass
class Call(Node):
    """Function call, ``new`` expression, or ``super`` call (variable is None).

    bare marks a parenthesis-less ``super`` that forwards all arguments.
    """

    variable: Node | None
    args: list[Node]
    soak: bool = False
    is_new: bool = False
    is_super: bool = False
    bare: bool = False


@dataclass
class Param(Node):
    """Function parameter; name is a Literal, an @-Value, an Arr, or an Obj."""

    name: Node
    value: Node | None = None
    splat: bool = False


@dataclass
class Splat(Node):
    """``name...`` in arguments, arrays, and patterns."""

    name: Node


@dataclass
class Expansion(Node):
    """Bare ``...`` in a parameter list."""


@dataclass
class Code(Node):
    """Function literal. bound marks ``=>``; params holds Param and Expansion nodes."""

    params: list[Node]
    body: Block
    bound: bool = False
    is_generator: bool = False


# ============================================================
# OPERATORS AND ASSIGNMENT
# ============================================================


@dataclass
class Assign(Node):
    """Assignment.

    context is None for ``=``, 'object' for an object-literal property,
    or the compound operator ('+=', '||=', '?=', ...).
    """

    variable: Node
    value: Node
    context: str | None = None


@dataclass
class Op(Node):
    """Unary (second is None) or binary operator, with JavaScript spelling.

    flip marks postfix ``++``/``--``.
    """

    operator: str
    first: Node
    second: Node | None = None
    flip: bool = False


@dataclass
class In(Node):
    """``object in array`` membership test."""

    object: Node
    array: Node
    negated: bool = False


@dataclass
class Existence(Node):
    """Postfix ``expr?``."""

    expression: Node


@dataclass
class Extends(Node):
    """``child extends parent`` used as an expression."""

    child: Node
    parent: Node


# ============================================================
# CONTROL FLOW
# ============================================================


@dataclass
class If(Node):
    """if/unless; inverted marks unless, postfix marks ``x if y``."""

    condition: Node
    body: Block
    else_body: Block | None = None
    inverted: bool = False
    postfix: bool = False


@dataclass
class While(Node):
    """while/until/loop. condition is None for loop."""

    condition: Node | None
    body: Block
    guard: Node | None = None
    inverted: bool = False


@dataclass
class For(Node):
    """``for name, index in source`` or ``for key, value of source`` (object)."""

    body: Block
    source: Node
    name: Node | None = None
    index: Node | None = None
    object: bool = False
    own: bool = False
    step: Node | None = None
    guard: Node | None = None
    postfix: bool = False


@dataclass
class SwitchCase:
    """One ``when`` clause: its test values and body."""

    conditions: list[Node]
    block: Block


@dataclass
class Switch(Node):
    """switch; subject is None for the subject-less form."""

    subject: Node | None
    cases: list[SwitchCase]
    otherwise: Block | None = None


@dataclass
class Try(Node):
    """try/catch/finally; every part but attempt is optional."""

    attempt: Block
    error_variable: Node | None = None
    recovery: Block | None = None
    ensure: Block | None = None


@dataclass
class Throw(Node):
    expression: Node


@dataclass
class Return(Node):
    expression: Node | None = None


@dataclass
class Class(Node):
    """Class definition; variable is None for anonymous classes."""

    variable: Value | None
    parent: Node | None
    body: Block


# ============================================================
# UTILITIES
# ============================================================


def node_type(node: object) -> str:
    """Variant tag used in error messages."""
    return type(node).__name__


def children(node: object) -> list:
    """Direct child nodes (and switch cases) in field order."""
    if isinstance(node, SwitchCase):
        return [*node.conditions, node.block]
    if not isinstance(node, Node):
        return []
    out: list = []
    for name in node.__dataclass_fields__:
        if name == "pos":
            continue
        child = getattr(node, name)
        if isinstance(child, (Node, SwitchCase)):
            out.append(child)
        elif isinstance(child, list):
            for item in child:
                if isinstance(item, (Node, SwitchCase)):
                    out.append(item)
    return out


def walk(node: object):
    """Yield node and every node below it, depth-first, pre-order."""
    yield node
    for child in children(node):
        yield from walk(child)
