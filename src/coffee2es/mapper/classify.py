"""Node classifier: picks the mapping rule for each CoffeeScript node.

Dispatch is on the node class, refined by shape: any soaked accessor in a
chain, the binary existential operator, ranges with non-literal bounds, and
empty anonymous classes all go to the fallback compiler.
"""

from __future__ import annotations

import re

from ..errors import TranslationError
from ..frontend.ast import (
    Arr,
    Assign,
    Bool,
    Call,
    Class,
    Code,
    Comment,
    Existence,
    Extends,
    For,
    If,
    In,
    Literal,
    Node,
    Null,
    Obj,
    Op,
    Parens,
    PassthroughLiteral,
    Range,
    Return,
    StatementLiteral,
    Switch,
    Throw,
    Try,
    Undefined,
    Value,
    While,
    node_type,
)

IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][\w$]*$")
INTEGER_RE = re.compile(r"^\d+$")
NUMBER_RE = re.compile(r"^(0[xX][0-9a-fA-F]+|0[bB][01]+|0[oO][0-7]+|(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?)$")

EXPRESSION_RULES: dict[type, str] = {
    Literal: "literal",
    PassthroughLiteral: "passthrough",
    Bool: "bool",
    Null: "null",
    Undefined: "undefined",
    Call: "call",
    Code: "function",
    Assign: "assign",
    Op: "operation",
    In: "membership",
    Existence: "existence",
    Extends: "fallback",
    Parens: "parens",
    Arr: "array",
    Obj: "object",
    Range: "range",
    If: "if_expression",
    Switch: "switch_expression",
    Try: "try_expression",
    For: "comprehension",
    While: "while_expression",
    Class: "class_expression",
}

STATEMENT_RULES: dict[type, str] = {
    If: "if_statement",
    Switch: "switch_statement",
    Try: "try_statement",
    For: "for_statement",
    While: "while_statement",
    Return: "return_statement",
    Throw: "throw_statement",
    StatementLiteral: "statement_literal",
    Comment: "comment",
    Class: "class_statement",
}

# Nodes that force an if/else into statement form when they appear in a branch.
STATEMENT_ONLY: tuple[type, ...] = (Return, Throw, StatementLiteral, For, While, If, Try, Switch, Comment)


def is_identifier(node: Node) -> bool:
    """Bare identifier literal (not ``this``, not a number or string)."""
    if isinstance(node, Value) and not node.properties:
        node = node.base
    return isinstance(node, Literal) and node.value != "this" and IDENTIFIER_RE.match(node.value) is not None


def is_number(node: Node) -> bool:
    return isinstance(node, Literal) and NUMBER_RE.match(node.value) is not None


def is_simple(node: Node) -> bool:
    """Operand that can be evaluated twice without caching."""
    if isinstance(node, Value) and not node.properties:
        node = node.base
    return is_identifier(node) or is_number(node) or (isinstance(node, Literal) and node.value == "this")


def int_literal(node: Node | None) -> int | None:
    """Value of an integer literal, optionally negated; None for anything else."""
    if node is None:
        return None
    if isinstance(node, Value) and not node.properties:
        node = node.base
    if isinstance(node, Literal) and INTEGER_RE.match(node.value):
        return int(node.value)
    if isinstance(node, Op) and node.second is None and node.operator in ("-", "+"):
        inner = int_literal(node.first)
        if inner is not None:
            return -inner if node.operator == "-" else inner
    return None


def is_literal_range(node: Range) -> bool:
    return int_literal(node.from_) is not None and int_literal(node.to) is not None


def is_this_property(node: Node) -> bool:
    """``@name``: this with exactly one plain accessor."""
    return (
        isinstance(node, Value)
        and isinstance(node.base, Literal)
        and node.base.value == "this"
        and len(node.properties) == 1
        and not getattr(node.properties[0], "soak", False)
    )


def has_soak(node: Node) -> bool:
    """True if any accessor or call along the chain is soaked."""
    if isinstance(node, Value):
        for prop in node.properties:
            if getattr(prop, "soak", False):
                return True
        return has_soak(node.base)
    if isinstance(node, Call):
        if node.soak:
            return True
        if node.variable is not None and not node.is_new:
            return has_soak(node.variable)
    return False


def is_compound_branch(block: Node | None) -> bool:
    """Branch that needs a real if statement: not exactly one expression."""
    if block is None:
        return False
    exprs = [e for e in block.expressions if not isinstance(e, Comment)]
    if len(exprs) != 1:
        return True
    return isinstance(exprs[0], STATEMENT_ONLY) or (isinstance(exprs[0], Class) and exprs[0].variable is not None)


def classify(node: Node) -> str:
    """Mapping rule for node in expression position."""
    if has_soak(node):
        return "fallback"
    if isinstance(node, Value):
        if node.properties:
            return "member"
        return classify(node.base)
    if isinstance(node, Op) and node.operator == "?":
        return "fallback"
    if isinstance(node, Range) and not is_literal_range(node):
        return "fallback"
    if isinstance(node, Class) and node.variable is None and node.parent is None and not node.body.expressions:
        return "fallback"
    rule = EXPRESSION_RULES.get(type(node))
    if rule is None:
        raise TranslationError(node_type(node), "Expression")
    return rule


def classify_statement(node: Node) -> str:
    """Mapping rule for node in statement position; 'expression' wraps it."""
    if isinstance(node, Class) and node.variable is None:
        return "expression"
    return STATEMENT_RULES.get(type(node), "expression")
