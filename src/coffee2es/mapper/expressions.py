"""Expression mapping rules."""

from __future__ import annotations

import logging

from ..backend.printer import PREC_CALL, PREC_CONDITIONAL, PREC_PRIMARY
from ..errors import IllegalSourceError, TranslationError
from ..estree import (
    ArrayExpression,
    ArrayPattern,
    AssignmentExpression,
    AssignmentPattern,
    BinaryExpression,
    BooleanLiteral,
    CallExpression,
    ConditionalExpression,
    Expr,
    Fragment,
    Identifier,
    LogicalExpression,
    MemberExpression,
    NewExpression,
    NullLiteral,
    NumericLiteral,
    ObjectExpression,
    ObjectPattern,
    Property,
    RegExpLiteral,
    RestElement,
    SequenceExpression,
    SpreadElement,
    StringLiteral,
    Super,
    ThisExpression,
    UnaryExpression,
    UpdateExpression,
    YieldExpression,
    call,
    member,
    not_,
    number,
    undefined,
)
from ..frontend.ast import (
    Access,
    Arr,
    Assign,
    Bool,
    Call,
    Class,
    Comment,
    Existence,
    Extends,
    In,
    Index,
    Literal,
    Node,
    Obj,
    Op,
    Parens,
    PassthroughLiteral,
    Range,
    Slice,
    Splat,
    Undefined,
    Value,
    node_type,
)
from .. import legacy
from .classify import IDENTIFIER_RE, NUMBER_RE, has_soak, int_literal, is_identifier, is_simple, is_this_property
from .context import Meta

log = logging.getLogger("coffee2es.mapper")

ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

CHAINABLE: set[str] = {"<", ">", "<=", ">=", "===", "!=="}

# Literal ranges longer than this compile to a loop instead of an array.
MAX_RANGE_ELEMENTS = 20


def cook_string(raw: str) -> str:
    """Decode a quoted string literal's escapes into its value."""
    body = raw[1:-1]
    out: list[str] = []
    i = 0
    while i < len(body):
        c = body[i]
        if c != "\\" or i + 1 >= len(body):
            out.append(c)
            i += 1
            continue
        nxt = body[i + 1]
        if nxt in ESCAPES:
            out.append(ESCAPES[nxt])
            i += 2
        elif nxt == "x" and _is_hex(body[i + 2 : i + 4], 2):
            out.append(chr(int(body[i + 2 : i + 4], 16)))
            i += 4
        elif nxt == "u" and body[i + 2 : i + 3] == "{" and "}" in body[i + 3 :]:
            end = body.index("}", i + 3)
            out.append(chr(int(body[i + 3 : end], 16)))
            i = end + 1
        elif nxt == "u" and _is_hex(body[i + 2 : i + 6], 4):
            out.append(chr(int(body[i + 2 : i + 6], 16)))
            i += 6
        elif nxt == "\n":
            i += 2
        else:
            out.append(nxt)
            i += 2
    return "".join(out)


def _is_hex(text: str, width: int) -> bool:
    return len(text) == width and all(c in "0123456789abcdefABCDEF" for c in text)


def negate(expr: Expr) -> Expr:
    """Logical negation, inverting equality operators where possible."""
    if isinstance(expr, BinaryExpression):
        inverse = {"===": "!==", "!==": "===", "==": "!=", "!=": "=="}.get(expr.operator)
        if inverse is not None:
            return BinaryExpression(inverse, expr.left, expr.right)
    if isinstance(expr, UnaryExpression) and expr.operator == "!":
        return expr.argument
    return not_(expr)


def typeof_guard(name: str) -> Expr:
    """``typeof name !== "undefined" && name !== null``"""
    return LogicalExpression(
        "&&",
        BinaryExpression("!==", UnaryExpression("typeof", Identifier(name)), StringLiteral("undefined")),
        BinaryExpression("!==", Identifier(name), NullLiteral()),
    )


class ExpressionMapper:
    """Rules for literals, accessors, calls, operators, and collections."""

    # ── Literals ─────────────────────────────────────────────

    def map_literal(self, node: Literal, meta: Meta) -> Expr:
        value = node.value
        if value == "this":
            return ThisExpression()
        if NUMBER_RE.match(value):
            return NumericLiteral(value)
        if value[0] in ("'", '"'):
            return StringLiteral(cook_string(value))
        if value[0] == "/":
            return RegExpLiteral(value)
        if IDENTIFIER_RE.match(value):
            return Identifier(value)
        raise TranslationError(node_type(node), "Expression")

    def map_passthrough(self, node: PassthroughLiteral, meta: Meta) -> Expr:
        return Fragment(node.value, PREC_PRIMARY)

    def map_bool(self, node: Bool, meta: Meta) -> Expr:
        return BooleanLiteral(node.val == "true")

    def map_null(self, node: Node, meta: Meta) -> Expr:
        return NullLiteral()

    def map_undefined(self, node: Node, meta: Meta) -> Expr:
        return undefined()

    # ── Accessors ────────────────────────────────────────────

    def map_member(self, node: Value, meta: Meta) -> Expr:
        obj = self.map_expression(node.base, meta.extend(left=False))
        for prop in node.properties:
            if isinstance(prop, Access):
                obj = member(obj, prop.name.value)
            elif isinstance(prop, Index):
                obj = MemberExpression(obj, self.map_expression(prop.index, meta.extend(left=False)), True)
            elif isinstance(prop, Slice):
                obj = self.map_slice(obj, prop.range, meta)
            else:
                raise TranslationError(node_type(prop), "MemberExpression")
        return obj

    def map_slice(self, obj: Expr, rng: Range, meta: Meta) -> Expr:
        """``a[x..y]`` as ``a.slice(...)``; an inclusive end is bumped by one."""
        inner = meta.extend(left=False)
        start = self.map_expression(rng.from_, inner) if rng.from_ is not None else number(0)
        args: list[Expr] = [start]
        if rng.to is not None:
            if rng.exclusive:
                args.append(self.map_expression(rng.to, inner))
            else:
                end = int_literal(rng.to)
                if end is None:
                    bumped = BinaryExpression("+", UnaryExpression("+", self.map_expression(rng.to, inner)), number(1))
                    args.append(LogicalExpression("||", bumped, NumericLiteral("9e9")))
                elif end != -1:
                    args.append(number(end + 1))
        return call(member(obj, "slice"), args)

    # ── Calls ────────────────────────────────────────────────

    def map_call(self, node: Call, meta: Meta) -> Expr:
        if node.is_super:
            return self.map_super_call(node, meta)
        inner = meta.extend(left=False)
        args = [self.map_argument(arg, inner) for arg in node.args]
        callee = self.map_expression(node.variable, inner)
        if node.is_new:
            return NewExpression(callee, args)
        return CallExpression(callee, args)

    def map_argument(self, node: Node, meta: Meta) -> Expr:
        if isinstance(node, Splat):
            return SpreadElement(self.map_expression(node.name, meta))
        return self.map_expression(node, meta)

    def map_super_call(self, node: Call, meta: Meta) -> Expr:
        if meta.method_name is None:
            raise IllegalSourceError("cannot call super outside of a class method", node.pos.line, node.pos.col)
        if node.bare:
            args: list[Expr] = [SpreadElement(Identifier("arguments"))]
        else:
            args = [self.map_argument(arg, meta.extend(left=False)) for arg in node.args]
        if meta.in_constructor:
            if not meta.is_subclass:
                raise IllegalSourceError(
                    "cannot call super in the constructor of a class without a parent",
                    node.pos.line,
                    node.pos.col,
                )
            return CallExpression(Super(), args)
        return CallExpression(member(Super(), meta.method_name), args)

    # ── Assignment ───────────────────────────────────────────

    def map_assign(self, node: Assign, meta: Meta) -> Expr:
        if node.context == "object":
            raise TranslationError("Assign", "Expression")
        target = self.map_target(node.variable, meta)
        value = self.map_expression(node.value, meta.extend(left=False))
        op = node.context
        if op is None:
            return AssignmentExpression("=", target, value)
        if op in ("||=", "&&="):
            current = self.map_expression(node.variable, meta)
            return LogicalExpression(op[:2], current, AssignmentExpression("=", target, value))
        if op == "?=":
            current = self.map_expression(node.variable, meta)
            test = BinaryExpression("!=", current, NullLiteral())
            again = self.map_expression(node.variable, meta)
            return ConditionalExpression(test, again, AssignmentExpression("=", target, value))
        if op in ("**=", "//=", "%%="):
            current = self.map_expression(node.variable, meta)
            combined = self.binary(op[:-1], current, value, node, meta)
            return AssignmentExpression("=", target, combined)
        return AssignmentExpression(op, target, value)

    def map_target(self, node: Node, meta: Meta) -> Expr:
        """Left-hand side of an assignment: identifier, member, or pattern."""
        target_meta = meta.extend(left=True)
        if isinstance(node, Value) and not node.properties:
            node = node.base
        if is_identifier(node):
            return Identifier(node.value)
        if isinstance(node, Value):
            if has_soak(node):
                raise TranslationError("Value", "LVal")
            return self.map_member(node, meta.extend(left=False))
        if isinstance(node, Arr):
            return self.map_array_pattern(node, target_meta)
        if isinstance(node, Obj):
            return self.map_object_pattern(node, target_meta)
        raise TranslationError(node_type(node), "LVal")

    def map_pattern_element(self, node: Node, meta: Meta) -> Expr:
        if isinstance(node, Splat):
            return RestElement(self.map_target(node.name, meta))
        if isinstance(node, Assign) and node.context is None:
            default = self.map_expression(node.value, meta.extend(left=False))
            return AssignmentPattern(self.map_target(node.variable, meta), default)
        return self.map_target(node, meta)

    def map_array_pattern(self, node: Arr, meta: Meta) -> Expr:
        return ArrayPattern([self.map_pattern_element(item, meta) for item in node.objects])

    def map_object_pattern(self, node: Obj, meta: Meta) -> Expr:
        props: list = []
        for prop in node.properties:
            if isinstance(prop, Comment):
                continue
            if isinstance(prop, Assign) and prop.context == "object":
                key = self.map_object_key(prop.variable)
                value = self.map_pattern_element(prop.value, meta)
                shorthand = isinstance(key, Identifier) and isinstance(value, Identifier) and key.name == value.name
                props.append(Property(key, value, False, shorthand))
            elif isinstance(prop, Assign):
                name = self.property_name(prop.variable)
                props.append(Property(Identifier(name), self.map_pattern_element(prop, meta), False, is_identifier(prop.variable)))
            elif isinstance(prop, Splat):
                props.append(RestElement(self.map_target(prop.name, meta)))
            elif is_this_property(prop):
                name = self.property_name(prop)
                props.append(Property(Identifier(name), member(ThisExpression(), name)))
            elif is_identifier(prop):
                props.append(Property(Identifier(prop.value), Identifier(prop.value), False, True))
            else:
                raise TranslationError(node_type(prop), "ObjectPattern")
        return ObjectPattern(props)

    def property_name(self, node: Node) -> str:
        if is_this_property(node):
            return node.properties[0].name.value
        if is_identifier(node):
            return node.value
        raise TranslationError(node_type(node), "Identifier")

    # ── Operators ────────────────────────────────────────────

    def map_operation(self, node: Op, meta: Meta) -> Expr:
        inner = meta.extend(left=False)
        op = node.operator
        if node.second is None:
            if op in ("++", "--"):
                return UpdateExpression(op, self.map_target(node.first, meta), not node.flip)
            if op == "yield":
                if isinstance(node.first, Undefined):
                    return YieldExpression(None)
                return YieldExpression(self.map_expression(node.first, inner))
            return UnaryExpression(op, self.map_expression(node.first, inner))
        if op in CHAINABLE and isinstance(node.first, Op) and node.first.operator in CHAINABLE and node.first.second is not None:
            return self.map_chain(node, inner)
        if op == "%%":
            return self.map_modulo(node, inner)
        left = self.map_expression(node.first, inner)
        right = self.map_expression(node.second, inner)
        return self.binary(op, left, right, node, inner)

    def binary(self, op: str, left: Expr, right: Expr, node: Node, meta: Meta) -> Expr:
        if op == "**":
            return call(member(Identifier("Math"), "pow"), [left, right])
        if op == "//":
            return call(member(Identifier("Math"), "floor"), [BinaryExpression("/", left, right)])
        if op == "%%":
            return call(Identifier(meta.scope.helper("modulo")), [left, right])
        if op in ("&&", "||"):
            return LogicalExpression(op, left, right)
        return BinaryExpression(op, left, right)

    def map_chain(self, node: Op, meta: Meta) -> Expr:
        """``a < b < c`` as ``a < b && b < c``; a complex middle operand is cached."""
        operators = [node.operator]
        operands = [node.second]
        first = node.first
        while isinstance(first, Op) and first.operator in CHAINABLE and first.second is not None:
            operators.insert(0, first.operator)
            operands.insert(0, first.second)
            first = first.first
        operands.insert(0, first)
        left = self.map_expression(operands[0], meta)
        comparisons: list[Expr] = []
        for i, op in enumerate(operators):
            operand = operands[i + 1]
            right = self.map_expression(operand, meta)
            if i + 1 < len(operators) and not is_simple(operand):
                ref = Identifier(meta.scope.free_variable("ref"))
                comparisons.append(BinaryExpression(op, left, AssignmentExpression("=", ref, right)))
                left = Identifier(ref.name)
            else:
                comparisons.append(BinaryExpression(op, left, right))
                left = self.map_expression(operand, meta)
        result = comparisons[0]
        for comparison in comparisons[1:]:
            result = LogicalExpression("&&", result, comparison)
        return result

    def map_modulo(self, node: Op, meta: Meta) -> Expr:
        """Floored modulo: inline when the divisor is simple, else the helper."""
        chained = isinstance(node.first, Op) and node.first.operator == "%%"
        left = self.map_expression(node.first, meta)
        if chained or not is_simple(node.second):
            right = self.map_expression(node.second, meta)
            return call(Identifier(meta.scope.helper("modulo")), [left, right])
        remainder = BinaryExpression("%", left, self.map_expression(node.second, meta))
        shifted = BinaryExpression("+", remainder, self.map_expression(node.second, meta))
        return BinaryExpression("%", shifted, self.map_expression(node.second, meta))

    def map_membership(self, node: In, meta: Meta) -> Expr:
        inner = meta.extend(left=False)
        test = call(member(self.map_expression(node.array, inner), "includes"), [self.map_expression(node.object, inner)])
        if node.negated:
            return not_(test)
        return test

    def map_existence(self, node: Existence, meta: Meta) -> Expr:
        expr = node.expression
        if is_identifier(expr):
            name = expr.base.value if isinstance(expr, Value) else expr.value
            return typeof_guard(name)
        return BinaryExpression("!=", self.map_expression(expr, meta.extend(left=False)), NullLiteral())

    # ── Collections ──────────────────────────────────────────

    def map_parens(self, node: Parens, meta: Meta) -> Expr:
        exprs = [e for e in node.body.expressions if not isinstance(e, Comment)]
        if len(exprs) == 1:
            return self.map_expression(exprs[0], meta)
        return SequenceExpression([self.map_expression(e, meta) for e in exprs])

    def map_array(self, node: Arr, meta: Meta) -> Expr:
        if meta.left:
            return self.map_array_pattern(node, meta)
        return ArrayExpression([self.map_argument(item, meta) for item in node.objects if not isinstance(item, Comment)])

    def map_object_key(self, key: Node) -> Expr:
        if isinstance(key, Literal):
            if IDENTIFIER_RE.match(key.value):
                return Identifier(key.value)
            if key.value[0] in ("'", '"'):
                return StringLiteral(cook_string(key.value))
            if NUMBER_RE.match(key.value):
                return NumericLiteral(key.value)
        raise TranslationError(node_type(key), "ObjectKey")

    def map_object(self, node: Obj, meta: Meta) -> Expr:
        if meta.left:
            return self.map_object_pattern(node, meta)
        props: list = []
        for prop in node.properties:
            if isinstance(prop, Comment):
                continue
            if isinstance(prop, Assign) and prop.context == "object":
                if is_this_property(prop.variable):
                    raise TranslationError("Value", "ObjectProperty")
                props.append(Property(self.map_object_key(prop.variable), self.map_expression(prop.value, meta)))
            elif isinstance(prop, Splat):
                props.append(SpreadElement(self.map_expression(prop.name, meta)))
            elif is_this_property(prop):
                name = self.property_name(prop)
                props.append(Property(Identifier(name), member(ThisExpression(), name)))
            elif is_identifier(prop):
                props.append(Property(Identifier(prop.value), Identifier(prop.value), False, True))
            else:
                raise TranslationError(node_type(prop), "ObjectProperty")
        return ObjectExpression(props)

    def map_range(self, node: Range, meta: Meta) -> Expr:
        """Literal integer range as an array literal."""
        start = int_literal(node.from_)
        end = int_literal(node.to)
        step = 1 if start <= end else -1
        stop = end if node.exclusive else end + step
        values = list(range(start, stop, step))
        if len(values) > MAX_RANGE_ELEMENTS:
            return self.map_fallback(node, meta)
        return ArrayExpression([number(v) for v in values])

    # ── Fallback ─────────────────────────────────────────────

    def map_fallback(self, node: Node, meta: Meta) -> Expr:
        """Hand node to the legacy compiler and splice its output in."""
        log.debug("fallback for %s at %d:%d", node_type(node), node.pos.line, node.pos.col)
        code = legacy.compile_fallback(node, meta, self)
        if isinstance(node, (Range, Class, Extends)):
            return Fragment(code, PREC_CALL)
        return Fragment(code, PREC_CONDITIONAL)
