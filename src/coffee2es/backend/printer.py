"""JavaScript printer: ESTree -> source text.

Layout rules:
- statements, class members, and object properties are separated by a
  blank line when either neighbor spans several lines
- object literals are always broken over lines; arrays stay inline
- conditional expressions are always parenthesized
- ``case`` labels sit at the indentation of their ``switch``
"""

from __future__ import annotations

from ..estree import (
    ArrayExpression,
    ArrayPattern,
    ArrowFunctionExpression,
    AssignmentExpression,
    AssignmentPattern,
    BinaryExpression,
    BlockStatement,
    BooleanLiteral,
    BreakStatement,
    CallExpression,
    ClassBody,
    ClassDeclaration,
    ClassExpression,
    CommentStatement,
    ConditionalExpression,
    ContinueStatement,
    DebuggerStatement,
    EmptyStatement,
    Expr,
    ExpressionStatement,
    ForOfStatement,
    ForStatement,
    Fragment,
    FunctionExpression,
    Identifier,
    IfStatement,
    LogicalExpression,
    MemberExpression,
    MethodDefinition,
    NewExpression,
    Node,
    NullLiteral,
    NumericLiteral,
    ObjectExpression,
    ObjectPattern,
    Program,
    Property,
    PropertyDefinition,
    RegExpLiteral,
    RestElement,
    ReturnStatement,
    SequenceExpression,
    SpreadElement,
    Stmt,
    StringLiteral,
    Super,
    SwitchStatement,
    ThisExpression,
    ThrowStatement,
    TryStatement,
    UnaryExpression,
    UpdateExpression,
    VariableDeclaration,
    VariableDeclarator,
    WhileStatement,
    YieldExpression,
)

PREC_SEQUENCE = 0
PREC_YIELD = 1
PREC_ASSIGN = 2
PREC_CONDITIONAL = 3
PREC_UNARY = 15
PREC_UPDATE = 16
PREC_CALL = 17
PREC_PRIMARY = 18

BINARY_PREC: dict[str, int] = {
    "||": 4,
    "&&": 5,
    "|": 6,
    "^": 7,
    "&": 8,
    "==": 9,
    "!=": 9,
    "===": 9,
    "!==": 9,
    "<": 10,
    ">": 10,
    "<=": 10,
    ">=": 10,
    "in": 10,
    "instanceof": 10,
    "<<": 11,
    ">>": 11,
    ">>>": 11,
    "+": 12,
    "-": 12,
    "*": 13,
    "/": 13,
    "%": 13,
    "**": 14,
}

WORD_UNARY: set[str] = {"typeof", "void", "delete"}

STRING_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
    "\v": "\\v",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def quote_string(value: str, quote: str) -> str:
    """JavaScript string literal for value using the given quote character."""
    out: list[str] = [quote]
    for i, c in enumerate(value):
        if c == quote:
            out.append("\\" + c)
        elif c in STRING_ESCAPES:
            out.append(STRING_ESCAPES[c])
        elif c == "\0":
            nxt = value[i + 1 : i + 2]
            out.append("\\x00" if nxt.isdigit() else "\\0")
        elif ord(c) < 0x20:
            out.append("\\x" + format(ord(c), "02x"))
        else:
            out.append(c)
    out.append(quote)
    return "".join(out)


def print_program(program: Program, tab_width: int = 2, quote: str = '"') -> str:
    """Render program as JavaScript source."""
    return JsPrinter(tab_width, quote).program(program)


def print_expression(expr: Expr, tab_width: int = 2, quote: str = '"', precedence: int = PREC_SEQUENCE) -> str:
    """Render one expression, parenthesized if it binds looser than precedence.

    Lines after the first are indented relative to column zero.
    """
    return JsPrinter(tab_width, quote).expr(expr, precedence)


class JsPrinter:
    """Emit JavaScript text from an ESTree."""

    def __init__(self, tab_width: int = 2, quote: str = '"') -> None:
        self.indent = 0
        self.tab = " " * tab_width
        self.quote = quote

    def _pad(self) -> str:
        return self.tab * self.indent

    def program(self, program: Program) -> str:
        self.indent = 0
        return self.statements(program.body)

    # ── Statements ───────────────────────────────────────────

    def statements(self, stmts: list[Stmt]) -> str:
        """Statements at the current indentation, blank lines around multi-line ones."""
        return _join_spaced([self.stmt(s) for s in stmts])

    def block(self, stmts: list[Stmt]) -> str:
        """``{ ... }`` starting mid-line and closing at the current indentation."""
        if not stmts:
            return "{}"
        self.indent += 1
        inner = self.statements(stmts)
        self.indent -= 1
        return "{\n" + inner + "\n" + self._pad() + "}"

    def stmt(self, stmt: Stmt) -> str:
        pad = self._pad()
        match stmt:
            case ExpressionStatement(expression=expression):
                text = self.expr(expression)
                if not isinstance(expression, Fragment) and _needs_statement_parens(text):
                    text = "(" + text + ")"
                return pad + text + ";"
            case VariableDeclaration():
                return pad + self.declaration(stmt) + ";"
            case ReturnStatement(argument=None):
                return pad + "return;"
            case ReturnStatement(argument=argument):
                return pad + "return " + self.expr(argument) + ";"
            case ThrowStatement(argument=argument):
                return pad + "throw " + self.expr(argument) + ";"
            case BreakStatement():
                return pad + "break;"
            case ContinueStatement():
                return pad + "continue;"
            case DebuggerStatement():
                return pad + "debugger;"
            case EmptyStatement():
                return pad + ";"
            case CommentStatement(text=text):
                return pad + "/*" + text + "*/"
            case BlockStatement(body=body):
                return pad + self.block(body)
            case IfStatement():
                return pad + self.if_chain(stmt)
            case SwitchStatement(discriminant=discriminant, cases=cases):
                lines = [pad + "switch (" + self.expr(discriminant) + ") {"]
                for case in cases:
                    if case.test is None:
                        lines.append(pad + "default:")
                    else:
                        lines.append(pad + "case " + self.expr(case.test) + ":")
                    if case.consequent:
                        self.indent += 1
                        lines.append(self.statements(case.consequent))
                        self.indent -= 1
                lines.append(pad + "}")
                return "\n".join(lines)
            case TryStatement(block=block, handler=handler, finalizer=finalizer):
                text = pad + "try " + self.block(block.body)
                if handler is not None:
                    if handler.param is None:
                        text += " catch " + self.block(handler.body.body)
                    else:
                        text += " catch (" + self.expr(handler.param) + ") " + self.block(handler.body.body)
                if finalizer is not None:
                    text += " finally " + self.block(finalizer.body)
                return text
            case WhileStatement(test=test, body=body):
                return pad + "while (" + self.expr(test) + ") " + self.block(body.body)
            case ForStatement(init=init, test=test, update=update, body=body):
                parts = [
                    self.declaration(init) if isinstance(init, VariableDeclaration) else (self.expr(init) if init else ""),
                    self.expr(test) if test is not None else "",
                    self.expr(update) if update is not None else "",
                ]
                return pad + "for (" + "; ".join(parts) + ") " + self.block(body.body)
            case ForOfStatement(left=left, right=right, body=body):
                head = self.declaration(left) + " of " + self.expr(right, PREC_ASSIGN)
                return pad + "for (" + head + ") " + self.block(body.body)
            case ClassDeclaration(id=id_, superclass=superclass, body=body):
                return pad + self.class_text(id_, superclass, body)
            case _:
                raise NotImplementedError("cannot print " + type(stmt).__name__)

    def if_chain(self, stmt: IfStatement) -> str:
        text = "if (" + self.expr(stmt.test) + ") " + self.block(stmt.consequent.body)
        if isinstance(stmt.alternate, IfStatement):
            text += " else " + self.if_chain(stmt.alternate)
        elif isinstance(stmt.alternate, BlockStatement):
            text += " else " + self.block(stmt.alternate.body)
        return text

    def declaration(self, decl: VariableDeclaration) -> str:
        return decl.kind + " " + ", ".join(self.declarator(d) for d in decl.declarations)

    def declarator(self, decl: VariableDeclarator) -> str:
        if decl.init is None:
            return self.expr(decl.id)
        return self.expr(decl.id) + " = " + self.expr(decl.init, PREC_ASSIGN)

    # ── Classes ──────────────────────────────────────────────

    def class_text(self, id_: Identifier | None, superclass: Expr | None, body: ClassBody) -> str:
        head = "class"
        if id_ is not None:
            head += " " + id_.name
        if superclass is not None:
            head += " extends " + self.expr(superclass, PREC_CALL)
        if not body.body:
            return head + " {}"
        self.indent += 1
        members = _join_spaced([self.class_member(m) for m in body.body])
        self.indent -= 1
        return head + " {\n" + members + "\n" + self._pad() + "}"

    def class_member(self, node: Node) -> str:
        pad = self._pad()
        prefix = "static " if getattr(node, "static", False) else ""
        key = self.property_key(node.key, node.computed)
        if isinstance(node, MethodDefinition):
            fn = node.value
            star = "*" if fn.generator else ""
            return pad + prefix + star + key + "(" + self.params(fn.params) + ") " + self.block(fn.body.body)
        if isinstance(node, PropertyDefinition):
            if node.value is None:
                return pad + prefix + key + ";"
            return pad + prefix + key + " = " + self.expr(node.value, PREC_ASSIGN) + ";"
        raise NotImplementedError("cannot print " + type(node).__name__)

    # ── Expressions ──────────────────────────────────────────

    def expr(self, expr: Expr, precedence: int = PREC_SEQUENCE) -> str:
        """Expression text, parenthesized if it binds looser than precedence."""
        text = self._expr(expr)
        if _precedence(expr) < precedence:
            return "(" + text + ")"
        return text

    def _expr(self, expr: Expr) -> str:
        match expr:
            case Identifier(name=name):
                return name
            case StringLiteral(value=value):
                return quote_string(value, self.quote)
            case NumericLiteral(raw=raw):
                return raw
            case BooleanLiteral(value=value):
                return "true" if value else "false"
            case NullLiteral():
                return "null"
            case RegExpLiteral(raw=raw):
                return raw
            case ThisExpression():
                return "this"
            case Super():
                return "super"
            case Fragment(code=code):
                return code.replace("\n", "\n" + self._pad())
            case ArrayExpression(elements=elements) | ArrayPattern(elements=elements):
                return "[" + ", ".join(self.expr(e, PREC_ASSIGN) for e in elements) + "]"
            case ObjectExpression(properties=properties):
                return self.object_literal(properties)
            case ObjectPattern(properties=properties):
                return "{" + ", ".join(self.property(p) for p in properties) + "}"
            case SpreadElement(argument=argument) | RestElement(argument=argument):
                return "..." + self.expr(argument, PREC_ASSIGN)
            case AssignmentPattern(left=left, right=right):
                return self.expr(left) + " = " + self.expr(right, PREC_ASSIGN)
            case FunctionExpression(params=params, body=body, generator=generator):
                keyword = "function*" if generator else "function"
                return keyword + "(" + self.params(params) + ") " + self.block(body.body)
            case ArrowFunctionExpression(params=params, body=body):
                if len(params) == 1 and isinstance(params[0], Identifier):
                    head = params[0].name
                else:
                    head = "(" + self.params(params) + ")"
                return head + " => " + self.block(body.body)
            case ClassExpression(id=id_, superclass=superclass, body=body):
                return self.class_text(id_, superclass, body)
            case UnaryExpression(operator=op, argument=argument):
                arg = self.expr(argument, PREC_UNARY)
                if op in WORD_UNARY:
                    return op + " " + arg
                if op in ("-", "+") and arg.startswith(op):
                    return op + "(" + arg + ")"
                return op + arg
            case UpdateExpression(operator=op, argument=argument, prefix=prefix):
                arg = self.expr(argument, PREC_CALL)
                return op + arg if prefix else arg + op
            case BinaryExpression(operator=op, left=left, right=right) | LogicalExpression(
                operator=op, left=left, right=right
            ):
                prec = BINARY_PREC[op]
                if op == "**":
                    return self.expr(left, PREC_UPDATE) + " ** " + self.expr(right, prec)
                return self.expr(left, prec) + " " + op + " " + self.expr(right, prec + 1)
            case AssignmentExpression(operator=op, left=left, right=right):
                return self.expr(left, PREC_CALL) + " " + op + " " + self.expr(right, PREC_ASSIGN)
            case ConditionalExpression(test=test, consequent=consequent, alternate=alternate):
                return (
                    "("
                    + self.expr(test, PREC_CONDITIONAL + 1)
                    + " ? "
                    + self.expr(consequent, PREC_ASSIGN)
                    + " : "
                    + self.expr(alternate, PREC_ASSIGN)
                    + ")"
                )
            case CallExpression(callee=callee, arguments=arguments):
                return self.callee(callee) + "(" + self.arguments(arguments) + ")"
            case NewExpression(callee=callee, arguments=arguments):
                text = self.callee(callee)
                if _contains_call(callee):
                    text = "(" + text + ")"
                return "new " + text + "(" + self.arguments(arguments) + ")"
            case MemberExpression(object=obj, property=prop, computed=computed):
                head = self.callee(obj)
                if isinstance(obj, NumericLiteral) and head.isdigit():
                    head = "(" + head + ")"
                if computed:
                    return head + "[" + self.expr(prop) + "]"
                return head + "." + self._expr(prop)
            case SequenceExpression(expressions=expressions):
                return ", ".join(self.expr(e, PREC_ASSIGN) for e in expressions)
            case YieldExpression(argument=None):
                return "yield"
            case YieldExpression(argument=argument, delegate=delegate):
                keyword = "yield* " if delegate else "yield "
                return keyword + self.expr(argument, PREC_YIELD)
            case _:
                raise NotImplementedError("cannot print " + type(expr).__name__)

    def callee(self, expr: Expr) -> str:
        """Callee or member object; function and class literals get parentheses."""
        if isinstance(expr, (FunctionExpression, ArrowFunctionExpression, ClassExpression, ObjectExpression)):
            return "(" + self._expr(expr) + ")"
        return self.expr(expr, PREC_CALL)

    def arguments(self, args: list[Expr]) -> str:
        return ", ".join(self.expr(a, PREC_ASSIGN) for a in args)

    def params(self, params: list[Expr]) -> str:
        return ", ".join(self.expr(p, PREC_ASSIGN) for p in params)

    def object_literal(self, properties: list[Node]) -> str:
        if not properties:
            return "{}"
        self.indent += 1
        pad = self._pad()
        items = [pad + self.property(p) for p in properties]
        self.indent -= 1
        return "{\n" + _join_spaced(items, ",") + "\n" + self._pad() + "}"

    def property(self, prop: Node) -> str:
        if isinstance(prop, Property):
            if prop.shorthand:
                return self.expr(prop.value, PREC_ASSIGN)
            return self.property_key(prop.key, prop.computed) + ": " + self.expr(prop.value, PREC_ASSIGN)
        return self.expr(prop, PREC_ASSIGN)

    def property_key(self, key: Expr, computed: bool) -> str:
        if computed:
            return "[" + self.expr(key, PREC_ASSIGN) + "]"
        return self._expr(key)


def _join_spaced(items: list[str], separator: str = "") -> str:
    """Join rendered items one per line, with a blank line next to multi-line ones."""
    out = ""
    for i, item in enumerate(items):
        if i > 0:
            out += separator + "\n"
            if "\n" in item or "\n" in items[i - 1]:
                out += "\n"
        out += item
    return out


def _needs_statement_parens(text: str) -> bool:
    return text.startswith("{") or text.startswith("function") or text.startswith("class ") or text.startswith("class{")


def _contains_call(expr: Expr) -> bool:
    while isinstance(expr, MemberExpression):
        expr = expr.object
    return isinstance(expr, CallExpression)


def _precedence(expr: Expr) -> int:
    match expr:
        case SequenceExpression():
            return PREC_SEQUENCE
        case YieldExpression():
            return PREC_YIELD
        case AssignmentExpression() | ArrowFunctionExpression():
            return PREC_ASSIGN
        case BinaryExpression(operator=op) | LogicalExpression(operator=op):
            return BINARY_PREC[op]
        case UnaryExpression():
            return PREC_UNARY
        case UpdateExpression():
            return PREC_UPDATE
        case CallExpression() | NewExpression() | MemberExpression():
            return PREC_CALL
        case Fragment(precedence=precedence):
            return precedence
        case _:
            return PREC_PRIMARY
