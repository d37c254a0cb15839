"""CoffeeScript parser — recursive descent, one method per grammar production."""

from __future__ import annotations

from .ast import (
    Access,
    Arr,
    Assign,
    Block,
    Bool,
    Call,
    Class,
    Code,
    Comment,
    Existence,
    Expansion,
    Extends,
    For,
    If,
    In,
    Index,
    Literal,
    Node,
    Null,
    Obj,
    Op,
    Param,
    Parens,
    PassthroughLiteral,
    Pos,
    Range,
    Return,
    Slice,
    Splat,
    StatementLiteral,
    Switch,
    SwitchCase,
    Throw,
    Try,
    Undefined,
    Value,
    While,
    children,
)
from .tokens import (
    TK_COMMENT,
    TK_EOF,
    TK_IDENT,
    TK_INDENT,
    TK_JS,
    TK_NUMBER,
    TK_OP,
    TK_OUTDENT,
    TK_REGEX,
    TK_STRING,
    TK_TERMINATOR,
    Token,
    tokenize,
)

ASSIGN_OPS: set[str] = {
    "=",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "**=",
    "//=",
    "%%=",
    "&&=",
    "||=",
    "?=",
    "<<=",
    ">>=",
    ">>>=",
    "&=",
    "|=",
    "^=",
}

# Higher binds tighter. Logic operators share one level, as in CoffeeScript.
BINARY_PREC: dict[str, int] = {
    "||": 1,
    "&&": 1,
    "|": 1,
    "^": 1,
    "&": 1,
    "===": 2,
    "!==": 2,
    "<": 2,
    ">": 2,
    "<=": 2,
    ">=": 2,
    "in": 3,
    "of": 3,
    "instanceof": 3,
    "<<": 4,
    ">>": 4,
    ">>>": 4,
    "+": 5,
    "-": 5,
    "*": 6,
    "/": 6,
    "%": 6,
    "//": 6,
    "%%": 6,
    "**": 7,
    "?": 8,
}

CONVERSIONS: dict[str, str] = {
    "and": "&&",
    "or": "||",
    "is": "===",
    "isnt": "!==",
    "==": "===",
    "!=": "!==",
}

WORD_OPS: set[str] = {"and", "or", "is", "isnt", "in", "of", "instanceof"}

TRUE_WORDS: set[str] = {"true", "yes", "on"}
FALSE_WORDS: set[str] = {"false", "no", "off"}

POSTFIX_WORDS: set[str] = {"if", "unless", "while", "until", "for"}

# Tokens that may start the first argument of a paren-less call.
IMPLICIT_CALL_WORDS: set[str] = {
    "this",
    "super",
    "new",
    "not",
    "typeof",
    "delete",
    "do",
    "true",
    "false",
    "yes",
    "no",
    "on",
    "off",
    "null",
    "undefined",
}


class ParseError(Exception):
    """Parse error with location info."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


def _describe(tok: Token) -> str:
    if tok.type == TK_EOF:
        return "end of input"
    if tok.type == TK_INDENT:
        return "indentation"
    if tok.type == TK_OUTDENT:
        return "outdent"
    if tok.type == TK_TERMINATOR:
        return "newline"
    return "'" + tok.value + "'"


def _contains_yield(node: Node) -> bool:
    """Report a yield that belongs to this function, not a nested one."""
    if isinstance(node, Op) and node.operator == "yield":
        return True
    for child in children(node):
        if isinstance(child, Code):
            continue
        if _contains_yield(child):
            return True
    return False


def _is_identifier(node: Node) -> bool:
    return isinstance(node, Literal) and node.value != "" and (
        node.value[0].isalpha() or node.value[0] in "_$"
    ) and node.value != "this"


def _is_assignable(node: Node) -> bool:
    if _is_identifier(node):
        return True
    if isinstance(node, Value):
        if not node.properties:
            return False
        last = node.properties[-1]
        return isinstance(last, (Access, Index))
    return isinstance(node, (Arr, Obj))


class Parser:
    """Recursive descent parser for CoffeeScript."""

    def __init__(self, tokens: list[Token]):
        self.tokens: list[Token] = tokens
        self.pos: int = 0
        # >0 while parsing the arguments of a paren-less call
        self.implicit_depth: int = 0

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[len(self.tokens) - 1]
        return self.tokens[idx]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def at(self, value: str) -> bool:
        """Match an operator or keyword token by its spelling."""
        tok = self.current()
        return tok.value == value and (tok.type == TK_OP or tok.type == value)

    def at_type(self, type_: str) -> bool:
        return self.current().type == type_

    def at_ident(self) -> bool:
        return self.current().type == TK_IDENT

    def tok_is(self, tok: Token, value: str) -> bool:
        return tok.value == value and (tok.type == TK_OP or tok.type == value)

    def expect(self, value: str) -> Token:
        tok = self.current()
        if not self.at(value):
            raise self.error("expected '" + value + "', got " + _describe(tok))
        return self.advance()

    def expect_type(self, type_: str) -> Token:
        tok = self.current()
        if tok.type != type_:
            raise self.error("expected " + type_.lower() + ", got " + _describe(tok))
        return self.advance()

    def expect_ident(self) -> Token:
        tok = self.current()
        if tok.type != TK_IDENT:
            raise self.error("expected identifier, got " + _describe(tok))
        return self.advance()

    def error(self, msg: str) -> ParseError:
        tok = self.current()
        return ParseError(msg, tok.line, tok.col)

    def unexpected(self) -> ParseError:
        return self.error("unexpected " + _describe(self.current()))

    def _pos(self) -> Pos:
        tok = self.current()
        return Pos(tok.line, tok.col)

    def _tok_pos(self, tok: Token) -> Pos:
        return Pos(tok.line, tok.col)

    def skip_terminators(self) -> None:
        while self.at_type(TK_TERMINATOR):
            self.advance()

    def at_line_end(self) -> bool:
        tok = self.current()
        if tok.type in (TK_TERMINATOR, TK_OUTDENT, TK_EOF, TK_INDENT):
            return True
        if tok.type == TK_OP and tok.value in (")", "]", "}", ","):
            return True
        return tok.type == tok.value and tok.value in POSTFIX_WORDS | {"then", "else", "when", "by"}

    def at_after_terminator(self, *words: str) -> bool:
        """TERMINATOR followed by one of words (an ``else`` on its own line)."""
        if not self.at_type(TK_TERMINATOR):
            return False
        nxt = self.peek(1)
        for word in words:
            if self.tok_is(nxt, word):
                return True
        return False

    # ── Top Level ────────────────────────────────────────────

    def parse_program(self) -> Block:
        pos = self._pos()
        exprs = self.parse_lines()
        if not self.at_type(TK_EOF):
            raise self.unexpected()
        return Block(pos, exprs)

    def parse_lines(self) -> list[Node]:
        """Statements separated by newlines, up to an outdent or closer."""
        exprs: list[Node] = []
        while True:
            self.skip_terminators()
            if self.at_type(TK_OUTDENT) or self.at_type(TK_EOF) or self.at(")"):
                break
            exprs.append(self.parse_statement())
            tok = self.current()
            if tok.type not in (TK_TERMINATOR, TK_OUTDENT, TK_EOF) and not self.at(")"):
                raise self.unexpected()
        return exprs

    def parse_block(self) -> Block:
        pos = self._pos()
        self.expect_type(TK_INDENT)
        saved = self.implicit_depth
        self.implicit_depth = 0
        exprs = self.parse_lines()
        self.implicit_depth = saved
        self.expect_type(TK_OUTDENT)
        return Block(pos, exprs)

    def parse_clause_body(self) -> Block:
        """Body of if/when/for/while: an indented block or ``then stmt``."""
        if self.at_type(TK_INDENT):
            return self.parse_block()
        if self.at("then"):
            self.advance()
            if self.at_type(TK_INDENT):
                return self.parse_block()
            pos = self._pos()
            return Block(pos, [self.parse_statement()])
        raise self.error("expected indented block or 'then', got " + _describe(self.current()))

    def parse_else_body(self) -> Block:
        if self.at_type(TK_INDENT):
            return self.parse_block()
        pos = self._pos()
        return Block(pos, [self.parse_statement()])

    # ── Statements ───────────────────────────────────────────

    def parse_statement(self) -> Node:
        tok = self.current()
        pos = self._tok_pos(tok)
        if tok.type == TK_COMMENT:
            self.advance()
            return Comment(pos, tok.value)
        if self.at("return"):
            self.advance()
            value: Node | None = None
            if not self.at_line_end():
                value = self.parse_expression()
            stmt: Node = Return(pos, value)
        elif self.at("throw"):
            self.advance()
            stmt = Throw(pos, self.parse_expression())
        elif self.at("break") or self.at("continue") or self.at("debugger"):
            self.advance()
            stmt = StatementLiteral(pos, tok.value)
        else:
            stmt = self.parse_expression()
        return self.parse_postfix_modifiers(stmt)

    def parse_postfix_modifiers(self, stmt: Node) -> Node:
        while True:
            pos = self._pos()
            if self.at("if") or self.at("unless"):
                inverted = self.advance().value == "unless"
                cond = self.parse_expression()
                stmt = If(pos, cond, Block(stmt.pos, [stmt]), None, inverted, True)
            elif self.at("while") or self.at("until"):
                inverted = self.advance().value == "until"
                cond = self.parse_expression()
                guard: Node | None = None
                if self.at("when"):
                    self.advance()
                    guard = self.parse_expression()
                stmt = While(pos, cond, Block(stmt.pos, [stmt]), guard, inverted)
            elif self.at("for"):
                stmt = self.parse_for(Block(stmt.pos, [stmt]))
            else:
                return stmt

    # ── Expressions ──────────────────────────────────────────

    def parse_expression(self) -> Node:
        if self.at_implicit_object_start():
            return self.parse_implicit_object()
        left = self.parse_binary(1)
        if self.at("extends"):
            pos = self._pos()
            self.advance()
            return Extends(pos, left, self.parse_binary(1))
        return left

    def binary_operator(self) -> tuple[str, bool, int] | None:
        """Operator at the cursor as (spelling, negated, token count)."""
        tok = self.current()
        if tok.type == TK_OP and tok.value in BINARY_PREC:
            if tok.value == "?" and not tok.spaced:
                return None
            return (tok.value, False, 1)
        if tok.type == TK_OP and tok.value in CONVERSIONS:
            return (CONVERSIONS[tok.value], False, 1)
        if tok.type in WORD_OPS:
            if (tok.value == "or" or tok.value == "and") and self.peek(1).value == "=" and not self.peek(1).spaced:
                return None
            return (CONVERSIONS.get(tok.value, tok.value), False, 1)
        if tok.type == "not" and self.peek(1).type in ("in", "of", "instanceof"):
            return (self.peek(1).value, True, 2)
        return None

    def parse_binary(self, min_prec: int) -> Node:
        left = self.parse_unary()
        while True:
            info = self.binary_operator()
            if info is None:
                return left
            op, negated, width = info
            prec = BINARY_PREC[op]
            if prec < min_prec:
                return left
            pos = self._pos()
            for _ in range(width):
                self.advance()
            next_min = prec if op == "**" else prec + 1
            right = self.parse_binary(next_min)
            left = self.make_binary(pos, op, negated, left, right)

    def make_binary(self, pos: Pos, op: str, negated: bool, left: Node, right: Node) -> Node:
        if op == "in":
            return In(pos, left, right, negated)
        if op == "of":
            node: Node = Op(pos, "in", left, right)
        else:
            node = Op(pos, op, left, right)
        if negated:
            return Op(pos, "!", Parens(pos, Block(pos, [node])))
        return node

    def parse_unary(self) -> Node:
        pos = self._pos()
        tok = self.current()
        if self.at("!") or self.at("not"):
            self.advance()
            return Op(pos, "!", self.parse_unary())
        if self.at("-") or self.at("+") or self.at("~"):
            self.advance()
            return Op(pos, tok.value, self.parse_unary())
        if self.at("++") or self.at("--"):
            self.advance()
            return Op(pos, tok.value, self.parse_unary())
        if self.at("typeof") or self.at("delete"):
            self.advance()
            return Op(pos, tok.value, self.parse_unary())
        if self.at("yield"):
            self.advance()
            if self.at_line_end():
                return Op(pos, "yield", Undefined(pos))
            return Op(pos, "yield", self.parse_expression())
        return self.parse_postfix()

    def parse_postfix(self) -> Node:
        node = self.parse_primary()
        node = self.parse_accessors(node)
        tok = self.current()
        pos = self._tok_pos(tok)
        if self.at("?") and not tok.spaced:
            self.advance()
            node = Existence(pos, node)
        elif (self.at("++") or self.at("--")) and not tok.spaced:
            self.advance()
            return Op(pos, tok.value, node, None, True)
        if _is_assignable(node):
            op = self.assign_operator()
            if op is not None:
                return Assign(node.pos, node, self.parse_assign_value(), None if op == "=" else op)
        return node

    def assign_operator(self) -> str | None:
        tok = self.current()
        if tok.type == TK_OP and tok.value in ASSIGN_OPS:
            self.advance()
            return tok.value
        if (tok.type == "or" or tok.type == "and") and self.peek(1).value == "=" and self.peek(1).type == TK_OP:
            self.advance()
            self.advance()
            return "||=" if tok.value == "or" else "&&="
        return None

    def parse_assign_value(self) -> Node:
        if self.at_type(TK_INDENT):
            pos = self._pos()
            self.advance()
            saved = self.implicit_depth
            self.implicit_depth = 0
            if self.at_implicit_object_start():
                value = self.parse_implicit_object()
                self.skip_terminators()
                self.implicit_depth = saved
                self.expect_type(TK_OUTDENT)
                return value
            exprs = self.parse_lines()
            self.implicit_depth = saved
            self.expect_type(TK_OUTDENT)
            if len(exprs) == 1:
                return exprs[0]
            return Parens(pos, Block(pos, exprs))
        return self.parse_expression()

    # ── Accessors and calls ──────────────────────────────────

    def parse_accessors(self, node: Node, allow_calls: bool = True) -> Node:
        """Member, index, slice, and call suffixes, with the implicit call last."""
        base = node
        this = False
        props: list[Node] = []
        if isinstance(node, Value):
            base = node.base
            props = list(node.properties)
            this = node.this

        def flush() -> Node:
            if props:
                return Value(base.pos, base, list(props), this)
            return base

        while True:
            tok = self.current()
            pos = self._tok_pos(tok)
            if tok.newline and self.implicit_depth > 0:
                break
            if self.at(".") or self.at("?."):
                self.advance()
                name = self.expect_ident()
                props.append(Access(pos, Literal(self._tok_pos(name), name.value), tok.value == "?."))
            elif self.at("::") or self.at("?::"):
                self.advance()
                props.append(Access(pos, Literal(pos, "prototype"), tok.value == "?::"))
                if self.at_ident() and not self.current().spaced:
                    name = self.advance()
                    props.append(Access(self._tok_pos(name), Literal(self._tok_pos(name), name.value)))
            elif self.at("[") and not tok.spaced:
                props.append(self.parse_index(False))
            elif self.at("?") and not tok.spaced and self.tok_is(self.peek(1), "[") and not self.peek(1).spaced:
                self.advance()
                props.append(self.parse_index(True))
            elif allow_calls and self.at("(") and not tok.spaced:
                args = self.parse_call_args()
                base = Call(pos, flush(), args)
                props = []
                this = False
            elif allow_calls and self.at("?") and not tok.spaced and self.tok_is(self.peek(1), "(") and not self.peek(1).spaced:
                self.advance()
                args = self.parse_call_args()
                base = Call(pos, flush(), args, True)
                props = []
                this = False
            elif allow_calls and self.is_callable(base, props) and self.at_implicit_call_start():
                args = self.parse_implicit_args()
                base = Call(pos, flush(), args)
                props = []
                this = False
            else:
                break
        return flush()

    def is_callable(self, base: Node, props: list[Node]) -> bool:
        if props:
            return True
        if isinstance(base, Literal):
            return _is_identifier(base)
        return isinstance(base, (Call, Parens))

    def at_implicit_call_start(self) -> bool:
        tok = self.current()
        if not tok.spaced or tok.newline:
            return False
        if tok.type in (TK_IDENT, TK_NUMBER, TK_STRING, TK_REGEX, TK_JS):
            return True
        if tok.type == "not" and self.peek(1).type in ("in", "of", "instanceof"):
            return False
        if tok.type in IMPLICIT_CALL_WORDS:
            return True
        if tok.type != TK_OP:
            return False
        if tok.value in ("@", "->", "=>", "{", "[", "(", "!", "~"):
            return True
        if tok.value in ("-", "+", "++", "--"):
            nxt = self.peek(1)
            return not nxt.spaced and nxt.type not in (TK_TERMINATOR, TK_EOF)
        return False

    def parse_implicit_args(self) -> list[Node]:
        self.implicit_depth += 1
        args = [self.parse_arg()]
        while self.at(","):
            self.advance()
            args.append(self.parse_arg())
        self.implicit_depth -= 1
        return args

    def parse_call_args(self) -> list[Node]:
        self.expect("(")
        saved = self.implicit_depth
        self.implicit_depth = 0
        args: list[Node] = []
        self.skip_terminators()
        while not self.at(")"):
            args.append(self.parse_arg())
            if self.at(","):
                self.advance()
            elif not self.at_type(TK_TERMINATOR) and not self.at(")"):
                raise self.unexpected()
            self.skip_terminators()
        self.expect(")")
        self.implicit_depth = saved
        return args

    def parse_arg(self) -> Node:
        pos = self._pos()
        expr = self.parse_expression()
        if self.at("..."):
            self.advance()
            return Splat(pos, expr)
        return expr

    def parse_index(self, soak: bool) -> Node:
        pos = self._pos()
        self.expect("[")
        saved = self.implicit_depth
        self.implicit_depth = 0
        self.skip_terminators()
        if self.at("..") or self.at("..."):
            exclusive = self.advance().value == "..."
            to = None if self.at("]") else self.parse_expression()
            node: Node = Slice(pos, Range(pos, None, to, exclusive))
        else:
            expr = self.parse_expression()
            if self.at("..") or self.at("..."):
                exclusive = self.advance().value == "..."
                to = None if self.at("]") else self.parse_expression()
                node = Slice(pos, Range(pos, expr, to, exclusive))
            else:
                node = Index(pos, expr, soak)
        self.skip_terminators()
        self.expect("]")
        self.implicit_depth = saved
        return node

    # ── Primaries ────────────────────────────────────────────

    def parse_primary(self) -> Node:
        tok = self.current()
        pos = self._tok_pos(tok)
        if tok.type == TK_IDENT or tok.type == TK_NUMBER or tok.type == TK_REGEX:
            self.advance()
            return Literal(pos, tok.value)
        if tok.type == TK_STRING:
            self.advance()
            return self.parse_string(tok)
        if tok.type == TK_JS:
            self.advance()
            return PassthroughLiteral(pos, tok.value)
        if self.at("this"):
            self.advance()
            return Literal(pos, "this")
        if self.at("@"):
            self.advance()
            nxt = self.current()
            if nxt.type == TK_IDENT and not nxt.spaced:
                self.advance()
                name = Literal(self._tok_pos(nxt), nxt.value)
                return Value(pos, Literal(pos, "this"), [Access(name.pos, name)], True)
            return Literal(pos, "this")
        if tok.type in TRUE_WORDS:
            self.advance()
            return Bool(pos, "true")
        if tok.type in FALSE_WORDS:
            self.advance()
            return Bool(pos, "false")
        if self.at("null"):
            self.advance()
            return Null(pos)
        if self.at("undefined"):
            self.advance()
            return Undefined(pos)
        if self.at("("):
            if self.is_param_list():
                return self.parse_code()
            return self.parse_parens()
        if self.at("->") or self.at("=>"):
            return self.parse_code()
        if self.at("["):
            return self.parse_array()
        if self.at("{"):
            return self.parse_object()
        if self.at("if") or self.at("unless"):
            return self.parse_if()
        if self.at("switch"):
            return self.parse_switch()
        if self.at("try"):
            return self.parse_try()
        if self.at("for"):
            return self.parse_for(None)
        if self.at("while") or self.at("until") or self.at("loop"):
            return self.parse_while()
        if self.at("class"):
            return self.parse_class()
        if self.at("super"):
            return self.parse_super()
        if self.at("new"):
            return self.parse_new()
        if self.at("do"):
            return self.parse_do()
        raise self.unexpected()

    def parse_string(self, tok: Token) -> Node:
        pos = self._tok_pos(tok)
        if not tok.parts:
            return Literal(pos, tok.value)
        quote = tok.value[0]
        pieces: list[Node] = []
        for kind, text, line, col in tok.parts:
            if kind == "str":
                if text != "":
                    pieces.append(Literal(Pos(line, col), quote + text + quote))
                continue
            sub = Parser(tokenize(text)).parse_program()
            if len(sub.expressions) == 0:
                continue
            if len(sub.expressions) == 1:
                pieces.append(sub.expressions[0])
            else:
                pieces.append(Parens(Pos(line, col), sub))
        if not pieces or not (isinstance(pieces[0], Literal) and pieces[0].value[0] == quote):
            pieces.insert(0, Literal(pos, quote + quote))
        node = pieces[0]
        for piece in pieces[1:]:
            node = Op(pos, "+", node, piece)
        return node

    def parse_parens(self) -> Node:
        pos = self._pos()
        self.expect("(")
        saved = self.implicit_depth
        self.implicit_depth = 0
        exprs = self.parse_lines()
        self.implicit_depth = saved
        self.expect(")")
        if not exprs:
            raise self.error("empty parentheses")
        return Parens(pos, Block(pos, exprs))

    def splat_ends(self, offset: int) -> bool:
        """True when the token at offset closes an array item, so `...` is a splat."""
        tok = self.peek(offset)
        return tok.type in (TK_TERMINATOR, TK_EOF) or self.tok_is(tok, ",") or self.tok_is(tok, "]")

    def parse_array(self) -> Node:
        pos = self._pos()
        self.expect("[")
        saved = self.implicit_depth
        self.implicit_depth = 0
        self.skip_terminators()
        items: list[Node] = []
        if not self.at("]"):
            first_pos = self._pos()
            first = self.parse_expression()
            if self.at("..") or (self.at("...") and not self.splat_ends(1)):
                exclusive = self.advance().value == "..."
                to = self.parse_expression()
                self.skip_terminators()
                self.expect("]")
                self.implicit_depth = saved
                return Range(pos, first, to, exclusive)
            if self.at("..."):
                self.advance()
                first = Splat(first_pos, first)
            items.append(first)
            while True:
                if self.at(","):
                    self.advance()
                elif not self.at_type(TK_TERMINATOR):
                    break
                self.skip_terminators()
                if self.at("]"):
                    break
                items.append(self.parse_arg())
        self.skip_terminators()
        self.expect("]")
        self.implicit_depth = saved
        return Arr(pos, items)

    def parse_object(self) -> Node:
        pos = self._pos()
        self.expect("{")
        saved = self.implicit_depth
        self.implicit_depth = 0
        props: list[Node] = []
        self.skip_terminators()
        while not self.at("}"):
            props.append(self.parse_object_property(True))
            if self.at(","):
                self.advance()
            elif not self.at_type(TK_TERMINATOR) and not self.at("}"):
                raise self.unexpected()
            self.skip_terminators()
        self.expect("}")
        self.implicit_depth = saved
        return Obj(pos, props)

    def parse_object_key(self) -> Node:
        tok = self.current()
        pos = self._tok_pos(tok)
        if tok.type in (TK_IDENT, TK_STRING, TK_NUMBER):
            self.advance()
            return Literal(pos, tok.value)
        if self.at("@"):
            self.advance()
            name = self.expect_ident()
            lit = Literal(self._tok_pos(name), name.value)
            return Value(pos, Literal(pos, "this"), [Access(lit.pos, lit)], True)
        raise self.error("expected object key, got " + _describe(tok))

    def parse_object_property(self, braced: bool) -> Node:
        pos = self._pos()
        key = self.parse_object_key()
        if self.at(":"):
            self.advance()
            if self.at_type(TK_INDENT):
                value = self.parse_assign_value()
            else:
                value = self.parse_expression()
            return Assign(pos, key, value, "object")
        if braced and self.at("="):
            self.advance()
            return Assign(pos, key, self.parse_expression())
        if braced and self.at("..."):
            self.advance()
            return Splat(pos, key)
        if not braced:
            raise self.error("expected ':', got " + _describe(self.current()))
        return key

    def at_implicit_object_start(self) -> bool:
        tok = self.current()
        nxt = self.peek(1)
        if tok.type in (TK_IDENT, TK_STRING, TK_NUMBER):
            return nxt.type == TK_OP and nxt.value == ":"
        if self.at("@"):
            after = self.peek(2)
            return nxt.type == TK_IDENT and after.type == TK_OP and after.value == ":"
        return False

    def parse_implicit_object(self) -> Node:
        pos = self._pos()
        props = [self.parse_object_property(False)]
        while True:
            if self.at(","):
                self.advance()
                self.skip_terminators()
                props.append(self.parse_object_property(False))
            elif self.at_type(TK_TERMINATOR):
                mark = self.pos
                self.advance()
                if self.at_implicit_object_start():
                    props.append(self.parse_object_property(False))
                else:
                    self.pos = mark
                    break
            else:
                break
        return Obj(pos, props, True)

    # ── Functions ────────────────────────────────────────────

    def is_param_list(self) -> bool:
        """Look past the matching ')' for a function arrow."""
        depth = 0
        idx = self.pos
        while idx < len(self.tokens):
            tok = self.tokens[idx]
            if tok.type == TK_OP and tok.value in ("(", "[", "{"):
                depth += 1
            elif tok.type == TK_OP and tok.value in (")", "]", "}"):
                depth -= 1
                if depth == 0:
                    nxt = self.tokens[idx + 1]
                    return nxt.type == TK_OP and nxt.value in ("->", "=>")
            elif tok.type == TK_EOF:
                return False
            idx += 1
        return False

    def parse_code(self) -> Node:
        pos = self._pos()
        params: list[Node] = []
        if self.at("("):
            self.advance()
            self.skip_terminators()
            while not self.at(")"):
                params.append(self.parse_param())
                if self.at(","):
                    self.advance()
                self.skip_terminators()
            self.expect(")")
        arrow = self.advance()
        if arrow.value not in ("->", "=>"):
            raise ParseError("expected '->' or '=>'", arrow.line, arrow.col)
        body = self.parse_function_body()
        return Code(pos, params, body, arrow.value == "=>", _contains_yield(body))

    def parse_param(self) -> Node:
        pos = self._pos()
        if self.at("..."):
            self.advance()
            return Expansion(pos)
        if self.at_ident():
            tok = self.advance()
            name: Node = Literal(pos, tok.value)
        elif self.at("@"):
            self.advance()
            tok = self.expect_ident()
            lit = Literal(self._tok_pos(tok), tok.value)
            name = Value(pos, Literal(pos, "this"), [Access(lit.pos, lit)], True)
        elif self.at("["):
            name = self.parse_array()
        elif self.at("{"):
            name = self.parse_object()
        else:
            raise self.error("expected parameter, got " + _describe(self.current()))
        if self.at("..."):
            self.advance()
            return Param(pos, name, None, True)
        value: Node | None = None
        if self.at("="):
            self.advance()
            value = self.parse_expression()
        return Param(pos, name, value)

    def parse_function_body(self) -> Block:
        pos = self._pos()
        if self.at_type(TK_INDENT):
            return self.parse_block()
        tok = self.current()
        if tok.type in (TK_TERMINATOR, TK_OUTDENT, TK_EOF) or (
            tok.type == TK_OP and tok.value in (")", "]", "}", ",")
        ):
            return Block(pos, [])
        return Block(pos, [self.parse_statement()])

    def parse_do(self) -> Node:
        pos = self._pos()
        self.expect("do")
        target = self.parse_postfix()
        if isinstance(target, Code):
            args: list[Node] = []
            for param in target.params:
                if isinstance(param, Param) and param.value is not None:
                    args.append(param.value)
                elif isinstance(param, Param) and isinstance(param.name, Literal):
                    args.append(param.name)
                else:
                    raise ParseError("unsupported parameter in 'do'", param.pos.line, param.pos.col)
            return Call(pos, Parens(pos, Block(pos, [target])), args)
        return Call(pos, target, [])

    # ── Control flow ─────────────────────────────────────────

    def parse_if(self) -> Node:
        pos = self._pos()
        inverted = self.advance().value == "unless"
        cond = self.parse_expression()
        body = self.parse_clause_body()
        else_body: Block | None = None
        if self.at_after_terminator("else"):
            self.advance()
        if self.at("else"):
            self.advance()
            if self.at("if") or self.at("unless"):
                nested = self.parse_if()
                else_body = Block(nested.pos, [nested])
            else:
                else_body = self.parse_else_body()
        return If(pos, cond, body, else_body, inverted)

    def parse_switch(self) -> Node:
        pos = self._pos()
        self.expect("switch")
        subject: Node | None = None
        if not self.at_type(TK_INDENT):
            subject = self.parse_expression()
        self.expect_type(TK_INDENT)
        self.skip_terminators()
        cases: list[SwitchCase] = []
        otherwise: Block | None = None
        while self.at("when"):
            self.advance()
            conds = [self.parse_expression()]
            while self.at(","):
                self.advance()
                conds.append(self.parse_expression())
            cases.append(SwitchCase(conds, self.parse_clause_body()))
            self.skip_terminators()
        if self.at("else"):
            self.advance()
            otherwise = self.parse_else_body()
            self.skip_terminators()
        if not cases and otherwise is None:
            raise self.error("switch without cases")
        self.expect_type(TK_OUTDENT)
        return Switch(pos, subject, cases, otherwise)

    def parse_try(self) -> Node:
        pos = self._pos()
        self.expect("try")
        attempt = self.parse_else_body()
        error_variable: Node | None = None
        recovery: Block | None = None
        ensure: Block | None = None
        if self.at_after_terminator("catch", "finally"):
            self.advance()
        if self.at("catch"):
            catch_pos = self._pos()
            self.advance()
            if self.at_ident():
                tok = self.advance()
                error_variable = Literal(self._tok_pos(tok), tok.value)
            elif self.at("{"):
                error_variable = self.parse_object()
            elif self.at("["):
                error_variable = self.parse_array()
            if self.at_type(TK_INDENT) or self.at("then"):
                recovery = self.parse_clause_body()
            else:
                recovery = Block(catch_pos, [])
            if self.at_after_terminator("finally"):
                self.advance()
        if self.at("finally"):
            self.advance()
            ensure = self.parse_else_body()
        return Try(pos, attempt, error_variable, recovery, ensure)

    def parse_loop_variable(self) -> Node:
        pos = self._pos()
        if self.at_ident():
            return Literal(pos, self.advance().value)
        if self.at("["):
            return self.parse_array()
        if self.at("{"):
            return self.parse_object()
        raise self.error("expected loop variable, got " + _describe(self.current()))

    def parse_for(self, body: Block | None) -> Node:
        pos = self._pos()
        self.expect("for")
        own = False
        if self.at("own"):
            self.advance()
            own = True
        name = self.parse_loop_variable()
        index: Node | None = None
        if self.at(","):
            self.advance()
            index = self.parse_loop_variable()
        if self.at("of"):
            is_object = True
        elif self.at("in"):
            is_object = False
        else:
            raise self.error("expected 'in' or 'of', got " + _describe(self.current()))
        self.advance()
        source = self.parse_expression()
        step: Node | None = None
        guard: Node | None = None
        while self.at("by") or self.at("when"):
            if self.advance().value == "by":
                step = self.parse_expression()
            else:
                guard = self.parse_expression()
        postfix = body is not None
        if body is None:
            body = self.parse_clause_body()
        return For(pos, body, source, name, index, is_object, own, step, guard, postfix)

    def parse_while(self) -> Node:
        pos = self._pos()
        kw = self.advance().value
        cond: Node | None = None
        guard: Node | None = None
        if kw != "loop":
            cond = self.parse_expression()
            if self.at("when"):
                self.advance()
                guard = self.parse_expression()
            body = self.parse_clause_body()
        else:
            body = self.parse_else_body()
        return While(pos, cond, body, guard, kw == "until")

    def parse_class(self) -> Node:
        pos = self._pos()
        self.expect("class")
        variable: Value | None = None
        parent: Node | None = None
        if self.at_ident():
            tok = self.advance()
            base = Literal(self._tok_pos(tok), tok.value)
            named = self.parse_accessors(base, False)
            if isinstance(named, Value):
                variable = named
            else:
                variable = Value(base.pos, base)
        if self.at("extends"):
            self.advance()
            parent = self.parse_postfix()
        if self.at_type(TK_INDENT):
            body = self.parse_block()
        else:
            body = Block(self._pos(), [])
        return Class(pos, variable, parent, body)

    def parse_super(self) -> Node:
        pos = self._pos()
        self.expect("super")
        tok = self.current()
        if self.at("(") and not tok.spaced:
            return Call(pos, None, self.parse_call_args(), False, False, True)
        if self.at_implicit_call_start():
            return Call(pos, None, self.parse_implicit_args(), False, False, True)
        return Call(pos, None, [], False, False, True, True)

    def parse_new(self) -> Node:
        pos = self._pos()
        self.expect("new")
        callee = self.parse_accessors(self.parse_primary(), False)
        tok = self.current()
        if self.at("(") and not tok.spaced:
            return Call(pos, callee, self.parse_call_args(), False, True)
        if self.at_implicit_call_start():
            return Call(pos, callee, self.parse_implicit_args(), False, True)
        return Call(pos, callee, [], False, True)


def parse(source: str) -> Block:
    """Parse CoffeeScript source into a Block."""
    tokens = tokenize(source)
    return Parser(tokens).parse_program()
