"""CoffeeScript tokenizer — lexes source into a flat token list.

Indentation is turned into INDENT/OUTDENT tokens and line breaks into
TERMINATOR tokens, so the parser never looks at whitespace.  Inside
square and curly brackets indentation is ignored and line breaks only
separate items; inside parentheses an indented line still opens a block.
"""

from __future__ import annotations


# Token type constants
TK_NUMBER = "NUMBER"
TK_STRING = "STRING"
TK_REGEX = "REGEX"
TK_JS = "JS"
TK_IDENT = "IDENT"
TK_OP = "OP"
TK_COMMENT = "COMMENT"
TK_INDENT = "INDENT"
TK_OUTDENT = "OUTDENT"
TK_TERMINATOR = "TERMINATOR"
TK_EOF = "EOF"

KEYWORDS: set[str] = {
    "and",
    "break",
    "by",
    "catch",
    "class",
    "continue",
    "debugger",
    "delete",
    "do",
    "else",
    "extends",
    "false",
    "finally",
    "for",
    "if",
    "in",
    "instanceof",
    "is",
    "isnt",
    "loop",
    "new",
    "no",
    "not",
    "null",
    "of",
    "off",
    "on",
    "or",
    "own",
    "return",
    "super",
    "switch",
    "then",
    "this",
    "throw",
    "true",
    "try",
    "typeof",
    "undefined",
    "unless",
    "until",
    "when",
    "while",
    "yes",
    "yield",
}

# Multi-character operators, sorted by length descending for greedy matching
MULTI_OPS: list[str] = [
    ">>>=",
    "...",
    "**=",
    "//=",
    "%%=",
    ">>>",
    "<<=",
    ">>=",
    "?::",
    "&&=",
    "||=",
    "?.",
    "::",
    "->",
    "=>",
    "==",
    "!=",
    "<=",
    ">=",
    "&&",
    "||",
    "++",
    "--",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
    "?=",
    "**",
    "//",
    "%%",
    "<<",
    ">>",
    "..",
]

SINGLE_OPS: set[str] = {
    "+",
    "-",
    "*",
    "/",
    "%",
    "&",
    "|",
    "^",
    "~",
    "!",
    "<",
    ">",
    "=",
    "(",
    ")",
    "[",
    "]",
    "{",
    "}",
    ",",
    ":",
    ".",
    "?",
    "@",
    ";",
}

# A line ending in one of these continues on the next line.
UNFINISHED: set[str] = {
    "+",
    "-",
    "*",
    "/",
    "%",
    "**",
    "//",
    "%%",
    "&",
    "|",
    "^",
    "<<",
    ">>",
    ">>>",
    "&&",
    "||",
    "==",
    "!=",
    "<",
    ">",
    "<=",
    ">=",
    ",",
    ".",
    "?.",
    "::",
    "and",
    "or",
    "is",
    "isnt",
    "not",
    "instanceof",
    "in",
    "of",
}

# After one of these a slash starts a division, not a regex.
VALUE_END: set[str] = {")", "]", "}", "this", "true", "false", "yes", "no", "on", "off", "null", "undefined", "@", "++", "--", "?"}

CLOSERS: dict[str, str] = {"(": ")", "[": "]", "{": "}"}


class TokenizeError(Exception):
    """Error during tokenization."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class Token:
    """A token with type, value, and position.

    ``spaced`` records whitespace right before the token and ``newline``
    marks the first token of a physical line; implicit calls and chained
    accessors depend on both.  Interpolated strings carry ``parts``.
    """

    def __init__(self, type_: str, value: str, line: int, col: int):
        self.type: str = type_
        self.value: str = value
        self.line: int = line
        self.col: int = col
        self.spaced: bool = False
        self.newline: bool = False
        self.parts: list[tuple[str, str, int, int]] = []

    def __repr__(self) -> str:
        return (
            "Token("
            + self.type
            + ", "
            + repr(self.value)
            + ", "
            + str(self.line)
            + ", "
            + str(self.col)
            + ")"
        )


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_" or c == "$"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


def _fold_lines(text: str, heredoc: bool) -> str:
    """Normalize a multi-line string body into a single source line."""
    if "\n" not in text:
        return text
    if not heredoc:
        lines = text.split("\n")
        out = lines[0].rstrip(" \t")
        for line in lines[1:]:
            stripped = line.strip(" \t")
            if stripped:
                out += " " + stripped if out else stripped
        return out
    lines = text.split("\n")
    if lines and lines[0].strip() == "":
        lines = lines[1:]
    if lines and lines[-1].strip() == "":
        lines = lines[:-1]
    indent: int | None = None
    for line in lines:
        if line.strip() == "":
            continue
        width = len(line) - len(line.lstrip(" \t"))
        if indent is None or width < indent:
            indent = width
    cut = indent or 0
    return "\\n".join(line[cut:] for line in lines)


class Lexer:
    """Indentation-aware scanner."""

    def __init__(self, source: str):
        self.src: str = source.replace("\r\n", "\n")
        self.pos: int = 0
        self.line: int = 1
        self.col: int = 1
        self.tokens: list[Token] = []
        self.indents: list[int] = []
        self.brackets: list[str] = []
        # per open paren: indent stack size at the paren, and above the silent base
        self.parens: list[list[int]] = []
        self.spaced: bool = True
        self.newline: bool = True

    # ── Helpers ──────────────────────────────────────────────

    def error(self, msg: str) -> TokenizeError:
        return TokenizeError(msg, self.line, self.col)

    def char(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.src):
            return self.src[idx]
        return ""

    def skip(self, count: int) -> None:
        for _ in range(count):
            if self.src[self.pos] == "\n":
                self.line += 1
                self.col = 1
            else:
                self.col += 1
            self.pos += 1

    def emit(self, type_: str, value: str, line: int, col: int) -> Token:
        tok = Token(type_, value, line, col)
        tok.spaced = self.spaced
        tok.newline = self.newline
        self.spaced = False
        self.newline = False
        self.tokens.append(tok)
        return tok

    def last(self) -> Token | None:
        if self.tokens:
            return self.tokens[-1]
        return None

    def last_value(self) -> str:
        tok = self.last()
        if tok is None:
            return ""
        return tok.value

    def structural(self, type_: str) -> None:
        tok = Token(type_, "", self.line, self.col)
        self.tokens.append(tok)

    def regex_allowed(self) -> bool:
        # an empty regex is not a literal, so `//` is always floor division
        if self.char(1) == "/":
            return False
        tok = self.last()
        if tok is None:
            return True
        if tok.type in (TK_NUMBER, TK_STRING, TK_REGEX, TK_JS):
            return False
        if tok.type == TK_IDENT or tok.value in VALUE_END:
            # `f /re/` is an implicit call, `a / b` is a division
            return self.spaced and self.char(1) not in (" ", "=", "\t")
        return True

    # ── Lines and indentation ────────────────────────────────

    def line_start(self) -> None:
        """Measure indentation at the start of a physical line."""
        start = self.pos
        while self.pos < len(self.src) and self.src[self.pos] in " \t":
            self.pos += 1
        indent = self.pos - start
        self.col = indent + 1
        rest = self.src[self.pos : self.pos + 3]
        if self.pos >= len(self.src):
            return
        if self.src[self.pos] == "\n":
            return
        if self.src[self.pos] == "#" and rest != "###":
            return
        self.spaced = True
        self.newline = True
        last = self.last()
        if last is None:
            self.indents.append(indent)
            return
        chained = (
            (self.char() == "." and self.char(1) != ".")
            or rest.startswith("?.")
            or rest.startswith("::")
            or rest.startswith("?::")
        )
        if chained or (last.type in (TK_OP, "and", "or", "is", "isnt", "not", "instanceof", "in", "of") and last.value in UNFINISHED):
            return
        if self.brackets and self.brackets[-1] == "(":
            self.paren_line(indent, last)
            return
        if self.brackets:
            if last.value not in ("(", "[", "{") and last.type != TK_TERMINATOR:
                self.structural(TK_TERMINATOR)
            return
        top = self.indents[-1]
        if indent > top:
            self.indents.append(indent)
            self.structural(TK_INDENT)
            return
        if indent < top:
            while indent < self.indents[-1]:
                self.indents.pop()
                self.structural(TK_OUTDENT)
            if indent != self.indents[-1]:
                raise self.error("inconsistent indentation")
        if last.type not in (TK_TERMINATOR, TK_INDENT):
            self.structural(TK_TERMINATOR)

    def paren_line(self, indent: int, last: Token) -> None:
        frame = self.parens[-1]
        if last.type == TK_OP and last.value == "(":
            # the first line inside the paren sets its base indent
            self.indents.append(max(indent, self.indents[-1]))
            frame[1] = len(self.indents)
            return
        if indent > self.indents[-1]:
            self.indents.append(indent)
            self.structural(TK_INDENT)
            return
        while indent < self.indents[-1] and len(self.indents) > frame[1]:
            self.indents.pop()
            self.structural(TK_OUTDENT)
        if indent > self.indents[-1]:
            raise self.error("inconsistent indentation")
        if last.type not in (TK_TERMINATOR, TK_INDENT):
            self.structural(TK_TERMINATOR)

    def close_paren(self) -> None:
        frame = self.parens.pop()
        while len(self.indents) > frame[1]:
            self.indents.pop()
            self.structural(TK_OUTDENT)
        del self.indents[frame[0] :]

    # ── Scanners ─────────────────────────────────────────────

    def scan_number(self) -> None:
        line, col = self.line, self.col
        start = self.pos
        if self.char() == "0" and self.char(1) in ("x", "X", "b", "B", "o", "O"):
            self.skip(2)
            while _is_alnum(self.char()):
                self.skip(1)
        else:
            while _is_digit(self.char()):
                self.skip(1)
            if self.char() == "." and _is_digit(self.char(1)):
                self.skip(1)
                while _is_digit(self.char()):
                    self.skip(1)
            if self.char() in ("e", "E") and (
                _is_digit(self.char(1)) or (self.char(1) in ("+", "-") and _is_digit(self.char(2)))
            ):
                self.skip(2)
                while _is_digit(self.char()):
                    self.skip(1)
        if _is_alpha(self.char()):
            raise self.error("invalid number literal")
        self.emit(TK_NUMBER, self.src[start : self.pos], line, col)

    def scan_string(self) -> None:
        line, col = self.line, self.col
        quote = self.char()
        heredoc = self.src[self.pos : self.pos + 3] == quote * 3
        delim = quote * 3 if heredoc else quote
        self.skip(len(delim))
        parts: list[tuple[str, str, int, int]] = []
        piece = ""
        while True:
            if self.pos >= len(self.src):
                raise TokenizeError("unterminated string literal", line, col)
            if self.src.startswith(delim, self.pos):
                self.skip(len(delim))
                break
            c = self.char()
            if c == "\\":
                piece += c + self.char(1)
                self.skip(2)
                continue
            if quote == '"' and c == "#" and self.char(1) == "{":
                parts.append(("str", piece, line, col))
                piece = ""
                self.skip(2)
                expr_line, expr_col = self.line, self.col
                parts.append(("expr", self.scan_interpolation(), expr_line, expr_col))
                continue
            if heredoc and c == quote:
                piece += "\\" + c
                self.skip(1)
                continue
            piece += c
            self.skip(1)
        parts.append(("str", piece, line, col))
        folded: list[tuple[str, str, int, int]] = []
        for kind, text, pline, pcol in parts:
            if kind == "str":
                text = _fold_lines(text, heredoc)
            folded.append((kind, text, pline, pcol))
        raw = ""
        for kind, text, _, _ in folded:
            if kind == "str":
                raw += text
            else:
                raw += "#{" + text + "}"
        tok = self.emit(TK_STRING, quote + raw + quote, line, col)
        if len(folded) > 1:
            tok.parts = folded

    def scan_interpolation(self) -> str:
        """Scan the body of ``#{...}`` up to the matching brace."""
        line, col = self.line, self.col
        depth = 1
        start = self.pos
        while self.pos < len(self.src):
            c = self.char()
            if c in ("'", '"'):
                quote = c
                self.skip(1)
                while self.pos < len(self.src) and self.char() != quote:
                    if self.char() == "\\":
                        self.skip(1)
                    self.skip(1)
                self.skip(1)
                continue
            if c == "{":
                depth += 1
            elif c == "}":
                depth -= 1
                if depth == 0:
                    body = self.src[start : self.pos]
                    self.skip(1)
                    return body
            self.skip(1)
        raise TokenizeError("unterminated string interpolation", line, col)

    def scan_regex(self) -> None:
        line, col = self.line, self.col
        start = self.pos
        self.skip(1)
        in_class = False
        while True:
            c = self.char()
            if c == "" or c == "\n":
                raise TokenizeError("unterminated regex literal", line, col)
            if c == "\\":
                self.skip(2)
                continue
            if c == "[":
                in_class = True
            elif c == "]":
                in_class = False
            elif c == "/" and not in_class:
                self.skip(1)
                break
            self.skip(1)
        while self.char() in ("g", "i", "m", "s", "u", "y") and self.char() != "":
            self.skip(1)
        self.emit(TK_REGEX, self.src[start : self.pos], line, col)

    def scan_js(self) -> None:
        line, col = self.line, self.col
        self.skip(1)
        code = ""
        while True:
            c = self.char()
            if c == "":
                raise TokenizeError("unterminated embedded JavaScript", line, col)
            if c == "\\" and self.char(1) == "`":
                code += "`"
                self.skip(2)
                continue
            if c == "`":
                self.skip(1)
                break
            code += c
            self.skip(1)
        self.emit(TK_JS, code, line, col)

    def scan_block_comment(self) -> None:
        line, col = self.line, self.col
        self.skip(3)
        end = self.src.find("###", self.pos)
        if end < 0:
            raise TokenizeError("unterminated block comment", line, col)
        body = self.src[self.pos : end]
        self.skip(end + 3 - self.pos)
        self.emit(TK_COMMENT, body, line, col)

    def scan_word(self) -> None:
        line, col = self.line, self.col
        start = self.pos
        while _is_alnum(self.char()):
            self.skip(1)
        word = self.src[start : self.pos]
        prev = self.last_value()
        is_property = prev in (".", "?.", "::", "?::", "@") and self.last() is not None and self.last().type == TK_OP
        is_key = self.char() == ":" and self.char(1) != ":"
        if word in KEYWORDS and not is_property and not (is_key and word not in ("this", "then", "else")):
            self.emit(word, word, line, col)
        else:
            self.emit(TK_IDENT, word, line, col)

    def scan_op(self) -> None:
        line, col = self.line, self.col
        for op in MULTI_OPS:
            if self.src.startswith(op, self.pos):
                self.skip(len(op))
                self.emit(TK_OP, op, line, col)
                return
        c = self.char()
        if c not in SINGLE_OPS:
            raise self.error("unexpected character: " + repr(c))
        self.skip(1)
        if c == ";":
            last = self.last()
            if last is not None and last.type not in (TK_TERMINATOR, TK_INDENT):
                self.structural(TK_TERMINATOR)
            return
        if c in CLOSERS:
            self.brackets.append(c)
            if c == "(":
                self.parens.append([len(self.indents), len(self.indents)])
        elif c in (")", "]", "}"):
            if not self.brackets or CLOSERS[self.brackets[-1]] != c:
                raise TokenizeError("unmatched '" + c + "'", line, col)
            self.brackets.pop()
            if c == ")":
                self.close_paren()
        self.emit(TK_OP, c, line, col)

    # ── Driver ───────────────────────────────────────────────

    def tokenize(self) -> list[Token]:
        at_line_start = True
        while self.pos < len(self.src):
            if at_line_start:
                self.line_start()
                at_line_start = False
                continue
            c = self.char()
            if c == "\n":
                self.skip(1)
                at_line_start = True
                continue
            if c in (" ", "\t"):
                self.skip(1)
                self.spaced = True
                continue
            if c == "\\" and self.char(1) == "\n":
                self.skip(2)
                self.spaced = True
                continue
            if c == "#":
                if self.src.startswith("###", self.pos) and self.src[self.pos + 3 : self.pos + 4] != "#":
                    self.scan_block_comment()
                    continue
                while self.pos < len(self.src) and self.char() != "\n":
                    self.skip(1)
                continue
            if _is_digit(c):
                self.scan_number()
                continue
            if _is_alpha(c):
                self.scan_word()
                continue
            if c in ("'", '"'):
                self.scan_string()
                continue
            if c == "`":
                self.scan_js()
                continue
            if c == "/" and self.regex_allowed():
                self.scan_regex()
                continue
            self.scan_op()
        if self.brackets:
            raise self.error("missing '" + CLOSERS[self.brackets[-1]] + "'")
        while len(self.indents) > 1:
            self.indents.pop()
            self.structural(TK_OUTDENT)
        self.tokens.append(Token(TK_EOF, "", self.line, self.col))
        return self.tokens


def tokenize(source: str) -> list[Token]:
    """Tokenize CoffeeScript source into a flat list ending with TK_EOF."""
    return Lexer(source).tokenize()
