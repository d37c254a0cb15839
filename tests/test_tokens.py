"""Tests for the CoffeeScript tokenizer."""

import pytest

from coffee2es.frontend.tokens import TokenizeError, tokenize


def types(source: str) -> list[str]:
    return [tok.type for tok in tokenize(source)]


def test_simple_assignment():
    toks = tokenize("a = 1")
    assert [t.type for t in toks] == ["IDENT", "OP", "NUMBER", "EOF"]
    assert [t.value for t in toks[:3]] == ["a", "=", "1"]


def test_indentation():
    assert types("if a\n  b\nc") == [
        "if",
        "IDENT",
        "INDENT",
        "IDENT",
        "OUTDENT",
        "TERMINATOR",
        "IDENT",
        "EOF",
    ]


def test_outdent_at_end_of_input():
    assert types("f = ->\n  1") == ["IDENT", "OP", "OP", "INDENT", "NUMBER", "OUTDENT", "EOF"]


def test_chained_line_continues_expression():
    assert "INDENT" not in types("a\n  .b()")


def test_keyword_after_dot_is_identifier():
    assert types("a.class") == ["IDENT", "OP", "IDENT", "EOF"]


def test_keyword_as_object_key_is_identifier():
    toks = tokenize("class: 1")
    assert toks[0].type == "IDENT"
    assert toks[0].value == "class"


def test_spaced_flag():
    assert tokenize("f (a)")[1].spaced
    assert not tokenize("f(a)")[1].spaced


def test_interpolated_string_parts():
    tok = tokenize('"a#{b}c"')[0]
    assert tok.type == "STRING"
    assert tok.value == '"a#{b}c"'
    assert [(kind, text) for kind, text, _, _ in tok.parts] == [("str", "a"), ("expr", "b"), ("str", "c")]
    assert tok.parts[1][2:] == (1, 5)


def test_plain_string_has_no_parts():
    tok = tokenize("'a#{b}'")[0]
    assert tok.value == "'a#{b}'"
    assert tok.parts == []


def test_multiline_string_is_folded():
    tok = tokenize('"one\n   two"')[0]
    assert tok.value == '"one two"'


def test_regex_and_division():
    assert tokenize("a / b")[1].type == "OP"
    assert tokenize("f /x/")[1].type == "REGEX"
    assert tokenize("f /x/")[1].value == "/x/"


def test_floor_division_is_not_a_regex():
    assert [t.value for t in tokenize("a = b // c")] == ["a", "=", "b", "//", "c", ""]
    toks = tokenize("a //= 2")
    assert toks[1].type == "OP"
    assert toks[1].value == "//="


def test_block_inside_parentheses():
    assert types("r = (for x in xs\n  x)") == [
        "IDENT",
        "OP",
        "OP",
        "for",
        "IDENT",
        "in",
        "IDENT",
        "INDENT",
        "IDENT",
        "OUTDENT",
        "OP",
        "EOF",
    ]


def test_function_body_inside_call_arguments():
    assert types("f(a, ->\n  b()\n)") == [
        "IDENT",
        "OP",
        "IDENT",
        "OP",
        "OP",
        "INDENT",
        "IDENT",
        "OP",
        "OP",
        "OUTDENT",
        "TERMINATOR",
        "OP",
        "EOF",
    ]


def test_line_break_after_comma_inside_call():
    assert "INDENT" not in types("f(a,\n    b)")


def test_embedded_javascript():
    tok = tokenize("`a && b`")[0]
    assert tok.type == "JS"
    assert tok.value == "a && b"


def test_block_comment():
    tok = tokenize("###\nnote\n###")[0]
    assert tok.type == "COMMENT"
    assert tok.value == "\nnote\n"


def test_line_comment_is_skipped():
    assert types("a # note") == ["IDENT", "EOF"]


def test_unterminated_string():
    with pytest.raises(TokenizeError) as exc:
        tokenize('a = "abc')
    assert exc.value.msg == "unterminated string literal"
    assert (exc.value.line, exc.value.col) == (1, 5)
    assert str(exc.value) == "unterminated string literal at line 1 col 5"


def test_inconsistent_indentation():
    with pytest.raises(TokenizeError, match="inconsistent indentation"):
        tokenize("if a\n    b\n  c")


def test_unmatched_bracket():
    with pytest.raises(TokenizeError, match="unmatched"):
        tokenize("a)")


def test_missing_bracket():
    with pytest.raises(TokenizeError, match="missing"):
        tokenize("f(a")
