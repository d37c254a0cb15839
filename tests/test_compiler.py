"""Tests for the compile entry point and options."""

import pytest

from coffee2es import IllegalSourceError, Options, TranslationError, compile
from coffee2es.compiler import patch
from coffee2es.frontend.ast import Block, Literal, Pos

MODULO = "var modulo = function(a, b) {\n  return (+a % (b = +b) + b) % b;\n};"


def test_default_options():
    assert compile("a = 'x'") == 'var a = "x";'


def test_single_quotes():
    assert compile('a = "it\'s"', Options(quote="single")) == "var a = 'it\\'s';"


def test_tab_width():
    assert compile("f = ->\n  g()", Options(tab_width=4)) == "var f = function() {\n    return g();\n};"


def test_invalid_options():
    with pytest.raises(ValueError):
        Options(quote="backtick")
    with pytest.raises(ValueError):
        Options(tab_width=0)


def test_injected_parser():
    def parse(source: str) -> Block:
        return Block(Pos(1, 1), [Literal(Pos(1, 1), "42")])

    assert compile("ignored", Options(parse=parse)) == "42;"


def test_patch_collapses_double_semicolons():
    assert patch("a;;\nb;;;") == "a;\nb;"
    assert patch('s = ";;" + x;') == 's = ";;" + x;'


def test_empty_source():
    assert compile("") == ""


# ── Slices ───────────────────────────────────────────────────


@pytest.mark.parametrize(
    "source,expected",
    [
        ("y = x[1..10]", "var y = x.slice(1, 11);"),
        ("y = x[1...10]", "var y = x.slice(1, 10);"),
        ("y = x[1..]", "var y = x.slice(1);"),
        ("y = x[..-1]", "var y = x.slice(0);"),
        ("y = x[a..b]", "var y = x.slice(a, +b + 1 || 9e9);"),
    ],
)
def test_slices(source: str, expected: str):
    assert compile(source) == expected


# ── Floored modulo ───────────────────────────────────────────


def test_modulo_inline_for_simple_divisor():
    assert compile("x = a %% b") == "var x = (a % b + b) % b;"


def test_modulo_helper_for_complex_divisor():
    assert compile("x = a %% f()") == MODULO + "\n\nvar x = modulo(a, f());"


def test_modulo_helper_defined_once():
    out = compile("x = a %% f() %% g()")
    assert out.count("var modulo =") == 1
    assert out.endswith("var x = modulo(modulo(a, f()), g());")


def test_modulo_helper_avoids_user_names():
    out = compile("modulo = 1\nx = a %% f()")
    assert out.startswith("var modulo1 = function(a, b) {")
    assert out.endswith("var modulo = 1;\nvar x = modulo1(a, f());")


# ── Classes ──────────────────────────────────────────────────


def test_bound_method_bound_after_super_call():
    source = "class B extends A\n  constructor: ->\n    super()\n    @x = 1\n  go: =>\n    @x"
    out = compile(source)
    assert "    super();\n    this.go = this.go.bind(this);\n    this.x = 1;" in out


def test_super_in_base_constructor_is_illegal():
    with pytest.raises(IllegalSourceError) as exc:
        compile("class A\n  constructor: ->\n    super()")
    assert exc.value.line == 3


def test_unsupported_object_key():
    with pytest.raises(TranslationError) as exc:
        compile("o = {@a: 1}")
    assert exc.value.node_type == "Value"
    assert exc.value.target == "ObjectProperty"
