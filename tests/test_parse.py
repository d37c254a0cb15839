"""Tests for the CoffeeScript parser."""

import pytest

from coffee2es.frontend import ParseError, parse
from coffee2es.frontend.ast import (
    Access,
    Arr,
    Assign,
    Bool,
    Call,
    Class,
    Code,
    Existence,
    For,
    If,
    In,
    Literal,
    Op,
    Param,
    Parens,
    Range,
    Splat,
    Value,
)


def only(source: str):
    block = parse(source)
    assert len(block.expressions) == 1
    return block.expressions[0]


def test_assignment():
    node = only("a = 1")
    assert isinstance(node, Assign)
    assert node.variable == Literal(node.variable.pos, "a")
    assert isinstance(node.value, Literal) and node.value.value == "1"
    assert node.context is None


def test_assignment_is_right_associative():
    node = only("a = b = 1")
    assert isinstance(node.value, Assign)
    assert node.value.variable.value == "b"


def test_compound_assignment():
    assert only("a or= b").context == "||="
    assert only("a ?= b").context == "?="


def test_method_call():
    node = only("a.b(c)")
    assert isinstance(node, Call)
    assert isinstance(node.variable, Value)
    assert node.variable.base.value == "a"
    assert isinstance(node.variable.properties[0], Access)
    assert node.variable.properties[0].name.value == "b"
    assert [arg.value for arg in node.args] == ["c"]


def test_implicit_call():
    node = only("f a, b")
    assert isinstance(node, Call)
    assert [arg.value for arg in node.args] == ["a", "b"]


def test_this_property():
    node = only("@x")
    assert isinstance(node, Value)
    assert node.this
    assert node.base.value == "this"
    assert node.properties[0].name.value == "x"


def test_interpolation_becomes_concatenation():
    node = only('"a#{b}"')
    assert isinstance(node, Op) and node.operator == "+"
    assert node.first.value == '"a"'
    assert node.second.value == "b"


def test_operator_aliases():
    assert only("a is b").operator == "==="
    assert only("a isnt b").operator == "!=="
    assert only("a and b").operator == "&&"
    assert isinstance(only("yes"), Bool)


def test_precedence():
    node = only("a + b * c")
    assert node.operator == "+"
    assert node.second.operator == "*"


def test_negated_in():
    node = only("a not in b")
    assert isinstance(node, In)
    assert node.negated


def test_negated_instanceof():
    node = only("b not instanceof C")
    assert node.operator == "!"
    inner = node.first.body.expressions[0]
    assert inner.operator == "instanceof"
    assert inner.first.value == "b"


def test_exclusive_range():
    node = only("[a...b]")
    assert isinstance(node, Range)
    assert node.exclusive
    assert node.from_.value == "a"
    assert node.to.value == "b"


def test_array_splat_is_not_a_range():
    node = only("[a..., b]")
    assert isinstance(node, Arr)
    assert isinstance(node.objects[0], Splat)
    assert node.objects[0].name.value == "a"
    assert node.objects[1].value == "b"


def test_indented_block_inside_parentheses():
    node = only("r = (for x in xs\n  x * 2)")
    assert isinstance(node.value, Parens)
    loop = node.value.body.expressions[0]
    assert isinstance(loop, For)
    assert loop.source.value == "xs"
    assert loop.body.expressions[0].operator == "*"


def test_existence():
    assert isinstance(only("a?"), Existence)


def test_postfix_if():
    node = only("x = y if z")
    assert isinstance(node, If)
    assert node.postfix
    assert node.condition.value == "z"
    assert isinstance(node.body.expressions[0], Assign)


def test_function_params():
    node = only("(a, b = 1, rest...) => a")
    assert isinstance(node, Code)
    assert node.bound
    assert [p.name.value for p in node.params] == ["a", "b", "rest"]
    assert all(isinstance(p, Param) for p in node.params)
    assert node.params[1].value.value == "1"
    assert node.params[2].splat


def test_generator_detected():
    assert only("-> yield 1").is_generator
    assert not only("-> -> yield 1").is_generator


def test_for_loop():
    node = only("for x, i in xs by 2 when x\n  f x")
    assert isinstance(node, For)
    assert node.name.value == "x"
    assert node.index.value == "i"
    assert not node.object
    assert node.step.value == "2"
    assert node.guard.value == "x"


def test_class():
    node = only("class A extends B\n  go: -> 1")
    assert isinstance(node, Class)
    assert node.variable.base.value == "A"
    assert node.parent.value == "B"
    assert len(node.body.expressions) == 1


def test_bare_super():
    node = only("super")
    assert isinstance(node, Call)
    assert node.is_super and node.bare


def test_new_without_arguments():
    node = only("new Foo")
    assert node.is_new
    assert node.args == []


def test_unexpected_token():
    with pytest.raises(ParseError) as exc:
        parse("f(1 2)")
    assert exc.value.msg == "unexpected '2'"
    assert exc.value.line == 1


def test_empty_parentheses():
    with pytest.raises(ParseError, match="empty parentheses"):
        parse("a = ()")
