"""Tests for implicit return insertion."""

from coffee2es.estree import (
    BlockStatement,
    ClassBody,
    ClassDeclaration,
    CommentStatement,
    ExpressionStatement,
    Identifier,
    IfStatement,
    ReturnStatement,
    SwitchCase,
    SwitchStatement,
    WhileStatement,
    expr_stmt,
)
from coffee2es.mapper.returns import insert_returns


def test_last_expression_returns():
    body = [expr_stmt(Identifier("a")), expr_stmt(Identifier("b"))]
    insert_returns(body)
    assert isinstance(body[0], ExpressionStatement)
    assert body[1] == ReturnStatement(Identifier("b"))


def test_trailing_comment_is_skipped():
    body = [expr_stmt(Identifier("a")), CommentStatement("note")]
    insert_returns(body)
    assert body[0] == ReturnStatement(Identifier("a"))
    assert isinstance(body[1], CommentStatement)


def test_if_branches_return():
    inner = IfStatement(Identifier("c"), BlockStatement([expr_stmt(Identifier("b"))]))
    stmt = IfStatement(Identifier("t"), BlockStatement([expr_stmt(Identifier("a"))]), inner)
    insert_returns([stmt])
    assert stmt.consequent.body == [ReturnStatement(Identifier("a"))]
    assert inner.consequent.body == [ReturnStatement(Identifier("b"))]


def test_switch_cases_return():
    stmt = SwitchStatement(
        Identifier("x"),
        [
            SwitchCase(Identifier("a"), []),
            SwitchCase(Identifier("b"), [expr_stmt(Identifier("one"))]),
            SwitchCase(None, [expr_stmt(Identifier("two"))]),
        ],
    )
    insert_returns([stmt])
    assert stmt.cases[0].consequent == []
    assert stmt.cases[1].consequent == [ReturnStatement(Identifier("one"))]
    assert stmt.cases[2].consequent == [ReturnStatement(Identifier("two"))]


def test_loop_is_left_alone():
    loop = WhileStatement(Identifier("t"), BlockStatement([expr_stmt(Identifier("a"))]))
    body = [loop]
    insert_returns(body)
    assert body == [loop]
    assert isinstance(loop.body.body[0], ExpressionStatement)


def test_class_declaration_returns_the_class():
    cls = ClassDeclaration(Identifier("A"), None, ClassBody([]))
    body = [cls]
    insert_returns(body)
    assert body == [cls, ReturnStatement(Identifier("A"))]


def test_empty_body():
    body = []
    insert_returns(body)
    assert body == []
