"""Tests for the post-mapping passes."""

from coffee2es.backend.printer import print_program
from coffee2es.estree import (
    ArrayPattern,
    AssignmentPattern,
    BlockStatement,
    BreakStatement,
    CallExpression,
    ClassBody,
    ClassDeclaration,
    FunctionExpression,
    Identifier,
    MemberExpression,
    MethodDefinition,
    NumericLiteral,
    ObjectPattern,
    Program,
    Property,
    RestElement,
    ReturnStatement,
    SpreadElement,
    Super,
    SwitchCase,
    SwitchStatement,
    ThisExpression,
    assign,
    call,
    expr_stmt,
    member,
    var,
)
from coffee2es.middleend import run_passes
from coffee2es.middleend.declarations import insert_declarations, pattern_names
from coffee2es.middleend.supercalls import insert_super_calls
from coffee2es.middleend.switches import insert_breaks


def text(program: Program) -> str:
    return print_program(program, 2, '"')


def a(name: str) -> Identifier:
    return Identifier(name)


# ── Declarations ─────────────────────────────────────────────


def test_pattern_names():
    target = ArrayPattern([a("x"), RestElement(a("rest"))])
    assert pattern_names(target) == (["x", "rest"], False)
    target = ObjectPattern([Property(a("k"), AssignmentPattern(a("v"), NumericLiteral("1")))])
    assert pattern_names(target) == (["v"], False)
    assert pattern_names(member(ThisExpression(), "x")) == ([], True)


def test_first_assignment_declares():
    program = Program([expr_stmt(assign(a("x"), NumericLiteral("1"))), expr_stmt(assign(a("x"), NumericLiteral("2")))])
    insert_declarations(program)
    assert text(program) == "var x = 1;\nx = 2;"


def test_existing_var_counts():
    program = Program([var(a("x")), expr_stmt(assign(a("x"), NumericLiteral("1")))])
    insert_declarations(program)
    assert text(program) == "var x;\nx = 1;"


def test_nested_assignments_hoist_in_order():
    inner = assign(a("x"), assign(a("y"), NumericLiteral("1")))
    program = Program([expr_stmt(call(a("f"), [inner]))])
    insert_declarations(program)
    assert text(program) == "var x;\nvar y;\nf(x = y = 1);"


def test_function_gets_its_own_frame():
    fn = FunctionExpression([a("p")], BlockStatement([expr_stmt(assign(a("p"), a("q"))), expr_stmt(assign(a("r"), a("p")))]))
    program = Program([expr_stmt(assign(a("f"), fn))])
    insert_declarations(program)
    assert text(program) == "var f = function(p) {\n  p = q;\n  var r = p;\n};"


def test_outer_variable_is_reused():
    fn = FunctionExpression([], BlockStatement([ReturnStatement(assign(a("x"), NumericLiteral("2")))]))
    program = Program([expr_stmt(assign(a("x"), NumericLiteral("1"))), expr_stmt(assign(a("f"), fn))])
    insert_declarations(program)
    assert "return x = 2;" in text(program)
    assert text(program).count("var x") == 1


def test_member_target_is_not_declared():
    program = Program([expr_stmt(assign(MemberExpression(a("o"), a("k")), NumericLiteral("1")))])
    insert_declarations(program)
    assert text(program) == "o.k = 1;"


# ── Super calls ──────────────────────────────────────────────


def constructor(body: list) -> MethodDefinition:
    return MethodDefinition(a("constructor"), FunctionExpression([], BlockStatement(body)), "constructor")


def test_super_call_added_to_subclass_constructor():
    ctor = constructor([expr_stmt(assign(member(ThisExpression(), "x"), NumericLiteral("1")))])
    program = Program([ClassDeclaration(a("B"), a("A"), ClassBody([ctor]))])
    insert_super_calls(program)
    first = ctor.value.body.body[0]
    assert first.expression == CallExpression(Super(), [SpreadElement(a("arguments"))])


def test_existing_super_call_is_kept():
    ctor = constructor([expr_stmt(CallExpression(Super(), [a("x")]))])
    program = Program([ClassDeclaration(a("B"), a("A"), ClassBody([ctor]))])
    insert_super_calls(program)
    assert len(ctor.value.body.body) == 1


def test_super_call_in_nested_function_does_not_count():
    nested = FunctionExpression([], BlockStatement([expr_stmt(CallExpression(Super(), []))]))
    ctor = constructor([expr_stmt(nested)])
    program = Program([ClassDeclaration(a("B"), a("A"), ClassBody([ctor]))])
    insert_super_calls(program)
    assert len(ctor.value.body.body) == 2


def test_base_class_is_left_alone():
    ctor = constructor([])
    program = Program([ClassDeclaration(a("A"), None, ClassBody([ctor]))])
    insert_super_calls(program)
    assert ctor.value.body.body == []


# ── Switch breaks ────────────────────────────────────────────


def test_breaks_between_cases():
    stmt = SwitchStatement(
        a("x"),
        [
            SwitchCase(a("a"), []),
            SwitchCase(a("b"), [expr_stmt(call(a("one")))]),
            SwitchCase(a("c"), [ReturnStatement(a("two"))]),
            SwitchCase(None, [expr_stmt(call(a("three")))]),
        ],
    )
    insert_breaks(Program([stmt]))
    assert stmt.cases[0].consequent == []
    assert isinstance(stmt.cases[1].consequent[-1], BreakStatement)
    assert len(stmt.cases[2].consequent) == 1
    assert len(stmt.cases[3].consequent) == 1


def test_run_passes_runs_all():
    stmt = SwitchStatement(a("x"), [SwitchCase(a("a"), [expr_stmt(assign(a("y"), a("a")))]), SwitchCase(None, [])])
    program = Program([stmt])
    run_passes(program)
    assert text(program) == "switch (x) {\ncase a:\n  var y = a;\n  break;\ndefault:\n}"
