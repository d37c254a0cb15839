"""Tests for name scopes."""

from coffee2es.mapper.scope import Scope


def test_free_variable_counts_up():
    scope = Scope()
    assert scope.free_variable("ref") == "ref"
    assert scope.free_variable("ref") == "ref1"
    assert scope.free_variable("ref") == "ref2"
    assert scope.temporaries == ["ref", "ref1", "ref2"]


def test_single_is_not_a_temporary():
    scope = Scope()
    assert scope.free_variable("results", single=True) == "results"
    assert scope.temporaries == []
    assert scope.check("results")


def test_referenced_names_are_skipped():
    scope = Scope(referenced={"i", "i1"})
    assert scope.free_variable("i") == "i2"


def test_child_sees_parent():
    root = Scope()
    root.declare("a")
    child = root.child()
    child.declare("b")
    assert child.check("a")
    assert child.check("b")
    assert not root.check("b")
    assert child.root() is root


def test_child_temporaries_avoid_parent_names():
    root = Scope()
    root.free_variable("ref")
    assert root.child().free_variable("ref") == "ref1"


def test_helper_registered_once_at_root():
    root = Scope(referenced={"modulo"})
    child = root.child().child()
    assert child.helper("modulo") == "modulo1"
    assert root.helper("modulo") == "modulo1"
    assert root.helpers == {"modulo": "modulo1"}
    assert child.helpers == {}
