"""
Tests for Variable and Declaration.

These objects are immutable and must keep variables in the order given.
"""

import dataclasses

import pytest
from epistub.model import Declaration, Variable
from epistub.type_lattice import Custom, Float, Integer, Primitive, Vector


def _var(name, kind=None):
    return Variable(name=name, kind=kind or Primitive(Integer()))


class TestVariable:

    def test_creation(self):
        var = Variable(name="data", kind=Vector(Float(), 4))
        assert var.name == "data"
        assert var.kind.length == 4

    def test_is_immutable(self):
        var = _var("x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            var.name = "y"

    @pytest.mark.parametrize("name", ["", "my_var", "a-b", "x y"])
    def test_rejects_non_alphanumeric_names(self, name):
        with pytest.raises(ValueError):
            _var(name)

    def test_equality_by_value(self):
        assert _var("x") == _var("x")
        assert _var("x") != Variable("x", Primitive(Float()))


class TestDeclaration:

    def test_defaults_are_empty(self):
        decl = Declaration(name="noop")
        assert decl.inputs == ()
        assert decl.outputs == ()

    def test_lists_are_frozen_to_tuples(self):
        decl = Declaration(name="f", inputs=[_var("a"), _var("b")], outputs=[_var("c")])
        assert isinstance(decl.inputs, tuple)
        assert isinstance(decl.outputs, tuple)

    def test_order_preserved(self):
        names = ["z", "a", "m"]
        decl = Declaration(name="f", inputs=[_var(n) for n in names])
        assert [v.name for v in decl.inputs] == names

    def test_is_immutable(self):
        decl = Declaration(name="f")
        with pytest.raises(dataclasses.FrozenInstanceError):
            decl.name = "g"

    def test_inputs_and_outputs_kept_apart(self):
        decl = Declaration(
            name="steer",
            inputs=[Variable("heading", Primitive(Custom("Angle")))],
            outputs=[_var("cmd")],
        )
        assert decl.inputs[0].kind == Primitive(Custom("Angle"))
        assert [v.name for v in decl.outputs] == ["cmd"]

    @pytest.mark.parametrize("name", ["", "a b", "my_step", "f-1"])
    def test_rejects_non_alphanumeric_names(self, name):
        """Declaration names end up in C symbols, so they follow the variable rule."""
        with pytest.raises(ValueError, match="Invalid declaration name"):
            Declaration(name=name)
