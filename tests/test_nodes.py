"""
Tests for Cascade AST node construction.
"""

import dataclasses

import pytest
from transmog import (
	ArityMismatch,
	Fixity,
	FunctionDef,
	Literal,
	Operation,
	Return,
	UnsupportedConstruct,
	Variable,
)


class TestOperationArity:
	"""Operations check their operand count against their fixity."""

	def test_binary_needs_two(self):
		with pytest.raises(ArityMismatch, match="'\\+' is binary but was given 1"):
			Operation("+", Fixity.BINARY, (Literal(1),))

	def test_unary_needs_one(self):
		with pytest.raises(ArityMismatch):
			Operation("abs", Fixity.UNARY, (Literal(1), Literal(2)))

	def test_variadic_needs_at_least_one(self):
		with pytest.raises(ArityMismatch):
			Operation("max", Fixity.VARIADIC, ())
		op = Operation("max", Fixity.VARIADIC, (Literal(1), Literal(2), Literal(3)))
		assert len(op.operands) == 3

	def test_unknown_is_never_valid(self):
		with pytest.raises(ArityMismatch):
			Operation("print", Fixity.UNKNOWN, (Literal(1),))


class TestLeaves:
	"""Literals and variables."""

	def test_literal_kinds(self):
		assert Literal(True).kind == "boolean"
		assert Literal(3).kind == "numeric"
		assert Literal(1.5).kind == "numeric"
		assert Literal("x").kind == "string"

	@pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
	def test_non_finite_literal(self, value: float):
		with pytest.raises(UnsupportedConstruct):
			Literal(value)

	def test_variable_symbol(self):
		assert Variable("x").symbol == "$x"

	def test_nodes_are_immutable(self):
		fn = FunctionDef("f", ("x",), (Return(Variable("x")),))
		with pytest.raises(dataclasses.FrozenInstanceError):
			fn.name = "g"  # pyright: ignore[reportAttributeAccessIssue]
