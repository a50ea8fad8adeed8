"""
Tests for Cascade AST serialization.

The key names checked here are what the remote engine parses.
"""

import json

import pytest
from transmog import (
	Assign,
	Call,
	Else,
	Fixity,
	For,
	FunctionDef,
	If,
	Literal,
	Operation,
	Range,
	Return,
	Sequence,
	Variable,
	serialize,
	to_json,
	transmogrify,
)

x, y = Variable("x"), Variable("y")


def add(left, right) -> Operation:
	return Operation("+", Fixity.BINARY, (left, right))


class TestFunctionDef:
	"""Top-level shape."""

	def test_lambda_addition(self):
		f = lambda x, y: x + y  # noqa: E731

		assert serialize(transmogrify(f, name="f")) == {
			"alias": "f",
			"free_variables": ["x", "y"],
			"body": [
				{
					"return": {
						"astop": {
							"operator": "+",
							"fixity": "binary",
							"operands": ["$x", "$y"],
						}
					}
				}
			],
		}

	def test_exact_keys(self):
		out = serialize(FunctionDef("f", ("x",), (Return(x),)))
		assert set(out) == {"alias", "free_variables", "body"}

	def test_no_arguments(self):
		out = serialize(FunctionDef("f", "none", (Return(Literal(1)),)))
		assert out["free_variables"] == "none"


class TestOperands:
	"""Symbols are flattened in operand position only."""

	def test_variable_operand_is_string(self):
		assert serialize(add(x, Literal(1))) == {
			"astop": {
				"operator": "+",
				"fixity": "binary",
				"operands": ["$x", {"type": "numeric", "value": 1}],
			}
		}

	def test_variable_statement_is_wrapped(self):
		assert serialize(x) == {"symbols": "$x"}

	def test_string_literal_is_not_a_symbol(self):
		assert serialize(Literal("x")) == {"type": "string", "value": "x"}
		assert serialize(Literal(False)) == {"type": "boolean", "value": False}

	def test_nested_operation(self):
		out = serialize(Operation("abs", Fixity.UNARY, (add(x, y),)))
		inner = out["astop"]["operands"][0]
		assert inner["astop"]["operands"] == ["$x", "$y"]


class TestStatements:
	"""Statement node shapes."""

	def test_assign(self):
		assert serialize(Assign("y", x)) == {"assign": {"symbol": "y", "value": "$x"}}

	def test_if_else(self):
		node = If(x, (Return(Literal(1)),), Else((Return(Literal(0)),)))
		assert serialize(node) == {
			"if": {
				"condition": "$x",
				"body": [{"return": {"type": "numeric", "value": 1}}],
				"else": {"body": [{"return": {"type": "numeric", "value": 0}}]},
			}
		}

	def test_if_without_else_has_no_else_key(self):
		assert "else" not in serialize(If(x, ()))["if"]

	def test_standalone_else(self):
		assert serialize(Else(())) == {"else": {"body": []}}

	def test_for_range(self):
		node = For("i", Range(0, 3), (Assign("x", add(x, Variable("i"))),))
		out = serialize(node)["for"]
		assert out["variable"] == "i"
		assert out["iterator"] == {"range": {"start": 0, "stop": 3, "step": 1}}
		assert out["body"][0]["assign"]["value"]["astop"]["operands"] == ["$x", "$i"]

	def test_for_sequence(self):
		out = serialize(For("w", Sequence((Literal(1), Literal(2))), ()))
		assert out["for"]["iterator"] == {
			"sequence": [
				{"type": "numeric", "value": 1},
				{"type": "numeric", "value": 2},
			]
		}

	def test_bare_return(self):
		assert serialize(Return()) == {"return": None}

	def test_call_with_and_without_definition(self):
		definition = FunctionDef("g", ("y",), (Return(y),))
		first = serialize(Call("g", (x,), definition))
		again = serialize(Call("g", (x,)))
		assert first["call"]["definition"]["alias"] == "g"
		assert first["call"]["operands"] == ["$x"]
		assert again == {"call": {"alias": "g", "operands": ["$x"]}}

	def test_unknown_node(self):
		with pytest.raises(TypeError):
			serialize(object())  # pyright: ignore[reportArgumentType]


class TestToJson:
	"""JSON encoding."""

	def test_matches_serialize(self):
		def f(x):
			if x > 0:
				return x
			return -x

		program = transmogrify(f)
		assert json.loads(to_json(program)) == serialize(program)

	def test_indent(self):
		text = to_json(FunctionDef("f", "none", ()), indent=2)
		assert text.startswith("{\n  ")
