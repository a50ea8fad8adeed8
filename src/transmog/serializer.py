"""Cascade AST serialization.

Maps lowered nodes onto the nested dict/list structure the remote engine
parses, and encodes it as JSON. The key names are the wire contract.
"""

from __future__ import annotations

import json
from typing import Any

from transmog.nodes import (
	Assign,
	Call,
	Else,
	For,
	FunctionDef,
	If,
	Literal,
	Node,
	Operation,
	Range,
	Return,
	Sequence,
	Variable,
)


def serialize(node: Node) -> dict[str, Any]:
	"""Serialize a node in statement position."""
	if isinstance(node, FunctionDef):
		body = [serialize(stmt) for stmt in node.body]
		free_variables = (
			list(node.free_variables)
			if isinstance(node.free_variables, tuple)
			else node.free_variables
		)
		return {"alias": node.name, "free_variables": free_variables, "body": body}

	if isinstance(node, Operation):
		operands = [_operand(o) for o in node.operands]
		root: dict[str, Any] = {"operator": node.op, "fixity": node.fixity.value}
		root["operands"] = operands
		return {"astop": root}

	if isinstance(node, Call):
		operands = [_operand(o) for o in node.operands]
		call: dict[str, Any] = {"alias": node.alias, "operands": operands}
		if node.definition is not None:
			call["definition"] = serialize(node.definition)
		return {"call": call}

	if isinstance(node, Variable):
		return {"symbols": node.symbol}

	if isinstance(node, Literal):
		return {"type": node.kind, "value": node.value}

	if isinstance(node, Assign):
		return {"assign": {"symbol": node.symbol, "value": _operand(node.value)}}

	if isinstance(node, If):
		result: dict[str, Any] = {
			"condition": _operand(node.condition),
			"body": [serialize(stmt) for stmt in node.body],
		}
		if node.orelse is not None:
			result["else"] = serialize(node.orelse)["else"]
		return {"if": result}

	if isinstance(node, Else):
		return {"else": {"body": [serialize(stmt) for stmt in node.body]}}

	if isinstance(node, For):
		return {
			"for": {
				"variable": node.variable,
				"iterator": serialize(node.iterator),
				"body": [serialize(stmt) for stmt in node.body],
			}
		}

	if isinstance(node, Return):
		value = None if node.value is None else _operand(node.value)
		return {"return": value}

	if isinstance(node, Range):
		return {"range": {"start": node.start, "stop": node.stop, "step": node.step}}

	if isinstance(node, Sequence):
		return {"sequence": [serialize(v) for v in node.values]}

	raise TypeError(f"Cannot serialize {type(node).__name__}")


def _operand(node: Node) -> Any:
	"""Serialize a node in operand position.

	A bare symbol has no children to lower, so its lookup string is emitted
	directly instead of a nested structure.
	"""
	if isinstance(node, Variable):
		return node.symbol
	return serialize(node)


def to_json(node: Node, indent: int | None = None) -> str:
	"""Encode a node as the JSON payload sent to the remote engine."""
	return json.dumps(serialize(node), indent=indent, allow_nan=False)
