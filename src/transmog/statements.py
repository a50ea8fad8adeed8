"""Statement processor: lowers expressions into Cascade AST nodes.

Handles everything that is not control flow or assignment. In order:

1. Operator applications (``x + y``, ``not x``, ``abs(x)``, ``max(a, b)``)
2. Calls to user-defined functions and nested closures
3. Bare symbols and constants

Anything else is an error naming the offending statement.
"""

from __future__ import annotations

import ast
import inspect
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from transmog.context import Frame, TransmogrifyContext
from transmog.errors import UnknownOperator, UnsupportedConstruct
from transmog.nodes import Call, Literal, Node, Operation, Variable
from transmog.operators import (
	BINOP_TOKENS,
	BOOLOP_TOKENS,
	CMPOP_TOKENS,
	UNOP_TOKENS,
	Fixity,
	classify,
	is_op,
	token_for_name,
)
from transmog.scope import is_user_defined

logger = logging.getLogger(__name__)

RIGHT_ASSIGN_MESSAGE = (
	"Please use `=` for assignment. "
	+ "Assignment expressions (`:=`) are not supported."
)

_MISSING = object()


def is_primitive(value: Any) -> bool:
	return isinstance(value, (bool, int, float, str))


class StatementProcessor:
	"""Lower a single non-control-flow expression into a node.

	Names are resolved against the frame of the function being lowered first,
	then against the namespace the function closes over.
	"""

	ctx: TransmogrifyContext
	namespace: Mapping[str, Any]
	frame: Frame

	def __init__(
		self,
		ctx: TransmogrifyContext,
		namespace: Mapping[str, Any],
		frame: Frame,
	) -> None:
		self.ctx = ctx
		self.namespace = namespace
		self.frame = frame

	# --- Entrypoint ---------------------------------------------------------

	def lower(self, node: ast.expr) -> Node:
		"""Lower an expression, guarding against runaway nesting."""
		with self.ctx.descend():
			return self._lower(node)

	def _lower(self, node: ast.expr) -> Node:
		if isinstance(node, ast.NamedExpr):
			raise UnsupportedConstruct(RIGHT_ASSIGN_MESSAGE)

		# Operator applications
		if isinstance(node, ast.BinOp):
			return self._lower_binop(node)
		if isinstance(node, ast.UnaryOp):
			return self._lower_unaryop(node)
		if isinstance(node, ast.BoolOp):
			return self._lower_boolop(node)
		if isinstance(node, ast.Compare):
			return self._lower_compare(node)

		# Operator call, user-defined function or closure
		if isinstance(node, ast.Call):
			return self._lower_call(node)

		# Symbols and constants
		if isinstance(node, ast.Name):
			return self._lower_name(node)
		if isinstance(node, ast.Constant):
			return self._lower_constant(node)

		if isinstance(node, ast.Lambda):
			raise UnsupportedConstruct(
				"Closures must be bound to a name or invoked directly: "
				+ ast.unparse(node)
			)

		raise UnknownOperator(ast.unparse(node))

	# --- Operators ----------------------------------------------------------

	def operation(self, token: str, operands: Sequence[Node]) -> Operation:
		"""Build an Operation, picking the fixity from the operand count."""
		fixity = classify(token, len(operands))
		if fixity is Fixity.UNKNOWN:
			raise UnknownOperator(token)
		return Operation(token, fixity, tuple(operands))

	def _lower_binop(self, node: ast.BinOp) -> Node:
		token = BINOP_TOKENS.get(type(node.op))
		if token is None:
			raise UnknownOperator(ast.unparse(node))
		return self.operation(token, [self.lower(node.left), self.lower(node.right)])

	def _lower_unaryop(self, node: ast.UnaryOp) -> Node:
		if isinstance(node.op, ast.UAdd):
			return self.lower(node.operand)
		if isinstance(node.op, ast.USub):
			operand = node.operand
			if (
				isinstance(operand, ast.Constant)
				and isinstance(operand.value, (int, float))
				and not isinstance(operand.value, bool)
			):
				return Literal(-operand.value)
			return self.operation("-", [Literal(0), self.lower(operand)])

		token = UNOP_TOKENS.get(type(node.op))
		if token is None:
			raise UnknownOperator(ast.unparse(node))
		return self.operation(token, [self.lower(node.operand)])

	def _lower_boolop(self, node: ast.BoolOp) -> Node:
		token = BOOLOP_TOKENS[type(node.op)]
		values = [self.lower(v) for v in node.values]
		# a and b and c -> (a & b) & c
		result = values[0]
		for v in values[1:]:
			result = self.operation(token, [result, v])
		return result

	def _lower_compare(self, node: ast.Compare) -> Node:
		operands: list[ast.expr] = [node.left, *node.comparators]
		parts: list[Node] = []
		for i, op in enumerate(node.ops):
			token = CMPOP_TOKENS.get(type(op))
			if token is None:
				raise UnknownOperator(ast.unparse(node))
			# Each comparison owns its operands; a < b < c lowers b twice
			left = self.lower(operands[i])
			right = self.lower(operands[i + 1])
			parts.append(self.operation(token, [left, right]))

		result = parts[0]
		for part in parts[1:]:
			result = self.operation("&", [result, part])
		return result

	# --- Calls --------------------------------------------------------------

	def _lower_call(self, node: ast.Call) -> Node:
		if node.keywords or any(isinstance(a, ast.Starred) for a in node.args):
			raise UnsupportedConstruct(
				"Keyword and starred arguments are not supported: " + ast.unparse(node)
			)

		token = self._call_token(node.func)
		if token is not None and is_op(token):
			return self.operation(token, [self.lower(a) for a in node.args])

		if isinstance(node.func, ast.Lambda):
			return self._call_lambda(node.func, node)

		if isinstance(node.func, ast.Name):
			owner = self.frame.owner_of_closure(node.func.id)
			if owner is not None:
				return self._call_closure(node.func.id, owner, node)

		if isinstance(node.func, (ast.Name, ast.Attribute)):
			callee = self._resolve_callee(node.func)
			if callee is not _MISSING and is_user_defined(callee):
				call_name = (
					node.func.id if isinstance(node.func, ast.Name) else node.func.attr
				)
				return self._call_udf(callee, call_name, node)

		raise UnknownOperator(ast.unparse(node))

	def _call_token(self, func: ast.expr) -> str | None:
		"""Operator token named by a callee, if it can name one.

		``abs(x)`` names ``abs``; ``math.ceil(x)`` names ``ceiling`` when
		``math`` is a module. Locally bound names never name operators.
		"""
		if isinstance(func, ast.Name):
			if self.frame.is_bound(func.id) or self.frame.owner_of_closure(func.id):
				return None
			return token_for_name(func.id)
		if isinstance(func, ast.Attribute) and isinstance(func.value, ast.Name):
			base = func.value.id
			if self.frame.is_bound(base):
				return None
			if inspect.ismodule(self.resolve(base)):
				return token_for_name(func.attr)
		return None

	def _resolve_callee(self, func: ast.Name | ast.Attribute) -> Any:
		if isinstance(func, ast.Name):
			if self.frame.is_bound(func.id):
				return _MISSING
			return self.resolve(func.id)
		if isinstance(func.value, ast.Name):
			if self.frame.is_bound(func.value.id):
				return _MISSING
			base = self.resolve(func.value.id)
			if inspect.ismodule(base):
				return getattr(base, func.attr, _MISSING)
		return _MISSING

	def _lower_args(self, node: ast.Call) -> tuple[Node, ...]:
		return tuple(self.lower(a) for a in node.args)

	def _call_udf(self, callee: Any, call_name: str, node: ast.Call) -> Node:
		from transmog.function import UDF, transmogrify_udf

		if isinstance(callee, UDF):
			fn, name = callee.fn, callee.name
		else:
			fn = callee
			name = fn.__name__ if fn.__name__ != "<lambda>" else call_name
		operands = self._lower_args(node)

		alias = self.ctx.alias_of(fn)
		if alias is not None:
			logger.debug("Referencing already-lowered function '%s'", alias)
			return Call(alias, operands)

		with self.ctx.descend():
			definition = transmogrify_udf(fn, name, self.ctx)
		return Call(definition.name, operands, definition)

	def _call_closure(self, name: str, owner: Frame, node: ast.Call) -> Node:
		from transmog.function import lower_closure

		closure = owner.closures[name]
		operands = self._lower_args(node)
		# Already embedded, or a recursive call from inside its own body
		if closure.definition is not None or closure.lowering:
			return Call(name, operands)

		closure.lowering = True
		try:
			definition = lower_closure(
				name, closure.node, self.ctx, self.namespace, owner
			)
		finally:
			closure.lowering = False
		closure.definition = definition
		return Call(name, operands, definition)

	def _call_lambda(self, func: ast.Lambda, node: ast.Call) -> Node:
		from transmog.function import lower_closure

		alias = self.ctx.fresh_lambda_name()
		definition = lower_closure(alias, func, self.ctx, self.namespace, self.frame)
		return Call(alias, self._lower_args(node), definition)

	# --- Symbols ------------------------------------------------------------

	def resolve(self, name: str) -> Any:
		"""Value of a name in the closed-over namespace, or a missing marker."""
		return self.namespace.get(name, _MISSING)

	def _lower_name(self, node: ast.Name) -> Node:
		name = node.id
		if self.frame.owner_of_closure(name) is not None:
			raise UnsupportedConstruct(
				f"Closure '{name}' can only be called, not referenced"
			)
		if self.frame.is_bound(name):
			return Variable(name)
		value = self.resolve(name)
		if is_primitive(value):
			return Literal(value)
		return Variable(name)

	def _lower_constant(self, node: ast.Constant) -> Node:
		if is_primitive(node.value):
			return Literal(node.value)
		raise UnsupportedConstruct(f"Unsupported constant: {node.value!r}")
