"""Statement switchboard.

Takes exactly one statement of a function body at a time and routes it:

- control flow: ``if``/``else``, ``for``, ``return``; ``while`` is rejected
- assignment: ``x = ...``, ``x: T = ...``, ``x += ...``
- nested closures: ``def inner(...)``, ``inner = lambda ...``
- everything else is an expression handed to the statement processor
"""

from __future__ import annotations

import ast
import logging
from collections.abc import Sequence as SequenceT

from transmog.errors import UnknownOperator, UnsupportedConstruct
from transmog.nodes import (
	Assign,
	Else,
	For,
	If,
	Literal,
	Node,
	Range,
	Return,
	Sequence,
	Variable,
)
from transmog.operators import BINOP_TOKENS
from transmog.statements import RIGHT_ASSIGN_MESSAGE, StatementProcessor, is_primitive

logger = logging.getLogger(__name__)

MULTI_ASSIGN_MESSAGE = (
	"Please use a single `name = value` for assignment. "
	+ "Chained and unpacking assignments are not supported."
)


class Switchboard(StatementProcessor):
	"""Dispatch statements to control-flow handlers or the statement processor."""

	def dispatch(self, stmt: ast.stmt) -> Node | None:
		"""Lower one statement. Returns None for statements that emit nothing."""
		with self.ctx.descend():
			return self._dispatch(stmt)

	def lower_block(self, stmts: SequenceT[ast.stmt]) -> tuple[Node, ...]:
		lowered: list[Node] = []
		for stmt in stmts:
			node = self.dispatch(stmt)
			if node is not None:
				lowered.append(node)
		return tuple(lowered)

	def _dispatch(self, stmt: ast.stmt) -> Node | None:
		if isinstance(stmt, ast.If):
			return self._process_if(stmt)
		if isinstance(stmt, ast.For):
			return self._process_for(stmt)
		if isinstance(stmt, ast.Return):
			return self._process_return(stmt)
		if isinstance(stmt, ast.While):
			raise UnsupportedConstruct("while loops are not supported.")

		if isinstance(stmt, (ast.Assign, ast.AnnAssign, ast.AugAssign)):
			return self._process_assign(stmt)

		if isinstance(stmt, ast.FunctionDef):
			return self._process_closure(stmt.name, stmt)

		if isinstance(stmt, ast.Pass):
			return None

		if isinstance(stmt, ast.Expr):
			if isinstance(stmt.value, ast.Lambda):
				# Never bound, never called: nothing to ship
				logger.debug("Dropping unbound closure: %s", ast.unparse(stmt))
				return None
			return self.lower(stmt.value)

		raise UnsupportedConstruct(f"Unsupported statement: {type(stmt).__name__}")

	# --- Control flow -------------------------------------------------------

	def _process_if(self, stmt: ast.If) -> If:
		condition = self.lower(stmt.test)
		body = self.lower_block(stmt.body)
		orelse = self._process_else(stmt.orelse) if stmt.orelse else None
		return If(condition, body, orelse)

	def _process_else(self, stmts: list[ast.stmt]) -> Else:
		# elif chains arrive here as a single nested If
		return Else(self.lower_block(stmts))

	def _process_return(self, stmt: ast.Return) -> Return:
		if stmt.value is None:
			return Return()
		return Return(self.lower(stmt.value))

	def _process_for(self, stmt: ast.For) -> For:
		if stmt.orelse:
			raise UnsupportedConstruct("for/else is not supported")
		if not isinstance(stmt.target, ast.Name):
			raise UnsupportedConstruct(
				"Only simple name targets supported in for-loops: "
				+ ast.unparse(stmt.target)
			)
		iterator = self._static_iterator(stmt.iter)
		target = stmt.target.id
		self.frame.bind(target)
		return For(target, iterator, self.lower_block(stmt.body))

	def _static_iterator(self, node: ast.expr) -> Range | Sequence:
		"""Lower a for-loop iterator known before execution.

		Accepts ``range(...)`` with constant integer bounds and literal
		sequences (or global constant lists/tuples).
		"""
		if (
			isinstance(node, ast.Call)
			and isinstance(node.func, ast.Name)
			and not self.frame.is_bound(node.func.id)
			and self.resolve(node.func.id) is range
			and not node.keywords
		):
			bounds = [self._static_int(a) for a in node.args]
			if 1 <= len(bounds) <= 3 and all(b is not None for b in bounds):
				ints = [b for b in bounds if b is not None]
				if len(ints) == 1:
					return Range(0, ints[0])
				step = ints[2] if len(ints) == 3 else 1
				if step == 0:
					raise UnsupportedConstruct("range() step must not be zero")
				return Range(ints[0], ints[1], step)

		if isinstance(node, (ast.List, ast.Tuple)):
			values = [self.lower(e) for e in node.elts]
			if all(isinstance(v, Literal) for v in values):
				return Sequence(tuple(v for v in values if isinstance(v, Literal)))

		if isinstance(node, ast.Name) and not self.frame.is_bound(node.id):
			value = self.resolve(node.id)
			if isinstance(value, (list, tuple)) and all(is_primitive(v) for v in value):
				return Sequence(tuple(Literal(v) for v in value))

		raise UnsupportedConstruct(
			"for-loops can only iterate over range() with constant bounds "
			+ "or a literal sequence: "
			+ ast.unparse(node)
		)

	def _static_int(self, node: ast.expr) -> int | None:
		value: object = None
		if isinstance(node, ast.Constant):
			value = node.value
		elif (
			isinstance(node, ast.UnaryOp)
			and isinstance(node.op, ast.USub)
			and isinstance(node.operand, ast.Constant)
		):
			inner = node.operand.value
			if isinstance(inner, int) and not isinstance(inner, bool):
				value = -inner
		elif isinstance(node, ast.Name) and not self.frame.is_bound(node.id):
			value = self.resolve(node.id)
		if isinstance(value, int) and not isinstance(value, bool):
			return value
		return None

	# --- Assignment ---------------------------------------------------------

	def _process_assign(self, stmt: ast.Assign | ast.AnnAssign | ast.AugAssign) -> Node | None:
		if isinstance(stmt, ast.AugAssign):
			if not isinstance(stmt.target, ast.Name):
				raise UnsupportedConstruct(MULTI_ASSIGN_MESSAGE)
			token = BINOP_TOKENS.get(type(stmt.op))
			if token is None:
				raise UnknownOperator(ast.unparse(stmt))
			name = stmt.target.id
			value = self.operation(token, [Variable(name), self.lower(stmt.value)])
			self.frame.bind(name)
			return Assign(name, value)

		if isinstance(stmt, ast.AnnAssign):
			if stmt.value is None:
				# Bare annotation binds nothing
				return None
			targets: list[ast.expr] = [stmt.target]
		else:
			targets = stmt.targets

		if len(targets) != 1 or not isinstance(targets[0], ast.Name):
			raise UnsupportedConstruct(MULTI_ASSIGN_MESSAGE)
		name = targets[0].id

		if isinstance(stmt.value, ast.Lambda):
			return self._process_closure(name, stmt.value)
		if isinstance(stmt.value, ast.NamedExpr):
			raise UnsupportedConstruct(RIGHT_ASSIGN_MESSAGE)

		value = self.lower(stmt.value)
		self.frame.bind(name)
		return Assign(name, value)

	# --- Closures -----------------------------------------------------------

	def _process_closure(self, name: str, node: ast.FunctionDef | ast.Lambda) -> None:
		"""Bind a nested closure. It is lowered and emitted at its first call."""
		self.frame.bind_closure(name, node)
		logger.debug("Bound closure '%s'", name)
		return None
