"""Errors raised while lowering a function into a Cascade AST."""

from __future__ import annotations


class TransmogrifyError(Exception):
	"""Error during transmogrification."""


class UnsupportedConstruct(TransmogrifyError):
	"""The function uses a construct the remote engine cannot execute."""


class UnknownOperator(TransmogrifyError):
	"""A statement is not an operator, a user-defined call or a symbol."""

	statement: str

	def __init__(self, statement: str) -> None:
		self.statement = statement
		super().__init__(
			f"Failed to lower statement to an AST. Failing statement was: {statement}"
		)


class ScopeResolutionFailure(TransmogrifyError):
	"""The enclosing scopes of a function value could not be walked."""


class ArityMismatch(TransmogrifyError):
	"""An operator received a number of operands its fixity does not allow."""

	op: str
	fixity: str
	count: int

	def __init__(self, op: str, fixity: str, count: int) -> None:
		self.op = op
		self.fixity = fixity
		self.count = count
		super().__init__(
			f"Operator '{op}' is {fixity} but was given {count} operand(s)"
		)


class RecursionDepthExceeded(TransmogrifyError):
	"""Lowering nested deeper than the configured limit."""

	limit: int

	def __init__(self, limit: int) -> None:
		self.limit = limit
		super().__init__(
			f"Maximum lowering depth of {limit} exceeded. "
			+ "Simplify the function or raise TRANSMOG_MAX_DEPTH."
		)
