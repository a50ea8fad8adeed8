"""Cascade AST nodes.

Every node is an immutable dataclass. Children are held in tuples and belong to
exactly one parent, so a lowered function is always a strict tree.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TypeAlias

from transmog.errors import ArityMismatch, UnsupportedConstruct
from transmog.operators import Fixity

# Marker for a function without formal arguments
NO_ARGUMENTS = "none"

LiteralValue: TypeAlias = bool | int | float | str


@dataclass(slots=True, frozen=True)
class Literal:
	"""Numeric, string or boolean constant."""

	value: LiteralValue

	def __post_init__(self) -> None:
		# JSON has no spelling for inf or nan
		if isinstance(self.value, float) and not math.isfinite(self.value):
			raise UnsupportedConstruct(
				f"Non-finite number {self.value!r} cannot be sent to the engine"
			)

	@property
	def kind(self) -> str:
		# bool first: bool is a subclass of int
		if isinstance(self.value, bool):
			return "boolean"
		if isinstance(self.value, str):
			return "string"
		return "numeric"


@dataclass(slots=True, frozen=True)
class Variable:
	"""Symbol looked up by the engine at execution time."""

	name: str

	@property
	def symbol(self) -> str:
		return f"${self.name}"


@dataclass(slots=True, frozen=True)
class Operation:
	"""Operator applied to operands: ``x + y``, ``abs(x)``, ``max(a, b, c)``."""

	op: str
	fixity: Fixity
	operands: tuple[Node, ...]

	def __post_init__(self) -> None:
		count = len(self.operands)
		if self.fixity is Fixity.UNARY:
			ok = count == 1
		elif self.fixity is Fixity.BINARY:
			ok = count == 2
		elif self.fixity is Fixity.VARIADIC:
			ok = count >= 1
		else:
			ok = False
		if not ok:
			raise ArityMismatch(self.op, self.fixity.value, count)


@dataclass(slots=True, frozen=True)
class FunctionDef:
	"""A lowered function: name, formal arguments and statements."""

	name: str
	free_variables: tuple[str, ...] | str
	body: tuple[Node, ...]


@dataclass(slots=True, frozen=True)
class Call:
	"""Invocation of a user-defined function or nested closure.

	``definition`` carries the lowered function the first time it is reached
	within one translation. Later calls reference it by alias only.
	"""

	alias: str
	operands: tuple[Node, ...]
	definition: FunctionDef | None = None


@dataclass(slots=True, frozen=True)
class Assign:
	symbol: str
	value: Node


@dataclass(slots=True, frozen=True)
class Else:
	body: tuple[Node, ...]


@dataclass(slots=True, frozen=True)
class If:
	condition: Node
	body: tuple[Node, ...]
	orelse: Else | None = None


@dataclass(slots=True, frozen=True)
class Range:
	"""Statically-known integer range: ``range(start, stop, step)``."""

	start: int
	stop: int
	step: int = 1


@dataclass(slots=True, frozen=True)
class Sequence:
	"""Explicit sequence of constant values."""

	values: tuple[Literal, ...]


@dataclass(slots=True, frozen=True)
class For:
	variable: str
	iterator: Range | Sequence
	body: tuple[Node, ...]


@dataclass(slots=True, frozen=True)
class Return:
	value: Node | None = None


Node: TypeAlias = (
	Literal
	| Variable
	| Operation
	| FunctionDef
	| Call
	| Assign
	| If
	| Else
	| For
	| Return
	| Range
	| Sequence
)
