"""State threaded through one top-level transmogrification."""

from __future__ import annotations

import ast
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from transmog.errors import RecursionDepthExceeded
from transmog.nodes import FunctionDef


@dataclass(slots=True)
class Closure:
	"""A nested closure, lowered at its first call site.

	``lowering`` is set while its own body is being lowered so recursive calls
	become references.
	"""

	node: ast.FunctionDef | ast.Lambda
	definition: FunctionDef | None = None
	lowering: bool = False


@dataclass(slots=True)
class Frame:
	"""Lexical frame of a function being lowered.

	Tracks the names bound inside the function (formals, assignments, loop
	variables) and the nested closures it defines.
	"""

	names: set[str] = field(default_factory=set)
	closures: dict[str, Closure] = field(default_factory=dict)
	parent: Frame | None = None

	def child(self, names: set[str] | None = None) -> Frame:
		return Frame(names=set(names or ()), parent=self)

	def bind(self, name: str) -> None:
		self.names.add(name)
		self.closures.pop(name, None)

	def bind_closure(self, name: str, node: ast.FunctionDef | ast.Lambda) -> None:
		self.names.discard(name)
		self.closures[name] = Closure(node)

	def is_bound(self, name: str) -> bool:
		frame: Frame | None = self
		while frame is not None:
			if name in frame.names:
				return True
			if name in frame.closures:
				return False
			frame = frame.parent
		return False

	def owner_of_closure(self, name: str) -> Frame | None:
		frame: Frame | None = self
		while frame is not None:
			if name in frame.closures:
				return frame
			if name in frame.names:
				return None
			frame = frame.parent
		return None


@dataclass(slots=True)
class TransmogrifyContext:
	"""Per-translation state: the call-tracking set and the depth guard.

	A new context is created for every top-level ``transmogrify`` call, so a
	function lowered by an earlier translation is never skipped.
	"""

	max_depth: int
	calls: dict[Callable[..., Any], str] = field(default_factory=dict)
	depth: int = 0
	_lambda_counter: int = 0

	def alias_of(self, fn: Callable[..., Any]) -> str | None:
		"""Alias of an already-lowered function, or None."""
		return self.calls.get(fn)

	def mark(self, fn: Callable[..., Any], alias: str) -> str:
		"""Record a function as lowered and return its alias.

		Distinct functions sharing a name get numbered aliases: ``scale``,
		``scale_2``, ...
		"""
		taken = set(self.calls.values())
		if alias in taken:
			n = 2
			while f"{alias}_{n}" in taken:
				n += 1
			alias = f"{alias}_{n}"
		self.calls[fn] = alias
		return alias

	def fresh_lambda_name(self) -> str:
		self._lambda_counter += 1
		return f"lambda_{self._lambda_counter}"

	@contextmanager
	def descend(self) -> Iterator[None]:
		if self.depth >= self.max_depth:
			raise RecursionDepthExceeded(self.max_depth)
		self.depth += 1
		try:
			yield
		finally:
			self.depth -= 1
