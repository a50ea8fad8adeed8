"""Scope resolution for function values.

Decides whether a function is user-defined (and must be transmogrified) or
comes from a library namespace (and must be treated as an opaque builtin).

Scopes are modelled as an explicit chain: each ``<locals>`` level of a
function's qualified name is an anonymous function scope, and the chain ends at
the scope of the defining module. A module scope is either *global* (user
code) or *named* (an installed library).
"""

from __future__ import annotations

import builtins
import inspect
import logging
import sys
import sysconfig
import types as pytypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from transmog.env import env
from transmog.errors import ScopeResolutionFailure

logger = logging.getLogger(__name__)

# Upper bound on scope chain length; real chains are a handful of levels deep
MAX_SCOPE_CHAIN = 256


@dataclass(slots=True, frozen=True)
class Scope:
	"""One level of a lexical environment.

	``name`` is set only for named (library) scopes. ``is_global`` marks the
	top-level scope of user code.
	"""

	label: str
	name: str | None = None
	parent: Scope | None = None
	is_global: bool = False


def _install_paths() -> list[Path]:
	paths: list[Path] = []
	for key in ("stdlib", "platstdlib", "purelib", "platlib"):
		raw = sysconfig.get_paths().get(key)
		if raw:
			paths.append(Path(raw).resolve())
	return paths


def _matches_prefix(module_name: str, prefixes: list[str]) -> bool:
	return any(
		module_name == prefix or module_name.startswith(prefix + ".")
		for prefix in prefixes
	)


def is_library_module(module_name: str) -> bool:
	"""Whether a module belongs to a library namespace rather than user code."""
	if module_name == "__main__":
		return False
	if _matches_prefix(module_name, env.user_modules):
		return False
	if _matches_prefix(module_name, env.library_modules):
		return True
	top = module_name.partition(".")[0]
	if module_name in sys.builtin_module_names or top in sys.stdlib_module_names:
		return True
	module = sys.modules.get(module_name)
	filename = getattr(module, "__file__", None)
	if not filename:
		# Not imported from a file: builtin or frozen
		return module is not None
	location = Path(filename).resolve()
	return any(location.is_relative_to(p) for p in _install_paths())


def module_scope(module_name: str) -> Scope:
	if is_library_module(module_name):
		return Scope(label=module_name, name=module_name)
	return Scope(label=module_name, is_global=True)


def scope_of(value: Any) -> Scope | None:
	"""Build the scope chain a function value was defined in.

	Returns None when the value is not a Python function (builtins, classes,
	partials, ...). Raises ScopeResolutionFailure for malformed functions.
	"""
	from transmog.function import UDF

	if isinstance(value, UDF):
		value = value.fn
	if not inspect.isfunction(value):
		return None

	module_name = getattr(value, "__module__", None)
	if not isinstance(module_name, str) or not module_name:
		raise ScopeResolutionFailure(
			f"Function {value!r} has no defining module"
		)
	qualname = getattr(value, "__qualname__", None)
	if not isinstance(qualname, str):
		raise ScopeResolutionFailure(
			f"Function {value!r} has no qualified name"
		)

	scope = module_scope(module_name)
	# "outer.<locals>.inner" -> enclosing function scopes ["outer"]
	enclosing = qualname.split(".<locals>.")[:-1]
	if len(enclosing) > MAX_SCOPE_CHAIN:
		raise ScopeResolutionFailure(f"Scope chain of {qualname} is too deep")
	for label in enclosing:
		scope = Scope(label=label, parent=scope)
	return Scope(label=qualname, parent=scope)


def is_user_defined(value: Any) -> bool:
	"""Whether a value is a user-defined function or closure."""
	try:
		scope = scope_of(value)
	except ScopeResolutionFailure as exc:
		logger.debug("Treating %r as a builtin: %s", value, exc)
		return False

	steps = 0
	while scope is not None and steps <= MAX_SCOPE_CHAIN:
		if scope.is_global:
			return True
		if scope.name is not None:
			return False
		scope = scope.parent
		steps += 1
	return False


def closure_namespace(fn: pytypes.FunctionType) -> dict[str, Any]:
	"""Resolve the names visible to a function.

	Starts from the function's globals, overlays the values of its closure
	cells, and falls back to builtins for anything else.
	"""
	namespace: dict[str, Any] = dict(vars(builtins))
	namespace.update(fn.__globals__)

	code = fn.__code__
	if code.co_freevars and fn.__closure__:
		for freevar_name, cell in zip(code.co_freevars, fn.__closure__, strict=False):
			try:
				namespace[freevar_name] = cell.cell_contents
			except ValueError:
				# Cell is empty (unbound), skip it
				pass
	return namespace
