"""Function transmogrification.

Provides ``transmogrify`` for lowering a user-defined Python function into a
Cascade ``FunctionDef``, and the ``@udf`` decorator for marking functions that
are shipped to the remote engine.

A function has three parts: a name, formal arguments and a body. The body is
lowered one statement at a time through the Switchboard. Other user-defined
functions reached from the body are lowered recursively, at most once per
translation.
"""

from __future__ import annotations

import ast
import inspect
import logging
import textwrap
import types as pytypes
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, overload

from transmog.context import Frame, TransmogrifyContext
from transmog.env import env
from transmog.errors import TransmogrifyError, UnsupportedConstruct
from transmog.nodes import NO_ARGUMENTS, FunctionDef
from transmog.scope import closure_namespace, is_user_defined
from transmog.switchboard import Switchboard

logger = logging.getLogger(__name__)


# =============================================================================
# Source extraction
# =============================================================================


def getsourcecode(fn: pytypes.FunctionType) -> str:
	"""Dedented source of a function."""
	try:
		src = inspect.getsource(fn)
	except (OSError, TypeError) as exc:
		raise TransmogrifyError(
			f"Could not retrieve source for '{fn.__qualname__}': {exc}"
		) from exc
	return textwrap.dedent(src)


def _parse_fragment(src: str, qualname: str) -> ast.Module:
	try:
		return ast.parse(src)
	except SyntaxError:
		pass
	# Lambdas inside a larger expression come back as an unbalanced fragment
	try:
		return ast.parse(f"(\n{src.rstrip().rstrip(',')}\n)")
	except SyntaxError as exc:
		raise TransmogrifyError(f"Could not parse the source of '{qualname}'") from exc


def _find_lambda(fn: pytypes.FunctionType, src: str) -> ast.Lambda:
	module = _parse_fragment(src, fn.__qualname__)
	code = fn.__code__
	params = list(code.co_varnames[: code.co_argcount])
	candidates = [
		n
		for n in ast.walk(module)
		if isinstance(n, ast.Lambda)
		and [a.arg for a in (*n.args.posonlyargs, *n.args.args)] == params
	]
	if len(candidates) != 1:
		raise TransmogrifyError(
			f"Could not locate the source of lambda '{fn.__qualname__}' "
			+ f"({len(candidates)} candidates). Define it with def instead."
		)
	return candidates[0]


def parse_function(fn: pytypes.FunctionType) -> ast.FunctionDef | ast.Lambda:
	"""Parse a live function back into its definition node."""
	src = getsourcecode(fn)
	if fn.__name__ == "<lambda>":
		return _find_lambda(fn, src)

	module = _parse_fragment(src, fn.__qualname__)
	fndefs = [
		n
		for n in module.body
		if isinstance(n, (ast.FunctionDef, ast.AsyncFunctionDef))
	]
	if not fndefs:
		raise TransmogrifyError("No function definition found in source")
	named = [n for n in fndefs if n.name == fn.__name__]
	fndef = named[-1] if named else fndefs[-1]
	if isinstance(fndef, ast.AsyncFunctionDef):
		raise UnsupportedConstruct(f"Async function '{fndef.name}' is not supported")
	return fndef


def formal_arguments(args: ast.arguments, name: str) -> tuple[str, ...] | str:
	"""Ordered formal argument names, or NO_ARGUMENTS."""
	if args.vararg or args.kwarg or args.kwonlyargs:
		raise UnsupportedConstruct(
			f"Function '{name}' uses *args, **kwargs or keyword-only arguments"
		)
	if args.defaults:
		raise UnsupportedConstruct(
			f"Function '{name}' has default argument values, which are not supported"
		)
	names = tuple(a.arg for a in (*args.posonlyargs, *args.args))
	return names if names else NO_ARGUMENTS


def _is_docstring(stmt: ast.stmt) -> bool:
	return (
		isinstance(stmt, ast.Expr)
		and isinstance(stmt.value, ast.Constant)
		and isinstance(stmt.value.value, str)
	)


def extract_statements(node: ast.FunctionDef | ast.Lambda) -> list[ast.stmt]:
	"""Ordered statements of a function body.

	A lambda's single expression becomes a one-statement block. A trailing
	bare expression is the function's implicit return value.
	"""
	if isinstance(node, ast.Lambda):
		stmts: list[ast.stmt] = [ast.Expr(value=node.body)]
	else:
		stmts = list(node.body)
		if stmts and _is_docstring(stmts[0]):
			stmts = stmts[1:]
	stmts = [s for s in stmts if not isinstance(s, ast.Pass)]

	if stmts:
		last = stmts[-1]
		if isinstance(last, ast.Expr) and not isinstance(last.value, ast.Lambda):
			stmts[-1] = ast.copy_location(ast.Return(value=last.value), last)
	return stmts


# =============================================================================
# Lowering
# =============================================================================


# Nodes that open their own scope; names bound inside them are not ours
_SCOPE_NODES = (
	ast.FunctionDef,
	ast.AsyncFunctionDef,
	ast.ClassDef,
	ast.Lambda,
	ast.ListComp,
	ast.SetComp,
	ast.DictComp,
	ast.GeneratorExp,
)


def local_names(
	node: ast.FunctionDef | ast.Lambda, formals: tuple[str, ...] | str
) -> set[str]:
	"""Every name the function binds, wherever in the body it is bound.

	Python decides locality for the whole body up front, so a name assigned
	on the last line is already local on the first.
	"""
	names = set(formals) if isinstance(formals, tuple) else set()
	stack: list[ast.AST] = (
		[node.body] if isinstance(node, ast.Lambda) else list(node.body)
	)
	while stack:
		current = stack.pop()
		if isinstance(current, ast.Name) and isinstance(current.ctx, ast.Store):
			names.add(current.id)
		elif isinstance(current, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
			names.add(current.name)
		if isinstance(current, _SCOPE_NODES):
			continue
		stack.extend(ast.iter_child_nodes(current))
	return names


def transmogrify_udf(
	fn: pytypes.FunctionType, alias: str, ctx: TransmogrifyContext
) -> FunctionDef:
	"""Lower a live user-defined function within an ongoing translation."""
	# Record BEFORE lowering the body so recursive calls become references
	alias = ctx.mark(fn, alias)
	logger.debug("Transmogrifying '%s' (%s)", alias, fn.__qualname__)

	node = parse_function(fn)
	formals = formal_arguments(node.args, alias)
	frame = Frame(names=local_names(node, formals))
	board = Switchboard(ctx, closure_namespace(fn), frame)
	body = board.lower_block(extract_statements(node))
	return FunctionDef(alias, formals, body)


def lower_closure(
	alias: str,
	node: ast.FunctionDef | ast.Lambda,
	ctx: TransmogrifyContext,
	namespace: Mapping[str, Any],
	parent: Frame,
) -> FunctionDef:
	"""Lower a closure defined inside the body of a function being lowered.

	``parent`` is the frame the closure was defined in, not the frame of the
	call site that triggered the lowering.
	"""
	if isinstance(node, ast.FunctionDef) and node.decorator_list:
		raise UnsupportedConstruct(f"Decorated closure '{alias}' is not supported")
	formals = formal_arguments(node.args, alias)
	board = Switchboard(ctx, namespace, parent.child(local_names(node, formals)))
	with ctx.descend():
		body = board.lower_block(extract_statements(node))
	return FunctionDef(alias, formals, body)


def transmogrify(
	fn: Callable[..., Any] | UDF,
	name: str | None = None,
	*,
	max_depth: int | None = None,
) -> FunctionDef:
	"""Transmogrify a user-defined function into a Cascade FunctionDef.

	Args:
		fn: The function (or @udf wrapper) to lower
		name: Binding name; defaults to the function's name. Required for lambdas.
		max_depth: Nesting limit; defaults to TRANSMOG_MAX_DEPTH

	Every call starts a fresh translation: functions lowered by earlier calls
	are lowered again.
	"""
	if isinstance(fn, UDF):
		name = name or fn.name
		fn = fn.fn
	if not inspect.isfunction(fn):
		raise TransmogrifyError(
			f"Expected a Python function, got {type(fn).__name__}"
		)
	if not is_user_defined(fn):
		raise TransmogrifyError(
			f"'{fn.__qualname__}' is not a user-defined function"
		)
	alias = name or fn.__name__
	if alias == "<lambda>":
		raise TransmogrifyError(
			"Lambda functions need an explicit name: transmogrify(fn, name=...)"
		)

	ctx = TransmogrifyContext(
		max_depth=max_depth if max_depth is not None else env.max_depth
	)
	return transmogrify_udf(fn, alias, ctx)


# =============================================================================
# @udf
# =============================================================================


@dataclass(slots=True)
class UDF:
	"""A function marked for execution on the remote engine.

	Other UDFs and plain user functions may call it; it is lowered wherever
	it is reached.
	"""

	fn: pytypes.FunctionType
	name: str

	def transmogrify(self, *, max_depth: int | None = None) -> FunctionDef:
		return transmogrify(self.fn, self.name, max_depth=max_depth)

	def serialize(self) -> dict[str, Any]:
		from transmog.serializer import serialize

		return serialize(self.transmogrify())

	def to_json(self, indent: int | None = None) -> str:
		from transmog.serializer import to_json

		return to_json(self.transmogrify(), indent=indent)


@overload
def udf(fn: Callable[..., Any]) -> UDF: ...


@overload
def udf(*, name: str | None = None) -> Callable[[Callable[..., Any]], UDF]: ...


def udf(fn: Callable[..., Any] | None = None, *, name: str | None = None) -> Any:
	"""Decorator marking a Python function as a UDF.

	Usage:
		@udf
		def scale(x): return x * 2
	or:
		@udf(name="scale2")
		def scale(x): ...
	"""

	def decorator(f: Callable[..., Any]) -> UDF:
		if not inspect.isfunction(f):
			raise TypeError("udf expects a Python function")
		return UDF(f, name or f.__name__)

	if fn is not None:
		return decorator(fn)
	return decorator
