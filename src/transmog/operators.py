"""Operator classification tables.

Maps Python operators and callable names onto the operator tokens understood
by the remote engine, and classifies each token by fixity.
"""

from __future__ import annotations

import ast
from enum import Enum


class Fixity(str, Enum):
	UNARY = "unary"
	BINARY = "binary"
	VARIADIC = "variadic"
	UNKNOWN = "unknown"


# Valid either as a one-operand prefix op or as a variadic reducer.
# One operand resolves to unary, anything else to variadic.
AMBIGUOUS_OPS: frozenset[str] = frozenset({"log", "trunc", "round", "signif"})

UNARY_OPS: frozenset[str] = frozenset(
	{
		"!",
		"abs",
		"sign",
		"sqrt",
		"ceiling",
		"floor",
		"cummax",
		"cummin",
		"cumprod",
		"cumsum",
		"log10",
		"log2",
		"log1p",
		"acos",
		"acosh",
		"asin",
		"asinh",
		"atan",
		"atanh",
		"exp",
		"expm1",
		"cos",
		"cosh",
		"sin",
		"sinh",
		"tan",
		"tanh",
		"gamma",
		"lgamma",
		"digamma",
		"trigamma",
		"is.na",
	}
	| AMBIGUOUS_OPS
)

BINARY_OPS: frozenset[str] = frozenset(
	{
		"+",
		"-",
		"*",
		"^",
		"%%",
		"%/%",
		"/",
		"==",
		">",
		"<",
		"!=",
		"<=",
		">=",
		"&",
		"|",
		"**",
	}
)

VARIADIC_OPS: frozenset[str] = frozenset(
	{"max", "min", "range", "prod", "sum", "any", "all"} | AMBIGUOUS_OPS
)

BINOP_TOKENS: dict[type[ast.operator], str] = {
	ast.Add: "+",
	ast.Sub: "-",
	ast.Mult: "*",
	ast.Div: "/",
	ast.Mod: "%%",
	ast.FloorDiv: "%/%",
	ast.Pow: "^",
	ast.BitAnd: "&",
	ast.BitOr: "|",
}

UNOP_TOKENS: dict[type[ast.unaryop], str] = {
	ast.Not: "!",
	ast.Invert: "!",
}

CMPOP_TOKENS: dict[type[ast.cmpop], str] = {
	ast.Eq: "==",
	ast.NotEq: "!=",
	ast.Lt: "<",
	ast.LtE: "<=",
	ast.Gt: ">",
	ast.GtE: ">=",
}

BOOLOP_TOKENS: dict[type[ast.boolop], str] = {
	ast.And: "&",
	ast.Or: "|",
}

# Python callable names whose engine token is spelled differently
NAME_ALIASES: dict[str, str] = {
	"ceil": "ceiling",
	"isnan": "is.na",
	"fabs": "abs",
}


def token_for_name(name: str) -> str:
	"""Engine token for a Python callable name (``math.ceil`` -> ``ceiling``)."""
	return NAME_ALIASES.get(name, name)


def is_unop(token: str) -> bool:
	return token in UNARY_OPS


def is_binop(token: str) -> bool:
	return token in BINARY_OPS


def is_varop(token: str) -> bool:
	return token in VARIADIC_OPS


def is_op(token: str) -> bool:
	return is_unop(token) or is_binop(token) or is_varop(token)


def classify(token: str, nargs: int | None = None) -> Fixity:
	"""Classify an operator token.

	``nargs`` only matters for the ambiguous operators (``log``, ``trunc``,
	``round``, ``signif``): exactly one operand picks the unary form,
	anything else (including an unknown count) picks the variadic form.
	"""
	if token in AMBIGUOUS_OPS:
		return Fixity.UNARY if nargs == 1 else Fixity.VARIADIC
	if token in BINARY_OPS:
		return Fixity.BINARY
	if token in UNARY_OPS:
		return Fixity.UNARY
	if token in VARIADIC_OPS:
		return Fixity.VARIADIC
	return Fixity.UNKNOWN
