"""
Tests for control flow and assignment lowering.

Focuses on:
- if/elif/else
- for loops over statically-known iterators
- local assignment, augmented and annotated assignment
- rejected constructs (while, :=, chained assignment, break)
"""

# pyright: reportUnusedVariable=false

import pytest
from transmog import (
	Assign,
	Else,
	Fixity,
	For,
	If,
	Literal,
	Operation,
	Range,
	Return,
	Sequence,
	UnsupportedConstruct,
	Variable,
	transmogrify,
)

N = 4
WEIGHTS = (0.5, 0.25)
carry = 5


def binop(op: str, left, right) -> Operation:
	return Operation(op, Fixity.BINARY, (left, right))


x, acc, i = Variable("x"), Variable("acc"), Variable("i")


# =============================================================================
# If / else
# =============================================================================


class TestIf:
	"""Conditional statements."""

	def test_if_else(self):
		def clip(x):
			if x > 10:
				return 10
			else:
				return x

		assert transmogrify(clip).body == (
			If(
				binop(">", x, Literal(10)),
				(Return(Literal(10)),),
				Else((Return(x),)),
			),
		)

	def test_if_without_else(self):
		def f(x):
			if x < 0:
				return 0
			return x

		assert transmogrify(f).body == (
			If(binop("<", x, Literal(0)), (Return(Literal(0)),)),
			Return(x),
		)

	def test_elif_nests_in_else(self):
		def sign(x):
			if x > 0:
				return 1
			elif x < 0:
				return -1
			else:
				return 0

		assert transmogrify(sign).body == (
			If(
				binop(">", x, Literal(0)),
				(Return(Literal(1)),),
				Else(
					(
						If(
							binop("<", x, Literal(0)),
							(Return(Literal(-1)),),
							Else((Return(Literal(0)),)),
						),
					)
				),
			),
		)

	def test_bare_return(self):
		def f(x):
			if x:
				return
			return x

		(cond, _) = transmogrify(f).body
		assert isinstance(cond, If)
		assert cond.body == (Return(),)


# =============================================================================
# For loops
# =============================================================================


class TestFor:
	"""Loops over iterators known before execution."""

	def test_range_stop(self):
		def total(x):
			acc = 0
			for i in range(3):
				acc = acc + x
			return acc

		assert transmogrify(total).body == (
			Assign("acc", Literal(0)),
			For("i", Range(0, 3), (Assign("acc", binop("+", acc, x)),)),
			Return(acc),
		)

	def test_range_start_stop_step(self):
		def f(x):
			for i in range(10, 0, -2):
				x = x - i
			return x

		loop = transmogrify(f).body[0]
		assert isinstance(loop, For)
		assert loop.iterator == Range(10, 0, -2)
		assert loop.body == (Assign("x", binop("-", x, i)),)

	def test_range_global_bound(self):
		def f(x):
			for i in range(N):
				x = x * 2
			return x

		loop = transmogrify(f).body[0]
		assert isinstance(loop, For)
		assert loop.iterator == Range(0, 4)

	def test_literal_sequence(self):
		def f(x):
			for w in [1, 2, 3]:
				x = x + w
			return x

		loop = transmogrify(f).body[0]
		assert isinstance(loop, For)
		assert loop.iterator == Sequence((Literal(1), Literal(2), Literal(3)))
		assert loop.body == (Assign("x", binop("+", x, Variable("w"))),)

	def test_global_sequence(self):
		def f(x):
			for w in WEIGHTS:
				x = x * w
			return x

		loop = transmogrify(f).body[0]
		assert isinstance(loop, For)
		assert loop.iterator == Sequence((Literal(0.5), Literal(0.25)))

	def test_local_assigned_later_in_loop_is_variable(self):
		def f(x):
			for i in range(3):
				if i > 0:
					x = x + carry
				carry = i
			return x

		loop = transmogrify(f).body[0]
		assert isinstance(loop, For)
		assert loop.body == (
			If(
				binop(">", i, Literal(0)),
				(Assign("x", binop("+", x, Variable("carry"))),),
			),
			Assign("carry", i),
		)

	def test_dynamic_iterator_rejected(self):
		def f(x):
			for v in x:
				x = v
			return x

		with pytest.raises(UnsupportedConstruct, match="for-loops"):
			transmogrify(f)

	def test_dynamic_range_bound_rejected(self):
		def f(x):
			for v in range(x):
				x = v
			return x

		with pytest.raises(UnsupportedConstruct, match="for-loops"):
			transmogrify(f)

	def test_zero_step_rejected(self):
		def f(x):
			for v in range(0, 10, 0):
				x = v
			return x

		with pytest.raises(UnsupportedConstruct, match="step"):
			transmogrify(f)

	def test_for_else_rejected(self):
		def f(x):
			for v in range(3):
				x = v
			else:
				x = 0
			return x

		with pytest.raises(UnsupportedConstruct, match="for/else"):
			transmogrify(f)

	def test_tuple_target_rejected(self):
		def f(x):
			for a, b in [(1, 2)]:
				x = a
			return x

		with pytest.raises(UnsupportedConstruct, match="simple name"):
			transmogrify(f)

	def test_break_rejected(self):
		def f(x):
			for v in range(3):
				break
			return x

		with pytest.raises(UnsupportedConstruct, match="Break"):
			transmogrify(f)


# =============================================================================
# Assignment
# =============================================================================


class TestAssignment:
	"""Local bindings."""

	def test_assign_then_use(self):
		def f(x):
			y = x * 2
			return y + 1

		assert transmogrify(f).body == (
			Assign("y", binop("*", x, Literal(2))),
			Return(binop("+", Variable("y"), Literal(1))),
		)

	def test_augmented_assignment(self):
		def f(x):
			acc = 1
			acc += x
			return acc

		assert transmogrify(f).body[1] == Assign("acc", binop("+", acc, x))

	def test_annotated_assignment(self):
		def f(x):
			y: float = x / 2
			return y

		assert transmogrify(f).body[0] == Assign("y", binop("/", x, Literal(2)))

	def test_bare_annotation_is_dropped(self):
		def f(x):
			y: float
			return x

		assert transmogrify(f).body == (Return(x),)

	def test_local_shadows_global_constant(self):
		def f(x):
			N = x
			return N

		assert transmogrify(f).body[1] == Return(Variable("N"))

	def test_chained_assignment_rejected(self):
		def f(x):
			a = b = x
			return a

		with pytest.raises(UnsupportedConstruct, match="single `name = value`"):
			transmogrify(f)

	def test_unpacking_rejected(self):
		def f(x):
			a, b = x, x
			return a

		with pytest.raises(UnsupportedConstruct, match="single `name = value`"):
			transmogrify(f)


# =============================================================================
# Rejected constructs
# =============================================================================


class TestRejected:
	"""Constructs the switchboard refuses outright."""

	def test_while_loop(self):
		def f(x):
			while x > 0:
				x = x - 1
			return x

		with pytest.raises(UnsupportedConstruct, match="while loops are not supported"):
			transmogrify(f)

	def test_assignment_expression(self):
		def f(x):
			return (y := x + 1)

		with pytest.raises(UnsupportedConstruct, match="Please use `=` for assignment"):
			transmogrify(f)

	def test_assignment_expression_as_value(self):
		def f(x):
			y = (z := x)
			return y

		with pytest.raises(UnsupportedConstruct, match="Please use `=` for assignment"):
			transmogrify(f)

	def test_try_statement(self):
		def f(x):
			try:
				return x
			except ValueError:
				return 0

		with pytest.raises(UnsupportedConstruct, match="Unsupported statement: Try"):
			transmogrify(f)
