# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Exit classifications and the combinators that compose them.

Every expression the unreturn pass visits is classified as one of:

  Unchanged   no early exit escapes it. Carries the rewritten node when a
              nested function boundary had to be rewritten, otherwise None
              (meaning: the original node, verbatim).
  Direct(e)   every path exits; the whole thing behaves as `return e`.
  Parametric  some paths exit, some fall through. Carries a builder taking a
              continuation (what happens to the fallthrough value) and
              producing the finished expression. Exiting paths ignore the
              continuation and yield the exit value in place.

The policy "an exit supersedes everything downstream" and "no exit, pass
through unchanged" live only here; the rewriter picks a combinator per node
kind.

Continuations passed to a builder may be called any number of times (once per
branch tail that falls through). A builder itself runs at most once; the
combinators below hoist every nested `resolve` out of the continuations they
construct so this holds.
"""

from __future__ import annotations

from typing import Callable, Generic, Optional, TypeVar

from kore.core.internal_error import ContinuationReusedError
from kore.ir import core_nodes as C

T = TypeVar("T")
A = TypeVar("A")

# Continuation: fallthrough value of type T → rest of the function body.
Cont = Callable[[T], C.Expr]
Builder = Callable[[Cont], C.Expr]


def identity(expr: C.Expr) -> C.Expr:
	return expr


class Kont(Generic[T]):
	"""Base class of the three exit classifications."""

	__slots__ = ()


class Unchanged(Kont[T]):
	__slots__ = ("rewritten",)

	def __init__(self, rewritten: Optional[T] = None) -> None:
		self.rewritten = rewritten

	def value_or(self, original: T) -> T:
		return original if self.rewritten is None else self.rewritten

	def __repr__(self) -> str:
		return "Unchanged()" if self.rewritten is None else f"Unchanged({self.rewritten!r})"


class Direct(Kont[T]):
	__slots__ = ("expr",)

	def __init__(self, expr: C.Expr) -> None:
		self.expr = expr

	def __repr__(self) -> str:
		return f"Direct({self.expr!r})"


class Parametric(Kont[T]):
	"""
	Continuation-taking classification with a run-once builder.

	`materialize` is the identity-continuation resolution for the value type T
	(for expressions it is `build(identity)`; for definitions it rebuilds the
	definition around the materialized body).
	"""

	__slots__ = ("_build", "_materialize", "_resolved")

	def __init__(self, build: Builder, materialize: Optional[Callable[[], T]] = None) -> None:
		self._build = build
		self._materialize = materialize
		self._resolved = False

	def _claim(self) -> None:
		if self._resolved:
			raise ContinuationReusedError("unreturn: continuation-taking classification resolved twice")
		self._resolved = True

	def resolve(self, cont: Cont) -> C.Expr:
		self._claim()
		return self._build(cont)

	def materialize(self) -> T:
		if self._materialize is None:
			return self.resolve(identity)  # type: ignore[return-value]
		self._claim()
		return self._materialize()

	def __repr__(self) -> str:
		state = "resolved" if self._resolved else "pending"
		return f"Parametric(<{state}>)"


def identity_lift(value: C.Expr) -> Parametric[C.Expr]:
	"""Embed a plain expression: the continuation gets it directly."""
	return Parametric(lambda cont: cont(value), materialize=lambda: value)


def as_parametric(original: C.Expr, k: Kont[C.Expr]) -> Kont[C.Expr]:
	"""Lift Unchanged into identity_lift so a continuation is applied to it."""
	if isinstance(k, Unchanged):
		return identity_lift(k.value_or(original))
	return k


def reconstruct(original: C.Expr, cont: Cont, k: Kont[C.Expr]) -> C.Expr:
	"""
	Produce the final expression for `k`.

	Unchanged yields the (possibly boundary-rewritten) original and does *not*
	apply `cont`; Direct yields the exit value; Parametric hands `cont` to its
	builder.
	"""
	if isinstance(k, Unchanged):
		return k.value_or(original)
	if isinstance(k, Direct):
		return k.expr
	if isinstance(k, Parametric):
		return k.resolve(cont)
	raise TypeError(f"unexpected classification {k!r}")


def map_expr(g: Callable[[C.Expr], C.Expr], k: Kont[C.Expr]) -> Kont[C.Expr]:
	"""
	Re-wrap a classification in a node kind with no control effect.

	The wrapper ends up around the whole finished expression (exit values
	included), which is only sound for wrappers erased at run time, such as
	type application.
	"""
	if isinstance(k, Unchanged):
		if k.rewritten is None:
			return k
		return Unchanged(g(k.rewritten))
	if isinstance(k, Direct):
		return Direct(g(k.expr))
	if isinstance(k, Parametric):
		return Parametric(lambda cont: g(k.resolve(cont)))
	raise TypeError(f"unexpected classification {k!r}")


def map_binding(make: Callable[[C.Expr], T], k: Kont[C.Expr]) -> Kont[T]:
	"""
	Turn the classification of a definition body into one of the definition.

	For Parametric the continuation receives the definition bound to each
	fallthrough value, so whatever follows the binding is threaded into every
	non-exiting tail of the body.
	"""
	if isinstance(k, Unchanged):
		if k.rewritten is None:
			return Unchanged()
		return Unchanged(make(k.rewritten))
	if isinstance(k, Direct):
		return Direct(k.expr)
	if isinstance(k, Parametric):
		return Parametric(
			lambda cont: k.resolve(lambda value: cont(make(value))),
			materialize=lambda: make(k.materialize()),
		)
	raise TypeError(f"unexpected classification {k!r}")


def sequence(
	combine: Callable[[A, C.Expr], C.Expr],
	item: A,
	k_item: Kont[A],
	rest: C.Expr,
	k_rest: Kont[C.Expr],
) -> Kont[C.Expr]:
	"""
	Compose `item` (a binding) with the `rest` it scopes over.

	`combine(item, rest_expr)` re-assembles the two into one expression.
	Both Unchanged stay Unchanged. The first Direct in evaluation order wins;
	anything after it is unreachable and dropped. A Parametric item followed
	by a Direct rest is Direct as well: no path falls through. Otherwise the
	result is Parametric.
	"""
	if isinstance(k_item, Direct):
		return Direct(k_item.expr)

	if isinstance(k_item, Unchanged):
		if isinstance(k_rest, Unchanged):
			if k_item.rewritten is None and k_rest.rewritten is None:
				return Unchanged()
			return Unchanged(combine(k_item.value_or(item), k_rest.value_or(rest)))
		if isinstance(k_rest, Direct):
			return Direct(combine(k_item.value_or(item), k_rest.expr))
		if isinstance(k_rest, Parametric):
			head = k_item.value_or(item)
			return Parametric(lambda cont: combine(head, k_rest.resolve(cont)))
		raise TypeError(f"unexpected classification {k_rest!r}")

	if not isinstance(k_item, Parametric):
		raise TypeError(f"unexpected classification {k_item!r}")

	if isinstance(k_rest, Direct):
		exit_expr = k_rest.expr
		return Direct(k_item.resolve(lambda head: combine(head, exit_expr)))

	def build(cont: Cont) -> C.Expr:
		# The rest is resolved once here, then shared by every fallthrough tail
		# of the item.
		if isinstance(k_rest, Unchanged):
			tail = cont(k_rest.value_or(rest))
		else:
			tail = k_rest.resolve(cont)  # type: ignore[union-attr]
		return k_item.resolve(lambda head: combine(head, tail))

	return Parametric(build)


__all__ = [
	"Kont",
	"Unchanged",
	"Direct",
	"Parametric",
	"Cont",
	"identity",
	"identity_lift",
	"as_parametric",
	"reconstruct",
	"map_expr",
	"map_binding",
	"sequence",
]
