# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Unreturn: rewrite core so early exits never cross a non-function boundary.

Pipeline placement:
  lowering (core with `return`) → [this pass] → lambda lifting / effect handlers

Later stages wrap pieces of existing code in fresh functions. A `return` left
inside such a piece would exit the new function instead of the original one.
This pass hoists every exit out of pure control structure (`let`, `case`)
and threads the code that follows as an explicit continuation:

    let x = case s of                      case s of
              A -> return 1         ⇒        A -> 1
              B -> f(y)                      B -> let x = f(y) in g(x)
    in g(x)

Each expression is classified (see `kont`): Unchanged, Direct (always exits)
or Parametric (exits on some paths). Function literals and type abstractions
absorb whatever their body does, so they are Unchanged from the outside.

Continuations are copied under case patterns and `let` groups. When one of
those binders would capture a name the continuation uses, the continuation is
bound once as a local function outside the binder and only a call to it is
copied inside.

Assumption inherited from lowering: guard tests, case scrutinees, call
operands and return payloads contain no `return` reachable without crossing a
boundary.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import AbstractSet, Callable, Iterator, List, Optional, Sequence, Tuple

from kore.core.internal_error import ICELocation, ReturnInRecursiveGroupError
from kore.core.names import NameSupply
from kore.ir import core_nodes as C
from kore.ir.ir_utils import free_vars, pattern_vars
from .kont import (
	Cont,
	Direct,
	Kont,
	Parametric,
	Unchanged,
	as_parametric,
	identity,
	map_binding,
	map_expr,
	reconstruct,
	sequence,
)
from .options import UnreturnOptions

logger = logging.getLogger(__name__)

# Stands for the fallthrough value when inspecting a continuation; not a valid
# core name, so it never collides.
_HOLE = "$hole"


class UnreturnRewriter:
	"""
	Classify and rewrite core expressions and definition groups.

	One instance serves one compilation unit: it owns the unit's fresh-name
	supply (used for join points) and the stack of definitions being visited
	(used for tracing).
	"""

	def __init__(self, options: Optional[UnreturnOptions] = None, names: Optional[NameSupply] = None) -> None:
		self.options = options or UnreturnOptions()
		self.names = names or NameSupply()
		self._current_defs: List[str] = []

	# Tracing -------------------------------------------------------------

	@contextmanager
	def _within_def(self, name: str) -> Iterator[None]:
		self._current_defs.append(name)
		try:
			yield
		finally:
			self._current_defs.pop()

	def _trace(self, msg: str, *args: object) -> None:
		if logger.isEnabledFor(logging.DEBUG):
			logger.debug("unreturn: %s: " + msg, list(self._current_defs), *args)

	# Expressions ---------------------------------------------------------

	def classify(self, expr: C.Expr) -> Kont[C.Expr]:
		"""Classify `expr` and prepare its rewritten form."""
		if isinstance(expr, C.Lam):
			return self._classify_boundary(
				expr.body, lambda body: C.Lam(expr.params, expr.effect, body, loc=expr.loc)
			)
		if isinstance(expr, C.TypeLam):
			return self._classify_boundary(expr.body, lambda body: C.TypeLam(expr.tvars, body, loc=expr.loc))
		if isinstance(expr, C.TypeApp):
			# Type application is erased at run time; it may wrap anything.
			return map_expr(lambda body: C.TypeApp(body, expr.targs, loc=expr.loc), self.classify(expr.body))
		if isinstance(expr, C.Let):
			return self._classify_let(expr)
		if isinstance(expr, C.Case):
			return self._classify_case(expr)
		if isinstance(expr, C.Return):
			self._trace("return")
			return Direct(self._absorb(expr.expr))
		if isinstance(expr, C.App):
			fn = self._absorb(expr.fn)
			args = tuple(self._absorb(a) for a in expr.args)
			if fn is expr.fn and all(new is old for new, old in zip(args, expr.args)):
				return Unchanged()
			return Unchanged(C.App(fn, args, loc=expr.loc))
		if isinstance(expr, (C.Var, C.Lit)):
			return Unchanged()
		raise NotImplementedError(f"UnreturnRewriter does not handle expr {type(expr).__name__}")

	def _classify_boundary(self, body: C.Expr, rebuild: Callable[[C.Expr], C.Expr]) -> Kont[C.Expr]:
		kbody = self.classify(body)
		if isinstance(kbody, Unchanged) and kbody.rewritten is None:
			return Unchanged()
		# Nothing follows a function body: materialize with the identity continuation.
		return Unchanged(rebuild(reconstruct(body, identity, kbody)))

	def _absorb(self, expr: C.Expr) -> C.Expr:
		"""
		Rewrite a position where lowering never puts a reachable exit.

		Function literals nested there are still rewritten; an exit that does
		reach such a position is left in place for `validate_unreturned` to report.
		"""
		k = self.classify(expr)
		if isinstance(k, Unchanged):
			return k.value_or(expr)
		self._trace("return in a position that cannot exit; left in place")
		return expr

	def _classify_let(self, expr: C.Let) -> Kont[C.Expr]:
		groups = expr.defgroups
		kgroups = [self.classify_def_group(g) for g in groups]

		def combine(group: C.DefGroup, body: C.Expr) -> C.Expr:
			return C.make_let((group,), body, loc=expr.loc)

		k = self.classify(expr.body)
		rest: C.Expr = expr.body
		for i in reversed(range(len(groups))):
			k = sequence(combine, groups[i], kgroups[i], rest, k)
			rest = C.Let(groups[i:], expr.body, loc=expr.loc)
		if not isinstance(k, Parametric):
			return k

		# The continuation ends up under every group of the chain.
		binders = {name for g in groups for name in C.def_group_names(g)}
		inner = k

		def build(cont: Cont) -> C.Expr:
			join: Optional[C.DefGroup] = None
			if self._captures(cont, binders):
				cont, join = self._share_continuation(cont)
			out = inner.resolve(cont)
			if join is None:
				return out
			return C.make_let((join,), out, loc=expr.loc)

		return Parametric(build)

	def _classify_case(self, expr: C.Case) -> Kont[C.Expr]:
		scrutinee = self._absorb(expr.scrutinee)
		rows: List[List[Tuple[C.Guard, C.Expr, Kont[C.Expr]]]] = []
		for branch in expr.branches:
			row = []
			for guard in branch.guards:
				row.append((guard, self._absorb(guard.test), self.classify(guard.expr)))
			rows.append(row)
		kinds = [k for row in rows for _, _, k in row]

		if all(isinstance(k, Unchanged) for k in kinds):
			changed = scrutinee is not expr.scrutinee or any(
				test is not guard.test or k.rewritten is not None  # type: ignore[union-attr]
				for row in rows
				for guard, test, k in row
			)
			if not changed:
				return Unchanged()
			return Unchanged(
				self._rebuild_case(
					expr,
					scrutinee,
					rows,
					lambda guard, k: k.value_or(guard.expr),  # type: ignore[union-attr]
				)
			)

		fallthrough = sum(1 for k in kinds if not isinstance(k, Direct))
		self._trace("case with exits (%d of %d tails fall through)", fallthrough, len(kinds))
		binders = {name for branch in expr.branches for name in pattern_vars(branch.pattern)}

		def build(cont: Cont) -> C.Expr:
			join: Optional[C.DefGroup] = None
			share = self.options.join_points and fallthrough > 1
			if not share and fallthrough:
				share = self._captures(cont, binders)
			if share:
				cont, join = self._share_continuation(cont)
			case = self._rebuild_case(
				expr,
				scrutinee,
				rows,
				lambda guard, k: reconstruct(guard.expr, cont, as_parametric(guard.expr, k)),
			)
			if join is None:
				return case
			return C.make_let((join,), case, loc=expr.loc)

		return Parametric(build)

	def _rebuild_case(
		self,
		expr: C.Case,
		scrutinee: C.Expr,
		rows: Sequence[Sequence[Tuple[C.Guard, C.Expr, Kont[C.Expr]]]],
		tail: Callable[[C.Guard, Kont[C.Expr]], C.Expr],
	) -> C.Case:
		branches = []
		for branch, row in zip(expr.branches, rows):
			guards = tuple(C.Guard(test, tail(guard, k)) for guard, test, k in row)
			branches.append(C.Branch(branch.pattern, guards, loc=branch.loc))
		return C.Case(scrutinee, tuple(branches), loc=expr.loc)

	def _captures(self, cont: Cont, binders: AbstractSet[str]) -> bool:
		"""True if placing `cont` under `binders` would rebind a name it uses."""
		if not binders:
			return False
		free = free_vars(cont(C.Var(_HOLE)))
		free.discard(_HOLE)
		clash = free & binders
		if clash:
			self._trace("continuation uses shadowed %s", sorted(clash))
		return bool(clash)

	def _share_continuation(self, cont: Cont) -> Tuple[Cont, Optional[C.DefGroup]]:
		"""
		Bind `cont` once as `k$n = fn(x$m) cont(x$m)`.

		Every tail then calls `k$n` in tail position. Identity-like
		continuations are returned as is.
		"""
		param = self.names.fresh("x")
		body = cont(C.Var(param))
		if body == C.Var(param):
			return cont, None
		name = self.names.fresh("k")
		self._trace("join point %s", name)
		join = C.DefNonRec(C.Def(name, C.Lam((param,), None, body)))
		return (lambda value: C.App(C.Var(name), (value,))), join

	# Definitions ---------------------------------------------------------

	def classify_def(self, defn: C.Def) -> Kont[C.Expr]:
		"""Classify a definition body (the definition itself is rebuilt by the caller)."""
		with self._within_def(defn.name):
			self._trace("enter")
			return self.classify(defn.expr)

	def classify_def_group(self, group: C.DefGroup) -> Kont[C.DefGroup]:
		"""
		Classify a definition group without forcing it.

		A non-recursive group propagates its body's classification so the
		enclosing `let` (or module) can sequence it with what follows. In a
		recursive group there is nothing to thread a continuation into: a member
		that always exits is an internal error, conditional exits are
		materialized in place.
		"""
		if isinstance(group, C.DefNonRec):
			defn = group.defn
			kexpr = self.classify_def(defn)
			return map_binding(lambda e: C.DefNonRec(C.Def(defn.name, e, loc=defn.loc)), kexpr)

		if isinstance(group, C.DefRec):
			kdefs = [self.classify_def(d) for d in group.defs]
			for defn, k in zip(group.defs, kdefs):
				if isinstance(k, Direct):
					raise ReturnInRecursiveGroupError(defn.name, ICELocation(defn.loc.file, defn.loc))
			if all(isinstance(k, Unchanged) and k.rewritten is None for k in kdefs):
				return Unchanged()
			defs = []
			for defn, k in zip(group.defs, kdefs):
				if isinstance(k, Parametric):
					with self._within_def(defn.name):
						self._trace("conditional return materialized in recursive group")
				# Nothing can be threaded into a recursive binding, so an exit taken
				# here becomes the member's value instead of leaving the enclosing
				# function. Meaning is not preserved for such members.
				body = reconstruct(defn.expr, identity, k)
				defs.append(defn if body is defn.expr else C.Def(defn.name, body, loc=defn.loc))
			return Unchanged(C.DefRec(tuple(defs)))

		raise NotImplementedError(f"UnreturnRewriter does not handle group {type(group).__name__}")


__all__ = ["UnreturnRewriter"]
