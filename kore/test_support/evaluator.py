# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reference evaluator for core programs (test oracle).

Semantics:
  - call-by-value, lexical scope, types erased;
  - `return e` aborts to the nearest enclosing `Lam` call (or `TypeLam`
    instantiation) with the value of `e`;
  - an exit that reaches a top-level definition raises `EscapedReturn`;
  - capitalized unbound names are data constructors; a few integer/boolean
    builtins are predefined.

Running a program before and after unreturn must give the same results; the
rewritten program must never need the exit machinery outside a boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from kore.ir import core_nodes as C

Env = Dict[str, Any]


class EvalError(RuntimeError):
	"""Stuck program (unbound name, no matching branch, bad application)."""


class EscapedReturn(RuntimeError):
	"""A return reached module scope."""

	def __init__(self, value: Any) -> None:
		super().__init__(f"return escaped to top level with {value!r}")
		self.value = value


class _Exit(Exception):
	def __init__(self, value: Any) -> None:
		super().__init__()
		self.value = value


@dataclass(frozen=True)
class ConValue:
	name: str
	args: tuple = ()


@dataclass
class Closure:
	params: tuple[str, ...]
	body: C.Expr
	env: Env

	def __repr__(self) -> str:
		return f"<fn/{len(self.params)}>"


@dataclass
class TypeClosure:
	body: C.Expr
	env: Env


@dataclass(frozen=True)
class Builtin:
	name: str
	fn: Callable[..., Any]


BUILTINS: Mapping[str, Builtin] = {
	"add": Builtin("add", lambda a, b: a + b),
	"sub": Builtin("sub", lambda a, b: a - b),
	"mul": Builtin("mul", lambda a, b: a * b),
	"eq": Builtin("eq", lambda a, b: a == b),
	"lt": Builtin("lt", lambda a, b: a < b),
	"not": Builtin("not", lambda a: not a),
}


class Evaluator:
	def __init__(self, max_depth: int = 500) -> None:
		self._max_depth = max_depth
		self._depth = 0
		# Number of `return` nodes executed (for asserting the rewrite removed them).
		self.exits_taken = 0

	# Programs ------------------------------------------------------------

	def run_program(self, groups: Sequence[C.DefGroup]) -> Env:
		env: Env = {}
		for group in groups:
			try:
				env = self._bind_group(group, env)
			except _Exit as ex:
				raise EscapedReturn(ex.value) from None
		return env

	# Expressions ---------------------------------------------------------

	def eval(self, expr: C.Expr, env: Env) -> Any:
		if isinstance(expr, C.Lit):
			return expr.value
		if isinstance(expr, C.Var):
			return self._lookup(expr.name, env)
		if isinstance(expr, C.Lam):
			return Closure(expr.params, expr.body, env)
		if isinstance(expr, C.TypeLam):
			return TypeClosure(expr.body, env)
		if isinstance(expr, C.TypeApp):
			value = self.eval(expr.body, env)
			if isinstance(value, TypeClosure):
				return self._enter(value.body, value.env)
			return value
		if isinstance(expr, C.App):
			fn = self.eval(expr.fn, env)
			args = [self.eval(a, env) for a in expr.args]
			return self.apply(fn, args)
		if isinstance(expr, C.Let):
			for group in expr.defgroups:
				env = self._bind_group(group, env)
			return self.eval(expr.body, env)
		if isinstance(expr, C.Case):
			return self._eval_case(expr, env)
		if isinstance(expr, C.Return):
			value = self.eval(expr.expr, env)
			self.exits_taken += 1
			raise _Exit(value)
		raise EvalError(f"cannot evaluate {type(expr).__name__}")

	def apply(self, fn: Any, args: list) -> Any:
		if isinstance(fn, Closure):
			if len(fn.params) != len(args):
				raise EvalError(f"arity mismatch: expected {len(fn.params)} arguments, got {len(args)}")
			env = dict(fn.env)
			env.update(zip(fn.params, args))
			return self._enter(fn.body, env)
		if isinstance(fn, Builtin):
			return fn.fn(*args)
		if isinstance(fn, ConValue) and not fn.args:
			return ConValue(fn.name, tuple(args))
		raise EvalError(f"cannot apply {fn!r}")

	def _enter(self, body: C.Expr, env: Env) -> Any:
		"""Evaluate a function body; this is where exits land."""
		self._depth += 1
		if self._depth > self._max_depth:
			raise EvalError("evaluation too deep")
		try:
			return self.eval(body, env)
		except _Exit as ex:
			return ex.value
		finally:
			self._depth -= 1

	def _lookup(self, name: str, env: Env) -> Any:
		if name in env:
			return env[name]
		if name in BUILTINS:
			return BUILTINS[name]
		if name[:1].isupper():
			return ConValue(name)
		raise EvalError(f"unbound name {name!r}")

	def _bind_group(self, group: C.DefGroup, env: Env) -> Env:
		if isinstance(group, C.DefNonRec):
			value = self.eval(group.defn.expr, env)
			new_env = dict(env)
			new_env[group.defn.name] = value
			return new_env
		if isinstance(group, C.DefRec):
			new_env = dict(env)
			# Closures capture `new_env` itself, so members see each other.
			for d in group.defs:
				new_env[d.name] = self.eval(d.expr, new_env)
			return new_env
		raise EvalError(f"cannot bind {type(group).__name__}")

	def _eval_case(self, expr: C.Case, env: Env) -> Any:
		value = self.eval(expr.scrutinee, env)
		for branch in expr.branches:
			binds = match_pattern(branch.pattern, value)
			if binds is None:
				continue
			branch_env = dict(env)
			branch_env.update(binds)
			for guard in branch.guards:
				if self.eval(guard.test, branch_env) is True:
					return self.eval(guard.expr, branch_env)
		raise EvalError(f"no branch matched {value!r}")


def match_pattern(pattern: C.Pattern, value: Any) -> Optional[Env]:
	if isinstance(pattern, C.PatWild):
		return {}
	if isinstance(pattern, C.PatVar):
		return {pattern.name: value}
	if isinstance(pattern, C.PatLit):
		if type(value) is type(pattern.value) and value == pattern.value:
			return {}
		return None
	if isinstance(pattern, C.PatCon):
		if not isinstance(value, ConValue) or value.name != pattern.name or len(value.args) != len(pattern.args):
			return None
		binds: Env = {}
		for sub, arg in zip(pattern.args, value.args):
			sub_binds = match_pattern(sub, arg)
			if sub_binds is None:
				return None
			binds.update(sub_binds)
		return binds
	raise EvalError(f"cannot match {type(pattern).__name__}")


def run_main(groups: Sequence[C.DefGroup], *args: Any, entry: str = "main") -> Any:
	"""Run a program and call its `entry` function with `args`."""
	evaluator = Evaluator()
	env = evaluator.run_program(groups)
	fn = env[entry]
	if not args and not isinstance(fn, Closure):
		return fn
	return evaluator.apply(fn, list(args))


__all__ = [
	"ConValue",
	"Closure",
	"TypeClosure",
	"Builtin",
	"BUILTINS",
	"EvalError",
	"EscapedReturn",
	"Evaluator",
	"match_pattern",
	"run_main",
]
