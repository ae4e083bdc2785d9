# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Core IR walkers shared by the unreturn validator and tests.
"""

from __future__ import annotations

from typing import AbstractSet, Iterator, Sequence

from . import core_nodes as C


def iter_returns(node: C.CNode, *, boundary_body: bool = False) -> Iterator[tuple[C.Return, bool]]:
	"""
	Yield every `Return` under `node` with a flag telling whether it is the
	whole body of a `Lam`/`TypeLam` (the one position where it may legally stay).
	"""
	if isinstance(node, C.Return):
		yield node, boundary_body
		yield from iter_returns(node.expr)
	elif isinstance(node, C.Lam):
		yield from iter_returns(node.body, boundary_body=True)
	elif isinstance(node, C.TypeLam):
		yield from iter_returns(node.body, boundary_body=True)
	elif isinstance(node, C.TypeApp):
		yield from iter_returns(node.body)
	elif isinstance(node, C.App):
		yield from iter_returns(node.fn)
		for arg in node.args:
			yield from iter_returns(arg)
	elif isinstance(node, C.Let):
		for group in node.defgroups:
			yield from iter_returns(group)
		yield from iter_returns(node.body)
	elif isinstance(node, C.Case):
		yield from iter_returns(node.scrutinee)
		for branch in node.branches:
			for guard in branch.guards:
				yield from iter_returns(guard.test)
				yield from iter_returns(guard.expr)
	elif isinstance(node, C.DefNonRec):
		yield from iter_returns(node.defn.expr)
	elif isinstance(node, C.DefRec):
		for d in node.defs:
			yield from iter_returns(d.expr)
	# Var / Lit carry no subexpressions.


def contains_return(node: C.CNode) -> bool:
	return next(iter_returns(node), None) is not None


def program_contains_return(groups: Sequence[C.DefGroup]) -> bool:
	return any(contains_return(g) for g in groups)


def pattern_vars(pattern: C.Pattern) -> list[str]:
	"""Variables bound by `pattern`, left to right."""
	if isinstance(pattern, C.PatVar):
		return [pattern.name]
	if isinstance(pattern, C.PatCon):
		names: list[str] = []
		for sub in pattern.args:
			names.extend(pattern_vars(sub))
		return names
	return []


def free_vars(node: C.CNode) -> set[str]:
	"""Names referenced under `node` that `node` does not bind itself."""
	out: set[str] = set()
	_collect_free(node, frozenset(), out)
	return out


def _collect_free(node: C.CNode, bound: AbstractSet[str], out: set[str]) -> None:
	if isinstance(node, C.Var):
		if node.name not in bound:
			out.add(node.name)
	elif isinstance(node, C.Lit):
		pass
	elif isinstance(node, C.App):
		_collect_free(node.fn, bound, out)
		for arg in node.args:
			_collect_free(arg, bound, out)
	elif isinstance(node, C.Lam):
		_collect_free(node.body, bound | set(node.params), out)
	elif isinstance(node, (C.TypeLam, C.TypeApp)):
		_collect_free(node.body, bound, out)
	elif isinstance(node, C.Return):
		_collect_free(node.expr, bound, out)
	elif isinstance(node, C.Let):
		for group in node.defgroups:
			bound = _collect_free_group(group, bound, out)
		_collect_free(node.body, bound, out)
	elif isinstance(node, C.Case):
		_collect_free(node.scrutinee, bound, out)
		for branch in node.branches:
			inner = bound | set(pattern_vars(branch.pattern))
			for guard in branch.guards:
				_collect_free(guard.test, inner, out)
				_collect_free(guard.expr, inner, out)
	elif isinstance(node, C.DefGroup):
		_collect_free_group(node, bound, out)
	else:
		raise TypeError(f"unexpected node {type(node).__name__}")


def _collect_free_group(group: C.DefGroup, bound: AbstractSet[str], out: set[str]) -> AbstractSet[str]:
	"""Collect free names of `group`; return the names in scope after it."""
	if isinstance(group, C.DefNonRec):
		_collect_free(group.defn.expr, bound, out)
		return bound | {group.defn.name}
	# Recursive members see each other.
	inner = bound | set(C.def_group_names(group))
	for d in C.group_defs(group):
		_collect_free(d.expr, inner, out)
	return inner


__all__ = ["iter_returns", "contains_return", "program_contains_return", "pattern_vars", "free_vars"]
