# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Writer for the textual core format (the inverse of `kore.parser`).

Output is a single line per top-level group; `parse_program(format_program(p))`
reproduces `p` up to source locations.
"""

from __future__ import annotations

import json
from typing import Sequence

from . import core_nodes as C


def format_lit(value: C.LitValue) -> str:
	if isinstance(value, bool):
		return "true" if value else "false"
	if isinstance(value, int):
		return str(value)
	return json.dumps(value)


def format_type(ty: C.Type) -> str:
	if isinstance(ty, C.TVar):
		return ty.name
	if isinstance(ty, C.TCon):
		if not ty.args:
			return ty.name
		return "(" + " ".join([ty.name, *(format_type(a) for a in ty.args)]) + ")"
	raise TypeError(f"unexpected type {type(ty).__name__}")


def format_pattern(pat: C.Pattern) -> str:
	if isinstance(pat, C.PatWild):
		return "_"
	if isinstance(pat, C.PatVar):
		return pat.name
	if isinstance(pat, C.PatLit):
		return format_lit(pat.value)
	if isinstance(pat, C.PatCon):
		if not pat.args:
			return pat.name
		return "(" + " ".join([pat.name, *(format_pattern(a) for a in pat.args)]) + ")"
	raise TypeError(f"unexpected pattern {type(pat).__name__}")


def format_guard(guard: C.Guard) -> str:
	if guard.test == C.TRUE:
		return f"-> {format_expr(guard.expr)}"
	return f"| {format_expr(guard.test)} -> {format_expr(guard.expr)}"


def format_expr(expr: C.Expr) -> str:
	if isinstance(expr, C.Var):
		return expr.name
	if isinstance(expr, C.Lit):
		return format_lit(expr.value)
	if isinstance(expr, C.App):
		return "(" + " ".join([format_expr(expr.fn), *(format_expr(a) for a in expr.args)]) + ")"
	if isinstance(expr, C.Lam):
		eff = f" <{expr.effect}>" if expr.effect else ""
		return f"(fn ({' '.join(expr.params)}){eff} {format_expr(expr.body)})"
	if isinstance(expr, C.TypeLam):
		return f"(tfn ({' '.join(expr.tvars)}) {format_expr(expr.body)})"
	if isinstance(expr, C.TypeApp):
		targs = " ".join(format_type(t) for t in expr.targs)
		return f"(tapp {format_expr(expr.body)} {targs})"
	if isinstance(expr, C.Let):
		groups = " ".join(format_group(g) for g in expr.defgroups)
		return f"(let ({groups}) {format_expr(expr.body)})"
	if isinstance(expr, C.Case):
		branches = " ".join(
			"[" + " ".join([format_pattern(b.pattern), *(format_guard(g) for g in b.guards)]) + "]"
			for b in expr.branches
		)
		return f"(case {format_expr(expr.scrutinee)} {branches})"
	if isinstance(expr, C.Return):
		return f"(return {format_expr(expr.expr)})"
	raise TypeError(f"unexpected expression {type(expr).__name__}")


def format_group(group: C.DefGroup) -> str:
	if isinstance(group, C.DefNonRec):
		return f"(val {group.defn.name} {format_expr(group.defn.expr)})"
	if isinstance(group, C.DefRec):
		members = " ".join(f"({d.name} {format_expr(d.expr)})" for d in group.defs)
		return f"(rec {members})"
	raise TypeError(f"unexpected definition group {type(group).__name__}")


def format_program(groups: Sequence[C.DefGroup]) -> str:
	return "".join(format_group(g) + "\n" for g in groups)


__all__ = [
	"format_lit",
	"format_type",
	"format_pattern",
	"format_expr",
	"format_group",
	"format_program",
]
