# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared helpers for tests: a reference evaluator for core programs and small
builders that keep test data readable.
"""

from __future__ import annotations

from typing import Sequence

from kore.ir import core_nodes as C
from kore.parser import parse_expr, parse_program
from .evaluator import ConValue, EscapedReturn, EvalError, Evaluator, run_main


def program(source: str) -> tuple[C.DefGroup, ...]:
	"""Parse a core program fixture."""
	return parse_program(source)


def val(name: str, body: C.Expr | str) -> C.DefNonRec:
	"""`(val name body)` with `body` given as a node or as core text."""
	if isinstance(body, str):
		body = parse_expr(body)
	return C.DefNonRec(C.Def(name, body))


def rec(**members: C.Expr | str) -> C.DefRec:
	defs = []
	for name, body in members.items():
		if isinstance(body, str):
			body = parse_expr(body)
		defs.append(C.Def(name, body))
	return C.DefRec(tuple(defs))


def def_body(groups: Sequence[C.DefGroup], name: str) -> C.Expr:
	"""Body of the top-level definition `name`."""
	for group in groups:
		for d in C.group_defs(group):
			if d.name == name:
				return d.expr
	raise KeyError(name)


__all__ = [
	"program",
	"val",
	"rec",
	"def_body",
	"ConValue",
	"EscapedReturn",
	"EvalError",
	"Evaluator",
	"run_main",
]
