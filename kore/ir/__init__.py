# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Core IR package: node classes, walkers and the textual writer.
"""

from .core_nodes import (
	CNode,
	Type,
	TVar,
	TCon,
	Expr,
	Var,
	Lit,
	App,
	Lam,
	TypeLam,
	TypeApp,
	Let,
	Case,
	Return,
	Pattern,
	PatWild,
	PatVar,
	PatLit,
	PatCon,
	Guard,
	Branch,
	Def,
	DefGroup,
	DefNonRec,
	DefRec,
	DefGroups,
	TRUE,
	unguarded,
	group_defs,
	def_group_names,
	make_let,
)

__all__ = [
	"CNode",
	"Type",
	"TVar",
	"TCon",
	"Expr",
	"Var",
	"Lit",
	"App",
	"Lam",
	"TypeLam",
	"TypeApp",
	"Let",
	"Case",
	"Return",
	"Pattern",
	"PatWild",
	"PatVar",
	"PatLit",
	"PatCon",
	"Guard",
	"Branch",
	"Def",
	"DefGroup",
	"DefNonRec",
	"DefRec",
	"DefGroups",
	"TRUE",
	"unguarded",
	"group_defs",
	"def_group_names",
	"make_let",
]
