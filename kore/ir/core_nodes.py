# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Core IR: the small explicit intermediate language of the functional backend.

Pipeline placement:
  surface AST → lowering → core (this file) → unreturn → lambda lifting → ...

The core is a closed sum of expression kinds. Early exit (`return` in the
surface language) is reified as the `Return` expression node; the unreturn
pass removes it from every position where a later stage could move it into a
freshly synthesized function.

Guiding rules:
- Nodes are immutable and tree-shaped; passes build new trees instead of
  mutating. A rewritten subtree that did not change is the *same object* as
  the input subtree.
- `Lam` and `TypeLam` are function boundaries: a `Return` inside them exits
  that function, not an enclosing one.
- Guard tests and case scrutinees never contain `Return` (lowering invariant).
- Source locations ride along in `loc` and never take part in equality.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple, Union

from kore.core.span import Span

LitValue = Union[int, str, bool]


class CNode:
	"""Base class for all core nodes."""
	pass


# Types are carried through the pass untouched.

class Type(CNode):
	pass


@dataclass(frozen=True)
class TVar(Type):
	name: str


@dataclass(frozen=True)
class TCon(Type):
	"""Type constructor, possibly applied (`List a` is `TCon("List", (TVar("a"),))`)."""
	name: str
	args: Tuple[Type, ...] = ()


# Expressions

class Expr(CNode):
	"""Base class for all core expressions."""
	pass


@dataclass(frozen=True)
class Var(Expr):
	name: str
	loc: Span = field(default_factory=Span, compare=False, repr=False)


@dataclass(frozen=True, eq=False)
class Lit(Expr):
	value: LitValue
	loc: Span = field(default_factory=Span, compare=False, repr=False)

	# `True == 1` in Python; literals of different kinds must stay distinct.
	def __eq__(self, other: object) -> bool:
		return isinstance(other, Lit) and type(other.value) is type(self.value) and other.value == self.value

	def __hash__(self) -> int:
		return hash((type(self.value), self.value))


@dataclass(frozen=True)
class App(Expr):
	fn: Expr
	args: Tuple[Expr, ...] = ()
	loc: Span = field(default_factory=Span, compare=False, repr=False)


@dataclass(frozen=True)
class Lam(Expr):
	"""Function literal; boundary for early exit."""
	params: Tuple[str, ...]
	effect: str | None
	body: Expr
	loc: Span = field(default_factory=Span, compare=False, repr=False)


@dataclass(frozen=True)
class TypeLam(Expr):
	"""Type abstraction; boundary for early exit (forced by `TypeApp`)."""
	tvars: Tuple[str, ...]
	body: Expr
	loc: Span = field(default_factory=Span, compare=False, repr=False)


@dataclass(frozen=True)
class TypeApp(Expr):
	body: Expr
	targs: Tuple[Type, ...]
	loc: Span = field(default_factory=Span, compare=False, repr=False)


@dataclass(frozen=True)
class Let(Expr):
	"""
	`let g1; g2; ... in body`.

	Groups scope sequentially: each group sees the ones before it, the body
	sees all of them.
	"""
	defgroups: Tuple["DefGroup", ...]
	body: Expr
	loc: Span = field(default_factory=Span, compare=False, repr=False)


@dataclass(frozen=True)
class Case(Expr):
	scrutinee: Expr
	branches: Tuple["Branch", ...]
	loc: Span = field(default_factory=Span, compare=False, repr=False)


@dataclass(frozen=True)
class Return(Expr):
	"""Early exit: abandon the enclosing function and produce `expr` as its result."""
	expr: Expr
	loc: Span = field(default_factory=Span, compare=False, repr=False)


# Patterns

class Pattern(CNode):
	pass


@dataclass(frozen=True)
class PatWild(Pattern):
	pass


@dataclass(frozen=True)
class PatVar(Pattern):
	name: str


@dataclass(frozen=True, eq=False)
class PatLit(Pattern):
	value: LitValue

	def __eq__(self, other: object) -> bool:
		return isinstance(other, PatLit) and type(other.value) is type(self.value) and other.value == self.value

	def __hash__(self) -> int:
		return hash((type(self.value), self.value))


@dataclass(frozen=True)
class PatCon(Pattern):
	name: str
	args: Tuple[Pattern, ...] = ()


# Case branches

@dataclass(frozen=True)
class Guard(CNode):
	"""`| test -> expr`; an unguarded alternative has test `Lit(True)`."""
	test: Expr
	expr: Expr


@dataclass(frozen=True)
class Branch(CNode):
	"""A pattern plus guards tried in order; the first passing guard selects its expr."""
	pattern: Pattern
	guards: Tuple[Guard, ...]
	loc: Span = field(default_factory=Span, compare=False, repr=False)


# Definitions

@dataclass(frozen=True)
class Def(CNode):
	name: str
	expr: Expr
	loc: Span = field(default_factory=Span, compare=False, repr=False)


class DefGroup(CNode):
	"""Base class for definition groups."""
	pass


@dataclass(frozen=True)
class DefNonRec(DefGroup):
	defn: Def


@dataclass(frozen=True)
class DefRec(DefGroup):
	"""Mutually recursive definitions; no relative evaluation order."""
	defs: Tuple[Def, ...]


DefGroups = Tuple[DefGroup, ...]

TRUE = Lit(True)


def unguarded(expr: Expr) -> Guard:
	"""Guard that always selects `expr`."""
	return Guard(test=TRUE, expr=expr)


def group_defs(group: DefGroup) -> Tuple[Def, ...]:
	"""Definitions of a group, in source order."""
	if isinstance(group, DefNonRec):
		return (group.defn,)
	if isinstance(group, DefRec):
		return group.defs
	raise TypeError(f"unexpected definition group {type(group).__name__}")


def def_group_names(group: DefGroup) -> list[str]:
	return [d.name for d in group_defs(group)]


def make_let(defgroups: Tuple[DefGroup, ...], body: Expr, loc: Span | None = None) -> Expr:
	"""
	Build `let defgroups in body`, flattening a directly nested `Let`.

	`let g in (let h in b)` and `let g; h in b` scope identically, so the
	flattened form is the canonical one. No groups means just `body`.
	"""
	if not defgroups:
		return body
	if isinstance(body, Let):
		return Let(tuple(defgroups) + body.defgroups, body.body, loc=loc or Span())
	return Let(tuple(defgroups), body, loc=loc or Span())


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
	"LitValue",
	"TRUE",
	"unguarded",
	"group_defs",
	"def_group_names",
	"make_let",
]
