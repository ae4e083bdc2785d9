# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reader for the textual core format.

The grammar lives next to this file (`grammar.lark`) and is parsed with lark's
LALR parser; `_build_*` helpers turn the parse tree into `core_nodes`.
Identifier conventions are resolved here, not in the grammar:
  - capitalized names in patterns are constructors (`Nothing`, `(Just x)`),
  - lower-case names in types are type variables.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from kore.core.span import Span
from kore.ir import core_nodes as C

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()


class CoreParseError(ValueError):
	"""
	User-facing syntax error in a core text file.

	The CLI turns this into a parser-phase diagnostic (it is not an internal
	compiler bug).
	"""

	def __init__(self, message: str, *, span: Span | None = None) -> None:
		super().__init__(message)
		self.span = span or Span()


_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)

_EXPR_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="expr",
	propagate_positions=True,
	maybe_placeholders=False,
)


def parse_program(source: str, filename: Optional[str] = None) -> Tuple[C.DefGroup, ...]:
	"""Parse a whole core program into its top-level definition groups."""
	tree = _parse(_PARSER, source, filename)
	return tuple(_Builder(filename).build_group(child) for child in _trees(tree))


def parse_expr(source: str, filename: Optional[str] = None) -> C.Expr:
	"""Parse a single core expression (handy for fixtures and the REPL)."""
	tree = _parse(_EXPR_PARSER, source, filename)
	return _Builder(filename).build_expr(tree)


def _parse(parser: Lark, source: str, filename: Optional[str]) -> Tree:
	try:
		return parser.parse(source)
	except UnexpectedInput as err:
		span = Span(file=filename, line=getattr(err, "line", None), column=getattr(err, "column", None))
		raise CoreParseError(_describe(err), span=span) from err


def _describe(err: UnexpectedInput) -> str:
	token = getattr(err, "token", None)
	if token is not None:
		if token.type == "$END":
			return "unexpected end of input"
		return f"unexpected token {str(token)!r}"
	char = getattr(err, "char", None)
	if char is not None:
		return f"unexpected character {char!r}"
	return "syntax error"


def _trees(tree: Tree) -> List[Tree]:
	return [c for c in tree.children if isinstance(c, Tree)]


def _name(tree: Tree) -> str:
	return str(tree.data)


def _decode_string(tok: Token) -> str:
	"""STRING tokens use JSON escapes (the writer emits them with `json.dumps`)."""
	try:
		return json.loads(tok.value)
	except ValueError as err:
		raise CoreParseError(f"invalid string literal {tok.value}", span=Span.from_loc(tok)) from err


class _Builder:
	"""Parse tree → core nodes for one input file."""

	def __init__(self, filename: Optional[str]) -> None:
		self._file = filename

	def _loc(self, node: object) -> Span:
		return Span.from_loc(getattr(node, "meta", node), file=self._file)

	def build_group(self, tree: Tree) -> C.DefGroup:
		kind = _name(tree)
		if kind == "nonrec":
			name_tok, expr_tree = tree.children
			return C.DefNonRec(C.Def(str(name_tok), self.build_expr(expr_tree), loc=self._loc(tree)))
		if kind == "rec":
			defs = []
			for member in _trees(tree):
				name_tok, expr_tree = member.children
				defs.append(C.Def(str(name_tok), self.build_expr(expr_tree), loc=self._loc(member)))
			names = [d.name for d in defs]
			dupes = sorted({n for n in names if names.count(n) > 1})
			if dupes:
				raise CoreParseError(
					f"duplicate definition {dupes[0]!r} in recursive group", span=self._loc(tree)
				)
			return C.DefRec(tuple(defs))
		raise CoreParseError(f"unexpected definition form {kind}", span=self._loc(tree))

	def build_expr(self, tree: Tree) -> C.Expr:
		kind = _name(tree)
		loc = self._loc(tree)
		kids = tree.children
		if kind == "var":
			return C.Var(str(kids[0]), loc=loc)
		if kind == "int_lit":
			return C.Lit(int(kids[0]), loc=loc)
		if kind == "str_lit":
			return C.Lit(_decode_string(kids[0]), loc=loc)
		if kind == "true_lit":
			return C.Lit(True, loc=loc)
		if kind == "false_lit":
			return C.Lit(False, loc=loc)
		if kind == "lam":
			params = tuple(str(k) for k in kids if isinstance(k, Token))
			subtrees = _trees(tree)
			effect = None
			if len(subtrees) == 2:
				effect = str(subtrees[0].children[0])
			return C.Lam(params, effect, self.build_expr(subtrees[-1]), loc=loc)
		if kind == "type_lam":
			tvars = tuple(str(k) for k in kids if isinstance(k, Token))
			return C.TypeLam(tvars, self.build_expr(_trees(tree)[-1]), loc=loc)
		if kind == "type_app":
			body, *targs = _trees(tree)
			return C.TypeApp(self.build_expr(body), tuple(self.build_type(t) for t in targs), loc=loc)
		if kind == "let":
			*groups, body = _trees(tree)
			return C.Let(tuple(self.build_group(g) for g in groups), self.build_expr(body), loc=loc)
		if kind == "case":
			scrut, *branches = _trees(tree)
			return C.Case(self.build_expr(scrut), tuple(self.build_branch(b) for b in branches), loc=loc)
		if kind == "ret":
			return C.Return(self.build_expr(kids[0]), loc=loc)
		if kind == "app":
			fn, *args = _trees(tree)
			return C.App(self.build_expr(fn), tuple(self.build_expr(a) for a in args), loc=loc)
		raise CoreParseError(f"unexpected expression form {kind}", span=loc)

	def build_branch(self, tree: Tree) -> C.Branch:
		pat, *guards = _trees(tree)
		return C.Branch(self.build_pattern(pat), tuple(self.build_guard(g) for g in guards), loc=self._loc(tree))

	def build_guard(self, tree: Tree) -> C.Guard:
		if _name(tree) == "plain_guard":
			return C.unguarded(self.build_expr(tree.children[0]))
		test, expr = tree.children
		return C.Guard(self.build_expr(test), self.build_expr(expr))

	def build_pattern(self, tree: Tree) -> C.Pattern:
		kind = _name(tree)
		kids = tree.children
		if kind == "pwild":
			return C.PatWild()
		if kind == "pname":
			name = str(kids[0])
			if name[:1].isupper():
				return C.PatCon(name)
			return C.PatVar(name)
		if kind == "pint":
			return C.PatLit(int(kids[0]))
		if kind == "pstr":
			return C.PatLit(_decode_string(kids[0]))
		if kind == "ptrue":
			return C.PatLit(True)
		if kind == "pfalse":
			return C.PatLit(False)
		if kind == "pcon":
			head, *args = kids
			return C.PatCon(str(head), tuple(self.build_pattern(a) for a in args))
		raise CoreParseError(f"unexpected pattern form {kind}", span=self._loc(tree))

	def build_type(self, tree: Tree) -> C.Type:
		kind = _name(tree)
		if kind == "tname":
			name = str(tree.children[0])
			if name[:1].islower():
				return C.TVar(name)
			return C.TCon(name)
		head, *args = tree.children
		return C.TCon(str(head), tuple(self.build_type(a) for a in args))


__all__ = ["parse_program", "parse_expr", "CoreParseError"]
