# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reader for the textual core format (lark grammar → core nodes).
"""

import pytest

from kore.ir import core_nodes as C
from kore.parser import CoreParseError, parse_expr, parse_program


def test_parse_atoms():
	assert parse_expr("x") == C.Var("x")
	assert parse_expr("-12") == C.Lit(-12)
	assert parse_expr('"hi\\n"') == C.Lit("hi\n")
	assert parse_expr("true") == C.Lit(True)
	assert parse_expr("false") == C.Lit(False)


def test_parse_lambda_with_effect_and_application():
	e = parse_expr("(fn (x y) <exn> (f x y))")
	assert isinstance(e, C.Lam)
	assert e.params == ("x", "y")
	assert e.effect == "exn"
	assert e.body == C.App(C.Var("f"), (C.Var("x"), C.Var("y")))
	assert parse_expr("(fn () 1)") == C.Lam((), None, C.Lit(1))


def test_parse_type_abstraction_and_application():
	e = parse_expr("(tapp (tfn (a b) x) Int (Map k v))")
	assert isinstance(e, C.TypeApp)
	assert e.body == C.TypeLam(("a", "b"), C.Var("x"))
	assert e.targs == (C.TCon("Int"), C.TCon("Map", (C.TVar("k"), C.TVar("v"))))


def test_parse_let_chain_keeps_group_order():
	e = parse_expr("(let ((val a 1) (rec (f (fn (n) (f n)))) (val b (f a))) b)")
	assert isinstance(e, C.Let)
	assert [type(g) for g in e.defgroups] == [C.DefNonRec, C.DefRec, C.DefNonRec]
	assert [C.def_group_names(g) for g in e.defgroups] == [["a"], ["f"], ["b"]]
	assert e.body == C.Var("b")


def test_parse_case_patterns_and_guards():
	e = parse_expr("(case m [(Just (Pair x _)) | (lt x 0) -> (return 0) -> x] [Nothing -> 1] [7 -> 2] [\"s\" -> 3])")
	assert isinstance(e, C.Case)
	just, nothing, seven, s = e.branches
	assert just.pattern == C.PatCon("Just", (C.PatCon("Pair", (C.PatVar("x"), C.PatWild())),))
	assert just.guards[0].test == C.App(C.Var("lt"), (C.Var("x"), C.Lit(0)))
	assert just.guards[0].expr == C.Return(C.Lit(0))
	assert just.guards[1] == C.unguarded(C.Var("x"))
	assert nothing.pattern == C.PatCon("Nothing")
	assert seven.pattern == C.PatLit(7)
	assert s.pattern == C.PatLit("s")


def test_parse_program_groups_and_comments():
	groups = parse_program(
		"""
		; helpers
		(val one 1)
		(rec (even (fn (n) (odd n))) (odd (fn (n) (even n))))
		"""
	)
	assert len(groups) == 2
	assert groups[0] == C.DefNonRec(C.Def("one", C.Lit(1)))
	assert isinstance(groups[1], C.DefRec)
	assert [d.name for d in groups[1].defs] == ["even", "odd"]


def test_fresh_style_names_are_accepted():
	assert parse_expr("(k$1 x$2)") == C.App(C.Var("k$1"), (C.Var("x$2"),))


def test_spans_are_recorded():
	groups = parse_program("(val x\n  (return 0))", filename="m.core")
	ret = groups[0].defn.expr
	assert isinstance(ret, C.Return)
	assert ret.loc.file == "m.core"
	assert ret.loc.line == 2
	assert ret.loc.column == 3


def test_syntax_error_reports_position():
	with pytest.raises(CoreParseError) as info:
		parse_program("(val x (fn (a) )", filename="bad.core")
	err = info.value
	assert err.span.file == "bad.core"
	assert err.span.line == 1


def test_keywords_are_not_names():
	with pytest.raises(CoreParseError):
		parse_expr("(let x)")


def test_duplicate_recursive_member_is_rejected():
	with pytest.raises(CoreParseError, match="duplicate definition 'f'"):
		parse_program("(rec (f 1) (f 2))")
