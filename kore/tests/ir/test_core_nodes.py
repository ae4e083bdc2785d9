# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Core node helpers: equality ignores locations, literal kinds stay distinct,
`make_let` flattens directly nested lets.
"""

from kore.core.span import Span
from kore.ir import core_nodes as C
from kore.ir.ir_utils import contains_return, free_vars, iter_returns, pattern_vars
from kore.parser import parse_expr


def test_locations_do_not_affect_equality():
	assert C.Var("x", loc=Span(line=1, column=1)) == C.Var("x")
	assert hash(C.App(C.Var("f"), (C.Lit(1),))) == hash(C.App(C.Var("f"), (C.Lit(1),)))


def test_bool_and_int_literals_are_distinct():
	assert C.Lit(True) != C.Lit(1)
	assert C.Lit(0) != C.Lit(False)
	assert C.PatLit(True) != C.PatLit(1)
	assert C.Lit(True) == C.TRUE


def test_make_let_flattens_nested_let():
	g1 = C.DefNonRec(C.Def("a", C.Lit(1)))
	g2 = C.DefNonRec(C.Def("b", C.Var("a")))
	inner = C.Let((g2,), C.Var("b"))
	assert C.make_let((g1,), inner) == C.Let((g1, g2), C.Var("b"))
	assert C.make_let((), C.Var("b")) == C.Var("b")
	assert C.make_let((g1,), C.Var("a")) == C.Let((g1,), C.Var("a"))


def test_def_group_names():
	group = C.DefRec((C.Def("f", C.Var("g")), C.Def("g", C.Var("f"))))
	assert C.def_group_names(group) == ["f", "g"]
	assert C.def_group_names(C.DefNonRec(C.Def("x", C.Lit(0)))) == ["x"]


def test_group_defs_keeps_source_order():
	f = C.Def("f", C.Var("g"))
	g = C.Def("g", C.Var("f"))
	assert C.group_defs(C.DefRec((f, g))) == (f, g)
	assert C.group_defs(C.DefNonRec(f)) == (f,)


def test_iter_returns_flags_boundary_bodies():
	body_ret = C.Return(C.Lit(1))
	nested_ret = C.Return(C.Lit(2))
	lam = C.Lam(("x",), None, body_ret)
	case = C.Case(C.Var("x"), (C.Branch(C.PatWild(), (C.unguarded(nested_ret),)),))
	found = list(iter_returns(C.App(C.Var("f"), (lam, C.Lam((), None, case)))))
	assert (body_ret, True) in found
	assert (nested_ret, False) in found
	assert contains_return(lam)
	assert not contains_return(C.App(C.Var("f"), (C.Var("x"),)))


def test_pattern_vars_left_to_right():
	pat = C.PatCon("Pair", (C.PatVar("a"), C.PatCon("Just", (C.PatVar("b"),)), C.PatWild()))
	assert pattern_vars(pat) == ["a", "b"]
	assert pattern_vars(C.PatLit(3)) == []


def test_free_vars_respects_every_binder():
	e = parse_expr("(let ((val a (f x)) (rec (g (fn (n) (g a n))))) (case a [(Just y) | (p y) -> (h y z)]))")
	assert free_vars(e) == {"f", "x", "p", "h", "z"}
	assert free_vars(parse_expr("(fn (x) (add x y))")) == {"add", "y"}
	assert free_vars(parse_expr("(tapp (return q) Int)")) == {"q"}


def test_free_vars_let_groups_scope_sequentially():
	# `b` refers to the outer `a`; the body refers to the inner one.
	e = parse_expr("(let ((val b a) (val a 1)) (add a b))")
	assert free_vars(e) == {"a", "add"}
