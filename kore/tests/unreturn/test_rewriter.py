# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Per-node rules of the unreturn rewriter.

Inputs are written in the textual core format and expected outputs compared
in the same format, which keeps the shape of each rewrite visible.
"""

from kore.core.names import NameSupply
from kore.ir import core_nodes as C
from kore.ir.pretty import format_expr
from kore.parser import parse_expr
from kore.unreturn.kont import Direct, Parametric, Unchanged, identity, reconstruct
from kore.unreturn.rewriter import UnreturnRewriter


def rewrite(src: str) -> str:
	"""Classify an expression and materialize it as a function body would be."""
	e = parse_expr(src)
	k = UnreturnRewriter().classify(e)
	return format_expr(reconstruct(e, identity, k))


def test_atoms_and_calls_are_unchanged():
	rw = UnreturnRewriter()
	for src in ("x", "42", '"s"', "(f x (g y))"):
		k = rw.classify(parse_expr(src))
		assert isinstance(k, Unchanged)
		assert k.rewritten is None


def test_return_is_direct():
	k = UnreturnRewriter().classify(parse_expr("(return (f x))"))
	assert isinstance(k, Direct)
	assert k.expr == parse_expr("(f x)")


def test_lambda_absorbs_exit_and_stays_unchanged():
	e = parse_expr("(fn (b) (case b [true -> 7] [false -> (return 42)]))")
	k = UnreturnRewriter().classify(e)
	assert isinstance(k, Unchanged)
	assert format_expr(k.rewritten) == "(fn (b) (case b [true -> 7] [false -> 42]))"


def test_lambda_whose_body_is_a_return():
	assert rewrite("(fn (x) (return x))") == "(fn (x) x)"


def test_type_lambda_absorbs_exit():
	e = parse_expr("(tfn (a) (let ((val y (return 1))) y))")
	k = UnreturnRewriter().classify(e)
	assert isinstance(k, Unchanged)
	assert format_expr(k.rewritten) == "(tfn (a) 1)"


def test_exit_free_lambda_is_returned_verbatim():
	e = parse_expr("(fn (x) (let ((val y (f x))) (case y [0 -> 1] [_ -> y])))")
	k = UnreturnRewriter().classify(e)
	assert isinstance(k, Unchanged)
	assert k.rewritten is None
	assert reconstruct(e, identity, k) is e


def test_type_application_maps_over_classification():
	k = UnreturnRewriter().classify(parse_expr("(tapp (return 3) Int)"))
	assert isinstance(k, Direct)
	assert format_expr(k.expr) == "(tapp 3 Int)"


def test_let_with_exit_in_binding_threads_body_into_fallthrough():
	assert rewrite("(let ((val r (case s [A -> (return 1)] [B -> (f x)]))) (g r))") == (
		"(case s [A -> 1] [B -> (let ((val r (f x))) (g r))])"
	)


def test_let_with_direct_binding_drops_the_rest():
	k = UnreturnRewriter().classify(parse_expr("(let ((val a (return 1)) (val b (f a))) (g b))"))
	assert isinstance(k, Direct)
	assert k.expr == C.Lit(1)


def test_let_with_direct_body_keeps_bindings_around_exit_value():
	k = UnreturnRewriter().classify(parse_expr("(let ((val a (f x))) (return (g a)))"))
	assert isinstance(k, Direct)
	assert format_expr(k.expr) == "(let ((val a (f x))) (g a))"


def test_let_chain_with_several_exits():
	src = (
		"(let ((val a (case (lt n 0) [true -> (return 0)] [false -> n])) (val b (mul a 2)))"
		" (case (eq b 10) [true -> (return 100)] [false -> (add b 1)]))"
	)
	assert rewrite(src) == (
		"(case (lt n 0) [true -> 0] [false -> (let ((val a n) (val b (mul a 2)))"
		" (case (eq b 10) [true -> 100] [false -> (add b 1)]))])"
	)


def test_case_all_unchanged_is_unchanged():
	k = UnreturnRewriter().classify(parse_expr("(case x [0 -> a] [_ | (p x) -> b -> c])"))
	assert isinstance(k, Unchanged)
	assert k.rewritten is None


def test_case_with_exit_is_parametric_and_distributes_continuation():
	e = parse_expr("(case x [0 -> (return a)] [1 | (p x) -> b -> c] [_ -> d])")
	k = UnreturnRewriter().classify(e)
	assert isinstance(k, Parametric)
	out = k.resolve(lambda v: C.App(C.Var("k"), (v,)))
	assert format_expr(out) == "(case x [0 -> a] [1 | (p x) -> (k b) -> (k c)] [_ -> (k d)])"


def test_case_with_only_exits_never_uses_continuation():
	e = parse_expr("(case x [0 -> (return a)] [_ -> (return b)])")
	k = UnreturnRewriter().classify(e)
	out = k.resolve(lambda v: C.App(C.Var("k"), (v,)))
	assert format_expr(out) == "(case x [0 -> a] [_ -> b])"


def test_nested_case_inside_branch():
	src = "(let ((val y (case x [(Just v) -> (case v [0 -> (return 0)] [_ -> v])] [Nothing -> 1]))) (h y))"
	assert rewrite(src) == (
		"(case x [(Just v) -> (case v [0 -> 0] [_ -> (let ((val y v)) (h y))])]"
		" [Nothing -> (let ((val y 1)) (h y))])"
	)


def test_lambda_in_call_argument_is_rewritten():
	e = parse_expr("(map xs (fn (x) (case x [0 -> (return 1)] [_ -> x])))")
	k = UnreturnRewriter().classify(e)
	assert isinstance(k, Unchanged)
	assert format_expr(k.rewritten) == "(map xs (fn (x) (case x [0 -> 1] [_ -> x])))"


def test_exit_in_non_exit_position_is_left_in_place():
	e = parse_expr("(f (return 1))")
	k = UnreturnRewriter().classify(e)
	assert isinstance(k, Unchanged)
	assert k.rewritten is None


def test_recursive_group_materializes_conditional_exit():
	e = parse_expr("(let ((rec (v (case n [0 -> (return 1)] [_ -> 2])))) v)")
	k = UnreturnRewriter().classify(e)
	assert isinstance(k, Unchanged)
	assert format_expr(k.rewritten) == "(let ((rec (v (case n [0 -> 1] [_ -> 2])))) v)"


def test_recursive_group_of_lambdas_rewrites_members():
	e = parse_expr(
		"(let ((rec (f (fn (n) (case n [0 -> (return 0)] [_ -> (g n)]))) (g (fn (n) (f (sub n 1)))))) (f 3))"
	)
	k = UnreturnRewriter().classify(e)
	assert isinstance(k, Unchanged)
	group = k.rewritten.defgroups[0]
	assert isinstance(group, C.DefRec)
	assert format_expr(group.defs[0].expr) == "(fn (n) (case n [0 -> 0] [_ -> (g n)]))"
	# Untouched members are kept as the same objects.
	assert group.defs[1] is e.defgroups[0].defs[1]


def test_continuation_shadowed_by_pattern_is_bound_outside():
	assert rewrite("(let ((val y 10) (val x (case m [(Just y) -> y] [_ -> (return 0)]))) (add x y))") == (
		"(let ((val y 10) (val k$2 (fn (x$1) (let ((val x x$1)) (add x y)))))"
		" (case m [(Just y) -> (k$2 y)] [_ -> 0]))"
	)


def test_continuation_shadowed_by_inner_let_is_bound_outside():
	assert rewrite("(let ((val y 10) (val z (let ((val y 1)) (case n [0 -> (return 0)] [_ -> y])))) (add z y))") == (
		"(let ((val y 10) (val k$2 (fn (x$1) (let ((val z x$1)) (add z y)))) (val y 1))"
		" (case n [0 -> 0] [_ -> (k$2 y)]))"
	)


def test_pattern_binder_unused_by_continuation_is_left_alone():
	names = NameSupply()
	e = parse_expr("(let ((val x (case m [(Just y) -> y] [_ -> (return 0)]))) (add x 1))")
	out = reconstruct(e, identity, UnreturnRewriter(names=names).classify(e))
	assert format_expr(out) == "(case m [(Just y) -> (let ((val x y)) (add x 1))] [_ -> 0])"
	assert names.issued == 0
