# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Output check for the unreturn pass.

After unreturn, a `Return` may only remain as the entire body of a `Lam` or
`TypeLam`. Anything else would be re-targeted by a later pass that wraps code
in a new function.
"""

from __future__ import annotations

from typing import List, Sequence

from kore.core.diagnostics import Diagnostic
from kore.ir import core_nodes as C
from kore.ir.ir_utils import iter_returns


def validate_unreturned(groups: Sequence[C.DefGroup]) -> List[Diagnostic]:
	diags: List[Diagnostic] = []
	for group in groups:
		for defn in C.group_defs(group):
			for ret, at_boundary in iter_returns(defn.expr):
				if at_boundary:
					continue
				diags.append(
					Diagnostic(
						message=f"return outside a function boundary in definition '{defn.name}'",
						code="UNRET-ESCAPE",
						phase="validate",
						span=ret.loc,
					)
				)
	return diags


__all__ = ["validate_unreturned"]
