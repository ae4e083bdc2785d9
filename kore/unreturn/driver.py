# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Module-level entry point of the unreturn pass.

Top-level groups are sequenced like the groups of a `let`: an exit that
escapes any of them has no enclosing function to absorb it and aborts the
pass. Conditional exits are materialized with the identity continuation.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from kore.core.internal_error import EscapingReturnError, ICELocation, ReturnAtTopLevelError
from kore.core.names import NameSupply
from kore.ir import core_nodes as C
from .kont import Direct, Kont, Parametric, Unchanged
from .options import UnreturnOptions
from .rewriter import UnreturnRewriter
from .validate import validate_unreturned

logger = logging.getLogger(__name__)


def process_definition_group(group: C.DefGroup, rewriter: Optional[UnreturnRewriter] = None) -> Kont[C.DefGroup]:
	"""Classify one definition group (see `UnreturnRewriter.classify_def_group`)."""
	return (rewriter or UnreturnRewriter()).classify_def_group(group)


def process_module(
	groups: Sequence[C.DefGroup],
	rewriter: UnreturnRewriter,
) -> Sequence[C.DefGroup]:
	"""
	Rewrite every top-level group.

	Returns `groups` itself when nothing needed rewriting, otherwise a new tuple.
	"""
	kgroups = [rewriter.classify_def_group(g) for g in groups]

	# The first group that always exits makes the whole module exit.
	for group, k in zip(groups, kgroups):
		if isinstance(k, Direct):
			defn = C.group_defs(group)[0]
			raise ReturnAtTopLevelError(defn.name, ICELocation(defn.loc.file, defn.loc))

	if all(isinstance(k, Unchanged) and k.rewritten is None for k in kgroups):
		logger.info("unreturn: %d definition groups, none rewritten", len(groups))
		return groups

	out = []
	rewritten = 0
	for group, k in zip(groups, kgroups):
		if isinstance(k, Unchanged):
			new_group = k.value_or(group)
		elif isinstance(k, Parametric):
			new_group = k.materialize()
		else:
			raise TypeError(f"unexpected classification {k!r}")
		if new_group is not group:
			rewritten += 1
		out.append(new_group)
	logger.info("unreturn: %d definition groups, %d rewritten", len(groups), rewritten)
	return tuple(out)


def unreturn(
	groups: Sequence[C.DefGroup],
	options: Optional[UnreturnOptions] = None,
	*,
	names: Optional[NameSupply] = None,
) -> Sequence[C.DefGroup]:
	"""
	Run the unreturn pass over one compilation unit.

	Raises `ReturnInRecursiveGroupError` / `ReturnAtTopLevelError` on exits
	that no function boundary can absorb, and (with `options.verify`)
	`EscapingReturnError` if any return is left outside a boundary.
	"""
	options = options or UnreturnOptions()
	rewriter = UnreturnRewriter(options, names)
	out = process_module(groups, rewriter)
	if options.verify:
		diags = validate_unreturned(out)
		if diags:
			first = diags[0]
			raise EscapingReturnError(f"unreturn: {first.message}", ICELocation(first.span.file, first.span))
	return out


__all__ = ["unreturn", "process_module", "process_definition_group"]
