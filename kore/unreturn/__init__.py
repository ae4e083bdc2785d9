# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Unreturn pass: eliminate early exits from pure control structure.

Public API:
  - `unreturn(groups, options)`: module entry point
  - `UnreturnRewriter`: per-expression classifier / rewriter
  - `kont`: exit classifications and their combinators
  - `validate_unreturned`: output invariant check
"""

from .options import UnreturnOptions
from .kont import Kont, Unchanged, Direct, Parametric
from .rewriter import UnreturnRewriter
from .driver import unreturn, process_module, process_definition_group
from .validate import validate_unreturned

__all__ = [
	"UnreturnOptions",
	"Kont",
	"Unchanged",
	"Direct",
	"Parametric",
	"UnreturnRewriter",
	"unreturn",
	"process_module",
	"process_definition_group",
	"validate_unreturned",
]
