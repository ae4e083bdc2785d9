# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
kore: a functional-language core IR and the unreturn normalization pass.

Pipeline placement:
  lowering (produces core with `return`) → [unreturn] → lambda lifting / specialization

Public API:
  - `unreturn(groups, options)`: rewrite definition groups so no early exit
    crosses a non-function boundary
  - `parse_program` / `format_program`: the textual core format
"""

from .ir.core_nodes import DefGroup
from .parser import parse_program, parse_expr, CoreParseError
from .ir.pretty import format_program, format_expr
from .unreturn import unreturn, UnreturnOptions

__all__ = [
	"DefGroup",
	"parse_program",
	"parse_expr",
	"CoreParseError",
	"format_program",
	"format_expr",
	"unreturn",
	"UnreturnOptions",
]
