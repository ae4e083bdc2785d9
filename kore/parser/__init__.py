# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Textual core format reader (lark grammar in `grammar.lark`)."""

from .parser import parse_program, parse_expr, CoreParseError

__all__ = ["parse_program", "parse_expr", "CoreParseError"]
