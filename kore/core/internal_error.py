# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Internal compiler errors (ICE): compiler bugs / violated pipeline invariants.

Not for user mistakes (those are `Diagnostic`s). Codes used by this package:

  ICE-0101  early exit in a recursive definition group
  ICE-0102  early exit escaping to module top level
  ICE-0103  continuation-taking classification resolved twice
  ICE-0104  early exit left outside a function boundary after unreturn
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .span import Span


@dataclass(frozen=True)
class ICELocation:
	filename: Optional[str]
	span: Optional[Span]


class InternalCompilerError(RuntimeError):
	"""ICE = compiler bug / violated pipeline invariant."""

	code = "ICE-9999"

	def __init__(self, message: str, loc: ICELocation | None = None):
		super().__init__(message)
		self.message = message
		self.loc = loc

	def format(self) -> str:
		message = self.message
		if "[ICE-" not in message:
			message = f"[{self.code}] {message}"
		if self.loc and self.loc.filename:
			span = self.loc.span
			if span is not None and span.line is not None:
				return f"{self.loc.filename}:{span.line}:{span.column}: internal compiler error: {message}"
			return f"{self.loc.filename}: internal compiler error: {message}"
		return f"internal compiler error: {message}"


class ReturnInRecursiveGroupError(InternalCompilerError):
	"""A member of a recursive definition group unconditionally exits."""

	code = "ICE-0101"

	def __init__(self, def_name: str, loc: ICELocation | None = None):
		super().__init__(
			f"unreturn: return occurred in recursive definition group (definition '{def_name}')",
			loc,
		)
		self.def_name = def_name


class ReturnAtTopLevelError(InternalCompilerError):
	"""An early exit escapes to module scope where no function can absorb it."""

	code = "ICE-0102"

	def __init__(self, def_name: str, loc: ICELocation | None = None):
		super().__init__(
			f"unreturn: return occurred in toplevel definition group (definition '{def_name}')",
			loc,
		)
		self.def_name = def_name


class ContinuationReusedError(InternalCompilerError):
	code = "ICE-0103"


class EscapingReturnError(InternalCompilerError):
	code = "ICE-0104"


__all__ = [
	"ICELocation",
	"InternalCompilerError",
	"ReturnInRecursiveGroupError",
	"ReturnAtTopLevelError",
	"ContinuationReusedError",
	"EscapingReturnError",
]
