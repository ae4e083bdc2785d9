# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by IR nodes and diagnostics.

Core programs mostly arrive from the lowering stage without positions; spans
are populated when a program is read from the textual core format.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None

	@classmethod
	def from_loc(cls, loc: Any, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a parser location object (lark `Token` or tree `Meta`).

		Objects without position data (an empty `Meta`, None) yield the unknown
		span so callers never have to special-case them.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			return loc
		if getattr(loc, "empty", False):
			return cls(file=file)
		return cls(
			file=file,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
		)

	def __str__(self) -> str:
		if self.line is None:
			return self.file or "<unknown>"
		return f"{self.file or '<input>'}:{self.line}:{self.column or 0}"


__all__ = ["Span"]
