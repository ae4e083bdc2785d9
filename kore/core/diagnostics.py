# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Non-fatal findings reported by the validator and the command-line driver.

Fatal pipeline violations are not diagnostics; those raise
`InternalCompilerError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .span import Span


@dataclass
class Diagnostic:
	message: str
	code: str | None = None
	phase: str | None = None  # "parser", "unreturn" or "validate"
	severity: str = "error"
	span: Optional[Span] = field(default_factory=Span)

	def __post_init__(self) -> None:
		if self.span is None:
			self.span = Span()

	def format_human(self) -> str:
		span = self.span or Span()
		where = f"{span}: " if span.line is not None else ""
		code = f"[{self.code}] " if self.code else ""
		return f"{where}{self.severity}: {code}{self.message}"

	def to_dict(self) -> dict:
		span = self.span or Span()
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": span.file,
			"line": span.line,
			"column": span.column,
		}


__all__ = ["Diagnostic"]
