# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Fresh binder names for rewriting passes.

Each compilation unit owns one `NameSupply`; passes that need temporaries take
the supply from their rewriter instead of consulting process-wide state, so
independent units can be processed in isolation and tests see deterministic
names after `reset()`.
"""

from __future__ import annotations

# Upstream lowering never produces names containing this separator.
FRESH_SEPARATOR = "$"


class NameSupply:
	"""Deterministic generator of `<prefix>$<n>` names, unique within a unit."""

	def __init__(self, start: int = 0) -> None:
		self._start = start
		self._counter = start

	def fresh(self, prefix: str = "t") -> str:
		"""Return a name never returned before by this supply (until `reset`)."""
		self._counter += 1
		return f"{prefix}{FRESH_SEPARATOR}{self._counter}"

	def reset(self) -> None:
		"""Restart numbering; call between independent compilation units."""
		self._counter = self._start

	@property
	def issued(self) -> int:
		return self._counter - self._start


__all__ = ["NameSupply", "FRESH_SEPARATOR"]
