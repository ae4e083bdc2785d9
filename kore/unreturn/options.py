# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UnreturnOptions:
	# Bind a non-trivial continuation once as a local function instead of
	# copying it into every fallthrough tail of a case.
	join_points: bool = False
	# Re-scan the output and raise if any return is left outside a function
	# boundary.
	verify: bool = False


__all__ = ["UnreturnOptions"]
