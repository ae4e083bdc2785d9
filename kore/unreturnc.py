# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command-line driver: read a core text file, run unreturn, print the result.

Exit codes: 0 success, 1 parse error, 2 internal compiler error.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from kore.core.diagnostics import Diagnostic
from kore.core.internal_error import InternalCompilerError
from kore.ir.pretty import format_program
from kore.parser import CoreParseError, parse_program
from kore.unreturn import UnreturnOptions, unreturn


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(
		prog="kore-unreturn",
		description="Eliminate early returns from core so later passes can introduce new functions",
	)
	p.add_argument("source", type=Path, help="Path to a core text file")
	p.add_argument("-o", "--output", type=Path, default=None, help="Write the rewritten core here (default: stdout)")
	p.add_argument(
		"--join-points",
		action="store_true",
		help="Bind continuations shared by several case branches to a local function instead of copying them",
	)
	p.add_argument(
		"--verify",
		action="store_true",
		help="Fail if any return is left outside a function boundary after the pass",
	)
	p.add_argument("--json", action="store_true", help="Emit diagnostics as JSON (phase/message/severity/file/line/column)")
	p.add_argument("-v", "--verbose", action="count", default=0, help="Log pass progress to stderr (-vv for tracing)")
	return p


def _configure_logging(verbosity: int) -> None:
	if verbosity <= 0:
		return
	level = logging.INFO if verbosity == 1 else logging.DEBUG
	logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")


def _report(diags: list[Diagnostic], exit_code: int, as_json: bool, program: str | None = None) -> int:
	if as_json:
		payload: dict = {"exit_code": exit_code, "diagnostics": [d.to_dict() for d in diags]}
		if program is not None:
			payload["program"] = program
		print(json.dumps(payload, sort_keys=True))
	else:
		for diag in diags:
			print(diag.format_human(), file=sys.stderr)
	return exit_code


def main(argv: list[str] | None = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)
	_configure_logging(args.verbose)

	source_path: Path = args.source
	try:
		text = source_path.read_text(encoding="utf-8")
	except OSError as err:
		p.error(f"cannot read {source_path}: {err}")

	try:
		groups = parse_program(text, filename=str(source_path))
	except CoreParseError as err:
		diag = Diagnostic(message=str(err), code="PARSE", phase="parser", span=err.span)
		return _report([diag], 1, args.json)

	opts = UnreturnOptions(join_points=bool(args.join_points), verify=bool(args.verify))
	try:
		out = unreturn(groups, opts)
	except InternalCompilerError as err:
		span = err.loc.span if err.loc is not None and err.loc.span is not None else None
		diag = Diagnostic(message=f"internal compiler error: {err.message}", code=err.code, phase="unreturn", span=span)
		return _report([diag], 2, args.json)

	rendered = format_program(out)
	if args.output is not None:
		args.output.write_text(rendered, encoding="utf-8")
	elif not args.json:
		sys.stdout.write(rendered)
	if args.json:
		return _report([], 0, True, None if args.output is not None else rendered)
	return 0


if __name__ == "__main__":
	sys.exit(main())
