# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
apyc: command-line front door of the compiler.

	apyc [entry ...] [--config apyconfig.json] [-o OUT_DIR] [--json] [--dump-ast PATH] [-v]

Entries and the output directory given on the command line override the
config file. Diagnostics go to stderr as `file:line:column: severity: message`,
or, with --json, into one JSON payload on stdout:

	{"exit_code": 1, "units": [{"source": ..., "output": ...}], "diagnostics": [...]}

Exit status: 0 without error diagnostics, 1 when some unit had errors, 2 for a
configuration fault (no entry, unreadable entry, bad config or grammar).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from apy.apyc.config import load_config
from apy.apyc.core.diagnostics import Diagnostic
from apy.apyc.core.span import Span
from apy.apyc.driver import CompileResult, compile_entries
from apy.apyc.dump import dump_ast
from apy.apyc.errors import MISSING_ENTRY, UNREADABLE_ENTRY, ApyError
from apy.apyc.frontend import load_units

EXIT_OK = 0
EXIT_UNIT_ERRORS = 1
EXIT_CONFIG_FAULT = 2


def _build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="apyc", description="Compile TypeScript sources to Python")
	parser.add_argument("entries", type=Path, nargs="*", help="Entry file(s); defaults to `entry` in apyconfig.json")
	parser.add_argument("--config", type=Path, help="Path to apyconfig.json (default: ./apyconfig.json when present)")
	parser.add_argument("-o", "--out-dir", type=Path, help="Output directory (default: `outDir` or ./out)")
	parser.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics as JSON (phase/code/message/severity/file/line/column)",
	)
	parser.add_argument("--dump-ast", type=Path, help="Write the parsed tree of every unit as JSON to this path")
	parser.add_argument("-v", "--verbose", action="store_true", help="Log compiler progress to stderr")
	return parser


def main(argv: Optional[List[str]] = None) -> int:
	parser = _build_parser()
	args = parser.parse_args(argv)
	# Diagnostics are printed below; library logging is only shown with -v.
	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.CRITICAL,
		format="%(levelname)s %(name)s: %(message)s",
	)

	try:
		config = load_config(args.config)
		entries: List[Path] = list(args.entries) or list(config.entries)
		if not entries:
			raise ApyError(MISSING_ENTRY, "no entry file given (pass one or set `entry` in apyconfig.json)")
		for entry in entries:
			if not entry.is_file():
				raise ApyError(UNREADABLE_ENTRY, f"entry file not found: {entry}", path=str(entry))
	except ApyError as err:
		return _config_fault(parser, err, args.json)

	out_dir = args.out_dir if args.out_dir is not None else config.resolved_out_dir
	result = compile_entries(
		entries,
		config.grammar,
		out_dir,
		base_url=config.base_url,
		paths=config.paths or None,
	)
	if args.dump_ast is not None:
		front = load_units(entries, grammar=config.grammar, base_url=config.base_url, paths=config.paths or None)
		dump_ast(front.units, args.dump_ast)

	exit_code = EXIT_OK if result.ok else EXIT_UNIT_ERRORS
	if args.json:
		print(json.dumps(_payload(result, exit_code)))
	else:
		for diag in result.diagnostics:
			print(diag.format_human(), file=sys.stderr)
	return exit_code


def _payload(result: CompileResult, exit_code: int) -> dict:
	return {
		"exit_code": exit_code,
		"units": [
			{
				"source": str(unit.source_path) if unit.source_path is not None else None,
				"output": str(unit.output_path) if unit.output_path is not None else None,
			}
			for unit in result.units
		],
		"diagnostics": [d.to_dict() for d in result.diagnostics],
	}


def _config_fault(parser: argparse.ArgumentParser, err: ApyError, as_json: bool) -> int:
	if as_json:
		diag = Diagnostic(
			message=err.message,
			code=err.reason_code,
			phase="config",
			severity="error",
			span=Span(file=err.path),
		)
		print(json.dumps({"exit_code": EXIT_CONFIG_FAULT, "units": [], "diagnostics": [diag.to_dict()]}))
	else:
		if err.reason_code == MISSING_ENTRY:
			parser.print_usage(sys.stderr)
		print(f"apyc: error: {err.format_human()}", file=sys.stderr)
	return EXIT_CONFIG_FAULT


if __name__ == "__main__":
	sys.exit(main())
