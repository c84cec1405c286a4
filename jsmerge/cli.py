# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import json
from pathlib import Path

from jsmerge.config import DEFAULT_INDENT, DEFAULT_MARKER, DEFAULT_OUTPUT, MergeOptions
from jsmerge.errors import MergeError
from jsmerge.merger import merge_files
from jsmerge.sourcemaps import validate_source_map


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(
		prog="jsmerge",
		description="Concatenate generated JavaScript into a wrapper file and merge their source maps",
	)
	p.add_argument("wrapper", type=Path, help="Wrapper JS file containing the insertion marker call")
	p.add_argument("roots", nargs="*", type=Path, help="JS files or directories to collect (recursively, sorted)")
	p.add_argument(
		"-o",
		"--output",
		type=Path,
		default=DEFAULT_OUTPUT,
		help=f"Bundle output path (default: ./{DEFAULT_OUTPUT.as_posix()})",
	)
	p.add_argument("--map", type=Path, default=None, help="Source map output path (default: <output>.map)")
	p.add_argument(
		"--marker",
		type=str,
		default=DEFAULT_MARKER,
		help=f"Name of the zero-argument marker call (default: {DEFAULT_MARKER})",
	)
	p.add_argument("--indent", type=str, default=DEFAULT_INDENT, help="Indent string for the printed bundle")
	p.add_argument("--no-validate", action="store_true", help="Do not print the per-line mapping report")
	p.add_argument(
		"--keep-wrapper",
		action="store_true",
		help="Keep the module wrapper arguments and `return _;` in the output",
	)
	p.add_argument(
		"--json",
		action="store_true",
		help="Emit a machine-readable JSON report instead of diagnostics and the mapping report",
	)
	return p


def main(argv: list[str] | None = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)
	opts = MergeOptions(
		wrapper_path=args.wrapper,
		input_paths=list(args.roots),
		output_path=args.output,
		map_path=args.map,
		marker=args.marker,
		indent_str=args.indent,
		validate=not bool(args.no_validate),
		strip_wrapper=not bool(args.keep_wrapper),
	)
	try:
		report = merge_files(opts)
	except MergeError as err:
		if args.json:
			print(json.dumps({"ok": False, "error": err.to_dict()}, sort_keys=True, separators=(",", ":")))
			return 2
		p.error(str(err))
		return 2

	if args.json:
		print(json.dumps(report.to_dict(), sort_keys=True, separators=(",", ":")))
		return 0 if report.ok else 2
	for diag in report.diagnostics:
		print(diag.format_human())
	if opts.validate:
		validate_source_map(report.program_text, report.map_text)
	return 0


if __name__ == "__main__":
	import sys
	sys.exit(main())
