# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
The merge pipeline: wrapper -> collected inputs -> printed bundle + map.

One linear pass. The only recoverable failure is a malformed per-file source
map, which becomes a diagnostic; everything else raises MergeError.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from io import StringIO
from pathlib import Path
from typing import Any

from calmjs.parse import io as jsio
from calmjs.parse.unparsers.es5 import pretty_printer

from jsmerge.collect import collect_files
from jsmerge.config import DEFAULT_INDENT, MergeOptions
from jsmerge.core.diagnostics import Diagnostic
from jsmerge.core.span import Span
from jsmerge.errors import MergeError
from jsmerge.names import ForwardReference, ProgramContext, fix_forward_name_references, parse_source
from jsmerge.postprocess import strip_module_wrapper
from jsmerge.sourcemaps import (
	InputSourceMap,
	SourceMapParseError,
	embed_sources_content,
	load_input_map,
	path_key,
	remap_source_map,
)
from jsmerge.wrapper import InsertionPlace, load_wrapper

SOURCE_MAP_SUFFIX = ".map"


@dataclass
class MergedFile:
	path: Path
	statement_count: int
	input_map: InputSourceMap | None = None
	map_invalid: bool = False  # sibling map present but undecodable
	forward_references: list[ForwardReference] = field(default_factory=list)
	diagnostics: list[Diagnostic] = field(default_factory=list)

	def to_dict(self) -> dict[str, Any]:
		return {
			"path": str(self.path),
			"statement_count": self.statement_count,
			"input_map": self.input_map.path if self.input_map is not None else None,
			"map_invalid": self.map_invalid,
			"forward_references": [r.to_dict() for r in self.forward_references],
		}


@dataclass(frozen=True)
class EmitResult:
	text: str  # printed program, before wrapper stripping
	map_text: str  # combined map JSON as built by the printer


@dataclass
class MergeReport:
	output_path: Path
	map_path: Path
	files: list[MergedFile] = field(default_factory=list)
	diagnostics: list[Diagnostic] = field(default_factory=list)
	program_text: str = ""  # bundle text without the sourceMappingURL footer
	map_text: str = ""  # final map JSON, as written

	@property
	def ok(self) -> bool:
		return not any(d.severity == "error" for d in self.diagnostics)

	def to_dict(self) -> dict[str, Any]:
		return {
			"ok": self.ok,
			"output_path": str(self.output_path),
			"map_path": str(self.map_path),
			"files": [f.to_dict() for f in self.files],
			"diagnostics": [d.to_dict() for d in self.diagnostics],
		}


def merge_file(path: Path, place: InsertionPlace, context: ProgramContext) -> MergedFile:
	"""
	Parse one input, resolve its names in the shared scope, load its sibling
	map if any, and append its statements at the insertion place.
	"""
	text = path.read_text(encoding="utf-8")
	program = parse_source(text, path, context)
	statements = list(program.children())
	for stmt in statements:
		stmt.sourcepath = str(path)

	names = fix_forward_name_references(statements, context.scope, path)
	merged = MergedFile(
		path=path,
		statement_count=len(statements),
		forward_references=names.forward_references,
		diagnostics=list(names.diagnostics),
	)

	map_path = path.with_name(path.name + SOURCE_MAP_SUFFIX)
	if map_path.is_file():
		try:
			merged.input_map = load_input_map(map_path)
		except SourceMapParseError as err:
			merged.map_invalid = True
			merged.diagnostics.append(
				Diagnostic(
					message=f"Error parsing source map file {map_path}: {err}",
					code="sourcemap-invalid",
					span=Span(file=str(map_path)),
				)
			)

	place.append(statements)
	return merged


def emit_program(program: Any, output_path: Path, map_path: Path, indent_str: str = DEFAULT_INDENT) -> EmitResult:
	"""
	Print `program` and build its source map in the same pass.

	Node `sourcepath`s decide which source each segment points at; the map's
	`sources` are relative to the map's directory.
	"""
	output = StringIO()
	output.name = str(output_path)
	mapping = StringIO()
	mapping.name = str(map_path)
	jsio.write(pretty_printer(indent_str), [program], output, mapping, source_mapping_url=None)
	return EmitResult(text=output.getvalue(), map_text=mapping.getvalue())


def source_mapping_footer(output_path: Path, map_path: Path) -> str:
	url = Path(os.path.relpath(map_path, output_path.parent)).as_posix()
	return f"//# sourceMappingURL={url}\n"


def merge_files(opts: MergeOptions) -> MergeReport:
	"""
	Run the whole pipeline and write the bundle and its map.

	Validation output is left to the caller (see validate_source_map).
	"""
	if not opts.wrapper_path.is_file():
		raise MergeError(
			reason_code="input-missing",
			message=f"wrapper file does not exist: {opts.wrapper_path}",
			path=str(opts.wrapper_path),
		)
	output_path = opts.output_path
	map_path = opts.resolved_map_path
	map_dir = os.path.dirname(os.path.abspath(map_path))

	context = ProgramContext(marker=opts.marker)
	wrapper = load_wrapper(opts.wrapper_path, context)
	report = MergeReport(output_path=output_path, map_path=map_path)
	report.diagnostics.extend(wrapper.diagnostics)

	input_maps: dict[str, InputSourceMap] = {}
	unmapped: list[str] = []
	embedded: dict[str, str | None] = {}
	for path in collect_files(opts.input_paths):
		merged = merge_file(path, wrapper.place, context)
		report.files.append(merged)
		report.diagnostics.extend(merged.diagnostics)
		if merged.input_map is not None:
			input_maps[path_key(path)] = merged.input_map
			embedded.update(merged.input_map.sources_content)
		elif merged.map_invalid:
			unmapped.append(path_key(path))

	emitted = emit_program(wrapper.program, output_path, map_path, opts.indent_str)
	text = strip_module_wrapper(emitted.text) if opts.strip_wrapper else emitted.text
	report.program_text = text

	# Both artifacts are fully built before either is written.
	map_obj = json.loads(emitted.map_text)
	map_obj = remap_source_map(map_obj, map_dir, input_maps, unmapped)
	map_obj = embed_sources_content(map_obj, map_dir, embedded)
	report.map_text = json.dumps(map_obj, indent=2, ensure_ascii=False)

	output_path.parent.mkdir(parents=True, exist_ok=True)
	output_path.write_text(text.rstrip("\n") + "\n" + source_mapping_footer(output_path, map_path), encoding="utf-8")
	map_path.parent.mkdir(parents=True, exist_ok=True)
	map_path.write_text(report.map_text + "\n", encoding="utf-8")
	return report


__all__ = [
	"EmitResult",
	"MergeReport",
	"MergedFile",
	"emit_program",
	"merge_file",
	"merge_files",
	"source_mapping_footer",
]
