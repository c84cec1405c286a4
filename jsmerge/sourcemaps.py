# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source-map handling for the merged bundle.

- load_input_map: decode a per-file `<name>.js.map`
- remap_source_map: re-anchor combined-map segments that point into a
  generated input file onto that file's original sources
- embed_sources_content: make the combined map self-contained
- validate_source_map: per-line mapping status report

Lines and columns are 0-based here, as in the source-map format itself.
"""

from __future__ import annotations

import bisect
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, TextIO

from calmjs.parse.vlq import encode_mappings
import sourcemap
from sourcemap.exceptions import SourceMapDecodeError


class SourceMapParseError(ValueError):
	pass


@dataclass(frozen=True)
class MappingToken:
	generated_line: int
	generated_column: int
	source: str | None
	line: int
	column: int
	name: str | None = None


@dataclass
class InputSourceMap:
	"""A decoded input map, indexed by generated line."""

	path: str
	lines: dict[int, list[MappingToken]] = field(default_factory=dict)
	# Embedded `sourcesContent`, keyed by path_key() of the resolved source.
	sources_content: dict[str, str | None] = field(default_factory=dict)

	def lookup(self, line: int, column: int) -> MappingToken | None:
		"""Closest token at or left of (line, column) on the same generated line."""
		tokens = self.lines.get(line)
		if not tokens:
			return None
		columns = [t.generated_column for t in tokens]
		i = bisect.bisect_right(columns, column)
		if i == 0:
			return None
		return tokens[i - 1]


def path_key(path: str | Path) -> str:
	return os.path.normcase(os.path.abspath(str(path)))


def resolve_source(base_dir: str | Path, source: str) -> str:
	"""Resolve a map `sources` entry against the directory holding the map."""
	if "://" in source or os.path.isabs(source):
		return source
	return os.path.normpath(os.path.join(str(base_dir), source))


def relative_source(base_dir: str | Path, source: str) -> str:
	if "://" in source:
		return source
	return Path(os.path.relpath(source, str(base_dir))).as_posix()


def load_input_map(path: Path) -> InputSourceMap:
	"""
	Decode the map at `path`.

	Raises SourceMapParseError for anything that is not a decodable map.
	"""
	try:
		text = path.read_text(encoding="utf-8")
		raw = json.loads(text)
		if not isinstance(raw, dict):
			raise SourceMapParseError("source map must be a JSON object")
		index = sourcemap.loads(text)
		tokens = list(index)
	except SourceMapParseError:
		raise
	except (SourceMapDecodeError, OSError, ValueError, KeyError, TypeError, IndexError) as err:
		raise SourceMapParseError(str(err) or type(err).__name__) from err

	base_dir = os.path.dirname(str(path))
	out = InputSourceMap(path=str(path))
	for token in tokens:
		source = resolve_source(base_dir, token.src) if token.src is not None else None
		out.lines.setdefault(token.dst_line, []).append(
			MappingToken(
				generated_line=token.dst_line,
				generated_column=token.dst_col,
				source=source,
				line=token.src_line,
				column=token.src_col,
				name=token.name,
			)
		)
	for tokens_on_line in out.lines.values():
		tokens_on_line.sort(key=lambda t: t.generated_column)

	contents = raw.get("sourcesContent")
	if isinstance(contents, list):
		root = raw.get("sourceRoot") or ""
		for source, content in zip(raw.get("sources") or [], contents):
			if not isinstance(source, str):
				continue
			name = f"{root.rstrip('/')}/{source}" if root else source
			out.sources_content[path_key(resolve_source(base_dir, name))] = content
	return out


def remap_source_map(
	map_obj: dict[str, Any],
	map_dir: str | Path,
	input_maps: dict[str, InputSourceMap],
	unmapped: Iterable[str] = (),
) -> dict[str, Any]:
	"""
	Rewrite segments whose source is a generated input file that has its own
	map, so they point at that map's original source position instead.

	`input_maps` is keyed by path_key() of the generated file. Segments with no
	counterpart in the input map are dropped, as are all segments of the files
	in `unmapped` (also path_key()s). Sources that end up unreferenced
	disappear from `sources`.
	"""
	skipped = set(unmapped)
	if not input_maps and not skipped:
		return map_obj

	index = sourcemap.loads(json.dumps(map_obj))
	sources: list[str] = []
	source_ids: dict[str, int] = {}
	names: list[str] = list(map_obj.get("names") or [])
	name_ids: dict[str, int] = {}
	for i, name in enumerate(names):
		name_ids.setdefault(name, i)

	def source_id(source: str) -> int:
		if source not in source_ids:
			source_ids[source] = len(sources)
			sources.append(source)
		return source_ids[source]

	def name_id(name: str) -> int:
		if name not in name_ids:
			name_ids[name] = len(names)
			names.append(name)
		return name_ids[name]

	lines: dict[int, list[tuple[int, ...]]] = {}
	for token in index:
		if token.src is None:
			segment: tuple[int, ...] = (token.dst_col,)
		else:
			key = path_key(resolve_source(map_dir, token.src))
			if key in skipped:
				continue
			input_map = input_maps.get(key)
			if input_map is None:
				segment = (token.dst_col, source_id(token.src), token.src_line, token.src_col)
				name = token.name
			else:
				orig = input_map.lookup(token.src_line, token.src_col)
				if orig is None or orig.source is None:
					continue
				segment = (token.dst_col, source_id(relative_source(map_dir, orig.source)), orig.line, orig.column)
				name = orig.name or token.name
			if name is not None:
				segment += (name_id(name),)
		lines.setdefault(token.dst_line, []).append(segment)

	out = dict(map_obj)
	out.pop("sourcesContent", None)
	out["sources"] = sources
	out["names"] = names
	out["mappings"] = _encode_absolute(lines)
	return out


def _encode_absolute(lines: dict[int, list[tuple[int, ...]]]) -> str:
	# Segments hold absolute values; the format stores deltas.
	count = max(lines) + 1 if lines else 0
	groups: list[list[list[int]]] = []
	prev_source = prev_line = prev_column = prev_name = 0
	for line_no in range(count):
		group: list[list[int]] = []
		prev_gen_column = 0
		for segment in sorted(lines.get(line_no, []), key=lambda s: s[0]):
			rel = [segment[0] - prev_gen_column]
			prev_gen_column = segment[0]
			if len(segment) >= 4:
				rel += [segment[1] - prev_source, segment[2] - prev_line, segment[3] - prev_column]
				prev_source, prev_line, prev_column = segment[1], segment[2], segment[3]
			if len(segment) == 5:
				rel.append(segment[4] - prev_name)
				prev_name = segment[4]
			group.append(rel)
		groups.append(group)
	return encode_mappings(groups)


def embed_sources_content(
	map_obj: dict[str, Any],
	map_dir: str | Path,
	fallback: dict[str, str | None] | None = None,
) -> dict[str, Any]:
	"""
	Return a copy of `map_obj` with `sourcesContent` aligned to `sources`.

	Each source is read from disk when present; otherwise content embedded by
	an input map is used (`fallback`, keyed by path_key()); otherwise null.
	"""
	fallback = fallback or {}
	contents: list[str | None] = []
	for source in map_obj.get("sources") or []:
		resolved = resolve_source(map_dir, source)
		if os.path.isfile(resolved):
			with open(resolved, encoding="utf-8", errors="replace", newline="") as f:
				contents.append(f.read())
		else:
			contents.append(fallback.get(path_key(resolved)))
	out = dict(map_obj)
	out["sourcesContent"] = contents
	return out


# Validator status tags.
STATUS_OK = "  "
STATUS_UNMAPPED = "$$"
STATUS_LATE = "@@"


def validate_source_map(text: str, map_text: str, stream: TextIO | None = None) -> list[tuple[str, str]]:
	"""
	Print every line of `text` prefixed with its mapping status.

	`$$`: non-blank line without any segment. `@@`: the line's first segment
	starts after non-whitespace code. Blank and well-mapped lines get two
	spaces. Purely informational; returns the (status, line) rows.
	"""
	index = sourcemap.loads(map_text)
	first_columns: dict[int, int] = {}
	for token in index:
		col = first_columns.get(token.dst_line)
		if col is None or token.dst_col < col:
			first_columns[token.dst_line] = token.dst_col

	rows: list[tuple[str, str]] = []
	for line_no, line in enumerate(text.splitlines()):
		if not line.strip():
			status = STATUS_OK
		else:
			col = first_columns.get(line_no)
			if col is None:
				status = STATUS_UNMAPPED
			elif line[:col].strip():
				status = STATUS_LATE
			else:
				status = STATUS_OK
		rows.append((status, line))
		print(f"/* {status} */ {line}", file=stream)
	return rows


__all__ = [
	"InputSourceMap",
	"MappingToken",
	"SourceMapParseError",
	"embed_sources_content",
	"load_input_map",
	"path_key",
	"remap_source_map",
	"resolve_source",
	"validate_source_map",
]
