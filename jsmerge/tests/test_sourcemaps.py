# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
import sourcemap

from jsmerge.sourcemaps import (
	SourceMapParseError,
	embed_sources_content,
	load_input_map,
	path_key,
	remap_source_map,
	validate_source_map,
)


def _write_map(path: Path, obj: dict) -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(json.dumps(obj), encoding="utf-8")
	return path


def _input_map(tmp_path: Path):
	# line 0: col 0 -> orig 0:0, col 4 -> orig 0:4; line 1: col 0 -> orig 1:4
	return load_input_map(
		_write_map(
			tmp_path / "a.js.map",
			{
				"version": 3,
				"sources": ["orig.kt"],
				"names": [],
				"mappings": "AAAA,IAAI;AACA",
				"sourcesContent": ["fun main() {}"],
			},
		)
	)


def test_input_map_lookup_picks_closest_token_to_the_left(tmp_path: Path) -> None:
	m = _input_map(tmp_path)
	orig = str(tmp_path / "orig.kt")

	tok = m.lookup(0, 0)
	assert (tok.source, tok.line, tok.column) == (orig, 0, 0)
	tok = m.lookup(0, 6)
	assert (tok.source, tok.line, tok.column) == (orig, 0, 4)
	tok = m.lookup(1, 3)
	assert (tok.source, tok.line, tok.column) == (orig, 1, 4)
	assert m.lookup(2, 0) is None


def test_input_map_keeps_embedded_sources_content(tmp_path: Path) -> None:
	m = _input_map(tmp_path)
	assert m.sources_content == {path_key(tmp_path / "orig.kt"): "fun main() {}"}


def test_malformed_input_map_raises_parse_error(tmp_path: Path) -> None:
	bad = tmp_path / "bad.js.map"
	bad.write_text("{not json", encoding="utf-8")
	with pytest.raises(SourceMapParseError):
		load_input_map(bad)

	not_object = tmp_path / "list.js.map"
	not_object.write_text("[1, 2]", encoding="utf-8")
	with pytest.raises(SourceMapParseError):
		load_input_map(not_object)


def test_undecodable_input_map_bytes_raise_parse_error(tmp_path: Path) -> None:
	binary = tmp_path / "bin.js.map"
	binary.write_bytes(b"\xff\xfe{bad")
	with pytest.raises(SourceMapParseError):
		load_input_map(binary)


def test_remap_points_segments_at_original_sources(tmp_path: Path) -> None:
	input_map = _input_map(tmp_path)
	combined = {
		"version": 3,
		"file": "out.js",
		"sources": ["a.js", "w.js"],
		"names": [],
		# 0:0 -> a.js 0:0, 1:0 -> w.js 0:0, 2:2 -> a.js 0:4, 3:0 -> a.js 5:0 (unmapped upstream)
		"mappings": "AAAA;ACAA;EDAI;AAKJ",
	}
	out = remap_source_map(combined, tmp_path, {path_key(tmp_path / "a.js"): input_map})

	assert out["sources"] == ["orig.kt", "w.js"]
	index = sourcemap.loads(json.dumps(out))
	assert [(t.dst_line, t.dst_col, t.src, t.src_line, t.src_col) for t in index] == [
		(0, 0, "orig.kt", 0, 0),
		(1, 0, "w.js", 0, 0),
		(2, 2, "orig.kt", 0, 4),
	]


def test_remap_without_input_maps_is_identity(tmp_path: Path) -> None:
	combined = {"version": 3, "sources": ["a.js"], "names": [], "mappings": "AAAA"}
	assert remap_source_map(combined, tmp_path, {}) is combined


def test_sources_content_is_aligned_with_sources(tmp_path: Path) -> None:
	(tmp_path / "orig.kt").write_text("fun main() {}\n", encoding="utf-8")
	map_obj = {"version": 3, "sources": ["orig.kt", "gone.js", "emb.kt"], "names": [], "mappings": ""}

	out = embed_sources_content(map_obj, tmp_path, {path_key(tmp_path / "emb.kt"): "embedded"})
	assert out["sourcesContent"] == ["fun main() {}\n", None, "embedded"]
	assert "sourcesContent" not in map_obj


def test_remap_drops_every_segment_of_unmapped_files(tmp_path: Path) -> None:
	combined = {
		"version": 3,
		"file": "out.js",
		"sources": ["a.js", "w.js"],
		"names": [],
		"mappings": "AAAA;ACAA;EDAI;AAKJ",
	}
	out = remap_source_map(combined, tmp_path, {}, [path_key(tmp_path / "a.js")])

	assert out["sources"] == ["w.js"]
	index = sourcemap.loads(json.dumps(out))
	assert [(t.dst_line, t.dst_col, t.src) for t in index] == [(1, 0, "w.js")]


def test_undecodable_source_is_embedded_with_replacement_characters(tmp_path: Path) -> None:
	(tmp_path / "latin.kt").write_bytes(b"val s = \"caf\xe9\"\n")
	map_obj = {"version": 3, "sources": ["latin.kt"], "names": [], "mappings": ""}

	out = embed_sources_content(map_obj, tmp_path)
	assert out["sourcesContent"] == ["val s = \"caf\ufffd\"\n"]


def test_validator_marks_each_line() -> None:
	text = "var a;\nfoo();\n\nx = 1;\n    y();\n"
	map_text = json.dumps(
		{
			"version": 3,
			"sources": ["a.js"],
			"names": [],
			# 0:0, nothing on 1 and 2, 3:2, 4:4
			"mappings": "AAAA;;;EACA;IACA",
		}
	)
	out = io.StringIO()
	rows = validate_source_map(text, map_text, stream=out)

	assert [status for status, _ in rows] == ["  ", "$$", "  ", "@@", "  "]
	assert out.getvalue().splitlines() == [
		"/*    */ var a;",
		"/* $$ */ foo();",
		"/*    */ ",
		"/* @@ */ x = 1;",
		"/*    */     y();",
	]


def test_validator_prints_to_stdout_by_default(capsys: pytest.CaptureFixture[str]) -> None:
	validate_source_map("a();", json.dumps({"version": 3, "sources": [], "names": [], "mappings": ""}))
	assert capsys.readouterr().out == "/* $$ */ a();\n"
