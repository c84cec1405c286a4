# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Insertion-point lookup in the wrapper (shell) file.

The wrapper is ordinary JavaScript with one placeholder statement,
`insertContent();`. The walk stops at the first placeholder before the tree is
edited, so nothing is changed under a running traversal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from calmjs.parse import asttypes

from jsmerge.core.diagnostics import Diagnostic
from jsmerge.core.span import Span
from jsmerge.errors import MergeError
from jsmerge.names import ProgramContext, parse_source
from jsmerge.nodes import child_nodes, iter_nodes, statement_list


@dataclass
class InsertionPlace:
	"""
	Where merged statements go: a position inside one statement list of the
	wrapper tree. Statements appended later land after earlier ones.
	"""

	statements: list[Any]
	index: int
	count: int = 0

	def append(self, statements: Iterable[Any]) -> None:
		items = list(statements)
		at = self.index + self.count
		self.statements[at:at] = items
		self.count += len(items)

	def __len__(self) -> int:
		return self.count


@dataclass
class Wrapper:
	path: str
	program: Any
	place: InsertionPlace
	diagnostics: list[Diagnostic] = field(default_factory=list)


def is_insertion_marker(stmt: Any, marker: str) -> bool:
	"""True for `<marker>();`: a zero-argument call of an unqualified name."""
	if not isinstance(stmt, asttypes.ExprStatement):
		return False
	call = stmt.expr
	if not isinstance(call, asttypes.FunctionCall):
		return False
	args = getattr(call.args, "items", call.args)
	if args:
		return False
	callee = call.identifier
	return isinstance(callee, asttypes.Identifier) and callee.value == marker


def create_insertion_place(program: Any, marker: str, path: str | None = None) -> tuple[InsertionPlace, list[Diagnostic]]:
	"""
	Remove the first marker statement from `program` and return the insertion
	place that replaces it.

	Markers are searched in source order, descending into nested functions and
	blocks; a matched statement is not descended into. A marker that is the
	whole body of an if, loop or label is first wrapped in a block. Any later
	markers stay where they are and are reported.
	"""
	found = _locate_in(program.children(), marker)
	if found is None:
		raise MergeError(
			reason_code="marker-missing",
			message=f"wrapper has no '{marker}();' statement",
			path=path,
		)
	statements, index = found
	del statements[index]
	place = InsertionPlace(statements=statements, index=index)

	diagnostics: list[Diagnostic] = []
	for stmt in program.children():
		for node in iter_nodes(stmt):
			if is_insertion_marker(node, marker):
				diagnostics.append(
					Diagnostic(
						message=f"extra '{marker}();' statement left in place",
						code="marker-duplicate",
						span=Span.from_node(node, path),
					)
				)
	return place, diagnostics


def load_wrapper(path: Path, context: ProgramContext) -> Wrapper:
	text = path.read_text(encoding="utf-8")
	program = parse_source(text, path, context)
	place, diagnostics = create_insertion_place(program, context.marker, str(path))
	return Wrapper(path=str(path), program=program, place=place, diagnostics=diagnostics)


def _locate_in(statements: list[Any], marker: str) -> tuple[list[Any], int] | None:
	for index, stmt in enumerate(statements):
		if is_insertion_marker(stmt, marker):
			return statements, index
		found = _locate(stmt, marker)
		if found is not None:
			return found
	return None


def _locate(node: Any, marker: str) -> tuple[list[Any], int] | None:
	inner = statement_list(node)
	if inner is not None:
		return _locate_in(inner, marker)
	for child in child_nodes(node):
		if is_insertion_marker(child, marker):
			# A lone statement slot (if/loop body, label) has no list to splice
			# into; give it a block holding the marker.
			block = asttypes.Block([child])
			block.sourcepath = getattr(child, "sourcepath", None)
			block.lineno = getattr(child, "lineno", None)
			block.colno = getattr(child, "colno", None)
			_replace_child(node, child, block)
			return block.children(), 0
		found = _locate(child, marker)
		if found is not None:
			return found
	return None


def _replace_child(parent: Any, old: Any, new: Any) -> None:
	for name, value in vars(parent).items():
		if value is old:
			setattr(parent, name, new)
			return
	raise AssertionError(f"{type(old).__name__} is not an attribute of {type(parent).__name__}")


__all__ = ["InsertionPlace", "Wrapper", "create_insertion_place", "is_insertion_marker", "load_wrapper"]
