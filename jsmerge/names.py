# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared parse context and the bundle's top-level name scope.

Every file merged into one bundle ends up in the same JavaScript scope. The
context is created once per run and handed to every parse call; nothing here
is module-global, so two runs (or two tests) never see each other's names.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator

from calmjs.parse import asttypes, es5
from calmjs.parse.exceptions import ECMASyntaxError

from jsmerge.config import DEFAULT_MARKER
from jsmerge.core.diagnostics import Diagnostic
from jsmerge.core.span import Span
from jsmerge.errors import MergeError
from jsmerge.nodes import child_nodes, is_function


@dataclass(frozen=True)
class Declaration:
	name: str
	kind: str  # "function" | "var"
	span: Span


@dataclass(frozen=True)
class ForwardReference:
	"""A use of `name` that appears before its (hoisted) declaration."""

	name: str
	span: Span
	declaration: Declaration

	def to_dict(self) -> dict[str, Any]:
		return {
			"name": self.name,
			"at": self.span.format_human(),
			"declared_at": self.declaration.span.format_human(),
		}


class ProgramScope:
	"""Top-level declarations of the merged bundle, first declaration wins."""

	def __init__(self) -> None:
		self._decls: dict[str, Declaration] = {}

	def declare(self, decl: Declaration) -> Declaration | None:
		"""Record `decl`; return the earlier declaration if the name was taken."""
		prev = self._decls.get(decl.name)
		if prev is None:
			self._decls[decl.name] = decl
		return prev

	def lookup(self, name: str) -> Declaration | None:
		return self._decls.get(name)

	def names(self) -> list[str]:
		return list(self._decls)

	def __contains__(self, name: object) -> bool:
		return name in self._decls

	def __len__(self) -> int:
		return len(self._decls)


@dataclass
class ProgramContext:
	"""State shared by every parse of one merge run."""

	scope: ProgramScope = field(default_factory=ProgramScope)
	parser: Callable[[str], Any] = field(default_factory=lambda: es5)
	marker: str = DEFAULT_MARKER


@dataclass
class NameResolution:
	declarations: list[Declaration] = field(default_factory=list)
	forward_references: list[ForwardReference] = field(default_factory=list)
	diagnostics: list[Diagnostic] = field(default_factory=list)


def parse_source(text: str, path: str | Path, context: ProgramContext) -> Any:
	"""
	Parse JavaScript `text` read from `path` with the run's parser.

	The returned program carries `sourcepath`, which the printer uses to
	attribute emitted text to its file in the combined source map.
	"""
	try:
		program = context.parser(text)
	except ECMASyntaxError as err:
		raise MergeError(reason_code="parse-error", message=f"cannot parse {path}: {err}", path=str(path)) from err
	program.sourcepath = str(path)
	return program


def fix_forward_name_references(statements: list[Any], scope: ProgramScope, path: str | Path) -> NameResolution:
	"""
	Hoist the top-level declarations of `statements` into `scope` and resolve
	references against them.

	Declarations are collected before any reference is looked at, so a use that
	precedes its declaration in the concatenated text still binds to it; such
	uses are reported as forward references. A name already declared by an
	earlier file keeps its first declaration and yields a `redeclared-name`
	warning.
	"""
	path = str(path)
	res = NameResolution()
	local: dict[str, Declaration] = {}
	for decl in _top_level_declarations(statements, path):
		if decl.name in local:
			continue
		local[decl.name] = decl
		res.declarations.append(decl)

	known_before = {name for name in local if name in scope}
	for stmt in statements:
		for ident in _iter_references(stmt):
			decl = local.get(ident.value)
			if decl is None or ident.value in known_before:
				continue
			span = Span.from_node(ident, path)
			if _precedes(span, decl.span):
				res.forward_references.append(ForwardReference(name=ident.value, span=span, declaration=decl))

	for decl in res.declarations:
		prev = scope.declare(decl)
		if prev is not None and prev.span.file != decl.span.file:
			res.diagnostics.append(
				Diagnostic(
					message=f"'{decl.name}' is already declared at top level",
					code="redeclared-name",
					span=decl.span,
					notes=[f"first declared at {prev.span.format_human()}"],
				)
			)
	return res


def _precedes(a: Span, b: Span) -> bool:
	if a.line is None or b.line is None:
		return False
	return (a.line, a.column or 0) < (b.line, b.column or 0)


def _top_level_declarations(statements: Iterable[Any], path: str) -> Iterator[Declaration]:
	# `var` is function-scoped: look through blocks but not into nested functions.
	stack = list(reversed(list(statements)))
	while stack:
		node = stack.pop()
		if isinstance(node, asttypes.FuncDecl):
			if node.identifier is not None:
				yield Declaration(name=node.identifier.value, kind="function", span=Span.from_node(node.identifier, path))
			continue
		if isinstance(node, asttypes.FuncExpr):
			continue
		if isinstance(node, asttypes.VarDecl):
			yield Declaration(name=node.identifier.value, kind="var", span=Span.from_node(node.identifier, path))
		stack.extend(reversed(child_nodes(node)))


def _function_locals(func: Any) -> frozenset[str]:
	names = {p.value for p in func.parameters or [] if isinstance(p, asttypes.Identifier)}
	if isinstance(func, asttypes.FuncExpr) and func.identifier is not None:
		names.add(func.identifier.value)
	names.update(decl.name for decl in _top_level_declarations(func.elements, ""))
	return frozenset(names)


def _iter_references(node: Any) -> Iterator[Any]:
	# Identifiers that may name a top-level binding: property keys and names
	# bound by an enclosing function or catch clause are skipped.
	stack: list[tuple[Any, frozenset[str]]] = [(node, frozenset())]
	while stack:
		current, bound = stack.pop()
		if isinstance(current, asttypes.PropIdentifier):
			continue
		if isinstance(current, asttypes.Identifier):
			if current.value not in bound:
				yield current
			continue
		if isinstance(current, asttypes.DotAccessor):
			children = [current.node]
		elif is_function(current):
			bound = bound | _function_locals(current)
			children = list(current.elements)
		elif isinstance(current, asttypes.Catch):
			bound = bound | {current.identifier.value}
			children = [current.elements]
		elif isinstance(current, asttypes.VarDecl):
			children = [current.initializer]
		else:
			children = current.children()
		stack.extend((c, bound) for c in reversed(children) if isinstance(c, asttypes.Node))


__all__ = [
	"DEFAULT_MARKER",
	"Declaration",
	"ForwardReference",
	"NameResolution",
	"ProgramContext",
	"ProgramScope",
	"fix_forward_name_references",
	"parse_source",
]
