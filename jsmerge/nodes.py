# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Small traversal helpers over `calmjs.parse` AST nodes.
"""

from __future__ import annotations

from typing import Any, Iterator

from calmjs.parse import asttypes


def child_nodes(node: Any) -> list[Any]:
	return [child for child in node.children() if isinstance(child, asttypes.Node)]


def iter_nodes(node: Any) -> Iterator[Any]:
	"""Pre-order walk of `node` and everything below it, in source order."""
	stack = [node]
	while stack:
		current = stack.pop()
		yield current
		stack.extend(reversed(child_nodes(current)))


def statement_list(node: Any) -> list[Any] | None:
	"""
	Return the mutable statement list held by `node`, if it has one.

	Function bodies and switch clauses keep theirs in `elements`; blocks keep
	theirs as their children list.
	"""
	elements = getattr(node, "elements", None)
	if isinstance(elements, list):
		return elements
	if isinstance(node, asttypes.Block):
		return node.children()
	return None


def is_function(node: Any) -> bool:
	return isinstance(node, (asttypes.FuncDecl, asttypes.FuncExpr))


__all__ = ["child_nodes", "iter_nodes", "statement_list", "is_function"]
