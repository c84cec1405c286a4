# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source location attached to diagnostics and declarations.

Lines and columns are 1-based, matching what the JavaScript parser records on
its nodes (`lineno` / `colno`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Best-effort file/line/column of a parsed node."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None

	@classmethod
	def from_node(cls, node: Any, file: Optional[str] = None) -> "Span":
		"""
		Build a Span from a parser node.

		The node's own `sourcepath` wins over `file` when it has one, so nodes
		already re-anchored onto an original source keep pointing there.
		"""
		if node is None:
			return cls(file=file)
		return cls(
			file=getattr(node, "sourcepath", None) or file,
			line=getattr(node, "lineno", None),
			column=getattr(node, "colno", None),
		)

	def format_human(self) -> str:
		if self.file is None:
			return "<unknown>"
		if self.line is None:
			return self.file
		if self.column is None:
			return f"{self.file}:{self.line}"
		return f"{self.file}:{self.line}:{self.column}"


__all__ = ["Span"]
