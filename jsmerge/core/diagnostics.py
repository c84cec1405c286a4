# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for the merge pipeline.

Soft failures (a malformed input map, a redeclared top-level name) are
reported as diagnostics and never abort the run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a pipeline diagnostic (warning/note)."""

	message: str
	code: str | None = None
	severity: str = "warning"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def to_dict(self) -> dict[str, Any]:
		return {
			"code": self.code,
			"severity": self.severity,
			"message": self.message,
			"span": self.span.format_human(),
			"notes": list(self.notes),
		}

	def format_human(self) -> str:
		if self.code == "sourcemap-invalid":
			text = self.message
		else:
			text = f"{self.span.format_human()}: {self.severity}: {self.message}"
		for note in self.notes:
			text += f"\n  note: {note}"
		return text
