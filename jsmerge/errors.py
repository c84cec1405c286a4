# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from jsmerge.core.span import Span


@dataclass(frozen=True)
class MergeError(Exception):
	"""
	A fatal, structured error of the merge pipeline.

	Reason codes:
	- input-missing: a wrapper or input root does not exist
	- parse-error: the wrapper or an input file is not valid JavaScript
	- marker-missing: the wrapper has no insertion marker call
	"""

	reason_code: str
	message: str
	path: str | None = None
	span: Span | None = None

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"path": self.path,
			"span": self.span.format_human() if self.span is not None else None,
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.span is not None and self.span.line is not None:
			parts.append(f"at={self.span.format_human()}")
		elif self.path:
			parts.append(f"path={self.path}")
		return " ".join(parts)
