# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_MARKER = "insertContent"
DEFAULT_OUTPUT = Path("dist") / "js" / "kotlin.js"
DEFAULT_INDENT = "  "


@dataclass(frozen=True)
class MergeOptions:
	wrapper_path: Path
	input_paths: list[Path] = field(default_factory=list)
	output_path: Path = DEFAULT_OUTPUT
	map_path: Path | None = None  # default: <output>.map
	marker: str = DEFAULT_MARKER
	indent_str: str = DEFAULT_INDENT
	validate: bool = True
	strip_wrapper: bool = True

	@property
	def resolved_map_path(self) -> Path:
		if self.map_path is not None:
			return self.map_path
		return self.output_path.with_name(self.output_path.name + ".map")
