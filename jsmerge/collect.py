# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path
from typing import Iterable

from jsmerge.errors import MergeError

JS_SUFFIX = ".js"


def collect_files(roots: Iterable[Path]) -> list[Path]:
	"""
	Collect `.js` files under the given roots, in concatenation order.

	Roots are visited in the order given. Directories are walked depth-first with
	entries sorted by name at every level, so a subdirectory's files appear at
	the subdirectory's sorted position among its siblings.
	"""
	out: list[Path] = []
	for root in roots:
		root = Path(root)
		if not root.exists():
			raise MergeError(reason_code="input-missing", message=f"input path does not exist: {root}", path=str(root))
		_collect(root, out)
	return out


def _collect(path: Path, out: list[Path]) -> None:
	if path.is_dir():
		for child in sorted(path.iterdir(), key=lambda p: p.name):
			_collect(child, out)
	elif path.suffix == JS_SUFFIX:
		out.append(path)


__all__ = ["collect_files", "JS_SUFFIX"]
