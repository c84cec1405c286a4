# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Text-level cleanup of the printed bundle.

These rules match generated text, not the AST, so they only hold for the
exact shape the Kotlin/JS module wrapper prints in:

	(function (_, Kotlin) { ... return _; }(module.exports, require('kotlin')));

After rewriting, the wrapper becomes a no-argument immediately-invoked
function. Columns after a removed span shift left; the combined source map is
built before this step and is not adjusted.
"""

from __future__ import annotations

import re

WRAPPER_SUBSTITUTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
	(re.compile(r"module\.exports,\s*require\([^)]+\)"), ""),
	(re.compile(r"function\s*\(_,\s*Kotlin\)"), "function()"),
	(re.compile(r"return\s+_;"), ""),
)


def strip_module_wrapper(text: str) -> str:
	"""Apply the wrapper substitutions in order; idempotent."""
	for pattern, replacement in WRAPPER_SUBSTITUTIONS:
		text = pattern.sub(replacement, text)
	return text


__all__ = ["WRAPPER_SUBSTITUTIONS", "strip_module_wrapper"]
