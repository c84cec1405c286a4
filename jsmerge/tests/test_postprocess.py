# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from jsmerge.postprocess import strip_module_wrapper


def test_kotlin_module_wrapper_is_stripped() -> None:
	text = (
		"(function (_, Kotlin) {\n"
		"  var x = 1;\n"
		"  return _;\n"
		"}(module.exports, require('kotlin')));\n"
	)
	assert strip_module_wrapper(text) == (
		"(function() {\n"
		"  var x = 1;\n"
		"  \n"
		"}());\n"
	)


def test_whitespace_variants_match() -> None:
	assert strip_module_wrapper("function(_,Kotlin)") == "function()"
	assert strip_module_wrapper("return   _;") == ""
	assert strip_module_wrapper("f(module.exports,\n  require(\"kotlin\"))") == "f()"


def test_substitutions_are_idempotent() -> None:
	text = "(function (_, Kotlin) { return _; }(module.exports, require('kotlin')));"
	once = strip_module_wrapper(text)
	assert strip_module_wrapper(once) == once


def test_text_without_patterns_is_unchanged() -> None:
	text = "var Kotlin = {};\nfunction f(_) {\n  return _ + 1;\n}\nmodule.exports = f;\n"
	assert strip_module_wrapper(text) == text


def test_other_arguments_are_not_touched() -> None:
	text = "function (a, Kotlin) { return a; }"
	assert strip_module_wrapper(text) == text
