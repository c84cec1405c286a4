# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
jsmerge: concatenate generated JavaScript into a single bundle.

Modules:
  collect:     input file discovery
  wrapper:     insertion-point lookup in the shell file
  names:       shared parse context and top-level name scope
  sourcemaps:  input map remapping, sourcesContent, validation
  merger:      the parse -> merge -> print pipeline
"""

__all__ = ["collect", "wrapper", "names", "sourcemaps", "postprocess", "merger"]
