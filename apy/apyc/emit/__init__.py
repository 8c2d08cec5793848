# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Code generation: statement tree -> target-language text.

  - emitter: indentation-aware, node-kind dispatched statement walker
  - render: verbatim-span expression rendering with special-form splices
  - lowering: sequence flattening and template literal re-delimiting
  - replacements: the grammar's global token replacement pass
"""

from .emitter import Emitter, UnsupportedConstruct, module_name
from .lowering import flatten_sequence, rewrite_template_literal
from .render import Renderer
from .replacements import apply_replacements

__all__ = [
	"Emitter",
	"Renderer",
	"UnsupportedConstruct",
	"apply_replacements",
	"flatten_sequence",
	"module_name",
	"rewrite_template_literal",
]
