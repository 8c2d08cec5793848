# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Standard-library shim registry.

TypeScript sources import a shim module (`import py from "pylib"`) whose
functions stand for target-language constructs. The shim's bodies never run;
the compiler recognizes the exported names syntactically:

  - `withStatement(resource, alias, () => { ... })` becomes a scoped-resource
    block (`with resource as alias:`).
  - `named("name", value)` used as a call argument becomes a keyword argument
    (`name=value`).

Shim submodules (`pylib/random`) mirror target-language modules of the same
name; importing from them becomes an import of the target module.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import random

if TYPE_CHECKING:
	from apy.apyc.grammar import Grammar

SCOPED_RESOURCE = "withStatement"
NAMED_ARGUMENT = "named"

# Functions exported by the shim that the emitter lowers as syntax.
PYLIB_FUNCTIONS: tuple[str, ...] = (SCOPED_RESOURCE, NAMED_ARGUMENT)

# Shim submodule -> names it exports.
SUBMODULES: dict[str, tuple[str, ...]] = {
	"random": random.NAMES,
}


def is_recognized(name: str | None) -> bool:
	"""Whether `name` is a callee the emitter lowers instead of copying."""
	return name in PYLIB_FUNCTIONS


def _normalize(specifier: str) -> str:
	spec = specifier.rstrip("/")
	for suffix in (".ts", ".js"):
		if spec.endswith(suffix):
			spec = spec[: -len(suffix)]
	if spec.endswith("/index"):
		spec = spec[: -len("/index")]
	while spec.startswith("./") or spec.startswith("../"):
		spec = spec.split("/", 1)[1]
	return spec


def is_shim_module(specifier: str, grammar: "Grammar") -> bool:
	"""Whether an import specifier names the shim module itself."""
	stdlib = grammar.file.stdlib
	return _normalize(specifier) in (stdlib.import_path, stdlib.import_name)


def shim_submodule(specifier: str, grammar: "Grammar") -> str | None:
	"""Target module mirrored by a shim submodule specifier, if it is one."""
	stdlib = grammar.file.stdlib
	spec = _normalize(specifier)
	for root in (stdlib.import_path, stdlib.import_name):
		prefix = root + "/"
		if spec.startswith(prefix) and spec[len(prefix):] in SUBMODULES:
			return spec[len(prefix):]
	return None


def is_shim_specifier(specifier: str, grammar: "Grammar") -> bool:
	return is_shim_module(specifier, grammar) or shim_submodule(specifier, grammar) is not None


__all__ = [
	"NAMED_ARGUMENT",
	"PYLIB_FUNCTIONS",
	"SCOPED_RESOURCE",
	"SUBMODULES",
	"is_recognized",
	"is_shim_module",
	"is_shim_specifier",
	"random",
	"shim_submodule",
]
