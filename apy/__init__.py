# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
apy: a grammar-driven TypeScript to Python transpiler.

The compiler lives in `apy.apyc`; `apy.pylib` lists the standard-library
shim names the compiler treats as syntax.
"""

__all__ = ["apyc", "pylib"]
