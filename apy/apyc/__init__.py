# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compiler package (`apyc`).

The CLI entrypoint is `apy.apyc.apyc:main`; embedding callers use
`apy.apyc.driver.compile_entries` / `compile_source`.
"""

__all__ = []
