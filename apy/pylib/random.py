# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Names exported by the `random` shim (a TypeScript mirror of Python's `random`).

See https://docs.python.org/3/library/random.html
"""

NAMES: tuple[str, ...] = (
	"seed",
	"getstate",
	"setstate",
	"randbytes",
	"randint",
	"choice",
	"choices",
	"shuffle",
	"random",
)

__all__ = ["NAMES"]
