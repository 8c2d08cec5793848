# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
JSON dump of parsed Node trees (`apyc --dump-ast`).

Every node becomes an object with a `kind` key (its class name), its
`start`/`end` offsets and its fields; erasures are listed per program.
"""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any, Iterable

from apy.apyc.frontend import SourceUnit
from apy.apyc.parser.ast import Erasure, Located, Node


def node_to_dict(value: Any) -> Any:
	if isinstance(value, Node):
		out = {"kind": type(value).__name__, "start": value.start, "end": value.end}
		for f in dataclasses.fields(value):
			if f.name == "loc":
				continue
			out[f.name] = node_to_dict(getattr(value, f.name))
		return out
	if isinstance(value, Erasure):
		return {"start": value.start, "end": value.end, "kind": value.kind}
	if isinstance(value, Located):
		return dataclasses.asdict(value)
	if isinstance(value, list):
		return [node_to_dict(item) for item in value]
	return value


def dump_ast(units: Iterable[SourceUnit], path: Path) -> None:
	payload = {str(unit.path): node_to_dict(unit.program) for unit in units}
	path = Path(path)
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


__all__ = ["dump_ast", "node_to_dict"]
