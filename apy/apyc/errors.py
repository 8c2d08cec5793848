# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Stable reason codes for configuration faults.
MISSING_ENTRY = "missing-entry"
UNREADABLE_ENTRY = "unreadable-entry"
BAD_CONFIG = "bad-config"
BAD_GRAMMAR = "bad-grammar"


@dataclass(frozen=True)
class ApyError(Exception):
	"""
	A structured, serializable configuration fault.

	Raised only for problems that end the whole run (no entry, unreadable entry,
	malformed apyconfig.json or grammar). Per-unit problems are diagnostics.
	"""

	reason_code: str
	message: str
	path: str | None = None
	key: str | None = None

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"path": self.path,
			"key": self.key,
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.key:
			parts.append(f"key={self.key}")
		if self.path:
			parts.append(f"path={self.path}")
		return " ".join(parts)


__all__ = ["ApyError", "MISSING_ENTRY", "UNREADABLE_ENTRY", "BAD_CONFIG", "BAD_GRAMMAR"]
