# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for the front-end, emitter and driver.

Every per-unit problem (syntax error, unresolved import, unsupported construct)
ends up as one of these in a structured result; only configuration faults are
raised (see `apy.apyc.errors`).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .span import Span

# Phase labels used across the compiler.
PHASES = ("config", "resolve", "parser", "emit", "driver")


@dataclass
class Diagnostic:
	"""A compiler diagnostic (error/warning/note)."""

	message: str
	code: str | None = None
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Span() denotes unknown.
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	@property
	def is_error(self) -> bool:
		return self.severity == "error"

	def format_human(self) -> str:
		"""`file:line:column: severity: message` plus indented notes."""
		text = f"{self.span.format_prefix()}: {self.severity}: {self.message}"
		for note in self.notes:
			text += f"\n  note: {note}"
		return text

	def to_dict(self) -> dict:
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}


def has_errors(diagnostics: list[Diagnostic]) -> bool:
	return any(d.is_error for d in diagnostics)


__all__ = ["Diagnostic", "PHASES", "has_errors"]
