# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span attached to diagnostics.

Nodes carry character offsets into the text they were parsed from; a Span is
the user-facing rendition of that (file plus 1-based line/column), with the
original parser object kept in `raw` when there is one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Best-effort file/line/column location plus the raw parser object."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_loc(cls, loc: Any, *, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a node, lark token, lark exception or Span.

		Anything exposing `line`/`column` attributes works; missing attributes
		stay None.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			if file is not None and loc.file is None:
				return cls(file, loc.line, loc.column, loc.end_line, loc.end_column, loc.raw)
			return loc
		return cls(
			file=file or getattr(loc, "file", None),
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
			raw=loc,
		)

	@classmethod
	def from_offset(cls, text: str, offset: int, *, file: Optional[str] = None) -> "Span":
		"""Locate a character offset of `text` as a 1-based line/column."""
		offset = max(0, min(offset, len(text)))
		line = text.count("\n", 0, offset) + 1
		column = offset - (text.rfind("\n", 0, offset) + 1) + 1
		return cls(file=file, line=line, column=column)

	def format_prefix(self) -> str:
		"""`file:line:column` with unknown parts left out."""
		parts = [self.file or "<unknown>"]
		if self.line is not None:
			parts.append(str(self.line))
			if self.column is not None:
				parts.append(str(self.column))
		return ":".join(parts)


__all__ = ["Span"]
