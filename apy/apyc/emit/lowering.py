# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Small pure helpers the renderer uses for specific expression shapes.

  - flatten_sequence: walk a comma sequence (or a single expression) element by
    element; used by named-argument call forms.
  - rewrite_template_literal: re-delimit a template literal for the target
    language's formatted-string syntax.

Both are lexical/structural helpers with no emitter state.
"""

from __future__ import annotations

from typing import Callable, List, TypeVar

from apy.apyc.grammar import Grammar
from apy.apyc.parser.ast import Expr, Paren, Sequence

T = TypeVar("T")


def flatten_sequence(node: Expr, visit: Callable[[Expr, int, int], T]) -> List[T]:
	"""
	Call `visit(element, index, total)` once per logical element of `node`.

	Parentheses are looked through. A comma sequence yields each of its
	elements with a 1-based index; anything else (typically a lone call) is a
	single element visited as (1, 1).
	"""
	while isinstance(node, Paren):
		node = node.expression
	if isinstance(node, Sequence):
		total = len(node.expressions)
		return [visit(expr, idx, total) for idx, expr in enumerate(node.expressions, start=1)]
	return [visit(node, 1, 1)]


def rewrite_template_literal(raw: str, grammar: Grammar) -> str:
	"""
	Re-delimit the raw text of a template literal (backticks included).

	The backticks become `templateLiteral.start`/`end` and each `${expr}`
	becomes `interpolationStart + expr + interpolationEnd`. Interpolated
	expressions are copied as text. When the interpolation delimiters are
	`{`/`}` (formatted strings), literal braces in the text are doubled.
	Literal newlines become `\\n` escapes and an unescaped occurrence of a
	single-character end quote is escaped. String literals inside an
	interpolation that use that quote switch to the other one.

	Nested template literals inside an interpolation are not rewritten.
	"""
	syntax = grammar.template_literal
	body = raw[1:-1] if len(raw) >= 2 and raw[0] == "`" and raw[-1] == "`" else raw
	double_braces = syntax.interpolation_start == "{" and syntax.interpolation_end == "}"
	quote = syntax.end if len(syntax.end) == 1 and syntax.end in "'\"" else None

	out: List[str] = [syntax.start]
	i = 0
	n = len(body)
	while i < n:
		ch = body[i]
		if ch == "\\" and i + 1 < n:
			nxt = body[i + 1]
			if nxt in "`$":
				out.append(nxt)
			elif double_braces and nxt in "{}":
				out.append(nxt * 2)
			else:
				out.append(ch + nxt)
			i += 2
			continue
		if ch == "$" and i + 1 < n and body[i + 1] == "{":
			end = _interpolation_end(body, i + 2)
			out.append(syntax.interpolation_start)
			expr = body[i + 2 : end].strip()
			out.append(_swap_quotes(expr, quote) if quote is not None else expr)
			out.append(syntax.interpolation_end)
			i = end + 1
			continue
		if double_braces and ch in "{}":
			out.append(ch * 2)
		elif ch == "\n":
			out.append("\\n")
		elif quote is not None and ch == quote:
			out.append("\\" + ch)
		else:
			out.append(ch)
		i += 1
	out.append(syntax.end)
	return "".join(out)


def _interpolation_end(body: str, pos: int) -> int:
	"""Offset of the `}` closing the interpolation whose expression starts at `pos`."""
	depth = 0
	i = pos
	n = len(body)
	while i < n:
		ch = body[i]
		if ch in "'\"`":
			i = _skip_string(body, i)
			continue
		if ch == "{":
			depth += 1
		elif ch == "}":
			if depth == 0:
				return i
			depth -= 1
		i += 1
	return n


def _swap_quotes(expr: str, quote: str) -> str:
	"""Re-delimit string literals in `expr` that use the enclosing `quote`."""
	other = "\"" if quote == "'" else "'"
	out: List[str] = []
	i = 0
	while i < len(expr):
		ch = expr[i]
		if ch not in "'\"`":
			out.append(ch)
			i += 1
			continue
		end = _skip_string(expr, i)
		literal = expr[i:end]
		if ch == quote and len(literal) >= 2 and literal[-1] == quote and other not in literal:
			literal = other + literal[1:-1].replace("\\" + quote, quote) + other
		out.append(literal)
		i = end
	return "".join(out)


def _skip_string(body: str, pos: int) -> int:
	quote = body[pos]
	i = pos + 1
	while i < len(body):
		if body[i] == "\\":
			i += 2
			continue
		if body[i] == quote:
			return i + 1
		i += 1
	return i


__all__ = ["flatten_sequence", "rewrite_template_literal"]
