# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Verbatim-span rendering of expressions.

Expression syntax is close enough between the source and the target that the
emitter copies it as text: `Renderer.render(node)` returns the source slice of
`node`, except that recognized special forms anywhere inside it are spliced in
from their own sub-spans (no fragment is ever re-parsed):

  - template literals are re-delimited (`rewrite_template_literal`)
  - `new C(args)` loses its `new` unless the grammar calls with it
  - `f(named("x", 1), ...)` becomes `f(x=1, ...)`
  - `(a) => a + 1` becomes `lambda a: a + 1`

A span containing none of these renders byte-identical to the source.
"""

from __future__ import annotations

import dataclasses
from typing import Callable, Iterable, List, Optional

from apy import pylib
from apy.apyc.grammar import Grammar
from apy.apyc.parser.ast import (
	Arrow,
	Assign,
	Binary,
	Block,
	Call,
	Function,
	Literal,
	Name,
	New,
	Node,
	Param,
	TemplateLiteral,
)

from .lowering import flatten_sequence, rewrite_template_literal

Report = Callable[[Node, str], None]

UNSIGNED_SHIFTS = (">>>", ">>>=")


class Renderer:
	"""Renders expression nodes of one unit's text."""

	def __init__(self, source: str, grammar: Grammar, report: Optional[Report] = None):
		self.source = source
		self.grammar = grammar
		# Called for constructs copied verbatim that the target cannot express.
		self.report = report

	def render(self, node: Node) -> str:
		splice = self._splice(node)
		if splice is not None:
			return splice
		return self._copy(node.start, node.end, _children(node))

	def render_params(self, params: List[Param]) -> List[str]:
		"""Parameter texts: `name`, `name=default` or `<rest>name`."""
		out: List[str] = []
		for param in params:
			name = param.name
			if name is None:
				self._report(param, "destructured parameter copied verbatim")
				out.append(self.render(param))
			elif param.rest:
				out.append(self.grammar.keyword("rest") + name)
			elif param.default is not None:
				out.append(f"{name}={self.render(param.default)}")
			else:
				out.append(name)
		return out

	def _copy(self, start: int, end: int, children: Iterable[Node]) -> str:
		parts: List[str] = []
		pos = start
		for child in sorted(children, key=lambda c: c.start):
			if child.start < pos or child.end > end:
				continue
			parts.append(self.source[pos : child.start])
			parts.append(self.render(child))
			pos = child.end
		parts.append(self.source[pos:end])
		return "".join(parts)

	def _splice(self, node: Node) -> Optional[str]:
		if isinstance(node, TemplateLiteral):
			return rewrite_template_literal(node.raw, self.grammar)
		if isinstance(node, New):
			return self._new(node)
		if isinstance(node, Call):
			return self._call(node)
		if isinstance(node, Arrow):
			return self._arrow(node)
		if isinstance(node, Function):
			self._report(node, "function literal with a statement body copied verbatim")
			return self.source[node.start : node.end]
		if isinstance(node, Literal) and node.kind == "regex":
			self._report(node, "regular expression literal copied verbatim")
		elif isinstance(node, (Binary, Assign)) and node.op in UNSIGNED_SHIFTS:
			self._report(node, f"unsigned shift {node.op} copied verbatim")
		return None

	def _new(self, node: New) -> Optional[str]:
		if self.grammar.class_syntax.call_with_new_keyword:
			return None
		children = [node.callee] + list(node.args or [])
		text = self._copy(node.callee.start, node.end, children)
		if node.args is None:
			text += "()"
		return text

	def _call(self, node: Call) -> Optional[str]:
		if isinstance(node.callee, Name) and node.callee.name == pylib.SCOPED_RESOURCE:
			self._report(node, f"{pylib.SCOPED_RESOURCE} is only lowered as a statement")
			return None
		if not any(self._has_named(arg) for arg in node.args):
			return None
		pieces: List[str] = []
		for arg in node.args:
			pieces.extend(flatten_sequence(arg, self._argument))
		return f"{self.render(node.callee)}({', '.join(pieces)})"

	def _has_named(self, arg) -> bool:
		return any(flatten_sequence(arg, lambda expr, _i, _n: _named_pair(expr) is not None))

	def _argument(self, expr, _index: int, _total: int) -> str:
		pair = _named_pair(expr)
		if pair is None:
			return self.render(expr)
		name, value = pair
		if isinstance(value, Literal) and value.kind == "string":
			return f"{name}={_requote(value.raw, self.grammar.string_quote)}"
		return f"{name}={self.render(value)}"

	def _arrow(self, node: Arrow) -> Optional[str]:
		if isinstance(node.body, Block):
			self._report(node, "arrow function with a statement body copied verbatim")
			return self.source[node.start : node.end]
		keyword = self.grammar.keyword("lambda")
		if not keyword:
			return None
		if node.is_async:
			self._report(node, "async arrow function copied verbatim")
			return None
		if any(p.name is None for p in node.params):
			self._report(node, "arrow function with destructured parameters copied verbatim")
			return None
		params = ", ".join(self.render_params(node.params))
		head = f"{keyword} {params}" if params else keyword
		return f"{head}: {self.render(node.body)}"

	def _report(self, node: Node, message: str) -> None:
		if self.report is not None:
			self.report(node, message)


def _children(node: Node) -> List[Node]:
	out: List[Node] = []
	for f in dataclasses.fields(node):
		if f.name == "loc":
			continue
		value = getattr(node, f.name)
		if isinstance(value, Node):
			out.append(value)
		elif isinstance(value, list):
			out.extend(item for item in value if isinstance(item, Node))
	return out


def _named_pair(expr):
	"""`(name, value)` if `expr` is a named-argument form `named("name", value)`."""
	if not isinstance(expr, Call) or not isinstance(expr.callee, Name):
		return None
	if expr.callee.name != pylib.NAMED_ARGUMENT or len(expr.args) != 2:
		return None
	key, value = expr.args
	if isinstance(key, Literal) and key.kind == "string":
		name = key.raw[1:-1]
	elif isinstance(key, Name):
		name = key.name
	else:
		return None
	if not name.isidentifier():
		return None
	return name, value


def _requote(raw: str, quote: str) -> str:
	if raw[0] == quote:
		return raw
	inner = raw[1:-1]
	if quote in inner or "\\" in inner:
		return raw
	return f"{quote}{inner}{quote}"


__all__ = ["Renderer"]
