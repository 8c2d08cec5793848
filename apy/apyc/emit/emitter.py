# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Indentation-aware emitter: statement tree -> target-language text.

Pipeline placement:
  source -> erase types -> strip stdlib aliases -> parse -> Emitter -> token replacement

The emitter rewrites statement-level scaffolding (function and class headers,
blocks, loops, imports) according to the Grammar and copies expressions as
source text through `Renderer`. Dispatch is by node type
(`_visit_stmt_<Kind>`); every visitor takes the current depth and returns the
lines it produced, so nesting depth is never shared state.

Unsupported constructs (a node kind without a visitor, or an unsupported shape
of a known kind) contribute no output and are recorded as `emit`-phase
warnings in `Emitter.diagnostics`; the walk continues with the next statement.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence

from apy import pylib
from apy.apyc.core.diagnostics import Diagnostic
from apy.apyc.core.span import Span
from apy.apyc.grammar import DEFAULT_GRAMMAR, Grammar
from apy.apyc.parser.ast import (
	Accessor,
	Arrow,
	ArrayPattern,
	Assign,
	Binary,
	Block,
	Break,
	Call,
	ClassDecl,
	Continue,
	ExportDecl,
	ExportDefault,
	ExportNames,
	Expr,
	ExprStmt,
	Field,
	For,
	ForIn,
	ForOf,
	Function,
	FunctionDecl,
	If,
	ImportDecl,
	Literal,
	Method,
	Name,
	Node,
	ObjectPattern,
	Param,
	Program,
	Return,
	Stmt,
	Throw,
	Try,
	TypeDecl,
	Unary,
	Update,
	VarDecl,
	While,
)

from .render import Renderer

logger = logging.getLogger(__name__)

UNSUPPORTED = "unsupported"


class UnsupportedConstruct(Exception):
	"""Raised by a visitor for a node shape it cannot lower."""

	def __init__(self, node: Node, message: str):
		super().__init__(message)
		self.node = node
		self.message = message


class Emitter:
	"""
	Emits one unit.

	`source` is the text the statement tree was parsed from; node offsets index
	into it. `module_names` optionally maps import specifiers of local units to
	the module name their output is written under.
	"""

	def __init__(
		self,
		source: str,
		grammar: Grammar = DEFAULT_GRAMMAR,
		*,
		file: Optional[str] = None,
		module_names: Optional[Mapping[str, str]] = None,
	):
		self.source = source
		self.grammar = grammar
		self.file = file
		self.module_names = dict(module_names or {})
		self.diagnostics: List[Diagnostic] = []
		self.renderer = Renderer(source, grammar, report=self._report)

	# ------------------------------------------------------------ entry points

	def emit_program(self, program: Program, depth: int = 0) -> str:
		lines = self.emit_block(program.body, depth)
		return "\n".join(lines) + "\n" if lines else ""

	def emit_block(self, stmts: Sequence[Stmt], depth: int) -> List[str]:
		lines: List[str] = []
		for stmt in stmts:
			lines.extend(self.emit_stmt(stmt, depth))
		return lines

	def emit_stmt(self, stmt: Stmt, depth: int) -> List[str]:
		method = getattr(self, f"_visit_stmt_{type(stmt).__name__}", None)
		if method is None:
			self._report(stmt, f"unsupported statement: {type(stmt).__name__}")
			return []
		try:
			return method(stmt, depth)
		except UnsupportedConstruct as err:
			self._report(err.node, err.message)
			return []

	# --------------------------------------------------------------- helpers

	def _kw(self, name: str) -> str:
		return self.grammar.keyword(name)

	def _ind(self, depth: int) -> str:
		return self.grammar.indentation(depth)

	def _line(self, text: str, depth: int) -> str:
		return f"{self._ind(depth)}{text}{self.grammar.terminator}"

	def _cond(self, expr: Expr) -> str:
		text = self.renderer.render(expr)
		if self.grammar.file.parenthesize_conditions:
			return f"({text})"
		return text

	def _block(self, header: str, body: Sequence[Stmt], depth: int) -> List[str]:
		"""`header` opening a block at `depth` with `body` one level deeper."""
		return self._wrap(header, self.emit_block(body, depth + 1), depth)

	def _wrap(self, header: str, inner: List[str], depth: int) -> List[str]:
		braces = self.grammar.file.use_braces
		lines = [f"{self._ind(depth)}{header}{' {' if braces else ':'}"]
		if inner:
			lines.extend(inner)
		elif not braces:
			lines.append(self._ind(depth + 1) + self._kw("pass"))
		if braces:
			lines.append(f"{self._ind(depth)}}}")
		return lines

	def _report(self, node: Node, message: str) -> None:
		span = Span.from_offset(self.source, node.start, file=self.file)
		self.diagnostics.append(
			Diagnostic(message=message, code=UNSUPPORTED, phase="emit", severity="warning", span=span)
		)
		logger.warning("%s: %s", span.format_prefix(), message)

	# ---------------------------------------------------------- statements

	def _visit_stmt_Block(self, stmt: Block, depth: int) -> List[str]:
		return self.emit_block(stmt.body, depth)

	def _visit_stmt_ExprStmt(self, stmt: ExprStmt, depth: int) -> List[str]:
		expr = stmt.expression
		if isinstance(expr, Call) and isinstance(expr.callee, Name) and pylib.is_recognized(expr.callee.name):
			if expr.callee.name == pylib.SCOPED_RESOURCE:
				return self._scoped_resource(expr, depth)
		if isinstance(expr, Update):
			# Postfix spelling; token replacement turns `i++` into `i += 1`.
			return [self._line(self.renderer.render(expr.argument) + expr.op, depth)]
		return [self._line(self.renderer.render(expr), depth)]

	def _scoped_resource(self, call: Call, depth: int) -> List[str]:
		if len(call.args) != 3:
			raise UnsupportedConstruct(call, f"{pylib.SCOPED_RESOURCE} expects (resource, alias, body)")
		resource, alias, body = call.args
		if isinstance(alias, Literal) and alias.kind == "string":
			alias_name = alias.raw[1:-1]
		elif isinstance(alias, Name):
			alias_name = alias.name
		else:
			raise UnsupportedConstruct(alias, f"{pylib.SCOPED_RESOURCE} alias must be a name or string")
		if not isinstance(body, (Arrow, Function)):
			raise UnsupportedConstruct(body, f"{pylib.SCOPED_RESOURCE} body must be a function literal")
		header = f"{self._kw('with')} {self.renderer.render(resource)} {self._kw('as')} {alias_name}"
		if isinstance(body.body, Block):
			return self._block(header, body.body.body, depth)
		return self._wrap(header, [self._line(self.renderer.render(body.body), depth + 1)], depth)

	def _visit_stmt_Return(self, stmt: Return, depth: int) -> List[str]:
		return [self._line(self.renderer.render(stmt), depth)]

	def _visit_stmt_VarDecl(self, stmt: VarDecl, depth: int) -> List[str]:
		if not stmt.declarations:
			raise UnsupportedConstruct(stmt, "variable declaration without declarators")
		for extra in stmt.declarations[1:]:
			self._report(extra, "only the first declarator of a declaration is emitted")
		decl = stmt.declarations[0]
		target = decl.target
		if isinstance(target, ObjectPattern):
			raise UnsupportedConstruct(target, "object destructuring is not supported")
		init = decl.init
		if isinstance(target, Name) and isinstance(init, (Arrow, Function)) and isinstance(init.body, Block):
			return self._function(target.name, init.params, init.body.body, depth, is_async=init.is_async)
		name = target.name if isinstance(target, Name) else self.renderer.render(target)
		value = self.renderer.render(init) if init is not None else "undefined"
		prefix = f"{self.grammar.variable_keyword} " if self.grammar.variable_keyword else ""
		return [self._line(f"{prefix}{name} = {value}", depth)]

	def _visit_stmt_FunctionDecl(self, stmt: FunctionDecl, depth: int) -> List[str]:
		if stmt.body is None:
			return []
		if not stmt.name:
			raise UnsupportedConstruct(stmt, "anonymous function declaration is not supported")
		return self._function(stmt.name, stmt.params, stmt.body.body, depth, is_async=stmt.is_async)

	def _function(
		self,
		name: str,
		params: List[Param],
		body: Sequence[Stmt],
		depth: int,
		*,
		is_async: bool = False,
		receiver: Optional[str] = None,
		keyword: Optional[str] = None,
	) -> List[str]:
		if keyword is None:
			keyword = self.grammar.function_keyword
		head = ""
		if is_async:
			head += self._kw("async") + " "
		if keyword:
			head += keyword + " "
		names = ([receiver] if receiver else []) + self.renderer.render_params(params)
		return self._block(f"{head}{name}({', '.join(names)})", body, depth)

	def _visit_stmt_ClassDecl(self, stmt: ClassDecl, depth: int) -> List[str]:
		syntax = self.grammar.class_syntax
		if not stmt.name:
			raise UnsupportedConstruct(stmt, "anonymous class declaration is not supported")
		header = f"{syntax.keyword} {stmt.name}"
		if stmt.superclass is not None:
			header += f"{syntax.extends_start}{self.renderer.render(stmt.superclass)}{syntax.extends_end}"
		constructor: Optional[Method] = None
		methods: List[Method] = []
		for member in stmt.members:
			if isinstance(member, Method) and member.body is not None:
				if member.kind == "constructor" and constructor is None:
					constructor = member
				elif member.kind == "constructor":
					self._report(member, "only one constructor per class is emitted")
				else:
					methods.append(member)
			elif isinstance(member, Field):
				self._report(member, f"class field {member.name or '<computed>'} has no equivalent and is dropped")
			elif isinstance(member, Accessor):
				self._report(member, f"{member.kind} accessor {member.name or '<computed>'} is not supported")
		lines: List[str] = []
		if constructor is not None:
			lines.extend(self._method(constructor, syntax.constructor_name or stmt.name, depth + 1))
		for method in methods:
			if method.name is None:
				self._report(method, "method with a computed name is not supported")
				continue
			lines.extend(self._method(method, method.name, depth + 1))
		return self._wrap(header, lines, depth)

	def _method(self, method: Method, name: str, depth: int) -> List[str]:
		syntax = self.grammar.class_syntax
		keyword = self.grammar.function_keyword if syntax.prefix_method_keyword else ""
		if method.kind == "constructor" and not syntax.constructor_is_function:
			keyword = ""
		receiver = syntax.self_name if syntax.prefix_self and not method.is_static else None
		lines: List[str] = []
		if method.is_static and syntax.static_decorator:
			lines.append(self._ind(depth) + syntax.static_decorator)
		body = method.body.body if method.body is not None else []
		lines.extend(
			self._function(name, method.params, body, depth, is_async=method.is_async, receiver=receiver, keyword=keyword)
		)
		return lines

	# --------------------------------------------------------------- modules

	def _visit_stmt_ImportDecl(self, stmt: ImportDecl, depth: int) -> List[str]:
		if stmt.type_only or pylib.is_shim_module(stmt.source, self.grammar):
			return []
		submodule = pylib.shim_submodule(stmt.source, self.grammar)
		module = submodule or self.module_names.get(stmt.source) or module_name(stmt.source)
		imp, frm, as_ = self._kw("import"), self._kw("from"), self._kw("as")
		lines: List[str] = []
		for alias in (stmt.namespace, stmt.default):
			if alias is not None:
				lines.append(self._line(f"{imp} {module} {as_} {alias}", depth))
		names: List[str] = []
		for spec in stmt.specifiers:
			if spec.type_only:
				continue
			if submodule is not None and spec.imported not in pylib.SUBMODULES[submodule]:
				self._report(spec, f"{spec.imported} is not exported by the {submodule} shim")
			names.append(spec.imported if spec.imported == spec.local else f"{spec.imported} {as_} {spec.local}")
		if names:
			lines.append(self._line(f"{frm} {module} {imp} {', '.join(names)}", depth))
		if not lines and not stmt.has_named:
			lines.append(self._line(f"{imp} {module}", depth))
		return lines

	def _visit_stmt_ExportDecl(self, stmt: ExportDecl, depth: int) -> List[str]:
		return self.emit_stmt(stmt.declaration, depth)

	def _visit_stmt_ExportDefault(self, stmt: ExportDefault, depth: int) -> List[str]:
		if stmt.declaration is not None:
			return self.emit_stmt(stmt.declaration, depth)
		return []

	def _visit_stmt_ExportNames(self, stmt: ExportNames, depth: int) -> List[str]:
		return []

	def _visit_stmt_TypeDecl(self, stmt: TypeDecl, depth: int) -> List[str]:
		return []

	# ---------------------------------------------------------- control flow

	def _visit_stmt_If(self, stmt: If, depth: int, keyword: str = "if") -> List[str]:
		lines = self._block(f"{self._kw(keyword)} {self._cond(stmt.test)}", _body(stmt.consequent), depth)
		alternate = stmt.alternate
		if alternate is None:
			return lines
		if isinstance(alternate, If):
			return lines + self._visit_stmt_If(alternate, depth, "elif")
		return lines + self._block(self._kw("else"), _body(alternate), depth)

	def _visit_stmt_For(self, stmt: For, depth: int) -> List[str]:
		var, start = self._range_init(stmt)
		op, end = self._range_test(stmt, var)
		step = self._range_step(stmt, var)
		if (op in ("<", "<=")) != (step > 0):
			raise UnsupportedConstruct(stmt, "for-loop step does not move towards its bound")
		if op == "<=":
			end = _offset(end, 1)
		elif op == ">=":
			end = _offset(end, -1)
		header = f"{self._kw('for')} {var} {self._kw('in')} {self._kw('range')}({start}, {end}, {step})"
		return self._block(header, _body(stmt.body), depth)

	def _range_init(self, stmt: For):
		init = stmt.init
		if isinstance(init, VarDecl) and len(init.declarations) == 1:
			decl = init.declarations[0]
			if isinstance(decl.target, Name) and decl.init is not None:
				return decl.target.name, self.renderer.render(decl.init)
		if isinstance(init, Assign) and init.op == "=" and isinstance(init.target, Name):
			return init.target.name, self.renderer.render(init.value)
		raise UnsupportedConstruct(stmt, "only `for (let i = START; i OP END; i += STEP)` loops are supported")

	def _range_test(self, stmt: For, var: str):
		test = stmt.test
		if (
			isinstance(test, Binary)
			and test.op in ("<", "<=", ">", ">=")
			and isinstance(test.left, Name)
			and test.left.name == var
		):
			return test.op, self.renderer.render(test.right)
		raise UnsupportedConstruct(stmt, f"for-loop test must compare {var} with <, <=, > or >=")

	def _range_step(self, stmt: For, var: str) -> int:
		update = stmt.update
		if isinstance(update, Update) and isinstance(update.argument, Name) and update.argument.name == var:
			return 1 if update.op == "++" else -1
		if (
			isinstance(update, Assign)
			and update.op in ("+=", "-=")
			and isinstance(update.target, Name)
			and update.target.name == var
		):
			step = _int_literal(update.value)
			if step is not None and step != 0:
				return step if update.op == "+=" else -step
		raise UnsupportedConstruct(stmt, f"for-loop update must step {var} by a non-zero integer literal")

	def _visit_stmt_ForIn(self, stmt: ForIn, depth: int) -> List[str]:
		if not isinstance(stmt.iterable, Name):
			raise UnsupportedConstruct(stmt.iterable, "for-in loops only iterate over a plain name")
		header = f"{self._kw('for')} {self._target(stmt.target)} {self._kw('in')} {stmt.iterable.name}"
		return self._block(header, _body(stmt.body), depth)

	def _visit_stmt_ForOf(self, stmt: ForOf, depth: int) -> List[str]:
		header = f"{self._kw('for')} {self._target(stmt.target)} {self._kw('in')} {self.renderer.render(stmt.iterable)}"
		if stmt.is_await:
			header = f"{self._kw('async')} {header}"
		return self._block(header, _body(stmt.body), depth)

	def _target(self, target) -> str:
		if isinstance(target, Name):
			return target.name
		if isinstance(target, ArrayPattern):
			return ", ".join(target.names)
		raise UnsupportedConstruct(target, "object destructuring is not supported")

	def _visit_stmt_While(self, stmt: While, depth: int) -> List[str]:
		return self._block(f"{self._kw('while')} {self._cond(stmt.test)}", _body(stmt.body), depth)

	def _visit_stmt_Break(self, stmt: Break, depth: int) -> List[str]:
		return [self._line(self._kw("break"), depth)]

	def _visit_stmt_Continue(self, stmt: Continue, depth: int) -> List[str]:
		return [self._line(self._kw("continue"), depth)]

	def _visit_stmt_Throw(self, stmt: Throw, depth: int) -> List[str]:
		return [self._line(f"{self._kw('raise')} {self.renderer.render(stmt.argument)}", depth)]

	def _visit_stmt_Try(self, stmt: Try, depth: int) -> List[str]:
		lines = self._block(self._kw("try"), stmt.block.body, depth)
		if stmt.handler is not None:
			header = f"{self._kw('except')} {self._kw('catchType')}"
			if stmt.handler_param is not None:
				header += f" {self._kw('as')} {self._target(stmt.handler_param)}"
			lines += self._block(header, stmt.handler.body, depth)
		if stmt.finalizer is not None:
			lines += self._block(self._kw("finally"), stmt.finalizer.body, depth)
		return lines


def module_name(specifier: str) -> str:
	"""Target module name for an import specifier: `./lib/util.ts` -> `lib.util`."""
	spec = specifier
	while spec.startswith("./") or spec.startswith("../"):
		spec = spec.split("/", 1)[1]
	for suffix in (".d.ts", ".tsx", ".ts", ".js"):
		if spec.endswith(suffix):
			spec = spec[: -len(suffix)]
			break
	return spec.strip("/").replace("/", ".")


def _body(stmt: Stmt) -> List[Stmt]:
	return stmt.body if isinstance(stmt, Block) else [stmt]


def _int_literal(expr: Expr) -> Optional[int]:
	if isinstance(expr, Literal) and expr.kind == "number":
		try:
			return int(expr.raw.rstrip("n"), 0)
		except ValueError:
			return None
	if isinstance(expr, Unary) and expr.op == "-":
		value = _int_literal(expr.argument)
		return -value if value is not None else None
	return None


def _offset(text: str, delta: int) -> str:
	try:
		return str(int(text, 0) + delta)
	except ValueError:
		return f"{text} {'+' if delta > 0 else '-'} {abs(delta)}"


__all__ = ["Emitter", "UnsupportedConstruct", "module_name"]
