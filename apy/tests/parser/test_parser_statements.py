# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest
from lark import UnexpectedInput

from apy.apyc.parser import ast, parse_program


def test_parse_variable_declarations() -> None:
	prog = parse_program("let x = 1\nconst y = 'a';\nvar z\n")
	assert [type(s) for s in prog.body] == [ast.VarDecl, ast.VarDecl, ast.VarDecl]
	assert [s.kind for s in prog.body] == ["let", "const", "var"]
	first = prog.body[0].declarations[0]
	assert isinstance(first.target, ast.Name) and first.target.name == "x"
	assert first.init == ast.Literal(loc=first.init.loc, kind="number", raw="1")
	assert prog.body[1].declarations[0].init.raw == "'a'"
	assert prog.body[2].declarations[0].init is None


def test_newlines_end_statements() -> None:
	prog = parse_program("a()\nb()\n\n\nc()")
	assert [type(s) for s in prog.body] == [ast.ExprStmt] * 3


def test_semicolons_end_statements_on_one_line() -> None:
	prog = parse_program("a(); b(); c()\n")
	assert len(prog.body) == 3


def test_continuation_lines_join_the_statement() -> None:
	prog = parse_program("let c = d\n\t.e()\n\t.f\nlet g = 1 +\n\t2\n")
	assert len(prog.body) == 2
	init = prog.body[0].declarations[0].init
	assert isinstance(init, ast.Member) and init.property == "f"
	assert isinstance(init.object, ast.Call)
	total = prog.body[1].declarations[0].init
	assert isinstance(total, ast.Binary) and total.op == "+"


def test_open_brackets_suppress_terminators() -> None:
	prog = parse_program("foo(\n\t1,\n\t2\n)\nlet xs = [\n\t1,\n\t2\n]\n")
	assert len(prog.body) == 2
	assert len(prog.body[0].expression.args) == 2
	assert len(prog.body[1].declarations[0].init.elements) == 2


def test_multiple_declarators() -> None:
	decl = parse_program("let a = 1, b = 2\n").body[0]
	assert [d.target.name for d in decl.declarations] == ["a", "b"]


def test_parse_function_declaration() -> None:
	prog = parse_program(
		"""
function add(a: number, b = 2, ...rest: number[]): number {
	return a + b
}
"""
	)
	fn = prog.body[0]
	assert isinstance(fn, ast.FunctionDecl)
	assert fn.name == "add"
	assert [p.name for p in fn.params] == ["a", "b", "rest"]
	assert fn.params[1].default.raw == "2"
	assert fn.params[2].rest is True
	ret = fn.body.body[0]
	assert isinstance(ret, ast.Return)
	assert isinstance(ret.argument, ast.Binary) and ret.argument.op == "+"


def test_parse_async_function_and_await() -> None:
	fn = parse_program("async function load(url) {\n\tconst r = await fetch(url)\n\treturn r\n}\n").body[0]
	assert fn.is_async
	init = fn.body.body[0].declarations[0].init
	assert isinstance(init, ast.Await) and isinstance(init.argument, ast.Call)


def test_parse_if_else_chain() -> None:
	stmt = parse_program("if (a) {\n\tx()\n} else if (b) {\n\ty()\n}\nelse {\n\tz()\n}\n").body[0]
	assert isinstance(stmt, ast.If)
	assert isinstance(stmt.consequent, ast.Block)
	assert isinstance(stmt.alternate, ast.If)
	assert isinstance(stmt.alternate.alternate, ast.Block)


def test_parse_if_without_braces() -> None:
	stmt = parse_program("if (a) return\n").body[0]
	assert isinstance(stmt.consequent, ast.Return)
	assert stmt.consequent.argument is None


def test_parse_counting_for_loop() -> None:
	stmt = parse_program("for (let i = 0; i < n; i++) {\n\tuse(i)\n}\n").body[0]
	assert isinstance(stmt, ast.For)
	assert isinstance(stmt.init, ast.VarDecl)
	assert isinstance(stmt.test, ast.Binary) and stmt.test.op == "<"
	assert isinstance(stmt.update, ast.Update) and stmt.update.op == "++" and not stmt.update.prefix
	assert len(stmt.body.body) == 1


def test_parse_for_of_and_for_in() -> None:
	prog = parse_program("for (const [k, v] of pairs) {}\nfor (const key in table) {}\n")
	loop_of, loop_in = prog.body
	assert isinstance(loop_of, ast.ForOf)
	assert isinstance(loop_of.target, ast.ArrayPattern) and loop_of.target.names == ["k", "v"]
	assert isinstance(loop_in, ast.ForIn)
	assert loop_in.target.name == "key"
	assert loop_in.iterable.name == "table"


def test_parse_for_await() -> None:
	stmt = parse_program("async function f() {\n\tfor await (const x of xs) {}\n}\n").body[0].body.body[0]
	assert isinstance(stmt, ast.ForOf) and stmt.is_await


def test_parse_while_and_do_while() -> None:
	prog = parse_program("while (x) {\n\tx--\n}\ndo {\n\tx++\n} while (x < 3)\n")
	assert isinstance(prog.body[0], ast.While)
	assert isinstance(prog.body[1], ast.DoWhile)
	assert prog.body[1].test.op == "<"


def test_parse_try_catch_finally() -> None:
	stmt = parse_program("try {\n\trisky()\n} catch (e: unknown) {\n\thandle(e)\n} finally {\n\tdone()\n}\n").body[0]
	assert isinstance(stmt, ast.Try)
	assert stmt.handler_param.name == "e"
	assert len(stmt.handler.body) == 1
	assert len(stmt.finalizer.body) == 1


def test_parse_switch() -> None:
	stmt = parse_program("switch (x) {\n\tcase 1:\n\t\ta()\n\t\tbreak\n\tdefault:\n\t\tb()\n}\n").body[0]
	assert isinstance(stmt, ast.Switch)
	assert [c.test.raw if c.test else None for c in stmt.cases] == ["1", None]
	assert [type(s) for s in stmt.cases[0].body] == [ast.ExprStmt, ast.Break]


def test_parse_throw() -> None:
	stmt = parse_program("throw new Error('bad')\n").body[0]
	assert isinstance(stmt, ast.Throw)
	assert isinstance(stmt.argument, ast.New)
	assert len(stmt.argument.args) == 1


def test_parse_class_members() -> None:
	cls = parse_program(
		"""
class Dog extends Animal {
	static count = 0
	name: string
	constructor(name: string) {
		super(name)
		this.name = name
	}
	get label() { return this.name }
	static create() { return new Dog('rex') }
	async bark() {}
}
"""
	).body[0]
	assert isinstance(cls, ast.ClassDecl)
	assert cls.name == "Dog"
	assert cls.superclass.name == "Animal"
	kinds = [(type(m).__name__, m.name) for m in cls.members]
	assert kinds == [
		("Field", "count"),
		("Field", "name"),
		("Method", "constructor"),
		("Accessor", "label"),
		("Method", "create"),
		("Method", "bark"),
	]
	assert cls.members[0].is_static
	assert cls.members[2].kind == "constructor"
	assert cls.members[4].is_static
	assert cls.members[5].is_async


def test_parse_class_members_on_one_line() -> None:
	cls = parse_program("class A { m() {} static s() {} get g() { return 1 } async f() {} }\n").body[0]
	assert isinstance(cls, ast.ClassDecl)
	kinds = [(type(m).__name__, m.name) for m in cls.members]
	assert kinds == [("Method", "m"), ("Method", "s"), ("Accessor", "g"), ("Method", "f")]
	assert cls.members[1].is_static
	assert cls.members[2].kind == "get"
	assert cls.members[3].is_async


def test_parse_enum() -> None:
	stmt = parse_program("enum Color {\n\tRed,\n\tGreen = 4\n}\n").body[0]
	assert isinstance(stmt, ast.Enum)
	assert [m.name for m in stmt.members] == ["Red", "Green"]
	assert stmt.members[1].value.raw == "4"


def test_keywords_are_names_after_a_dot_and_as_keys() -> None:
	prog = parse_program("promise.catch(f)\nlet o = {default: 1, new: 2}\n")
	call = prog.body[0].expression
	assert call.callee.property == "catch"
	assert [p.key for p in prog.body[1].declarations[0].init.properties] == ["default", "new"]


def test_object_literal_after_return_is_not_a_block() -> None:
	ret = parse_program("function f() {\n\treturn {a: 1, b}\n}\n").body[0].body.body[0]
	assert isinstance(ret.argument, ast.ObjectLiteral)
	assert [p.kind for p in ret.argument.properties] == ["init", "shorthand"]


def test_nested_blocks_keep_statement_spans() -> None:
	src = "function f() {\n\tif (a) {\n\t\tb()\n\t}\n}\n"
	fn = parse_program(src).body[0]
	inner = fn.body.body[0].consequent.body[0]
	assert src[inner.start : inner.end] == "b()"
	assert inner.loc.line == 3


def test_missing_operand_is_a_syntax_error() -> None:
	with pytest.raises(UnexpectedInput):
		parse_program("let x = \n")


def test_unbalanced_braces_are_a_syntax_error() -> None:
	with pytest.raises(UnexpectedInput):
		parse_program("function f() {\n\treturn 1\n")
