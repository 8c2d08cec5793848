# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from apy.apyc.parser import ast, parse_program


def _expr(src: str) -> ast.Expr:
	stmt = parse_program(src + "\n").body[0]
	assert isinstance(stmt, ast.ExprStmt)
	return stmt.expression


def test_binary_precedence() -> None:
	e = _expr("a + b * c")
	assert isinstance(e, ast.Binary) and e.op == "+"
	assert isinstance(e.right, ast.Binary) and e.right.op == "*"


def test_strict_equality_and_logic() -> None:
	e = _expr("a === b && c !== d || e")
	assert e.op == "||"
	assert e.left.op == "&&"
	assert (e.left.left.op, e.left.right.op) == ("===", "!==")


def test_conditional_and_assignment() -> None:
	e = _expr("x = a ? b : c")
	assert isinstance(e, ast.Assign) and e.op == "="
	assert isinstance(e.value, ast.Conditional)


def test_compound_assignment() -> None:
	e = _expr("total += price * 2")
	assert isinstance(e, ast.Assign) and e.op == "+="


def test_member_index_and_optional_chaining() -> None:
	e = _expr("a.b[0]?.c")
	assert isinstance(e, ast.Member) and e.optional and e.property == "c"
	assert isinstance(e.object, ast.Index)
	assert isinstance(e.object.object, ast.Member) and not e.object.object.optional


def test_call_with_spread_argument() -> None:
	e = _expr("f(a, ...rest)")
	assert isinstance(e, ast.Call)
	assert isinstance(e.args[1], ast.Spread)


def test_new_with_and_without_arguments() -> None:
	assert _expr("new Foo(1, 2)").args is not None
	bare = _expr("new Foo")
	assert isinstance(bare, ast.New) and bare.args is None
	assert _expr("new ns.Foo()").callee.property == "Foo"


def test_arrow_functions() -> None:
	one = _expr("xs.map(x => x * 2)").args[0]
	assert isinstance(one, ast.Arrow)
	assert [p.name for p in one.params] == ["x"]
	assert isinstance(one.body, ast.Binary)
	many = _expr("f((a, b) => {\n\treturn a\n})").args[0]
	assert [p.name for p in many.params] == ["a", "b"]
	assert isinstance(many.body, ast.Block)
	none = _expr("g(async () => 1)").args[0]
	assert none.params == [] and none.is_async


def test_parenthesized_expression_is_not_an_arrow() -> None:
	e = _expr("(a + b) * c")
	assert isinstance(e.left, ast.Paren)


def test_function_expression() -> None:
	e = _expr("handler = function (evt) {\n\treturn evt\n}")
	assert isinstance(e.value, ast.Function)
	assert e.value.name is None
	assert [p.name for p in e.value.params] == ["evt"]


def test_literals() -> None:
	arr = _expr("[1, 'two', true, null, undefined, `t${x}`]")
	kinds = [getattr(el, "kind", type(el).__name__) for el in arr.elements]
	assert kinds == ["number", "string", "boolean", "null", "undefined", "TemplateLiteral"]
	assert arr.elements[5].raw == "`t${x}`"


def test_object_literal_members() -> None:
	obj = _expr("f({a: 1, 'b': 2, c, ...d, m() { return 1 }, [k]: 3})").args[0]
	props = obj.properties
	assert [getattr(p, "kind", "spread") for p in props] == ["init", "init", "shorthand", "spread", "method", "init"]
	assert [getattr(p, "key", None) for p in props] == ["a", "b", "c", None, "m", None]
	assert isinstance(props[5].computed_key, ast.Name)


def test_comma_sequence_inside_parentheses() -> None:
	e = _expr("f((a, b, c))")
	seq = e.args[0].expression
	assert isinstance(seq, ast.Sequence)
	assert [x.name for x in seq.expressions] == ["a", "b", "c"]


def test_update_and_unary() -> None:
	assert _expr("i++").op == "++"
	pre = _expr("--i")
	assert isinstance(pre, ast.Update) and pre.prefix and pre.op == "--"
	neg = _expr("!done")
	assert isinstance(neg, ast.Unary) and neg.op == "!"
	kind = _expr("typeof x")
	assert kind.op == "typeof"


def test_template_literal_spanning_lines() -> None:
	prog = parse_program("let s = `a\nb`\nnext()\n")
	assert len(prog.body) == 2
	assert prog.body[0].declarations[0].init.raw == "`a\nb`"
	assert prog.body[1].loc.line == 3


def test_comments_are_ignored() -> None:
	prog = parse_program("// leading\na() /* inline */ + 1\n/* block\ncomment */\nb()\n")
	assert len(prog.body) == 2
	assert prog.body[1].loc.line == 5


def test_arrow_return_type_names_stay_type_names() -> None:
	e = _expr("f = (x: number): number => x")
	arrow = e.value
	assert isinstance(arrow, ast.Arrow)
	assert [p.name for p in arrow.params] == ["x"]
	assert isinstance(arrow.body, ast.Name) and arrow.body.name == "x"


def test_arrow_with_array_return_type() -> None:
	arrow = _expr("f = (x): string[] => [x]").value
	assert isinstance(arrow, ast.Arrow)
	assert isinstance(arrow.body, ast.ArrayLiteral)


@pytest.mark.parametrize("src, op", [("a << 1", "<<"), ("a >> b", ">>"), ("a >>> 2", ">>>")])
def test_shift_operators(src: str, op: str) -> None:
	e = _expr(src)
	assert isinstance(e, ast.Binary) and e.op == op


def test_shift_precedence_sits_between_additive_and_relational() -> None:
	e = _expr("a < b << 1 + c")
	assert e.op == "<"
	assert e.right.op == "<<"
	assert e.right.right.op == "+"


@pytest.mark.parametrize("src, op", [("x <<= 1", "<<="), ("x >>= n", ">>="), ("x >>>= 2", ">>>=")])
def test_compound_shift_assignment(src: str, op: str) -> None:
	e = _expr(src)
	assert isinstance(e, ast.Assign) and e.op == op


def test_nested_type_arguments_still_close_separately() -> None:
	prog = parse_program("let m: Map<string, Array<number>> = make<Array<Row>>(rows)\n")
	init = prog.body[0].declarations[0].init
	assert isinstance(init, ast.Call) and init.callee.name == "make"


def test_regex_literal_keeps_its_source_text() -> None:
	e = _expr("ok = /a[/]b\\/c/gi.test(s)")
	callee = e.value.callee
	assert isinstance(callee.object, ast.Literal)
	assert callee.object.kind == "regex"
	assert callee.object.raw == "/a[/]b\\/c/gi"


def test_regex_literal_may_contain_quotes() -> None:
	call = _expr("s.replace(/'/g, \"\")")
	assert call.args[0].kind == "regex"
	assert call.args[0].raw == "/'/g"


def test_regex_literal_after_return() -> None:
	fn = parse_program("function f(s) {\n\treturn /^x+$/.test(s)\n}\n").body[0]
	ret = fn.body.body[0]
	assert ret.argument.callee.object.raw == "/^x+$/"


def test_slashes_after_operands_still_divide() -> None:
	e = _expr("(a + b) / 2 / n")
	assert isinstance(e, ast.Binary) and e.op == "/"
	assert isinstance(e.left, ast.Binary) and e.left.op == "/"
