# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from apy.apyc.driver import compile_source
from apy.apyc.emit import Emitter
from apy.apyc.parser import parse_program


def _py(src: str) -> str:
	unit = compile_source(src)
	assert unit.ok, [d.format_human() for d in unit.diagnostics]
	return unit.generated_text


def test_variables_lose_their_declaration_keyword() -> None:
	assert _py("let x = 5\nconst s = 'hi'\nvar n: number = 1\n") == "x = 5\ns = 'hi'\nn = 1\n"


def test_uninitialized_variable_becomes_none() -> None:
	assert _py("let pending\n") == "pending = None\n"


def test_semicolon_separated_statements_get_their_own_lines() -> None:
	assert _py("a(); b();\ncount += 2\n") == "a()\nb()\ncount += 2\n"


def test_function_declaration() -> None:
	src = "function add(a: number, b: number): number {\n\treturn a + b\n}\n"
	assert _py(src) == "def add(a, b):\n    return a + b\n"


def test_empty_function_body_gets_pass() -> None:
	assert _py("function noop() {}\n") == "def noop():\n    pass\n"


def test_default_and_rest_parameters() -> None:
	assert _py("function f(a, b = 2, ...rest) {}\n") == "def f(a, b=2, *rest):\n    pass\n"


def test_async_function_and_await() -> None:
	src = "async function load(url) {\n\tconst res = await fetch(url)\n\treturn res\n}\n"
	assert _py(src) == "async def load(url):\n    res = await fetch(url)\n    return res\n"


def test_arrow_with_block_body_bound_to_a_name_is_a_function() -> None:
	src = "const greet = (name: string) => {\n\treturn `hi ${name}`\n}\n"
	assert _py(src) == "def greet(name):\n    return f'hi {name}'\n"


def test_arrow_with_expression_body_is_a_lambda() -> None:
	assert _py("const double = (x) => x * 2\n") == "double = lambda x: x * 2\n"


def test_arrow_return_types_are_erased() -> None:
	assert _py("const f = (x: number): number => x\n") == "f = lambda x: x\n"
	assert _py("const g = (x): string[] => [x]\n") == "g = lambda x: [x]\n"


def test_shift_operators_are_copied() -> None:
	assert _py("mask = flags << 2 | bit >> 1\n") == "mask = flags << 2 | bit >> 1\n"
	assert _py("n <<= 1\n") == "n <<= 1\n"


def test_nested_blocks_indent_one_level_each() -> None:
	src = """function sign(n: number): string {
	if (n < 0) {
		return "neg"
	}
	return "pos"
}
"""
	assert _py(src) == 'def sign(n):\n    if n < 0:\n        return "neg"\n    return "pos"\n'


def test_if_else_if_else_chain() -> None:
	src = """if (x > 1) {
	a()
} else if (x === 0) {
	b()
} else {
	c()
}
"""
	assert _py(src) == "if x > 1:\n    a()\nelif x == 0:\n    b()\nelse:\n    c()\n"


def test_brace_less_bodies() -> None:
	src = "function f(done) {\n\tif (done) return\n\tgo()\n}\n"
	assert _py(src) == "def f(done):\n    if done:\n        return\n    go()\n"


def test_while_with_break_and_continue() -> None:
	src = "while (true) {\n\tif (skip()) continue\n\tbreak\n}\n"
	assert _py(src) == "while True:\n    if skip():\n        continue\n    break\n"


def test_update_statements_become_augmented_assignments() -> None:
	assert _py("while (n > 0) {\n\tn--\n}\n++hits\n") == "while n > 0:\n    n -= 1\nhits += 1\n"


@pytest.mark.parametrize(
	"src, header",
	[
		("for (let i = 0; i < 10; i++) { console.log(i) }\n", "for i in range(0, 10, 1):"),
		("for (let i = 1; i <= 5; i += 2) { console.log(i) }\n", "for i in range(1, 6, 2):"),
		("for (let i = 5; i > 0; i--) { console.log(i) }\n", "for i in range(5, 0, -1):"),
		("for (let i = 10; i >= 0; i -= 5) { console.log(i) }\n", "for i in range(10, -1, -5):"),
		("for (let i = 0; i <= n; i++) { console.log(i) }\n", "for i in range(0, n + 1, 1):"),
		("for (i = 0; i < n; i++) { console.log(i) }\n", "for i in range(0, n, 1):"),
	],
)
def test_counting_loops_become_ranges(src: str, header: str) -> None:
	assert _py(src) == f"{header}\n    print(i)\n"


def test_for_of_and_for_in() -> None:
	assert _py("for (const item of items) {\n\tuse(item)\n}\n") == "for item in items:\n    use(item)\n"
	assert _py("for (const [k, v] of pairs) {}\n") == "for k, v in pairs:\n    pass\n"
	assert _py("for (const key in obj) {}\n") == "for key in obj:\n    pass\n"
	assert _py("for await (const chunk of stream) {}\n") == "async for chunk in stream:\n    pass\n"


def test_try_catch_finally() -> None:
	src = """try {
	risky()
} catch (e) {
	handle(e)
} finally {
	done()
}
"""
	assert _py(src) == "try:\n    risky()\nexcept Exception as e:\n    handle(e)\nfinally:\n    done()\n"


def test_catch_without_binding() -> None:
	assert _py("try {\n\trisky()\n} catch {\n\tretry()\n}\n") == "try:\n    risky()\nexcept Exception:\n    retry()\n"


def test_throw_becomes_raise() -> None:
	assert _py('throw new Error("bad")\n') == 'raise Error("bad")\n'


def test_exports_emit_their_declarations_only() -> None:
	src = "export const x = 1\nexport function f() {}\nexport { x as y }\nexport default class A {}\n"
	assert _py(src) == "x = 1\ndef f():\n    pass\nclass A:\n    pass\n"


def test_type_only_declarations_emit_nothing() -> None:
	assert _py("interface P {\n\tx: number\n}\ntype Id = string\nrun()\n") == "run()\n"


def test_empty_program_emits_nothing() -> None:
	assert _py("") == ""
	assert _py("// only a comment\n") == ""


def test_emitter_output_is_not_token_replaced() -> None:
	src = "console.log(true)\n"
	assert Emitter(src).emit_program(parse_program(src)) == "console.log(true)\n"
	assert _py(src) == "print(True)\n"
