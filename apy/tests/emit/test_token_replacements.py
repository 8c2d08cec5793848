# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from apy.apyc.driver import compile_source
from apy.apyc.emit import apply_replacements
from apy.apyc.grammar import DEFAULT_GRAMMAR, Grammar


@pytest.mark.parametrize(
	"text, expected",
	[
		("x = true", "x = True"),
		("if a === b and c !== d", "if a == b and c != d"),
		("this.count", "self.count"),
		("v = null or undefined", "v = None or None"),
		("console.log(x)", "print(x)"),
		("i++", "i += 1"),
		("i--", "i -= 1"),
	],
)
def test_default_table(text: str, expected: str) -> None:
	assert apply_replacements(text, DEFAULT_GRAMMAR) == expected


def test_identifier_tokens_respect_boundaries() -> None:
	assert apply_replacements("thistle = this_x + this", DEFAULT_GRAMMAR) == "thistle = this_x + self"
	assert apply_replacements("construe(untrue, true)", DEFAULT_GRAMMAR) == "construe(untrue, True)"
	assert apply_replacements("nullable.$this", DEFAULT_GRAMMAR) == "nullable.$this"


def test_replacement_is_lexical_and_reaches_into_strings() -> None:
	assert apply_replacements("msg = 'this is true'", DEFAULT_GRAMMAR) == "msg = 'self is True'"


def test_table_order_is_kept() -> None:
	grammar = Grammar.from_dict({"file": {"tokenReplacements": {"a": "b", "b": "c"}}})
	assert apply_replacements("a b", grammar) == "c c"
	reverse = Grammar.from_dict({"file": {"tokenReplacements": {"b": "c", "a": "b"}}})
	assert apply_replacements("a b", reverse) == "b c"


def test_configured_table_replaces_the_default_one() -> None:
	grammar = Grammar.from_dict({"file": {"tokenReplacements": {"console.log": "System.out.println"}}})
	assert compile_source("console.log(true)\n", grammar).generated_text == "System.out.println(true)\n"


def test_empty_tokens_are_ignored() -> None:
	grammar = Grammar.from_dict({"file": {"tokenReplacements": {"": "x"}}})
	assert apply_replacements("abc", grammar) == "abc"


def test_replacements_run_on_the_whole_unit() -> None:
	src = "function f() {\n\tif (this.ready === true) {\n\t\treturn null\n\t}\n}\n"
	assert compile_source(src).generated_text == (
		"def f():\n    if self.ready == True:\n        return None\n"
	)
