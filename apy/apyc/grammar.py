# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Target-language grammar model.

A `Grammar` describes the surface syntax the emitter writes: keyword spellings,
block style (indentation vs braces), statement terminators, template literal
delimiters, the standard-library shim aliases and the global token replacement
table. One value is built per run and shared read-only by every unit.

The JSON shape (camelCase, as found under `grammar` in apyconfig.json):

	{
	  "functionKeyword": "def",
	  "variableKeyword": "",
	  "class": {"keyword": "class", "constructorName": "__init__", ...},
	  "templateLiteral": {"start": "f'", "end": "'", "interpolationStart": "{", "interpolationEnd": "}"},
	  "file": {"extension": "py", "useSemicolons": false, "useBraces": false,
	           "stdlib": {"importName": "pylib", "importPath": "pylib", "recognizedAliases": ["py", "pylib"]},
	           "tokenReplacements": {"true": "True", ...}},
	  "keywords": {"elif": "elif", ...}
	}

Every omitted field falls back to its default independently. Construction fails
with `ApyError(BAD_GRAMMAR)` only for inconsistent input: a partially specified
`templateLiteral` or a value of the wrong JSON type.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from .errors import BAD_GRAMMAR, ApyError

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_REPLACEMENTS: tuple[tuple[str, str], ...] = (
	("true", "True"),
	("false", "False"),
	("console.log", "print"),
	("this", "self"),
	("null", "None"),
	("undefined", "None"),
	("===", "=="),
	("!==", "!="),
	("++", " += 1"),
	("--", " -= 1"),
)

DEFAULT_KEYWORDS: tuple[tuple[str, str], ...] = (
	("if", "if"),
	("elif", "elif"),
	("else", "else"),
	("for", "for"),
	("in", "in"),
	("range", "range"),
	("while", "while"),
	("with", "with"),
	("as", "as"),
	("import", "import"),
	("from", "from"),
	("break", "break"),
	("continue", "continue"),
	("raise", "raise"),
	("try", "try"),
	("except", "except"),
	("finally", "finally"),
	("catchType", "Exception"),
	("pass", "pass"),
	("async", "async"),
	("lambda", "lambda"),
	("rest", "*"),
)


@dataclass(frozen=True)
class ClassSyntax:
	keyword: str = "class"
	# Empty means "use the class name" (C#/Java style constructors).
	constructor_name: str = "__init__"
	prefix_self: bool = True
	self_name: str = "self"
	prefix_method_keyword: bool = True
	constructor_is_function: bool = True
	call_with_new_keyword: bool = False
	extends_start: str = "("
	extends_end: str = ")"
	static_decorator: str = "@staticmethod"


@dataclass(frozen=True)
class TemplateLiteralSyntax:
	start: str = "f'"
	end: str = "'"
	interpolation_start: str = "{"
	interpolation_end: str = "}"


@dataclass(frozen=True)
class StdlibSyntax:
	import_name: str = "pylib"
	import_path: str = "pylib"
	recognized_aliases: tuple[str, ...] = ("py", "pylib")


@dataclass(frozen=True)
class FileSyntax:
	extension: str = "py"
	use_semicolons: bool = False
	use_braces: bool = False
	parenthesize_conditions: bool = False
	stdlib: StdlibSyntax = field(default_factory=StdlibSyntax)
	# Ordered (source, replacement) pairs; applied in this order.
	token_replacements: tuple[tuple[str, str], ...] = DEFAULT_TOKEN_REPLACEMENTS


@dataclass(frozen=True)
class Grammar:
	"""Immutable target-language syntax description."""

	function_keyword: str = "def"
	variable_keyword: str = ""
	class_syntax: ClassSyntax = field(default_factory=ClassSyntax)
	template_literal: TemplateLiteralSyntax = field(default_factory=TemplateLiteralSyntax)
	file: FileSyntax = field(default_factory=FileSyntax)
	keywords: tuple[tuple[str, str], ...] = DEFAULT_KEYWORDS
	string_quote: str = "'"
	indent: str = "    "

	def keyword(self, name: str) -> str:
		"""Spelling of keyword `name` (see DEFAULT_KEYWORDS for the names)."""
		for key, value in self.keywords:
			if key == name:
				return value
		raise KeyError(name)

	def indentation(self, depth: int) -> str:
		return self.indent * depth

	@property
	def terminator(self) -> str:
		return ";" if self.file.use_semicolons else ""

	@classmethod
	def from_dict(cls, data: Mapping[str, Any] | None) -> "Grammar":
		"""Build a Grammar from its JSON shape, defaulting omitted fields."""
		if data is None:
			return cls()
		_expect(data, Mapping, "grammar")
		base = cls()
		_warn_unknown(
			data,
			{"functionKeyword", "variableKeyword", "class", "templateLiteral", "file", "keywords", "stringQuote", "indent"},
			"grammar",
		)
		return replace(
			base,
			function_keyword=_str(data, "functionKeyword", base.function_keyword, "grammar"),
			variable_keyword=_str(data, "variableKeyword", base.variable_keyword, "grammar"),
			class_syntax=_class_from_dict(data.get("class")),
			template_literal=_template_from_dict(data.get("templateLiteral")),
			file=_file_from_dict(data.get("file")),
			keywords=_keywords_from_dict(data.get("keywords")),
			string_quote=_str(data, "stringQuote", base.string_quote, "grammar"),
			indent=_str(data, "indent", base.indent, "grammar"),
		)


DEFAULT_GRAMMAR = Grammar()


def _class_from_dict(data: Any) -> ClassSyntax:
	base = ClassSyntax()
	if data is None:
		return base
	_expect(data, Mapping, "class")
	_warn_unknown(
		data,
		{
			"keyword",
			"constructorName",
			"prefixSelf",
			"doPrefixWithSelf",
			"selfName",
			"prefixMethodKeyword",
			"doPrefixMethods",
			"constructorIsFunction",
			"constructorIsAFunction",
			"callWithNewKeyword",
			"extendsStart",
			"extendsEnd",
			"staticDecorator",
		},
		"class",
	)
	return ClassSyntax(
		keyword=_str(data, "keyword", base.keyword, "class"),
		constructor_name=_str(data, "constructorName", base.constructor_name, "class"),
		prefix_self=_bool(data, ("prefixSelf", "doPrefixWithSelf"), base.prefix_self, "class"),
		self_name=_str(data, "selfName", base.self_name, "class"),
		prefix_method_keyword=_bool(
			data, ("prefixMethodKeyword", "doPrefixMethods"), base.prefix_method_keyword, "class"
		),
		constructor_is_function=_bool(
			data, ("constructorIsFunction", "constructorIsAFunction"), base.constructor_is_function, "class"
		),
		call_with_new_keyword=_bool(data, ("callWithNewKeyword",), base.call_with_new_keyword, "class"),
		extends_start=_str(data, "extendsStart", base.extends_start, "class"),
		extends_end=_str(data, "extendsEnd", base.extends_end, "class"),
		static_decorator=_str(data, "staticDecorator", base.static_decorator, "class"),
	)


def _template_from_dict(data: Any) -> TemplateLiteralSyntax:
	if data is None:
		return TemplateLiteralSyntax()
	_expect(data, Mapping, "templateLiteral")
	required = ("start", "end", "interpolationStart", "interpolationEnd")
	present = [k for k in required if k in data]
	if not present:
		return TemplateLiteralSyntax()
	missing = [k for k in required if k not in data]
	if missing:
		raise ApyError(
			BAD_GRAMMAR,
			f"templateLiteral is partially specified; missing {', '.join(missing)}",
			key="templateLiteral",
		)
	return TemplateLiteralSyntax(
		start=_str(data, "start", "", "templateLiteral"),
		end=_str(data, "end", "", "templateLiteral"),
		interpolation_start=_str(data, "interpolationStart", "", "templateLiteral"),
		interpolation_end=_str(data, "interpolationEnd", "", "templateLiteral"),
	)


def _stdlib_from_dict(data: Any) -> StdlibSyntax:
	base = StdlibSyntax()
	if data is None:
		return base
	_expect(data, Mapping, "file.stdlib")
	_warn_unknown(data, {"importName", "importPath", "recognizedAliases"}, "file.stdlib")
	aliases = data.get("recognizedAliases", base.recognized_aliases)
	if not isinstance(aliases, (list, tuple)) or not all(isinstance(a, str) for a in aliases):
		raise ApyError(BAD_GRAMMAR, "recognizedAliases must be a list of strings", key="file.stdlib.recognizedAliases")
	return StdlibSyntax(
		import_name=_str(data, "importName", base.import_name, "file.stdlib"),
		import_path=_str(data, "importPath", base.import_path, "file.stdlib"),
		recognized_aliases=tuple(aliases),
	)


def _file_from_dict(data: Any) -> FileSyntax:
	base = FileSyntax()
	if data is None:
		return base
	_expect(data, Mapping, "file")
	_warn_unknown(
		data,
		{"extension", "useSemicolons", "useBraces", "parenthesizeConditions", "stdlib", "tokenReplacements"},
		"file",
	)
	replacements = base.token_replacements
	if "tokenReplacements" in data:
		replacements = _pairs(data["tokenReplacements"], "file.tokenReplacements")
	return FileSyntax(
		extension=_str(data, "extension", base.extension, "file").lstrip("."),
		use_semicolons=_bool(data, ("useSemicolons",), base.use_semicolons, "file"),
		use_braces=_bool(data, ("useBraces",), base.use_braces, "file"),
		parenthesize_conditions=_bool(data, ("parenthesizeConditions",), base.parenthesize_conditions, "file"),
		stdlib=_stdlib_from_dict(data.get("stdlib")),
		token_replacements=replacements,
	)


def _keywords_from_dict(data: Any) -> tuple[tuple[str, str], ...]:
	if data is None:
		return DEFAULT_KEYWORDS
	overrides = dict(_pairs(data, "keywords"))
	known = {k for k, _ in DEFAULT_KEYWORDS}
	_warn_unknown(overrides, known, "keywords")
	return tuple((k, overrides.get(k, v)) for k, v in DEFAULT_KEYWORDS)


def _pairs(data: Any, where: str) -> tuple[tuple[str, str], ...]:
	_expect(data, Mapping, where)
	out: list[tuple[str, str]] = []
	for key, value in data.items():
		if not isinstance(value, str):
			raise ApyError(BAD_GRAMMAR, f"{where}.{key} must be a string", key=f"{where}.{key}")
		out.append((str(key), value))
	return tuple(out)


def _str(data: Mapping[str, Any], key: str, default: str, where: str) -> str:
	value = data.get(key, default)
	if not isinstance(value, str):
		raise ApyError(BAD_GRAMMAR, f"{where}.{key} must be a string", key=f"{where}.{key}")
	return value


def _bool(data: Mapping[str, Any], keys: tuple[str, ...], default: bool, where: str) -> bool:
	for key in keys:
		if key in data:
			value = data[key]
			if not isinstance(value, bool):
				raise ApyError(BAD_GRAMMAR, f"{where}.{key} must be a boolean", key=f"{where}.{key}")
			return value
	return default


def _expect(value: Any, kind: type, where: str) -> None:
	if not isinstance(value, kind):
		raise ApyError(BAD_GRAMMAR, f"{where} must be a JSON object", key=where)


def _warn_unknown(data: Mapping[str, Any], known: set[str], where: str) -> None:
	for key in data:
		if key not in known:
			logger.warning("ignoring unknown grammar key %s.%s", where, key)


__all__ = [
	"ClassSyntax",
	"DEFAULT_GRAMMAR",
	"DEFAULT_KEYWORDS",
	"DEFAULT_TOKEN_REPLACEMENTS",
	"FileSyntax",
	"Grammar",
	"StdlibSyntax",
	"TemplateLiteralSyntax",
]
