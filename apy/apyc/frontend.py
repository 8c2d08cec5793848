# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Front-end: source files -> erased, parsed compilation units.

Given the entry files, the front-end reads each unit, erases its
TypeScript-only syntax (the unit's "compiled text", plain JavaScript that the
same parser accepts), discovers its imports and re-exports, and follows every
local one. Units come back entry-first, then in discovery order, each once.

Module resolution:
  - `./x` and `../x` resolve against the importing file's directory.
  - other specifiers go through the `paths` alias table (`"@lib/*":
    ["src/lib/*"]`, targets relative to `base_url`), then `base_url` itself.
  - candidates for a base `X`: `X.ts`, `X.tsx`, `X/index.ts`, `X/index.tsx`,
    `X.d.ts`, `X/index.d.ts`; a `.js` suffix stands for the `.ts` file.
  - declaration files resolve but are never units.
  - the stdlib shim is never resolved; bare specifiers that resolve nowhere
    name target-language modules and are left alone.

A relative or aliased specifier that resolves nowhere is a `resolve` warning;
an unreadable file or a syntax error is an error for that unit only.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from lark.exceptions import UnexpectedInput

from apy import pylib
from apy.apyc.core.diagnostics import Diagnostic
from apy.apyc.core.span import Span
from apy.apyc.grammar import DEFAULT_GRAMMAR, Grammar
from apy.apyc.parser import parse_program
from apy.apyc.parser.ast import ExportNames, ImportDecl, Program

logger = logging.getLogger(__name__)

SOURCE_SUFFIXES = (".ts", ".tsx")
DECLARATION_SUFFIX = ".d.ts"


@dataclass
class SourceUnit:
	"""One parsed input file."""

	path: Path
	text: str
	compiled: str
	program: Program
	# Import/re-export specifier -> resolved local unit path.
	imports: Dict[str, Path] = field(default_factory=dict)


@dataclass
class FrontendResult:
	units: List[SourceUnit] = field(default_factory=list)
	diagnostics: List[Diagnostic] = field(default_factory=list)


def erase_types(source: str, program: Program) -> str:
	"""
	Remove every TypeScript-only span recorded while parsing `source`.

	Erased text keeps its newlines so line numbers survive.
	"""
	ranges = []
	for erasure in program.erasures:
		start, end = erasure.start, erasure.end
		if erasure.kind == "annotation":
			while start > 0 and source[start - 1] in " \t":
				start -= 1
		elif erasure.kind == "modifier":
			while end < len(source) and source[end] in " \t":
				end += 1
		ranges.append((start, end))
	ranges.sort()

	out: List[str] = []
	pos = 0
	for start, end in ranges:
		if end <= pos:
			continue
		start = max(start, pos)
		out.append(source[pos:start])
		out.append("\n" * source.count("\n", start, end))
		pos = end
	out.append(source[pos:])
	return "".join(out)


def parse_unit(path: Path, text: str) -> SourceUnit:
	"""Parse and erase one unit; raises UnexpectedInput on syntax errors."""
	program = parse_program(text)
	return SourceUnit(path=path, text=text, compiled=erase_types(text, program), program=program)


def dependencies(program: Program) -> List[str]:
	"""Specifiers of the value imports and re-exports of `program`, in order."""
	out: List[str] = []
	for stmt in program.body:
		if isinstance(stmt, ImportDecl):
			if stmt.type_only:
				continue
			only_types = stmt.has_named and all(s.type_only for s in stmt.specifiers)
			if only_types and stmt.default is None and stmt.namespace is None:
				continue
			out.append(stmt.source)
		elif isinstance(stmt, ExportNames) and stmt.source is not None:
			out.append(stmt.source)
	return out


def is_relative(specifier: str) -> bool:
	return specifier.startswith("./") or specifier.startswith("../") or specifier in (".", "..")


def _candidates(base: Path) -> List[Path]:
	name = base.name
	if name.endswith(SOURCE_SUFFIXES):
		return [base]
	if name.endswith(".js"):
		base = base.with_suffix("")
	return [
		base.with_name(base.name + ".ts"),
		base.with_name(base.name + ".tsx"),
		base / "index.ts",
		base / "index.tsx",
		base.with_name(base.name + DECLARATION_SUFFIX),
		base / ("index" + DECLARATION_SUFFIX),
	]


def _first_file(bases: Iterable[Path]) -> Optional[Path]:
	for base in bases:
		for candidate in _candidates(base):
			if candidate.is_file():
				return candidate
	return None


def _alias_bases(specifier: str, base_url: Path, paths: Mapping[str, Sequence[str]]) -> List[Path]:
	bases: List[Path] = []
	for pattern, targets in paths.items():
		if "*" in pattern:
			prefix, suffix = pattern.split("*", 1)
			if not (specifier.startswith(prefix) and specifier.endswith(suffix)):
				continue
			if len(specifier) < len(prefix) + len(suffix):
				continue
			star = specifier[len(prefix) : len(specifier) - len(suffix)]
			bases.extend(base_url / target.replace("*", star) for target in targets)
		elif pattern == specifier:
			bases.extend(base_url / target for target in targets)
	return bases


def is_aliased(specifier: str, paths: Optional[Mapping[str, Sequence[str]]]) -> bool:
	return bool(paths) and bool(_alias_bases(specifier, Path("."), paths or {}))


def resolve_specifier(
	specifier: str,
	importer: Path,
	*,
	base_url: Optional[Path] = None,
	paths: Optional[Mapping[str, Sequence[str]]] = None,
) -> Optional[Path]:
	"""Resolve an import specifier of `importer` to a file, or None."""
	if is_relative(specifier):
		return _first_file([importer.parent / specifier])
	root = base_url if base_url is not None else importer.parent
	if paths:
		found = _first_file(_alias_bases(specifier, root, paths))
		if found is not None:
			return found
	if base_url is not None:
		return _first_file([base_url / specifier])
	return None


def load_units(
	entries: Sequence[Path],
	*,
	grammar: Grammar = DEFAULT_GRAMMAR,
	base_url: Optional[Path] = None,
	paths: Optional[Mapping[str, Sequence[str]]] = None,
) -> FrontendResult:
	"""Load the entry units and every local unit they transitively import."""
	result = FrontendResult()
	queue = deque(Path(entry) for entry in entries)
	seen = set()
	while queue:
		path = queue.popleft()
		key = path.resolve()
		if key in seen:
			continue
		seen.add(key)
		if path.name.endswith(DECLARATION_SUFFIX):
			continue
		unit = _load(path, result.diagnostics)
		if unit is None:
			continue
		result.units.append(unit)
		logger.debug("loaded %s", path)
		for specifier in dependencies(unit.program):
			if pylib.is_shim_specifier(specifier, grammar):
				continue
			target = resolve_specifier(specifier, path, base_url=base_url, paths=paths)
			if target is None:
				if is_relative(specifier) or is_aliased(specifier, paths):
					message = f"cannot resolve import '{specifier}' from {path}"
					logger.warning(message)
					result.diagnostics.append(
						Diagnostic(
							message=message,
							code="unresolved-import",
							phase="resolve",
							severity="warning",
							span=_import_span(unit, specifier),
						)
					)
				continue
			if target.name.endswith(DECLARATION_SUFFIX):
				continue
			unit.imports[specifier] = target
			queue.append(target)
	return result


def _load(path: Path, diagnostics: List[Diagnostic]) -> Optional[SourceUnit]:
	try:
		text = path.read_text(encoding="utf-8")
	except (OSError, UnicodeDecodeError) as err:
		logger.error("cannot read %s: %s", path, err)
		diagnostics.append(
			Diagnostic(
				message=f"cannot read {path}: {err}",
				code="unreadable",
				phase="resolve",
				severity="error",
				span=Span(file=str(path)),
			)
		)
		return None
	try:
		return parse_unit(path, text)
	except UnexpectedInput as err:
		diagnostics.append(syntax_diagnostic(err, str(path)))
		return None


def syntax_diagnostic(err: UnexpectedInput, file: Optional[str]) -> Diagnostic:
	"""Convert a lark parse failure into a `parser`-phase error."""
	span = Span(
		file=file,
		line=getattr(err, "line", None),
		column=getattr(err, "column", None),
		raw=err,
	)
	message = str(err).strip().splitlines()[0] if str(err).strip() else "syntax error"
	logger.error("%s: %s", span.format_prefix(), message)
	return Diagnostic(message=message, code="syntax", phase="parser", severity="error", span=span)


def _import_span(unit: SourceUnit, specifier: str) -> Span:
	for stmt in unit.program.body:
		if isinstance(stmt, (ImportDecl, ExportNames)) and getattr(stmt, "source", None) == specifier:
			return Span(file=str(unit.path), line=stmt.loc.line, column=stmt.loc.column)
	return Span(file=str(unit.path))


__all__ = [
	"FrontendResult",
	"SourceUnit",
	"dependencies",
	"erase_types",
	"load_units",
	"parse_unit",
	"resolve_specifier",
	"syntax_diagnostic",
]
