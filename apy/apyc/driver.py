# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Multi-unit compilation driver.

For every unit the front-end returns (entry first, then transitive imports):

  1. strip `alias.` qualifiers of the recognized stdlib aliases from the
     unit's compiled text (`py.withStatement(...)` -> `withStatement(...)`)
  2. re-parse the stripped text
  3. emit it with the Grammar
  4. run the token replacement pass
  5. write `<out_dir>/<stem>.<extension>`

Units are independent: the only cross-unit information is the output module
name of each resolved local import. Every per-unit problem is a Diagnostic in
the returned `CompileResult`; nothing unit-level is raised.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from lark.exceptions import UnexpectedInput

from apy.apyc.core.diagnostics import Diagnostic, has_errors
from apy.apyc.core.span import Span
from apy.apyc.emit import Emitter, apply_replacements
from apy.apyc.frontend import SourceUnit, erase_types, load_units, syntax_diagnostic
from apy.apyc.grammar import DEFAULT_GRAMMAR, Grammar
from apy.apyc.parser import parse_program

logger = logging.getLogger(__name__)

DEFAULT_OUT_DIR = Path("out")


@dataclass
class CompiledUnit:
	"""One compilation unit: its source and the generated target text."""

	source_path: Optional[Path]
	source_text: str
	generated_text: str = ""
	output_path: Optional[Path] = None
	diagnostics: List[Diagnostic] = field(default_factory=list)

	@property
	def ok(self) -> bool:
		return not has_errors(self.diagnostics)


@dataclass
class CompileResult:
	units: List[CompiledUnit] = field(default_factory=list)
	diagnostics: List[Diagnostic] = field(default_factory=list)

	@property
	def ok(self) -> bool:
		return not has_errors(self.diagnostics)


def strip_stdlib_aliases(text: str, grammar: Grammar) -> str:
	"""Drop `alias.` qualifiers for every recognized stdlib alias."""
	for alias in grammar.file.stdlib.recognized_aliases:
		if alias:
			text = re.sub(rf"(?<![\w$.]){re.escape(alias)}\.(?=[A-Za-z_$])", "", text)
	return text


def compile_source(
	text: str,
	grammar: Grammar = DEFAULT_GRAMMAR,
	*,
	file: Optional[str] = None,
	module_names: Optional[Mapping[str, str]] = None,
) -> CompiledUnit:
	"""Compile one unit given as a string; no file system access."""
	try:
		program = parse_program(text)
	except UnexpectedInput as err:
		return CompiledUnit(
			source_path=Path(file) if file else None,
			source_text=text,
			diagnostics=[syntax_diagnostic(err, file)],
		)
	return _emit_unit(
		erase_types(text, program),
		grammar,
		source_path=Path(file) if file else None,
		source_text=text,
		module_names=module_names,
	)


def _emit_unit(
	compiled: str,
	grammar: Grammar,
	*,
	source_path: Optional[Path],
	source_text: str,
	module_names: Optional[Mapping[str, str]] = None,
) -> CompiledUnit:
	file = str(source_path) if source_path is not None else None
	unit = CompiledUnit(source_path=source_path, source_text=source_text)
	stripped = strip_stdlib_aliases(compiled, grammar)
	try:
		program = parse_program(stripped)
	except UnexpectedInput as err:
		unit.diagnostics.append(syntax_diagnostic(err, file))
		return unit
	emitter = Emitter(stripped, grammar, file=file, module_names=module_names)
	raw = emitter.emit_program(program)
	unit.generated_text = apply_replacements(raw, grammar)
	unit.diagnostics.extend(emitter.diagnostics)
	logger.debug("emitted %s (%d lines)", file or "<string>", unit.generated_text.count("\n"))
	return unit


def unit_stem(path: Path) -> str:
	name = path.name
	for suffix in (".tsx", ".ts", ".js"):
		if name.endswith(suffix):
			return name[: -len(suffix)]
	return path.stem


def compile_entries(
	entries: Sequence[Path],
	grammar: Grammar = DEFAULT_GRAMMAR,
	out_dir: Path = DEFAULT_OUT_DIR,
	*,
	base_url: Optional[Path] = None,
	paths: Optional[Mapping[str, Sequence[str]]] = None,
	write: bool = True,
) -> CompileResult:
	"""
	Compile the entry units and everything they import.

	With `write=False` nothing touches the file system besides reading the
	sources; `output_path` is still filled in.
	"""
	front = load_units(entries, grammar=grammar, base_url=base_url, paths=paths)
	result = CompileResult(diagnostics=list(front.diagnostics))
	written: Dict[Path, Path] = {}
	for source in front.units:
		unit = _compile_unit(source, grammar)
		unit.output_path = Path(out_dir) / f"{unit_stem(source.path)}.{grammar.file.extension}"
		previous = written.get(unit.output_path)
		if previous is not None:
			message = f"{source.path} and {previous} both compile to {unit.output_path}; the later one wins"
			logger.warning(message)
			unit.diagnostics.append(
				Diagnostic(
					message=message,
					code="output-collision",
					phase="driver",
					severity="warning",
					span=Span(file=str(source.path)),
				)
			)
		written[unit.output_path] = source.path
		if write and unit.ok:
			_write(unit)
		result.units.append(unit)
		result.diagnostics.extend(unit.diagnostics)
	return result


async def compile_entries_async(
	entries: Sequence[Path],
	grammar: Grammar = DEFAULT_GRAMMAR,
	out_dir: Path = DEFAULT_OUT_DIR,
	*,
	base_url: Optional[Path] = None,
	paths: Optional[Mapping[str, Sequence[str]]] = None,
	write: bool = True,
) -> CompileResult:
	"""Awaitable `compile_entries`; the compile itself runs to completion synchronously."""
	return compile_entries(entries, grammar, out_dir, base_url=base_url, paths=paths, write=write)


def _compile_unit(source: SourceUnit, grammar: Grammar) -> CompiledUnit:
	module_names = {spec: unit_stem(target) for spec, target in source.imports.items()}
	return _emit_unit(
		source.compiled,
		grammar,
		source_path=source.path,
		source_text=source.text,
		module_names=module_names,
	)


def _write(unit: CompiledUnit) -> None:
	assert unit.output_path is not None
	try:
		unit.output_path.parent.mkdir(parents=True, exist_ok=True)
		unit.output_path.write_text(unit.generated_text, encoding="utf-8")
	except OSError as err:
		logger.error("cannot write %s: %s", unit.output_path, err)
		unit.diagnostics.append(
			Diagnostic(
				message=f"cannot write {unit.output_path}: {err}",
				code="write-failed",
				phase="driver",
				severity="error",
				span=Span(file=str(unit.source_path)),
			)
		)
		return
	logger.info("wrote %s", unit.output_path)


__all__ = [
	"CompileResult",
	"CompiledUnit",
	"DEFAULT_OUT_DIR",
	"compile_entries",
	"compile_entries_async",
	"compile_source",
	"strip_stdlib_aliases",
	"unit_stem",
]
