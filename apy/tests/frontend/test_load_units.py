# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

from apy.apyc.frontend import load_units


def _write_file(path: Path, text: str) -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(text, encoding="utf-8")
	return path


def _names(result) -> list[str]:
	return [unit.path.name for unit in result.units]


def test_units_are_loaded_entry_first_and_once(tmp_path: Path) -> None:
	main = _write_file(
		tmp_path / "main.ts",
		"""
import { f } from "./a"
import py from "pylib"
import os from "os"
f()
""",
	)
	_write_file(tmp_path / "a.ts", 'import { g } from "./b"\nimport { main } from "./main"\nexport function f() { g() }\n')
	_write_file(tmp_path / "b.ts", "export function g() {}\n")
	result = load_units([main])
	assert _names(result) == ["main.ts", "a.ts", "b.ts"]
	assert result.diagnostics == []
	assert result.units[0].imports == {"./a": tmp_path / "a.ts"}


def test_compiled_text_is_type_erased(tmp_path: Path) -> None:
	main = _write_file(tmp_path / "main.ts", "let n: number = 1\n")
	unit = load_units([main]).units[0]
	assert unit.text == "let n: number = 1\n"
	assert unit.compiled == "let n = 1\n"


def test_unresolved_relative_import_is_a_warning(tmp_path: Path) -> None:
	main = _write_file(tmp_path / "main.ts", "let x = 1\nimport { y } from './missing'\n")
	result = load_units([main])
	assert _names(result) == ["main.ts"]
	(diag,) = result.diagnostics
	assert (diag.code, diag.phase, diag.severity) == ("unresolved-import", "resolve", "warning")
	assert diag.span.file == str(main)
	assert diag.span.line == 2
	assert "./missing" in diag.message


def test_unresolved_alias_is_a_warning_but_bare_names_are_not(tmp_path: Path) -> None:
	main = _write_file(tmp_path / "main.ts", "import a from '@lib/a'\nimport np from 'numpy'\n")
	result = load_units([main], base_url=tmp_path, paths={"@lib/*": ["lib/*"]})
	assert [d.code for d in result.diagnostics] == ["unresolved-import"]
	assert "@lib/a" in result.diagnostics[0].message


def test_syntax_error_only_drops_that_unit(tmp_path: Path) -> None:
	main = _write_file(tmp_path / "main.ts", "import './bad'\nimport './good'\n")
	bad = _write_file(tmp_path / "bad.ts", "let = ;\n")
	_write_file(tmp_path / "good.ts", "ok()\n")
	result = load_units([main])
	assert _names(result) == ["main.ts", "good.ts"]
	(diag,) = result.diagnostics
	assert (diag.code, diag.phase, diag.severity) == ("syntax", "parser", "error")
	assert diag.span.file == str(bad)
	assert diag.span.line == 1


def test_missing_entry_is_an_unreadable_error(tmp_path: Path) -> None:
	result = load_units([tmp_path / "nope.ts"])
	assert result.units == []
	(diag,) = result.diagnostics
	assert (diag.code, diag.phase, diag.severity) == ("unreadable", "resolve", "error")


def test_declaration_files_and_type_imports_are_not_units(tmp_path: Path) -> None:
	main = _write_file(
		tmp_path / "main.ts",
		"import { Api } from './api'\nimport type { Cfg } from './cfg'\nuse(Api)\n",
	)
	_write_file(tmp_path / "api.d.ts", "export declare const Api: number\n")
	_write_file(tmp_path / "cfg.ts", "export interface Cfg {}\n")
	result = load_units([main, tmp_path / "api.d.ts"])
	assert _names(result) == ["main.ts"]
	assert result.diagnostics == []


def test_shim_imports_are_never_resolved(tmp_path: Path) -> None:
	main = _write_file(tmp_path / "main.ts", "import py from './pylib'\nimport { randint } from './pylib/random'\n")
	result = load_units([main])
	assert _names(result) == ["main.ts"]
	assert result.diagnostics == []


def test_re_exports_are_followed(tmp_path: Path) -> None:
	main = _write_file(tmp_path / "main.ts", "export { helper } from './helpers'\n")
	_write_file(tmp_path / "helpers.ts", "export function helper() {}\n")
	assert _names(load_units([main])) == ["main.ts", "helpers.ts"]
