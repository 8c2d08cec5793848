# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

from apy.apyc.frontend import dependencies, is_relative, resolve_specifier
from apy.apyc.parser import parse_program


def _touch(path: Path, text: str = "") -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(text, encoding="utf-8")
	return path


def test_relative_specifiers() -> None:
	assert is_relative("./a")
	assert is_relative("../a/b")
	assert is_relative("..")
	assert not is_relative("lodash")
	assert not is_relative("@lib/x")


def test_resolve_relative_candidates(tmp_path: Path) -> None:
	main = _touch(tmp_path / "main.ts")
	util = _touch(tmp_path / "util.ts")
	index = _touch(tmp_path / "lib" / "index.ts")
	view = _touch(tmp_path / "view.tsx")
	assert resolve_specifier("./util", main) == util
	assert resolve_specifier("./util.js", main) == util
	assert resolve_specifier("./util.ts", main) == util
	assert resolve_specifier("./lib", main) == index
	assert resolve_specifier("./view", main) == view
	assert resolve_specifier("./nope", main) is None


def test_resolve_parent_directory(tmp_path: Path) -> None:
	main = _touch(tmp_path / "src" / "main.ts")
	shared = _touch(tmp_path / "shared.ts")
	found = resolve_specifier("../shared", main)
	assert found is not None and found.resolve() == shared.resolve()


def test_ts_source_is_preferred_over_declaration(tmp_path: Path) -> None:
	main = _touch(tmp_path / "main.ts")
	_touch(tmp_path / "api.d.ts")
	assert resolve_specifier("./api", main) == tmp_path / "api.d.ts"
	api = _touch(tmp_path / "api.ts")
	assert resolve_specifier("./api", main) == api


def test_resolve_path_aliases(tmp_path: Path) -> None:
	main = _touch(tmp_path / "src" / "main.ts")
	math = _touch(tmp_path / "src" / "lib" / "math.ts")
	config = _touch(tmp_path / "config" / "index.ts")
	paths = {"@lib/*": ["src/lib/*"], "@config": ["config"]}
	assert resolve_specifier("@lib/math", main, base_url=tmp_path, paths=paths) == math
	assert resolve_specifier("@config", main, base_url=tmp_path, paths=paths) == config
	assert resolve_specifier("@lib/missing", main, base_url=tmp_path, paths=paths) is None


def test_resolve_against_base_url(tmp_path: Path) -> None:
	main = _touch(tmp_path / "src" / "main.ts")
	log = _touch(tmp_path / "shared" / "log.ts")
	assert resolve_specifier("shared/log", main, base_url=tmp_path) == log
	assert resolve_specifier("shared/log", main) is None
	assert resolve_specifier("os", main, base_url=tmp_path) is None


def test_dependencies_skip_type_only_imports() -> None:
	prog = parse_program(
		"""
import a from './a'
import type { T } from './t'
import { type U } from './u'
import { type V, w } from './vw'
export * from './all'
export { x } from './x'
import './side'
"""
	)
	assert dependencies(prog) == ["./a", "./vw", "./all", "./x", "./side"]
