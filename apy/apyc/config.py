# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
apyconfig.json loading.

Format (JSON object, every key optional):

	{
	  "entry": "src/main.ts",            // or a list of paths
	  "outDir": "out",
	  "grammar": { ... },                // see apy.apyc.grammar
	  "baseUrl": ".",
	  "paths": {"@lib/*": ["src/lib/*"]}
	}

Relative paths are relative to the directory holding the config file. When no
config path is given, `apyconfig.json` in the working directory is used if it
exists; its absence is not an error.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import BAD_CONFIG, ApyError
from .grammar import DEFAULT_GRAMMAR, Grammar

logger = logging.getLogger(__name__)

CONFIG_NAME = "apyconfig.json"
KNOWN_KEYS = {"entry", "outDir", "grammar", "baseUrl", "paths"}


@dataclass
class ApyConfig:
	root: Path
	entries: List[Path] = field(default_factory=list)
	out_dir: Optional[Path] = None
	grammar: Grammar = DEFAULT_GRAMMAR
	base_url: Optional[Path] = None
	paths: Dict[str, List[str]] = field(default_factory=dict)
	path: Optional[Path] = None

	@property
	def resolved_out_dir(self) -> Path:
		return self.out_dir if self.out_dir is not None else self.root / "out"


def load_config(path: Optional[Path] = None, cwd: Optional[Path] = None) -> ApyConfig:
	"""Load `path` (or `<cwd>/apyconfig.json` when present) into an ApyConfig."""
	cwd = Path(cwd) if cwd is not None else Path.cwd()
	if path is None:
		candidate = cwd / CONFIG_NAME
		if not candidate.is_file():
			return ApyConfig(root=cwd)
		path = candidate
	path = Path(path)
	try:
		obj = json.loads(path.read_text(encoding="utf-8"))
	except OSError as err:
		raise ApyError(BAD_CONFIG, f"cannot read config: {err}", path=str(path)) from err
	except json.JSONDecodeError as err:
		raise ApyError(BAD_CONFIG, f"config is not valid JSON: {err}", path=str(path)) from err
	if not isinstance(obj, dict):
		raise ApyError(BAD_CONFIG, "config must be a JSON object", path=str(path))
	for key in obj:
		if key not in KNOWN_KEYS:
			logger.warning("ignoring unknown config key %s in %s", key, path)

	root = path.parent
	config = ApyConfig(root=root, path=path)
	config.entries = [root / entry for entry in _entries(obj.get("entry"), path)]
	if "outDir" in obj:
		config.out_dir = root / _string(obj, "outDir", path)
	if "baseUrl" in obj:
		config.base_url = root / _string(obj, "baseUrl", path)
	config.paths = _paths(obj.get("paths"), path)
	try:
		config.grammar = Grammar.from_dict(obj.get("grammar"))
	except ApyError as err:
		raise replace(err, path=str(path)) from None
	logger.debug("loaded config %s", path)
	return config


def _entries(value: Any, path: Path) -> List[str]:
	if value is None:
		return []
	if isinstance(value, str):
		return [value]
	if isinstance(value, list) and all(isinstance(v, str) for v in value):
		return list(value)
	raise ApyError(BAD_CONFIG, "entry must be a string or a list of strings", path=str(path), key="entry")


def _string(obj: Dict[str, Any], key: str, path: Path) -> str:
	value = obj[key]
	if not isinstance(value, str):
		raise ApyError(BAD_CONFIG, f"{key} must be a string", path=str(path), key=key)
	return value


def _paths(value: Any, path: Path) -> Dict[str, List[str]]:
	if value is None:
		return {}
	if not isinstance(value, dict):
		raise ApyError(BAD_CONFIG, "paths must be a JSON object", path=str(path), key="paths")
	out: Dict[str, List[str]] = {}
	for pattern, targets in value.items():
		if isinstance(targets, str):
			targets = [targets]
		if not isinstance(targets, list) or not all(isinstance(t, str) for t in targets):
			raise ApyError(BAD_CONFIG, f"paths.{pattern} must be a list of strings", path=str(path), key="paths")
		out[pattern] = list(targets)
	return out


__all__ = ["ApyConfig", "CONFIG_NAME", "load_config"]
