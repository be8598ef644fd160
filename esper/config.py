# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Project configuration file for `esperc`.

Format (pinned for v0, JSON):
{
  "format": "esper-config",
  "version": 0,
  "use_prelude": true,        // optional
  "entry_point": true,        // optional
  "entry": "main",            // optional
  "cc": "clang++",            // optional
  "cc_flags": ["-O2"]         // optional
}

Every setting is optional; command-line flags override the file.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

CONFIG_FORMAT = "esper-config"
CONFIG_VERSION = 0


@dataclass
class EsperConfig:
	use_prelude: Optional[bool] = None
	entry_point: Optional[bool] = None
	entry: Optional[str] = None
	cc: Optional[str] = None
	cc_flags: List[str] = field(default_factory=list)


def _optional(obj: dict, key: str, kind: type) -> object:
	value = obj.get(key)
	if value is not None and not isinstance(value, kind):
		raise ValueError(f"config key '{key}' must be a {kind.__name__}")
	return value


def parse_config(obj: object) -> EsperConfig:
	if not isinstance(obj, dict):
		raise ValueError("config must be a JSON object")
	if obj.get("format") != CONFIG_FORMAT or obj.get("version") != CONFIG_VERSION:
		raise ValueError("unsupported config format/version")
	flags = obj.get("cc_flags") or []
	if not isinstance(flags, list) or not all(isinstance(flag, str) for flag in flags):
		raise ValueError("config key 'cc_flags' must be a list of strings")
	entry = _optional(obj, "entry", str)
	if entry is not None and not entry.isidentifier():
		raise ValueError(f"config entry '{entry}' is not an identifier")
	return EsperConfig(
		use_prelude=_optional(obj, "use_prelude", bool),
		entry_point=_optional(obj, "entry_point", bool),
		entry=entry,
		cc=_optional(obj, "cc", str),
		cc_flags=list(flags),
	)


def load_config_json(path: Path) -> EsperConfig:
	"""Load and validate a config file; raises ValueError on malformed input."""
	try:
		obj = json.loads(path.read_text(encoding="utf-8"))
	except json.JSONDecodeError as exc:
		raise ValueError(f"config is not valid JSON: {exc}") from exc
	return parse_config(obj)


__all__ = ["CONFIG_FORMAT", "CONFIG_VERSION", "EsperConfig", "parse_config", "load_config_json"]
