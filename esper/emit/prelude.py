# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Access to the packaged C++ prelude."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

PRELUDE_PATH = Path(__file__).with_name("prelude.h")


@lru_cache(maxsize=1)
def prelude_text() -> str:
	return PRELUDE_PATH.read_text(encoding="utf-8")


__all__ = ["PRELUDE_PATH", "prelude_text"]
