# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for parser/emitter/lint/toolchain phases.

Passes collect diagnostics into a list instead of raising, so the driver can
report everything found in one run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a compiler diagnostic (error/warning)."""

	message: str
	code: str | None = None
	# Phase label: parser, lint, emit, toolchain, config, driver.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	@property
	def is_error(self) -> bool:
		return self.severity == "error"

	def format(self) -> str:
		"""Human-readable one-liner: `file:line:col: severity: message [code]`."""
		text = f"{self.span.describe()}: {self.severity}: {self.message}"
		if self.code:
			text += f" [{self.code}]"
		for note in self.notes:
			text += f"\n  note: {note}"
		return text

	def to_json(self) -> Dict[str, Any]:
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file,
			"line": self.span.line,
			"column": self.span.column,
		}


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
	return any(d.is_error for d in diagnostics)


__all__ = ["Diagnostic", "has_errors"]
