# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lint checks over a parsed esper program.

Findings are warnings only; they never change what the emitter produces.
Each check is a small function keyed by node kind and run from one `visit`
pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .core import Diagnostic, Span
from .emit.rewrite import KNOWN_DIRECTIVES, directive_name
from .parser.ast import Directive, Expr, Int, Program, Record, Struct, Var
from .visit import visit


@dataclass
class LintContext:
	file: Optional[str] = None
	diagnostics: List[Diagnostic] = field(default_factory=list)

	def warn(self, node: object, message: str, code: str) -> None:
		self.diagnostics.append(
			Diagnostic(
				message=message,
				code=code,
				phase="lint",
				severity="warning",
				span=Span.from_loc(getattr(node, "loc", None), self.file),
			)
		)


def _record_key(key: Expr) -> Optional[str]:
	if isinstance(key, Var):
		return key.name
	if isinstance(key, Int):
		return str(key.value)
	return None


def _lint_record(ctx: LintContext, node: Record) -> None:
	seen = set()
	for key, _ in node.entries:
		name = _record_key(key)
		if name is None:
			continue
		if name in seen:
			ctx.warn(key, f"record key '{name}' is repeated", "W-LINT-DUP-KEY")
		seen.add(name)


def _lint_struct(ctx: LintContext, node: Struct) -> None:
	seen = set()
	for entry in node.entries:
		if entry.name in seen:
			ctx.warn(entry, f"struct '{node.name}' repeats member '{entry.name}'", "W-LINT-DUP-MEMBER")
		seen.add(entry.name)


def _lint_directive(ctx: LintContext, node: Directive) -> None:
	name = directive_name(node.directive)
	if name not in KNOWN_DIRECTIVES:
		label = name if name is not None else node.directive.kind
		ctx.warn(node, f"unknown directive '@{label}'", "W-LINT-UNKNOWN-DIRECTIVE")


_CHECKS: Dict[type, Callable[[LintContext, Expr], None]] = {
	Record: _lint_record,
	Struct: _lint_struct,
	Directive: _lint_directive,
}


def _dispatch(ctx: LintContext, node: Expr) -> None:
	check = _CHECKS.get(type(node))
	if check is not None:
		check(ctx, node)


def lint_program(program: Program, file: Optional[str] = None) -> List[Diagnostic]:
	"""Run every lint check over `program` and return the warnings found."""
	ctx = LintContext(file=file)
	visit(program, ctx, _dispatch)
	return ctx.diagnostics


__all__ = ["LintContext", "lint_program"]
