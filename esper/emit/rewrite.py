# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Directive helpers and the `@extend` tree rewrite.

`@extend(T, ty) type Name<T> = T end` constrains the alias so it is only
meaningful when `T` is substituted with `ty`. The rewrite is a pure
tree-to-tree function: it never touches the input tree and returns `None`
when there is nothing to rewrite, leaving the decision (warn, fall back) to
the caller.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Tuple

from ..parser.ast import (
	LITERAL_NODES,
	TYPE_NODES,
	Call,
	Directive,
	Expr,
	Member,
	TypeAlias,
	TypedLiteral,
	TypedMember,
	TypedSymbol,
	TypedSymbolGeneric,
	Var,
)

QUALIFIER_DIRECTIVES = ("const", "static", "inline")
EXTEND_DIRECTIVE = "extend"
KNOWN_DIRECTIVES = QUALIFIER_DIRECTIVES + (EXTEND_DIRECTIVE,)


def directive_name(expr: Expr) -> Optional[str]:
	"""Name of a directive head (`@name` or `@name(...)`), if it has one."""
	if isinstance(expr, Var):
		return expr.name
	if isinstance(expr, Call) and isinstance(expr.callee, Var):
		return expr.callee.name
	return None


def as_type(expr: Expr) -> Expr:
	"""
	Reinterpret a value-grammar node as a type node.

	Directive arguments are parsed with the value grammar, so `@extend(T, int)`
	carries `Var("int")`; the constraint needs `TypedSymbol("int")`.
	"""
	if isinstance(expr, TYPE_NODES):
		return expr
	if isinstance(expr, Var):
		return TypedSymbol(name=expr.name, loc=expr.loc)
	if isinstance(expr, Member) and all(isinstance(seg, Var) for seg in expr.segments):
		return TypedMember(path=[seg.name for seg in expr.segments], loc=expr.loc)
	if isinstance(expr, LITERAL_NODES):
		return TypedLiteral(literal=expr, loc=expr.loc)
	return expr


def extend_args(directive: Directive) -> Optional[Tuple[str, Expr]]:
	"""`(identifier, type)` for a well-formed `@extend(ident, type)`, else None."""
	head = directive.directive
	if not isinstance(head, Call) or len(head.args) != 2:
		return None
	ident, ty = head.args
	if not isinstance(ident, Var):
		return None
	return ident.name, as_type(ty)


def extend_constraint(ident: str, ty: Expr) -> Expr:
	"""`conditional_t<is_same_v<ident, ty>, ty, void>` as a type tree."""
	return TypedSymbolGeneric(
		name="conditional_t",
		args=[
			TypedSymbolGeneric(name="is_same_v", args=[TypedSymbol(name=ident), ty]),
			ty,
			TypedSymbol(name="void"),
		],
	)


def rewrite_extend(target: Expr, ident: str, ty: Expr) -> Optional[Expr]:
	"""
	Find the first `TypeAlias` whose rhs is exactly `TypedSymbol(ident)`,
	descending through nested directives, and return a copy of `target` with
	that rhs replaced by the constraint. Nested directives are preserved.
	"""
	if isinstance(target, TypeAlias):
		if target.rhs == TypedSymbol(name=ident):
			return replace(target, rhs=extend_constraint(ident, ty))
		return None
	if isinstance(target, Directive):
		inner = rewrite_extend(target.target, ident, ty)
		if inner is None:
			return None
		return replace(target, target=inner)
	return None


__all__ = [
	"QUALIFIER_DIRECTIVES",
	"EXTEND_DIRECTIVE",
	"KNOWN_DIRECTIVES",
	"directive_name",
	"as_type",
	"extend_args",
	"extend_constraint",
	"rewrite_extend",
]
