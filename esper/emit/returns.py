# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Implicit-return rule shared by every function-like body.

A body's last statement becomes `return <value>;` only when it is one of the
value-producing kinds below. Let-bound functions, struct methods, lambdas and
function types (for their return type) all consult this one predicate.
"""

from __future__ import annotations

from ..parser.ast import (
	Bin,
	Bit,
	Bool,
	Call,
	Char,
	Compare,
	Expr,
	Float,
	Int,
	ListExpr,
	Member,
	Noop,
	Range,
	String,
	TypedCall,
	Var,
)

VALUE_PRODUCING = (
	Int,
	Float,
	Bool,
	Char,
	String,
	Var,
	Bin,
	Compare,
	Bit,
	ListExpr,
	Member,
	Range,
	Call,
	TypedCall,
	Noop,
)


def is_value_producing(expr: Expr) -> bool:
	return isinstance(expr, VALUE_PRODUCING)


__all__ = ["VALUE_PRODUCING", "is_value_producing"]
