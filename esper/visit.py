# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Generic preorder traversal over the esper AST.

The callback is not return-based: it receives a caller-owned context object
it may mutate (collect diagnostics, count nodes, emit into side buffers).
Emission does not use this module; it exists for tooling such as the linter.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterator, TypeVar

from .parser.ast import (
	Assign,
	Bin,
	Bit,
	Bool,
	Call,
	Char,
	Compare,
	Directive,
	Expr,
	Float,
	Fn,
	If,
	Int,
	Let,
	ListExpr,
	Loop,
	Match,
	Member,
	Noop,
	Program,
	Range,
	Record,
	String,
	Struct,
	StructField,
	TypeAlias,
	TypedCall,
	TypedFn,
	TypedLet,
	TypedLiteral,
	TypedMember,
	TypedOptional,
	TypedRecord,
	TypedSymbol,
	TypedSymbolGeneric,
	TypedUnary,
	TypedVariant,
	Unary,
	Var,
)

C = TypeVar("C")


def _leaf(_: Expr) -> Iterator[Expr]:
	return iter(())


def _fn_children(node: Fn) -> Iterator[Expr]:
	for param in node.params:
		if param.type_expr is not None:
			yield param.type_expr
	yield from node.body


def _if_children(node: If) -> Iterator[Expr]:
	yield node.cond
	yield from node.then_body
	if node.else_body is not None:
		yield from node.else_body


def _match_children(node: Match) -> Iterator[Expr]:
	yield node.scrutinee
	for case in node.cases:
		yield case.tag
		yield from case.body


def _record_children(node: Record) -> Iterator[Expr]:
	for key, value in node.entries:
		yield key
		yield value


def _struct_children(node: Struct) -> Iterator[Expr]:
	for entry in node.entries:
		yield entry.type_expr if isinstance(entry, StructField) else entry.fn


def _type_alias_children(node: TypeAlias) -> Iterator[Expr]:
	yield from node.type_params
	yield node.rhs


def _typed_call_children(node: TypedCall) -> Iterator[Expr]:
	yield node.callee
	yield from node.type_args
	yield from node.args


# One entry per node kind; tests assert this covers every Expr subclass.
_CHILDREN: Dict[type, Callable[[Expr], Iterator[Expr]]] = {
	Int: _leaf,
	Float: _leaf,
	Bool: _leaf,
	Char: _leaf,
	String: _leaf,
	Noop: _leaf,
	Var: _leaf,
	TypedSymbol: _leaf,
	TypedMember: _leaf,
	Program: lambda n: iter(n.body),
	Let: lambda n: iter((n.value,)),
	TypedLet: lambda n: iter((n.type_expr, n.value)),
	Assign: lambda n: iter((n.target, n.value)),
	ListExpr: lambda n: iter(n.items),
	Record: _record_children,
	Range: lambda n: iter((n.start, n.end)),
	If: _if_children,
	Loop: lambda n: iter((n.pattern, n.iterable, *n.body)),
	Match: _match_children,
	Bin: lambda n: iter((n.lhs, n.rhs)),
	Compare: lambda n: iter((n.lhs, n.rhs)),
	Bit: lambda n: iter((n.lhs, n.rhs)),
	Unary: lambda n: iter((n.operand,)),
	Fn: _fn_children,
	Member: lambda n: iter(n.segments),
	Call: lambda n: iter((n.callee, *n.args)),
	TypedCall: _typed_call_children,
	Struct: _struct_children,
	TypeAlias: _type_alias_children,
	TypedSymbolGeneric: lambda n: iter(n.args),
	TypedLiteral: lambda n: iter((n.literal,)),
	TypedOptional: lambda n: iter((n.inner,)),
	TypedRecord: lambda n: iter((n.record,)),
	TypedVariant: lambda n: iter((n.lhs, n.rhs)),
	TypedUnary: lambda n: iter((n.inner,)),
	TypedFn: lambda n: iter((n.fn,)),
	Directive: lambda n: iter((n.directive, n.target)),
}


def iter_children(node: Expr) -> Iterator[Expr]:
	"""Yield the direct children of `node` in source order."""
	children = _CHILDREN.get(type(node))
	if children is None:
		raise TypeError(f"no traversal rule for node kind {type(node).__name__}")
	return children(node)


def visit(node: Expr, ctx: C, callback: Callable[[C, Expr], None]) -> None:
	"""Call `callback(ctx, n)` for `node` and every descendant, preorder."""
	callback(ctx, node)
	for child in iter_children(node):
		visit(child, ctx, callback)


def walk(node: Expr) -> Iterator[Expr]:
	"""Yield `node` and every descendant, preorder."""
	stack = [node]
	while stack:
		current = stack.pop()
		yield current
		stack.extend(reversed(list(iter_children(current))))


def covered_kinds() -> frozenset[type]:
	return frozenset(_CHILDREN)


__all__ = ["iter_children", "visit", "walk", "covered_kinds"]
