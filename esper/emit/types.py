# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type-expression renderer.

The type emitter is a collaborator of the main emitter: it needs the value
renderer for `decltype(...)` forms and reports unsupported nodes through the
same diagnostic sink, so both are injected.
"""

from __future__ import annotations

from typing import Callable, Dict, List

from ..parser.ast import (
	TYPE_NODES,
	Expr,
	Fn,
	Member,
	Record,
	TypedFn,
	TypedLiteral,
	TypedMember,
	TypedOptional,
	TypedRecord,
	TypedSymbol,
	TypedSymbolGeneric,
	TypedUnary,
	TypedVariant,
	UnaryOp,
	Var,
)
from .returns import is_value_producing

ValueRenderer = Callable[[Expr], str]
Unsupported = Callable[[Expr, str], str]


class TypeEmitter:
	def __init__(self, render_value: ValueRenderer, unsupported: Unsupported) -> None:
		self._render_value = render_value
		self._unsupported = unsupported
		self._rules: Dict[type, Callable[[Expr], str]] = {
			TypedSymbol: lambda n: n.name,
			TypedSymbolGeneric: self._generic,
			TypedLiteral: lambda n: f"decltype({self._render_value(n.literal)})",
			TypedMember: lambda n: "::".join(n.path),
			TypedOptional: lambda n: f"optional<{self.emit(n.inner)}>",
			TypedRecord: lambda n: self.record(n.record),
			TypedVariant: self._variant,
			TypedUnary: self._unary,
			TypedFn: self._fn,
			# Value-grammar nodes that can appear where a type is expected
			# (generic arguments of typed calls, directive arguments).
			Var: lambda n: n.name,
			Member: self._member_path,
		}

	def emit(self, node: Expr) -> str:
		rule = self._rules.get(type(node))
		if rule is None:
			return self._unsupported(node, "type")
		return rule(node)

	def emit_all(self, nodes: List[Expr]) -> str:
		return ", ".join(self.emit(node) for node in nodes)

	def record(self, record: Record) -> str:
		fields = " ".join(f"{self.emit(ty)} {self._render_value(key)};" for key, ty in record.entries)
		return f"struct {{ {fields} }}" if fields else "struct {}"

	def return_type(self, fn: Fn) -> str:
		"""Return type of a function type: the type of its last body node."""
		if not fn.body:
			return "void"
		last = fn.body[-1]
		if isinstance(last, TYPE_NODES):
			return self.emit(last)
		if is_value_producing(last):
			return f"decltype({self._render_value(last)})"
		return "void"

	def _generic(self, node: TypedSymbolGeneric) -> str:
		return f"{node.name}<{self.emit_all(node.args)}>"

	def _variant(self, node: TypedVariant) -> str:
		# Only the innermost pair is wrapped; outer links stay as `L | ...`.
		if isinstance(node.rhs, TypedVariant):
			return f"{self.emit(node.lhs)} | {self.emit(node.rhs)}"
		return f"variant<{self.emit(node.lhs)}, {self.emit(node.rhs)}>"

	def _unary(self, node: TypedUnary) -> str:
		if node.op is UnaryOp.REF:
			return f"{self.emit(node.inner)}&"
		if node.op is UnaryOp.DEREF:
			return f"{self.emit(node.inner)}*"
		return self._unsupported(node, "type")

	def _fn(self, node: TypedFn) -> str:
		params = ", ".join(
			self.emit(param.type_expr) if param.type_expr is not None else "void" for param in node.fn.params
		)
		return f"function<{self.return_type(node.fn)}({params})>"

	def _member_path(self, node: Member) -> str:
		if all(isinstance(seg, Var) for seg in node.segments):
			return "::".join(seg.name for seg in node.segments)
		return self._unsupported(node, "type")


__all__ = ["TypeEmitter"]
