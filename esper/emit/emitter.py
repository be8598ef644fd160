# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
C++ emission for esper programs.

Two renderers cooperate:
- statement rules write indented lines into an `EmitContext`;
- value rules return expression text.

Every node kind has a value rule (possibly the unsupported placeholder);
kinds without a statement rule fall back to `<value>;`. Emission never
raises: gaps become `E-EMIT-UNSUPPORTED` diagnostics and a placeholder in
the output, so one run reports every problem.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from ..core import Diagnostic, Span
from ..parser.ast import (
	TYPE_NODES,
	Assign,
	Bin,
	Bit,
	BitOp,
	Bool,
	Call,
	Char,
	Compare,
	CompareOp,
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
	Param,
	Program,
	Range,
	Record,
	String,
	Struct,
	StructField,
	TypeAlias,
	TypedCall,
	TypedLet,
	TypedFn,
	TypedRecord,
	Unary,
	UnaryOp,
	Var,
)
from .prelude import prelude_text
from .returns import is_value_producing
from .rewrite import (
	EXTEND_DIRECTIVE,
	QUALIFIER_DIRECTIVES,
	directive_name,
	extend_args,
	rewrite_extend,
)
from .types import TypeEmitter

# Names used inside the generated `visit` lambda of a match.
ALT = "__alt"
ALT_T = "__alt_t"

_COMPARE_TEXT = {
	CompareOp.GT: ">",
	CompareOp.LT: "<",
	CompareOp.GTE: ">=",
	CompareOp.LTE: "<=",
	CompareOp.EQ: "==",
	CompareOp.NEQ: "!=",
	CompareOp.AND: "&&",
	CompareOp.OR: "||",
}

_BIT_TEXT = {
	BitOp.SHL: "<<",
	BitOp.SHR: ">>",
	BitOp.AND: "&",
	BitOp.OR: "|",
	BitOp.XOR: "^",
}

_UNARY_TEXT = {
	UnaryOp.REF: "&",
	UnaryOp.DEREF: "*",
	UnaryOp.NOT: "~",
}

# Operands of these kinds are parenthesised inside a binary expression.
_COMPOUND = (Bin, Compare, Bit, Assign, Directive)


@dataclass(frozen=True)
class EmitConfig:
	module_name: str
	use_prelude: bool = True
	entry_point: bool = True
	entry: str = "main"
	indent: str = "  "
	file: Optional[str] = None


@dataclass
class EmitResult:
	text: str
	diagnostics: List[Diagnostic] = field(default_factory=list)


class EmitContext:
	"""Line buffer with a balanced indentation level."""

	def __init__(self, indent: str) -> None:
		self.indent = indent
		self.level = 0
		self.lines: List[str] = []

	def line(self, text: str) -> None:
		self.lines.append(f"{self.indent * self.level}{text}" if text else "")

	@contextmanager
	def indented(self) -> Iterator[None]:
		self.level += 1
		try:
			yield
		finally:
			self.level -= 1

	def prefix(self, index: int, prefix: str) -> None:
		"""Insert `prefix` after the indentation of line `index`."""
		text = self.lines[index]
		stripped = text.lstrip(" \t")
		self.lines[index] = f"{text[: len(text) - len(stripped)]}{prefix}{stripped}"

	def text(self) -> str:
		return "\n".join(self.lines) + "\n"


class Emitter:
	def __init__(self, config: EmitConfig) -> None:
		self.config = config
		self.diagnostics: List[Diagnostic] = []
		self.types = TypeEmitter(self.value, self.unsupported)
		self._stmt_rules: Dict[type, Callable[[EmitContext, Expr], None]] = {
			Program: self._stmt_program,
			Let: self._stmt_let,
			TypedLet: self._stmt_typed_let,
			Assign: self._stmt_assign,
			If: self._stmt_if,
			Loop: self._stmt_loop,
			Match: self._stmt_match,
			Struct: self._stmt_struct,
			TypeAlias: self._stmt_type_alias,
			Directive: self._stmt_directive,
		}
		self._value_rules: Dict[type, Callable[[Expr], str]] = {
			Int: lambda n: str(n.value),
			Float: lambda n: repr(n.value),
			Bool: lambda n: "true" if n.value else "false",
			Char: lambda n: f"'{n.value}'",
			String: lambda n: f'"{n.value}"',
			Noop: lambda n: "monostate{}",
			Var: lambda n: n.name,
			ListExpr: lambda n: "{" + self._values(n.items) + "}",
			Record: self._value_record,
			Range: lambda n: f"views::iota({self.value(n.start)}, {self.value(n.end)})",
			Bin: lambda n: self._infix(n.lhs, n.op.value, n.rhs),
			Compare: lambda n: self._infix(n.lhs, _COMPARE_TEXT[n.op], n.rhs),
			Bit: self._value_bit,
			Unary: lambda n: f"{_UNARY_TEXT[n.op]}{self._operand(n.operand)}",
			Fn: self._value_lambda,
			Member: lambda n: ".".join(self.value(seg) for seg in n.segments),
			Call: lambda n: f"{self.value(n.callee)}({self._values(n.args)})",
			TypedCall: self._value_typed_call,
			Assign: lambda n: f"{self.value(n.target)} = {self.value(n.value)}",
			Directive: self._value_directive,
		}
		for kind in TYPE_NODES:
			self._value_rules[kind] = self.types.emit
		# Constructs that only make sense as statements.
		for kind in (Program, Let, TypedLet, If, Loop, Match, Struct, TypeAlias):
			self._value_rules[kind] = lambda n: self.unsupported(n, "value")

	# Diagnostics ------------------------------------------------------------

	def unsupported(self, node: Expr, position: str) -> str:
		self.diagnostics.append(
			Diagnostic(
				message=f"{node.kind} is not supported in {position} position",
				code="E-EMIT-UNSUPPORTED",
				phase="emit",
				severity="error",
				span=Span.from_loc(node.loc, self.config.file),
			)
		)
		return f"/* unsupported: {node.kind} */"

	def _warn(self, node: Expr, message: str, code: str) -> None:
		self.diagnostics.append(
			Diagnostic(
				message=message,
				code=code,
				phase="emit",
				severity="warning",
				span=Span.from_loc(node.loc, self.config.file),
			)
		)

	# Entry ------------------------------------------------------------------

	def emit_program(self, program: Program) -> EmitResult:
		ctx = EmitContext(self.config.indent)
		if self.config.use_prelude:
			ctx.lines.extend(prelude_text().rstrip("\n").splitlines())
			ctx.line("")
		self.stmt(ctx, program)
		return EmitResult(text=ctx.text(), diagnostics=list(self.diagnostics))

	def stmt(self, ctx: EmitContext, node: Expr) -> None:
		rule = self._stmt_rules.get(type(node))
		if rule is None:
			ctx.line(f"{self.value(node)};")
			return
		rule(ctx, node)

	def value(self, node: Expr) -> str:
		rule = self._value_rules.get(type(node))
		if rule is None:
			return self.unsupported(node, "value")
		return rule(node)

	def body(self, ctx: EmitContext, body: List[Expr], implicit_return: bool = False) -> None:
		if not body:
			return
		for node in body[:-1]:
			self.stmt(ctx, node)
		last = body[-1]
		if implicit_return and is_value_producing(last):
			ctx.line(f"return {self.value(last)};")
		else:
			self.stmt(ctx, last)

	# Statement rules --------------------------------------------------------

	def _stmt_program(self, ctx: EmitContext, node: Program) -> None:
		module = self.config.module_name
		ctx.line(f"namespace {module} {{")
		with ctx.indented():
			self.body(ctx, node.body)
		ctx.line(f"}}  // namespace {module}")
		if not self.config.entry_point:
			return
		ctx.line("")
		ctx.line("int main(int argc, char **argv) {")
		with ctx.indented():
			ctx.line("vector<string> args(argv + 1, argv + argc);")
			ctx.line(f"{module}::{self.config.entry}(args);")
			ctx.line("return 0;")
		ctx.line("}")

	def _stmt_let(self, ctx: EmitContext, node: Let) -> None:
		if isinstance(node.value, Fn):
			self._function(ctx, "auto", node.name, node.value)
			return
		ctx.line(f"auto {node.name} = {self.value(node.value)};")

	def _stmt_typed_let(self, ctx: EmitContext, node: TypedLet) -> None:
		if isinstance(node.value, Fn):
			if isinstance(node.type_expr, TypedFn):
				ret = self.types.return_type(node.type_expr.fn)
			else:
				ret = self.types.emit(node.type_expr)
			self._function(ctx, ret, node.name, node.value)
			return
		ctx.line(f"{self.types.emit(node.type_expr)} {node.name} = {self.value(node.value)};")

	def _stmt_assign(self, ctx: EmitContext, node: Assign) -> None:
		ctx.line(f"{self.value(node)};")

	def _stmt_if(self, ctx: EmitContext, node: If) -> None:
		ctx.line(f"if ({self.value(node.cond)}) {{")
		with ctx.indented():
			self.body(ctx, node.then_body)
		if node.else_body is not None:
			ctx.line("} else {")
			with ctx.indented():
				self.body(ctx, node.else_body)
		ctx.line("}")

	def _stmt_loop(self, ctx: EmitContext, node: Loop) -> None:
		pattern = self.value(node.pattern)
		if isinstance(node.pattern, ListExpr):
			pattern = _destructure(pattern)
		ctx.line(f"for (auto {pattern} : {self.value(node.iterable)}) {{")
		with ctx.indented():
			self.body(ctx, node.body)
		ctx.line("}")

	def _stmt_match(self, ctx: EmitContext, node: Match) -> None:
		ctx.line(f"visit([&](auto &&{ALT}) {{")
		with ctx.indented():
			ctx.line(f"using {ALT_T} = decay_t<decltype({ALT})>;")
			for index, case in enumerate(node.cases):
				keyword = "if constexpr" if index == 0 else "} else if constexpr"
				ctx.line(f"{keyword} (is_same_v<{ALT_T}, {self.types.emit(case.tag)}>) {{")
				with ctx.indented():
					self.body(ctx, case.body)
			if node.cases:
				ctx.line("}")
		ctx.line(f"}}, {self.value(node.scrutinee)});")

	def _stmt_struct(self, ctx: EmitContext, node: Struct) -> None:
		ctx.line(f"class {node.name} {{")
		ctx.line("public:")
		with ctx.indented():
			for entry in node.entries:
				if isinstance(entry, StructField):
					ctx.line(f"{self.types.emit(entry.type_expr)} {entry.name};")
				else:
					self._function(ctx, "auto", entry.name, entry.fn)
		ctx.line("};")

	def _stmt_type_alias(self, ctx: EmitContext, node: TypeAlias) -> None:
		if node.type_params:
			params = ", ".join(f"typename {self.types.emit(p)}" for p in node.type_params)
			ctx.line(f"template <{params}>")
		if isinstance(node.rhs, TypedRecord):
			ctx.line(f"struct {node.name} {{")
			with ctx.indented():
				for key, ty in node.rhs.record.entries:
					ctx.line(f"{self.types.emit(ty)} {self.value(key)};")
			ctx.line("};")
			return
		ctx.line(f"using {node.name} = {self.types.emit(node.rhs)};")

	def _stmt_directive(self, ctx: EmitContext, node: Directive) -> None:
		qualifiers, target = self._resolve_directive(node)
		start = len(ctx.lines)
		self.stmt(ctx, target)
		if not qualifiers or len(ctx.lines) == start:
			return
		# Qualifiers belong to the declaration, after any template header.
		if ctx.lines[start].lstrip().startswith("template <") and start + 1 < len(ctx.lines):
			start += 1
		ctx.prefix(start, " ".join(qualifiers) + " ")

	# Value rules ------------------------------------------------------------

	def _values(self, nodes: List[Expr]) -> str:
		return ", ".join(self.value(node) for node in nodes)

	def _operand(self, node: Expr) -> str:
		text = self.value(node)
		return f"({text})" if isinstance(node, _COMPOUND) else text

	def _infix(self, lhs: Expr, op: str, rhs: Expr) -> str:
		return f"{self._operand(lhs)} {op} {self._operand(rhs)}"

	def _value_bit(self, node: Bit) -> str:
		if node.op in (BitOp.ROTL, BitOp.ROTR):
			return f"{node.op.value}({self.value(node.lhs)}, {self.value(node.rhs)})"
		return self._infix(node.lhs, _BIT_TEXT[node.op], node.rhs)

	def _value_record(self, node: Record) -> str:
		entries = []
		for key, value in node.entries:
			if isinstance(key, Var):
				entries.append(f".{key.name} = {self.value(value)}")
			else:
				entries.append(f"{{{self.value(key)}, {self.value(value)}}}")
		return "{" + ", ".join(entries) + "}"

	def _value_lambda(self, node: Fn) -> str:
		inner = EmitContext("")
		self.body(inner, node.body, implicit_return=True)
		params = self._params(node.params)
		text = " ".join(line for line in inner.lines if line)
		return f"[&]({params}) {{ {text} }}" if text else f"[&]({params}) {{}}"

	def _value_typed_call(self, node: TypedCall) -> str:
		return f"{self.value(node.callee)}<{self.types.emit_all(node.type_args)}>({self._values(node.args)})"

	def _value_directive(self, node: Directive) -> str:
		qualifiers, target = self._resolve_directive(node)
		return " ".join([*qualifiers, self.value(target)])

	# Shared -----------------------------------------------------------------

	def _params(self, params: List[Param]) -> str:
		rendered = []
		for param in params:
			ty = self.types.emit(param.type_expr) if param.type_expr is not None else "auto"
			rendered.append(f"{ty} {param.name}")
		return ", ".join(rendered)

	def _function(self, ctx: EmitContext, ret: str, name: str, fn: Fn) -> None:
		ctx.line(f"{ret} {name}({self._params(fn.params)}) {{")
		with ctx.indented():
			self.body(ctx, fn.body, implicit_return=True)
		ctx.line("}")

	def _resolve_directive(self, node: Directive) -> Tuple[List[str], Expr]:
		"""
		Peel directive layers off `node`.

		Returns the qualifier keywords in source order and the node left to
		emit. `@extend` layers are applied as rewrites; unknown directives are
		reported and skipped so their target is still emitted.
		"""
		qualifiers: List[str] = []
		current: Expr = node
		while isinstance(current, Directive):
			name = directive_name(current.directive)
			if name in QUALIFIER_DIRECTIVES:
				qualifiers.append(name)
				current = current.target
			elif name == EXTEND_DIRECTIVE:
				current = self._apply_extend(current)
			else:
				self._warn(
					current,
					f"unknown directive '@{name or current.directive.kind}'; emitting its target undecorated",
					"W-EMIT-UNKNOWN-DIRECTIVE",
				)
				current = current.target
		return qualifiers, current

	def _apply_extend(self, node: Directive) -> Expr:
		args = extend_args(node)
		if args is None:
			self._warn(node, "@extend expects (identifier, type)", "W-EMIT-EXTEND-ARGS")
			return node.target
		ident, ty = args
		rewritten = rewrite_extend(node.target, ident, ty)
		if rewritten is None:
			self._warn(
				node,
				f"@extend found no type alias of '{ident}' to constrain",
				"W-EMIT-EXTEND-NO-MATCH",
			)
			return node.target
		return rewritten


def _destructure(pattern: str) -> str:
	if pattern.startswith("{") and pattern.endswith("}"):
		return f"[{pattern[1:-1]}]"
	return pattern


def emit_program(program: Program, config: EmitConfig) -> EmitResult:
	"""Render `program` as one C++ translation unit."""
	return Emitter(config).emit_program(program)


def value_rule_kinds() -> frozenset[type]:
	return frozenset(Emitter(EmitConfig(module_name="m"))._value_rules)


__all__ = [
	"EmitConfig",
	"EmitResult",
	"EmitContext",
	"Emitter",
	"emit_program",
	"value_rule_kinds",
]
