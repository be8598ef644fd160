# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
esper parser: lark grammar + tree builders.

The grammar (grammar.lark) is parsed LALR(1) over a basic lexer. The
lark parse tree is converted into the dataclass AST (`ast.py`) by the
`_build_*` helpers below; any lark failure is converted into a single
`ParseError` carrying the failure position and the expected terminal set.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, FrozenSet, List, Optional

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedToken

from .ast import (
	Assign,
	Bin,
	BinOp,
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
	Located,
	Loop,
	Match,
	MatchCase,
	Member,
	Noop,
	Param,
	Program,
	Range,
	Record,
	String,
	Struct,
	StructField,
	StructMethod,
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
	UnaryOp,
	Var,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()


_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="program",
	propagate_positions=True,
	maybe_placeholders=False,
)


class ParseError(ValueError):
	"""
	Terminal parse failure for a whole source text.

	`line`/`column` are 1-based; `byte_offset` counts UTF-8 bytes from the
	start of the source; `expected` is the set of terminal names the grammar
	would have accepted at the failure point.
	"""

	def __init__(
		self,
		message: str,
		*,
		line: int,
		column: int,
		byte_offset: int,
		expected: FrozenSet[str],
	) -> None:
		super().__init__(message)
		self.line = line
		self.column = column
		self.byte_offset = byte_offset
		self.expected = expected

	@property
	def loc(self) -> Located:
		return Located(line=self.line, column=self.column)


def parse_program(source: str) -> Program:
	"""Parse esper source text into a `Program`, or raise `ParseError`."""
	try:
		tree = _PARSER.parse(source)
	except (UnexpectedCharacters, UnexpectedToken) as err:
		raise _to_parse_error(source, err) from err
	return _build_program(tree)


def describe_terminal(name: str) -> str:
	"""Render a terminal name the way it is spelled in source (`"end"`, NAME)."""
	try:
		term = _PARSER.get_terminal(name)
	except KeyError:
		return name
	if term.pattern.type == "str":
		return f'"{term.pattern.value}"'
	return name


def _to_parse_error(source: str, err: UnexpectedCharacters | UnexpectedToken) -> ParseError:
	# `$END` borrows the position of the last real token.
	at_end = isinstance(err, UnexpectedToken) and err.token.type == "$END"
	pos = len(source) if at_end else err.pos_in_stream
	line = source.count("\n", 0, pos) + 1
	column = pos - (source.rfind("\n", 0, pos) + 1) + 1
	if isinstance(err, UnexpectedCharacters):
		expected = err.allowed or set()
		found = repr(source[pos])
	else:
		expected = err.expected or set()
		found = "end of input" if at_end else f"{err.token.type} {err.token.value!r}"
	return ParseError(
		f"unexpected {found}",
		line=line,
		column=column,
		byte_offset=len(source[:pos].encode("utf-8")),
		expected=frozenset(expected),
	)


# Tree helpers -----------------------------------------------------------------


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		return node.data if isinstance(node.data, str) else node.data.value
	return node.type


def _loc(node: Tree | Token) -> Optional[Located]:
	if isinstance(node, Token):
		if node.line is None:
			return None
		return Located(line=node.line, column=node.column)
	meta = node.meta
	if getattr(meta, "empty", True):
		return None
	return Located(line=meta.line, column=meta.column)


def _trees(node: Tree, name: str | None = None) -> List[Tree]:
	return [c for c in node.children if isinstance(c, Tree) and (name is None or _name(c) == name)]


def _tokens(node: Tree, type_: str | None = None) -> List[Token]:
	return [c for c in node.children if isinstance(c, Token) and (type_ is None or c.type == type_)]


def _child(node: Tree, name: str) -> Optional[Tree]:
	return next(iter(_trees(node, name)), None)


def _op_text(node: Tree) -> str:
	tok = next(c for c in node.children if isinstance(c, Token))
	return tok.value


# Program / bodies ---------------------------------------------------------------


def _build_program(tree: Tree) -> Program:
	return Program(body=[_build_expr(child) for child in tree.children], loc=_loc(tree))


def _build_body(tree: Optional[Tree]) -> List[Expr]:
	if tree is None:
		return []
	return [_build_expr(child) for child in tree.children]


# Expressions --------------------------------------------------------------------


def _literal_text(tree: Tree) -> str:
	"""Sign and digits of a numeric literal (`"-"` and the number are separate tokens)."""
	return "".join(tok.value for tok in _tokens(tree))


def _build_int(tree: Tree) -> Int:
	return Int(value=int(_literal_text(tree)), loc=_loc(tree))


def _build_float(tree: Tree) -> Float:
	return Float(value=float(_literal_text(tree)), loc=_loc(tree))


def _build_string(tree: Tree) -> String:
	return String(value=tree.children[0].value[1:-1], loc=_loc(tree))


def _build_char(tree: Tree) -> Char:
	return Char(value=tree.children[0].value[1:-1], loc=_loc(tree))


def _build_var(tree: Tree) -> Var:
	return Var(name=tree.children[0].value, loc=_loc(tree))


def _build_assign(tree: Tree) -> Assign:
	target, value = tree.children
	return Assign(target=_build_expr(target), value=_build_expr(value), loc=_loc(tree))


def _build_let(tree: Tree) -> Let:
	name_tok, value = tree.children
	return Let(name=name_tok.value, value=_build_expr(value), loc=_loc(tree))


def _build_typed_let(tree: Tree) -> TypedLet:
	name_tok, type_node, value = tree.children
	return TypedLet(
		name=name_tok.value,
		type_expr=_build_type(type_node),
		value=_build_expr(value),
		loc=_loc(tree),
	)


def _build_bin(tree: Tree) -> Bin:
	lhs, op, rhs = tree.children
	return Bin(lhs=_build_expr(lhs), op=BinOp(_op_text(op)), rhs=_build_expr(rhs), loc=_loc(tree))


def _build_bit(tree: Tree) -> Bit:
	lhs, op, rhs = tree.children
	return Bit(lhs=_build_expr(lhs), op=BitOp(_op_text(op)), rhs=_build_expr(rhs), loc=_loc(tree))


def _build_compare(tree: Tree) -> Compare:
	lhs, op, rhs = tree.children
	return Compare(lhs=_build_expr(lhs), op=CompareOp(_op_text(op)), rhs=_build_expr(rhs), loc=_loc(tree))


def _build_unary(tree: Tree) -> Unary:
	op, operand = tree.children
	return Unary(op=UnaryOp(_op_text(op)), operand=_build_expr(operand), loc=_loc(tree))


def _build_args(tree: Optional[Tree]) -> List[Expr]:
	if tree is None:
		return []
	return [_build_expr(child) for child in tree.children]


def _build_member(tree: Tree) -> Member:
	return Member(segments=[_build_expr(seg) for seg in tree.children], loc=_loc(tree))


def _build_call(tree: Tree) -> Call:
	callee = tree.children[0]
	return Call(callee=_build_expr(callee), args=_build_args(_child(tree, "args")), loc=_loc(tree))


def _build_typed_call(tree: Tree) -> TypedCall:
	callee = tree.children[0]
	type_args = _child(tree, "type_args")
	return TypedCall(
		callee=_build_expr(callee),
		type_args=[_build_type(t) for t in type_args.children] if type_args is not None else [],
		args=_build_args(_child(tree, "args")),
		loc=_loc(tree),
	)


def _build_range(tree: Tree) -> Range:
	start, end = tree.children
	return Range(start=_build_expr(start), end=_build_expr(end), loc=_loc(tree))


def _build_list(tree: Tree) -> ListExpr:
	return ListExpr(items=[_build_expr(child) for child in tree.children], loc=_loc(tree))


def _build_record(tree: Tree) -> Record:
	entries = []
	for entry in _trees(tree, "record_entry"):
		key, value = entry.children
		entries.append((_build_expr(key), _build_expr(value)))
	return Record(entries=entries, loc=_loc(tree))


def _build_params(tree: Optional[Tree]) -> List[Param]:
	if tree is None:
		return []
	params: List[Param] = []
	for param in _trees(tree, "param"):
		name_tok = param.children[0]
		type_node = param.children[1] if len(param.children) > 1 else None
		params.append(
			Param(
				name=name_tok.value,
				type_expr=_build_type(type_node) if type_node is not None else None,
				loc=_loc(name_tok),
			)
		)
	return params


def _build_fn(tree: Tree) -> Fn:
	return Fn(params=_build_params(_child(tree, "params")), body=_build_body(_child(tree, "body")), loc=_loc(tree))


def _build_if(tree: Tree) -> If:
	cond, then_body, *rest = tree.children
	else_body = _build_body(rest[0]) if rest else None
	return If(cond=_build_expr(cond), then_body=_build_body(then_body), else_body=else_body, loc=_loc(tree))


def _build_loop(tree: Tree) -> Loop:
	pattern, iterable, body = tree.children
	if _name(pattern) == "pattern_list":
		pattern_expr: Expr = ListExpr(items=[_build_var(v) for v in pattern.children], loc=_loc(pattern))
	else:
		pattern_expr = _build_var(pattern)
	return Loop(pattern=pattern_expr, iterable=_build_expr(iterable), body=_build_body(body), loc=_loc(tree))


def _build_match(tree: Tree) -> Match:
	scrutinee = tree.children[0]
	cases = []
	for case in _trees(tree, "match_case"):
		tag, body = case.children
		cases.append(MatchCase(tag=_build_type(tag), body=_build_body(body), loc=_loc(case)))
	return Match(scrutinee=_build_expr(scrutinee), cases=cases, loc=_loc(tree))


def _build_struct(tree: Tree) -> Struct:
	name_tok = tree.children[0]
	entries: List[StructField | StructMethod] = []
	for entry in _trees(tree):
		entry_name, value = entry.children
		if _name(entry) == "struct_method":
			entries.append(StructMethod(name=entry_name.value, fn=_build_fn(value), loc=_loc(entry)))
		else:
			entries.append(StructField(name=entry_name.value, type_expr=_build_type(value), loc=_loc(entry)))
	return Struct(name=name_tok.value, entries=entries, loc=_loc(tree))


def _build_type_alias(tree: Tree) -> TypeAlias:
	name_tok = tree.children[0]
	params_node = _child(tree, "type_params")
	rhs = tree.children[-1]
	return TypeAlias(
		name=name_tok.value,
		type_params=[_build_type(p) for p in params_node.children] if params_node is not None else [],
		rhs=_build_type(rhs),
		loc=_loc(tree),
	)


def _build_directive(tree: Tree) -> Directive:
	head, target = tree.children
	return Directive(directive=_build_expr(head), target=_build_expr(target), loc=_loc(tree))


_EXPR_BUILDERS: Dict[str, Callable[[Tree], Expr]] = {
	"int_lit": _build_int,
	"float_lit": _build_float,
	"true_lit": lambda t: Bool(value=True, loc=_loc(t)),
	"false_lit": lambda t: Bool(value=False, loc=_loc(t)),
	"string_lit": _build_string,
	"char_lit": _build_char,
	"noop": lambda t: Noop(loc=_loc(t)),
	"var": _build_var,
	"assign": _build_assign,
	"let_binding": _build_let,
	"typed_let": _build_typed_let,
	"bin_expr": _build_bin,
	"bit_expr": _build_bit,
	"compare_expr": _build_compare,
	"unary": _build_unary,
	"member": _build_member,
	"call": _build_call,
	"typed_call": _build_typed_call,
	"range_expr": _build_range,
	"list_expr": _build_list,
	"record": _build_record,
	"fn_lit": _build_fn,
	"if_expr": _build_if,
	"loop_expr": _build_loop,
	"match_expr": _build_match,
	"struct_def": _build_struct,
	"type_alias": _build_type_alias,
	"directive_closed": _build_directive,
	"directive_open": _build_directive,
}


def _build_expr(node: Tree | Token) -> Expr:
	if not isinstance(node, Tree):
		raise TypeError(f"Unexpected token in expression position: {node!r}")
	builder = _EXPR_BUILDERS.get(_name(node))
	if builder is None:
		raise TypeError(f"Unexpected expression node: {_name(node)}")
	return builder(node)


# Types ----------------------------------------------------------------------------


def _fold_variant(terms: List[Expr]) -> Expr:
	"""Right-fold alternatives: [A, B, C] -> TypedVariant(A, TypedVariant(B, C))."""
	result = terms[-1]
	for term in reversed(terms[:-1]):
		result = TypedVariant(lhs=term, rhs=result, loc=term.loc)
	return result


def _build_typed_record(tree: Tree) -> TypedRecord:
	entries = []
	for entry in _trees(tree, "typed_record_entry"):
		name_tok, type_node = entry.children
		entries.append((Var(name=name_tok.value, loc=_loc(name_tok)), _build_type(type_node)))
	return TypedRecord(record=Record(entries=entries, loc=_loc(tree)), loc=_loc(tree))


def _build_typed_fn(tree: Tree) -> TypedFn:
	ret = tree.children[-1]
	fn = Fn(params=_build_params(_child(tree, "params")), body=[_build_type(ret)], loc=_loc(tree))
	return TypedFn(fn=fn, loc=_loc(tree))


_TYPE_BUILDERS: Dict[str, Callable[[Tree], Expr]] = {
	"typed_symbol": lambda t: TypedSymbol(name=t.children[0].value, loc=_loc(t)),
	"typed_generic": lambda t: TypedSymbolGeneric(
		name=t.children[0].value,
		args=[_build_type(a) for a in t.children[1:]],
		loc=_loc(t),
	),
	"typed_literal": lambda t: TypedLiteral(literal=_build_expr(t.children[0]), loc=_loc(t)),
	"typed_member": lambda t: TypedMember(path=[tok.value for tok in _tokens(t)], loc=_loc(t)),
	"typed_optional": lambda t: TypedOptional(inner=_build_type(t.children[0]), loc=_loc(t)),
	"typed_unary": lambda t: TypedUnary(op=UnaryOp(_op_text(t.children[0])), inner=_build_type(t.children[1]), loc=_loc(t)),
	"typed_record": _build_typed_record,
	"typed_variant": lambda t: _fold_variant([_build_type(c) for c in t.children]),
	"typed_fn": _build_typed_fn,
}


def _build_type(node: Tree | Token) -> Expr:
	if not isinstance(node, Tree):
		raise TypeError(f"Unexpected token in type position: {node!r}")
	builder = _TYPE_BUILDERS.get(_name(node))
	if builder is None:
		raise TypeError(f"Unexpected type node: {_name(node)}")
	return builder(node)


__all__ = ["ParseError", "parse_program", "describe_terminal"]
