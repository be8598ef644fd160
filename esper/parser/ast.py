# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Abstract syntax model for esper.

Every construct is an `Expr`: the language is expression-oriented, so a
statement is just an expression in statement position. Nodes are built once
by the parser and never mutated afterwards; rewrites construct new nodes via
`dataclasses.replace`.

`loc` is trailing, keyword-only in practice, and excluded from equality so
tests can compare trees structurally.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Located:
	line: int
	column: int


class Expr:
	loc: Optional[Located]

	@property
	def kind(self) -> str:
		return type(self).__name__


def _loc() -> Optional[Located]:
	return field(default=None, compare=False, repr=False)


# Operators ------------------------------------------------------------------


class BinOp(Enum):
	ADD = "+"
	SUB = "-"
	MUL = "*"
	DIV = "/"


class CompareOp(Enum):
	GT = "gt"
	LT = "lt"
	GTE = "gte"
	LTE = "lte"
	EQ = "eq"
	NEQ = "neq"
	AND = "and"
	OR = "or"


class BitOp(Enum):
	SHL = "shl"
	SHR = "shr"
	AND = "band"
	OR = "bor"
	XOR = "xor"
	ROTL = "rotl"
	ROTR = "rotr"


class UnaryOp(Enum):
	REF = "&"  # address-of / reference type
	DEREF = "^"  # dereference / pointer type
	NOT = "~"  # bitwise not


# Literals -------------------------------------------------------------------


@dataclass
class Int(Expr):
	value: int
	loc: Optional[Located] = _loc()


@dataclass
class Float(Expr):
	value: float
	loc: Optional[Located] = _loc()


@dataclass
class Bool(Expr):
	value: bool
	loc: Optional[Located] = _loc()


@dataclass
class Char(Expr):
	value: str
	loc: Optional[Located] = _loc()


@dataclass
class String(Expr):
	value: str
	loc: Optional[Located] = _loc()


@dataclass
class Noop(Expr):
	"""The unit placeholder `()`."""

	loc: Optional[Located] = _loc()


@dataclass
class Var(Expr):
	name: str
	loc: Optional[Located] = _loc()


# Bindings -------------------------------------------------------------------


@dataclass
class Let(Expr):
	name: str
	value: Expr
	loc: Optional[Located] = _loc()


@dataclass
class TypedLet(Expr):
	name: str
	type_expr: Expr
	value: Expr
	loc: Optional[Located] = _loc()


@dataclass
class Assign(Expr):
	target: Expr  # Var or Member
	value: Expr
	loc: Optional[Located] = _loc()


# Composites -----------------------------------------------------------------


@dataclass
class ListExpr(Expr):
	items: List[Expr]
	loc: Optional[Located] = _loc()


@dataclass
class Record(Expr):
	"""Ordered key/value pairs; keys are `Var` or `Int`. Duplicates are kept."""

	entries: List[Tuple[Expr, Expr]]
	loc: Optional[Located] = _loc()


@dataclass
class Range(Expr):
	start: Expr
	end: Expr
	loc: Optional[Located] = _loc()


# Control --------------------------------------------------------------------


@dataclass
class If(Expr):
	cond: Expr
	then_body: List[Expr]
	else_body: Optional[List[Expr]] = None
	loc: Optional[Located] = _loc()


@dataclass
class Loop(Expr):
	pattern: Expr  # Var or ListExpr of Var
	iterable: Expr
	body: List[Expr]
	loc: Optional[Located] = _loc()


@dataclass
class MatchCase:
	tag: Expr  # type expression naming the alternative
	body: List[Expr]
	loc: Optional[Located] = _loc()


@dataclass
class Match(Expr):
	scrutinee: Expr
	cases: List[MatchCase]
	loc: Optional[Located] = _loc()


# Operators ------------------------------------------------------------------


@dataclass
class Bin(Expr):
	lhs: Expr
	op: BinOp
	rhs: Expr
	loc: Optional[Located] = _loc()


@dataclass
class Compare(Expr):
	lhs: Expr
	op: CompareOp
	rhs: Expr
	loc: Optional[Located] = _loc()


@dataclass
class Bit(Expr):
	lhs: Expr
	op: BitOp
	rhs: Expr
	loc: Optional[Located] = _loc()


@dataclass
class Unary(Expr):
	op: UnaryOp
	operand: Expr
	loc: Optional[Located] = _loc()


# Functions and access -------------------------------------------------------


@dataclass
class Param:
	name: str
	type_expr: Optional[Expr] = None
	loc: Optional[Located] = _loc()


@dataclass
class Fn(Expr):
	params: List[Param]
	body: List[Expr]
	loc: Optional[Located] = _loc()


@dataclass
class Member(Expr):
	"""Dotted access chain; each segment is a Var, Call or TypedCall."""

	segments: List[Expr]
	loc: Optional[Located] = _loc()


@dataclass
class Call(Expr):
	callee: Expr
	args: List[Expr]
	loc: Optional[Located] = _loc()


@dataclass
class TypedCall(Expr):
	callee: Expr
	type_args: List[Expr]
	args: List[Expr]
	loc: Optional[Located] = _loc()


# Declarations ---------------------------------------------------------------


@dataclass
class StructField:
	name: str
	type_expr: Expr
	loc: Optional[Located] = _loc()


@dataclass
class StructMethod:
	name: str
	fn: Fn
	loc: Optional[Located] = _loc()


@dataclass
class Struct(Expr):
	name: str
	entries: List[StructField | StructMethod]
	loc: Optional[Located] = _loc()


@dataclass
class TypeAlias(Expr):
	name: str
	type_params: List[Expr]
	rhs: Expr
	loc: Optional[Located] = _loc()


# Type expressions -----------------------------------------------------------


@dataclass
class TypedSymbol(Expr):
	name: str
	loc: Optional[Located] = _loc()


@dataclass
class TypedSymbolGeneric(Expr):
	name: str
	args: List[Expr]
	loc: Optional[Located] = _loc()


@dataclass
class TypedLiteral(Expr):
	"""The type of a literal value (`let v : 0 = 0`)."""

	literal: Expr
	loc: Optional[Located] = _loc()


@dataclass
class TypedMember(Expr):
	path: List[str]
	loc: Optional[Located] = _loc()


@dataclass
class TypedOptional(Expr):
	inner: Expr
	loc: Optional[Located] = _loc()


@dataclass
class TypedRecord(Expr):
	record: Record
	loc: Optional[Located] = _loc()


@dataclass
class TypedVariant(Expr):
	"""Right-leaning chain: `A | B | C` is TypedVariant(A, TypedVariant(B, C))."""

	lhs: Expr
	rhs: Expr
	loc: Optional[Located] = _loc()


@dataclass
class TypedUnary(Expr):
	op: UnaryOp  # REF or DEREF
	inner: Expr
	loc: Optional[Located] = _loc()


@dataclass
class TypedFn(Expr):
	"""Function type; the return type is the type of the fn's last body node."""

	fn: Fn
	loc: Optional[Located] = _loc()


# Directives and program -----------------------------------------------------


@dataclass
class Directive(Expr):
	directive: Expr  # Var or Call naming the behavior
	target: Expr
	loc: Optional[Located] = _loc()


@dataclass
class Program(Expr):
	body: List[Expr]
	loc: Optional[Located] = _loc()


TYPE_NODES = (
	TypedSymbol,
	TypedSymbolGeneric,
	TypedLiteral,
	TypedMember,
	TypedOptional,
	TypedRecord,
	TypedVariant,
	TypedUnary,
	TypedFn,
)

LITERAL_NODES = (Int, Float, Bool, Char, String)


def expr_kinds() -> List[type]:
	"""Every concrete Expr node class (used by coverage tests)."""
	return sorted(Expr.__subclasses__(), key=lambda cls: cls.__name__)


__all__ = [
	"Located",
	"Expr",
	"BinOp",
	"CompareOp",
	"BitOp",
	"UnaryOp",
	"Int",
	"Float",
	"Bool",
	"Char",
	"String",
	"Noop",
	"Var",
	"Let",
	"TypedLet",
	"Assign",
	"ListExpr",
	"Record",
	"Range",
	"If",
	"Loop",
	"MatchCase",
	"Match",
	"Bin",
	"Compare",
	"Bit",
	"Unary",
	"Param",
	"Fn",
	"Member",
	"Call",
	"TypedCall",
	"StructField",
	"StructMethod",
	"Struct",
	"TypeAlias",
	"TypedSymbol",
	"TypedSymbolGeneric",
	"TypedLiteral",
	"TypedMember",
	"TypedOptional",
	"TypedRecord",
	"TypedVariant",
	"TypedUnary",
	"TypedFn",
	"Directive",
	"Program",
	"TYPE_NODES",
	"LITERAL_NODES",
	"expr_kinds",
]
