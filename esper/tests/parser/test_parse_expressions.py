# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from esper.parser import ParseError, parse_program
from esper.parser.ast import (
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
	StructMethod,
	TypeAlias,
	TypedCall,
	TypedFn,
	TypedLet,
	TypedOptional,
	TypedRecord,
	TypedSymbol,
	TypedSymbolGeneric,
	TypedVariant,
	Unary,
	UnaryOp,
	Var,
)


def _single(source: str):
	prog = parse_program(source)
	assert isinstance(prog, Program)
	assert len(prog.body) == 1
	return prog.body[0]


def test_literal_lets():
	prog = parse_program(
		"""
let a = 5
let b = 0.0
let c = true
let d = 'x'
let e = "hi"
let f = ()
let g = -3
"""
	)
	assert prog.body == [
		Let("a", Int(5)),
		Let("b", Float(0.0)),
		Let("c", Bool(True)),
		Let("d", Char("x")),
		Let("e", String("hi")),
		Let("f", Noop()),
		Let("g", Int(-3)),
	]


def test_nodes_carry_source_positions():
	prog = parse_program("let a = 1\n  let b = a")
	second = prog.body[1]
	assert second.loc.line == 2
	assert second.loc.column == 3
	assert second.value.loc.column == 11


def test_keyword_operators_match_whole_words():
	assert _single("x gte 5") == Compare(Var("x"), CompareOp.GTE, Int(5))
	assert _single("x gt 5") == Compare(Var("x"), CompareOp.GT, Int(5))
	# A name that merely starts with a keyword stays a name.
	assert _single("gtex") == Var("gtex")


def test_operator_levels():
	assert _single("a + b") == Bin(Var("a"), BinOp.ADD, Var("b"))
	assert _single("a * 2") == Bin(Var("a"), BinOp.MUL, Int(2))
	assert _single("a shl 2") == Bit(Var("a"), BitOp.SHL, Int(2))
	assert _single("a rotr 1") == Bit(Var("a"), BitOp.ROTR, Int(1))
	assert _single("(a + b) * c") == Bin(Bin(Var("a"), BinOp.ADD, Var("b")), BinOp.MUL, Var("c"))
	assert _single("a * b + c") == Bin(Bin(Var("a"), BinOp.MUL, Var("b")), BinOp.ADD, Var("c"))


def test_chained_same_level_operator_is_rejected():
	with pytest.raises(ParseError):
		parse_program("a + b + c")


def test_subtraction_without_spaces_is_not_a_signed_literal():
	assert _single("n-1") == Bin(Var("n"), BinOp.SUB, Int(1))


def test_minus_after_an_operand_is_subtraction():
	assert parse_program("let y = x -1").body == [Let("y", Bin(Var("x"), BinOp.SUB, Int(1)))]
	assert _single("3 -1") == Bin(Int(3), BinOp.SUB, Int(1))
	assert _single("x - -1") == Bin(Var("x"), BinOp.SUB, Int(-1))
	# The right operand is complete, so the next `-1` starts a statement.
	assert parse_program("a + b -1").body == [Bin(Var("a"), BinOp.ADD, Var("b")), Int(-1)]


def test_negative_literals_in_operand_position():
	assert _single("[-1, -2.5]") == ListExpr([Int(-1), Float(-2.5)])
	assert _single("f(-1)") == Call(Var("f"), [Int(-1)])
	assert _single("-2..n") == Range(Int(-2), Var("n"))


def test_unary_operators():
	assert _single("&x") == Unary(UnaryOp.REF, Var("x"))
	assert _single("^p") == Unary(UnaryOp.DEREF, Var("p"))
	assert _single("~m") == Unary(UnaryOp.NOT, Var("m"))


def test_calls_members_and_typed_calls():
	assert _single("print(1, x)") == Call(Var("print"), [Int(1), Var("x")])
	assert _single("a.b(1).c") == Member([Var("a"), Call(Var("b"), [Int(1)]), Var("c")])
	assert _single("cast<int>(x)") == TypedCall(Var("cast"), [TypedSymbol("int")], [Var("x")])


def test_call_paren_must_touch_callee():
	prog = parse_program("f (x)")
	assert prog.body == [Var("f"), Var("x")]


def test_collections_and_ranges():
	assert _single("[1, 2]") == ListExpr([Int(1), Int(2)])
	assert _single("{x: 1, 0: 2}") == Record([(Var("x"), Int(1)), (Int(0), Int(2))])
	assert _single("0..10") == Range(Int(0), Int(10))
	assert _single("i..n") == Range(Var("i"), Var("n"))


def test_assignment_and_typed_let():
	assert _single("x = 3") == Assign(Var("x"), Int(3))
	assert _single("p.y = 3") == Assign(Member([Var("p"), Var("y")]), Int(3))
	assert _single("let n : int? = 1") == TypedLet("n", TypedOptional(TypedSymbol("int")), Int(1))


def test_function_literal():
	node = _single("let add = |a: int, b| a + b end")
	assert node == Let(
		"add",
		Fn([Param("a", TypedSymbol("int")), Param("b")], [Bin(Var("a"), BinOp.ADD, Var("b"))]),
	)


def test_if_with_and_without_else():
	assert _single("if x then 1 else 2 end") == If(Var("x"), [Int(1)], [Int(2)])
	assert _single("if x then 1 end") == If(Var("x"), [Int(1)], None)


def test_destructuring_loop():
	node = _single("for [k, v] in pairs print(k) end")
	assert node == Loop(ListExpr([Var("k"), Var("v")]), Var("pairs"), [Call(Var("print"), [Var("k")])])
	assert _single("loop i in 0..3 i end") == Loop(Var("i"), Range(Int(0), Int(3)), [Var("i")])


def test_match_cases():
	node = _single("match v case int then 1 case float then 2 end")
	assert isinstance(node, Match)
	assert node.scrutinee == Var("v")
	assert [case.tag for case in node.cases] == [TypedSymbol("int"), TypedSymbol("float")]
	assert [case.body for case in node.cases] == [[Int(1)], [Int(2)]]


def test_struct_fields_and_methods():
	node = _single("struct Point x: int, y: int, sum: |a, b| a + b end end")
	assert node == Struct(
		"Point",
		[
			StructField("x", TypedSymbol("int")),
			StructField("y", TypedSymbol("int")),
			StructMethod("sum", Fn([Param("a"), Param("b")], [Bin(Var("a"), BinOp.ADD, Var("b"))])),
		],
	)


def test_type_aliases():
	assert _single("type V = A | B | C end") == TypeAlias(
		"V", [], TypedVariant(TypedSymbol("A"), TypedVariant(TypedSymbol("B"), TypedSymbol("C")))
	)
	assert _single("type Box<T> = vector<T> end") == TypeAlias(
		"Box", [TypedSymbol("T")], TypedSymbolGeneric("vector", [TypedSymbol("T")])
	)
	assert _single("type P = {x: int} end") == TypeAlias(
		"P", [], TypedRecord(Record([(Var("x"), TypedSymbol("int"))]))
	)
	assert _single("type F = |a: int| float end end") == TypeAlias(
		"F", [], TypedFn(Fn([Param("a", TypedSymbol("int"))], [TypedSymbol("float")]))
	)
	assert _single("type G = |a, b| int end end") == TypeAlias(
		"G", [], TypedFn(Fn([Param("a"), Param("b")], [TypedSymbol("int")]))
	)
	assert _single("type H = || int end end") == TypeAlias("H", [], TypedFn(Fn([], [TypedSymbol("int")])))


def test_piped_variants():
	ab = TypedVariant(TypedSymbol("A"), TypedSymbol("B"))
	assert _single("type V = |A|B| end") == TypeAlias("V", [], ab)
	assert _single("type W = |A|B end") == TypeAlias("W", [], ab)
	assert _single("let v : |A|B| = 1") == TypedLet("v", ab, Int(1))
	# A single unannotated name between pipes reads as a variant.
	assert _single("type X = |a| b end") == TypeAlias("X", [], TypedVariant(TypedSymbol("a"), TypedSymbol("b")))
	assert _single("struct S v: A | B |, w: int end") == Struct("S", [StructField("v", ab), StructField("w", TypedSymbol("int"))])


def test_nested_directives():
	assert _single("@const @static 5") == Directive(Var("const"), Directive(Var("static"), Int(5)))
	assert _single("@inline let x = 1") == Directive(Var("inline"), Let("x", Int(1)))
	assert _single("@extend(T, int) type N<T> = T end") == Directive(
		Call(Var("extend"), [Var("T"), Var("int")]),
		TypeAlias("N", [TypedSymbol("T")], TypedSymbol("T")),
	)


def test_comments_and_semicolons_are_ignored():
	prog = parse_program("(* header *) let a = 1; let b = 2 (* trailing *)")
	assert prog.body == [Let("a", Int(1)), Let("b", Int(2))]


def test_empty_program():
	assert parse_program("") == Program([])
