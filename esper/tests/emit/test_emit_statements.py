# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from esper.emit import EmitConfig, emit_program
from esper.parser import parse_program


def _emit(source: str, **overrides):
	config = dict(module_name="prog", use_prelude=False, entry_point=False)
	config.update(overrides)
	return emit_program(parse_program(source), EmitConfig(**config))


def _lines(source: str, **overrides) -> list[str]:
	result = _emit(source, **overrides)
	assert result.diagnostics == []
	return result.text.splitlines()


def test_program_wraps_body_in_module_namespace():
	result = _emit("let x = 5")
	assert result.text == "namespace prog {\n  auto x = 5;\n}  // namespace prog\n"
	assert result.diagnostics == []


def test_literal_lets():
	lines = _lines(
		"""
let a = 5
let b = 0.0
let c = true
let d = 'x'
let e = "hi"
let f = ()
"""
	)
	assert lines[1:7] == [
		"  auto a = 5;",
		"  auto b = 0.0;",
		"  auto c = true;",
		"  auto d = 'x';",
		'  auto e = "hi";',
		"  auto f = monostate{};",
	]


def test_typed_let_uses_declared_type():
	assert "  int n = 5;" in _lines("let n : int = 5")
	assert "  optional<int> o = 1;" in _lines("let o : int? = 1")
	assert "  decltype(0) v = 0;" in _lines("let v : 0 = 0")


def test_let_bound_function_has_implicit_return():
	lines = _lines("let add = |a: int, b| a + b end")
	assert lines[1:4] == [
		"  auto add(int a, auto b) {",
		"    return a + b;",
		"  }",
	]


def test_typed_let_function_uses_type_as_return_type():
	assert "  int twice(int a) {" in _lines("let twice : int = |a: int| a * 2 end")
	lines = _lines("let half : |a: int| float end = |a: int| a / 2 end")
	assert "  float half(int a) {" in lines


def test_value_after_assignment_is_returned():
	lines = _lines("let f = |x| x = 1; 7 end")
	assert lines[1:5] == [
		"  auto f(auto x) {",
		"    x = 1;",
		"    return 7;",
		"  }",
	]


def test_assignment_as_last_statement_is_not_returned():
	lines = _lines("let set = |x| x = 1 end")
	assert "    x = 1;" in lines
	assert not any("return" in line for line in lines)


def test_control_flow_as_last_statement_is_not_returned():
	lines = _lines("let f = |x| if x then 1 end end")
	assert not any("return" in line for line in lines)


def test_if_else():
	lines = _lines("if x gte 1 then print(x) else print(0) end")
	assert lines[1:6] == [
		"  if (x >= 1) {",
		"    print(x);",
		"  } else {",
		"    print(0);",
		"  }",
	]


def test_if_without_else_has_no_else_block():
	lines = _lines("if x then print(x) end")
	assert lines[1:4] == ["  if (x) {", "    print(x);", "  }"]


def test_loop_headers():
	assert "  for (auto [k, v] : pairs) {" in _lines("for [k, v] in pairs print(k) end")
	assert "  for (auto i : views::iota(0, 10)) {" in _lines("loop i in 0..10 print(i) end")


def test_match_dispatches_on_alternative_type():
	lines = _lines("match v case int then print(1) case float then print(2) end")
	assert lines[1:9] == [
		"  visit([&](auto &&__alt) {",
		"    using __alt_t = decay_t<decltype(__alt)>;",
		"    if constexpr (is_same_v<__alt_t, int>) {",
		"      print(1);",
		"    } else if constexpr (is_same_v<__alt_t, float>) {",
		"      print(2);",
		"    }",
		"  }, v);",
	]


def test_struct_members_are_public():
	lines = _lines("struct Point x: int, y: int, sum: |a, b| a + b end end")
	assert lines[1:9] == [
		"  class Point {",
		"  public:",
		"    int x;",
		"    int y;",
		"    auto sum(auto a, auto b) {",
		"      return a + b;",
		"    }",
		"  };",
	]


def test_type_aliases():
	assert "  using V = A | variant<B, C>;" in _lines("type V = A | B | C end")
	assert "  using E = variant<A, B>;" in _lines("type E = A | B end")
	lines = _lines("type Box<T> = vector<T> end")
	assert lines[1:3] == ["  template <typename T>", "  using Box = vector<T>;"]
	assert "  using F = function<float(int)>;" in _lines("type F = |a: int| float end end")


def test_record_alias_declares_a_struct():
	lines = _lines("type P = {x: int, y: float} end")
	assert lines[1:5] == ["  struct P {", "    int x;", "    float y;", "  };"]


def test_nested_qualifier_directives_concatenate():
	assert "  const static 5;" in _lines("@const @static 5")
	assert "  inline auto x = 1;" in _lines("@inline let x = 1")


def test_entry_point_forwards_arguments():
	result = _emit("let main = |args| print(args) end", entry_point=True)
	lines = result.text.splitlines()
	assert lines[-6:] == [
		"",
		"int main(int argc, char **argv) {",
		"  vector<string> args(argv + 1, argv + argc);",
		"  prog::main(args);",
		"  return 0;",
		"}",
	]


def test_custom_entry_and_indent():
	result = _emit("let run = |args| args end", entry_point=True, entry="run", indent="\t")
	assert "\tauto run(auto args) {" in result.text
	assert "\tprog::run(args);" in result.text


def test_prelude_is_prepended():
	result = _emit("let x = 1", use_prelude=True)
	assert result.text.startswith("// esper runtime prelude")
	assert "using namespace std;" in result.text
	assert result.text.index("using namespace std;") < result.text.index("namespace prog {")


def test_emission_is_deterministic():
	source = """
struct P x: int end
let f = |a| [a, {k: 1}] end
match f(1) case P then print(1) end
"""
	program = parse_program(source)
	config = EmitConfig(module_name="prog")
	first = emit_program(program, config)
	second = emit_program(program, config)
	assert first.text == second.text
	assert first.text == emit_program(parse_program(source), config).text
