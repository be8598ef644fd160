# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from esper.parser import ParseError, parse_program, render_parse_error


def test_parse_error_payload():
	with pytest.raises(ParseError) as excinfo:
		parse_program("let x = = 2")
	err = excinfo.value
	assert isinstance(err, ValueError)
	assert (err.line, err.column, err.byte_offset) == (1, 9, 8)
	assert "NAME" in err.expected
	assert err.loc.line == 1 and err.loc.column == 9


def test_byte_offset_counts_utf8_bytes():
	with pytest.raises(ParseError) as excinfo:
		parse_program("(* é *) let = 1")
	err = excinfo.value
	assert err.column == 13
	assert err.byte_offset == 13


def test_error_on_later_line():
	with pytest.raises(ParseError) as excinfo:
		parse_program("let a = 1\nlet b = = 2\n")
	assert (excinfo.value.line, excinfo.value.column) == (2, 9)


def test_unterminated_construct_reports_end_of_input():
	source = "if x then 1"
	with pytest.raises(ParseError) as excinfo:
		parse_program(source)
	err = excinfo.value
	assert err.byte_offset == len(source)
	assert "end of input" in str(err)


def test_render_parse_error_shows_context_and_caret():
	source = "let a = 1\nlet b = = 2\n"
	with pytest.raises(ParseError) as excinfo:
		parse_program(source)
	rendered = render_parse_error(source, excinfo.value, "prog.es")
	lines = rendered.splitlines()
	assert lines[0].startswith("error: parse error:")
	assert " --> prog.es:2:9" in rendered
	assert "1 | let a = 1" in lines
	assert "2 | let b = = 2" in lines
	assert "  | " + " " * 8 + "^" in lines
	assert lines[-1].startswith("  = expected:")


def test_render_parse_error_at_end_of_input_after_newline():
	source = "if x then 1\n"
	with pytest.raises(ParseError) as excinfo:
		parse_program(source)
	rendered = render_parse_error(source, excinfo.value)
	assert "<input>:2:1" in rendered
	assert "  | ^" in rendered.splitlines()
