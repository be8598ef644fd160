# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
esper parser package.

`parse_program` returns the AST; `render_parse_error` formats a `ParseError`
with a small source-context window for terminal output.
"""

from __future__ import annotations

from typing import List, Optional

from . import ast
from .parser import ParseError, describe_terminal, parse_program

# Lines of context shown before/after the failing line.
CONTEXT_LINES = 2


def render_parse_error(source: str, err: ParseError, path: Optional[str] = None) -> str:
	"""
	Render a parse error with surrounding source lines and a caret under the
	failing column, e.g.:

	  error: parse error: unexpected ...
	    --> prog.es:3:7
	     |
	   2 | let a = 1
	   3 | let b = = 2
	     |         ^
	   4 | ...
	     = expected: NAME, "let"
	"""
	lines = source.splitlines() or [""]
	first = max(1, err.line - CONTEXT_LINES)
	last = min(max(len(lines), err.line), err.line + CONTEXT_LINES)
	gutter = len(str(last))
	out: List[str] = [f"error: parse error: {err}"]
	out.append(f"{' ' * gutter}--> {path or '<input>'}:{err.line}:{err.column}")
	out.append(f"{' ' * gutter} |")
	for number in range(first, last + 1):
		text = lines[number - 1] if number - 1 < len(lines) else ""
		out.append(f"{number:>{gutter}} | {text}")
		if number == err.line:
			out.append(f"{' ' * gutter} | {' ' * (err.column - 1)}^")
	if err.expected:
		expected = ", ".join(sorted(describe_terminal(name) for name in err.expected))
		out.append(f"{' ' * gutter} = expected: {expected}")
	return "\n".join(out)


__all__ = ["ast", "ParseError", "parse_program", "render_parse_error"]
