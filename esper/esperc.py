# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
esperc: command-line driver.

Parses one esper source file, optionally lints it, emits C++ and either
writes the text (`--emit-cpp`) or pipes it into clang++ to build a binary.

With --json, prints `{"exit_code": n, "diagnostics": [...]}` on stdout;
otherwise prints human-readable diagnostics to stderr. Only `main` turns
failures into exit codes.
"""

from __future__ import annotations

import argparse
import json
import re
import sys
from pathlib import Path
from typing import List, Optional

from .config import EsperConfig, load_config_json
from .core import Diagnostic, Span
from .core.diagnostics import has_errors
from .emit import EmitConfig, emit_program
from .lint import lint_program
from .parser import ParseError, parse_program, render_parse_error
from .parser.parser import describe_terminal
from .toolchain import DEFAULT_CC, ClangCXX, ToolchainError

_NON_IDENT = re.compile(r"[^A-Za-z0-9_]")


def module_name_for(path: Path) -> str:
	"""File stem sanitised to a C++ identifier (`my-prog.es` → `my_prog`)."""
	name = _NON_IDENT.sub("_", path.stem)
	if not name or name[0].isdigit():
		name = f"_{name}"
	return name


def _parse_diagnostic(err: ParseError, file: str) -> Diagnostic:
	notes = []
	if err.expected:
		notes.append("expected: " + ", ".join(sorted(describe_terminal(name) for name in err.expected)))
	return Diagnostic(
		message=f"parse error: {err}",
		code="E-PARSE",
		phase="parser",
		severity="error",
		span=Span(file=file, line=err.line, column=err.column),
		notes=notes,
	)


def _error(message: str, phase: str, file: Optional[str], code: Optional[str] = None) -> Diagnostic:
	return Diagnostic(message=message, code=code, phase=phase, severity="error", span=Span(file=file))


def _report(
	args: argparse.Namespace,
	diagnostics: List[Diagnostic],
	exit_code: int,
	already_printed: bool = False,
) -> int:
	if args.json:
		payload = {"exit_code": exit_code, "diagnostics": [d.to_json() for d in diagnostics]}
		print(json.dumps(payload))
	elif not already_printed:
		for diag in diagnostics:
			print(diag.format(), file=sys.stderr)
	return exit_code


def _pick(*values, default):
	for value in values:
		if value is not None:
			return value
	return default


def _build_arg_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="esperc", description="Compile esper source to C++")
	parser.add_argument("source", type=Path, help="Path to the esper source file")
	parser.add_argument("-o", "--output", type=Path, help="Output path (default: <stem>.cpp or <stem>)")
	parser.add_argument("--emit-cpp", action="store_true", help="Write generated C++ instead of building a binary")
	parser.add_argument(
		"--no-prelude",
		dest="use_prelude",
		action="store_const",
		const=False,
		default=None,
		help="Do not prepend the esper C++ prelude",
	)
	parser.add_argument(
		"--library",
		dest="entry_point",
		action="store_const",
		const=False,
		default=None,
		help="Omit the generated int main (library mode)",
	)
	parser.add_argument("--entry", help="Function the generated main forwards argv to (default: main)")
	parser.add_argument("--cc", help=f"C++ compiler executable (default: {DEFAULT_CC})")
	parser.add_argument(
		"-X",
		dest="cc_flags",
		action="append",
		default=[],
		metavar="FLAG",
		help="Extra flag passed to the C++ compiler, e.g. -X=-O2 (repeatable)",
	)
	parser.add_argument("--config", type=Path, help="Path to an esper-config JSON file")
	parser.add_argument("--lint", action="store_true", help="Report lint warnings")
	parser.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics as JSON (phase/code/message/severity/file/line/column)",
	)
	return parser


def main(argv: list[str] | None = None) -> int:
	args = _build_arg_parser().parse_args(argv)
	source_path: Path = args.source
	file = str(source_path)

	config = EsperConfig()
	if args.config is not None:
		try:
			config = load_config_json(args.config)
		except (OSError, ValueError) as exc:
			return _report(args, [_error(f"{args.config}: {exc}", "config", str(args.config), "E-CONFIG")], 1)

	entry = _pick(args.entry, config.entry, default="main")
	if not entry.isidentifier():
		return _report(args, [_error(f"entry '{entry}' is not an identifier", "config", file, "E-CONFIG")], 1)

	try:
		source = source_path.read_text(encoding="utf-8")
	except (OSError, UnicodeDecodeError) as exc:
		return _report(args, [_error(f"cannot read source: {exc}", "driver", file, "E-IO")], 1)

	try:
		program = parse_program(source)
	except ParseError as err:
		if not args.json:
			print(render_parse_error(source, err, file), file=sys.stderr)
		return _report(args, [_parse_diagnostic(err, file)], 1, already_printed=True)

	diagnostics: List[Diagnostic] = []
	if args.lint:
		diagnostics.extend(lint_program(program, file))

	emit_config = EmitConfig(
		module_name=module_name_for(source_path),
		use_prelude=_pick(args.use_prelude, config.use_prelude, default=True),
		entry_point=_pick(args.entry_point, config.entry_point, default=True),
		entry=entry,
		file=file,
	)
	result = emit_program(program, emit_config)
	diagnostics.extend(result.diagnostics)
	if has_errors(diagnostics):
		return _report(args, diagnostics, 1)

	output = args.output or source_path.with_suffix(".cpp" if args.emit_cpp else "")
	if output.resolve() == source_path.resolve():
		diagnostics.append(_error(f"output {output} would overwrite the source file", "driver", file, "E-IO"))
		return _report(args, diagnostics, 1)

	if args.emit_cpp:
		try:
			output.parent.mkdir(parents=True, exist_ok=True)
			output.write_text(result.text, encoding="utf-8")
		except OSError as exc:
			diagnostics.append(_error(f"cannot write {output}: {exc}", "driver", file, "E-IO"))
			return _report(args, diagnostics, 1)
		return _report(args, diagnostics, 0)

	toolchain = ClangCXX(cc=_pick(args.cc, config.cc, default=DEFAULT_CC), flags=[*config.cc_flags, *args.cc_flags])
	try:
		output.parent.mkdir(parents=True, exist_ok=True)
		built = toolchain.compile(result.text, output)
	except ToolchainError as exc:
		diagnostics.append(_error(str(exc), "toolchain", file, "E-TOOLCHAIN"))
		return _report(args, diagnostics, 1)
	if built.write_error is not None:
		diagnostics.append(_error(built.write_error, "toolchain", file, "E-TOOLCHAIN"))
	if built.returncode != 0:
		diagnostics.append(_error(f"{toolchain.cc} exited with status {built.returncode}", "toolchain", file, "E-TOOLCHAIN"))
	return _report(args, diagnostics, 1 if has_errors(diagnostics) else 0)


if __name__ == "__main__":
	raise SystemExit(main())
