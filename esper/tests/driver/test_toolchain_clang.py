# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import stat
import sys
from pathlib import Path

import pytest

from esper.toolchain import ClangCXX, ToolchainError

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="uses /bin/sh stub compilers")


def _stub(path: Path, body: str) -> Path:
	path.write_text("#!/bin/sh\n" + body, encoding="utf-8")
	path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
	return path


def test_compiler_receives_source_on_stdin(tmp_path: Path) -> None:
	log = tmp_path / "argv.txt"
	captured = tmp_path / "stdin.cpp"
	cc = _stub(tmp_path / "fake-cxx", f'echo "$@" > "{log}"\ncat > "{captured}"\nexit 0\n')
	result = ClangCXX(cc=str(cc), flags=["-O2"]).compile("int main() {}\n", tmp_path / "a.out")
	assert result.returncode == 0
	assert result.write_error is None
	assert result.ok
	assert log.read_text().split() == ["-x", "c++", "-", "-o", str(tmp_path / "a.out"), "-O2"]
	assert captured.read_text() == "int main() {}\n"


def test_nonzero_exit_is_reported(tmp_path: Path) -> None:
	cc = _stub(tmp_path / "fail-cxx", "cat > /dev/null\nexit 2\n")
	result = ClangCXX(cc=str(cc)).compile("x", tmp_path / "a.out")
	assert result.returncode == 2
	assert not result.ok


def test_broken_pipe_is_recorded_not_raised(tmp_path: Path) -> None:
	cc = _stub(tmp_path / "early-exit-cxx", "exit 3\n")
	# Larger than any pipe buffer, so the write must observe the closed pipe.
	source = "// padding\n" * 200_000
	result = ClangCXX(cc=str(cc)).compile(source, tmp_path / "a.out")
	assert result.returncode == 3
	assert result.write_error is not None
	assert not result.ok


def test_missing_compiler_raises(tmp_path: Path) -> None:
	with pytest.raises(ToolchainError):
		ClangCXX(cc=str(tmp_path / "no-such-cxx")).compile("x", tmp_path / "a.out")
