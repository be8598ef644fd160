# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
clang++ collaborator: feeds generated C++ on stdin and builds a binary.

The compiler's own stdout/stderr are inherited so its messages reach the
user unchanged. A compiler that exits before reading all of stdin closes the
pipe early; that is recorded on the result rather than raised, and the
process is always reaped.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

DEFAULT_CC = "clang++"


class ToolchainError(RuntimeError):
	"""The compiler executable could not be found or started."""


@dataclass
class ToolchainResult:
	returncode: int
	write_error: Optional[str] = None

	@property
	def ok(self) -> bool:
		return self.returncode == 0 and self.write_error is None


@dataclass
class ClangCXX:
	cc: str = DEFAULT_CC
	flags: List[str] = field(default_factory=list)

	def resolve(self) -> str:
		path = shutil.which(self.cc)
		if path is None:
			raise ToolchainError(f"C++ compiler '{self.cc}' not found")
		return path

	def command(self, output: Path, extra: Sequence[str] = ()) -> List[str]:
		return [self.resolve(), "-x", "c++", "-", "-o", str(output), *self.flags, *extra]

	def compile(self, source: str, output: Path) -> ToolchainResult:
		cmd = self.command(output)
		try:
			proc = subprocess.Popen(cmd, stdin=subprocess.PIPE)
		except OSError as exc:
			raise ToolchainError(f"failed to start '{cmd[0]}': {exc}") from exc
		write_error: Optional[str] = None
		try:
			assert proc.stdin is not None
			proc.stdin.write(source.encode("utf-8"))
			proc.stdin.close()
		except (BrokenPipeError, OSError) as exc:
			write_error = f"writing source to '{cmd[0]}' failed: {exc}"
		finally:
			if proc.stdin is not None and not proc.stdin.closed:
				try:
					proc.stdin.close()
				except OSError:
					pass
		returncode = proc.wait()
		return ToolchainResult(returncode=returncode, write_error=write_error)


__all__ = ["DEFAULT_CC", "ClangCXX", "ToolchainError", "ToolchainResult"]
