# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
esper: a source-to-source compiler from the esper expression language to C++.

Pipeline:
  source text -> parser (lark grammar) -> AST -> emitter -> C++ text
                                               -> clang++ (optional)
"""

__version__ = "0.1.0"
