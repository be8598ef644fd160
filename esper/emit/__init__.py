# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""esper → C++ emission."""

from .emitter import EmitConfig, EmitResult, emit_program
from .returns import is_value_producing

__all__ = ["EmitConfig", "EmitResult", "emit_program", "is_value_producing"]
