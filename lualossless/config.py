# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Parser configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
	from lualossless.dialects import Dialect


@dataclass(frozen=True)
class ParserConfig:
	"""
	Knobs for a single `parse` call.

	`max_depth` bounds syntactic nesting (blocks, parenthesised expressions,
	call arguments, table constructors). The default matches the 200 C
	levels Lua itself allows. Every level costs a few Python frames, so the
	parser raises the interpreter recursion limit to fit `max_depth` before it
	starts; deeper input fails with a `ParseError`, never a `RecursionError`.

	`dialect`, when set, makes `parse` cast the finished tree to that dialect
	before returning it.
	"""

	max_depth: int = 200
	dialect: Optional["Dialect"] = None

	def __post_init__(self) -> None:
		if self.max_depth < 1:
			raise ValueError(f"max_depth must be positive, got {self.max_depth}")


DEFAULT_CONFIG = ParserConfig()


__all__ = ["DEFAULT_CONFIG", "ParserConfig"]
