# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span representation shared by tokens, nodes and errors.

Offsets are byte offsets into the original buffer, half-open `[start, end)`.
Line and column are 1-based and describe the first and last position, as the
lexer reports them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Span:
	"""Byte range `[start, end)` plus best-effort line/column of both ends."""

	start: int
	end: int
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None

	def __len__(self) -> int:
		return self.end - self.start

	def __contains__(self, offset: object) -> bool:
		return isinstance(offset, int) and self.start <= offset < self.end

	def cover(self, other: "Span") -> "Span":
		"""Smallest span that covers both `self` and `other`."""
		first, last = (self, other) if self.start <= other.start else (other, self)
		tail = last if last.end >= first.end else first
		return Span(
			start=first.start,
			end=tail.end,
			line=first.line,
			column=first.column,
			end_line=tail.end_line,
			end_column=tail.end_column,
		)

	def slice(self, source: bytes) -> bytes:
		return source[self.start:self.end]


__all__ = ["Span"]
