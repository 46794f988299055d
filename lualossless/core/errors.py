# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Error taxonomy for the lexer, parser and dialect caster.

Every error is a `ValueError` subclass so callers can treat them uniformly as
"this input is not acceptable", while still carrying a structured cause and a
byte offset for tooling.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
	from lualossless.dialects import Dialect, Feature
	from lualossless.lexer.tokens import Token
	from lualossless.parser.ast import Node


class LuaSyntaxError(ValueError):
	"""Base class: a message plus the byte offset (and line/column) it refers to."""

	code = "E-SYNTAX"

	def __init__(
		self,
		message: str,
		*,
		offset: int,
		line: Optional[int] = None,
		column: Optional[int] = None,
	) -> None:
		super().__init__(message)
		self.message = message
		self.offset = offset
		self.line = line
		self.column = column

	def __str__(self) -> str:
		if self.line is None:
			return f"{self.code}: {self.message} (at byte {self.offset})"
		return f"{self.code}: {self.message} (line {self.line}, column {self.column})"


class LexErrorKind(Enum):
	UNTERMINATED_STRING = "unterminated_string"
	INVALID_ESCAPE = "invalid_escape"
	UNTERMINATED_LONG_BRACKET = "unterminated_long_bracket"
	INVALID_NUMBER = "invalid_number"
	INVALID_CHARACTER = "invalid_character"


_LEX_MESSAGES = {
	LexErrorKind.UNTERMINATED_STRING: "unfinished string",
	LexErrorKind.INVALID_ESCAPE: "invalid escape sequence",
	LexErrorKind.UNTERMINATED_LONG_BRACKET: "unfinished long string or comment",
	LexErrorKind.INVALID_NUMBER: "malformed number",
	LexErrorKind.INVALID_CHARACTER: "unexpected symbol",
}


class LexError(LuaSyntaxError):
	"""A malformed token; `kind` names the cause, `offset` where it starts."""

	code = "E-LEX"

	def __init__(
		self,
		kind: LexErrorKind,
		*,
		offset: int,
		line: Optional[int] = None,
		column: Optional[int] = None,
		near: str = "",
	) -> None:
		message = _LEX_MESSAGES[kind]
		if near:
			message = f"{message} near '{near}'"
		super().__init__(message, offset=offset, line=line, column=column)
		self.kind = kind
		self.near = near


class ParseError(LuaSyntaxError):
	"""
	A grammar violation.

	`expected` describes the construct the parser needed, `found` is the token
	it got instead (the `EndOfFile` token when input ran out).
	"""

	code = "E-PARSE"

	def __init__(self, expected: str, found: "Token") -> None:
		near = found.text if found.text else "<eof>"
		span = found.span
		super().__init__(
			f"expected {expected} near '{near}'",
			offset=span.start if span is not None else 0,
			line=span.line if span is not None else None,
			column=span.column if span is not None else None,
		)
		self.expected = expected
		self.found = found


class CastError(LuaSyntaxError):
	"""Base class for failures while validating a tree against a dialect."""

	code = "E-CAST"


class UnsupportedConstruct(CastError):
	"""
	The tree uses `feature` (on `node`) which `dialect` cannot express.

	`required_dialect` is the first dialect that does support the feature, or
	None when no dialect does (unknown nodes).
	"""

	def __init__(
		self,
		*,
		node: "Node",
		feature: "Feature",
		dialect: "Dialect",
		required_dialect: "Optional[Dialect]",
	) -> None:
		span = node.span
		needs = f"; requires {required_dialect.label}" if required_dialect is not None else ""
		super().__init__(
			f"{feature.value} is not supported by {dialect.label}{needs}",
			offset=span.start if span is not None else 0,
			line=span.line if span is not None else None,
			column=span.column if span is not None else None,
		)
		self.node = node
		self.feature = feature
		self.dialect = dialect
		self.required_dialect = required_dialect


__all__ = [
	"CastError",
	"LexError",
	"LexErrorKind",
	"LuaSyntaxError",
	"ParseError",
	"UnsupportedConstruct",
]
