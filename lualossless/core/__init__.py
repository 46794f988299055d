"""Shared primitives: source spans and the error taxonomy."""

from .errors import (
	CastError,
	LexError,
	LexErrorKind,
	LuaSyntaxError,
	ParseError,
	UnsupportedConstruct,
)
from .span import Span

__all__ = [
	"CastError",
	"LexError",
	"LexErrorKind",
	"LuaSyntaxError",
	"ParseError",
	"Span",
	"UnsupportedConstruct",
]
